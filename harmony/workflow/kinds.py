"""
Operation kinds, request states and the typed payload carried by each kind.

A stored request keeps its payload as JSON; ``parse_payload`` turns it back
into the model for its operation so nothing downstream re-parses raw data.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OperationKind(str, Enum):
    ADD_FRIEND = "addFriend"
    ADD_TO_TEAM = "addToTeam"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class AddFriendPayload(BaseModel):
    """Friend requests carry no data."""

    model_config = ConfigDict(frozen=True)

    operation: OperationKind = Field(default=OperationKind.ADD_FRIEND, exclude=True)


class AddToTeamPayload(BaseModel):
    """Team reference as the inviter named it: uid and name together."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    operation: OperationKind = Field(default=OperationKind.ADD_TO_TEAM, exclude=True)
    team_uid: str = Field(..., alias="teamUid", min_length=1)
    team_name: str = Field(..., alias="teamName", min_length=1)

    def same_team(self, other: "AddToTeamPayload") -> bool:
        return self.team_uid == other.team_uid and self.team_name == other.team_name


RequestPayload = Union[AddFriendPayload, AddToTeamPayload]


def dump_payload(payload: RequestPayload) -> Optional[Dict[str, Any]]:
    """JSON form stored in the ``data`` column"""
    if isinstance(payload, AddFriendPayload):
        return None
    return payload.model_dump(by_alias=True)


def parse_payload(operation: OperationKind, data: Optional[Dict[str, Any]]) -> RequestPayload:
    if operation is OperationKind.ADD_FRIEND:
        return AddFriendPayload()
    return AddToTeamPayload.model_validate(data or {})
