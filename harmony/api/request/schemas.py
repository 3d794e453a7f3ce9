"""
Request/response bodies shared by the friend and team request routes.

Field names on the wire are camelCase.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateFriendRequestPayload(WireModel):
    target_email: EmailStr = Field(..., alias="targetEmail")


class CreateTeamInvitePayload(WireModel):
    target_email: EmailStr = Field(..., alias="targetEmail")
    team_uid: str = Field(..., alias="teamUid", min_length=1, max_length=255)
    team_name: str = Field(..., alias="teamName", min_length=1, max_length=255)


class ResolveRequestPayload(WireModel):
    request_uid: str = Field(..., alias="requestUid", min_length=1, max_length=255)
    accepted: bool


class CreatedResponse(WireModel):
    success: bool = True
    uid: str


class ResolvedResponse(WireModel):
    success: bool = True
    status: str


class TeamReference(WireModel):
    team_uid: str = Field(..., alias="teamUid")
    team_name: str = Field(..., alias="teamName")


class IncomingFriendRequest(WireModel):
    uid: str
    time_created: datetime = Field(..., alias="timeCreated")
    username: str
    email: str
    profile_url: str = Field("", alias="profileUrl")


class IncomingTeamInvite(WireModel):
    uid: str
    time_created: datetime = Field(..., alias="timeCreated")
    username: str
    email: str
    team: TeamReference


class IncomingFriendRequestList(WireModel):
    success: bool = True
    data: List[IncomingFriendRequest]


class IncomingTeamInviteList(WireModel):
    success: bool = True
    data: List[IncomingTeamInvite]
