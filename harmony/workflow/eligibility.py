"""
Pre-creation checks for new requests.

Team invitations are compared on the team reference they carry (uid and
name), so duplicates are detected here rather than by a table constraint.
Friend requests have no duplicate check.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from harmony.core.errors import AlreadyInvited, AlreadyMember, RequestRejected, TeamNotFound
from harmony.models.team import Team
from harmony.services.crud import TeamCRUD
from harmony.workflow.kinds import AddToTeamPayload, OperationKind, RequestPayload
from harmony.workflow.store import RequestStore


@dataclass(frozen=True)
class Eligibility:
    eligible: bool
    reason: Optional[str] = None
    team: Optional[Team] = None

    def raise_for_reason(self) -> None:
        if self.eligible:
            return
        error = _REASONS.get(self.reason, RequestRejected)
        raise error()


_REASONS = {
    AlreadyInvited.code: AlreadyInvited,
    AlreadyMember.code: AlreadyMember,
}


async def check_eligible(
    db: AsyncSession,
    operation: OperationKind,
    target_id: str,
    payload: RequestPayload,
) -> Eligibility:
    if operation is OperationKind.ADD_FRIEND:
        return Eligibility(eligible=True)
    return await _check_team_invite(db, target_id, payload)


async def _check_team_invite(
    db: AsyncSession, target_id: str, payload: AddToTeamPayload
) -> Eligibility:
    team = await TeamCRUD.find(db, payload.team_uid, payload.team_name)
    if team is None:
        raise TeamNotFound(details={"teamUid": payload.team_uid, "teamName": payload.team_name})

    pending = await RequestStore.find_pending_for(db, target_id, OperationKind.ADD_TO_TEAM)
    if any(payload.same_team(request.payload) for request in pending):
        return Eligibility(eligible=False, reason=AlreadyInvited.code, team=team)

    # membership and ownership report the same reason
    if TeamCRUD.is_owner(team, target_id) or await TeamCRUD.is_member(db, team, target_id):
        return Eligibility(eligible=False, reason=AlreadyMember.code, team=team)

    return Eligibility(eligible=True, team=team)
