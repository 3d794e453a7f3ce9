from fastapi import APIRouter, status

from harmony.api.request.schemas import (
    CreatedResponse,
    CreateTeamInvitePayload,
    IncomingTeamInvite,
    IncomingTeamInviteList,
    ResolvedResponse,
    ResolveRequestPayload,
    TeamReference,
)
from harmony.core.deps import CurrentUserDep, EngineDep
from harmony.workflow.kinds import OperationKind

router = APIRouter(prefix="/requests/team", tags=["team invites"])


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_team_invite(
    data: CreateTeamInvitePayload,
    engine: EngineDep,
    user_id: CurrentUserDep,
):
    """
    Invite the user registered under ``targetEmail`` to a team.
    The team is referenced by uid and name together.
    """
    uid = await engine.create_team_invite(user_id, data.target_email, data.team_uid, data.team_name)
    return CreatedResponse(uid=uid)


@router.get("/incoming", response_model=IncomingTeamInviteList)
async def list_incoming_team_invites(engine: EngineDep, user_id: CurrentUserDep):
    invites = await engine.list_incoming(user_id, OperationKind.ADD_TO_TEAM)
    data = []
    for invite in invites:
        payload = invite.payload
        data.append(
            IncomingTeamInvite(
                uid=invite.uid,
                time_created=invite.time_created,
                username=invite.sender.username,
                email=invite.sender.email,
                team=TeamReference(team_uid=payload.team_uid, team_name=payload.team_name),
            )
        )
    return IncomingTeamInviteList(data=data)


@router.post("/resolve", response_model=ResolvedResponse)
async def resolve_team_invite(
    data: ResolveRequestPayload,
    engine: EngineDep,
    user_id: CurrentUserDep,
):
    """Accept or decline an incoming team invitation."""
    result = await engine.resolve(user_id, data.request_uid, data.accepted, OperationKind.ADD_TO_TEAM)
    return ResolvedResponse(status=result.value)
