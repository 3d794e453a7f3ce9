from typing import List

from fastapi import APIRouter, status
from pydantic import BaseModel, ConfigDict, Field

from harmony.core.deps import CurrentUserDep, SessionDep
from harmony.core.errors import AuthenticationError, TeamNotFound
from harmony.core.logging import get_logger
from harmony.services.crud import TeamCRUD, UserCRUD

router = APIRouter(prefix="/teams", tags=["teams"])
logger = get_logger(__name__)

# ============ Schemas ============

class TeamCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_name: str = Field(..., alias="teamName", min_length=1, max_length=255)


class TeamSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    uid: str
    team_call_link: str = Field(..., alias="teamCallLink")
    owned: bool


class TeamCreateResponse(BaseModel):
    success: bool = True
    team: TeamSummary


class JoinedTeamsResponse(BaseModel):
    success: bool = True
    owned: List[TeamSummary]
    joined: List[TeamSummary]


class TeamMember(BaseModel):
    username: str
    email: str
    owner: bool


class TeamMembersResponse(BaseModel):
    success: bool = True
    data: List[TeamMember]


def _summary(team, owned: bool) -> TeamSummary:
    return TeamSummary(
        name=team.name,
        uid=team.uid,
        team_call_link=team.team_call_link or "",
        owned=owned,
    )

# ============ Endpoints ============

@router.post("", response_model=TeamCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_team(data: TeamCreateRequest, db: SessionDep, user_id: CurrentUserDep):
    """
    Create a team owned by the current user.
    The owner also gets a membership link.
    """
    owner = await UserCRUD.get_by_id(db, user_id)
    if owner is None:
        raise AuthenticationError("Unknown user")

    team = await TeamCRUD.create(db, owner, data.team_name)
    await db.commit()

    logger.info("team.created", team_id=team.id, owner_id=owner.id)
    return TeamCreateResponse(team=_summary(team, owned=True))


@router.get("", response_model=JoinedTeamsResponse)
async def list_teams(db: SessionDep, user_id: CurrentUserDep):
    teams = await TeamCRUD.find_joined(db, user_id)
    return JoinedTeamsResponse(
        owned=[_summary(team, owned=True) for team in teams["owned"]],
        joined=[_summary(team, owned=False) for team in teams["joined"]],
    )


@router.get("/{team_uid}/members", response_model=TeamMembersResponse)
async def list_team_members(team_uid: str, db: SessionDep, user_id: CurrentUserDep):
    team = await TeamCRUD.find_joined_by_uid(db, user_id, team_uid)
    if team is None:
        raise TeamNotFound(details={"teamUid": team_uid})

    members = await TeamCRUD.find_members(db, team)
    return TeamMembersResponse(data=[TeamMember(**member) for member in members])
