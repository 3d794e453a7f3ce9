"""
Creates the relationship an accepted request stands for.

Everything is read from the stored request, never from the resolving caller.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from harmony.core.errors import TeamNotFound
from harmony.core.logging import get_logger
from harmony.models.request import WorkflowRequest
from harmony.services.crud import TeamCRUD, UserLinkCRUD
from harmony.workflow.kinds import AddFriendPayload, AddToTeamPayload

logger = get_logger(__name__)


async def materialize(db: AsyncSession, request: WorkflowRequest) -> None:
    payload = request.payload

    if isinstance(payload, AddFriendPayload):
        link = await UserLinkCRUD.create(db, request.sender_id, request.receiver_id)
        logger.info(
            "link.friend_created",
            link_id=link.id,
            user_id1=link.user_id1,
            user_id2=link.user_id2,
        )
        return

    if isinstance(payload, AddToTeamPayload):
        # the team may have been renamed or deleted since the invitation
        team = await TeamCRUD.find(db, payload.team_uid, payload.team_name)
        if team is None:
            raise TeamNotFound(details={"teamUid": payload.team_uid, "teamName": payload.team_name})
        if TeamCRUD.is_owner(team, request.receiver_id) or await TeamCRUD.is_member(
            db, team, request.receiver_id
        ):
            logger.info("link.team_exists", team_id=team.id, user_id=request.receiver_id)
            return
        link = await TeamCRUD.add_member(db, team, request.receiver_id)
        logger.info("link.team_created", link_id=link.id, team_id=team.id, user_id=request.receiver_id)
        return

    raise TypeError(f"Unsupported payload {type(payload).__name__}")
