from typing import List

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from harmony.core.deps import CurrentUserDep, SessionDep
from harmony.core.errors import TargetNotFound
from harmony.core.logging import get_logger
from harmony.services.crud import UserCRUD, UserLinkCRUD

router = APIRouter(prefix="/friends", tags=["friends"])
logger = get_logger(__name__)

# ============ Schemas ============

class FriendData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    email: str
    profile_url: str = Field("", alias="profileUrl")


class FriendsResponse(BaseModel):
    success: bool = True
    received: List[FriendData]
    sent: List[FriendData]


class RemoveFriendResponse(BaseModel):
    success: bool


def _friend(user) -> FriendData:
    return FriendData(username=user.username, email=user.email, profile_url=user.profile_url or "")

# ============ Endpoints ============

@router.get("", response_model=FriendsResponse)
async def list_friends(db: SessionDep, user_id: CurrentUserDep):
    friends = await UserLinkCRUD.find_friends(db, user_id)
    return FriendsResponse(
        received=[_friend(user) for user in friends["received"]],
        sent=[_friend(user) for user in friends["sent"]],
    )


@router.delete("/{email}", response_model=RemoveFriendResponse)
async def remove_friend(email: str, db: SessionDep, user_id: CurrentUserDep):
    """Soft-delete the friend link with the user registered under ``email``."""
    target = await UserCRUD.get_by_email(db, email)
    if target is None:
        raise TargetNotFound(details={"targetEmail": email})

    if not await UserLinkCRUD.are_friends(db, user_id, target.id):
        return RemoveFriendResponse(success=False)

    removed = await UserLinkCRUD.delete(db, user_id, target.id)
    await db.commit()

    logger.info("link.friend_removed", user_id=user_id, friend_id=target.id)
    return RemoveFriendResponse(success=removed)
