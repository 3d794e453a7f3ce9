from fastapi import APIRouter, status

from harmony.api.request.schemas import (
    CreatedResponse,
    CreateFriendRequestPayload,
    IncomingFriendRequest,
    IncomingFriendRequestList,
    ResolvedResponse,
    ResolveRequestPayload,
)
from harmony.core.deps import CurrentUserDep, EngineDep
from harmony.workflow.kinds import OperationKind

router = APIRouter(prefix="/requests/friend", tags=["friend requests"])


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_friend_request(
    data: CreateFriendRequestPayload,
    engine: EngineDep,
    user_id: CurrentUserDep,
):
    """Send a friend request to the user registered under ``targetEmail``."""
    uid = await engine.create_friend_request(user_id, data.target_email)
    return CreatedResponse(uid=uid)


@router.get("/incoming", response_model=IncomingFriendRequestList)
async def list_incoming_friend_requests(engine: EngineDep, user_id: CurrentUserDep):
    requests = await engine.list_incoming(user_id, OperationKind.ADD_FRIEND)
    return IncomingFriendRequestList(
        data=[
            IncomingFriendRequest(
                uid=request.uid,
                time_created=request.time_created,
                username=request.sender.username,
                email=request.sender.email,
                profile_url=request.sender.profile_url or "",
            )
            for request in requests
        ]
    )


@router.post("/resolve", response_model=ResolvedResponse)
async def resolve_friend_request(
    data: ResolveRequestPayload,
    engine: EngineDep,
    user_id: CurrentUserDep,
):
    """Accept or decline an incoming friend request."""
    result = await engine.resolve(user_id, data.request_uid, data.accepted, OperationKind.ADD_FRIEND)
    return ResolvedResponse(status=result.value)
