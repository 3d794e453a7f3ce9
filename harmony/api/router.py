"""
API Router
"""

from fastapi import APIRouter, Depends

from harmony.api.request.friend import router as friend_request_router
from harmony.api.request.team import router as team_invite_router
from harmony.api.team.teams import router as teams_router
from harmony.api.user.friends import router as friends_router
from harmony.core.token import security_scheme

api_router = APIRouter()

# All routes need a bearer token; the actor id comes from its sub claim
api_router.include_router(friend_request_router, dependencies=[Depends(security_scheme)])
api_router.include_router(team_invite_router, dependencies=[Depends(security_scheme)])
api_router.include_router(teams_router, dependencies=[Depends(security_scheme)])
api_router.include_router(friends_router, dependencies=[Depends(security_scheme)])
