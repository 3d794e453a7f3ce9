from harmony.models.base import Base
from harmony.models.link import UserLink
from harmony.models.request import WorkflowRequest
from harmony.models.team import Team, TeamLink
from harmony.models.user import User

__all__ = [
    "Base",
    "User",
    "Team",
    "TeamLink",
    "UserLink",
    "WorkflowRequest",
]
