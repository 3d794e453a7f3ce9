"""
Actor resolution.

Tokens are issued by the external auth service. Harmony only reads the
acting user's id from the ``sub`` claim and binds it into the logging
context for the rest of the HTTP request.
"""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from harmony.core.config import settings
from harmony.core.errors import AuthenticationError
from harmony.core.logging import bind_actor

# HTTP Bearer scheme (Only shows a token input box in Swagger)
security_scheme = HTTPBearer()


def read_actor_id(token: str) -> Optional[str]:
    """User id carried by a valid, unexpired token"""
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    return claims.get("sub") or None


async def get_current_user_id(auth: Annotated[HTTPAuthorizationCredentials, Depends(security_scheme)]) -> str:
    user_id = read_actor_id(auth.credentials)
    if not user_id:
        raise AuthenticationError("Could not validate credentials")
    bind_actor(user_id)
    return user_id


CurrentUserDep = Annotated[str, Depends(get_current_user_id)]
