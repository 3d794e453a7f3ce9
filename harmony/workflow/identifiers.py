"""
Request uid allocation.

Uids are long random strings over ``[0-9a-z]``. A collision is practically
impossible, but every candidate is still checked against the live requests
and allocation gives up after a bounded number of attempts.
"""

import secrets
import string
from typing import Awaitable, Callable, Optional

from harmony.core.config import settings
from harmony.core.errors import AllocationExhausted
from harmony.core.logging import get_logger

logger = get_logger(__name__)

UID_ALPHABET = string.digits + string.ascii_lowercase

ExistsPredicate = Callable[[str], Awaitable[bool]]


def generate_uid(length: Optional[int] = None) -> str:
    length = length or settings.request_uid_length
    return "".join(secrets.choice(UID_ALPHABET) for _ in range(length))


async def allocate_uid(
    exists: ExistsPredicate,
    max_attempts: Optional[int] = None,
    generator: Callable[[], str] = generate_uid,
) -> str:
    """Return a uid for which ``exists`` is false, or raise AllocationExhausted"""
    max_attempts = max_attempts or settings.request_uid_max_attempts

    for attempt in range(1, max_attempts + 1):
        candidate = generator()
        if not await exists(candidate):
            return candidate
        logger.warning("request.uid_collision", attempt=attempt, max_attempts=max_attempts)

    logger.error("request.uid_exhausted", attempts=max_attempts)
    raise AllocationExhausted(max_attempts)
