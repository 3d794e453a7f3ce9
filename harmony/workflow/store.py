"""
Request store: the only place that issues statements against ``requests``.

The store never commits; the workflow engine owns the transaction. Driver
and constraint errors are logged here and re-raised as PersistenceFailure so
storage details never travel further up.
"""

import functools
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from harmony.core.errors import AlreadyResolved, PersistenceFailure, RequestNotFound
from harmony.core.logging import get_logger
from harmony.models.request import WorkflowRequest
from harmony.workflow.kinds import OperationKind, RequestStatus

logger = get_logger(__name__)


def guard_persistence(func):
    """Translate SQLAlchemy errors raised by ``func`` into PersistenceFailure"""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error(
                "db.failure",
                operation=func.__qualname__,
                error=str(exc),
                exc_info=True,
            )
            raise PersistenceFailure(details={"operation": func.__qualname__}) from exc

    return wrapper


class RequestStore:
    """CRUD operations for WorkflowRequest"""

    @staticmethod
    @guard_persistence
    async def insert(db: AsyncSession, record: WorkflowRequest) -> str:
        db.add(record)
        await db.flush()
        return record.uid

    @staticmethod
    @guard_persistence
    async def find_by_uid(db: AsyncSession, uid: str) -> Optional[WorkflowRequest]:
        """Live request with this uid, else the most recent resolved one"""
        result = await db.execute(
            select(WorkflowRequest)
            .where(WorkflowRequest.uid == uid)
            .order_by(WorkflowRequest.deleted.asc(), WorkflowRequest.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    @guard_persistence
    async def uid_exists(db: AsyncSession, uid: str) -> bool:
        result = await db.execute(
            select(WorkflowRequest.id)
            .where(WorkflowRequest.uid == uid, WorkflowRequest.deleted.is_(False))
            .limit(1)
        )
        return result.first() is not None

    @staticmethod
    @guard_persistence
    async def find_pending_for(
        db: AsyncSession, receiver_id: str, operation: OperationKind
    ) -> List[WorkflowRequest]:
        """Open requests addressed to ``receiver_id``, oldest first, senders loaded"""
        result = await db.execute(
            select(WorkflowRequest)
            .options(joinedload(WorkflowRequest.sender))
            .where(
                WorkflowRequest.receiver_id == receiver_id,
                WorkflowRequest.operation == operation.value,
                WorkflowRequest.status == RequestStatus.PENDING.value,
                WorkflowRequest.deleted.is_(False),
            )
            .order_by(WorkflowRequest.time_created.asc(), WorkflowRequest.id.asc())
        )
        return list(result.scalars().all())

    @staticmethod
    @guard_persistence
    async def mark_terminal(db: AsyncSession, uid: str, status: RequestStatus) -> None:
        """
        Close a pending request.

        The update only matches a row that is still open; zero affected rows
        means another caller already closed it (or the uid is unknown).
        """
        if not status.is_terminal:
            raise ValueError(f"{status.value} is not a terminal status")

        result = await db.execute(
            update(WorkflowRequest)
            .where(WorkflowRequest.uid == uid, WorkflowRequest.deleted.is_(False))
            .values(status=status.value, deleted=True, time_resolved=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            return

        known = await db.execute(
            select(WorkflowRequest.id).where(WorkflowRequest.uid == uid).limit(1)
        )
        if known.first() is None:
            raise RequestNotFound(details={"uid": uid})
        raise AlreadyResolved(details={"uid": uid})
