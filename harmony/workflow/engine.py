"""
Request workflow engine.

Requests move from ``pending`` to ``accepted`` or ``declined`` exactly once.
Resolution claims the row with a conditional update first and materializes
the relationship in the same transaction, so a concurrent second resolve
loses the claim and never creates a link.
"""

from contextlib import asynccontextmanager
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from harmony.core.errors import (
    AuthenticationError,
    InvalidTarget,
    PermissionDenied,
    PersistenceFailure,
    RequestNotFound,
    TargetNotFound,
)
from harmony.core.logging import LatencyLogger, bind_request_uid, get_logger
from harmony.models.request import WorkflowRequest
from harmony.models.user import User
from harmony.services.crud import UserCRUD
from harmony.workflow.eligibility import check_eligible
from harmony.workflow.identifiers import allocate_uid
from harmony.workflow.kinds import (
    AddFriendPayload,
    AddToTeamPayload,
    OperationKind,
    RequestPayload,
    RequestStatus,
    dump_payload,
)
from harmony.workflow.materializer import materialize
from harmony.workflow.store import RequestStore

logger = get_logger(__name__)


class WorkflowEngine:
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _unit_of_work(self, name: str):
        """Commit on success, roll back on any error"""
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("db.failure", operation=name, error=str(exc), exc_info=True)
            raise PersistenceFailure(details={"operation": name}) from exc
        except Exception:
            await self.db.rollback()
            raise

    # ============ Creation ============

    async def create_friend_request(self, sender_id: str, target_email: str) -> str:
        return await self._create(sender_id, target_email, AddFriendPayload())

    async def create_team_invite(
        self, sender_id: str, target_email: str, team_uid: str, team_name: str
    ) -> str:
        payload = AddToTeamPayload(team_uid=team_uid, team_name=team_name)
        return await self._create(sender_id, target_email, payload)

    async def _create(self, sender_id: str, target_email: str, payload: RequestPayload) -> str:
        operation = payload.operation

        async with self._unit_of_work("request.create"):
            sender = await self._require_user(sender_id)
            target = await UserCRUD.get_by_email(self.db, target_email)
            if target is None:
                raise TargetNotFound(details={"targetEmail": target_email})
            if target.id == sender.id:
                raise InvalidTarget()

            eligibility = await check_eligible(self.db, operation, target.id, payload)
            eligibility.raise_for_reason()

            uid = await allocate_uid(lambda candidate: RequestStore.uid_exists(self.db, candidate))
            bind_request_uid(uid)
            await RequestStore.insert(
                self.db,
                WorkflowRequest(
                    uid=uid,
                    sender_id=sender.id,
                    receiver_id=target.id,
                    operation=operation.value,
                    data=dump_payload(payload),
                    status=RequestStatus.PENDING.value,
                    deleted=False,
                ),
            )

        logger.info(
            "request.created",
            operation=operation.value,
            sender_id=sender.id,
            receiver_id=target.id,
        )
        return uid

    # ============ Listing ============

    async def list_incoming(self, receiver_id: str, operation: OperationKind) -> List[WorkflowRequest]:
        return await RequestStore.find_pending_for(self.db, receiver_id, operation)

    # ============ Resolution ============

    async def resolve(
        self,
        actor_id: str,
        uid: str,
        accepted: bool,
        operation: OperationKind,
    ) -> RequestStatus:
        """
        Accept or decline a pending request addressed to ``actor_id``.

        Raises RequestNotFound when the uid is unknown or belongs to another
        operation kind, AlreadyResolved when it is closed already.
        """
        status = RequestStatus.ACCEPTED if accepted else RequestStatus.DECLINED
        bind_request_uid(uid)

        with LatencyLogger("request.resolve", logger):
            async with self._unit_of_work("request.resolve"):
                request = await RequestStore.find_by_uid(self.db, uid)
                if request is None or request.kind is not operation:
                    raise RequestNotFound(details={"uid": uid})
                if request.receiver_id != actor_id:
                    raise PermissionDenied("Only the receiver can resolve this request")

                await RequestStore.mark_terminal(self.db, uid, status)
                if accepted:
                    await materialize(self.db, request)

        logger.info(
            "request.resolved",
            operation=operation.value,
            status=status.value,
            receiver_id=actor_id,
        )
        return status

    async def _require_user(self, user_id: str) -> User:
        user = await UserCRUD.get_by_id(self.db, user_id)
        if user is None:
            raise AuthenticationError("Unknown user")
        return user
