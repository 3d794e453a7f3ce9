from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from harmony.models.base import Base
from harmony.workflow.kinds import OperationKind, RequestPayload, RequestStatus, parse_payload

if TYPE_CHECKING:
    from harmony.models.user import User


class WorkflowRequest(Base):
    """
    One row per friend request or team invitation.

    ``status`` and ``deleted`` are written together by a single conditional
    update when the request is resolved, so ``deleted`` is true exactly when
    the status is terminal.
    """

    __tablename__ = "requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(255), nullable=False)
    sender_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    receiver_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    operation: Mapped[str] = mapped_column(String(32), nullable=False)
    data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=RequestStatus.PENDING.value)
    time_created: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    time_resolved: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_requests_uid_deleted", "uid", "deleted"),
        Index("idx_requests_receiver", "receiver_id", "operation", "deleted"),
    )

    # Relationships
    sender: Mapped["User"] = relationship("User", foreign_keys=[sender_id])
    receiver: Mapped["User"] = relationship("User", foreign_keys=[receiver_id])

    @property
    def kind(self) -> OperationKind:
        return OperationKind(self.operation)

    @property
    def state(self) -> RequestStatus:
        return RequestStatus(self.status)

    @property
    def closed(self) -> bool:
        return self.state.is_terminal

    @property
    def payload(self) -> RequestPayload:
        return parse_payload(self.kind, self.data)
