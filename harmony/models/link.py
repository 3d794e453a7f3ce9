from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from harmony.models.base import Base


class UserLink(Base):
    """Undirected friend link. user_id1 is the original requester."""

    __tablename__ = "users_links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id1: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    user_id2: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("user_id1 <> user_id2", name="chk_users_links_not_self"),
        Index("idx_users_links_user1", "user_id1", "deleted"),
        Index("idx_users_links_user2", "user_id2", "deleted"),
    )
