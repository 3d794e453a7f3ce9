from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from harmony.models.base import Base

if TYPE_CHECKING:
    from harmony.models.team import Team


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    user_call_link: Mapped[Optional[str]] = mapped_column(String(1020), nullable=True)
    profile_url: Mapped[str] = mapped_column(String(765), nullable=False, default="")
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    owned_teams: Mapped[List["Team"]] = relationship("Team", back_populates="owner")
