from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from harmony.models.base import Base

if TYPE_CHECKING:
    from harmony.models.user import User


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    uid: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    team_call_link: Mapped[Optional[str]] = mapped_column(String(1020), nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_teams_uid_name", "uid", "name"),
        Index("idx_teams_owner", "owner_id", "deleted"),
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="owned_teams")
    links: Mapped[List["TeamLink"]] = relationship("TeamLink", back_populates="team")


class TeamLink(Base):
    """Team membership. Owners also get a link when the team is created."""

    __tablename__ = "teams_links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False)
    add_user: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_teams_links_team_user", "team_id", "add_user", "deleted"),
    )

    team: Mapped["Team"] = relationship("Team", back_populates="links")
    user: Mapped["User"] = relationship("User")
