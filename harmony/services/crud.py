"""
CRUD service layer for users, teams and the two link tables.

None of these helpers commit: callers decide the transaction boundary so a
link insert can share a transaction with the request that produced it.
"""

from typing import Dict, List, Optional
from uuid import uuid4

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from harmony.models.link import UserLink
from harmony.models.team import Team, TeamLink
from harmony.models.user import User


# ============ User CRUD ============

class UserCRUD:
    """Lookups over users; deleted users are invisible"""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
        result = await db.execute(
            select(User).where(User.id == user_id, User.deleted.is_(False))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(
            select(User).where(User.email == email, User.deleted.is_(False))
        )
        return result.scalar_one_or_none()


# ============ Team CRUD ============

def format_call_link(team_name: str, uid: str) -> str:
    formatted = team_name.lower().replace(" ", "-")
    return f"{formatted}/{uid}"


class TeamCRUD:
    """CRUD operations for Team and TeamLink"""

    @staticmethod
    async def create(db: AsyncSession, owner: User, team_name: str) -> Team:
        """Create a team and the owner's membership link"""
        uid = uuid4().hex
        team = Team(
            id=str(uuid4()),
            uid=uid,
            name=team_name,
            owner_id=owner.id,
            team_call_link=format_call_link(team_name, uid),
        )
        db.add(team)
        await db.flush()
        db.add(TeamLink(team_id=team.id, add_user=owner.id))
        await db.flush()
        return team

    @staticmethod
    async def find(db: AsyncSession, team_uid: str, team_name: str) -> Optional[Team]:
        """Resolve a team from the uid and name pair an invitation carries"""
        result = await db.execute(
            select(Team)
            .where(Team.uid == team_uid, Team.name == team_name, Team.deleted.is_(False))
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def find_member_link(db: AsyncSession, team: Team, user_id: str) -> Optional[TeamLink]:
        result = await db.execute(
            select(TeamLink)
            .where(
                TeamLink.team_id == team.id,
                TeamLink.add_user == user_id,
                TeamLink.deleted.is_(False),
            )
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def is_member(db: AsyncSession, team: Team, user_id: str) -> bool:
        return await TeamCRUD.find_member_link(db, team, user_id) is not None

    @staticmethod
    def is_owner(team: Team, user_id: str) -> bool:
        return team.owner_id == user_id and not team.deleted

    @staticmethod
    async def add_member(db: AsyncSession, team: Team, user_id: str) -> TeamLink:
        """Add ``user_id`` to the team, reusing the active membership if one exists"""
        existing = await TeamCRUD.find_member_link(db, team, user_id)
        if existing:
            return existing

        link = TeamLink(team_id=team.id, add_user=user_id)
        db.add(link)
        await db.flush()
        return link

    @staticmethod
    async def find_joined_by_uid(db: AsyncSession, user_id: str, team_uid: str) -> Optional[Team]:
        """Team with this uid that the user owns or belongs to"""
        result = await db.execute(
            select(Team)
            .outerjoin(
                TeamLink,
                and_(
                    TeamLink.team_id == Team.id,
                    TeamLink.add_user == user_id,
                    TeamLink.deleted.is_(False),
                ),
            )
            .where(
                Team.uid == team_uid,
                Team.deleted.is_(False),
                or_(Team.owner_id == user_id, TeamLink.id.is_not(None)),
            )
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def find_joined(db: AsyncSession, user_id: str) -> Dict[str, List[Team]]:
        """Teams split into owned and joined; a team the user owns is never listed as joined"""
        owned = await db.execute(
            select(Team)
            .where(Team.owner_id == user_id, Team.deleted.is_(False))
            .order_by(Team.name)
        )
        owned_teams = list(owned.scalars().all())

        joined = await db.execute(
            select(Team)
            .join(TeamLink, TeamLink.team_id == Team.id)
            .where(
                TeamLink.add_user == user_id,
                TeamLink.deleted.is_(False),
                Team.deleted.is_(False),
            )
            .order_by(Team.name)
        )
        owned_uids = {team.uid for team in owned_teams}
        joined_teams = [team for team in joined.scalars().unique().all() if team.uid not in owned_uids]

        return {"owned": owned_teams, "joined": joined_teams}

    @staticmethod
    async def find_members(db: AsyncSession, team: Team) -> List[Dict]:
        """Members with an owner flag; the owner appears once"""
        result = await db.execute(
            select(User)
            .join(TeamLink, TeamLink.add_user == User.id)
            .where(
                TeamLink.team_id == team.id,
                TeamLink.deleted.is_(False),
                User.deleted.is_(False),
            )
            .order_by(User.username)
        )
        members = [
            {"username": user.username, "email": user.email, "owner": False}
            for user in result.scalars().unique().all()
            if user.id != team.owner_id
        ]

        owner = await UserCRUD.get_by_id(db, team.owner_id)
        if owner:
            members.append({"username": owner.username, "email": owner.email, "owner": True})
        return members


# ============ UserLink CRUD ============

def _pair_clause(user_a: str, user_b: str):
    return or_(
        and_(UserLink.user_id1 == user_a, UserLink.user_id2 == user_b),
        and_(UserLink.user_id1 == user_b, UserLink.user_id2 == user_a),
    )


class UserLinkCRUD:
    """CRUD operations for friend links"""

    @staticmethod
    async def find_active(db: AsyncSession, user_a: str, user_b: str) -> Optional[UserLink]:
        result = await db.execute(
            select(UserLink)
            .where(_pair_clause(user_a, user_b), UserLink.deleted.is_(False))
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create(db: AsyncSession, user_a: str, user_b: str) -> UserLink:
        """Link two users, reusing an active link between them if one exists"""
        existing = await UserLinkCRUD.find_active(db, user_a, user_b)
        if existing:
            return existing

        link = UserLink(user_id1=user_a, user_id2=user_b)
        db.add(link)
        await db.flush()
        return link

    @staticmethod
    async def are_friends(db: AsyncSession, user_a: str, user_b: str) -> bool:
        return await UserLinkCRUD.find_active(db, user_a, user_b) is not None

    @staticmethod
    async def find_friends(db: AsyncSession, user_id: str) -> Dict[str, List[User]]:
        """
        Friends of ``user_id``. ``received`` are links the user initiated
        (the other side is user_id2), ``sent`` the reverse.
        """
        received = await db.execute(
            select(User)
            .join(UserLink, UserLink.user_id2 == User.id)
            .where(UserLink.user_id1 == user_id, UserLink.deleted.is_(False))
            .order_by(User.username)
        )
        sent = await db.execute(
            select(User)
            .join(UserLink, UserLink.user_id1 == User.id)
            .where(UserLink.user_id2 == user_id, UserLink.deleted.is_(False))
            .order_by(User.username)
        )
        return {
            "received": list(received.scalars().unique().all()),
            "sent": list(sent.scalars().unique().all()),
        }

    @staticmethod
    async def delete(db: AsyncSession, user_a: str, user_b: str) -> bool:
        """Soft-delete the active link between two users"""
        result = await db.execute(
            update(UserLink)
            .where(_pair_clause(user_a, user_b), UserLink.deleted.is_(False))
            .values(deleted=True)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)
