"""
User service layer for account database operations.
"""

from typing import Optional, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from agentsport.database.models import User, Agent, Player, Club, UserRole
from agentsport.utils.datetime_utils import isoformat_or_none
import logging

logger = logging.getLogger(__name__)


class UserAlreadyExistsError(ValueError):
    """Raised when registering an email that already has an account."""


async def email_exists(session: AsyncSession, email: str) -> bool:
    """Check whether an account already uses this (normalized) email."""
    result = await session.execute(
        select(User.id).where(func.lower(User.email) == email.strip().lower()).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def add_user(
    session: AsyncSession, email: str, password_hash: str, role: UserRole
) -> User:
    """
    Stage a new user in the current transaction (flushed, not committed).

    Args:
        session: Database session
        email: Normalized email
        password_hash: bcrypt hash
        role: Account role

    Returns:
        The flushed User (id assigned)

    Raises:
        UserAlreadyExistsError: If the email is already registered
    """
    if await email_exists(session, email):
        raise UserAlreadyExistsError(f"A user with email {email} already exists")

    user = User(email=email, password_hash=password_hash, role=UserRole(role).value)
    session.add(user)
    await session.flush()
    return user


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[Dict]:
    """
    Get user by email address.

    Args:
        session: Database session
        email: Email address (will be normalized to lowercase)

    Returns:
        User dictionary or None if not found
    """
    email = email.strip().lower() if email else None
    if not email:
        return None

    result = await session.execute(select(User).where(func.lower(User.email) == email))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User dictionary or None if not found
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def get_role_profile(session: AsyncSession, user_id: int, role: str) -> Dict:
    """
    Ids of the profile row attached to a user's role, for token claims.

    Returns:
        ``{"agent_id", "agent_slug"}`` for agents, ``{"player_id"}`` for
        players, ``{"club_id"}`` for clubs, ``{}`` otherwise
    """
    if role == UserRole.AGENT.value:
        row = (
            await session.execute(select(Agent.id, Agent.slug).where(Agent.user_id == user_id))
        ).first()
        return {"agent_id": row.id, "agent_slug": row.slug} if row else {}
    if role == UserRole.PLAYER.value:
        player_id = (
            await session.execute(select(Player.id).where(Player.user_id == user_id))
        ).scalar_one_or_none()
        return {"player_id": player_id} if player_id else {}
    if role == UserRole.CLUB.value:
        club_id = (
            await session.execute(select(Club.id).where(Club.user_id == user_id))
        ).scalar_one_or_none()
        return {"club_id": club_id} if club_id else {}
    return {}


def _user_to_dict(user: User) -> Dict:
    """
    Convert a User ORM instance to a dictionary.

    Args:
        user: User ORM instance

    Returns:
        User dictionary
    """
    return {
        "id": user.id,
        "email": user.email,
        "password_hash": user.password_hash,
        "role": user.role,
        "created_at": isoformat_or_none(user.created_at),
        "updated_at": isoformat_or_none(user.updated_at),
    }
