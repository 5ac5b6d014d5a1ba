"""
Account service layer: self-registration, login and token issuance.

Registration creates the user and its role profile in one transaction:
an agency for agents (accepting any invitations sent to that email), a
player profile with its representation state for players, or a club
account for clubs.
"""

import logging
from typing import Optional, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.database.models import Club, Player, UserRole
from agentsport.services import auth_service, user_service
from agentsport.services.agent_service import add_agent
from agentsport.services.representation_service import (
    notify_invitation,
    player_display_name,
    register_player_representation,
    resolve_invitations_for_agent,
)
from agentsport.utils.slugify import email_local_part

logger = logging.getLogger(__name__)


async def register_user(
    session: AsyncSession,
    email: str,
    password: str,
    role: UserRole,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    agency_name: Optional[str] = None,
    club_name: Optional[str] = None,
    representation_mode: Optional[str] = None,
    agent_data: Optional[Dict] = None,
) -> Dict:
    """
    Register a new account and its role profile.

    Args:
        session: Database session
        email: Email (normalized here)
        password: Plain password (hashed here)
        role: agent, player or club
        first_name, last_name: Player name
        agency_name: Agency name for agents
        club_name: Club name for clubs
        representation_mode: Player only, "FREE" or "REPRESENTED"
        agent_data: Player only, ``{"id"}`` or ``{"email", "name"}``

    Returns:
        Dict with ``user`` (user dict), ``profile`` (role profile ids) and
        ``representation_status`` (players only)

    Raises:
        PermissionError: If role is superadmin
        UserAlreadyExistsError: If the email is taken
        AgentNotFoundError: If agent_data.id does not resolve
        ValueError: For invalid input
    """
    role = UserRole(role)
    if role == UserRole.SUPERADMIN:
        raise PermissionError("Superadmin accounts cannot be self-registered")

    email = auth_service.normalize_email(email)
    user = await user_service.add_user(
        session, email, auth_service.hash_password(password), role
    )

    profile: Dict = {}
    representation_status = None
    invitation = None
    player = None

    if role == UserRole.AGENT:
        agent = await add_agent(session, user, agency_name)
        await resolve_invitations_for_agent(session, agent, email=email, commit=False)
        profile = {"agent_id": agent.id, "agent_slug": agent.slug}

    elif role == UserRole.PLAYER:
        player = Player(
            first_name=(first_name or "").strip() or email_local_part(email),
            last_name=(last_name or "").strip(),
            user_id=user.id,
        )
        invitation = await register_player_representation(
            session, player, representation_mode, agent_data, commit=False
        )
        profile = {"player_id": player.id}
        representation_status = player.representation_status

    elif role == UserRole.CLUB:
        club = Club(user_id=user.id, club_name=(club_name or "").strip() or email_local_part(email))
        session.add(club)
        await session.flush()
        profile = {"club_id": club.id}

    await session.commit()
    await session.refresh(user)

    if invitation is not None:
        await notify_invitation(invitation, player_display_name(player))

    logger.info("Registered %s user %d", role.value, user.id)
    return {
        "user": await user_service.get_user_by_id(session, user.id),
        "profile": profile,
        "representation_status": representation_status,
    }


async def authenticate(session: AsyncSession, email: str, password: str) -> Optional[Dict]:
    """Return the user dict if the credentials are valid, else None."""
    user = await user_service.get_user_by_email(session, email)
    if not user:
        return None
    if not auth_service.verify_password(password, user["password_hash"]):
        return None
    return user


async def issue_tokens(
    session: AsyncSession, user: Dict, profile: Optional[Dict] = None
) -> Dict:
    """
    Access and refresh tokens for a user, with role-specific claims.

    Args:
        session: Database session
        user: User dict
        profile: Role profile ids; looked up when omitted
    """
    if profile is None:
        profile = await user_service.get_role_profile(session, user["id"], user["role"])
    claims = auth_service.build_token_claims(user, profile)
    return {
        "access_token": auth_service.create_access_token(data=claims),
        "refresh_token": auth_service.create_refresh_token(data=claims),
        "token_type": "bearer",
    }
