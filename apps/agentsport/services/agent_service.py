"""
Agent service layer.

Agency profiles: creation (with the unique public slug), lookups, profile
edits and the public portfolio.
"""

import logging
from typing import Optional, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.database.models import (
    Agent,
    AgentStatus,
    Player,
    RepresentationStatus,
    User,
    UserRole,
)
from agentsport.services import auth_service, user_service
from agentsport.services.player_service import public_player_dict
from agentsport.services.representation_service import (
    AgentNotFoundError,
    resolve_invitations_for_agent,
)
from agentsport.utils.slugify import agency_base_slug, email_local_part, slugify

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("agency_name", "slug", "logo", "phone", "location", "bio", "website")


async def _generate_unique_slug(
    session: AsyncSession, base: str, exclude_agent_id: Optional[int] = None
) -> str:
    """Return ``base``, or ``base-N`` with the first N not already taken."""
    slug = base
    counter = 1
    while True:
        query = select(Agent.id).where(Agent.slug == slug)
        if exclude_agent_id is not None:
            query = query.where(Agent.id != exclude_agent_id)
        result = await session.execute(query)
        if result.scalar_one_or_none() is None:
            return slug
        slug = f"{base}-{counter}"
        counter += 1


async def add_agent(
    session: AsyncSession, user: User, agency_name: Optional[str] = None
) -> Agent:
    """
    Stage the agency profile for an agent user (flushed, not committed).

    The agency name defaults to the email local part. The slug derives
    from the agency name, falling back to the email.
    """
    name = (agency_name or "").strip() or email_local_part(user.email)
    slug = await _generate_unique_slug(session, agency_base_slug(name, user.email))

    agent = Agent(
        user_id=user.id,
        agency_name=name,
        slug=slug,
        status=AgentStatus.ACTIVE.value,
    )
    session.add(agent)
    await session.flush()
    return agent


async def create_agent(
    session: AsyncSession, email: str, password: str, agency_name: str
) -> Agent:
    """
    Create an agent account on behalf of a superadmin.

    Creates the user and the agency in one transaction and accepts any
    invitations players sent to this email.

    Raises:
        UserAlreadyExistsError: If the email is already registered
    """
    email = auth_service.normalize_email(email)
    user = await user_service.add_user(
        session, email, auth_service.hash_password(password), UserRole.AGENT
    )
    agent = await add_agent(session, user, agency_name)
    linked = await resolve_invitations_for_agent(session, agent, email=email, commit=False)

    await session.commit()
    await session.refresh(agent)
    logger.info(
        "Created agent %d (%s) for %s; linked players %s", agent.id, agent.slug, email, linked
    )
    return agent


async def get_agent_by_user_id(session: AsyncSession, user_id: int) -> Optional[Agent]:
    result = await session.execute(select(Agent).where(Agent.user_id == user_id))
    return result.scalar_one_or_none()


async def get_agent_by_slug(session: AsyncSession, slug: str) -> Optional[Agent]:
    result = await session.execute(select(Agent).where(Agent.slug == slug))
    return result.scalar_one_or_none()


async def list_agents(session: AsyncSession, active_only: bool = False) -> List[Agent]:
    """All agencies, alphabetical. ``active_only`` hides inactive/pending ones."""
    query = select(Agent).order_by(Agent.agency_name.asc(), Agent.id.asc())
    if active_only:
        query = query.where(Agent.status == AgentStatus.ACTIVE.value)
    result = await session.execute(query)
    return list(result.scalars().all())


async def update_agent(session: AsyncSession, agent_id: int, **fields) -> Agent:
    """
    Update editable agency profile fields.

    A new slug is normalised and must not be taken by another agency.

    Raises:
        AgentNotFoundError: If the agent does not exist
        ValueError: If the slug is empty after normalising or already taken
    """
    agent = await session.get(Agent, agent_id)
    if agent is None:
        raise AgentNotFoundError(f"Agent {agent_id} not found")

    for key, value in fields.items():
        if key not in EDITABLE_FIELDS or value is None:
            continue
        if key == "slug":
            value = slugify(value)
            if not value:
                raise ValueError("Slug must contain letters or numbers")
            if value != agent.slug:
                taken = await _generate_unique_slug(session, value, exclude_agent_id=agent.id)
                if taken != value:
                    raise ValueError(f"Slug '{value}' is already taken")
        if key == "agency_name":
            value = value.strip()
            if not value:
                raise ValueError("Agency name cannot be empty")
        setattr(agent, key, value)

    await session.commit()
    await session.refresh(agent)
    return agent


async def get_agent_portfolio(session: AsyncSession, slug: str) -> Dict:
    """
    Public portfolio: agency card plus the players it represents.

    Raises:
        AgentNotFoundError: If no agency has this slug
    """
    result = await session.execute(
        select(Agent, User.email).join(User, User.id == Agent.user_id).where(Agent.slug == slug)
    )
    row = result.first()
    if row is None:
        raise AgentNotFoundError(f"Agency '{slug}' not found")
    agent, contact_email = row

    players = await session.execute(
        select(Player)
        .where(
            Player.agent_id == agent.id,
            Player.representation_status == RepresentationStatus.REPRESENTED.value,
        )
        .order_by(Player.last_name.asc(), Player.first_name.asc())
    )

    return {
        "agent": {
            "agency_name": agent.agency_name,
            "slug": agent.slug,
            "logo": agent.logo,
            "contact_email": contact_email,
        },
        "players": [
            public_player_dict(player, agent.agency_name) for player in players.scalars().all()
        ],
    }
