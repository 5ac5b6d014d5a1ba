"""
Player service layer.

Roster management for agents (every query is scoped to the requesting
agent) and the public player profile.
"""

import logging
from typing import Optional, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.database.models import (
    Agent,
    Player,
    PlayerStatus,
    RepresentationStatus,
)
from agentsport.services.representation_service import PlayerNotFoundError
from agentsport.utils.datetime_utils import calculate_age

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "position",
    "birth_date",
    "nationality",
    "foot",
    "height",
    "weight",
    "avatar_url",
    "video_url",
    "status",
)

# NOT NULL columns among PROFILE_FIELDS
REQUIRED_FIELDS = ("first_name", "last_name", "status")


def _clean_fields(data: Dict) -> Dict:
    fields = {key: value for key, value in data.items() if key in PROFILE_FIELDS}
    if fields.get("status") is not None:
        fields["status"] = PlayerStatus(fields["status"]).value
    return fields


def public_player_dict(player: Player, agency_name: Optional[str] = None) -> Dict:
    """Fields of a player that are safe to show publicly."""
    return {
        "id": player.id,
        "first_name": player.first_name,
        "last_name": player.last_name,
        "position": player.position,
        "nationality": player.nationality,
        "birth_date": player.birth_date,
        "age": calculate_age(player.birth_date),
        "height": player.height,
        "weight": player.weight,
        "foot": player.foot,
        "avatar_url": player.avatar_url,
        "video_url": player.video_url,
        "agency_name": agency_name,
    }


async def create_roster_player(session: AsyncSession, agent: Agent, data: Dict) -> Player:
    """
    Add a player to an agent's roster.

    The creating agent owns the player from the start, so it is stored as
    REPRESENTED with the agent set.
    """
    fields = _clean_fields(data)
    player = Player(
        **fields,
        agent_id=agent.id,
        representation_status=RepresentationStatus.REPRESENTED.value,
    )
    session.add(player)
    await session.commit()
    await session.refresh(player)

    logger.info("Agent %d added player %d to roster", agent.id, player.id)
    return player


async def list_roster(
    session: AsyncSession, agent: Agent, status: Optional[str] = None
) -> List[Player]:
    """
    Players linked to an agent, newest first.

    Includes players still awaiting the agent's confirmation. ``status``
    filters by roster bucket (signed, watchlist, ...).
    """
    query = select(Player).where(Player.agent_id == agent.id)
    if status:
        query = query.where(Player.status == PlayerStatus(status).value)
    query = query.order_by(Player.created_at.desc(), Player.id.desc())
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_roster_player(session: AsyncSession, agent: Agent, player_id: int) -> Player:
    """
    Get a player from the agent's roster.

    Raises:
        PlayerNotFoundError: If the player does not exist or belongs to
            another agent
    """
    result = await session.execute(
        select(Player).where(Player.id == player_id, Player.agent_id == agent.id)
    )
    player = result.scalar_one_or_none()
    if player is None:
        raise PlayerNotFoundError(f"Player {player_id} not found")
    return player


async def update_roster_player(
    session: AsyncSession, agent: Agent, player_id: int, data: Dict
) -> Player:
    """Update profile fields of a roster player. Representation fields are not editable here."""
    player = await get_roster_player(session, agent, player_id)
    for key, value in _clean_fields(data).items():
        if key in REQUIRED_FIELDS and value is None:
            raise ValueError(f"{key} cannot be null")
        if key in ("first_name", "position") and not value:
            raise ValueError(f"{key} cannot be empty")
        setattr(player, key, value)

    await session.commit()
    await session.refresh(player)
    return player


async def delete_roster_player(session: AsyncSession, agent: Agent, player_id: int) -> None:
    """Delete a roster player along with its invitations and applications."""
    player = await get_roster_player(session, agent, player_id)
    await session.delete(player)
    await session.commit()
    logger.info("Agent %d deleted player %d", agent.id, player_id)


async def get_public_player(session: AsyncSession, player_id: int) -> Dict:
    """
    Public profile of a player.

    The agency name is only shown once the agent has confirmed the player.

    Raises:
        PlayerNotFoundError: If the player does not exist
    """
    result = await session.execute(
        select(Player, Agent.agency_name)
        .outerjoin(Agent, Agent.id == Player.agent_id)
        .where(Player.id == player_id)
    )
    row = result.first()
    if row is None:
        raise PlayerNotFoundError(f"Player {player_id} not found")

    player, agency_name = row
    if player.representation_status != RepresentationStatus.REPRESENTED.value:
        agency_name = None
    return public_player_dict(player, agency_name)
