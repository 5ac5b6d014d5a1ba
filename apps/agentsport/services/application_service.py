"""
Application service layer.

Players ask agents to represent them; agents accept or reject. Accepting
an application makes the player REPRESENTED by that agent.
"""

import logging
from typing import Optional, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.database.models import (
    Agent,
    Application,
    ApplicationStatus,
    Player,
)
from agentsport.services.representation_service import (
    AgentNotFoundError,
    PlayerNotFoundError,
    accept_application,
    player_display_name,
)
from agentsport.utils.datetime_utils import isoformat_or_none

logger = logging.getLogger(__name__)


class ApplicationNotFoundError(ValueError):
    """Raised when an application does not exist or belongs to another agent."""


class ApplicationConflictError(ValueError):
    """Raised when a player already has a pending or accepted application with an agent."""


def _application_to_dict(
    application: Application, player_name: Optional[str] = None, agency_name: Optional[str] = None
) -> Dict:
    return {
        "id": application.id,
        "player_id": application.player_id,
        "agent_id": application.agent_id,
        "status": application.status,
        "message": application.message,
        "player_name": player_name,
        "agency_name": agency_name,
        "created_at": isoformat_or_none(application.created_at),
    }


async def _get_player_for_user(session: AsyncSession, user_id: int) -> Player:
    result = await session.execute(select(Player).where(Player.user_id == user_id))
    player = result.scalar_one_or_none()
    if player is None:
        raise PlayerNotFoundError("No player profile found for this user")
    return player


async def create_application(
    session: AsyncSession, user_id: int, agent_id: int, message: Optional[str] = None
) -> Dict:
    """
    Send a representation request from the user's player profile to an agent.

    Raises:
        PlayerNotFoundError: If the user has no player profile
        AgentNotFoundError: If the agent does not exist
        ApplicationConflictError: If an application to this agent is already
            pending or accepted
    """
    player = await _get_player_for_user(session, user_id)
    agent = await session.get(Agent, agent_id)
    if agent is None:
        raise AgentNotFoundError(f"Agent {agent_id} not found")

    result = await session.execute(
        select(Application.status).where(
            Application.player_id == player.id,
            Application.agent_id == agent.id,
            Application.status.in_(
                [ApplicationStatus.PENDING.value, ApplicationStatus.ACCEPTED.value]
            ),
        )
    )
    statuses = set(result.scalars().all())
    if ApplicationStatus.PENDING.value in statuses:
        raise ApplicationConflictError("You already have a pending application with this agent")
    if ApplicationStatus.ACCEPTED.value in statuses:
        raise ApplicationConflictError("You are already represented by this agent")

    application = Application(
        player_id=player.id,
        agent_id=agent.id,
        message=message,
        status=ApplicationStatus.PENDING.value,
    )
    session.add(application)
    await session.commit()
    await session.refresh(application)

    logger.info("Player %d applied to agent %d", player.id, agent.id)
    return _application_to_dict(application, player_display_name(player), agent.agency_name)


async def list_applications_for_player(session: AsyncSession, user_id: int) -> List[Dict]:
    """Applications sent by the user's player profile, newest first."""
    player = await _get_player_for_user(session, user_id)
    result = await session.execute(
        select(Application, Agent.agency_name)
        .join(Agent, Agent.id == Application.agent_id)
        .where(Application.player_id == player.id)
        .order_by(Application.created_at.desc(), Application.id.desc())
    )
    name = player_display_name(player)
    return [
        _application_to_dict(application, name, agency_name)
        for application, agency_name in result.all()
    ]


async def list_applications_for_agent(session: AsyncSession, agent_id: int) -> List[Dict]:
    """Pending applications received by an agent, newest first."""
    result = await session.execute(
        select(Application, Player)
        .join(Player, Player.id == Application.player_id)
        .where(
            Application.agent_id == agent_id,
            Application.status == ApplicationStatus.PENDING.value,
        )
        .order_by(Application.created_at.desc(), Application.id.desc())
    )
    return [
        _application_to_dict(application, player_display_name(player))
        for application, player in result.all()
    ]


async def update_application_status(
    session: AsyncSession, agent_id: int, application_id: int, status: ApplicationStatus
) -> Dict:
    """
    Accept or reject a pending application addressed to this agent.

    Accepting represents the player in the same transaction.

    Raises:
        ApplicationNotFoundError: If the application does not exist or is
            addressed to another agent
        ValueError: If the new status is not accepted/rejected, or the
            application was already decided
    """
    status = ApplicationStatus(status)
    if status == ApplicationStatus.PENDING:
        raise ValueError("An application can only be accepted or rejected")

    result = await session.execute(
        select(Application)
        .where(Application.id == application_id, Application.agent_id == agent_id)
        .with_for_update()
    )
    application = result.scalar_one_or_none()
    if application is None:
        raise ApplicationNotFoundError(f"Application {application_id} not found")
    if application.status != ApplicationStatus.PENDING.value:
        raise ValueError(f"Application is already {application.status}")

    application.status = status.value
    player = await session.get(Player, application.player_id, with_for_update=True)
    if status == ApplicationStatus.ACCEPTED:
        accept_application(player, agent_id)

    await session.commit()
    await session.refresh(application)

    logger.info(
        "Agent %d %s application %d (player %d)",
        agent_id, status.value, application.id, application.player_id,
    )
    return _application_to_dict(application, player_display_name(player))
