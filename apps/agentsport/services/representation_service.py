"""
Representation service layer.

Applies the transitions computed by ``representation.transition`` to stored
players: registration-time claims on an agent, invitations to agents who do
not have an account yet, resolution of those invitations once the agent
registers, and the agent-side confirm/decline/release actions.

Every compound write (player + invitation, invitation + player) happens in
one transaction. Invitations being consumed are locked with FOR UPDATE.
"""

import secrets
import logging
from typing import Optional, Dict, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.database.models import (
    Agent,
    AgentInvitation,
    InvitationStatus,
    Player,
    RepresentationStatus,
    User,
)
from agentsport.services import email_service
from agentsport.services.representation import (
    RepresentationEvent,
    RepresentationEffect,
    Transition,
    transition,
)
from agentsport.utils.datetime_utils import utcnow
from agentsport.utils.slugify import email_local_part

logger = logging.getLogger(__name__)

REPRESENTATION_FREE = "FREE"
REPRESENTATION_REPRESENTED = "REPRESENTED"


# --- Custom exceptions ---


class AgentNotFoundError(ValueError):
    """Raised when an agent id or slug does not match any agent."""


class PlayerNotFoundError(ValueError):
    """Raised when a player does not exist or is not visible to the caller."""


class InvitationNotFoundError(ValueError):
    """Raised when an invitation token does not match any record."""


def generate_invitation_token() -> str:
    """Unguessable, URL-safe invitation token."""
    return secrets.token_urlsafe(32)


def player_display_name(player: Player) -> str:
    return f"{player.first_name} {player.last_name or ''}".strip()


async def _get_agent_by_email(session: AsyncSession, email: str) -> Optional[Agent]:
    result = await session.execute(
        select(Agent).join(User, User.id == Agent.user_id).where(func.lower(User.email) == email)
    )
    return result.scalars().first()


def _apply(player: Player, result: Transition) -> None:
    player.representation_status = result.next_status.value
    player.agent_id = result.agent_id


async def register_player_representation(
    session: AsyncSession,
    player: Player,
    mode: Optional[str] = None,
    agent_data: Optional[Dict] = None,
    commit: bool = True,
) -> Optional[AgentInvitation]:
    """
    Set the representation state of a self-registering player.

    Args:
        session: Database session
        player: New Player (added to the session, not yet committed)
        mode: "FREE", "REPRESENTED" or None (same as "FREE")
        agent_data: For "REPRESENTED": ``{"id": ...}`` for an existing agent,
            or ``{"email": ..., "name": ...}`` to invite one. An email that
            already belongs to an agent claims that agent without an invitation
        commit: Commit and send the invitation email. Pass False to let the
            caller finish a larger transaction (it must then call
            ``notify_invitation`` after committing)

    Returns:
        The AgentInvitation created, or None

    Raises:
        AgentNotFoundError: If agent_data.id does not resolve to an agent
        ValueError: If the mode is unknown or agent_data has neither id nor email
    """
    agent_data = agent_data or {}
    invitation = None

    # The invitation references the player id
    session.add(player)
    await session.flush()

    if mode is None or mode == REPRESENTATION_FREE:
        _apply(player, transition(None, RepresentationEvent.REGISTER_FREE))

    elif mode == REPRESENTATION_REPRESENTED:
        agent_id = agent_data.get("id")
        target_email = (agent_data.get("email") or "").strip().lower()

        if agent_id is not None:
            agent = await session.get(Agent, agent_id)
            if agent is None:
                raise AgentNotFoundError(f"Agent {agent_id} not found")
            _apply(player, transition(None, RepresentationEvent.REGISTER_WITH_AGENT, agent.id))

        elif target_email:
            # An agent who already has an account is claimed directly
            existing = await _get_agent_by_email(session, target_email)
            if existing is not None:
                _apply(player, transition(None, RepresentationEvent.REGISTER_WITH_AGENT, existing.id))
            else:
                result = transition(None, RepresentationEvent.REGISTER_WITH_INVITATION)
                _apply(player, result)
                if RepresentationEffect.CREATE_INVITATION in result.effects:
                    target_name = (
                        (agent_data.get("name") or "").strip() or email_local_part(target_email)
                    )
                    invitation = AgentInvitation(
                        target_email=target_email,
                        target_name=target_name,
                        token=generate_invitation_token(),
                        status=InvitationStatus.PENDING.value,
                        player_id=player.id,
                    )
                    session.add(invitation)

        else:
            raise ValueError("agentData must include an agent id or email")

    else:
        raise ValueError(f"Unknown representation mode: {mode}")

    await session.flush()
    logger.info(
        "Player %d registered as %s (agent=%s)",
        player.id, player.representation_status, player.agent_id,
    )

    if commit:
        await session.commit()
        await session.refresh(player)
        if invitation is not None:
            await session.refresh(invitation)
            await notify_invitation(invitation, player_display_name(player))

    return invitation


async def notify_invitation(invitation: AgentInvitation, player_name: str) -> None:
    """Ask the mail collaborator to deliver an invitation. Never raises."""
    logger.info(
        "Invitation %d issued to %s for player %d",
        invitation.id, invitation.target_email, invitation.player_id,
    )
    await email_service.send_invitation_email(
        target_email=invitation.target_email,
        target_name=invitation.target_name,
        player_name=player_name,
        token=invitation.token,
    )


async def resolve_invitations_for_agent(
    session: AsyncSession,
    agent: Agent,
    email: Optional[str] = None,
    commit: bool = True,
) -> List[int]:
    """
    Accept every pending invitation addressed to a newly created agent.

    Each matching invitation is marked accepted. Its player is linked to the
    agent (PENDING_CONFIRMATION) only if it is still waiting on the
    invitation. Running it again with nothing pending is a no-op.

    Args:
        session: Database session
        agent: The new agent (flushed, id assigned)
        email: The agent user's email; looked up from the user if omitted
        commit: Commit when done. Pass False inside a larger transaction

    Returns:
        Ids of the players linked to the agent
    """
    if email is None:
        email = (
            await session.execute(select(User.email).where(User.id == agent.user_id))
        ).scalar_one()
    email = email.strip().lower()

    result = await session.execute(
        select(AgentInvitation)
        .where(
            func.lower(AgentInvitation.target_email) == email,
            AgentInvitation.status == InvitationStatus.PENDING.value,
        )
        .order_by(AgentInvitation.id)
        .with_for_update()
    )
    invitations = result.scalars().all()

    linked: List[int] = []
    for invitation in invitations:
        invitation.status = InvitationStatus.ACCEPTED.value
        invitation.accepted_agent_id = agent.id
        invitation.accepted_at = utcnow()

        player = await session.get(Player, invitation.player_id, with_for_update=True)
        if player is None:
            continue
        if player.representation_status != RepresentationStatus.PENDING_INVITATION.value:
            logger.info(
                "Invitation %d accepted but player %d is %s; not relinking",
                invitation.id, player.id, player.representation_status,
            )
            continue

        _apply(
            player,
            transition(player.representation_status, RepresentationEvent.INVITATION_ACCEPTED, agent.id),
        )
        linked.append(player.id)

    if invitations:
        await session.flush()
        logger.info(
            "Agent %d accepted %d invitation(s) for %s, linked players %s",
            agent.id, len(invitations), email, linked,
        )

    if commit:
        await session.commit()

    return linked


async def _get_agent_player(session: AsyncSession, agent_id: int, player_id: int) -> Player:
    result = await session.execute(
        select(Player)
        .where(Player.id == player_id, Player.agent_id == agent_id)
        .with_for_update()
    )
    player = result.scalar_one_or_none()
    if player is None:
        raise PlayerNotFoundError(f"Player {player_id} not found")
    return player


async def _agent_action(
    session: AsyncSession, agent: Agent, player_id: int, event: RepresentationEvent
) -> Player:
    player = await _get_agent_player(session, agent.id, player_id)
    previous = player.representation_status
    _apply(player, transition(previous, event, player.agent_id))
    await session.commit()
    await session.refresh(player)
    logger.info(
        "Agent %d: %s player %d (%s -> %s)",
        agent.id, event.value, player.id, previous, player.representation_status,
    )
    return player


async def confirm_representation(session: AsyncSession, agent: Agent, player_id: int) -> Player:
    """
    Agent confirms a player who claimed them.

    Raises:
        PlayerNotFoundError: If the player is not linked to this agent
        InvalidTransitionError: If the player is not PENDING_CONFIRMATION
    """
    return await _agent_action(session, agent, player_id, RepresentationEvent.AGENT_CONFIRMED)


async def decline_representation(session: AsyncSession, agent: Agent, player_id: int) -> Player:
    """Agent rejects a player's claim; the player becomes a free agent."""
    return await _agent_action(session, agent, player_id, RepresentationEvent.AGENT_DECLINED)


async def release_representation(session: AsyncSession, agent: Agent, player_id: int) -> Player:
    """Agent stops representing a player; the player becomes a free agent."""
    return await _agent_action(session, agent, player_id, RepresentationEvent.AGENT_RELEASED)


def accept_application(player: Player, agent_id: int) -> None:
    """Represent a player after their application was accepted (no commit)."""
    _apply(
        player,
        transition(player.representation_status, RepresentationEvent.APPLICATION_ACCEPTED, agent_id),
    )


async def get_invitation_details(session: AsyncSession, token: str) -> Dict:
    """
    Public invitation lookup for the agent registration page.

    Raises:
        InvitationNotFoundError: If the token is unknown
    """
    result = await session.execute(
        select(AgentInvitation, Player)
        .join(Player, Player.id == AgentInvitation.player_id)
        .where(AgentInvitation.token == token)
    )
    row = result.first()
    if row is None:
        raise InvitationNotFoundError("Invitation not found")

    invitation, player = row
    return {
        "player_name": player_display_name(player),
        "target_email": invitation.target_email,
        "target_name": invitation.target_name,
        "status": invitation.status,
    }
