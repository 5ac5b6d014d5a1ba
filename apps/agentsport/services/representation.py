"""
Player representation lifecycle.

Every change to a player's ``representation_status`` goes through
``transition()``. It is pure: it takes the current status, an event and the
agent involved, and returns the status to store, the agent to store and the
side effects the caller must carry out. Persistence lives in
``representation_service``.

    (new) --REGISTER_FREE-------------> FREE_AGENT
    (new) --REGISTER_WITH_AGENT-------> PENDING_CONFIRMATION
    (new) --REGISTER_WITH_INVITATION--> PENDING_INVITATION
    PENDING_INVITATION   --INVITATION_ACCEPTED--> PENDING_CONFIRMATION
    PENDING_CONFIRMATION --AGENT_CONFIRMED------> REPRESENTED
    PENDING_CONFIRMATION --AGENT_DECLINED-------> FREE_AGENT
    any                  --APPLICATION_ACCEPTED-> REPRESENTED
    REPRESENTED          --AGENT_RELEASED-------> FREE_AGENT
"""

import enum
from typing import NamedTuple, Optional, Tuple

from agentsport.database.models import RepresentationStatus


class RepresentationEvent(str, enum.Enum):
    """Things that can happen to a player's representation."""

    REGISTER_FREE = "REGISTER_FREE"
    REGISTER_WITH_AGENT = "REGISTER_WITH_AGENT"
    REGISTER_WITH_INVITATION = "REGISTER_WITH_INVITATION"
    INVITATION_ACCEPTED = "INVITATION_ACCEPTED"
    AGENT_CONFIRMED = "AGENT_CONFIRMED"
    AGENT_DECLINED = "AGENT_DECLINED"
    APPLICATION_ACCEPTED = "APPLICATION_ACCEPTED"
    AGENT_RELEASED = "AGENT_RELEASED"


class RepresentationEffect(str, enum.Enum):
    """Side effects the caller must apply alongside the status change."""

    CREATE_INVITATION = "CREATE_INVITATION"
    MARK_INVITATION_ACCEPTED = "MARK_INVITATION_ACCEPTED"


class Transition(NamedTuple):
    next_status: RepresentationStatus
    agent_id: Optional[int]
    effects: Tuple[RepresentationEffect, ...] = ()


class InvalidTransitionError(ValueError):
    """Raised when an event is not allowed from the player's current status."""


_S = RepresentationStatus
_E = RepresentationEvent

# event -> (allowed source statuses, target status, agent policy, effects)
# None in the source set stands for a player that is being created.
# Agent policy: "set" stores the context agent, "keep" stores it unchanged
# (the caller passes the current agent), "clear" stores None.
_TABLE = {
    _E.REGISTER_FREE: ({None}, _S.FREE_AGENT, "clear", ()),
    _E.REGISTER_WITH_AGENT: ({None}, _S.PENDING_CONFIRMATION, "set", ()),
    _E.REGISTER_WITH_INVITATION: (
        {None},
        _S.PENDING_INVITATION,
        "clear",
        (RepresentationEffect.CREATE_INVITATION,),
    ),
    _E.INVITATION_ACCEPTED: (
        {_S.PENDING_INVITATION},
        _S.PENDING_CONFIRMATION,
        "set",
        (RepresentationEffect.MARK_INVITATION_ACCEPTED,),
    ),
    _E.AGENT_CONFIRMED: ({_S.PENDING_CONFIRMATION}, _S.REPRESENTED, "keep", ()),
    _E.AGENT_DECLINED: ({_S.PENDING_CONFIRMATION}, _S.FREE_AGENT, "clear", ()),
    _E.APPLICATION_ACCEPTED: (
        {None, _S.FREE_AGENT, _S.PENDING_CONFIRMATION, _S.PENDING_INVITATION, _S.REPRESENTED},
        _S.REPRESENTED,
        "set",
        (),
    ),
    _E.AGENT_RELEASED: ({_S.REPRESENTED}, _S.FREE_AGENT, "clear", ()),
}


def _coerce_status(value) -> Optional[RepresentationStatus]:
    if value is None or isinstance(value, RepresentationStatus):
        return value
    try:
        return RepresentationStatus(value)
    except ValueError:
        raise InvalidTransitionError(f"Unknown representation status: {value!r}")


def transition(
    current_status,
    event: RepresentationEvent,
    agent_id: Optional[int] = None,
) -> Transition:
    """
    Compute the next representation state.

    Args:
        current_status: Current status (enum or its string value), or None
            for a player being registered
        event: What happened
        agent_id: Agent involved in the event. Required for events that
            store an agent (REGISTER_WITH_AGENT, INVITATION_ACCEPTED,
            APPLICATION_ACCEPTED, AGENT_CONFIRMED)

    Returns:
        Transition with the status and agent to persist plus side effects

    Raises:
        InvalidTransitionError: If the event is not allowed from
            current_status, or a required agent is missing
    """
    status = _coerce_status(current_status)
    try:
        sources, target, agent_policy, effects = _TABLE[RepresentationEvent(event)]
    except ValueError:
        raise InvalidTransitionError(f"Unknown representation event: {event!r}")

    if status not in sources:
        current = status.value if status is not None else "(new)"
        raise InvalidTransitionError(
            f"Cannot apply {RepresentationEvent(event).value} to a player in {current}"
        )

    if agent_policy == "clear":
        next_agent = None
    else:
        if agent_id is None:
            raise InvalidTransitionError(
                f"{RepresentationEvent(event).value} requires an agent"
            )
        next_agent = agent_id

    return Transition(next_status=target, agent_id=next_agent, effects=tuple(effects))


def is_consistent(status, agent_id: Optional[int]) -> bool:
    """Check the status/agent pairing a stored player must satisfy."""
    status = _coerce_status(status)
    if status in (_S.REPRESENTED, _S.PENDING_CONFIRMATION):
        return agent_id is not None
    return agent_id is None
