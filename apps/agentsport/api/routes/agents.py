"""Agency route handlers: superadmin management, own profile, representation actions."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.api.auth_dependencies import get_current_agent, require_superadmin
from agentsport.database.db import get_db_session
from agentsport.database.models import Agent
from agentsport.services import agent_service, representation_service, user_service
from agentsport.services.representation import InvalidTransitionError
from agentsport.models.schemas import (
    AgentResponse,
    CreateAgentRequest,
    RepresentationResponse,
    UpdateAgentRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/agents", response_model=AgentResponse, status_code=201)
async def create_agent(
    request: CreateAgentRequest,
    admin: dict = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create an agent account (superadmin only). Pending invitations to that email are accepted."""
    try:
        agent = await agent_service.create_agent(
            session,
            email=request.email,
            password=request.password,
            agency_name=request.agency_name,
        )
        logger.info("Superadmin %d created agent %d", admin["id"], agent.id)
        return AgentResponse.model_validate(agent)
    except user_service.UserAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating agent: {str(e)}")


@router.get("/api/agents", response_model=List[AgentResponse])
async def list_agents(
    admin: dict = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db_session),
):
    """All agencies (superadmin only)."""
    agents = await agent_service.list_agents(session)
    return [AgentResponse.model_validate(agent) for agent in agents]


@router.get("/api/agents/me", response_model=AgentResponse)
async def get_my_agency(agent: Agent = Depends(get_current_agent)):
    """The requesting agent's agency profile."""
    return AgentResponse.model_validate(agent)


@router.patch("/api/agents/me", response_model=AgentResponse)
async def update_my_agency(
    request: UpdateAgentRequest,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Edit the agency profile. A changed slug must be free."""
    try:
        updated = await agent_service.update_agent(
            session, agent.id, **request.model_dump(exclude_unset=True)
        )
        return AgentResponse.model_validate(updated)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating agency: {str(e)}")


async def _representation_action(action, session: AsyncSession, agent: Agent, player_id: int):
    try:
        player = await action(session, agent, player_id)
        return RepresentationResponse(
            player_id=player.id,
            representation_status=player.representation_status,
            agent_id=player.agent_id,
        )
    except representation_service.PlayerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating representation: {str(e)}")


@router.post("/api/agents/me/players/{player_id}/confirm", response_model=RepresentationResponse)
async def confirm_player(
    player_id: int,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Confirm a player who named this agency as their agent."""
    return await _representation_action(
        representation_service.confirm_representation, session, agent, player_id
    )


@router.post("/api/agents/me/players/{player_id}/decline", response_model=RepresentationResponse)
async def decline_player(
    player_id: int,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Turn down a player's claim; the player becomes a free agent."""
    return await _representation_action(
        representation_service.decline_representation, session, agent, player_id
    )


@router.post("/api/agents/me/players/{player_id}/release", response_model=RepresentationResponse)
async def release_player(
    player_id: int,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Stop representing a player."""
    return await _representation_action(
        representation_service.release_representation, session, agent, player_id
    )
