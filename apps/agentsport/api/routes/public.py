"""
Public route handlers (no authentication): agency directory, portfolios,
player profiles and invitation lookups.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.api.routes import limiter
from agentsport.database.db import get_db_session
from agentsport.services import agent_service, player_service, representation_service
from agentsport.models.schemas import (
    AgentPortfolioResponse,
    HealthResponse,
    InvitationDetailsResponse,
    PublicAgentResponse,
    PublicPlayerResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", message="AgentSport API is running")


@router.get("/api/public/agents", response_model=List[PublicAgentResponse])
async def list_public_agents(session: AsyncSession = Depends(get_db_session)):
    """Active agencies, alphabetical."""
    agents = await agent_service.list_agents(session, active_only=True)
    return [PublicAgentResponse.model_validate(agent) for agent in agents]


@router.get("/api/public/agents/{slug}", response_model=AgentPortfolioResponse)
async def get_public_portfolio(slug: str, session: AsyncSession = Depends(get_db_session)):
    """Agency portfolio page: agency card plus its represented players."""
    try:
        return await agent_service.get_agent_portfolio(session, slug)
    except representation_service.AgentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error loading portfolio: {str(e)}")


@router.get("/api/public/players/{player_id}", response_model=PublicPlayerResponse)
async def get_public_player(player_id: int, session: AsyncSession = Depends(get_db_session)):
    try:
        return await player_service.get_public_player(session, player_id)
    except representation_service.PlayerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error loading player: {str(e)}")


@router.get("/api/invitations/{token}", response_model=InvitationDetailsResponse)
@limiter.limit("30/minute")
async def get_invitation(
    request: Request,
    token: str,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Invitation details for the agent registration page.

    No authentication required. Returns the inviting player's name, the
    invited agent's email/name and the invitation status.
    """
    try:
        return await representation_service.get_invitation_details(session, token)
    except representation_service.InvitationNotFoundError:
        raise HTTPException(status_code=404, detail="Invitation not found")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error retrieving invitation: {str(e)}")
