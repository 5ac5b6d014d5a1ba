"""Roster route handlers. Every endpoint is scoped to the requesting agent."""

import logging
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.api.auth_dependencies import get_current_agent
from agentsport.database.db import get_db_session
from agentsport.database.models import Agent, PlayerStatus
from agentsport.services import player_service
from agentsport.services.representation_service import PlayerNotFoundError
from agentsport.models.schemas import (
    CreatePlayerRequest,
    PlayerResponse,
    UpdatePlayerRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/players", response_model=List[PlayerResponse])
async def list_roster(
    status: Optional[PlayerStatus] = None,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Players linked to the agency, optionally filtered by roster bucket."""
    players = await player_service.list_roster(session, agent, status.value if status else None)
    return [PlayerResponse.model_validate(player) for player in players]


@router.post("/api/players", response_model=PlayerResponse, status_code=201)
async def create_player(
    request: CreatePlayerRequest,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Add a player to the agency roster."""
    try:
        player = await player_service.create_roster_player(session, agent, request.model_dump())
        return PlayerResponse.model_validate(player)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating player: {str(e)}")


@router.get("/api/players/{player_id}", response_model=PlayerResponse)
async def get_player(
    player_id: int,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        player = await player_service.get_roster_player(session, agent, player_id)
        return PlayerResponse.model_validate(player)
    except PlayerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/api/players/{player_id}", response_model=PlayerResponse)
async def update_player(
    player_id: int,
    request: UpdatePlayerRequest,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        player = await player_service.update_roster_player(
            session, agent, player_id, request.model_dump(exclude_unset=True)
        )
        return PlayerResponse.model_validate(player)
    except PlayerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating player: {str(e)}")


@router.delete("/api/players/{player_id}", status_code=204)
async def delete_player(
    player_id: int,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Remove a player from the roster, with its invitations and applications."""
    try:
        await player_service.delete_roster_player(session, agent, player_id)
        return Response(status_code=204)
    except PlayerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error deleting player: {str(e)}")
