"""Application route handlers: players apply to agencies, agencies answer."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.api.auth_dependencies import get_current_agent, require_player
from agentsport.database.db import get_db_session
from agentsport.database.models import Agent
from agentsport.services import application_service
from agentsport.services.representation_service import AgentNotFoundError, PlayerNotFoundError
from agentsport.models.schemas import (
    ApplicationResponse,
    CreateApplicationRequest,
    UpdateApplicationStatusRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/applications", response_model=ApplicationResponse, status_code=201)
async def create_application(
    request: CreateApplicationRequest,
    current_user: dict = Depends(require_player),
    session: AsyncSession = Depends(get_db_session),
):
    """Ask an agency to represent the requesting player."""
    try:
        return await application_service.create_application(
            session, current_user["id"], request.agent_id, request.message
        )
    except (PlayerNotFoundError, AgentNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except application_service.ApplicationConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error creating application: {str(e)}")


@router.get("/api/applications/mine", response_model=List[ApplicationResponse])
async def list_my_applications(
    current_user: dict = Depends(require_player),
    session: AsyncSession = Depends(get_db_session),
):
    """Applications sent by the requesting player."""
    try:
        return await application_service.list_applications_for_player(session, current_user["id"])
    except PlayerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/api/applications/received", response_model=List[ApplicationResponse])
async def list_received_applications(
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Pending applications addressed to the requesting agency."""
    return await application_service.list_applications_for_agent(session, agent.id)


@router.patch("/api/applications/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: int,
    request: UpdateApplicationStatusRequest,
    agent: Agent = Depends(get_current_agent),
    session: AsyncSession = Depends(get_db_session),
):
    """Accept or reject an application. Accepting makes the player represented."""
    try:
        return await application_service.update_application_status(
            session, agent.id, application_id, request.status
        )
    except application_service.ApplicationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating application: {str(e)}")
