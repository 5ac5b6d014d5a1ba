"""Registration, login and profile route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.api.routes import limiter, INVALID_CREDENTIALS_RESPONSE
from agentsport.api.auth_dependencies import get_current_user
from agentsport.database.db import get_db_session
from agentsport.services import account_service, user_service
from agentsport.services.representation_service import AgentNotFoundError
from agentsport.models.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/api/auth/register", response_model=AuthResponse)
@limiter.limit("10/minute")
async def register(
    request: Request,
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Register an agent, player or club account and log it in.

    Players may name their agent: ``agentData.id`` for an agency already on
    the platform, or ``agentData.email`` to invite one.
    """
    try:
        result = await account_service.register_user(
            session,
            email=payload.email,
            password=payload.password,
            role=payload.role,
            first_name=payload.first_name,
            last_name=payload.last_name,
            agency_name=payload.agency_name,
            club_name=payload.club_name,
            representation_mode=payload.representation_mode,
            agent_data=payload.agent_data.model_dump() if payload.agent_data else None,
        )
        user = result["user"]
        tokens = await account_service.issue_tokens(session, user, result["profile"])
        return AuthResponse(
            **tokens,
            user=UserResponse(id=user["id"], email=user["email"], role=user["role"]),
            representation_status=result["representation_status"],
        )
    except HTTPException:
        raise
    except user_service.UserAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except AgentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error during registration: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error during registration: {str(e)}")


@router.post("/api/auth/login", response_model=AuthResponse)
@limiter.limit("20/minute")
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Login with email and password."""
    try:
        user = await account_service.authenticate(session, payload.email, payload.password)
        if not user:
            raise INVALID_CREDENTIALS_RESPONSE

        tokens = await account_service.issue_tokens(session, user)
        return AuthResponse(
            **tokens,
            user=UserResponse(id=user["id"], email=user["email"], role=user["role"]),
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error during login: {str(e)}")


@router.get("/api/auth/profile")
async def get_profile(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Current user plus the ids of their role profile."""
    profile = await user_service.get_role_profile(session, current_user["id"], current_user["role"])
    return {
        "id": current_user["id"],
        "email": current_user["email"],
        "role": current_user["role"],
        **profile,
    }
