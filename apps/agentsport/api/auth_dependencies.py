"""
Authentication and role dependencies for FastAPI routes.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from agentsport.services import auth_service, user_service, agent_service
from agentsport.database.db import get_db_session
from agentsport.database.models import Agent, UserRole

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    session: AsyncSession = Depends(get_db_session),
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Resolve the bearer access token to a user dict.

    Raises 401 when the token is invalid or expired, or its user is gone.
    """
    payload = auth_service.verify_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid authentication token")

    user = await user_service.get_user_by_id(session, payload["user_id"])
    if user is None:
        raise _unauthorized("User not found")

    return user


def make_require_role(*roles: UserRole):
    """Build a dependency that admits only users holding one of ``roles``."""
    allowed = {UserRole(role).value for role in roles}

    async def _dep(user: dict = Depends(get_current_user)) -> dict:
        if user.get("role") not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{' or '.join(sorted(allowed)).capitalize()} access required",
            )
        return user

    return _dep


require_superadmin = make_require_role(UserRole.SUPERADMIN)
require_player = make_require_role(UserRole.PLAYER)


async def get_current_agent(
    user: dict = Depends(make_require_role(UserRole.AGENT)),
    session: AsyncSession = Depends(get_db_session),
) -> Agent:
    """
    Require an authenticated agent user and return their agency.

    Raises 403 if the user is not an agent or has no agency profile.
    """
    agent = await agent_service.get_agent_by_user_id(session, user["id"])
    if agent is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Agent profile required",
        )
    return agent
