"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, constants) lives here; every sub-router
imports what it needs from this package.
"""

import os

from fastapi import APIRouter, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
limiter = Limiter(key_func=get_remote_address)
if IS_TEST_ENV:

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = no_op_limit

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------
INVALID_CREDENTIALS_RESPONSE = HTTPException(
    status_code=401, detail="Email or password is incorrect"
)

# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from agentsport.api.routes.auth import router as auth_router  # noqa: E402
from agentsport.api.routes.clubs import router as clubs_router  # noqa: E402
from agentsport.api.routes.agents import router as agents_router  # noqa: E402
from agentsport.api.routes.players import router as players_router  # noqa: E402
from agentsport.api.routes.applications import router as applications_router  # noqa: E402
from agentsport.api.routes.public import router as public_router  # noqa: E402

router = APIRouter()
router.include_router(auth_router)
router.include_router(clubs_router)
router.include_router(agents_router)
router.include_router(players_router)
router.include_router(applications_router)
router.include_router(public_router)
