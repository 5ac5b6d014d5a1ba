"""Club catalog route handlers: autocomplete search and new-club proposals."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.api.auth_dependencies import get_current_user
from agentsport.database.db import get_db_session
from agentsport.services import club_catalog_service
from agentsport.models.schemas import ClubCatalogResponse, ProposeClubRequest

logger = logging.getLogger(__name__)
router = APIRouter()

MIN_SEARCH_LENGTH = 2
MIN_NAME_LENGTH = 3


@router.get("/api/clubs/search", response_model=List[ClubCatalogResponse])
async def search_clubs(q: str = "", session: AsyncSession = Depends(get_db_session)):
    """Autocomplete over the club catalog. Queries under 2 characters return nothing."""
    query = q.strip()
    if len(query) < MIN_SEARCH_LENGTH:
        return []
    try:
        clubs = await club_catalog_service.search_catalog(session, query)
        return [ClubCatalogResponse.model_validate(club) for club in clubs]
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error searching clubs: {str(e)}")


@router.post("/api/clubs/propose", response_model=ClubCatalogResponse, status_code=201)
async def propose_club(
    request: ProposeClubRequest,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Propose a club that is missing from the catalog.

    Rejected with 409 when the name matches an existing club exactly or is
    too similar to one; the detail lists the matching names.
    """
    name = (request.name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        raise HTTPException(status_code=400, detail="Club name must be at least 3 characters")

    try:
        club = await club_catalog_service.propose_club(session, name)
        logger.info("User %d proposed club %d", current_user["id"], club.id)
        return ClubCatalogResponse.model_validate(club)
    except club_catalog_service.ClubDuplicateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error proposing club: {str(e)}")
