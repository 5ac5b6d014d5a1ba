"""
Club catalog service layer.

Search for autocomplete, and the "propose a new club" flow that keeps the
catalog free of exact and near-duplicate names.
"""

import logging
from typing import List

from rapidfuzz.distance import Levenshtein
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from agentsport.database.models import ClubCatalog

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.8
"""Candidates scoring strictly above this are near-duplicates."""

CANDIDATE_PREFIX_LENGTH = 3
CANDIDATE_LIMIT = 50
SEARCH_LIMIT = 10


class ClubDuplicateError(ValueError):
    """Raised when a proposed club name matches an existing catalog entry."""

    def __init__(self, message: str, matches: List[str], exact: bool):
        super().__init__(message)
        self.matches = matches
        self.exact = exact


def _escape_like(value: str) -> str:
    """Escape LIKE-special characters (%, _) so they match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def similarity(a: str, b: str) -> float:
    """
    Normalised Levenshtein similarity of two names, case-insensitive.

    Returns (longest - distance) / longest, in [0, 1]. Two empty strings
    are identical (1.0).
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    distance = Levenshtein.distance(a.lower(), b.lower())
    return (longest - distance) / longest


async def search_catalog(session: AsyncSession, query: str) -> List[ClubCatalog]:
    """
    Case-insensitive substring search on official or short name.

    Verified clubs come first, then alphabetical. At most SEARCH_LIMIT rows.
    """
    if not query:
        return []

    pattern = f"%{_escape_like(query)}%"
    stmt = (
        select(ClubCatalog)
        .where(
            or_(
                ClubCatalog.official_name.ilike(pattern, escape="\\"),
                ClubCatalog.short_name.ilike(pattern, escape="\\"),
            )
        )
        .order_by(ClubCatalog.is_verified.desc(), ClubCatalog.official_name.asc())
        .limit(SEARCH_LIMIT)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def propose_club(session: AsyncSession, name: str) -> ClubCatalog:
    """
    Add a club to the catalog unless it duplicates an existing entry.

    Args:
        session: Database session
        name: Proposed official name

    Returns:
        The new, unverified ClubCatalog row

    Raises:
        ClubDuplicateError: On an exact (case-insensitive) match, or when any
            candidate sharing the first three characters scores above
            SIMILARITY_THRESHOLD
    """
    exact = await session.execute(
        select(ClubCatalog).where(ClubCatalog.official_name.ilike(_escape_like(name), escape="\\"))
    )
    existing = exact.scalars().first()

    prefix = _escape_like(name[:CANDIDATE_PREFIX_LENGTH])
    candidates = await session.execute(
        select(ClubCatalog)
        .where(ClubCatalog.official_name.ilike(f"%{prefix}%", escape="\\"))
        .limit(CANDIDATE_LIMIT)
    )
    candidates = candidates.scalars().all()

    # Some backends only fold ASCII in ILIKE
    if existing is None:
        existing = next(
            (club for club in candidates if club.official_name.casefold() == name.casefold()),
            None,
        )
    if existing is not None:
        logger.info("Rejected club proposal '%s': exact match %d", name, existing.id)
        raise ClubDuplicateError(
            f"Club already exists: {existing.official_name}",
            matches=[existing.official_name],
            exact=True,
        )

    near = [
        club.official_name
        for club in candidates
        if similarity(name, club.official_name) > SIMILARITY_THRESHOLD
    ]
    if near:
        logger.info("Rejected club proposal '%s': similar to %s", name, near)
        raise ClubDuplicateError(
            f"Similar clubs already exist: {', '.join(near)}",
            matches=near,
            exact=False,
        )

    club = ClubCatalog(official_name=name, is_verified=False)
    session.add(club)
    await session.commit()
    await session.refresh(club)

    logger.info("Added club %d '%s' to catalog (unverified)", club.id, name)
    return club
