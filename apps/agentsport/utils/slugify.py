"""URL-safe slug generation for public agency portfolio URLs."""

import re
import unicodedata
from typing import Optional

MAX_SLUG_LENGTH = 100


def slugify(text: str) -> str:
    """Convert text to a URL-safe slug (lowercase, hyphens, no special chars).

    Args:
        text: Text to slugify (e.g. "Pro Sports Management").

    Returns:
        Slugified text (e.g. "pro-sports-management").
    """
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")[:MAX_SLUG_LENGTH].rstrip("-")


def email_local_part(email: str) -> str:
    """Return the part of an email address before the ``@``."""
    return email.split("@", 1)[0]


def agency_base_slug(agency_name: Optional[str], email: str) -> str:
    """Base slug for an agency: its name, else the owner's email local part.

    Falls back to ``"agency"`` when neither yields any URL-safe characters.
    """
    base = slugify(agency_name) if agency_name else ""
    if not base:
        base = slugify(email_local_part(email))
    return base or "agency"
