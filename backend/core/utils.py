"""
Utility functions for the agent workspace.

Includes:
- Slug generation
- Pagination helpers
- UTC datetime helpers
"""

import re
from datetime import datetime, timezone
from typing import Iterator


def generate_slug(name: str) -> str:
    """
    Generate a URL-friendly slug from a string.

    Converts to lowercase, replaces spaces with hyphens, removes special characters.

    Args:
        name: String to convert to slug

    Returns:
        URL-friendly slug
    """
    # Convert to lowercase
    slug = name.lower()

    # Replace spaces with hyphens
    slug = re.sub(r"\s+", "-", slug)

    # Remove special characters, keep only alphanumeric and hyphens
    slug = re.sub(r"[^a-z0-9\-]", "", slug)

    # Remove multiple consecutive hyphens
    slug = re.sub(r"-+", "-", slug)

    # Remove leading/trailing hyphens
    slug = slug.strip("-")

    return slug or "organization"


def slug_candidates(base_slug: str) -> Iterator[str]:
    """Yield ``base``, ``base-1``, ``base-2``, ... for uniqueness probing."""
    yield base_slug
    counter = 1
    while True:
        yield f"{base_slug}-{counter}"
        counter += 1


def utc_now() -> datetime:
    """
    Get the current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)


def calculate_offset(page: int = 1, per_page: int = 20) -> int:
    """
    Calculate database offset from page and per_page values.

    Args:
        page: Page number (1-indexed)
        per_page: Items per page

    Returns:
        Offset for database queries
    """
    return (page - 1) * per_page
