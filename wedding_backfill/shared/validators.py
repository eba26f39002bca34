"""Shared validation utilities"""

import math
import re
from typing import Optional

# "12", "12 bis", "12ter,", "3-5" at the start of a street line
HOUSE_NUMBER_RE = re.compile(r"^\s*\d+(?:\s*-\s*\d+)?\s*(?:bis|ter|quater|[a-d])?\b[\s,]*", re.IGNORECASE)

# Placeholders left by the scrapers instead of real values
PLACEHOLDER_POSTAL_CODES = {"00000"}
PLACEHOLDER_REGIONS = {"région non spécifiée"}


def has_valid_coordinates(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """
    Check that a latitude/longitude pair is usable.

    Both values must be set, finite, and inside -90..90 / -180..180.
    """
    if latitude is None or longitude is None:
        return False
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return False
    if not math.isfinite(lat) or not math.isfinite(lon):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def clean_address_part(value: Optional[str]) -> str:
    """Collapse whitespace and drop scraper placeholders"""
    if not value:
        return ""
    cleaned = re.sub(r"\s+", " ", str(value)).strip()
    if cleaned in PLACEHOLDER_POSTAL_CODES or cleaned.lower() in PLACEHOLDER_REGIONS:
        return ""
    return cleaned


def strip_house_number(street: Optional[str]) -> str:
    """Remove the leading house number from a street line"""
    cleaned = clean_address_part(street)
    if not cleaned:
        return ""
    return HOUSE_NUMBER_RE.sub("", cleaned, count=1).strip()


def normalize_name(name: Optional[str]) -> str:
    """Normalize an entity name for case-insensitive matching"""
    return (name or "").strip().lower()
