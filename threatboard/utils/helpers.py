"""
Helper utilities for Threatboard.

This module provides general utility functions.
"""

import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """
    Generate a unique ID.

    Returns:
        Unique ID string.
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_coordinate(latitude: float, longitude: float, precision: int = 4) -> str:
    """
    Format a coordinate pair for display.

    Args:
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
        precision: Number of decimal places.

    Returns:
        Formatted "lat, lon" string.
    """
    return f"{latitude:.{precision}f}, {longitude:.{precision}f}"


def format_sample_row(sample) -> str:
    """
    Render a sample as a single dashboard list row.

    Args:
        sample: Sample to render.

    Returns:
        Row text with location, timestamp and threat level.
    """
    if sample.location is not None:
        where = format_coordinate(sample.location.latitude, sample.location.longitude)
    else:
        where = "n/a"
    return (
        f"Location: {where} | "
        f"Timestamp: {sample.timestamp.isoformat()} | "
        f"Threat Level: {sample.threat_level}"
    )

