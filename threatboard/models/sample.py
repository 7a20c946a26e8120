"""
Sample model for Threatboard.

This module provides the immutable threat observation and its location.
"""

import enum
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from threatboard.utils.helpers import generate_id, utc_now


class SampleOrigin(str, enum.Enum):
    """Enumeration of sample origins."""
    BULK_FETCH = "bulk_fetch"
    LOCATION = "location"


class Location(BaseModel):
    """
    Geographic fix with accuracy metadata.

    Only the coordinate pair is required; the remaining fields are filled in
    when the location provider reports them.
    """
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    altitude: Optional[float] = None
    horizontal_accuracy: Optional[float] = None  # meters
    vertical_accuracy: Optional[float] = None  # meters
    speed: Optional[float] = None  # m/s
    course: Optional[float] = None  # degrees from true north


class Sample(BaseModel):
    """
    A single threat observation.

    threat_level is nominally 0-100 but is taken as given.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    threat_level: int
    location: Optional[Location] = None
    timestamp: datetime = Field(default_factory=utc_now)
    origin: SampleOrigin = SampleOrigin.BULK_FETCH

    def __repr__(self):
        return f"<Sample {self.id}: {self.threat_level} ({self.origin.value})>"
