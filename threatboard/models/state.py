"""
Aggregation state model for Threatboard.
"""

from typing import Tuple
from pydantic import BaseModel, ConfigDict

from threatboard.models.sample import Sample


class AggregationState(BaseModel):
    """
    Snapshot of the store: every sample in insertion order plus the derived
    threat level and warning message.

    Instances are frozen and hold a tuple of frozen samples, so a snapshot
    handed to a subscriber can never change under it.
    """
    model_config = ConfigDict(frozen=True)

    samples: Tuple[Sample, ...] = ()
    threat_level: int = 0
    warning_message: str = ""

    @property
    def sample_count(self) -> int:
        return len(self.samples)

    @property
    def has_warning(self) -> bool:
        return bool(self.warning_message)
