"""
Dashboard API endpoints for Threatboard.

This module exposes the current aggregation state for display.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query

from threatboard.api.dependencies import get_session
from threatboard.models.sample import SampleOrigin
from threatboard.models.state import AggregationState
from threatboard.services.dashboard_session import DashboardSession

# Create router
router = APIRouter()


def serialize_state(state: AggregationState) -> Dict[str, Any]:
    """
    Convert a state snapshot to a JSON-ready dict.

    Args:
        state: Snapshot to serialize.

    Returns:
        Threat level, warning message and samples in insertion order.
    """
    return {
        "threat_level": state.threat_level,
        "warning_message": state.warning_message,
        "sample_count": state.sample_count,
        "samples": [sample.model_dump(mode="json") for sample in state.samples],
    }


@router.get("/state")
async def get_state(session: DashboardSession = Depends(get_session)):
    """
    Get the current dashboard state.

    Returns:
        Serialized aggregation state.
    """
    return serialize_state(session.store.current_state())


@router.get("/samples")
async def list_samples(
    session: DashboardSession = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    origin: Optional[SampleOrigin] = None,
):
    """
    List samples in insertion order.

    Args:
        session: Dashboard session.
        skip: Number of items to skip.
        limit: Maximum number of items to return.
        origin: Only include samples from this origin.

    Returns:
        Page of samples and the total matching.
    """
    samples = session.store.current_state().samples
    if origin is not None:
        samples = tuple(s for s in samples if s.origin == origin)

    return {
        "items": [s.model_dump(mode="json") for s in samples[skip:skip + limit]],
        "total": len(samples),
    }
