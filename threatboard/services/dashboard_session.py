"""
Dashboard session service for Threatboard.

This module wires the aggregation store to its sample collectors and owns
their start/stop lifecycle.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from threatboard.core.config import settings
from threatboard.core.exceptions import SessionError
from threatboard.core.logging import logger
from threatboard.collectors.analytics_collector import AnalyticsCollector
from threatboard.collectors.base_collector import BaseCollector
from threatboard.collectors.location_collector import LocationCollector
from threatboard.collectors.location_provider import SimulatedLocationProvider
from threatboard.services.aggregation_store import AggregationStore
from threatboard.utils.helpers import utc_now


class DashboardSession:
    """
    One dashboard session.

    Owns an AggregationStore and feeds it from a bulk fetch collector and a
    location collector. Both collectors deliver on the loop the session was
    started on, so every append and notification happens there. Nothing is
    kept after stop().
    """

    def __init__(
        self,
        store: AggregationStore,
        analytics: Optional[AnalyticsCollector] = None,
        location: Optional[LocationCollector] = None,
    ):
        """
        Initialize the session.

        Args:
            store: Store receiving every sample.
            analytics: Bulk fetch collector, or None to skip it.
            location: Location collector, or None to skip it.
        """
        self.store = store
        self.analytics = analytics
        self.location = location
        self.started_at: Optional[datetime] = None
        self.stopped_at: Optional[datetime] = None

    @property
    def collectors(self) -> List[BaseCollector]:
        return [c for c in (self.analytics, self.location) if c is not None]

    @property
    def running(self) -> bool:
        return self.started_at is not None and self.stopped_at is None

    @property
    def location_available(self) -> Optional[bool]:
        if self.location is None:
            return False
        return self.location.location_available

    def start(self) -> None:
        """
        Start every collector on the running loop.

        Raises:
            SessionError: If the session was already started.
        """
        if self.started_at is not None:
            raise SessionError("Dashboard session already started")
        self.started_at = utc_now()
        logger.info("Starting dashboard session")

        if self.location is not None:
            self.location.start(self.store.append)
        if self.analytics is not None:
            self.analytics.start(self.store.append)

    def stop(self) -> None:
        """Stop the location stream and cancel a pending fetch."""
        if not self.running:
            return
        logger.info("Stopping dashboard session")
        for collector in self.collectors:
            collector.stop()
        self.stopped_at = utc_now()

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.stop()

    def status(self) -> Dict[str, Any]:
        """
        Summarize the session for health reporting.

        Returns:
            Session status information.
        """
        state = self.store.current_state()
        return {
            "running": self.running,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "sample_count": state.sample_count,
            "threat_level": state.threat_level,
            "subscribers": self.store.subscriber_count,
            "location_available": self.location_available,
            "collectors": [
                {"name": c.name, "type": c.source_type, "running": c.running}
                for c in self.collectors
            ],
        }


def create_session(
    fetch: bool = True,
    locations: bool = True,
    store: Optional[AggregationStore] = None,
) -> DashboardSession:
    """
    Build a session from the application settings.

    Args:
        fetch: Include the bulk fetch collector.
        locations: Include the simulated location collector.
        store: Store to feed. A new one is created if omitted.

    Returns:
        A session ready to be started.
    """
    store = store or AggregationStore(
        warning_threshold=settings.WARNING_THRESHOLD,
        warning_message=settings.WARNING_MESSAGE,
    )
    analytics = AnalyticsCollector(latency=settings.FETCH_LATENCY_SECONDS) if fetch else None
    location = None
    if locations:
        provider = SimulatedLocationProvider(
            authorized=settings.LOCATION_AUTHORIZED,
            interval=settings.LOCATION_UPDATE_INTERVAL_SECONDS,
        )
        location = LocationCollector(provider, threat_level=settings.LOCATION_THREAT_LEVEL)
    return DashboardSession(store, analytics=analytics, location=location)
