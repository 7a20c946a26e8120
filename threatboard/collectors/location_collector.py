"""
Location collector for Threatboard.

This module turns device location updates into threat samples.
"""

import asyncio
from typing import Optional, Sequence

from threatboard.core.config import settings
from threatboard.core.exceptions import CollectorError
from threatboard.core.logging import logger
from threatboard.collectors.base_collector import BaseCollector, SampleSink
from threatboard.collectors.location_provider import (
    AuthorizationStatus,
    LocationProvider,
)
from threatboard.models.sample import Location, Sample, SampleOrigin


class LocationCollector(BaseCollector):
    """
    Collector for device location updates.

    Every location batch yields one sample built from its first location,
    scored with a constant placeholder threat level. If location access is
    denied the collector simply never emits; location_available reports it.

    The stream cannot be restarted once stopped.
    """

    def __init__(self, provider: LocationProvider, threat_level: Optional[int] = None):
        """
        Initialize the location collector.

        Args:
            provider: Source of location batches.
            threat_level: Score given to every location sample.
                Defaults to settings.LOCATION_THREAT_LEVEL.
        """
        super().__init__()
        self.name = "Location"
        self.source_type = "location_stream"
        self.provider = provider
        self.threat_level = settings.LOCATION_THREAT_LEVEL if threat_level is None else threat_level
        self.authorization = AuthorizationStatus.NOT_DETERMINED
        self.location_available: Optional[bool] = None
        self.samples_emitted = 0
        self.stopped = False
        self._sink: Optional[SampleSink] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def start(self, sink: SampleSink) -> None:
        """
        Request authorization and start listening for location updates.

        Must be called on the loop that owns the sink; location batches
        arriving on other threads are handed over to it.

        Raises:
            CollectorError: If the stream is running or was stopped.
        """
        if self.running:
            raise CollectorError(f"{self.name} stream already running")
        if self.stopped:
            raise CollectorError(f"{self.name} stream cannot be restarted")

        self._loop = asyncio.get_running_loop()
        self.authorization = self.provider.request_authorization()
        if self.authorization is not AuthorizationStatus.AUTHORIZED_WHEN_IN_USE:
            self.location_available = False
            logger.warning(f"Location access {self.authorization.value}, location samples disabled")
            return

        self.location_available = True
        self._sink = sink
        self.running = True
        self.provider.start_updates(self.on_locations)
        logger.info(f"{self.name} stream started")

    def stop(self) -> None:
        """Stop listening; pending handoffs are dropped."""
        if self.stopped:
            return
        self.stopped = True
        if self.running:
            self.provider.stop_updates()
            self.running = False
            logger.info(f"{self.name} stream stopped after {self.samples_emitted} samples")
        self._sink = None

    def on_locations(self, locations: Sequence[Location]) -> None:
        """
        Handle a batch of locations from the provider. Thread-safe.

        Args:
            locations: Batch of locations, most relevant first.
        """
        if not locations or not self.running or self._loop is None:
            return
        sample = Sample(
            threat_level=self.threat_level,
            location=locations[0],
            origin=SampleOrigin.LOCATION,
        )
        self._loop.call_soon_threadsafe(self._deliver, sample)

    def _deliver(self, sample: Sample) -> None:
        # Runs on the owning loop
        if not self.running or self._sink is None:
            return
        self.samples_emitted += 1
        self._sink(sample)
