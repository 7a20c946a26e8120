"""
Analytics collector for Threatboard.

This module provides the one-shot bulk fetch of security samples. There is
no real backend: the fetch waits a fixed latency and returns a preset batch.
"""

import asyncio
from typing import List, Optional, Sequence, Tuple

from threatboard.core.config import settings
from threatboard.core.exceptions import CollectorError
from threatboard.core.logging import logger
from threatboard.collectors.base_collector import BaseCollector, SampleSink
from threatboard.models.sample import Location, Sample, SampleOrigin


# (threat_level, location) pairs returned by the simulated backend
REFERENCE_PAYLOAD: Tuple[Tuple[int, Location], ...] = (
    (20, Location(latitude=37.7749, longitude=-122.4194)),  # San Francisco
    (30, Location(latitude=34.0522, longitude=-118.2437)),  # Los Angeles
    (40, Location(latitude=40.7128, longitude=-74.0060)),  # New York
)


class AnalyticsCollector(BaseCollector):
    """
    Collector for the simulated analytics backend.

    Fetches a finite batch of samples exactly once. The fetch runs as a task
    on the owning loop and can be cancelled with stop() while it is pending.
    """

    def __init__(
        self,
        latency: Optional[float] = None,
        payload: Optional[Sequence[Tuple[int, Optional[Location]]]] = None,
    ):
        """
        Initialize the analytics collector.

        Args:
            latency: Simulated fetch latency in seconds.
                Defaults to settings.FETCH_LATENCY_SECONDS.
            payload: (threat_level, location) pairs to return.
                Defaults to REFERENCE_PAYLOAD.
        """
        super().__init__()
        self.name = "Analytics"
        self.source_type = "bulk_fetch"
        self.latency = settings.FETCH_LATENCY_SECONDS if latency is None else latency
        self.payload = list(REFERENCE_PAYLOAD if payload is None else payload)
        self.fetched = False
        self.cancelled = False
        self._task: Optional[asyncio.Task] = None

    async def fetch(self) -> List[Sample]:
        """
        Fetch the batch of samples.

        Returns:
            Samples in backend order.

        Raises:
            CollectorError: If the fetch was already performed.
        """
        if self.fetched:
            raise CollectorError(f"{self.name} fetch is one-shot and already ran")
        self.fetched = True

        logger.info(f"Fetching security samples from {self.name} (latency {self.latency}s)")
        await asyncio.sleep(self.latency)

        return [
            Sample(threat_level=threat_level, location=location, origin=SampleOrigin.BULK_FETCH)
            for threat_level, location in self.payload
        ]

    async def collect(self, sink: SampleSink) -> List[Sample]:
        """
        Fetch the batch and append each sample to the sink in order.

        Args:
            sink: Callable receiving each sample.

        Returns:
            The delivered samples.
        """
        samples = await self.fetch()
        for sample in samples:
            sink(sample)
        logger.info(f"Collected {len(samples)} samples from {self.name}")
        return samples

    def start(self, sink: SampleSink) -> None:
        """
        Start the fetch as a task on the running loop.

        Raises:
            CollectorError: If the fetch was already started.
        """
        if self._task is not None or self.fetched:
            raise CollectorError(f"{self.name} fetch already started")
        loop = asyncio.get_running_loop()
        self.running = True
        self._task = loop.create_task(self._run(sink), name=f"{self.name}-fetch")

    async def _run(self, sink: SampleSink) -> List[Sample]:
        try:
            return await self.collect(sink)
        except asyncio.CancelledError:
            logger.info(f"{self.name} fetch cancelled")
            raise
        finally:
            self.running = False

    def cancel(self) -> bool:
        """
        Cancel the fetch if it is still pending.

        Returns:
            True if a pending fetch was cancelled.
        """
        if self._task is None or self._task.done():
            return False
        self._task.cancel()
        self.cancelled = True
        self.running = False
        return True

    def stop(self) -> None:
        """Stop the collector; for a one-shot fetch this is cancel()."""
        self.cancel()

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> List[Sample]:
        """
        Wait for a started fetch to finish.

        Returns:
            The delivered samples, or an empty list if the fetch was cancelled.
        """
        if self._task is None:
            return []
        try:
            return await self._task
        except asyncio.CancelledError:
            if self._task.cancelled():
                return []
            raise
