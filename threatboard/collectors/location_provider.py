"""
Location providers for Threatboard.

This module provides the push-based location event source used by the
location collector, and a simulated implementation that walks around a
starting coordinate.
"""

import asyncio
import enum
import random
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from threatboard.core.config import settings
from threatboard.core.logging import logger
from threatboard.models.sample import Location


LocationHandler = Callable[[Sequence[Location]], None]


class AuthorizationStatus(str, enum.Enum):
    """Enumeration of location authorization outcomes."""
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    AUTHORIZED_WHEN_IN_USE = "authorized_when_in_use"


class LocationProvider(ABC):
    """
    Push-based source of location updates.

    Each update delivers a batch of locations, most relevant first. The
    handler may be called from any thread.
    """

    @abstractmethod
    def request_authorization(self) -> AuthorizationStatus:
        """
        Ask for in-use location access.

        Returns:
            The resulting authorization status.
        """
        pass

    @abstractmethod
    def start_updates(self, handler: LocationHandler) -> None:
        """
        Start delivering location batches to the handler.

        Args:
            handler: Called with each batch of locations.
        """
        pass

    @abstractmethod
    def stop_updates(self) -> None:
        """Stop delivering location batches."""
        pass


class SimulatedLocationProvider(LocationProvider):
    """
    Simulated device location provider.

    Emits one single-location batch every interval while running, moving a
    small random step from the previous fix. Batches can also be injected
    with push() to model the device reporting on its own.
    """

    def __init__(
        self,
        authorized: Optional[bool] = None,
        interval: Optional[float] = None,
        start: Location = Location(latitude=37.7749, longitude=-122.4194),
        step_degrees: float = 0.001,
        seed: Optional[int] = None,
    ):
        """
        Initialize the simulated provider.

        Args:
            authorized: Outcome of the authorization request.
                Defaults to settings.LOCATION_AUTHORIZED.
            interval: Seconds between emitted fixes.
                Defaults to settings.LOCATION_UPDATE_INTERVAL_SECONDS.
            start: First position of the walk.
            step_degrees: Maximum move per fix on each axis.
            seed: Random seed for a reproducible walk.
        """
        self.authorized = settings.LOCATION_AUTHORIZED if authorized is None else authorized
        self.interval = settings.LOCATION_UPDATE_INTERVAL_SECONDS if interval is None else interval
        self.position = start
        self.step_degrees = step_degrees
        self.status = AuthorizationStatus.NOT_DETERMINED
        self._random = random.Random(seed)
        self._handler: Optional[LocationHandler] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def updating(self) -> bool:
        return self._handler is not None

    def request_authorization(self) -> AuthorizationStatus:
        if self.status is AuthorizationStatus.NOT_DETERMINED:
            self.status = (
                AuthorizationStatus.AUTHORIZED_WHEN_IN_USE
                if self.authorized
                else AuthorizationStatus.DENIED
            )
        return self.status

    def start_updates(self, handler: LocationHandler) -> None:
        """Start the periodic walk on the running loop."""
        if self.status is not AuthorizationStatus.AUTHORIZED_WHEN_IN_USE:
            logger.warning("Location updates requested without authorization, ignoring")
            return
        self._handler = handler
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self._walk(), name="simulated-location"
            )

    def stop_updates(self) -> None:
        self._handler = None
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def push(self, locations: Sequence[Location]) -> None:
        """
        Deliver a batch of locations to the current handler.

        Does nothing while updates are stopped.
        """
        handler = self._handler
        if handler is not None:
            handler(list(locations))

    def next_location(self) -> Location:
        """Move one random step and return the new position."""
        step = self.step_degrees
        self.position = Location(
            latitude=max(-90.0, min(90.0, self.position.latitude + self._random.uniform(-step, step))),
            longitude=(self.position.longitude + self._random.uniform(-step, step) + 180.0) % 360.0 - 180.0,
            horizontal_accuracy=round(self._random.uniform(5.0, 65.0), 1),
        )
        return self.position

    async def _walk(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.push([self.next_location()])
