"""
Aggregation store for Threatboard.

This module provides the observable store that accumulates threat samples
and derives the dashboard threat level and warning message from them.
"""

from typing import Callable, List, Optional, Sequence

from threatboard.core.config import settings
from threatboard.core.logging import logger
from threatboard.models.sample import Sample
from threatboard.models.state import AggregationState


Subscriber = Callable[[AggregationState], None]
Aggregator = Callable[[Sequence[Sample]], int]


def _truncated_div(total: int, count: int) -> int:
    # Rounds toward zero, so negative scores behave like positive ones
    quotient = abs(total) // count
    return quotient if total >= 0 else -quotient


def mean_threat_level(samples: Sequence[Sample]) -> int:
    """
    Integer mean of the sample threat levels.

    Args:
        samples: Samples to aggregate.

    Returns:
        Mean threat level truncated to an integer, or 0 for no samples.
    """
    if not samples:
        return 0
    total = sum(sample.threat_level for sample in samples)
    return _truncated_div(total, len(samples))


class RunningMean:
    """
    Incremental replacement for mean_threat_level.

    Keeps a running sum and only reads samples it has not seen yet, so the
    aggregation step is O(1) per append on an append-only store. Building
    the snapshot still copies the sample list, which stays O(n).
    An instance must be bound to a single store.
    """

    def __init__(self):
        self.total = 0
        self.count = 0

    def __call__(self, samples: Sequence[Sample]) -> int:
        if len(samples) < self.count:
            # Different or reset sequence, start over
            self.total = 0
            self.count = 0
        for sample in samples[self.count:]:
            self.total += sample.threat_level
        self.count = len(samples)
        if not self.count:
            return 0
        return _truncated_div(self.total, self.count)


class Subscription:
    """
    Handle returned by AggregationStore.subscribe.

    Disposing it unregisters the callback; disposing twice is a no-op. It can
    also be used as a context manager.
    """

    def __init__(self, store: "AggregationStore", callback: Subscriber):
        self._store = store
        self.callback = callback
        self.active = True

    def dispose(self) -> None:
        """Stop delivering notifications to this subscriber."""
        if not self.active:
            return
        self.active = False
        self._store._remove(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()

    def __repr__(self):
        return f"<Subscription {getattr(self.callback, '__name__', self.callback)!s} active={self.active}>"


class AggregationStore:
    """
    Observable store of threat samples.

    Samples are only ever appended. After every append the threat level is
    recomputed from the full sample sequence, the warning message is derived
    from it, and every subscriber is called synchronously with a snapshot.

    The store is not thread-safe: all calls must come from the thread (or
    event loop) that owns it. Collectors hand samples over to that context
    before appending.
    """

    def __init__(
        self,
        aggregate: Optional[Aggregator] = None,
        warning_threshold: Optional[int] = None,
        warning_message: Optional[str] = None,
    ):
        """
        Initialize the store.

        Args:
            aggregate: Function deriving the threat level from the samples.
                Defaults to mean_threat_level.
            warning_threshold: Threat levels strictly above this raise the
                warning. Defaults to settings.WARNING_THRESHOLD.
            warning_message: Warning text. Defaults to settings.WARNING_MESSAGE.

        Raises:
            ValueError: If the warning message is empty.
        """
        self.aggregate = aggregate or mean_threat_level
        self.warning_threshold = (
            settings.WARNING_THRESHOLD if warning_threshold is None else warning_threshold
        )
        self.warning_message = (
            settings.WARNING_MESSAGE if warning_message is None else warning_message
        )
        if not self.warning_message:
            raise ValueError("warning_message must not be empty")
        self._samples: List[Sample] = []
        self._subscriptions: List[Subscription] = []
        self._state = AggregationState()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def current_state(self) -> AggregationState:
        """
        Get the current state.

        Returns:
            Immutable snapshot; later appends do not affect it.
        """
        return self._state

    def append(self, sample: Sample) -> None:
        """
        Append a sample, recompute derived state and notify subscribers.

        Args:
            sample: Sample to append.
        """
        self._samples.append(sample)
        previous = self._state
        self._state = self._recompute()

        logger.debug(
            f"Appended {sample.origin.value} sample {sample.id} "
            f"(threat {sample.threat_level}), threat level now {self._state.threat_level} "
            f"over {len(self._samples)} samples"
        )
        if self._state.has_warning and not previous.has_warning:
            logger.warning(f"Threat level {self._state.threat_level} above {self.warning_threshold}")
        elif previous.has_warning and not self._state.has_warning:
            logger.info(f"Threat level back to {self._state.threat_level}, warning cleared")

        self._notify(self._state)

    def subscribe(self, callback: Subscriber) -> Subscription:
        """
        Register a callback for state changes.

        The callback is called once right away with the current state, then
        once per append.

        Args:
            callback: Called with an AggregationState snapshot.

        Returns:
            Subscription handle; dispose it to unregister.
        """
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        self._deliver(subscription, self._state)
        return subscription

    def _recompute(self) -> AggregationState:
        samples = tuple(self._samples)
        if samples:
            threat_level = self.aggregate(samples)
        else:
            threat_level = 0
        warning = self.warning_message if threat_level > self.warning_threshold else ""
        return AggregationState(
            samples=samples,
            threat_level=threat_level,
            warning_message=warning,
        )

    def _notify(self, state: AggregationState) -> None:
        # Copy so callbacks may subscribe or dispose while we iterate
        for subscription in list(self._subscriptions):
            self._deliver(subscription, state)

    def _deliver(self, subscription: Subscription, state: AggregationState) -> None:
        if not subscription.active:
            return
        try:
            subscription.callback(state)
        except Exception as e:
            # A failing subscriber must not stop the others; state is already committed
            logger.error(f"Subscriber {subscription!r} failed: {e}", exc_info=True)

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
