"""
Base collector for Threatboard.

This module provides the base framework for sample collection. A collector
is an asynchronous origin of samples: it is started with a sink (normally
AggregationStore.append) and pushes every sample it produces into it.
"""

from abc import ABC, abstractmethod
from typing import Callable

from threatboard.models.sample import Sample


SampleSink = Callable[[Sample], None]


class BaseCollector(ABC):
    """
    Base collector class for all sample origins.

    Collectors never read the state of the sink they feed. start() and stop()
    must be called from the event loop that owns the sink; samples are only
    handed to the sink on that loop.
    """

    def __init__(self):
        """Initialize the collector."""
        self.name = "base"
        self.source_type = ""
        self.running = False

    @abstractmethod
    def start(self, sink: SampleSink) -> None:
        """
        Start producing samples into the sink.

        Args:
            sink: Callable receiving each sample.
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop producing samples. Safe to call when not running."""
        pass

    def __repr__(self):
        return f"<{type(self).__name__} {self.name} running={self.running}>"
