"""
Threatboard.

Reactive threat dashboard core: collects samples from a bulk fetch and a
location stream and aggregates them into a single threat level.
"""

__version__ = "0.1.0"
