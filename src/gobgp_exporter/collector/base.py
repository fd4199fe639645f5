"""
Base collector interface.

A collector runs one kind of GoBGP query against a RouterNode and hands
back a CollectionResult. It must never raise for daemon-side failures:
those are counted in the result so the rest of the scrape can go ahead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from gobgp_exporter.metrics import CollectionResult

if TYPE_CHECKING:
    from gobgp_exporter.router import RouterNode


class Collector(ABC):
    """Interface for all per-scrape collectors."""

    @abstractmethod
    def collect(self, node: RouterNode) -> CollectionResult:
        """Query the daemon once and return the samples produced."""
        ...

    @abstractmethod
    def name(self) -> str:
        ...
