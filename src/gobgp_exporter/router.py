"""
RouterNode: one GoBGP session and the state that outlives a scrape.

Only two things persist between scrapes: whether the daemon is reachable,
and how many queries have failed since start. Everything else is fetched
fresh each time.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import List, Optional, Sequence

import grpc

from gobgp_exporter.client import describe_error
from gobgp_exporter.collector.base import Collector
from gobgp_exporter.collector.peers import PeerCollector
from gobgp_exporter.collector.rib import RibCollector
from gobgp_exporter.metrics import MetricSample, Scrape

log = logging.getLogger(__name__)


class RouterNode:

    def __init__(self, client, collectors: Optional[Sequence[Collector]] = None):
        self.client = client
        self.collectors: List[Collector] = list(collectors) if collectors else [
            PeerCollector(),
            RibCollector(),
        ]
        self.connected = False
        self.errors = 0
        self._lock = threading.Lock()

    def connect(self) -> bool:
        """Probe the daemon and update the connectivity flag."""
        try:
            self.client.get_bgp()
        except grpc.RpcError as err:
            log.error("GoBGP at %s is unreachable: %s", self.client.name(), describe_error(err))
            self.connected = False
            self.errors += 1
            return False

        if not self.connected:
            log.info("Connected to %s", self.client.name())
        self.connected = True
        return True

    def scrape(self) -> Scrape:
        """Run every collector once, in order, and merge what they return.

        Serialized per node: the HTTP server may call this from several
        threads at once.
        """
        with self._lock:
            start = time.monotonic()
            errors_before = self.errors

            if not self.connected:
                self.connect()

            samples: List[MetricSample] = []
            if self.connected:
                for collector in self.collectors:
                    result = collector.collect(self)
                    samples.extend(result.samples)
                    self.errors += result.errors
                    if not result.connected and self.connected:
                        log.warning("Lost connection to %s during %s collection",
                                    self.client.name(), collector.name())
                        self.connected = False

            return Scrape(
                samples=tuple(samples),
                errors=self.errors - errors_before,
                connected=self.connected,
                duration_seconds=time.monotonic() - start,
            )

    def name(self) -> str:
        return self.client.name()

    def close(self):
        self.client.close()
