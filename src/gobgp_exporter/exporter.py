"""
Prometheus exposition.

GoBGPExporter is a custom prometheus_client collector: every time the
registry is collected (i.e. every HTTP scrape) it runs one RouterNode
scrape and converts the samples into metric families.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Iterator, List

from prometheus_client import CollectorRegistry, start_http_server
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from gobgp_exporter import metrics as m
from gobgp_exporter.metrics import MetricDef, MetricSample
from gobgp_exporter.router import RouterNode

log = logging.getLogger(__name__)


DEFAULT_LISTEN = "0.0.0.0"
DEFAULT_PORT = 9474


def build_families(samples: List[MetricSample]) -> List[GaugeMetricFamily]:
    """Group samples into one gauge family per definition, keeping first-seen order."""
    families: Dict[MetricDef, GaugeMetricFamily] = {}
    for sample in samples:
        family = families.get(sample.metric)
        if family is None:
            family = GaugeMetricFamily(
                sample.metric.name,
                sample.metric.documentation,
                labels=list(sample.metric.labels),
            )
            families[sample.metric] = family
        family.add_metric(list(sample.labels), sample.value)
    return list(families.values())


class GoBGPExporter:

    def __init__(self, node: RouterNode):
        self.node = node

    def collect(self) -> Iterator[Metric]:
        scrape = self.node.scrape()
        if scrape.errors:
            log.info("Scrape of %s finished with %d errors", self.node.name(), scrape.errors)

        yield GaugeMetricFamily(m.ROUTER_UP.name, m.ROUTER_UP.documentation,
                                value=1 if scrape.connected else 0)
        yield CounterMetricFamily(m.ROUTER_ERRORS.name, m.ROUTER_ERRORS.documentation,
                                  value=self.node.errors)
        yield GaugeMetricFamily(m.ROUTER_SCRAPE_DURATION.name, m.ROUTER_SCRAPE_DURATION.documentation,
                                value=scrape.duration_seconds)
        yield from build_families(list(scrape.samples))

    def describe(self) -> List[Metric]:
        # Registering shouldn't trigger a GoBGP query
        return []


def make_registry(node: RouterNode) -> CollectorRegistry:
    registry = CollectorRegistry()
    registry.register(GoBGPExporter(node))
    return registry


def serve(node: RouterNode, listen: str = DEFAULT_LISTEN, port: int = DEFAULT_PORT):
    """Expose /metrics and block until interrupted."""
    registry = make_registry(node)
    start_http_server(port, addr=listen, registry=registry)
    log.info("Serving metrics for %s at http://%s:%d/metrics", node.name(), listen, port)

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    log.info("Exporter stopped")
