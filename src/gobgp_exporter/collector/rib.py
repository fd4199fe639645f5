"""
RIB collector. Counts destinations per routing table and address family.

Walks every table type x SAFI x AFI the daemon's API knows about, in the
order the API lists them, and only queries the combinations enabled by
the resource-type and address-family allow-sets.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import grpc

from gobgp_exporter import metrics as m
from gobgp_exporter.client import describe_error, is_unreachable
from gobgp_exporter.collector.base import Collector
from gobgp_exporter.families import (
    family_label,
    parse_name_set,
    resolve_table_type,
    safi_key,
    table_type_key,
)
from gobgp_exporter.metrics import CollectionResult, MetricSample

log = logging.getLogger(__name__)


DEFAULT_RESOURCE_TYPES = ("GLOBAL", "LOCAL")
DEFAULT_ADDRESS_FAMILIES = ("UNICAST",)


class RibCollector(Collector):

    def __init__(
        self,
        resource_types: Optional[Iterable[str] | str] = DEFAULT_RESOURCE_TYPES,
        address_families: Optional[Iterable[str] | str] = DEFAULT_ADDRESS_FAMILIES,
    ):
        self.resource_types = parse_name_set(resource_types, key=table_type_key)
        self.address_families = parse_name_set(address_families, key=safi_key)

    def enabled(self, table_name: str, safi_name: str) -> bool:
        return (
            table_type_key(table_name) in self.resource_types
            and safi_key(safi_name) in self.address_families
        )

    def collect(self, node) -> CollectionResult:
        if not node.connected:
            return CollectionResult(connected=False)

        client = node.client
        afis = client.afis()
        connected = True
        errors = 0
        samples = []

        for table_name, table_value in client.table_types().items():
            if not connected:
                break
            for safi_name, safi_value in client.safis().items():
                if not connected:
                    break
                if not self.enabled(table_name, safi_name):
                    continue
                table_type = resolve_table_type(table_name)
                if table_type is None:
                    log.debug("Skipping unsupported table type %s", table_name)
                    continue

                for afi_name, afi_value in afis.items():
                    if not connected:
                        break
                    family = family_label(afi_name, safi_name)
                    try:
                        size = self._count(client.list_path(table_value, afi_value, safi_value))
                    except grpc.RpcError as err:
                        log.error(
                            "GoBGP query failed for resource type %s for %s address family: %s",
                            table_name, family, describe_error(err),
                        )
                        errors += 1
                        connected = not is_unreachable(err)
                        continue

                    log.debug("GoBGP RIB size for %s/%s: %d", table_name, family, size)
                    samples.append(MetricSample(
                        m.ROUTE_TABLE_DESTINATIONS,
                        float(size),
                        (table_type.value.lower(), family),
                    ))

        return CollectionResult(samples=tuple(samples), errors=errors, connected=connected)

    @staticmethod
    def _count(stream) -> int:
        count = 0
        for response in stream:
            if not response.HasField("destination"):
                log.warning("Skipping ListPath response without a destination")
                continue
            count += 1
        return count

    def name(self) -> str:
        return "rib"
