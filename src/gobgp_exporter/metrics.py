"""
Metric definitions for the exporter.

Collectors never touch the Prometheus registry directly. They return
MetricSamples that point at one of the definitions below, and the
exposition layer turns them into metric families at scrape time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


NAMESPACE = "gobgp"


@dataclass(frozen=True)
class MetricDef:
    name: str
    documentation: str
    labels: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetricSample:
    """One gauge reading. Label values line up with metric.labels."""

    metric: MetricDef
    value: float
    labels: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CollectionResult:
    """What a single collector run produced.

    Failures never abort a scrape; they show up here as an error count
    alongside whatever samples could still be produced.
    """

    samples: Tuple[MetricSample, ...] = ()
    errors: int = 0
    connected: bool = True


@dataclass(frozen=True)
class Scrape:
    samples: Tuple[MetricSample, ...] = ()
    errors: int = 0
    connected: bool = False
    duration_seconds: float = 0.0


def _name(subsystem: str, name: str) -> str:
    return f"{NAMESPACE}_{subsystem}_{name}"


# Router level
ROUTER_UP = MetricDef(_name("router", "up"), "Whether the GoBGP daemon answered the last scrape.")
ROUTER_ERRORS = MetricDef(_name("router", "errors"), "Number of failed GoBGP queries since start.")
ROUTER_SCRAPE_DURATION = MetricDef(
    _name("router", "scrape_duration_seconds"), "Time spent querying GoBGP for this scrape."
)
ROUTER_PEERS = MetricDef(_name("router", "peer_count"), "Number of BGP peers known to the router.")

# RIB
ROUTE_TABLE_DESTINATIONS = MetricDef(
    _name("route_table", "destination_count"),
    "Number of destinations in a routing table for an address family.",
    ("route_table", "address_family"),
)

# Per peer, labelled by neighbor address
_PEER_LABELS = ("name",)

PEER_UP = MetricDef(_name("peer", "up"), "Whether the BGP session is established.", _PEER_LABELS)
PEER_ASN = MetricDef(_name("peer", "asn"), "Autonomous system number of the peer.", _PEER_LABELS)
PEER_ADMIN_STATE = MetricDef(
    _name("peer", "admin_state"),
    "Administrative state of the peer: up (0), down (1), prefix limit down (2).",
    _PEER_LABELS,
)
PEER_SESSION_STATE = MetricDef(
    _name("peer", "session_state"),
    "BGP session state code as reported by GoBGP.",
    _PEER_LABELS,
)
PEER_LOCAL_ASN = MetricDef(
    _name("peer", "local_asn"), "Local autonomous system number advertised to the peer.", _PEER_LABELS
)
PEER_RECEIVED_ROUTES = MetricDef(
    _name("peer", "received_routes"), "Number of routes received from the peer.", _PEER_LABELS
)
PEER_ACCEPTED_ROUTES = MetricDef(
    _name("peer", "accepted_routes"), "Number of routes accepted from the peer.", _PEER_LABELS
)
PEER_ADVERTISED_ROUTES = MetricDef(
    _name("peer", "advertised_routes"), "Number of routes advertised to the peer.", _PEER_LABELS
)
PEER_OUT_QUEUE = MetricDef(_name("peer", "out_queue"), "Output queue depth for the peer.", _PEER_LABELS)
PEER_FLOPS = MetricDef(_name("peer", "flops"), "Number of session flaps for the peer.", _PEER_LABELS)
PEER_SEND_COMMUNITY = MetricDef(
    _name("peer", "send_community_flag"), "Community sending setting for the peer.", _PEER_LABELS
)
PEER_REMOVE_PRIVATE_AS = MetricDef(
    _name("peer", "remove_private_as_flag"), "Private AS removal setting for the peer.", _PEER_LABELS
)
PEER_PASSWORD_SET = MetricDef(
    _name("peer", "password_set_flag"), "Whether an authentication password is configured.", _PEER_LABELS
)
PEER_TYPE = MetricDef(_name("peer", "type"), "Peer type: internal (0) or external (1).", _PEER_LABELS)
