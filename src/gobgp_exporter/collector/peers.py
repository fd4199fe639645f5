"""
Peer collector. One ListPeer call per scrape, one set of gauges per peer.

Route counters are summed across every address family the peer has
negotiated; the per-family breakdown isn't exported.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

import grpc

from gobgp_exporter import metrics as m
from gobgp_exporter.client import describe_error, is_unreachable
from gobgp_exporter.collector.base import Collector
from gobgp_exporter.families import is_established
from gobgp_exporter.metrics import CollectionResult, MetricSample

log = logging.getLogger(__name__)


def route_counters(peer) -> Tuple[int, int, int]:
    """Return (received, accepted, advertised) summed over the peer's AFI/SAFIs."""
    received = accepted = advertised = 0
    for afi_safi in peer.afi_safis:
        received += afi_safi.state.received
        accepted += afi_safi.state.accepted
        advertised += afi_safi.state.advertised
    return received, accepted, advertised


def peer_samples(peer) -> List[MetricSample]:
    state = peer.state
    labels = (state.neighbor_address,)
    received, accepted, advertised = route_counters(peer)

    values = [
        (m.PEER_UP, 1 if is_established(state.session_state) else 0),
        (m.PEER_ASN, state.peer_asn),
        # up (0), down (1), pfx_ct (2)
        (m.PEER_ADMIN_STATE, state.admin_state),
        (m.PEER_SESSION_STATE, state.session_state),
        (m.PEER_LOCAL_ASN, state.local_asn),
        (m.PEER_RECEIVED_ROUTES, received),
        (m.PEER_ACCEPTED_ROUTES, accepted),
        (m.PEER_ADVERTISED_ROUTES, advertised),
        (m.PEER_OUT_QUEUE, state.out_q),
        (m.PEER_FLOPS, state.flops),
        (m.PEER_SEND_COMMUNITY, state.send_community),
        (m.PEER_REMOVE_PRIVATE_AS, state.remove_private),
        (m.PEER_PASSWORD_SET, 1 if state.auth_password else 0),
        (m.PEER_TYPE, state.type),
    ]
    return [MetricSample(metric, float(value), labels) for metric, value in values]


class PeerCollector(Collector):

    def collect(self, node) -> CollectionResult:
        peers = []
        try:
            for response in node.client.list_peer():
                if not response.HasField("peer"):
                    log.warning("Skipping ListPeer response without a peer record")
                    continue
                peers.append(response.peer)
        except grpc.RpcError as err:
            log.error("GoBGP query for peers failed: %s", describe_error(err))
            return CollectionResult(errors=1, connected=not is_unreachable(err))

        log.debug("GoBGP returned %d peers", len(peers))

        samples = [MetricSample(m.ROUTER_PEERS, float(len(peers)))]
        for peer in peers:
            samples.extend(peer_samples(peer))
        return CollectionResult(samples=tuple(samples))

    def name(self) -> str:
        return "peers"
