"""
In-memory stand-in for a GoBGP daemon.

Implements the same calls as GoBGPClient, backed by plain records shaped
like the API messages (peer.state.neighbor_address, afi_safis[].state...).
Used by --mock and by the tests. Failures can be injected per family, or
the whole daemon can be made unreachable.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import grpc

from gobgp_exporter.families import AdminState, SessionState

# Enum tables as the GoBGP API declares them
TABLE_TYPES = {"GLOBAL": 0, "LOCAL": 1, "ADJ_IN": 2, "ADJ_OUT": 3, "VRF": 4}
AFIS = {
    "AFI_UNKNOWN": 0,
    "AFI_IP": 1,
    "AFI_IP6": 2,
    "AFI_L2VPN": 25,
    "AFI_LS": 16388,
    "AFI_OPAQUE": 16397,
}
SAFIS = {
    "SAFI_UNKNOWN": 0,
    "SAFI_UNICAST": 1,
    "SAFI_MULTICAST": 2,
    "SAFI_MPLS_LABEL": 4,
    "SAFI_ENCAPSULATION": 7,
    "SAFI_VPLS": 65,
    "SAFI_EVPN": 70,
    "SAFI_LS": 71,
    "SAFI_SR_POLICY": 73,
    "SAFI_MUP": 85,
    "SAFI_MPLS_VPN": 128,
    "SAFI_MPLS_VPN_MULTICAST": 129,
    "SAFI_ROUTE_TARGET_CONSTRAINTS": 132,
    "SAFI_FLOW_SPEC_UNICAST": 133,
    "SAFI_FLOW_SPEC_VPN": 134,
    "SAFI_KEY_VALUE": 241,
}


class FakeRpcError(grpc.RpcError):
    """RpcError carrying a status code, like the ones grpc raises from a stream."""

    def __init__(self, code: grpc.StatusCode = grpc.StatusCode.UNAVAILABLE, details: str = "failed to connect"):
        super().__init__(details)
        self._code = code
        self._details = details

    def code(self) -> grpc.StatusCode:
        return self._code

    def details(self) -> str:
        return self._details


class _Message:
    """Gives records protobuf's HasField so collectors treat both the same."""

    def HasField(self, name: str) -> bool:
        return getattr(self, name, None) is not None


@dataclass
class AfiSafiState:
    received: int = 0
    accepted: int = 0
    advertised: int = 0


@dataclass
class AfiSafi:
    state: AfiSafiState = field(default_factory=AfiSafiState)


@dataclass
class PeerState:
    neighbor_address: str = ""
    peer_asn: int = 0
    local_asn: int = 0
    admin_state: int = AdminState.UP
    session_state: int = SessionState.UNKNOWN
    out_q: int = 0
    flops: int = 0
    send_community: int = 0
    remove_private: int = 0
    auth_password: str = ""
    type: int = 0


@dataclass
class Peer:
    state: PeerState = field(default_factory=PeerState)
    afi_safis: List[AfiSafi] = field(default_factory=list)


@dataclass
class ListPeerResponse(_Message):
    peer: Optional[Peer] = None


@dataclass
class Destination:
    prefix: str = ""


@dataclass
class ListPathResponse(_Message):
    destination: Optional[Destination] = None


def make_peer(
    address: str,
    asn: int,
    state: SessionState = SessionState.ESTABLISHED,
    local_asn: int = 65000,
    counters: Tuple[Tuple[int, int, int], ...] = (),
    **extra,
) -> Peer:
    """Build a peer record. counters holds (received, accepted, advertised) per AFI/SAFI."""
    peer_state = PeerState(
        neighbor_address=address,
        peer_asn=asn,
        local_asn=local_asn,
        session_state=state,
        **extra,
    )
    afi_safis = [
        AfiSafi(AfiSafiState(received=r, accepted=a, advertised=adv))
        for r, a, adv in counters
    ]
    return Peer(state=peer_state, afi_safis=afi_safis)


class FakeGoBGPClient:
    """
    rib maps (table type name, AFI name, SAFI name) to either a list of
    prefixes or an exception to raise from the stream. Families with no
    entry return an empty stream.
    """

    def __init__(
        self,
        peers: Optional[List[Peer]] = None,
        rib: Optional[Dict[Tuple[str, str, str], object]] = None,
        peer_error: Optional[grpc.RpcError] = None,
        reachable: bool = True,
    ):
        self.peers = list(peers or [])
        self.rib = dict(rib or {})
        self.peer_error = peer_error
        self.reachable = reachable
        self.path_queries: List[Tuple[int, int, int]] = []
        self.closed = False

    @classmethod
    def seeded(cls, seed: int = 42, peer_count: int = 6) -> "FakeGoBGPClient":
        """Deterministic, vaguely realistic edge router: a few transit and IX peers."""
        rng = random.Random(seed)
        peers = []
        for i in range(peer_count):
            established = rng.random() > 0.2
            state = SessionState.ESTABLISHED if established else rng.choice([
                SessionState.IDLE, SessionState.ACTIVE, SessionState.CONNECT,
            ])
            counters = []
            if established:
                v4 = rng.randint(800, 950_000)
                counters.append((v4, int(v4 * rng.uniform(0.9, 1.0)), rng.randint(1, 40)))
                if rng.random() > 0.4:
                    v6 = rng.randint(100, 200_000)
                    counters.append((v6, int(v6 * rng.uniform(0.9, 1.0)), rng.randint(1, 10)))
            peers.append(make_peer(
                f"192.0.2.{i + 1}",
                asn=64512 + rng.randint(0, 1000),
                state=state,
                counters=tuple(counters),
                flops=rng.randint(0, 5),
                out_q=rng.randint(0, 3) if established else 0,
                send_community=1,
                auth_password="secret" if rng.random() > 0.5 else "",
                type=1,
            ))

        rib: Dict[Tuple[str, str, str], object] = {}
        for afi, base in (("AFI_IP", 950_000), ("AFI_IP6", 200_000)):
            size = int(base * rng.uniform(0.95, 1.0)) // 100
            rib[("GLOBAL", afi, "SAFI_UNICAST")] = [f"{afi}-{n}" for n in range(size)]
            rib[("LOCAL", afi, "SAFI_UNICAST")] = [f"{afi}-local-{n}" for n in range(rng.randint(1, 20))]
        return cls(peers=peers, rib=rib)

    def _check_reachable(self):
        if not self.reachable:
            raise FakeRpcError()

    def get_bgp(self):
        self._check_reachable()
        return {"asn": 65000, "router_id": "192.0.2.254"}

    def list_peer(self) -> Iterator[ListPeerResponse]:
        self._check_reachable()
        for peer in self.peers:
            yield peer if isinstance(peer, ListPeerResponse) else ListPeerResponse(peer=peer)
        if self.peer_error is not None:
            raise self.peer_error

    def list_path(self, table_type: int, afi: int, safi: int) -> Iterator[ListPathResponse]:
        self.path_queries.append((table_type, afi, safi))
        self._check_reachable()
        key = (_name_of(TABLE_TYPES, table_type), _name_of(AFIS, afi), _name_of(SAFIS, safi))
        entry = self.rib.get(key, [])
        if isinstance(entry, Exception):
            raise entry
        for item in entry:
            if isinstance(item, Exception):
                raise item
            if item is None:
                yield ListPathResponse()
            else:
                yield ListPathResponse(destination=Destination(prefix=item))

    def table_types(self) -> Dict[str, int]:
        return dict(TABLE_TYPES)

    def afis(self) -> Dict[str, int]:
        return dict(AFIS)

    def safis(self) -> Dict[str, int]:
        return dict(SAFIS)

    def name(self) -> str:
        return "Mock GoBGP"

    def close(self):
        self.closed = True


def _name_of(table: Dict[str, int], value: int) -> str:
    for name, v in table.items():
        if v == value:
            return name
    return str(value)
