"""Tests for RouterNode: merging collector results and tracking connectivity."""

import grpc

from gobgp_exporter import metrics as m
from gobgp_exporter.collector.peers import PeerCollector
from gobgp_exporter.collector.rib import RibCollector
from gobgp_exporter.families import SessionState
from gobgp_exporter.mock.fake_gobgp import FakeGoBGPClient, FakeRpcError, make_peer
from gobgp_exporter.router import RouterNode


def _client():
    return FakeGoBGPClient(
        peers=[
            make_peer("10.0.0.1", 65001, SessionState.ESTABLISHED, counters=((10, 8, 5),)),
            make_peer("10.0.0.2", 65002, SessionState.ACTIVE),
        ],
        rib={("GLOBAL", "AFI_IP", "SAFI_UNICAST"): ["10.0.0.0/8", "10.1.0.0/16", "10.2.0.0/16"]},
    )


def _node(client):
    return RouterNode(client, collectors=[
        PeerCollector(),
        RibCollector(resource_types="GLOBAL", address_families="UNICAST"),
    ])


def test_scrape_connects_and_merges_samples():
    node = _node(_client())
    scrape = node.scrape()

    assert scrape.connected
    assert node.connected
    assert scrape.errors == 0

    peer_counts = [s for s in scrape.samples if s.metric == m.ROUTER_PEERS]
    rib = [s for s in scrape.samples if s.metric == m.ROUTE_TABLE_DESTINATIONS]
    assert len(peer_counts) == 1
    assert len(scrape.samples) == 1 + 2 * 14 + len(rib)
    assert ("global", "ipv4-unicast") in {s.labels for s in rib}


def test_unreachable_daemon_gives_empty_scrape():
    node = _node(FakeGoBGPClient(reachable=False))
    scrape = node.scrape()

    assert not scrape.connected
    assert scrape.samples == ()
    assert scrape.errors == 1
    assert node.errors == 1


def test_errors_accumulate_across_scrapes():
    node = _node(FakeGoBGPClient(reachable=False))
    node.scrape()
    node.scrape()
    assert node.errors == 2


def test_reconnects_on_next_scrape():
    client = FakeGoBGPClient(reachable=False)
    node = _node(client)
    assert not node.scrape().connected

    client.reachable = True
    scrape = node.scrape()
    assert scrape.connected
    assert any(s.metric == m.ROUTER_PEERS for s in scrape.samples)


def test_losing_connection_during_peers_skips_rib():
    client = _client()
    client.peer_error = FakeRpcError(grpc.StatusCode.UNAVAILABLE, "gone")
    node = _node(client)

    scrape = node.scrape()

    assert not scrape.connected
    assert scrape.samples == ()
    assert scrape.errors == 1
    assert client.path_queries == []


def test_rib_failure_keeps_peer_samples():
    client = _client()
    client.rib[("GLOBAL", "AFI_IP6", "SAFI_UNICAST")] = FakeRpcError(grpc.StatusCode.INTERNAL, "busy")
    node = _node(client)

    scrape = node.scrape()

    assert scrape.connected
    assert scrape.errors == 1
    assert any(s.metric == m.ROUTER_PEERS for s in scrape.samples)


def test_rib_timeout_keeps_router_up():
    client = _client()
    client.rib[("GLOBAL", "AFI_IP", "SAFI_UNICAST")] = [
        "10.0.0.0/8", FakeRpcError(grpc.StatusCode.DEADLINE_EXCEEDED, "deadline exceeded"),
    ]
    client.rib[("LOCAL", "AFI_IP", "SAFI_UNICAST")] = ["192.0.2.0/24"]
    node = RouterNode(client, collectors=[
        PeerCollector(),
        RibCollector(resource_types="GLOBAL,LOCAL", address_families="UNICAST"),
    ])

    scrape = node.scrape()

    assert scrape.connected
    assert scrape.errors == 1
    rib = {s.labels: s.value for s in scrape.samples if s.metric == m.ROUTE_TABLE_DESTINATIONS}
    assert rib[("local", "ipv4-unicast")] == 1
    assert ("global", "ipv4-unicast") not in rib


def test_default_collectors():
    node = RouterNode(_client())
    assert [c.name() for c in node.collectors] == ["peers", "rib"]


def test_close_closes_client():
    client = _client()
    RouterNode(client).close()
    assert client.closed
