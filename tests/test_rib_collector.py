"""Tests for the RIB collector."""

import grpc

from gobgp_exporter import metrics as m
from gobgp_exporter.collector.rib import RibCollector
from gobgp_exporter.mock.fake_gobgp import AFIS, SAFIS, TABLE_TYPES, FakeGoBGPClient, FakeRpcError
from gobgp_exporter.router import RouterNode


def _node(client, connected=True) -> RouterNode:
    node = RouterNode(client)
    node.connected = connected
    return node


def _sizes(result):
    return {s.labels: s.value for s in result.samples if s.metric == m.ROUTE_TABLE_DESTINATIONS}


def test_single_failure_increments_errors_once():
    client = FakeGoBGPClient(rib={
        ("GLOBAL", "AFI_IP", "SAFI_UNICAST"): ["10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16"],
        ("LOCAL", "AFI_IP6", "SAFI_UNICAST"): FakeRpcError(grpc.StatusCode.INTERNAL, "table busy"),
    })
    result = RibCollector(resource_types="GLOBAL,LOCAL", address_families="UNICAST").collect(_node(client))

    sizes = _sizes(result)
    assert sizes[("global", "ipv4-unicast")] == 3
    assert ("local", "ipv6-unicast") not in sizes
    assert result.errors == 1


def test_one_sample_per_enabled_combination():
    client = FakeGoBGPClient()
    result = RibCollector(resource_types="GLOBAL", address_families="UNICAST").collect(_node(client))

    assert len(result.samples) == len(AFIS)
    assert all(s.labels[0] == "global" for s in result.samples)
    assert all(s.value == 0 for s in result.samples)


def test_disabled_combinations_are_never_queried():
    client = FakeGoBGPClient()
    RibCollector(resource_types="LOCAL", address_families="FLOW_SPEC_UNICAST").collect(_node(client))

    queried = {(t, s) for t, _, s in client.path_queries}
    assert queried == {(TABLE_TYPES["LOCAL"], SAFIS["SAFI_FLOW_SPEC_UNICAST"])}


def test_unsupported_table_types_are_skipped_silently():
    client = FakeGoBGPClient()
    collector = RibCollector(resource_types="GLOBAL,ADJ_IN,VRF", address_families="UNICAST")
    result = collector.collect(_node(client))

    assert result.errors == 0
    assert {t for t, _, _ in client.path_queries} == {TABLE_TYPES["GLOBAL"]}
    assert {s.labels[0] for s in result.samples} == {"global"}


def test_disconnected_session_is_a_no_op():
    client = FakeGoBGPClient(rib={("GLOBAL", "AFI_IP", "SAFI_UNICAST"): ["10.0.0.0/8"]})
    result = RibCollector().collect(_node(client, connected=False))

    assert result.samples == ()
    assert result.errors == 0
    assert client.path_queries == []


def test_losing_the_daemon_stops_the_scan():
    client = FakeGoBGPClient(rib={
        ("GLOBAL", "AFI_UNKNOWN", "SAFI_UNICAST"): FakeRpcError(grpc.StatusCode.UNAVAILABLE, "gone"),
    })
    result = RibCollector(resource_types="GLOBAL,LOCAL", address_families="UNICAST").collect(_node(client))

    assert len(client.path_queries) == 1
    assert result.errors == 1
    assert result.samples == ()
    assert result.connected is False


def test_slow_stream_times_out_without_dropping_the_session():
    client = FakeGoBGPClient(rib={
        ("GLOBAL", "AFI_IP", "SAFI_UNICAST"): [
            "10.0.0.0/8", FakeRpcError(grpc.StatusCode.DEADLINE_EXCEEDED, "deadline exceeded"),
        ],
        ("LOCAL", "AFI_IP", "SAFI_UNICAST"): ["192.0.2.0/24"],
    })
    result = RibCollector(resource_types="GLOBAL,LOCAL", address_families="UNICAST").collect(_node(client))

    sizes = _sizes(result)
    assert result.connected is True
    assert result.errors == 1
    assert ("global", "ipv4-unicast") not in sizes
    assert sizes[("local", "ipv4-unicast")] == 1


def test_stream_breaking_midway_drops_the_combination():
    client = FakeGoBGPClient(rib={
        ("GLOBAL", "AFI_IP", "SAFI_UNICAST"): ["10.0.0.0/8", FakeRpcError(grpc.StatusCode.INTERNAL, "reset")],
        ("GLOBAL", "AFI_IP6", "SAFI_UNICAST"): ["2001:db8::/32"],
    })
    result = RibCollector(resource_types="GLOBAL", address_families="UNICAST").collect(_node(client))

    sizes = _sizes(result)
    assert ("global", "ipv4-unicast") not in sizes
    assert sizes[("global", "ipv6-unicast")] == 1
    assert result.errors == 1


def test_malformed_destination_is_skipped():
    client = FakeGoBGPClient(rib={
        ("GLOBAL", "AFI_IP", "SAFI_UNICAST"): ["10.0.0.0/8", None, "192.168.0.0/16"],
    })
    result = RibCollector(resource_types="GLOBAL", address_families="UNICAST").collect(_node(client))

    assert _sizes(result)[("global", "ipv4-unicast")] == 2
    assert result.errors == 0


def test_allow_sets_accept_api_spellings():
    collector = RibCollector(resource_types=["table_type_global"], address_families=["SAFI_Unicast"])
    assert collector.enabled("GLOBAL", "SAFI_UNICAST")
    assert collector.enabled("TABLE_TYPE_GLOBAL", "SAFI_UNICAST")
    assert not collector.enabled("LOCAL", "SAFI_UNICAST")
    assert not collector.enabled("GLOBAL", "SAFI_MULTICAST")
