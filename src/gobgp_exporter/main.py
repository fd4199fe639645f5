"""
gobgp-exporter entry point.

Usage:
    gobgp-exporter --address 127.0.0.1:50051    Serve /metrics for a live GoBGP
    gobgp-exporter --mock                       Serve /metrics from simulated data
    gobgp-exporter --mock show                  One scrape, printed as tables
    gobgp-exporter watch --output jsonl         Scrape on a loop, one JSON line each
"""

from __future__ import annotations

import logging

import click

from gobgp_exporter import __version__
from gobgp_exporter.client import (
    DEFAULT_ADDRESS,
    DEFAULT_API_MODULE,
    DEFAULT_STUB_MODULE,
    GoBGPClient,
)
from gobgp_exporter.collector.peers import PeerCollector
from gobgp_exporter.collector.rib import RibCollector
from gobgp_exporter.exporter import DEFAULT_LISTEN, DEFAULT_PORT, serve
from gobgp_exporter.mock.fake_gobgp import FakeGoBGPClient
from gobgp_exporter.router import RouterNode


log = logging.getLogger("gobgp_exporter")


def _build_node(params: dict) -> RouterNode:
    if params["mock"]:
        log.info("Using simulated GoBGP daemon (seed=%d)", params["seed"])
        client = FakeGoBGPClient.seeded(seed=params["seed"])
    else:
        try:
            client = GoBGPClient(
                address=params["address"],
                timeout_seconds=params["timeout"],
                api_module=params["api_module"],
                stub_module=params["stub_module"],
            )
        except ImportError as e:
            raise click.UsageError(
                f"GoBGP API stubs not found ({e}). Generate them with grpc_tools.protoc "
                "or point --api-module/--stub-module at them."
            )

    collectors = [
        PeerCollector(),
        RibCollector(
            resource_types=params["resource_types"],
            address_families=params["address_families"],
        ),
    ]
    return RouterNode(client, collectors=collectors)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="gobgp-exporter")
@click.option("--address", default=DEFAULT_ADDRESS, help="GoBGP gRPC address (host:port)")
@click.option("--timeout", default=10.0, help="Timeout for each GoBGP call in seconds")
@click.option("--listen", default=DEFAULT_LISTEN, help="Address to serve /metrics on")
@click.option("--port", default=DEFAULT_PORT, help="Port to serve /metrics on")
@click.option("--resource-types", default="GLOBAL,LOCAL",
              help="Comma-separated routing tables to count (GLOBAL, LOCAL)")
@click.option("--address-families", default="UNICAST",
              help="Comma-separated SAFI names to count (e.g. UNICAST,FLOW_SPEC_UNICAST)")
@click.option("--api-module", default=DEFAULT_API_MODULE, help="Module holding the generated GoBGP messages")
@click.option("--stub-module", default=DEFAULT_STUB_MODULE, help="Module holding the generated GoBGP service stub")
@click.option("--mock", is_flag=True, default=False, help="Use a simulated GoBGP daemon")
@click.option("--seed", default=42, help="Random seed for --mock data")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, address: str, timeout: float, listen: str, port: int, resource_types: str,
        address_families: str, api_module: str, stub_module: str, mock: bool, seed: int,
        verbose: bool):
    """gobgp-exporter - Prometheus metrics for GoBGP peers and RIBs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj.update(
        address=address,
        timeout=timeout,
        resource_types=resource_types,
        address_families=address_families,
        api_module=api_module,
        stub_module=stub_module,
        mock=mock,
        seed=seed,
    )

    if ctx.invoked_subcommand is None:
        node = _build_node(ctx.obj)
        try:
            node.connect()
            serve(node, listen=listen, port=port)
        finally:
            node.close()


@cli.command()
@click.pass_context
def show(ctx):
    """Run a single scrape and print peers and RIB sizes."""
    from gobgp_exporter.dashboard.terminal import print_scrape

    node = _build_node(ctx.obj)
    try:
        scrape = print_scrape(node)
    finally:
        node.close()

    if not scrape.connected:
        raise SystemExit(1)


@cli.command()
@click.option("--refresh", default=5.0, help="Seconds between scrapes")
@click.option("--output", type=click.Choice(["tui", "jsonl"]), default="tui",
              help="Output mode: tui (Rich dashboard) or jsonl (one JSON line per scrape)")
@click.option("--count", default=0, help="Stop after this many scrapes (jsonl only, 0 = forever)")
@click.pass_context
def watch(ctx, refresh: float, output: str, count: int):
    """Scrape on a loop and display the results."""
    from gobgp_exporter.dashboard.terminal import run_dashboard, run_jsonl

    node = _build_node(ctx.obj)
    try:
        if output == "jsonl":
            run_jsonl(node, refresh_interval=refresh, count=count)
        else:
            run_dashboard(node, refresh_interval=refresh)
    finally:
        node.close()


if __name__ == "__main__":
    cli()
