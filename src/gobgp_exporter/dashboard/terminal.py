"""Terminal views of a scrape using Rich: peer table, RIB sizes, status header."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime
from typing import Dict, List

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gobgp_exporter import __version__
from gobgp_exporter import metrics as m
from gobgp_exporter.families import SessionState
from gobgp_exporter.metrics import MetricSample, Scrape
from gobgp_exporter.router import RouterNode

log = logging.getLogger(__name__)


# Metric -> short key used in the peer table and JSON output
_PEER_FIELDS = {
    m.PEER_UP: "up",
    m.PEER_ASN: "asn",
    m.PEER_SESSION_STATE: "session_state",
    m.PEER_ADMIN_STATE: "admin_state",
    m.PEER_RECEIVED_ROUTES: "received",
    m.PEER_ACCEPTED_ROUTES: "accepted",
    m.PEER_ADVERTISED_ROUTES: "advertised",
    m.PEER_OUT_QUEUE: "out_q",
    m.PEER_FLOPS: "flops",
}


def peer_rows(samples: List[MetricSample]) -> Dict[str, Dict[str, float]]:
    """Regroup per-peer samples by neighbor address."""
    rows: Dict[str, Dict[str, float]] = {}
    for sample in samples:
        key = _PEER_FIELDS.get(sample.metric)
        if key is None:
            continue
        rows.setdefault(sample.labels[0], {})[key] = sample.value
    return rows


def rib_rows(samples: List[MetricSample]) -> List[tuple]:
    return [
        (s.labels[0], s.labels[1], int(s.value))
        for s in samples
        if s.metric == m.ROUTE_TABLE_DESTINATIONS
    ]


def _state_name(code: float) -> str:
    try:
        return SessionState(int(code)).name.lower()
    except ValueError:
        return str(int(code))


def build_peer_table(samples: List[MetricSample]) -> Table:
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Neighbor")
    table.add_column("ASN", justify="right")
    table.add_column("State")
    table.add_column("Received", justify="right")
    table.add_column("Accepted", justify="right")
    table.add_column("Advertised", justify="right")
    table.add_column("OutQ", justify="right")
    table.add_column("Flaps", justify="right")

    for address, row in peer_rows(samples).items():
        color = "green" if row.get("up") else "red"
        state = _state_name(row.get("session_state", 0))
        table.add_row(
            address,
            f"{int(row.get('asn', 0))}",
            f"[{color}]{state}[/{color}]",
            f"{int(row.get('received', 0)):,}",
            f"{int(row.get('accepted', 0)):,}",
            f"{int(row.get('advertised', 0)):,}",
            f"{int(row.get('out_q', 0))}",
            f"{int(row.get('flops', 0))}",
        )
    return table


def build_rib_table(samples: List[MetricSample]) -> Table:
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Table")
    table.add_column("Family")
    table.add_column("Destinations", justify="right")
    for route_table, family, size in rib_rows(samples):
        table.add_row(route_table, family, f"{size:,}")
    return table


def build_display(scrape: Scrape, source_name: str, total_errors: int) -> Group:
    samples = list(scrape.samples)
    status, style = ("UP", "bold green") if scrape.connected else ("DOWN", "bold red")

    header = Text(f"  gobgp-exporter v{__version__}  |  {source_name}", style="bold white on blue")
    header.append(f"\n  {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}  ", style="dim")
    header.append(f"  STATUS: {status}", style=style)
    header.append(
        f"  |  scrape {scrape.duration_seconds * 1000:.0f}ms"
        f"  |  errors {scrape.errors} (total {total_errors})",
        style="dim",
    )

    peer_total = next((int(s.value) for s in samples if s.metric == m.ROUTER_PEERS), None)
    peer_title = "Peers (unavailable)" if peer_total is None else f"Peers ({peer_total})"

    return Group(
        Panel(header, border_style="blue"),
        Panel(build_peer_table(samples), title=peer_title, border_style="cyan"),
        Panel(build_rib_table(samples), title="RIB", border_style="cyan"),
    )


def print_scrape(node: RouterNode, console: Console = None):
    """Run one scrape and print it."""
    console = console or Console()
    scrape = node.scrape()
    console.print(build_display(scrape, node.name(), node.errors))
    return scrape


def scrape_record(scrape: Scrape, source_name: str) -> dict:
    return {
        "timestamp": datetime.now().isoformat(),
        "source": source_name,
        "up": scrape.connected,
        "errors": scrape.errors,
        "duration_ms": round(scrape.duration_seconds * 1000, 1),
        "peers": peer_rows(list(scrape.samples)),
        "rib": [
            {"route_table": t, "address_family": f, "destinations": n}
            for t, f, n in rib_rows(list(scrape.samples))
        ],
    }


def run_dashboard(node: RouterNode, refresh_interval: float = 5.0):

    console = Console()
    source_name = node.name()

    log.info("Starting dashboard: source=%s, refresh=%.1fs", source_name, refresh_interval)
    console.print(f"\n[bold]Starting gobgp-exporter v{__version__}...[/bold]")
    console.print(f"Source: {source_name}")
    console.print(f"Refresh: every {refresh_interval}s")
    console.print()

    with Live(console=console, refresh_per_second=1, screen=True) as live:
        try:
            while True:
                scrape = node.scrape()
                live.update(build_display(scrape, source_name, node.errors))
                time.sleep(refresh_interval)
        except KeyboardInterrupt:
            pass

    console.print("\n[dim]Dashboard stopped.[/dim]")


def run_jsonl(node: RouterNode, refresh_interval: float = 5.0, count: int = 0):
    """Prints one JSON object per scrape per line. count=0 means run until interrupted."""
    source_name = node.name()
    log.info("Starting JSONL output: source=%s, refresh=%.1fs", source_name, refresh_interval)

    done = 0
    try:
        while True:
            scrape = node.scrape()
            sys.stdout.write(json.dumps(scrape_record(scrape, source_name)) + "\n")
            sys.stdout.flush()
            done += 1
            if count and done >= count:
                break
            time.sleep(refresh_interval)
    except KeyboardInterrupt:
        pass
