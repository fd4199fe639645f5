"""Prometheus exporter for GoBGP peer and RIB state."""

__version__ = "0.3.0"
