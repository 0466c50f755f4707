"""Prometheus exporter for OpenVPN Access Server."""

__version__ = "0.1.0"
