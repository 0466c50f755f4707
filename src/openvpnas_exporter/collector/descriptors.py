"""The fixed set of metrics exported for an OpenVPN Access Server."""

from __future__ import annotations

import enum
from types import MappingProxyType
from typing import Mapping

from .base import MetricDescriptor, ValueKind

NAMESPACE = "openvpnas"


class MetricKey(enum.Enum):
    UP = "up"
    STATUS_UPDATE_TIME = "status_update_time_seconds"
    SERVER_CONNECTED_CLIENTS = "server_connected_clients"
    SUBSCRIPTION_STATUS_UPDATE_TIME = "subscription_status_update_time_seconds"
    SUBSCRIPTION_CURRENT_CLIENT_CONNECTIONS = "subscription_current_client_connections"
    SUBSCRIPTION_FALLBACK_CLIENT_CONNECTIONS = "subscription_fallback_client_connections"
    SUBSCRIPTION_MAXIMUM_CLIENT_CONNECTIONS = "subscription_maximum_client_connections"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join non-empty name parts with underscores, Prometheus style."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


_HELP: dict[MetricKey, str] = {
    # Reported for both the server and the subscription.
    MetricKey.UP: "Whether scraping OpenVPN's metrics was successful.",
    MetricKey.STATUS_UPDATE_TIME: "UNIX timestamp at which the OpenVPN statistics were updated.",
    # Server
    MetricKey.SERVER_CONNECTED_CLIENTS: "Number Of Connected Clients",
    # Subscription
    MetricKey.SUBSCRIPTION_STATUS_UPDATE_TIME: (
        "UNIX timestamp at which the OpenVPN subscription status was last updated."
    ),
    MetricKey.SUBSCRIPTION_CURRENT_CLIENT_CONNECTIONS: (
        "Number of client connections currently being used from the OpenVPN subscription."
    ),
    MetricKey.SUBSCRIPTION_FALLBACK_CLIENT_CONNECTIONS: (
        "Number of fallback connections in use on the OpenVPN subscription."
    ),
    MetricKey.SUBSCRIPTION_MAXIMUM_CLIENT_CONNECTIONS: (
        "Maximum number of client connections allowed by the OpenVPN subscription."
    ),
}


def build_descriptors(namespace: str = NAMESPACE) -> Mapping[MetricKey, MetricDescriptor]:
    """Build the read-only descriptor table, one gauge per :class:`MetricKey`."""
    table = {
        key: MetricDescriptor(
            name=build_fq_name(namespace, "", key.value),
            help=_HELP[key],
            kind=ValueKind.GAUGE,
        )
        for key in MetricKey
    }
    return MappingProxyType(table)


DESCRIPTORS = build_descriptors()
