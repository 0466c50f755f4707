"""Prometheus pull exposition for the Access Server collector."""

from __future__ import annotations

import logging
from typing import Iterator

from prometheus_client import REGISTRY, CollectorRegistry, start_http_server
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from ..collector.base import ListSink, MetricDescriptor, ValueKind
from ..collector.openvpnas import OpenVPNASCollector
from ..config import WebConfig

logger = logging.getLogger(__name__)


def _family(descriptor: MetricDescriptor) -> Metric:
    if descriptor.kind is ValueKind.COUNTER:
        return CounterMetricFamily(descriptor.name, descriptor.help)
    return GaugeMetricFamily(descriptor.name, descriptor.help)


class OpenVPNASPrometheusCollector(Collector):
    """``prometheus_client`` collector running one Access Server cycle per scrape."""

    def __init__(self, collector: OpenVPNASCollector) -> None:
        self._collector = collector

    def describe(self) -> Iterator[Metric]:
        # Registering must not contact the endpoint, so describe without collecting.
        for descriptor in self._collector.descriptors.values():
            yield _family(descriptor)

    def collect(self) -> Iterator[Metric]:
        sink = ListSink()
        self._collector.collect_into(sink)
        for sample in sink.samples:
            family = _family(sample.descriptor)
            family.add_metric([], sample.value)
            yield family


def serve(
    collector: OpenVPNASCollector,
    config: WebConfig,
    registry: CollectorRegistry = REGISTRY,
) -> OpenVPNASPrometheusCollector:
    """Register *collector* on *registry* and start the HTTP endpoint."""
    prom_collector = OpenVPNASPrometheusCollector(collector)
    registry.register(prom_collector)
    start_http_server(config.listen_port, addr=config.listen_address, registry=registry)
    logger.info(
        "Serving metrics on http://%s:%d/metrics",
        config.listen_address,
        config.listen_port,
    )
    return prom_collector
