"""Collection cycle for an OpenVPN Access Server."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol

from ..responses import SubscriptionStatus, VPNSummary
from ..rpc import RpcError, RpcSession
from .base import ListSink, MetricDescriptor, Sample, SampleSink
from .descriptors import DESCRIPTORS, MetricKey

logger = logging.getLogger(__name__)


class SessionFactory(Protocol):
    def open_session(self) -> RpcSession: ...


class OpenVPNASCollector:
    """Queries the Access Server and turns the answers into samples.

    Each call to :meth:`collect_into` is one independent cycle: open a
    session, call ``GetVPNSummary`` then ``GetSubscriptionStatus``, close the
    session and finish with exactly one ``up`` sample. The first failing step
    ends the cycle with ``up`` = 0 and nothing is emitted for the calls that
    were skipped. Nothing is kept between cycles.
    """

    def __init__(
        self,
        client: SessionFactory,
        descriptors: Mapping[MetricKey, MetricDescriptor] = DESCRIPTORS,
    ) -> None:
        self._client = client
        self._descriptors = descriptors

    @property
    def name(self) -> str:
        return "openvpnas"

    @property
    def descriptors(self) -> Mapping[MetricKey, MetricDescriptor]:
        return self._descriptors

    def collect_into(self, sink: SampleSink) -> bool:
        """Run one cycle, appending samples to *sink*. Returns the health value."""
        up = False
        try:
            session = self._client.open_session()
        except RpcError as exc:
            logger.warning("[%s] Failed to open RPC session: %s", self.name, exc)
        else:
            with session:
                up = self._collect_calls(session, sink)
        sink.append(self._descriptors[MetricKey.UP], 1.0 if up else 0.0)
        return up

    def collect(self) -> list[Sample]:
        """Run one cycle and return its samples in emission order."""
        sink = ListSink()
        self.collect_into(sink)
        return sink.samples

    def _collect_calls(self, session: RpcSession, sink: SampleSink) -> bool:
        try:
            self.collect_vpn_summary(session, sink)
        except RpcError as exc:
            logger.warning("[%s] Failed to call %s: %s", self.name, VPNSummary.METHOD, exc)
            return False

        try:
            self.collect_subscription_status(session, sink)
        except RpcError as exc:
            logger.warning("[%s] Failed to call %s: %s", self.name, SubscriptionStatus.METHOD, exc)
            return False

        return True

    def collect_vpn_summary(self, session: RpcSession, sink: SampleSink) -> None:
        summary = VPNSummary.from_response(session.call(VPNSummary.METHOD))
        sink.append(
            self._descriptors[MetricKey.SERVER_CONNECTED_CLIENTS],
            float(summary.n_clients),
        )

    def collect_subscription_status(self, session: RpcSession, sink: SampleSink) -> None:
        status = SubscriptionStatus.from_response(session.call(SubscriptionStatus.METHOD))
        d = self._descriptors
        sink.append(d[MetricKey.SUBSCRIPTION_STATUS_UPDATE_TIME], float(status.last_successful_update))
        sink.append(d[MetricKey.SUBSCRIPTION_CURRENT_CLIENT_CONNECTIONS], float(status.current_cc))
        sink.append(d[MetricKey.SUBSCRIPTION_MAXIMUM_CLIENT_CONNECTIONS], float(status.max_cc))
        sink.append(d[MetricKey.SUBSCRIPTION_FALLBACK_CLIENT_CONNECTIONS], float(status.fallback_cc))
