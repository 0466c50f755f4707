"""Runs collection cycles on an interval for push-style exporters."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from ..config import PushConfig
from .base import Sample
from .openvpnas import OpenVPNASCollector

logger = logging.getLogger(__name__)


class CycleManager:
    """Runs one collection cycle every ``interval_seconds`` on a background thread.

    Register sinks via :meth:`add_sink`, then call :meth:`start` / :meth:`stop`.
    Each sink receives the samples of one cycle at a time; nothing is kept
    once the sinks return.
    """

    def __init__(self, collector: OpenVPNASCollector, config: PushConfig) -> None:
        self._collector = collector
        self._config = config
        self._sinks: list[Callable[[list[Sample]], None]] = []
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    def add_sink(self, sink: Callable[[list[Sample]], None]) -> None:
        """Register a callback to receive each cycle's samples."""
        self._sinks.append(sink)

    def collect_once(self) -> list[Sample]:
        """Run a single cycle and return its samples."""
        return self._collector.collect()

    def run_once(self) -> list[Sample]:
        """Run a single cycle and hand the samples to every sink."""
        samples = self.collect_once()
        for sink in self._sinks:
            try:
                sink(samples)
            except Exception:
                logger.exception("Sink failed")
        return samples

    def _run(self) -> None:
        """Background thread loop."""
        while not self._stop_event.is_set():
            self.run_once()
            self._stop_event.wait(self._config.interval_seconds)

    def start(self) -> None:
        """Start collecting in the background."""
        if not self._config.enabled:
            return
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        logger.info("CycleManager started (interval=%.1fs)", self._config.interval_seconds)

    def stop(self) -> None:
        """Stop background collection."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("CycleManager stopped")
