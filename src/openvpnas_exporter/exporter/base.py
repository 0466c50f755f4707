"""Base interface for push exporters."""

from __future__ import annotations

import abc

from ..collector.base import Sample


class BaseExporter(abc.ABC):
    """Abstract base for exporters that receive the samples of a cycle."""

    @abc.abstractmethod
    def export(self, samples: list[Sample]) -> None:
        """Export the samples of one collection cycle."""

    @abc.abstractmethod
    def shutdown(self) -> None:
        """Flush and release resources."""
