"""Metric descriptors, samples and the sink interface collectors emit into."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass
from typing import Any


class ValueKind(enum.Enum):
    """Prometheus value type of a metric."""

    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text and value type of one exported metric."""

    name: str
    help: str
    kind: ValueKind = ValueKind.GAUGE


@dataclass(frozen=True)
class Sample:
    """A single value emitted for a descriptor during a collection cycle."""

    descriptor: MetricDescriptor
    value: float

    @property
    def name(self) -> str:
        return self.descriptor.name


class SampleSink(abc.ABC):
    """Ordered, append-only destination for samples of one cycle."""

    @abc.abstractmethod
    def append(self, descriptor: MetricDescriptor, value: float) -> None:
        """Record one sample. Must not raise."""


class ListSink(SampleSink):
    """Keeps emitted samples in memory, in emission order."""

    def __init__(self) -> None:
        self.samples: list[Sample] = []

    def append(self, descriptor: MetricDescriptor, value: float) -> None:
        self.samples.append(Sample(descriptor=descriptor, value=float(value)))

    def __len__(self) -> int:
        return len(self.samples)

    def to_dict(self) -> list[dict[str, Any]]:
        """Serialize samples to plain dictionaries."""
        return [
            {
                "name": s.descriptor.name,
                "value": s.value,
                "kind": s.descriptor.kind.value,
                "help": s.descriptor.help,
            }
            for s in self.samples
        ]
