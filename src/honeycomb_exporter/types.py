"""Types shared between the transformer, the exporter and the transport."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypedDict

from opentelemetry.sdk.trace.export import SpanExportResult


class Endpoint(TypedDict):
    """Service that produced the span."""

    serviceName: str


class Annotation(TypedDict):
    """A span event, reduced to its time (microseconds) and name."""

    timestamp: int
    value: str


class _RequiredEventFields(TypedDict):
    traceId: str
    id: str
    name: str
    timestamp: int
    duration: int
    localEndpoint: Endpoint
    tags: dict[str, str]


class HoneyEvent(_RequiredEventFields, total=False):
    """Flat event record sent to Honeycomb.

    ``parentId`` is absent for root spans, ``kind`` for internal spans and
    ``annotations`` for spans without events.
    """

    parentId: str
    kind: str
    annotations: list[Annotation]


@dataclass(frozen=True)
class ExportResult:
    """Outcome of one export call, with the error that caused a failure."""

    code: SpanExportResult
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.code is SpanExportResult.SUCCESS


ResultCallback = Callable[[ExportResult], None]
