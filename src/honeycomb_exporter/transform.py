"""Translation of OpenTelemetry spans into Honeycomb events.

Everything here is pure: no I/O and no state. Malformed span data is the
caller's responsibility.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Sequence

from opentelemetry.trace import SpanKind, StatusCode, format_span_id, format_trace_id

from honeycomb_exporter.config import (
    DEFAULT_STATUS_CODE_TAG_NAME,
    DEFAULT_STATUS_DESCRIPTION_TAG_NAME,
)

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import Event, ReadableSpan
    from opentelemetry.trace import Status

    from honeycomb_exporter.types import Annotation, HoneyEvent

NANOS_PER_MICRO = 1_000

# When absent, the span is local
HONEYCOMB_SPAN_KIND_MAPPING: dict[SpanKind, str | None] = {
    SpanKind.CLIENT: "CLIENT",
    SpanKind.SERVER: "SERVER",
    SpanKind.CONSUMER: "CONSUMER",
    SpanKind.PRODUCER: "PRODUCER",
    SpanKind.INTERNAL: None,
}


def ns_to_microseconds(nanos: int | None) -> int:
    """Convert integer nanoseconds to microseconds, rounding half up."""
    if nanos is None:
        return 0
    return (int(nanos) + NANOS_PER_MICRO // 2) // NANOS_PER_MICRO


def to_honey_kind(kind: SpanKind) -> str | None:
    """Return the Honeycomb kind for a span kind, or None for local spans."""
    return HONEYCOMB_SPAN_KIND_MAPPING.get(kind)


def stringify(value: Any) -> str:
    """Render an attribute value as a tag string.

    Booleans are lowercased and sequences are comma-joined so that tags
    look the same as those produced by other OpenTelemetry exporters.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def to_honey_tags(
    attributes: Mapping[str, Any] | None,
    status: Status,
    status_code_tag_name: str,
    status_description_tag_name: str,
    resource_attributes: Mapping[str, Any] | None,
) -> dict[str, str]:
    """Build the tag mapping of an event.

    Resource attributes override span attributes of the same name, and the
    status tags override both.
    """
    tags: dict[str, str] = {}
    for key, value in (attributes or {}).items():
        tags[key] = stringify(value)

    for key, value in (resource_attributes or {}).items():
        tags[key] = stringify(value)

    if status.status_code is not StatusCode.UNSET:
        tags[status_code_tag_name] = status.status_code.name
    if status.status_code is StatusCode.ERROR and status.description:
        tags[status_description_tag_name] = status.description

    return tags


def to_honey_annotations(events: Sequence[Event]) -> list[Annotation]:
    """Turn span events into annotations, keeping their order."""
    return [
        {"timestamp": ns_to_microseconds(event.timestamp), "value": event.name}
        for event in events
    ]


def to_event(
    span: ReadableSpan,
    service_name: str,
    status_code_tag_name: str = DEFAULT_STATUS_CODE_TAG_NAME,
    status_description_tag_name: str = DEFAULT_STATUS_DESCRIPTION_TAG_NAME,
) -> HoneyEvent:
    """Translate a finished OpenTelemetry span into a Honeycomb event.

    Args:
        span: The finished span.
        service_name: Value for ``localEndpoint.serviceName``.
        status_code_tag_name: Tag holding the status code name.
        status_description_tag_name: Tag holding the error description.

    Returns:
        The event mapping. ``parentId``, ``kind`` and ``annotations`` are
        only present when the span has a parent, a non-internal kind and at
        least one event, respectively.
    """
    start_time = span.start_time or 0
    end_time = span.end_time or start_time

    event: HoneyEvent = {
        "traceId": format_trace_id(span.context.trace_id),
        "id": format_span_id(span.context.span_id),
        "name": span.name,
        "timestamp": ns_to_microseconds(start_time),
        "duration": ns_to_microseconds(end_time - start_time),
        "localEndpoint": {"serviceName": service_name},
        "tags": to_honey_tags(
            span.attributes,
            span.status,
            status_code_tag_name,
            status_description_tag_name,
            span.resource.attributes if span.resource is not None else None,
        ),
    }

    if span.parent is not None:
        event["parentId"] = format_span_id(span.parent.span_id)

    kind = to_honey_kind(span.kind)
    if kind is not None:
        event["kind"] = kind

    if span.events:
        event["annotations"] = to_honey_annotations(span.events)

    return event
