"""Unit tests for span to event translation.

Requirements covered:
- Identifiers, name and timing copied and converted to microseconds
- Kind mapping, with internal spans carrying no kind
- Tags built from attributes, resource attributes and status
- Annotations built from span events
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from opentelemetry.sdk.trace import Event
from opentelemetry.trace import SpanKind, Status, StatusCode

from honeycomb_exporter.transform import (
    ns_to_microseconds,
    stringify,
    to_event,
    to_honey_annotations,
    to_honey_kind,
    to_honey_tags,
)
from tests.spans import DURATION_NS, DURATION_US, START_TIME_NS, START_TIME_US

if TYPE_CHECKING:
    from tests.spans import SpanFactory


@pytest.mark.unit
class TestToEvent:
    """Tests for to_event()."""

    def test_span_translated_to_event(self, make_span: "SpanFactory") -> None:
        """
        GIVEN a child span with attributes, an OK status and one event
        WHEN it is translated
        THEN every field of the event is filled from the span
        """
        span = make_span(
            parent_span_id=0x5C1C63257DE34C67,
            attributes={"key1": "value1", "key2": "value2"},
            events=[
                Event(
                    "my-event",
                    attributes={"key3": "value3"},
                    timestamp=START_TIME_NS + 10_000_000_000,
                )
            ],
        )

        event = to_event(span, "my-service")

        assert event == {
            "traceId": "d4cda95b652f4a1592b449d5929fda1b",
            "id": "6e0c63257de34c92",
            "parentId": "5c1c63257de34c67",
            "name": "my-span",
            "timestamp": START_TIME_US,
            "duration": DURATION_US,
            "localEndpoint": {"serviceName": "my-service"},
            "tags": {
                "key1": "value1",
                "key2": "value2",
                "ot.status_code": "OK",
            },
            "annotations": [
                {"timestamp": START_TIME_US + 10_000_000, "value": "my-event"}
            ],
        }

    def test_root_span_has_no_parent_id(self, make_span: "SpanFactory") -> None:
        event = to_event(make_span(), "my-service")

        assert "parentId" not in event

    def test_internal_span_has_no_kind(self, make_span: "SpanFactory") -> None:
        event = to_event(make_span(kind=SpanKind.INTERNAL), "my-service")

        assert "kind" not in event

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (SpanKind.CLIENT, "CLIENT"),
            (SpanKind.SERVER, "SERVER"),
            (SpanKind.CONSUMER, "CONSUMER"),
            (SpanKind.PRODUCER, "PRODUCER"),
        ],
    )
    def test_non_internal_kinds_mapped(
        self, make_span: "SpanFactory", kind: SpanKind, expected: str
    ) -> None:
        event = to_event(make_span(kind=kind), "my-service")

        assert event["kind"] == expected

    def test_span_without_events_has_no_annotations(
        self, make_span: "SpanFactory"
    ) -> None:
        event = to_event(make_span(events=()), "my-service")

        assert "annotations" not in event

    def test_annotations_keep_event_order(self, make_span: "SpanFactory") -> None:
        """
        GIVEN a span with three events
        WHEN it is translated
        THEN there are three annotations, in the same order, in microseconds
        """
        events = [
            Event("third", timestamp=START_TIME_NS + 3_000),
            Event("first", timestamp=START_TIME_NS + 1_000),
            Event("second", timestamp=START_TIME_NS + 2_000),
        ]

        event = to_event(make_span(events=events), "my-service")

        assert event["annotations"] == [
            {"timestamp": START_TIME_US + 3, "value": "third"},
            {"timestamp": START_TIME_US + 1, "value": "first"},
            {"timestamp": START_TIME_US + 2, "value": "second"},
        ]

    def test_error_status_uses_custom_tag_names(
        self, make_span: "SpanFactory"
    ) -> None:
        span = make_span(status=Status(StatusCode.ERROR, "boom"))

        event = to_event(span, "my-service", "code", "description")

        assert event["tags"] == {"code": "ERROR", "description": "boom"}

    def test_resource_attributes_become_tags(self, make_span: "SpanFactory") -> None:
        span = make_span(
            attributes={"key1": "value1"},
            resource_attributes={"service.name": "checkout", "host.name": "web-1"},
        )

        event = to_event(span, "my-service")

        assert event["tags"] == {
            "key1": "value1",
            "service.name": "checkout",
            "host.name": "web-1",
            "ot.status_code": "OK",
        }

    def test_sub_microsecond_timing_is_rounded(self, make_span: "SpanFactory") -> None:
        span = make_span(start_time=START_TIME_NS + 1_500, duration=499)

        event = to_event(span, "my-service")

        assert event["timestamp"] == START_TIME_US + 2
        assert event["duration"] == 0


@pytest.mark.unit
class TestToHoneyTags:
    """Tests for to_honey_tags()."""

    def test_unset_status_adds_no_status_tags(self) -> None:
        tags = to_honey_tags(
            {"key1": "value1"},
            Status(StatusCode.UNSET),
            "ot.status_code",
            "ot.status_description",
            {},
        )

        assert tags == {"key1": "value1"}

    def test_ok_status_adds_only_code(self) -> None:
        tags = to_honey_tags(
            {},
            Status(StatusCode.OK),
            "ot.status_code",
            "ot.status_description",
            {},
        )

        assert tags == {"ot.status_code": "OK"}

    def test_error_without_description_adds_only_code(self) -> None:
        tags = to_honey_tags(
            {},
            Status(StatusCode.ERROR),
            "ot.status_code",
            "ot.status_description",
            {},
        )

        assert tags == {"ot.status_code": "ERROR"}

    def test_resource_attributes_override_span_attributes(self) -> None:
        tags = to_honey_tags(
            {"env": "span", "only.span": 1},
            Status(StatusCode.UNSET),
            "ot.status_code",
            "ot.status_description",
            {"env": "resource"},
        )

        assert tags == {"env": "resource", "only.span": "1"}

    def test_status_tags_override_attributes(self) -> None:
        tags = to_honey_tags(
            {"ot.status_code": "from-span"},
            Status(StatusCode.ERROR, "bad request"),
            "ot.status_code",
            "ot.status_description",
            {"ot.status_description": "from-resource"},
        )

        assert tags == {
            "ot.status_code": "ERROR",
            "ot.status_description": "bad request",
        }

    def test_none_mappings_are_empty(self) -> None:
        tags = to_honey_tags(
            None,
            Status(StatusCode.UNSET),
            "ot.status_code",
            "ot.status_description",
            None,
        )

        assert tags == {}


@pytest.mark.unit
class TestHelpers:
    """Tests for the small conversion helpers."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("text", "text"),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            (1.5, "1.5"),
            (("a", "b"), "a,b"),
            ([1, True], "1,true"),
        ],
    )
    def test_stringify(self, value: object, expected: str) -> None:
        assert stringify(value) == expected

    def test_internal_kind_maps_to_none(self) -> None:
        assert to_honey_kind(SpanKind.INTERNAL) is None

    def test_every_kind_is_mapped(self) -> None:
        for kind in SpanKind:
            if kind is not SpanKind.INTERNAL:
                assert to_honey_kind(kind) == kind.name

    def test_ns_to_microseconds(self) -> None:
        assert ns_to_microseconds(DURATION_NS) == DURATION_US
        assert ns_to_microseconds(1_499) == 1
        assert ns_to_microseconds(1_500) == 2
        assert ns_to_microseconds(None) == 0

    def test_empty_events_give_empty_annotations(self) -> None:
        assert to_honey_annotations([]) == []
