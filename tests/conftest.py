"""Shared pytest configuration and fixtures.

This module provides test fixtures that:
1. Build finished ReadableSpan objects without running a tracer
2. Provide typed fakes (FakeHoneyClient, ControlledTransport) instead of
   MagicMock so that no test touches the network
3. Shut down every exporter a test creates
"""

from __future__ import annotations

from typing import Any, Callable, Generator

import pytest

from honeycomb_exporter.exporter import HoneycombExporter
from honeycomb_exporter.transport import HoneyTransport
from tests.fakes import ControlledTransport, FakeHoneyClient
from tests.spans import SpanFactory, build_span


@pytest.fixture
def make_span() -> SpanFactory:
    """Provide the span builder to tests."""
    return build_span


@pytest.fixture
def fake_client() -> FakeHoneyClient:
    """Provide a FakeHoneyClient answering every event with 202."""
    return FakeHoneyClient()


@pytest.fixture
def transport(fake_client: FakeHoneyClient) -> Generator[HoneyTransport, None, None]:
    """Provide a HoneyTransport bound to the fake libhoney client."""
    transport = HoneyTransport("my-dataset", "my-writekey", client=fake_client)
    yield transport
    transport.close()


@pytest.fixture
def controlled_transport() -> ControlledTransport:
    """Provide a transport whose batches complete only when the test says so.

    Tests must complete every recorded batch, otherwise exporter shutdown in
    teardown waits forever.
    """
    return ControlledTransport()


@pytest.fixture
def exporter_factory() -> Generator[Callable[..., HoneycombExporter], None, None]:
    """Create exporters and shut them down after the test.

    Usage:
        def test_something(exporter_factory, transport):
            exporter = exporter_factory(transport=transport, service_name="svc")
    """
    created: list[HoneycombExporter] = []

    def factory(**options: Any) -> HoneycombExporter:
        options.setdefault("dataset", "my-dataset")
        options.setdefault("write_key", "my-writekey")
        exporter = HoneycombExporter(**options)
        created.append(exporter)
        return exporter

    yield factory

    for exporter in created:
        exporter.shutdown()
