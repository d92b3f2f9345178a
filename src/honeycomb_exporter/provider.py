"""TracerProvider creation for Honeycomb."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor

from honeycomb_exporter.exporter import HoneycombExporter

if TYPE_CHECKING:
    from honeycomb_exporter.config import ExporterConfig

logger = logging.getLogger(__name__)


def create_honeycomb_provider(
    config: ExporterConfig,
    *,
    resource: Resource | None = None,
    batch: bool = True,
) -> TracerProvider:
    """Create a TracerProvider exporting to Honeycomb.

    The provider is not installed as the global tracer provider; pass it to
    ``opentelemetry.trace.set_tracer_provider`` if that is wanted.

    Args:
        config: Exporter configuration.
        resource: Resource of the provider. Defaults to one carrying the
            configured service name, if any.
        batch: Use BatchSpanProcessor if True, SimpleSpanProcessor if False.

    Returns:
        TracerProvider with a HoneycombExporter attached.

    Raises:
        ConfigurationError: If the exporter cannot be created.
    """
    exporter = HoneycombExporter(config)

    if resource is None:
        attributes = {SERVICE_NAME: config.service_name} if config.service_name else {}
        resource = Resource.create(attributes)
    provider = TracerProvider(resource=resource)

    processor: BatchSpanProcessor | SimpleSpanProcessor
    if batch:
        processor = BatchSpanProcessor(exporter)
    else:
        processor = SimpleSpanProcessor(exporter)
    provider.add_span_processor(processor)

    logger.debug(
        "TracerProvider configured for Honeycomb dataset %s (batch=%s)",
        config.dataset,
        batch,
    )

    return provider
