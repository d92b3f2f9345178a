"""OpenTelemetry span exporter for Honeycomb.

    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from honeycomb_exporter import HoneycombExporter

    exporter = HoneycombExporter(dataset="my-dataset", write_key="my-key")
    provider.add_span_processor(BatchSpanProcessor(exporter))
"""

from __future__ import annotations

from honeycomb_exporter.config import (
    DEFAULT_SERVICE_NAME,
    DEFAULT_STATUS_CODE_TAG_NAME,
    DEFAULT_STATUS_DESCRIPTION_TAG_NAME,
    ExporterConfig,
)
from honeycomb_exporter.exceptions import (
    ConfigurationError,
    ExporterShutdownError,
    HoneycombExporterError,
    TransportError,
)
from honeycomb_exporter.exporter import HoneycombExporter
from honeycomb_exporter.provider import create_honeycomb_provider
from honeycomb_exporter.transform import to_event
from honeycomb_exporter.types import ExportResult

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DEFAULT_SERVICE_NAME",
    "DEFAULT_STATUS_CODE_TAG_NAME",
    "DEFAULT_STATUS_DESCRIPTION_TAG_NAME",
    "ExportResult",
    "ExporterConfig",
    "ExporterShutdownError",
    "HoneycombExporter",
    "HoneycombExporterError",
    "TransportError",
    "__version__",
    "create_honeycomb_provider",
    "to_event",
]
