"""Honeycomb span exporter.

HoneycombExporter plugs into the OpenTelemetry SDK span processors, turns
each finished span into a Honeycomb event and hands the batch to libhoney.
It keeps track of the exports still waiting for libhoney so that shutdown()
can drain them.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from concurrent.futures import Future, wait
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING, Any, Sequence

from opentelemetry.sdk.resources import SERVICE_NAME
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from honeycomb_exporter._internal.logging import log_internal_error
from honeycomb_exporter.config import DEFAULT_SERVICE_NAME, resolve_config
from honeycomb_exporter.exceptions import ConfigurationError, ExporterShutdownError
from honeycomb_exporter.transform import to_event
from honeycomb_exporter.transport import HoneyTransport
from honeycomb_exporter.types import ExportResult

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan

    from honeycomb_exporter.config import ExporterConfig
    from honeycomb_exporter.types import ResultCallback

logger = logging.getLogger(__name__)


def _service_name_of(span: ReadableSpan) -> str:
    """Return the resource service name of a span, or the default."""
    attributes = span.resource.attributes if span.resource is not None else {}
    return str(attributes.get(SERVICE_NAME) or DEFAULT_SERVICE_NAME)


class HoneycombExporter(SpanExporter):
    """SpanExporter sending spans to Honeycomb as events.

    Args:
        config: Exporter configuration. Alternatively pass the options as
            keyword arguments (``dataset``, ``write_key``/``writeKey``,
            ``url``, ``service_name``/``serviceName``, ...).
        transport: Transport to send events with. Defaults to a
            HoneyTransport bound to the configured dataset, key and url.

    Raises:
        ConfigurationError: If the dataset or write key is missing, or if
            the libhoney client could not be created.

    Example:
        >>> from opentelemetry.sdk.trace.export import BatchSpanProcessor
        >>> exporter = HoneycombExporter(dataset="my-dataset", write_key="key")
        >>> provider.add_span_processor(BatchSpanProcessor(exporter))
    """

    def __init__(
        self,
        config: ExporterConfig | None = None,
        *,
        transport: HoneyTransport | None = None,
        **options: Any,
    ) -> None:
        self._config = resolve_config(config, **options)

        if transport is None:
            try:
                transport = HoneyTransport(
                    self._config.dataset,
                    self._config.write_key,
                    self._config.url,
                )
            except Exception as e:
                raise ConfigurationError(
                    f"Could not create the libhoney client: {e}"
                ) from e
        self._transport = transport

        self._service_name: str | None = self._config.service_name
        self._is_shutdown = False
        self._export_ids = itertools.count(1)
        self._in_flight: dict[int, Future[ExportResult]] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> ExporterConfig:
        return self._config

    @property
    def service_name(self) -> str | None:
        """Service name reported on events, None until the first batch."""
        return self._service_name

    @property
    def is_shutdown(self) -> bool:
        return self._is_shutdown

    @property
    def pending_count(self) -> int:
        """Number of exports still waiting for the transport."""
        with self._lock:
            return len(self._in_flight)

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Export spans and wait for Honeycomb to answer.

        Called by the SDK span processors from their worker thread.
        """
        return self.export_async(spans).result().code

    def export_async(
        self,
        spans: Sequence[ReadableSpan],
        result_callback: ResultCallback | None = None,
    ) -> Future[ExportResult]:
        """Start exporting spans without waiting for the transport.

        ``result_callback`` is called exactly once with the outcome, after
        which the returned future resolves to the same result. Nothing is
        raised from here; failures are reported through the result.
        """
        future: Future[ExportResult] = Future()

        with self._lock:
            if self._service_name is None and spans:
                self._service_name = _service_name_of(spans[0])
            service_name = self._service_name or DEFAULT_SERVICE_NAME
            is_shutdown = self._is_shutdown
            if not is_shutdown:
                export_id = next(self._export_ids)
                self._in_flight[export_id] = future

        logger.debug("Honeycomb exporter export (%d spans)", len(spans))

        if is_shutdown:
            # Report on another thread so callers never see the callback
            # run before export_async returns
            timer = threading.Timer(
                0,
                self._finish,
                args=(
                    future,
                    result_callback,
                    ExportResult(SpanExportResult.FAILURE, ExporterShutdownError()),
                ),
            )
            timer.daemon = True
            timer.start()
            return future

        def done(result: ExportResult) -> None:
            with self._lock:
                if self._in_flight.pop(export_id, None) is None:
                    return
            self._finish(future, result_callback, result)

        try:
            events = [
                to_event(
                    span,
                    service_name,
                    self._config.status_code_tag_name,
                    self._config.status_description_tag_name,
                )
                for span in spans
            ]
            self._transport.send(events, done)
        except Exception as e:
            log_internal_error("export", e)
            done(ExportResult(SpanExportResult.FAILURE, e))

        return future

    def shutdown(self) -> None:
        """Stop accepting spans and wait for in-flight exports to finish.

        In-flight exports are drained, not cancelled. Calling shutdown more
        than once is harmless.
        """
        logger.debug("Honeycomb exporter shutdown")
        with self._lock:
            self._is_shutdown = True
            pending = list(self._in_flight.values())

        for future in pending:
            future.result()

        self._transport.close()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Flush libhoney and wait for in-flight exports.

        The libhoney flush counts against the timeout. When it overruns, it
        keeps going on its own thread and False is returned.

        Returns:
            True if every in-flight export finished within the timeout.
        """
        deadline = time.monotonic() + timeout_millis / 1000
        with self._lock:
            pending = list(self._in_flight.values())

        flushed: Future[None] = Future()

        def flush() -> None:
            try:
                self._transport.flush()
            except Exception as e:
                flushed.set_exception(e)
            else:
                flushed.set_result(None)

        threading.Thread(
            target=flush, name="honeycomb-exporter-flush", daemon=True
        ).start()
        try:
            flushed.result(timeout=timeout_millis / 1000)
        except FutureTimeoutError:
            logger.warning("libhoney flush did not finish within %d ms", timeout_millis)
            return False
        except Exception as e:
            log_internal_error("force_flush", e)
            return False

        remaining = max(0.0, deadline - time.monotonic())
        _, not_done = wait(pending, timeout=remaining)
        return not not_done

    @staticmethod
    def _finish(
        future: Future[ExportResult],
        result_callback: ResultCallback | None,
        result: ExportResult,
    ) -> None:
        if not result.succeeded:
            logger.debug("Honeycomb export failed: %s", result.error)
        if result_callback is not None:
            try:
                result_callback(result)
            except Exception as e:
                log_internal_error("export result callback", e)
        future.set_result(result)
