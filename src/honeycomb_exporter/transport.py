"""libhoney transport for Honeycomb events.

libhoney batches events and delivers them from its own threads, reporting
one response per event on a queue. HoneyTransport sends a whole batch of
events, reads the response queue on a daemon thread and calls the batch's
``done`` callback once every event of that batch has been answered.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Sequence

import libhoney
from libhoney.errors import SendError
from opentelemetry.sdk.trace.export import SpanExportResult

from honeycomb_exporter._internal.logging import log_debug, log_internal_error
from honeycomb_exporter.exceptions import TransportError
from honeycomb_exporter.types import ExportResult

if TYPE_CHECKING:
    from honeycomb_exporter.types import HoneyEvent, ResultCallback

logger = logging.getLogger(__name__)

MICROS_PER_SECOND = 1_000_000


@dataclass
class _PendingBatch:
    done: ResultCallback
    remaining: int
    errors: list[TransportError] = field(default_factory=list)


class HoneyTransport:
    """Sends Honeycomb events through a libhoney client.

    Args:
        dataset: Honeycomb dataset name.
        write_key: Honeycomb API key.
        api_host: Alternative API host, e.g. a Refinery proxy.
        client: A ready libhoney client. When given, dataset, write_key and
            api_host are not used to build one.

    Raises:
        Exception: Whatever libhoney raises while building the client.
    """

    def __init__(
        self,
        dataset: str,
        write_key: str,
        api_host: str | None = None,
        *,
        client: Any | None = None,
    ) -> None:
        if client is None:
            options: dict[str, Any] = {
                "writekey": write_key,
                "dataset": dataset,
                # Responses are how batches complete, so none may be dropped
                "block_on_response": True,
            }
            if api_host:
                options["api_host"] = api_host
            client = libhoney.Client(**options)

        self._client = client
        self._batch_ids = itertools.count(1)
        self._pending: dict[int, _PendingBatch] = {}
        self._lock = threading.Lock()
        self._closed = False

        self._reader = threading.Thread(
            target=self._read_responses,
            name="honeycomb-exporter-responses",
            daemon=True,
        )
        self._reader.start()

    @property
    def client(self) -> Any:
        """The underlying libhoney client."""
        return self._client

    def send(self, events: Sequence[HoneyEvent], done: ResultCallback) -> None:
        """Send events to Honeycomb.

        ``done`` is called exactly once: immediately with SUCCESS for an
        empty batch or with FAILURE if libhoney refuses an event, otherwise
        from the response reader once every event has been answered.
        """
        if not events:
            log_debug("Honeycomb send with empty spans")
            done(ExportResult(SpanExportResult.SUCCESS))
            return

        batch_id = next(self._batch_ids)
        with self._lock:
            self._pending[batch_id] = _PendingBatch(done=done, remaining=len(events))

        try:
            for index, event in enumerate(events):
                ev = self._client.new_event()
                for key, value in event.items():
                    ev.add_field(key, value)
                ev.created_at = datetime.fromtimestamp(
                    event["timestamp"] / MICROS_PER_SECOND, tz=timezone.utc
                )
                ev.metadata = (batch_id, index)
                ev.send()
        except SendError as e:
            logger.error("libhoney refused event of batch %d: %s", batch_id, e)
            self._fail_batch(batch_id, e)
        except Exception as e:
            log_internal_error("send", e)
            self._fail_batch(batch_id, e)

    def flush(self) -> None:
        """Ask libhoney to send everything it has queued.

        Blocks until libhoney has joined its sender threads.
        """
        self._client.flush()

    def close(self) -> None:
        """Flush and close the libhoney client. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._client.close()
        self._reader.join(timeout=5)

    def _fail_batch(self, batch_id: int, error: BaseException) -> None:
        with self._lock:
            batch = self._pending.pop(batch_id, None)
        if batch is not None:
            self._complete(
                batch.done, ExportResult(SpanExportResult.FAILURE, error)
            )

    def _read_responses(self) -> None:
        responses = self._client.responses()
        while True:
            response = responses.get()
            # libhoney enqueues None on flush() as well as on close(), only
            # the one following close() ends the reader
            if response is None:
                if self._closed:
                    break
                continue
            try:
                self._handle_response(response)
            except Exception as e:
                log_internal_error("response handling", e)

    def _handle_response(self, response: dict[str, Any]) -> None:
        status_code = response.get("status_code") or 0
        error = response.get("error")
        failed = bool(error) or not 200 <= status_code < 300
        if failed:
            logger.error(
                "Honeycomb rejected event (status=%s): %s",
                status_code,
                error or response.get("body"),
            )

        metadata = response.get("metadata")
        if not isinstance(metadata, tuple) or len(metadata) != 2:
            return
        batch_id = metadata[0]

        with self._lock:
            batch = self._pending.get(batch_id)
            if batch is None:
                return
            if failed:
                batch.errors.append(
                    TransportError(
                        f"Honeycomb responded with status {status_code}",
                        status_code=status_code,
                        cause=error,
                    )
                )
            batch.remaining -= 1
            if batch.remaining > 0:
                return
            del self._pending[batch_id]

        if batch.errors:
            result = ExportResult(SpanExportResult.FAILURE, batch.errors[0])
        else:
            result = ExportResult(SpanExportResult.SUCCESS)
        self._complete(batch.done, result)

    @staticmethod
    def _complete(done: ResultCallback, result: ExportResult) -> None:
        try:
            done(result)
        except Exception as e:
            log_internal_error("export result callback", e)
