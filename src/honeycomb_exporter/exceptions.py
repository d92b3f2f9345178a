"""Exception classes for the Honeycomb exporter."""

from __future__ import annotations


class HoneycombExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigurationError(HoneycombExporterError):
    """Raised when the exporter cannot be constructed.

    This is only raised from the exporter constructor, either because a
    destination identifier (dataset, write key) is missing or because the
    libhoney client itself refused the configuration.
    """


class ExporterShutdownError(HoneycombExporterError):
    """Carried in a failed export result when the exporter is shut down."""

    def __init__(self, message: str = "Exporter has been shutdown") -> None:
        super().__init__(message)


class TransportError(HoneycombExporterError):
    """Carried in a failed export result when Honeycomb rejected a record.

    Attributes:
        status_code: HTTP status reported by libhoney (0 when the request
            never completed).
        cause: The error libhoney attached to the response, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause
