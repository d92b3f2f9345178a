"""Package logger shared by the exporter modules.

Records go to the ``honeycomb_exporter`` logger, which only lets warnings
through until the application lowers its level.
"""

import logging

logger = logging.getLogger("honeycomb_exporter")
logger.setLevel(logging.WARNING)


def log_internal_error(operation: str, error: BaseException) -> None:
    """Record a failure that is reported through an export result, not raised."""
    logger.warning(
        "%s failed inside the Honeycomb exporter: %s", operation, error, exc_info=error
    )


def log_debug(message: str, *args: object) -> None:
    logger.debug(message, *args)
