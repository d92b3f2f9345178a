"""Exporter configuration and defaults."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from honeycomb_exporter.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = "OpenTelemetry Service"
DEFAULT_STATUS_CODE_TAG_NAME = "ot.status_code"
DEFAULT_STATUS_DESCRIPTION_TAG_NAME = "ot.status_description"

# camelCase option names accepted for compatibility with other
# Honeycomb exporters, mapped to ExporterConfig fields
_OPTION_ALIASES: dict[str, str] = {
    "writeKey": "write_key",
    "serviceName": "service_name",
    "statusCodeTagName": "status_code_tag_name",
    "statusDescriptionTagName": "status_description_tag_name",
    "apiHost": "url",
    "api_host": "url",
}


@dataclass(frozen=True)
class ExporterConfig:
    """Honeycomb exporter configuration.

    Supplied once when the exporter is created and never changed afterwards.
    """

    dataset: str
    write_key: str
    # Overrides the libhoney api host (default https://api.honeycomb.io)
    url: str | None = None
    # When set, the resource service.name of exported spans is ignored
    service_name: str | None = None
    status_code_tag_name: str = DEFAULT_STATUS_CODE_TAG_NAME
    status_description_tag_name: str = DEFAULT_STATUS_DESCRIPTION_TAG_NAME

    def __post_init__(self) -> None:
        # Empty tag names fall back to the defaults
        if not self.status_code_tag_name:
            object.__setattr__(
                self, "status_code_tag_name", DEFAULT_STATUS_CODE_TAG_NAME
            )
        if not self.status_description_tag_name:
            object.__setattr__(
                self,
                "status_description_tag_name",
                DEFAULT_STATUS_DESCRIPTION_TAG_NAME,
            )

    def validate(self) -> list[str]:
        """Return a list of validation error messages. Empty if valid."""
        errors: list[str] = []

        if not self.dataset:
            errors.append("dataset is required")
        if not self.write_key:
            errors.append("write_key is required")

        return errors

    @classmethod
    def from_options(cls, **options: Any) -> ExporterConfig:
        """Build a config from keyword options.

        Both snake_case field names and the camelCase names used by other
        Honeycomb exporters (``writeKey``, ``serviceName``, ...) are accepted.

        Raises:
            ConfigurationError: If an option is not recognized.
        """
        kwargs: dict[str, Any] = {}
        for name, value in options.items():
            field_name = _OPTION_ALIASES.get(name, name)
            if field_name not in cls.__dataclass_fields__:
                raise ConfigurationError(f"Unknown exporter option: {name}")
            kwargs[field_name] = value

        kwargs.setdefault("dataset", "")
        kwargs.setdefault("write_key", "")
        for tag_field in ("status_code_tag_name", "status_description_tag_name"):
            if kwargs.get(tag_field) is None:
                kwargs.pop(tag_field, None)

        return cls(**kwargs)


def resolve_config(
    config: ExporterConfig | None = None, **options: Any
) -> ExporterConfig:
    """Return a validated config from either a config object or options.

    Raises:
        ConfigurationError: If both forms are given, or if a
            destination identifier is missing.
    """
    if config is not None and options:
        raise ConfigurationError(
            "Pass either an ExporterConfig or keyword options, not both"
        )
    if config is None:
        config = ExporterConfig.from_options(**options)

    errors = config.validate()
    if errors:
        raise ConfigurationError(
            f"Configuration validation failed: {'; '.join(errors)}"
        )

    logger.debug(
        "Exporter configured for dataset %s (url=%s)", config.dataset, config.url
    )
    return config
