"""Configuration loader with validation."""

import time
from pathlib import Path
from typing import Any, NoReturn

import structlog
import yaml
from pydantic import ValidationError

from hnotify.config.constants import COMPONENT_CONFIG
from hnotify.config.schemas import NotifierConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when configuration loading or validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str | None) -> None:
        """Initialize the error.

        Args:
            errors: List of error details with ``loc``, ``msg`` and ``type``.
            file_path: Path to the file that failed, None without a file.
        """
        self.errors = errors
        self.file_path = file_path
        source = file_path or "<defaults>"
        super().__init__(f"Validation failed for {source}: {len(errors)} errors")


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overrides`` into a copy of ``base``.

    ``None`` override values are ignored so unset CLI options fall through.
    """
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads an optional YAML file, applies overrides and validates.

    Precedence, lowest to highest: schema defaults, YAML file, overrides.
    """

    def __init__(self, run_id: str) -> None:
        """Initialize the loader.

        Args:
            run_id: Unique identifier for the current run.
        """
        self._run_id = run_id
        self._validation_errors: list[dict[str, str]] = []
        self._validation_duration_ms: float = 0
        self._log = logger.bind(component=COMPONENT_CONFIG, run_id=run_id)

    @property
    def validation_errors(self) -> list[dict[str, str]]:
        """Get validation errors from the last load, if any."""
        return self._validation_errors.copy()

    @property
    def validation_duration_ms(self) -> float:
        """Get validation duration in milliseconds."""
        return self._validation_duration_ms

    def load(
        self,
        config_path: Path | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> NotifierConfig:
        """Load and validate the configuration.

        Args:
            config_path: Optional YAML file.
            overrides: Values that take precedence over the file.

        Returns:
            Validated NotifierConfig.

        Raises:
            ConfigValidationError: If the file is missing, unparseable or
                the merged values fail validation.
        """
        start_time = time.perf_counter()
        self._validation_errors = []
        file_label = str(config_path) if config_path else None

        data: dict[str, Any] = {}
        if config_path is not None:
            data = self._read_yaml(config_path)

        merged = _merge(data, overrides or {})

        try:
            config = NotifierConfig.model_validate(merged)
        except ValidationError as e:
            for err in e.errors():
                self._validation_errors.append(
                    {
                        "loc": ".".join(str(loc) for loc in err["loc"]) or "<root>",
                        "msg": err["msg"],
                        "type": err["type"],
                    }
                )
            self._log.error(
                "config_validation_failed",
                file_path=file_label,
                validation_error_count=len(self._validation_errors),
                errors=self._validation_errors,
            )
            raise ConfigValidationError(self._validation_errors, file_label) from e

        self._validation_duration_ms = (time.perf_counter() - start_time) * 1000
        self._log.info(
            "config_validated",
            file_path=file_label,
            config_validation_duration_ms=round(self._validation_duration_ms, 2),
            **config.summary(),
        )
        return config

    def _read_yaml(self, config_path: Path) -> dict[str, Any]:
        """Read a YAML mapping from disk.

        Raises:
            ConfigValidationError: On a missing file, bad YAML or a non-mapping.
        """
        file_label = str(config_path)
        try:
            parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            self._fail(file_label, "file", f"File not found: {e}", "file_not_found")
        except yaml.YAMLError as e:
            self._fail(file_label, "file", f"YAML parse error: {e}", "yaml_parse_error")

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            self._fail(
                file_label,
                "<root>",
                "Top level must be a mapping",
                "dict_type",
            )
        self._log.debug("config_file_loaded", file_path=file_label, keys=list(parsed))
        return parsed

    def _fail(
        self, file_label: str, loc: str, msg: str, error_type: str
    ) -> NoReturn:
        """Record a single error and raise."""
        self._validation_errors = [{"loc": loc, "msg": msg, "type": error_type}]
        self._log.error(
            "config_load_failed",
            file_path=file_label,
            error=msg,
            error_type=error_type,
        )
        raise ConfigValidationError(self._validation_errors, file_label)
