"""Unit tests for configuration loading and validation."""

from datetime import timedelta
from pathlib import Path

import pytest

from hnotify.config.error_hints import format_validation_error, get_error_hint
from hnotify.config.loader import ConfigLoader, ConfigValidationError
from hnotify.config.schemas import NotifierConfig
from hnotify.evaluator.models import FetchFailurePolicy


@pytest.fixture
def loader() -> ConfigLoader:
    """Create a loader."""
    return ConfigLoader(run_id="test")


class TestDefaults:
    """Tests for schema defaults."""

    def test_defaults_without_file(self, loader: ConfigLoader) -> None:
        """Loading with no file and no overrides yields the defaults."""
        config = loader.load()

        assert config.score_threshold == 100
        assert config.stale_age == timedelta(hours=48)
        assert config.retention == timedelta(days=5)
        assert config.evaluation_interval == timedelta(seconds=10)
        assert config.eviction_interval == timedelta(hours=8)
        assert config.fetch_failure_policy == FetchFailurePolicy.SKIP
        assert config.fetch.base_url == "https://hacker-news.firebaseio.com/v0"
        assert config.fetch.timeout_seconds == 10.0

    def test_config_is_frozen(self) -> None:
        """Config instances are immutable."""
        config = NotifierConfig()

        with pytest.raises(ValueError, match="frozen"):
            config.score_threshold = 5  # type: ignore[misc]


class TestYamlLoading:
    """Tests for YAML file loading."""

    def test_loads_file(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Values from the file replace defaults; durations accept ISO 8601."""
        path = tmp_path / "hnotify.yaml"
        path.write_text(
            "score_threshold: 250\n"
            "stale_age: P1D\n"
            "retention: 604800\n"
            "fetch_failure_policy: abort\n"
            "fetch:\n"
            "  timeout_seconds: 3\n"
            "  retry_policy:\n"
            "    max_retries: 1\n",
            encoding="utf-8",
        )

        config = loader.load(path)

        assert config.score_threshold == 250
        assert config.stale_age == timedelta(days=1)
        assert config.retention == timedelta(days=7)
        assert config.fetch_failure_policy == FetchFailurePolicy.ABORT
        assert config.fetch.timeout_seconds == 3.0
        assert config.fetch.retry_policy.max_retries == 1

    def test_empty_file_uses_defaults(
        self, loader: ConfigLoader, tmp_path: Path
    ) -> None:
        """An empty YAML document is treated as an empty mapping."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert loader.load(path) == NotifierConfig()

    def test_overrides_win_over_file(
        self, loader: ConfigLoader, tmp_path: Path
    ) -> None:
        """Overrides take precedence; None overrides are ignored."""
        path = tmp_path / "hnotify.yaml"
        path.write_text("score_threshold: 250\nstale_age: 3600\n", encoding="utf-8")

        config = loader.load(
            path,
            {"score_threshold": 50, "stale_age": None, "fetch": {"timeout_seconds": 2}},
        )

        assert config.score_threshold == 50
        assert config.stale_age == timedelta(hours=1)
        assert config.fetch.timeout_seconds == 2.0

    def test_missing_file(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """A missing file is reported as file_not_found."""
        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(tmp_path / "nope.yaml")

        assert exc_info.value.errors[0]["type"] == "file_not_found"
        assert loader.validation_errors == exc_info.value.errors

    def test_invalid_yaml(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """Malformed YAML is reported as yaml_parse_error."""
        path = tmp_path / "bad.yaml"
        path.write_text("score_threshold: [1, 2\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(path)

        assert exc_info.value.errors[0]["type"] == "yaml_parse_error"
        assert exc_info.value.file_path == str(path)

    def test_non_mapping_root(self, loader: ConfigLoader, tmp_path: Path) -> None:
        """A YAML list at the top level is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(path)

        assert exc_info.value.errors[0]["loc"] == "<root>"


class TestValidation:
    """Tests for schema validation failures."""

    def _error_types(self, loader: ConfigLoader, values: dict[str, object]) -> set[str]:
        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(overrides=values)
        return {e["type"] for e in exc_info.value.errors}

    def test_unknown_key(self, loader: ConfigLoader) -> None:
        """Unknown keys are rejected."""
        assert "extra_forbidden" in self._error_types(loader, {"thresold": 5})

    def test_negative_threshold(self, loader: ConfigLoader) -> None:
        """The threshold cannot be negative."""
        assert "greater_than_equal" in self._error_types(
            loader, {"score_threshold": -1}
        )

    def test_zero_duration(self, loader: ConfigLoader) -> None:
        """Durations must be positive."""
        assert "value_error" in self._error_types(loader, {"evaluation_interval": 0})

    def test_retention_must_exceed_stale_age(self, loader: ConfigLoader) -> None:
        """Retention shorter than stale_age would forget unresolved items."""
        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(overrides={"stale_age": "P3D", "retention": "P2D"})

        assert "must be greater than" in exc_info.value.errors[0]["msg"]

    def test_min_cannot_exceed_max(self, loader: ConfigLoader) -> None:
        """min_ranked_ids must not exceed a non-zero max_ranked_ids."""
        assert "value_error" in self._error_types(
            loader, {"min_ranked_ids": 50, "max_ranked_ids": 10}
        )

    def test_invalid_policy(self, loader: ConfigLoader) -> None:
        """Only skip and abort are accepted."""
        assert "enum" in self._error_types(loader, {"fetch_failure_policy": "retry"})

    def test_nested_location(self, loader: ConfigLoader) -> None:
        """Nested errors are reported with a dotted location."""
        with pytest.raises(ConfigValidationError) as exc_info:
            loader.load(overrides={"fetch": {"base_url": "gopher://x"}})

        assert exc_info.value.errors[0]["loc"] == "fetch.base_url"


class TestSummary:
    """Tests for NotifierConfig.summary."""

    def test_summary_values(self) -> None:
        """The summary flattens durations to hours or seconds."""
        summary = NotifierConfig().summary()

        assert summary["stale_age_hours"] == 48
        assert summary["retention_hours"] == 120
        assert summary["evaluation_interval_seconds"] == 10
        assert summary["fetch_failure_policy"] == "skip"
        assert summary["max_retries"] == 3


class TestErrorHints:
    """Tests for error hint formatting."""

    def test_field_hint_takes_precedence(self) -> None:
        """Known fields get a field-specific hint."""
        assert "skip" in get_error_hint("enum", "fetch_failure_policy")

    def test_nested_field_hint(self) -> None:
        """The last path segment selects the field hint."""
        assert "http" in get_error_hint("value_error", "fetch.base_url")

    def test_type_hint(self) -> None:
        """Unknown fields fall back to the error-type hint."""
        assert get_error_hint("missing", "unknown") == (
            "This field is required. Please add it to your configuration."
        )

    def test_generic_hint(self) -> None:
        """Unknown types fall back to a generic hint."""
        assert "documentation" in get_error_hint("weird_type")

    def test_format_with_hint(self) -> None:
        """Formatted errors carry the hint on a second line."""
        formatted = format_validation_error(
            "score_threshold", "Input should be >= 0", "greater_than_equal"
        )

        assert formatted.startswith("score_threshold: Input should be >= 0")
        assert "\n    Hint: " in formatted

    def test_format_without_hint(self) -> None:
        """Hints can be suppressed."""
        formatted = format_validation_error(
            "file", "File not found", "file_not_found", include_hint=False
        )

        assert formatted == "file: File not found"
