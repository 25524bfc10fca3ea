"""CLI commands for the notifier."""

import json
import logging
import sys
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import click
import structlog

from hnotify import __version__
from hnotify.app import build_notifier
from hnotify.config.constants import COMPONENT_CLI
from hnotify.config.error_hints import format_validation_error
from hnotify.config.loader import ConfigLoader, ConfigValidationError
from hnotify.config.schemas import NotifierConfig
from hnotify.notify.sinks import SINK_NAMES, NotificationSink, build_sink
from hnotify.observability.logging import (
    bind_run_context,
    configure_logging,
    parse_level,
)
from hnotify.observability.metrics import NotifierMetrics
from hnotify.settings import AppSettings, get_settings


logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class RunOptions:
    """Options shared by every command."""

    config_path: Path | None
    json_logs: bool | None
    verbose: bool
    overrides: dict[str, Any] = field(default_factory=dict)
    sinks: tuple[str, ...] = ()
    jsonl_path: Path | None = None


def _policy_options(func: F) -> F:
    """Attach the config file and policy override options to a command."""
    options = [
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            default=None,
            help="YAML configuration file (default: $HNOTIFY_CONFIG).",
        ),
        click.option(
            "--threshold",
            type=click.IntRange(min=0),
            default=None,
            help="Minimum score that triggers a notification (default: 100).",
        ),
        click.option(
            "--stale-hours",
            type=click.FloatRange(min=0, min_open=True),
            default=None,
            help="Hours after which a low-scoring story is no longer re-checked (default: 48).",
        ),
        click.option(
            "--retention-days",
            type=click.FloatRange(min=0, min_open=True),
            default=None,
            help="Days after which a resolved story is forgotten (default: 5).",
        ),
        click.option(
            "--on-fetch-error",
            "fetch_failure_policy",
            type=click.Choice(["skip", "abort"]),
            default=None,
            help="Skip a failed item or abort the pass (default: skip).",
        ),
        click.option(
            "--json-logs/--console-logs",
            default=None,
            help="Log format (default: JSON, or $HNOTIFY_JSON_LOGS).",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Enable debug logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _sink_options(func: F) -> F:
    """Attach sink selection options to a command."""
    func = click.option(
        "--jsonl-path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Output file for the jsonl sink (default: $HNOTIFY_JSONL_PATH).",
    )(func)
    return click.option(
        "--sink",
        "sinks",
        type=click.Choice(list(SINK_NAMES)),
        multiple=True,
        help="Notification sink; repeat for several (default: console).",
    )(func)


def _overrides(
    threshold: int | None,
    stale_hours: float | None,
    retention_days: float | None,
    fetch_failure_policy: str | None,
) -> dict[str, Any]:
    """Translate CLI options into config overrides; unset options are None."""
    return {
        "score_threshold": threshold,
        "stale_age": stale_hours * 3600 if stale_hours is not None else None,
        "retention": retention_days * 86400 if retention_days is not None else None,
        "fetch_failure_policy": fetch_failure_policy,
    }


def _setup(
    options: RunOptions, command: str
) -> tuple[str, AppSettings, structlog.typing.FilteringBoundLogger]:
    """Configure logging and return run ID, settings and a bound logger."""
    settings = get_settings()
    run_id = str(uuid.uuid4())

    level = logging.DEBUG if options.verbose else parse_level(settings.log_level)
    json_logs = settings.json_logs if options.json_logs is None else options.json_logs
    configure_logging(level=level, json_format=json_logs)
    bind_run_context(run_id)

    log = logger.bind(run_id=run_id, component=COMPONENT_CLI, command=command)
    return run_id, settings, log  # type: ignore[return-value]


def _load_configuration(
    options: RunOptions,
    settings: AppSettings,
    run_id: str,
    log: structlog.typing.FilteringBoundLogger,
) -> NotifierConfig:
    """Load and validate configuration, exit with code 1 on failure."""
    loader = ConfigLoader(run_id=run_id)
    config_path = options.config_path or settings.config

    try:
        return loader.load(config_path, options.overrides)
    except ConfigValidationError as e:
        log.warning("config_load_failed", errors=e.errors)
        click.echo("Configuration validation failed:", err=True)
        for error in e.errors:
            formatted = format_validation_error(
                location=error["loc"],
                message=error["msg"],
                error_type=error.get("type", "unknown"),
                include_hint=True,
            )
            click.echo(f"  - {formatted}", err=True)
        sys.exit(1)


def _build_sink(
    options: RunOptions, settings: AppSettings, run_id: str
) -> NotificationSink:
    try:
        return build_sink(
            options.sinks,
            run_id,
            jsonl_path=options.jsonl_path or settings.jsonl_path,
            verbose=options.verbose,
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Hacker News top-story notifier."""


@cli.command()
@_policy_options
@_sink_options
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between evaluation passes (default: 10).",
)
@click.option(
    "--evict-interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between cache evictions (default: 28800).",
)
def run(  # noqa: PLR0913
    config_path: Path | None,
    threshold: int | None,
    stale_hours: float | None,
    retention_days: float | None,
    fetch_failure_policy: str | None,
    json_logs: bool | None,
    verbose: bool,
    sinks: tuple[str, ...],
    jsonl_path: Path | None,
    interval: float | None,
    evict_interval: float | None,
) -> None:
    """Poll the feed until interrupted (SIGINT/SIGTERM)."""
    overrides = _overrides(threshold, stale_hours, retention_days, fetch_failure_policy)
    overrides["evaluation_interval"] = interval
    overrides["eviction_interval"] = evict_interval
    options = RunOptions(
        config_path=config_path,
        json_logs=json_logs,
        verbose=verbose,
        overrides=overrides,
        sinks=sinks,
        jsonl_path=jsonl_path,
    )

    run_id, settings, log = _setup(options, "run")
    config = _load_configuration(options, settings, run_id, log)
    sink = _build_sink(options, settings, run_id)

    with build_notifier(config, sink, run_id) as notifier:
        log.info("notifier_starting", sinks=list(options.sinks) or ["console"])
        notifier.scheduler.run_forever()

    log.info("notifier_exited", metrics=NotifierMetrics.get_instance().to_dict())


@cli.command()
@_policy_options
@_sink_options
def check(  # noqa: PLR0913
    config_path: Path | None,
    threshold: int | None,
    stale_hours: float | None,
    retention_days: float | None,
    fetch_failure_policy: str | None,
    json_logs: bool | None,
    verbose: bool,
    sinks: tuple[str, ...],
    jsonl_path: Path | None,
) -> None:
    """Run a single evaluation pass and exit.

    Exits with code 2 when the ranked list could not be fetched or the pass
    aborted.
    """
    options = RunOptions(
        config_path=config_path,
        json_logs=json_logs,
        verbose=verbose,
        overrides=_overrides(
            threshold, stale_hours, retention_days, fetch_failure_policy
        ),
        sinks=sinks,
        jsonl_path=jsonl_path,
    )

    run_id, settings, log = _setup(options, "check")
    config = _load_configuration(options, settings, run_id, log)
    sink = _build_sink(options, settings, run_id)

    with build_notifier(config, sink, run_id) as notifier:
        result = notifier.scheduler.run_once()

    if result is None or result.aborted:
        click.echo("Evaluation pass failed; see logs for details.", err=True)
        sys.exit(2)

    log.info(
        "check_complete",
        notified=len(result.notify),
        errors=len(result.errors),
        decisions=dict(result.decision_counts()),
    )


@cli.command()
@_policy_options
def validate(
    config_path: Path | None,
    threshold: int | None,
    stale_hours: float | None,
    retention_days: float | None,
    fetch_failure_policy: str | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Validate configuration and print the effective values."""
    options = RunOptions(
        config_path=config_path,
        json_logs=False if json_logs is None else json_logs,
        verbose=verbose,
        overrides=_overrides(
            threshold, stale_hours, retention_days, fetch_failure_policy
        ),
    )

    run_id, settings, log = _setup(options, "validate")
    config = _load_configuration(options, settings, run_id, log)

    click.echo("Configuration is valid!")
    click.echo(json.dumps(config.summary(), indent=2))


if __name__ == "__main__":
    cli()
