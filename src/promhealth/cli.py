"""Command line entry point.

Usage:
    promhealth alerts -c config.toml
    promhealth check -c config.toml [--interval 30] [--iterations 10]
    promhealth fetch-one http://localhost:9419/metrics \\
        --metric rabbitmq_queues --bound-type abs_lower --limit 1

Triggered samples and matched alerts are printed as NDJSON on stdout.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import click

from promhealth.adapters.http import HttpEndpointSource
from promhealth.config import Config, parse_config, parse_duration
from promhealth.core.bounds import BOUND_TYPES, make_bound
from promhealth.core.encoding.ndjson import encode_alerts, encode_samples
from promhealth.core.engine import ThresholdEngine
from promhealth.core.errors import PromHealthError
from promhealth.core.logs import configure_logging, log_exception
from promhealth.core.models import Alert, Filter

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

config_option = click.option(
    "-c",
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML configuration file.",
)


def _load_config(path: Path) -> Config:
    try:
        return parse_config(path)
    except PromHealthError as e:
        raise click.ClickException(str(e)) from e


def _emit(text: str) -> None:
    if text:
        click.echo(text, nl=False)


async def _fetch_alerts(config: Config) -> list[Alert]:
    async with config.make_source() as source:
        matcher = config.build_alert_matcher(source)
        if matcher is None:
            raise click.ClickException("Config has no [prometheus] section")
        return await matcher.fetch_and_match()


async def _check_engines(
    engines: list[ThresholdEngine],
    interval: float | None,
    iterations: int | None,
    emit: Callable[[str], None],
) -> bool:
    """Run evaluation rounds; return True if any round had a failure.

    A single round propagates errors. When polling, a failing engine is
    logged and the next round still runs.
    """
    failed = False
    rounds = 0
    while True:
        for engine in engines:
            try:
                triggered = await engine.check()
            except PromHealthError as e:
                if interval is None:
                    raise
                failed = True
                log_exception("Evaluation failed", endpoint=engine.endpoint)
                click.echo(f"Error: {e}", err=True)
                continue
            emit(encode_samples(triggered, endpoint=engine.endpoint))
        rounds += 1
        if interval is None or (iterations is not None and rounds >= iterations):
            return failed
        await asyncio.sleep(interval)


async def _check_config(
    config: Config, interval: float | None, iterations: int | None
) -> bool:
    async with config.make_source() as source:
        engines = config.build_engines(source)
        return await _check_engines(engines, interval, iterations, _emit)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level for messages on stderr.",
)
def cli(log_level: str) -> None:
    """Check Prometheus endpoints against threshold and alert rules."""
    configure_logging(log_level)


@cli.command()
@config_option
def alerts(config_path: Path) -> None:
    """Print the firing alerts that match the configured alert filters."""
    config = _load_config(config_path)
    try:
        matched = asyncio.run(_fetch_alerts(config))
    except PromHealthError as e:
        raise click.ClickException(f"Query alerts: {e}") from e
    _emit(encode_alerts(matched))


@cli.command()
@config_option
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between rounds. Without it every element is checked once.",
)
@click.option(
    "--iterations",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many rounds (only with --interval).",
)
def check(config_path: Path, interval: float | None, iterations: int | None) -> None:
    """Print the samples of every configured element that trigger a bound."""
    config = _load_config(config_path)
    try:
        failed = asyncio.run(_check_config(config, interval, iterations))
    except PromHealthError as e:
        raise click.ClickException(str(e)) from e
    if failed:
        raise SystemExit(1)


@cli.command("fetch-one")
@click.argument("url")
@click.option("--metric", required=True, help="Exact metric name.")
@click.option(
    "--bound-type",
    required=True,
    type=click.Choice(BOUND_TYPES, case_sensitive=False),
)
@click.option("--limit", required=True, type=float)
@click.option("--period", default=None, help='Rate period, e.g. "1m".')
def fetch_one(
    url: str, metric: str, bound_type: str, limit: float, period: str | None
) -> None:
    """Check a single metric of one endpoint against one bound."""
    try:
        time_period = parse_duration(period) if period is not None else None
        bound = make_bound(bound_type, limit, time_period)
    except (ValueError, PromHealthError) as e:
        raise click.BadParameter(str(e)) from e

    async def run() -> str:
        async with HttpEndpointSource() as source:
            engine = ThresholdEngine(url, [Filter(metric, bound)], source=source)
            return encode_samples(await engine.check(), endpoint=engine.endpoint)

    try:
        _emit(asyncio.run(run()))
    except PromHealthError as e:
        raise click.ClickException(str(e)) from e


def main() -> None:
    cli()
