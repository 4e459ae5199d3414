"""Example: poll a RabbitMQ exporter and the Prometheus alerts API.

Run with:
    python examples/poll_rabbitmq.py examples/sample_config.toml

Every 30 seconds each configured element is scraped and the samples that
trigger a bound are printed, followed by the matching firing alerts. A
failing endpoint is logged and skipped; the next round tries it again.
"""

import asyncio
import sys

from promhealth import AlertMatcher, PromHealthError, ThresholdEngine, parse_config
from promhealth.core.logs import configure_logging, get_logger

logger = get_logger(__name__)

INTERVAL_SECONDS = 30


async def poll_once(engines: list[ThresholdEngine], matcher: AlertMatcher | None) -> list[str]:
    """Run one round and return the printed lines."""
    lines: list[str] = []
    for engine in engines:
        try:
            for sample in await engine.check():
                lines.append(f"{engine.endpoint} {sample.name} {sample.value}")
        except PromHealthError as e:
            logger.warning("Skipping %s: %s", engine.endpoint, e)
    if matcher is not None:
        try:
            for alert in await matcher.fetch_and_match():
                lines.append(f"alert {alert.name} firing since {alert.active_at}")
        except PromHealthError as e:
            logger.warning("Alerts unavailable: %s", e)
    for line in lines:
        print(line)
    return lines


async def main(config_path: str) -> None:
    config = parse_config(config_path)
    async with config.make_source() as source:
        engines = config.build_engines(source)
        matcher = config.build_alert_matcher(source)
        while True:
            await poll_once(engines, matcher)
            await asyncio.sleep(INTERVAL_SECONDS)


if __name__ == "__main__":
    configure_logging("INFO")
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "examples/sample_config.toml"))
