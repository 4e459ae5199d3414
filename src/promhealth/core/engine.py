"""Per-endpoint threshold evaluation.

A ThresholdEngine owns the bounds configured for one metrics endpoint and
the last sample seen for every metric that has a rate bound. It is not
safe for concurrent use: callers must not overlap evaluations of the same
engine.
"""

from collections.abc import Iterable

from promhealth.core.bounds import Bound
from promhealth.core.encoding.exposition import parse_exposition
from promhealth.core.endpoints import validate_endpoint
from promhealth.core.logs import get_logger
from promhealth.core.models import Filter, Sample
from promhealth.core.ports import EndpointSourcePort, SampleStatePort
from promhealth.core.state import InMemorySampleState

logger = get_logger(__name__)


def group_bounds(filters: Iterable[Filter]) -> dict[str, list[Bound]]:
    """Group filters by metric name, keeping configuration order."""
    bounds_by_metric: dict[str, list[Bound]] = {}
    for f in filters:
        bounds_by_metric.setdefault(f.metric_name, []).append(f.bound)
    return bounds_by_metric


class ThresholdEngine:
    """Decides which samples of a scrape violate the configured bounds.

    Example:
        ```python
        engine = ThresholdEngine(
            "http://localhost:9419/metrics",
            [Filter("rabbitmq_queues", AbsLower(1))],
            source=HttpEndpointSource(),
        )
        triggered = await engine.check()
        ```
    """

    def __init__(
        self,
        endpoint: str,
        filters: Iterable[Filter],
        *,
        source: EndpointSourcePort | None = None,
        state: SampleStatePort | None = None,
    ) -> None:
        """Initialize the engine for one endpoint.

        Args:
            endpoint: URL of the metrics endpoint.
            filters: Filters to apply; several may target the same metric.
            source: Adapter used by check() to fetch the endpoint.
            state: Storage for the last sample per metric. Defaults to an
                unbounded InMemorySampleState.

        Raises:
            InvalidEndpointError: If ``endpoint`` is not an http(s) URL.
        """
        self.endpoint = validate_endpoint(endpoint)
        self._bounds_by_metric = group_bounds(filters)
        self._relative_metrics = {
            name
            for name, bounds in self._bounds_by_metric.items()
            if any(b.is_relative() for b in bounds)
        }
        self._source = source
        self._state: SampleStatePort = (
            state if state is not None else InMemorySampleState()
        )
        logger.info(
            "Threshold engine for %s watching %d metric(s)",
            self.endpoint,
            len(self._bounds_by_metric),
        )

    @property
    def bounds_by_metric(self) -> dict[str, list[Bound]]:
        return {name: list(bounds) for name, bounds in self._bounds_by_metric.items()}

    @property
    def tracked_metrics(self) -> int:
        """Number of metric names with a remembered previous sample."""
        return len(self._state)

    def _triggered(self, sample: Sample, bounds: list[Bound]) -> bool:
        if sample.name not in self._relative_metrics:
            return any(b.check(sample.value, sample.timestamp) for b in bounds)

        previous = self._state.get(sample.name)
        if previous is None:
            logger.debug("First sample of %s becomes the rate baseline", sample.name)
            previous_value, previous_time = None, None
        else:
            previous_value, previous_time = previous.value, previous.timestamp
        result = any(
            b.check(sample.value, sample.timestamp, previous_value, previous_time)
            if b.is_relative()
            else b.check(sample.value, sample.timestamp)
            for b in bounds
        )
        self._state.put(sample.name, sample)
        return result

    def evaluate(self, samples: Iterable[Sample]) -> list[Sample]:
        """Return the samples that trigger at least one of their bounds.

        Samples without configured bounds are dropped. For metrics with a
        rate bound the stored previous sample is replaced by the current
        one on every sighting, whether or not anything triggered. The first
        sighting only records the baseline and never triggers a rate bound.

        Args:
            samples: One scrape, in exporter order.

        Returns:
            The triggered samples, in input order.
        """
        triggered = []
        seen = 0
        for sample in samples:
            seen += 1
            bounds = self._bounds_by_metric.get(sample.name)
            if bounds is None:
                continue
            if self._triggered(sample, bounds):
                triggered.append(sample)
        logger.debug(
            "Evaluated %d sample(s) from %s, %d triggered",
            seen,
            self.endpoint,
            len(triggered),
        )
        return triggered

    async def check(self) -> list[Sample]:
        """Fetch, parse and evaluate one scrape of the endpoint.

        Returns:
            The triggered samples of this scrape.

        Raises:
            RuntimeError: If the engine was built without a source.
            FetchError: If the endpoint could not be fetched.
            DecodeError: If the body is not valid exposition text.
        """
        if self._source is None:
            raise RuntimeError("ThresholdEngine has no endpoint source configured")
        body = await self._source.fetch(self.endpoint)
        return self.evaluate(parse_exposition(body))
