"""Core domain models for metric samples and alert records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from promhealth.core.bounds import Bound


@dataclass(frozen=True)
class Counter:
    """A monotonically increasing counter value."""

    value: float


@dataclass(frozen=True)
class Gauge:
    """A gauge value that can go up and down."""

    value: float


@dataclass(frozen=True)
class HistogramBucket:
    """A single cumulative histogram bucket.

    Attributes:
        upper_bound: The bucket's inclusive upper bound (the ``le`` label).
        cumulative_count: Number of observations less than or equal to
            ``upper_bound``.
    """

    upper_bound: float
    cumulative_count: float


@dataclass(frozen=True)
class Histogram:
    """Cumulative bucket counts ordered by ascending upper bound."""

    buckets: tuple[HistogramBucket, ...] = ()


@dataclass(frozen=True)
class SummaryQuantile:
    """A single summary quantile."""

    quantile: float
    value: float


@dataclass(frozen=True)
class Summary:
    """Summary quantiles. Bounds never inspect them."""

    quantiles: tuple[SummaryQuantile, ...] = ()


@dataclass(frozen=True)
class Untyped:
    """Any other sample value (untyped, info, stateset, histogram _sum/_count)."""

    value: float


MetricValue = Counter | Gauge | Histogram | Summary | Untyped


def scalar_value(value: MetricValue) -> float | None:
    """Return the float carried by a Counter or Gauge, None for anything else."""
    if isinstance(value, Counter | Gauge):
        return value.value
    return None


@dataclass(frozen=True)
class Sample:
    """A single metric observation from one scrape.

    Attributes:
        name: Metric name as written by the exporter (e.g. rabbitmq_queues).
        value: The typed metric value.
        timestamp: Unix timestamp in seconds.
        labels: Key-value pairs for metric dimensions.
    """

    name: str
    value: MetricValue
    timestamp: float
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Filter:
    """Applies a bound to every sample with exactly this metric name."""

    metric_name: str
    bound: Bound


@dataclass(frozen=True)
class Alert:
    """An alert record as reported by the Prometheus alerts API.

    Attributes:
        labels: Alert labels; ``alertname`` holds the rule name.
        annotations: Free-form annotations (summary, description, ...).
        state: Alert state, e.g. "firing" or "pending".
        active_at: RFC 3339 time the alert became active (``activeAt``).
        value: The rule expression value, as a string.
    """

    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    state: str = ""
    active_at: str = ""
    value: str = ""

    @property
    def name(self) -> str | None:
        """The alert rule name, if the alert carries one."""
        return self.labels.get("alertname")


@dataclass(frozen=True)
class AlertFilter:
    """Selects firing alerts by rule name and, optionally, exact label values."""

    name: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AlertsResponse:
    """Decoded alerts API response."""

    status: str
    alerts: list[Alert] = field(default_factory=list)
