"""Threshold predicates over metric samples.

A bound classifies one observation (absolute bounds) or a pair of
consecutive observations (rate bounds) as triggered or not. Bounds are
immutable and side-effect free; ``check`` never raises.
"""

from dataclasses import dataclass
from datetime import timedelta

from promhealth.core.models import (
    Counter,
    Gauge,
    Histogram,
    MetricValue,
    scalar_value,
)


def _increment_and_elapsed(
    value: MetricValue,
    time: float,
    previous_value: MetricValue | None,
    previous_time: float | None,
) -> tuple[float, float] | None:
    """Return (increment, elapsed seconds) for two scalar observations.

    Returns None when either side is not a Counter or Gauge, when no
    previous observation is available, or when the elapsed time is not
    positive.
    """
    current = scalar_value(value)
    if current is None or previous_value is None or previous_time is None:
        return None
    previous = scalar_value(previous_value)
    if previous is None:
        return None
    elapsed = time - previous_time
    if elapsed <= 0:
        return None
    return current - previous, elapsed


@dataclass(frozen=True)
class AbsLower:
    """Triggers on values found below ``limit``.

    Counters are monotonic, so a counter never triggers a lower bound.
    Histograms trigger when a bucket below the limit holds observations.
    """

    limit: float

    def is_relative(self) -> bool:
        return False

    def check(
        self,
        value: MetricValue,
        time: float,
        previous_value: MetricValue | None = None,
        previous_time: float | None = None,
    ) -> bool:
        if isinstance(value, Gauge):
            return value.value < self.limit
        if isinstance(value, Histogram):
            return any(
                b.upper_bound < self.limit and b.cumulative_count > 0
                for b in value.buckets
            )
        return False


@dataclass(frozen=True)
class AbsUpper:
    """Triggers on values found above ``limit``.

    Histograms trigger when a bucket above the limit holds observations.
    """

    limit: float

    def is_relative(self) -> bool:
        return False

    def check(
        self,
        value: MetricValue,
        time: float,
        previous_value: MetricValue | None = None,
        previous_time: float | None = None,
    ) -> bool:
        if isinstance(value, Counter | Gauge):
            return value.value > self.limit
        if isinstance(value, Histogram):
            return any(
                b.upper_bound > self.limit and b.cumulative_count > 0
                for b in value.buckets
            )
        return False


@dataclass(frozen=True)
class RateLower:
    """Triggers when the value grows slower than ``min_increment`` per ``time_period``.

    Attributes:
        min_increment: Smallest acceptable increase over one time period.
        time_period: The period the increment is expressed over.
    """

    min_increment: float
    time_period: timedelta

    def __post_init__(self) -> None:
        if self.time_period <= timedelta(0):
            raise ValueError("RateLower time_period must be positive")

    def is_relative(self) -> bool:
        return True

    def threshold_rate(self) -> float:
        """Configured limit in value per second."""
        return self.min_increment / self.time_period.total_seconds()

    def check(
        self,
        value: MetricValue,
        time: float,
        previous_value: MetricValue | None = None,
        previous_time: float | None = None,
    ) -> bool:
        diffs = _increment_and_elapsed(value, time, previous_value, previous_time)
        if diffs is None:
            return False
        increment, elapsed = diffs
        return increment / elapsed < self.threshold_rate()


@dataclass(frozen=True)
class RateUpper:
    """Triggers when the value grows faster than ``max_increment`` per ``time_period``.

    Attributes:
        max_increment: Largest acceptable increase over one time period.
        time_period: The period the increment is expressed over.
    """

    max_increment: float
    time_period: timedelta

    def __post_init__(self) -> None:
        if self.time_period <= timedelta(0):
            raise ValueError("RateUpper time_period must be positive")

    def is_relative(self) -> bool:
        return True

    def threshold_rate(self) -> float:
        """Configured limit in value per second."""
        return self.max_increment / self.time_period.total_seconds()

    def check(
        self,
        value: MetricValue,
        time: float,
        previous_value: MetricValue | None = None,
        previous_time: float | None = None,
    ) -> bool:
        diffs = _increment_and_elapsed(value, time, previous_value, previous_time)
        if diffs is None:
            return False
        increment, elapsed = diffs
        return increment / elapsed > self.threshold_rate()


Bound = AbsLower | AbsUpper | RateLower | RateUpper

BOUND_TYPES = ("abs_lower", "abs_upper", "rate_lower", "rate_upper")


def make_bound(
    bound_type: str, limit: float, period: timedelta | None = None
) -> Bound:
    """Build a bound from its configuration name.

    Args:
        bound_type: One of ``abs_lower``, ``abs_upper``, ``rate_lower``,
            ``rate_upper`` (case-insensitive).
        limit: The threshold, or the increment per period for rate bounds.
        period: Required for rate bounds, ignored otherwise.

    Returns:
        The constructed bound.

    Raises:
        ValueError: If the type is unknown or a rate bound lacks a period.
    """
    kind = bound_type.lower()
    if kind == "abs_lower":
        return AbsLower(limit)
    if kind == "abs_upper":
        return AbsUpper(limit)
    if kind in ("rate_lower", "rate_upper"):
        if period is None:
            raise ValueError(f"{kind} bound requires a time period")
        if kind == "rate_lower":
            return RateLower(min_increment=limit, time_period=period)
        return RateUpper(max_increment=limit, time_period=period)
    raise ValueError(f"Unsupported bound type {bound_type!r}")
