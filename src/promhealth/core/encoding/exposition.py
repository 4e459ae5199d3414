"""Prometheus text exposition parser.

Turns the body of a ``/metrics`` endpoint into typed Samples, collapsing
histogram buckets and summary quantiles into a single Sample per label set.
"""

import time
from typing import Any

from prometheus_client.parser import text_string_to_metric_families

from promhealth.core.errors import DecodeError
from promhealth.core.models import (
    Counter,
    Gauge,
    Histogram,
    HistogramBucket,
    MetricValue,
    Sample,
    Summary,
    SummaryQuantile,
    Untyped,
)

LabelKey = tuple[tuple[str, str], ...]


def _declared_counter_names(text: str) -> set[str]:
    """Collect names declared as counters by ``# TYPE`` lines."""
    names = set()
    for line in text.splitlines():
        parts = line.split()
        if len(parts) == 4 and parts[:2] == ["#", "TYPE"] and parts[3] == "counter":
            names.add(parts[2])
    return names


def _sample_time(raw_timestamp: Any, fallback: float) -> float:
    """Convert a parser timestamp (None, float seconds or Timestamp) to seconds."""
    if raw_timestamp is None:
        return fallback
    if hasattr(raw_timestamp, "sec"):
        return raw_timestamp.sec + raw_timestamp.nsec / 1e9
    return float(raw_timestamp)


def _counter_name(family_name: str, sample_name: str, declared: set[str]) -> str:
    # The parser renames counters declared without _total; restore the
    # name the exporter wrote.
    if family_name in declared and sample_name == family_name + "_total":
        return family_name
    return sample_name


def _scalar_samples(family: Any, declared: set[str], fallback: float) -> list[Sample]:
    samples = []
    for raw in family.samples:
        value: MetricValue
        name = raw.name
        if family.type == "counter" and not name.endswith("_created"):
            name = _counter_name(family.name, name, declared)
            value = Counter(raw.value)
        elif family.type == "gauge":
            value = Gauge(raw.value)
        else:
            value = Untyped(raw.value)
        samples.append(
            Sample(
                name=name,
                value=value,
                timestamp=_sample_time(raw.timestamp, fallback),
                labels=dict(raw.labels),
            )
        )
    return samples


def _grouped_samples(
    family: Any, member_name: str, key_label: str, fallback: float
) -> list[Sample]:
    """Group histogram buckets or summary quantiles by their remaining labels.

    Samples named ``member_name`` that carry ``key_label`` are collected into
    one Sample per label set, emitted where the first member appeared. All
    other samples of the family (``_sum``, ``_count``, ...) become Untyped.
    """
    order: list[Sample | LabelKey] = []
    groups: dict[LabelKey, list[Any]] = {}
    for raw in family.samples:
        if raw.name == member_name and key_label in raw.labels:
            key = tuple(sorted((k, v) for k, v in raw.labels.items() if k != key_label))
            if key not in groups:
                groups[key] = []
                order.append(key)
            groups[key].append(raw)
        else:
            order.append(
                Sample(
                    name=raw.name,
                    value=Untyped(raw.value),
                    timestamp=_sample_time(raw.timestamp, fallback),
                    labels=dict(raw.labels),
                )
            )

    samples = []
    for item in order:
        if isinstance(item, Sample):
            samples.append(item)
            continue
        members = groups[item]
        value: MetricValue
        if key_label == "le":
            buckets = sorted(
                (
                    HistogramBucket(float(m.labels["le"]), m.value)
                    for m in members
                ),
                key=lambda b: b.upper_bound,
            )
            value = Histogram(tuple(buckets))
        else:
            quantiles = sorted(
                (
                    SummaryQuantile(float(m.labels["quantile"]), m.value)
                    for m in members
                ),
                key=lambda q: q.quantile,
            )
            value = Summary(tuple(quantiles))
        samples.append(
            Sample(
                name=family.name,
                value=value,
                timestamp=_sample_time(members[0].timestamp, fallback),
                labels=dict(item),
            )
        )
    return samples


def _family_samples(family: Any, declared: set[str], fallback: float) -> list[Sample]:
    if family.type in ("histogram", "gaugehistogram"):
        return _grouped_samples(family, family.name + "_bucket", "le", fallback)
    if family.type == "summary":
        return _grouped_samples(family, family.name, "quantile", fallback)
    return _scalar_samples(family, declared, fallback)


def parse_exposition(text: str, *, now: float | None = None) -> list[Sample]:
    """Parse Prometheus text exposition format into Samples.

    Args:
        text: Body of a metrics endpoint.
        now: Timestamp for samples that carry none. Defaults to time.time().

    Returns:
        Samples in the order the exporter wrote them.

    Raises:
        DecodeError: If the text is not valid exposition format.
    """
    fallback = time.time() if now is None else now
    declared = _declared_counter_names(text)
    samples: list[Sample] = []
    try:
        for family in text_string_to_metric_families(text):
            samples.extend(_family_samples(family, declared, fallback))
    except (ValueError, IndexError, KeyError) as e:
        raise DecodeError(f"Malformed exposition text: {e}") from e
    return samples
