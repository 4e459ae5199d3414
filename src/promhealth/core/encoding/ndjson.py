"""NDJSON encoders for triggered samples and matched alerts."""

import dataclasses
import json
import math
from collections.abc import Iterable
from typing import Any

from promhealth.core.models import Alert, Histogram, MetricValue, Sample, Summary


def _json_float(value: float) -> float | str:
    # JSON has no NaN or infinities; emit Prometheus spellings instead.
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return value


def _encode_value(value: MetricValue) -> dict[str, Any]:
    obj: dict[str, Any] = {"type": type(value).__name__.lower()}
    if isinstance(value, Histogram):
        obj["buckets"] = [
            {"le": _json_float(b.upper_bound), "count": _json_float(b.cumulative_count)}
            for b in value.buckets
        ]
    elif isinstance(value, Summary):
        obj["quantiles"] = [
            {"quantile": q.quantile, "value": _json_float(q.value)}
            for q in value.quantiles
        ]
    else:
        obj["value"] = _json_float(value.value)
    return obj


def _join(lines: list[str]) -> str:
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def encode_samples(samples: Iterable[Sample], **extra: str) -> str:
    """Encode samples to newline-delimited JSON.

    Args:
        samples: An iterable of Sample objects.
        **extra: Fields added to every object (e.g. endpoint).

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no samples.
    """
    lines = []
    for sample in samples:
        obj = {
            **extra,
            "name": sample.name,
            "timestamp": sample.timestamp,
            "labels": sample.labels,
            **_encode_value(sample.value),
        }
        lines.append(json.dumps(obj))
    return _join(lines)


def encode_alerts(alerts: Iterable[Alert]) -> str:
    """Encode alerts to newline-delimited JSON.

    Args:
        alerts: An iterable of Alert objects.

    Returns:
        NDJSON string with one JSON object per line, using the alerts API
        field names. Empty string if no alerts.
    """
    lines = []
    for alert in alerts:
        obj = dataclasses.asdict(alert)
        obj["activeAt"] = obj.pop("active_at")
        lines.append(json.dumps(obj))
    return _join(lines)
