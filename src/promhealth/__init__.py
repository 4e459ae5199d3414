"""Threshold and alert-rule health checks for Prometheus-compatible endpoints."""

from promhealth.adapters.http import HttpEndpointSource
from promhealth.adapters.state import BoundedSampleState
from promhealth.config import Config, parse_config, parse_config_str
from promhealth.core.alerts import AlertMatcher, matches
from promhealth.core.bounds import AbsLower, AbsUpper, Bound, RateLower, RateUpper
from promhealth.core.encoding.alerts_json import decode_alerts_response
from promhealth.core.encoding.exposition import parse_exposition
from promhealth.core.engine import ThresholdEngine
from promhealth.core.errors import (
    AlertsStatusError,
    ConfigError,
    DecodeError,
    FetchError,
    InvalidEndpointError,
    PromHealthError,
)
from promhealth.core.logs import get_logger
from promhealth.core.models import (
    Alert,
    AlertFilter,
    Counter,
    Filter,
    Gauge,
    Histogram,
    HistogramBucket,
    MetricValue,
    Sample,
    Summary,
    SummaryQuantile,
    Untyped,
)
from promhealth.core.state import InMemorySampleState

__all__ = [
    "AbsLower",
    "AbsUpper",
    "Alert",
    "AlertFilter",
    "AlertMatcher",
    "AlertsStatusError",
    "Bound",
    "BoundedSampleState",
    "Config",
    "ConfigError",
    "Counter",
    "DecodeError",
    "FetchError",
    "Filter",
    "Gauge",
    "Histogram",
    "HistogramBucket",
    "HttpEndpointSource",
    "InMemorySampleState",
    "InvalidEndpointError",
    "MetricValue",
    "PromHealthError",
    "RateLower",
    "RateUpper",
    "Sample",
    "Summary",
    "SummaryQuantile",
    "ThresholdEngine",
    "Untyped",
    "decode_alerts_response",
    "get_logger",
    "matches",
    "parse_config",
    "parse_config_str",
    "parse_exposition",
]
