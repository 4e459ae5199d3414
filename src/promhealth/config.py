"""TOML configuration for promhealth.

Format of a config file:

    [prometheus]
    url = "http://localhost:9090/api/v1/alerts"

    [[prometheus.alerts]]
    name = "KubeStatefulSetReplicasMismatch"
    labels = { statefulset = "rabbitmq" }

    [[elements]]
    url = "http://localhost:9419/metrics"

    [[elements.bounds]]
    metric_name = "erlang_vm_memory_processes_bytes_total"
    bound_type = "rate_upper"
    limit = 1000000
    period = "1m"

Optional sections: ``[http] timeout = <seconds>`` and
``[state] max_tracked_metrics = <n>``.
"""

import re
import tomllib
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from promhealth.adapters.http import HttpEndpointSource
from promhealth.adapters.state.bounded import BoundedSampleState
from promhealth.core.alerts import AlertMatcher
from promhealth.core.bounds import make_bound
from promhealth.core.engine import ThresholdEngine
from promhealth.core.errors import ConfigError
from promhealth.core.logs import get_logger
from promhealth.core.models import AlertFilter, Filter
from promhealth.core.ports import EndpointSourcePort, SampleStatePort

logger = get_logger(__name__)

_DURATION_UNITS = {
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}
_DURATION_PART = re.compile(r"\s*(\d+(?:\.\d+)?)\s*(us|µs|ms|s|m|h|d|w)")


def _to_timedelta(value: str | int | float) -> timedelta:
    if not isinstance(value, str):
        return timedelta(seconds=value)
    text = value.strip()
    try:
        return timedelta(seconds=float(text))
    except ValueError:
        pass
    result = timedelta(0)
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        result += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or text[pos:].strip():
        raise ValueError(f"unrecognised duration {value!r}")
    return result


def parse_duration(value: str | int | float) -> timedelta:
    """Parse a duration such as ``"90s"``, ``"1m"``, ``"1h30m"`` or ``"500ms"``.

    Bare numbers (or numeric strings) are seconds.

    Raises:
        ConfigError: If the value is not a positive duration.
    """
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        raise ConfigError(f"Invalid duration {value!r}")
    try:
        result = _to_timedelta(value)
    except (ValueError, OverflowError) as e:
        raise ConfigError(f"Invalid duration {value!r}") from e
    if result <= timedelta(0):
        raise ConfigError(f"Duration must be positive, got {value!r}")
    return result


class FilterSpec(BaseModel):
    """One ``[[elements.bounds]]`` table."""

    model_config = ConfigDict(frozen=True)

    metric_name: StrictStr
    bound_type: StrictStr
    limit: StrictFloat
    period: timedelta | None = None

    @field_validator("period", mode="before")
    @classmethod
    def _parse_period(cls, value: Any) -> timedelta | None:
        if value is None:
            return None
        try:
            return parse_duration(value)
        except ConfigError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def _check_bound(self) -> "FilterSpec":
        # Unknown bound types and rate bounds without a period fail here
        self.to_filter()
        return self

    def to_filter(self) -> Filter:
        """Build the Filter this table describes.

        Raises:
            ValueError: If the bound type is unknown or lacks a period.
        """
        bound = make_bound(self.bound_type, float(self.limit), self.period)
        return Filter(metric_name=self.metric_name, bound=bound)


class AlertSpec(BaseModel):
    """One ``[[prometheus.alerts]]`` table."""

    model_config = ConfigDict(frozen=True)

    name: StrictStr
    labels: dict[StrictStr, StrictStr] = Field(default_factory=dict)

    def to_alert_filter(self) -> AlertFilter:
        return AlertFilter(name=self.name, labels=dict(self.labels))


class PrometheusConfig(BaseModel):
    """The alerts API endpoint and the alerts to look for."""

    model_config = ConfigDict(frozen=True)

    url: StrictStr
    alerts: list[AlertSpec] = Field(default_factory=list)

    @property
    def alert_filters(self) -> list[AlertFilter]:
        return [a.to_alert_filter() for a in self.alerts]


class ElementConfig(BaseModel):
    """One metrics endpoint and the bounds applied to it."""

    model_config = ConfigDict(frozen=True)

    url: StrictStr
    bounds: list[FilterSpec] = Field(default_factory=list)

    @property
    def filters(self) -> list[Filter]:
        return [b.to_filter() for b in self.bounds]


class HttpConfig(BaseModel):
    """``[http]``: request timeout in seconds; None waits indefinitely."""

    model_config = ConfigDict(frozen=True)

    timeout: StrictFloat | None = Field(default=None, gt=0)


class StateConfig(BaseModel):
    """``[state]``: cap on remembered metric names per engine."""

    model_config = ConfigDict(frozen=True)

    max_tracked_metrics: StrictInt | None = Field(default=None, ge=1)


class Config(BaseModel):
    """A parsed configuration file."""

    model_config = ConfigDict(frozen=True)

    prometheus: PrometheusConfig | None = None
    elements: list[ElementConfig] = Field(default_factory=list)
    http: HttpConfig = Field(default_factory=HttpConfig)
    state: StateConfig = Field(default_factory=StateConfig)

    def make_source(self) -> HttpEndpointSource:
        """Create an HTTP source honouring ``[http] timeout``."""
        return HttpEndpointSource(timeout=self.http.timeout)

    def _state_factory(self) -> Callable[[], SampleStatePort] | None:
        size = self.state.max_tracked_metrics
        if size is None:
            return None
        return lambda: BoundedSampleState(size)

    def build_engines(
        self,
        source: EndpointSourcePort | None = None,
        state_factory: Callable[[], SampleStatePort] | None = None,
    ) -> list[ThresholdEngine]:
        """Create one ThresholdEngine per configured element.

        Args:
            source: Shared source passed to every engine.
            state_factory: Creates each engine's state. Defaults to a
                BoundedSampleState when ``max_tracked_metrics`` is set, else
                the engine's unbounded default.

        Raises:
            InvalidEndpointError: If an element URL is invalid.
        """
        factory = state_factory or self._state_factory()
        return [
            ThresholdEngine(
                element.url,
                element.filters,
                source=source,
                state=factory() if factory is not None else None,
            )
            for element in self.elements
        ]

    def build_alert_matcher(
        self, source: EndpointSourcePort | None = None
    ) -> AlertMatcher | None:
        """Create the AlertMatcher, or None without a ``[prometheus]`` section.

        Raises:
            InvalidEndpointError: If the alerts URL is invalid.
        """
        if self.prometheus is None:
            return None
        return AlertMatcher(
            self.prometheus.url, self.prometheus.alert_filters, source=source
        )


def _describe(error: ValidationError) -> str:
    """Render validation errors as ``elements.0.bounds.1.limit: <reason>``."""
    return "; ".join(
        f"{'.'.join(str(part) for part in e['loc']) or '<root>'}: {e['msg']}"
        for e in error.errors()
    )


def parse_config_str(text: str) -> Config:
    """Parse configuration from TOML text.

    Raises:
        ConfigError: If the TOML is malformed or does not describe a valid
            configuration. The message names the location of every problem.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML: {e}") from e

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {_describe(e)}") from e

    logger.info(
        "Loaded config with %d element(s) and %d alert filter(s)",
        len(config.elements),
        len(config.prometheus.alerts) if config.prometheus else 0,
    )
    return config


def parse_config(path: str | Path) -> Config:
    """Read and parse a configuration file.

    Raises:
        ConfigError: If the file cannot be read or is not a valid configuration.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {str(path)!r}: {e}") from e
    return parse_config_str(text)
