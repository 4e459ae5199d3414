"""BDD step definitions for threshold and alert check features."""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from promhealth.config import parse_duration
from promhealth.core.alerts import AlertMatcher
from promhealth.core.bounds import make_bound
from promhealth.core.engine import ThresholdEngine
from promhealth.core.errors import AlertsStatusError, FetchError, PromHealthError
from promhealth.core.models import Alert, AlertFilter, Filter, Sample

METRICS_URL = "http://exporter.test:9419/metrics"
ALERTS_URL = "http://prometheus.test:9090/api/v1/alerts"


class ScriptedSource:
    """EndpointSourcePort serving whatever body the last step set."""

    def __init__(self) -> None:
        self.body: str | Exception = ""

    async def fetch(self, url: str) -> str:
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


@dataclass
class ChecksScenarioContext:
    """State shared between the steps of one scenario."""

    source: ScriptedSource = field(default_factory=ScriptedSource)
    engine: ThresholdEngine | None = None
    triggered: list[Sample] = field(default_factory=list)
    alert_filters: list[AlertFilter] = field(default_factory=list)
    alerts: list[dict[str, Any]] = field(default_factory=list)
    status: str = "success"
    matched: list[Alert] = field(default_factory=list)
    error: PromHealthError | None = None


def run_async(coro: Any) -> Any:
    return asyncio.run(coro)


@pytest.fixture
def ctx() -> ChecksScenarioContext:
    """Fresh scenario context for each test."""
    return ChecksScenarioContext()


# === Threshold steps ===
def _make_engine(
    ctx: ChecksScenarioContext, metric: str, bound_type: str, limit: float, period: str | None
) -> None:
    bound = make_bound(bound_type, limit, parse_duration(period) if period else None)
    ctx.engine = ThresholdEngine(METRICS_URL, [Filter(metric, bound)], source=ctx.source)


@given(parsers.parse('an engine with bound "{bound_type}" {limit:g} on "{metric}"'))
def given_absolute_engine(
    ctx: ChecksScenarioContext, bound_type: str, limit: float, metric: str
) -> None:
    _make_engine(ctx, metric, bound_type, limit, None)


@given(
    parsers.parse(
        'an engine with bound "{bound_type}" {limit:g} per "{period}" on "{metric}"'
    )
)
def given_rate_engine(
    ctx: ChecksScenarioContext, bound_type: str, limit: float, period: str, metric: str
) -> None:
    _make_engine(ctx, metric, bound_type, limit, period)


@when(parsers.parse('the endpoint reports "{metric}" at {value:g} at time {time:g}'))
def when_endpoint_reports(
    ctx: ChecksScenarioContext, metric: str, value: float, time: float
) -> None:
    # Exposition timestamps are milliseconds
    ctx.source.body = f"# TYPE {metric} gauge\n{metric} {value} {int(time * 1000)}\n"
    ctx.triggered = run_async(ctx.engine.check())


@when("the endpoint is unreachable")
def when_endpoint_unreachable(ctx: ChecksScenarioContext) -> None:
    ctx.source.body = FetchError(METRICS_URL, "request", "connection refused")
    try:
        ctx.triggered = run_async(ctx.engine.check())
    except PromHealthError as e:
        ctx.error = e


@then(parsers.parse('"{metric}" is triggered'))
def then_metric_triggered(ctx: ChecksScenarioContext, metric: str) -> None:
    assert [s.name for s in ctx.triggered] == [metric]


@then("nothing is triggered")
def then_nothing_triggered(ctx: ChecksScenarioContext) -> None:
    assert ctx.triggered == []


@then(parsers.parse("the engine remembers {n:d} metric"))
def then_engine_remembers(ctx: ChecksScenarioContext, n: int) -> None:
    assert ctx.engine.tracked_metrics == n


@then("the check fails with a fetch error")
def then_check_fails(ctx: ChecksScenarioContext) -> None:
    assert isinstance(ctx.error, FetchError)
    assert ctx.error.stage == "request"


# === Alert steps ===
@given(parsers.re(r'an alert filter for "(?P<name>[^"]+)"$'))
def given_alert_filter(ctx: ChecksScenarioContext, name: str) -> None:
    ctx.alert_filters.append(AlertFilter(name))


@given(
    parsers.re(
        r'an alert filter for "(?P<name>[^"]+)" with label "(?P<key>[^"]+)" = "(?P<value>[^"]*)"$'
    )
)
def given_alert_filter_with_label(
    ctx: ChecksScenarioContext, name: str, key: str, value: str
) -> None:
    ctx.alert_filters.append(AlertFilter(name, {key: value}))


@given(parsers.parse('the server reports alert "{name}" in state "{state}"'))
def given_server_alert(ctx: ChecksScenarioContext, name: str, state: str) -> None:
    ctx.alerts.append({"labels": {"alertname": name}, "state": state})


@given(parsers.parse('the server status is "{status}"'))
def given_server_status(ctx: ChecksScenarioContext, status: str) -> None:
    ctx.status = status


@when("alerts are matched")
def when_alerts_matched(ctx: ChecksScenarioContext) -> None:
    ctx.source.body = json.dumps({"status": ctx.status, "data": {"alerts": ctx.alerts}})
    matcher = AlertMatcher(ALERTS_URL, ctx.alert_filters, source=ctx.source)
    try:
        ctx.matched = run_async(matcher.fetch_and_match())
    except PromHealthError as e:
        ctx.error = e


@then(parsers.parse('the matched alerts are "{name}"'))
def then_matched_alerts(ctx: ChecksScenarioContext, name: str) -> None:
    assert ctx.error is None
    assert [a.name for a in ctx.matched] == [name]


@then("no alert is matched")
def then_no_alert(ctx: ChecksScenarioContext) -> None:
    assert ctx.error is None
    assert ctx.matched == []


@then(parsers.parse('the query fails with status "{status}"'))
def then_query_fails(ctx: ChecksScenarioContext, status: str) -> None:
    assert isinstance(ctx.error, AlertsStatusError)
    assert ctx.error.status == status
