"""Matching of Prometheus alerts against configured alert filters."""

from collections.abc import Iterable

from promhealth.core.encoding.alerts_json import decode_alerts_response
from promhealth.core.endpoints import validate_endpoint
from promhealth.core.errors import AlertsStatusError
from promhealth.core.logs import get_logger
from promhealth.core.models import Alert, AlertFilter
from promhealth.core.ports import EndpointSourcePort

logger = get_logger(__name__)

FIRING = "firing"


def matches(alert: Alert, alert_filter: AlertFilter) -> bool:
    """Return True if ``alert`` is firing and satisfies ``alert_filter``.

    Checked in order, stopping at the first failure: the alert name equals
    the filter name, the alert is firing, and every filter label is present
    on the alert with the same value. Extra alert labels are ignored.
    """
    if alert.labels.get("alertname") != alert_filter.name:
        return False
    if alert.state != FIRING:
        return False
    return all(
        alert.labels.get(key) == value for key, value in alert_filter.labels.items()
    )


class AlertMatcher:
    """Selects the firing alerts of a Prometheus server that match any filter."""

    def __init__(
        self,
        endpoint: str,
        filters: Iterable[AlertFilter],
        *,
        source: EndpointSourcePort | None = None,
    ) -> None:
        """Initialize the matcher.

        Args:
            endpoint: URL of the alerts API (e.g. http://host:9090/api/v1/alerts).
            filters: Alert filters; an alert is kept if any of them matches.
            source: Adapter used by fetch_and_match() to fetch the endpoint.

        Raises:
            InvalidEndpointError: If ``endpoint`` is not an http(s) URL.
        """
        self.endpoint = validate_endpoint(endpoint)
        self.filters = list(filters)
        self._source = source

    def match(self, alerts: Iterable[Alert]) -> list[Alert]:
        """Return the alerts matching at least one filter, in input order."""
        return [a for a in alerts if any(matches(a, f) for f in self.filters)]

    async def fetch_and_match(self) -> list[Alert]:
        """Query the alerts API once and return the matched alerts.

        Raises:
            RuntimeError: If the matcher was built without a source.
            FetchError: If the endpoint could not be fetched.
            DecodeError: If the body is not a valid alerts response.
            AlertsStatusError: If the response status is not "success".
        """
        if self._source is None:
            raise RuntimeError("AlertMatcher has no endpoint source configured")
        body = await self._source.fetch(self.endpoint)
        response = decode_alerts_response(body)
        if response.status != "success":
            raise AlertsStatusError(response.status)
        matched = self.match(response.alerts)
        logger.debug(
            "%d of %d alert(s) from %s matched",
            len(matched),
            len(response.alerts),
            self.endpoint,
        )
        return matched
