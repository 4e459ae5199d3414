"""Decoder for the Prometheus alerts API (``/api/v1/alerts``)."""

import json
from typing import Any

from promhealth.core.errors import DecodeError
from promhealth.core.models import Alert, AlertsResponse

# Bodies quoted in error messages are cut to this many characters
_MAX_QUOTED_BODY = 200


def _quote(body: str) -> str:
    if len(body) <= _MAX_QUOTED_BODY:
        return repr(body)
    return repr(body[:_MAX_QUOTED_BODY]) + "..."


def _str_mapping(data: Any, field_name: str) -> dict[str, str]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DecodeError(f"Alert field {field_name!r} must be an object")
    return {str(k): str(v) for k, v in data.items()}


def decode_alert(data: Any) -> Alert:
    """Decode one alert object. Wire field names are camelCase.

    Raises:
        DecodeError: If the alert is not an object or lacks ``state``.
    """
    if not isinstance(data, dict):
        raise DecodeError("Alert entry must be an object")
    if "state" not in data:
        raise DecodeError("Alert entry is missing 'state'")
    return Alert(
        labels=_str_mapping(data.get("labels"), "labels"),
        annotations=_str_mapping(data.get("annotations"), "annotations"),
        state=str(data["state"]),
        active_at=str(data.get("activeAt", "")),
        value=str(data.get("value", "")),
    )


def decode_alerts_response(body: str) -> AlertsResponse:
    """Decode an alerts API response body.

    The status is returned as-is; deciding what a non-success status means
    is up to the caller. The alerts of a non-success response are not
    decoded.

    Args:
        body: Raw JSON text, shaped ``{"status": ..., "data": {"alerts": [...]}}``.

    Returns:
        AlertsResponse with alerts in response order.

    Raises:
        DecodeError: If the body is not JSON or does not have the expected shape.
    """
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Alerts response is not JSON: {_quote(body)}") from e

    if not isinstance(payload, dict) or "status" not in payload:
        raise DecodeError(f"Alerts response has no status: {_quote(body)}")
    status = str(payload["status"])

    if status != "success":
        return AlertsResponse(status=status)

    data = payload.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("alerts"), list):
        raise DecodeError(f"Alerts response has no data.alerts list: {_quote(body)}")

    return AlertsResponse(
        status=status,
        alerts=[decode_alert(a) for a in data["alerts"]],
    )
