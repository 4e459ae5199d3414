"""Endpoint URL validation shared by the engine and the alert matcher."""

from urllib.parse import urlsplit

from promhealth.core.errors import InvalidEndpointError

VALID_SCHEMES = {"http", "https"}


def validate_endpoint(endpoint: str) -> str:
    """Validate that an endpoint is an absolute http(s) URL with a host.

    Args:
        endpoint: The configured endpoint URL.

    Returns:
        The endpoint, stripped of surrounding whitespace.

    Raises:
        InvalidEndpointError: If the URL has no supported scheme or no host,
            or its port is not a number.
    """
    cleaned = endpoint.strip() if isinstance(endpoint, str) else ""
    if not cleaned:
        raise InvalidEndpointError(str(endpoint), "empty URL")
    parts = urlsplit(cleaned)
    if parts.scheme.lower() not in VALID_SCHEMES:
        raise InvalidEndpointError(cleaned, "scheme must be http or https")
    if not parts.hostname:
        raise InvalidEndpointError(cleaned, "missing host")
    try:
        parts.port
    except ValueError as e:
        raise InvalidEndpointError(cleaned, str(e)) from e
    return cleaned
