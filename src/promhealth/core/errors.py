"""Exception hierarchy for promhealth.

Every failure aborts the current call. Nothing is retried internally.
"""


class PromHealthError(Exception):
    """Base class for all promhealth errors."""


class ConfigError(PromHealthError):
    """Configuration could not be turned into bounds, filters or endpoints."""


class InvalidEndpointError(ConfigError):
    """An endpoint is not an absolute http(s) URL."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"Invalid endpoint {endpoint!r}: {reason}")
        self.endpoint = endpoint


class FetchError(PromHealthError):
    """An endpoint could not be queried or answered with an error status."""

    def __init__(self, url: str, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message} ({url})")
        self.url = url
        self.stage = stage


class DecodeError(PromHealthError):
    """A response body could not be parsed."""


class AlertsStatusError(PromHealthError):
    """The alerts API answered with a status other than "success"."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Alerts response indicates error (status={status!r})")
        self.status = status
