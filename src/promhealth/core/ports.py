"""Port interfaces for endpoint sources and engine state.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from typing import Protocol, runtime_checkable

from promhealth.core.models import Sample


@runtime_checkable
class EndpointSourcePort(Protocol):
    """Port for fetching the raw body of a metrics or alerts endpoint.

    Examples: HttpEndpointSource, or a canned fake in tests.
    """

    async def fetch(self, url: str) -> str:
        """Fetch the body of ``url`` as text.

        Raises:
            FetchError: If the request fails or the body cannot be read.
        """
        ...


@runtime_checkable
class SampleStatePort(Protocol):
    """Port for the per-engine "last sample per metric" memory.

    Adapters implementing this protocol decide the retention policy.
    Examples: InMemorySampleState, BoundedSampleState.
    """

    def get(self, metric_name: str) -> Sample | None:
        """Return the last stored sample for a metric, if any."""
        ...

    def put(self, metric_name: str, sample: Sample) -> None:
        """Store ``sample`` as the last sample seen for a metric."""
        ...

    def __len__(self) -> int:
        """Number of metric names currently remembered."""
        ...
