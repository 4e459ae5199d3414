"""Default in-memory engine state."""

from promhealth.core.models import Sample


class InMemorySampleState:
    """Unbounded implementation of SampleStatePort, used by default.

    Keeps the last sample for every metric name ever stored and never
    evicts. Memory grows with metric-name cardinality; use
    BoundedSampleState for high-cardinality sources.
    """

    def __init__(self) -> None:
        self._samples: dict[str, Sample] = {}

    def get(self, metric_name: str) -> Sample | None:
        """Return the last stored sample for a metric, if any."""
        return self._samples.get(metric_name)

    def put(self, metric_name: str, sample: Sample) -> None:
        """Store ``sample`` as the last sample seen for a metric."""
        self._samples[metric_name] = sample

    def __len__(self) -> int:
        return len(self._samples)
