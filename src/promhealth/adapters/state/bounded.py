"""Bounded engine state adapter.

Provides a size-capped alternative to the default InMemorySampleState
(promhealth.core.state) that evicts the least recently stored metric once
the cap is reached. Useful for exporters whose metric names are unbounded.
"""

from collections import OrderedDict

from promhealth.core.models import Sample


class BoundedSampleState:
    """LRU implementation of SampleStatePort.

    Stores at most ``max_size`` metric names. When full, the metric that
    was stored least recently is evicted; its next sample is then treated
    as a first sighting.

    Args:
        max_size: Maximum number of metric names to remember.
    """

    def __init__(self, max_size: int) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._samples: OrderedDict[str, Sample] = OrderedDict()

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, metric_name: str) -> Sample | None:
        """Return the last stored sample for a metric, if any."""
        return self._samples.get(metric_name)

    def put(self, metric_name: str, sample: Sample) -> None:
        """Store ``sample``, evicting the stalest metric if over capacity."""
        self._samples[metric_name] = sample
        self._samples.move_to_end(metric_name)
        while len(self._samples) > self._max_size:
            self._samples.popitem(last=False)

    def __len__(self) -> int:
        return len(self._samples)
