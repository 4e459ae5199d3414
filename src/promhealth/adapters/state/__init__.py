"""Engine state adapters."""

from promhealth.adapters.state.bounded import BoundedSampleState

__all__ = [
    "BoundedSampleState",
]
