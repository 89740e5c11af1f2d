"""Coverage attribution, DAG roll-up and emission."""

from depcov.aggregation.aggregator import Aggregator
from depcov.aggregation.emission import EmissionSink, EmittedView, MemorySink

__all__ = [
    "Aggregator",
    "EmissionSink",
    "EmittedView",
    "MemorySink",
]
