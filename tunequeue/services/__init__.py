"""Pipeline services composing the core with external capabilities."""

from .queue_commit import QueueCommitCoordinator
from .search_aggregator import MultiVariantSearchAggregator
from .track_queue import (
    BatchQueueResult,
    CollectionQueueResult,
    SingleQueueResult,
    TrackQueueService,
)

__all__ = [
    "BatchQueueResult",
    "CollectionQueueResult",
    "MultiVariantSearchAggregator",
    "QueueCommitCoordinator",
    "SingleQueueResult",
    "TrackQueueService",
]
