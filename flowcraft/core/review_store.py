# flowcraft/core/review_store.py

from collections import OrderedDict
from typing import Dict, Optional

from flowcraft.core.review import BlueprintReview, ReviewState

# Finished reviews remembered by id so late transitions get a clear 400.
MAX_CLOSED_REVIEWS = 1000


class ReviewStore:
    """
    In-process registry of blueprint reviews, keyed by review_id.

    Open reviews are held in full. Once a review is approved or rejected it
    is released and only its final state is kept, oldest evicted first.
    Generated projects are not persisted.
    """

    def __init__(self, max_closed: int = MAX_CLOSED_REVIEWS) -> None:
        self.max_closed = max_closed
        self._open: Dict[str, BlueprintReview] = {}
        self._closed: "OrderedDict[str, ReviewState]" = OrderedDict()

    def add(self, review: BlueprintReview) -> None:
        self._open[review.review_id] = review

    def get(self, review_id: str) -> Optional[BlueprintReview]:
        return self._open.get(review_id)

    def closed_state(self, review_id: str) -> Optional[ReviewState]:
        return self._closed.get(review_id)

    def close(self, review: BlueprintReview) -> None:
        self._open.pop(review.review_id, None)
        self._closed[review.review_id] = review.state
        while len(self._closed) > self.max_closed:
            self._closed.popitem(last=False)

    def clear(self) -> None:
        self._open.clear()
        self._closed.clear()

    def __len__(self) -> int:
        return len(self._open)


review_store = ReviewStore()
