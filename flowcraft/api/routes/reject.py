# flowcraft/api/routes/reject.py

import logging

from fastapi import APIRouter

from flowcraft.api.deps import get_review_or_404
from flowcraft.core.review_store import review_store

logger = logging.getLogger(__name__)

# Keep routes grouped and documented under /api/v1
router = APIRouter(prefix="/api/v1", tags=["v1"])


@router.post("/reviews/{id}/reject")
async def reject_review(id: str):
    """
    Reject a pending blueprint. The analysis is discarded and nothing is
    generated; the caller starts over from prompt entry.
    """
    review = get_review_or_404(id)
    review.reject()
    review_store.close(review)
    logger.info("Review %s rejected", id)

    return {
        "review_id": id,
        "state": review.state.value,
        "message": "Blueprint rejected. Describe your automation again to start over.",
    }
