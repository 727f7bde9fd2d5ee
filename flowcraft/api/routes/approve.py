# flowcraft/api/routes/approve.py

import logging

from fastapi import APIRouter

from flowcraft.api.deps import envelope_response, get_review_or_404
from flowcraft.core.review_store import review_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["v1"])


@router.post("/reviews/{id}/approve")
async def approve_review(id: str):
    """
    Approve a pending blueprint and resume generation:
      1) look up the review (404 if unknown)
      2) transition to approved (400 if already approved/rejected)
      3) release the review; only its final state is remembered
      4) generate with the displayed blueprint, original or edited
      5) return the generation envelope as-is
    """
    review = get_review_or_404(id)
    generation = review.approve()
    review_store.close(review)
    logger.info("Review %s approved; generating from blueprint", id)

    envelope = await generation
    return envelope_response(envelope)
