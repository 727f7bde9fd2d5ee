# flowcraft/api/routes/reviews.py

from fastapi import APIRouter, HTTPException

from flowcraft.api.deps import get_review_or_404
from flowcraft.core.models import EditBlueprintRequest
from flowcraft.core.review_store import review_store

router = APIRouter(prefix="/api/v1", tags=["v1"])


@router.get("/reviews/{id}")
async def get_review(id: str):
    """
    Current review state and the blueprint that approval would use.
    state: proposed | editing | approved | rejected
    Finished reviews report only their id and final state.
    """
    review = review_store.get(id)
    if review is not None:
        return review.to_dict()
    state = review_store.closed_state(id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Review not found: {id}")
    return {"review_id": id, "state": state.value}


@router.post("/reviews/{id}/edit")
async def edit_review(id: str, req: EditBlueprintRequest):
    """
    Replace the draft blueprint. Advisory content (assumptions,
    recommendations, suggested nodes) is left untouched.
    """
    review = get_review_or_404(id)
    review.edit(req.blueprint or "")
    return review.to_dict()
