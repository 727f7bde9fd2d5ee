# flowcraft/api/deps.py

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from flowcraft.agents.orchestrator import GenerationOrchestrator
from flowcraft.core.errors import ReviewStateError
from flowcraft.core.models import Envelope
from flowcraft.core.review import BlueprintReview
from flowcraft.core.review_store import review_store
from flowcraft.workflows.generation_graph import build_orchestrator


def get_orchestrator() -> GenerationOrchestrator:
    """FastAPI dependency; tests swap it through app.dependency_overrides."""
    return build_orchestrator()


def envelope_response(envelope: Envelope) -> JSONResponse:
    """Serialize an envelope with the transport status its kind implies."""
    return JSONResponse(
        status_code=envelope.status_code,
        content=envelope.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def get_review_or_404(review_id: str) -> BlueprintReview:
    """Open review by id; 400 if it already finished, 404 if never seen."""
    review = review_store.get(review_id)
    if review is not None:
        return review
    state = review_store.closed_state(review_id)
    if state is not None:
        raise ReviewStateError(f"Review {review_id} is {state.value}; no further actions are allowed.")
    raise HTTPException(status_code=404, detail=f"Review not found: {review_id}")
