# flowcraft/api/routes/analyze.py

from fastapi import APIRouter, Depends

from flowcraft.agents.orchestrator import GenerationOrchestrator
from flowcraft.api.deps import envelope_response, get_orchestrator
from flowcraft.core.models import GenerateRequest
from flowcraft.core.review import BlueprintReview
from flowcraft.core.review_store import review_store

router = APIRouter(prefix="/api/v1", tags=["v1"])


@router.post("/workflow/analyze")
async def analyze_workflow(
    req: GenerateRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Analysis path: return a blueprint for review instead of a workflow.
    The review is stored so approve/edit/reject can address it by id.
    Without a credential (or on engine failure) the usual envelope comes back.
    """
    outcome = await orchestrator.analyze(req.prompt)
    if not isinstance(outcome, BlueprintReview):
        return envelope_response(outcome)

    review_store.add(outcome)
    return {
        **outcome.to_dict(),
        "message": "Blueprint ready. Approve, edit or reject it before generation.",
    }
