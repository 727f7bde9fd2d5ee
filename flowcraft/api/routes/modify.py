# flowcraft/api/routes/modify.py

from fastapi import APIRouter

from flowcraft.core.models import ModifyWorkflowRequest
from flowcraft.workflows.workflow_delta import apply_workflow_delta

router = APIRouter(prefix="/api/v1", tags=["v1"])


@router.post("/workflow/modify")
async def modify_workflow(req: ModifyWorkflowRequest):
    """
    Apply structured edits (add/modify/remove node or edge) to a workflow.
    Returns the updated workflow with changesApplied, errors, warnings and
    a summary. Edits that cannot be applied are reported, not fatal.
    """
    result = apply_workflow_delta(req.workflow, req.changes)
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)
