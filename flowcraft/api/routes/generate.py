# flowcraft/api/routes/generate.py

import asyncio
import json

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from flowcraft.agents.orchestrator import GenerationOrchestrator, validate_prompt
from flowcraft.api.deps import envelope_response, get_orchestrator
from flowcraft.core.models import GenerateRequest
from flowcraft.core.progress import ProgressStream, to_loading_phase


router = APIRouter(prefix="/api/v1", tags=["v1"])


@router.post("/workflow/generate")
async def generate_workflow(
    req: GenerateRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    One prompt in, one envelope out:
      - 200 success envelope with workflow + progress trail
      - 200 remediation envelope when no credential is configured
      - 500 fallback envelope when generation failed
      - 400 when the prompt is missing or blank
    """
    envelope = await orchestrator.generate(req.prompt)
    return envelope_response(envelope)


def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


@router.post("/workflow/generate/stream")
async def generate_workflow_stream(
    req: GenerateRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Same pipeline, streamed as Server-Sent Events:
      - progress: one per update, in emission order
      - result: the final envelope and the status code it would carry
    """
    prompt = validate_prompt(req.prompt)
    stream = ProgressStream()

    async def run():
        try:
            return await orchestrator.generate(prompt, observer=stream.observer)
        finally:
            stream.close()

    async def event_generator():
        task = asyncio.create_task(run())
        async for update in stream.drain():
            yield _sse({
                "event": "progress",
                "phase": update.phase,
                "loading_phase": to_loading_phase(update.phase),
                "message": update.message,
                "percentage": update.percentage,
            })
        envelope = await task
        yield _sse({
            "event": "result",
            "status_code": envelope.status_code,
            "envelope": envelope.model_dump(mode="json", by_alias=True, exclude_none=True),
        })

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
