# flowcraft/api/main.py

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from flowcraft.core.config import GeneratorConfig
from flowcraft.core.errors import ReviewStateError, ValidationError
from flowcraft.utils.logger import init_logger
from flowcraft.api.routes.generate import router as generate_router
from flowcraft.api.routes.analyze import router as analyze_router
from flowcraft.api.routes.approve import router as approve_router
from flowcraft.api.routes.reject import router as reject_router
from flowcraft.api.routes.reviews import router as reviews_router
from flowcraft.api.routes.modify import router as modify_router


init_logger(GeneratorConfig.from_env().log_level)

app = FastAPI(
    title="FlowCraft Workflow Generator",
    version="1.0.0",
    openapi_url="/api/v1/openapi.json",
    docs_url="/api/v1/docs"
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(ReviewStateError)
async def review_state_error_handler(request: Request, exc: ReviewStateError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


app.include_router(generate_router)  # /api/v1/workflow/generate[/stream]
app.include_router(analyze_router)   # /api/v1/workflow/analyze
app.include_router(approve_router)   # /api/v1/reviews/{id}/approve
app.include_router(reject_router)    # /api/v1/reviews/{id}/reject
app.include_router(reviews_router)   # /api/v1/reviews/{id}[/edit]
app.include_router(modify_router)    # /api/v1/workflow/modify
