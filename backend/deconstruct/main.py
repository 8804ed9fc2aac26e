from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .config import settings
from .errors import (
    DeconstructError,
    InvalidTransition,
    NoActiveBrief,
    RequestTimeoutError,
    TransportError,
    ValidationError,
)
from .logging_config import get_logger
from .models import (
    BriefField,
    BriefSnapshot,
    PlatformUpdate,
    TargetLanguageUpdate,
    TextUpdate,
    WorkflowState,
)
from .services.file_service import validate_upload
from .services.script_service import format_script_copy
from .services.workflow_service import AnalysisWorkflow

logger = get_logger(__name__)


def _status_for(error: DeconstructError) -> int:
    if isinstance(error, ValidationError):
        return 413 if error.too_large else 400
    if isinstance(error, (InvalidTransition, NoActiveBrief)):
        return 409
    if isinstance(error, RequestTimeoutError):
        return 504
    if isinstance(error, TransportError):
        return 502
    return 500


def get_workflow(request: Request) -> AnalysisWorkflow:
    return request.app.state.workflow


def create_app(workflow: Optional[AnalysisWorkflow] = None) -> FastAPI:
    """Build the API around one in-memory workflow session."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.workflow.close()

    app = FastAPI(title="Global Video Deconstruct", lifespan=lifespan)
    app.state.workflow = workflow or AnalysisWorkflow()

    # CORS setup
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DeconstructError)
    async def deconstruct_error_handler(request: Request, exc: DeconstructError):
        return JSONResponse(status_code=_status_for(exc), content={"detail": str(exc)})

    @app.get("/api/state", response_model=WorkflowState)
    async def get_state(wf: AnalysisWorkflow = Depends(get_workflow)):
        return wf.state()

    @app.put("/api/platform", response_model=WorkflowState)
    async def select_platform(body: PlatformUpdate, wf: AnalysisWorkflow = Depends(get_workflow)):
        wf.select_platform(body.platform)
        return wf.state()

    @app.post("/api/upload", response_model=WorkflowState, status_code=202)
    async def upload_video(
        file: UploadFile = File(...),
        wf: AnalysisWorkflow = Depends(get_workflow),
    ):
        try:
            # Check file size without reading it into memory
            file.file.seek(0, 2)
            file_size = file.file.tell()
            file.file.seek(0)

            validate_upload(file.content_type, file_size)

            try:
                content = await file.read()
            except IOError as e:
                raise HTTPException(status_code=500, detail=f"Error reading file: {str(e)}")

            wf.start_analysis(content, file.content_type)
            return wf.state()
        finally:
            await file.close()

    @app.get("/api/preview")
    async def get_preview(wf: AnalysisWorkflow = Depends(get_workflow)):
        if wf.preview is None:
            raise HTTPException(status_code=404, detail="No video loaded")
        return Response(content=wf.preview, media_type=wf.preview_mime_type)

    @app.get("/api/result/script", response_class=PlainTextResponse)
    async def get_script_copy(
        optimized: bool = Query(False),
        wf: AnalysisWorkflow = Depends(get_workflow),
    ):
        if wf.result is None:
            raise HTTPException(status_code=404, detail="No analysis result")
        return format_script_copy(wf.result, optimized=optimized)

    @app.patch("/api/brief/{field}/cn", response_model=WorkflowState)
    async def edit_chinese(field: BriefField, body: TextUpdate, wf: AnalysisWorkflow = Depends(get_workflow)):
        wf.require_brief().edit_chinese(field, body.text)
        return wf.state()

    @app.patch("/api/brief/{field}/target", response_model=WorkflowState)
    async def edit_target(field: BriefField, body: TextUpdate, wf: AnalysisWorkflow = Depends(get_workflow)):
        wf.require_brief().edit_target(field, body.text)
        return wf.state()

    @app.post("/api/brief/{field}/sync", response_model=WorkflowState)
    async def sync_field(field: BriefField, wf: AnalysisWorkflow = Depends(get_workflow)):
        session = wf.require_brief()
        try:
            await session.sync_field(field)
        except TransportError as e:
            logger.error("Manual sync of %s failed: %s", field.value, e)
            raise HTTPException(status_code=_status_for(e), detail=f"同步翻译失败，请重试。({e})")
        return wf.state()

    @app.put("/api/brief/target-language", response_model=WorkflowState)
    async def change_target_language(body: TargetLanguageUpdate, wf: AnalysisWorkflow = Depends(get_workflow)):
        wf.require_brief().change_target_language(body.target_language)
        return wf.state()

    @app.get("/api/brief/export", response_model=BriefSnapshot)
    async def export_brief(wf: AnalysisWorkflow = Depends(get_workflow)):
        return wf.require_brief().export_snapshot()

    @app.post("/api/reset", response_model=WorkflowState)
    async def reset(wf: AnalysisWorkflow = Depends(get_workflow)):
        wf.reset()
        return wf.state()

    @app.delete("/api/error", response_model=WorkflowState)
    async def dismiss_error(wf: AnalysisWorkflow = Depends(get_workflow)):
        wf.dismiss_error()
        return wf.state()

    return app


app = create_app()


def main() -> None:
    uvicorn.run("deconstruct.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
