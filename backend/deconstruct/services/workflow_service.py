"""Upload -> analyzing -> result flow for the single in-memory session."""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, Tuple

from ..errors import InvalidTransition, NoActiveBrief
from ..logging_config import emit_event, get_logger
from ..models import AnalysisRequest, AnalysisResult, AppStep, Platform, WorkflowState
from .ai_service import AIProcessor
from .brief_service import BriefEditSession

logger = get_logger(__name__)

# (seconds after upload, message). Cosmetic only, not tied to real progress.
PROGRESS_SCHEDULE: List[Tuple[float, str]] = [
    (0.0, "正在上传视频到 Gemini..."),
    (2.0, "正在转录音频并识别语言..."),
    (5.0, "正在拆解视频结构并提取亮点..."),
    (8.0, "正在生成本地化翻拍脚本..."),
]


class AnalysisWorkflow:
    def __init__(
        self,
        processor: Optional[AIProcessor] = None,
        progress_schedule: Optional[Sequence[Tuple[float, str]]] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.processor = processor or AIProcessor()
        self.progress_schedule = list(progress_schedule or PROGRESS_SCHEDULE)
        self.debounce_seconds = debounce_seconds

        self.step = AppStep.UPLOAD
        self.platform = Platform.TIKTOK
        self.progress_message = ""
        self.error: Optional[str] = None
        self.result: Optional[AnalysisResult] = None
        self.brief_session: Optional[BriefEditSession] = None
        self.preview: Optional[bytes] = None
        self.preview_mime_type: Optional[str] = None

        self._analysis_task: Optional[asyncio.Task] = None
        self._progress_task: Optional[asyncio.Task] = None

    def _set_step(self, step: AppStep) -> None:
        emit_event(logger, "workflow.transition", src=self.step.value, dst=step.value)
        self.step = step

    def select_platform(self, platform: Platform) -> None:
        if self.step is not AppStep.UPLOAD:
            raise InvalidTransition("Platform can only be changed before uploading")
        self.platform = Platform(platform)

    def start_analysis(self, media_bytes: bytes, mime_type: str) -> asyncio.Task:
        """Enter ``analyzing`` and run the analysis in the background.

        Only possible from ``upload``, so at most one analysis is ever in flight.
        """
        if self.step is not AppStep.UPLOAD:
            raise InvalidTransition(f"Cannot start an analysis while in '{self.step.value}'")

        request = AnalysisRequest(
            media_bytes=media_bytes,
            mime_type=mime_type,
            platform=self.platform,
        )
        self.error = None
        self.preview = media_bytes
        self.preview_mime_type = mime_type
        self._set_step(AppStep.ANALYZING)

        loop = asyncio.get_running_loop()
        self._progress_task = loop.create_task(self._run_progress())
        self._analysis_task = loop.create_task(self._run_analysis(request))
        return self._analysis_task

    async def _run_progress(self) -> None:
        elapsed = 0.0
        for at, message in self.progress_schedule:
            await asyncio.sleep(max(0.0, at - elapsed))
            elapsed = at
            if self.step is AppStep.ANALYZING:
                self.progress_message = message

    def _stop_progress(self) -> None:
        if self._progress_task is not None:
            self._progress_task.cancel()
            self._progress_task = None
        self.progress_message = ""

    async def _run_analysis(self, request: AnalysisRequest) -> None:
        try:
            result = await self.processor.analyze(request)
        except Exception as e:
            logger.exception("Analysis failed")
            self._fail(str(e) or "未知错误")
            return
        finally:
            self._stop_progress()

        self.result = result
        self.brief_session = BriefEditSession(
            result.initial_brief,
            result.detected_language,
            self.processor,
            debounce_seconds=self.debounce_seconds,
        )
        emit_event(logger, "analysis.complete", detected_language=result.detected_language)
        self._set_step(AppStep.RESULT)

    def _fail(self, message: str) -> None:
        self.error = f"分析失败: {message}"
        self._release_preview()
        self._set_step(AppStep.UPLOAD)

    def _release_preview(self) -> None:
        self.preview = None
        self.preview_mime_type = None

    async def wait(self) -> None:
        """Wait for the in-flight analysis, if any, to settle."""
        if self._analysis_task is not None:
            await self._analysis_task

    def reset(self) -> None:
        """Drop the current result and return to ``upload``."""
        if self.step is AppStep.ANALYZING:
            raise InvalidTransition("An analysis is running and cannot be cancelled")
        if self.brief_session is not None:
            self.brief_session.close()
        self.brief_session = None
        self.result = None
        self.error = None
        self._release_preview()
        if self.step is not AppStep.UPLOAD:
            self._set_step(AppStep.UPLOAD)

    def dismiss_error(self) -> None:
        self.error = None

    def require_brief(self) -> BriefEditSession:
        if self.brief_session is None:
            raise NoActiveBrief("No analysis result to edit yet")
        return self.brief_session

    def state(self) -> WorkflowState:
        session = self.brief_session
        return WorkflowState(
            step=self.step,
            platform=self.platform,
            progress_message=self.progress_message,
            error=self.error,
            result=self.result,
            brief=session.brief if session else None,
            syncing=session.syncing_view() if session else {},
            has_preview=self.preview is not None,
        )

    def close(self) -> None:
        self._stop_progress()
        if self.brief_session is not None:
            self.brief_session.close()
