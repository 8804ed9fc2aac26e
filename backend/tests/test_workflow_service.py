"""Tests for the upload -> analyzing -> result state machine."""

from __future__ import annotations

import asyncio
import json

import pytest

from conftest import FakeModels, FakeProcessor, analysis_payload, make_processor
from deconstruct.errors import EncodingError, InvalidTransition, NoActiveBrief, ParseError, TransportError
from deconstruct.models import AppStep, BriefField, Platform
from deconstruct.services.workflow_service import AnalysisWorkflow

SCHEDULE = [(0.0, "上传中"), (0.03, "识别中"), (10.0, "生成中")]


def _workflow(processor: FakeProcessor) -> AnalysisWorkflow:
    return AnalysisWorkflow(processor, progress_schedule=SCHEDULE, debounce_seconds=0.05)


@pytest.mark.asyncio
async def test_successful_analysis_reaches_result():
    processor = FakeProcessor()
    wf = _workflow(processor)
    wf.select_platform(Platform.YOUTUBE)

    wf.start_analysis(b"x" * 1024, "video/mp4")
    assert wf.step is AppStep.ANALYZING
    await wf.wait()

    assert wf.step is AppStep.RESULT
    assert wf.result is processor.result
    assert processor.requests[0].platform is Platform.YOUTUBE
    assert processor.requests[0].mime_type == "video/mp4"
    assert wf.require_brief().brief.target_language == "Portuguese"
    assert wf.progress_message == ""
    assert wf.state().has_preview


@pytest.mark.asyncio
async def test_progress_messages_follow_schedule():
    processor = FakeProcessor()
    processor.gate.clear()
    wf = _workflow(processor)

    wf.start_analysis(b"clip", "video/mp4")
    await asyncio.sleep(0.01)
    assert wf.progress_message == "上传中"
    await asyncio.sleep(0.05)
    assert wf.progress_message == "识别中"

    processor.gate.set()
    await wf.wait()
    assert wf.progress_message == ""


@pytest.mark.asyncio
async def test_only_one_analysis_in_flight():
    processor = FakeProcessor()
    processor.gate.clear()
    wf = _workflow(processor)

    wf.start_analysis(b"clip", "video/mp4")
    with pytest.raises(InvalidTransition):
        wf.start_analysis(b"clip", "video/mp4")
    with pytest.raises(InvalidTransition):
        wf.select_platform(Platform.INSTAGRAM)
    with pytest.raises(InvalidTransition):
        wf.reset()

    processor.gate.set()
    await wf.wait()
    assert len(processor.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        TransportError("429 RESOURCE_EXHAUSTED"),
        ParseError("Gemini API 未返回数据"),
        EncodingError("unreadable"),
    ],
)
async def test_failure_returns_to_upload(error):
    wf = _workflow(FakeProcessor(error=error))

    wf.start_analysis(b"clip", "video/mp4")
    await wf.wait()

    assert wf.step is AppStep.UPLOAD
    assert wf.error == f"分析失败: {error}"
    assert wf.preview is None
    assert wf.result is None
    with pytest.raises(NoActiveBrief):
        wf.require_brief()

    wf.dismiss_error()
    assert wf.state().error is None


@pytest.mark.asyncio
async def test_retry_after_failure_is_allowed():
    processor = FakeProcessor(error=TransportError("offline"))
    wf = _workflow(processor)
    wf.start_analysis(b"clip", "video/mp4")
    await wf.wait()

    processor.analyze_error = None
    wf.start_analysis(b"clip", "video/mp4")
    await wf.wait()
    assert wf.step is AppStep.RESULT
    assert wf.error is None


@pytest.mark.asyncio
async def test_brief_edit_triggers_one_translation():
    processor = FakeProcessor()
    wf = _workflow(processor)
    wf.start_analysis(b"clip", "video/mp4")
    await wf.wait()

    wf.require_brief().edit_chinese(BriefField.SHOOTING_GUIDE, "分镜1\n分镜2")
    await asyncio.sleep(0.2)

    assert processor.calls == [("分镜1\n分镜2", "Portuguese", BriefField.SHOOTING_GUIDE)]
    assert wf.state().brief.shooting_guide.target == "[Portuguese] 分镜1\n分镜2"


@pytest.mark.asyncio
async def test_reset_clears_session():
    processor = FakeProcessor()
    wf = _workflow(processor)
    wf.start_analysis(b"clip", "video/mp4")
    await wf.wait()

    wf.require_brief().edit_chinese(BriefField.SELLING_POINTS, "新卖点")
    wf.reset()
    await asyncio.sleep(0.1)

    state = wf.state()
    assert state.step is AppStep.UPLOAD
    assert state.result is None and state.brief is None
    assert not state.has_preview
    assert processor.calls == []


class _UnreadableEncoder:
    async def encode(self, source, mime_type):
        raise EncodingError("media stream truncated")


@pytest.mark.asyncio
async def test_encoder_failure_aborts_analysis():
    models = FakeModels(text=json.dumps(analysis_payload()))
    wf = _workflow(make_processor(models, encoder=_UnreadableEncoder()))

    wf.start_analysis(b"clip", "video/mp4")
    await wf.wait()

    assert models.calls == []
    assert wf.step is AppStep.UPLOAD
    assert wf.error == "分析失败: media stream truncated"
    assert wf.preview is None
