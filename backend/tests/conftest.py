"""Shared fakes for the Gemini client and translator."""

from __future__ import annotations

import asyncio
import copy
from types import SimpleNamespace
from typing import Any

import pytest

from deconstruct.models import AnalysisResult, BriefField
from deconstruct.services.ai_service import AIProcessor

ANALYSIS_PAYLOAD: dict[str, Any] = {
    "detectedLanguage": "Portuguese",
    "originalScript": "Olá pessoal, hoje vou mostrar...",
    "chineseScript": "大家好，今天我来展示……",
    "optimizedScript": {
        "original": "Pare tudo! Olha isso...",
        "cn": "停下！看看这个……",
    },
    "structure": {
        "hook": "开头直接展示产品效果",
        "body": "对比使用前后",
        "cta": "引导评论区互动",
        "pacing": "快节奏剪辑",
    },
    "highlights": ["反差强烈", "真实使用场景"],
    "optimizationSuggestions": ["前3秒加字幕", "结尾加入购买引导"],
    "initialBrief": {
        "targetLanguage": "Portuguese",
        "shootingGuide": {"cn": "• 近景展示产品\n• 演员微笑", "target": "• Close-up\n• Smile"},
        "scriptReference": {"cn": "大家好", "target": "Olá pessoal"},
        "sellingPoints": {"cn": "防水\n轻便", "target": "Waterproof\nLight"},
    },
}


def analysis_payload() -> dict[str, Any]:
    return copy.deepcopy(ANALYSIS_PAYLOAD)


class FakeModels:
    """Stands in for ``client.aio.models``."""

    def __init__(self, text: str | None = None, error: Exception | None = None, delay: float = 0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, Any]] = []

    async def generate_content(self, model: str, contents: Any, config: Any = None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def make_processor(models: FakeModels, **kwargs: Any) -> AIProcessor:
    client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return AIProcessor(client=client, model="gemini-test", **kwargs)


class FakeTranslator:
    """Records translate calls; optional per-call delays and failure."""

    def __init__(self, delays: list[float] | None = None, error: Exception | None = None, reply: str | None = None):
        self.calls: list[tuple[str, str, BriefField]] = []
        self.delays = list(delays or [])
        self.error = error
        self.reply = reply

    async def translate(self, text: str, target_language: str, field: BriefField) -> str:
        self.calls.append((text, target_language, field))
        delay = self.delays.pop(0) if self.delays else 0.0
        if delay:
            await asyncio.sleep(delay)
        if self.error is not None:
            raise self.error
        if self.reply is not None:
            return self.reply
        return f"[{target_language}] {text}"


class FakeProcessor(FakeTranslator):
    """Analysis + translation fake for workflow tests."""

    def __init__(self, result: AnalysisResult | None = None, error: Exception | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.result = result or AnalysisResult.model_validate(analysis_payload())
        self.analyze_error = error
        self.requests: list[Any] = []
        self.gate = asyncio.Event()
        self.gate.set()

    async def analyze(self, request):
        self.requests.append(request)
        await self.gate.wait()
        if self.analyze_error is not None:
            raise self.analyze_error
        return self.result


@pytest.fixture
def sample_result() -> AnalysisResult:
    return AnalysisResult.model_validate(analysis_payload())
