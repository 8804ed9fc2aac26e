import asyncio
import base64
from typing import Any, List, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..errors import ParseError, RequestTimeoutError, TransportError
from ..logging_config import emit_event, get_logger
from ..models import AnalysisRequest, AnalysisResult, BriefField
from .file_service import MediaEncoder
from .prompt_service import build_analysis_prompt, build_translation_prompt

logger = get_logger(__name__)


def _strip_code_fence(text: str) -> str:
    t = text.strip()
    if t.startswith("```json"):
        t = t[7:]
    elif t.startswith("```"):
        t = t[3:]
    if t.endswith("```"):
        t = t[:-3]
    return t.strip()


class AIProcessor:
    def __init__(
        self,
        client: Optional[Any] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        encoder: Optional[MediaEncoder] = None,
    ):
        self._client = client
        self.model = model or settings.GEMINI_MODEL
        self.timeout = timeout or settings.REQUEST_TIMEOUT_SECONDS
        self.encoder = encoder or MediaEncoder()

    @property
    def gemini_client(self) -> Any:
        # Built on first use so the app starts without a credential
        if self._client is None:
            if not settings.GEMINI_API_KEY:
                raise TransportError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(api_key=settings.GEMINI_API_KEY)
        return self._client

    async def _generate(self, contents: Any, config: Optional[types.GenerateContentConfig] = None) -> Any:
        """Single Gemini call bounded by the configured timeout. No retries."""
        try:
            return await asyncio.wait_for(
                self.gemini_client.aio.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"Gemini did not respond within {self.timeout:g}s"
            ) from e
        except (genai_errors.APIError, httpx.HTTPError, OSError) as e:
            raise TransportError(str(e)) from e
        except ValueError as e:
            # The SDK reports unparseable replies (UnknownApiResponseError) as ValueError
            raise TransportError(str(e) or type(e).__name__) from e

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Send the video to Gemini and return the typed breakdown.

        Raises EncodingError if the media cannot be read, TransportError if the
        call fails and ParseError if the payload does not match AnalysisResult.
        """
        prompt, schema = build_analysis_prompt(request.platform)
        media = await self.encoder.encode(request.media_bytes, request.mime_type)

        emit_event(
            logger,
            "analysis.request",
            platform=request.platform.value,
            mime_type=media.mime_type,
            size=len(request.media_bytes),
        )
        contents: List[types.Content] = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_bytes(
                        data=base64.b64decode(media.data),
                        mime_type=media.mime_type,
                    ),
                    types.Part.from_text(text=prompt),
                ],
            ),
        ]
        generate_content_config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = await self._generate(contents, generate_content_config)
        return self.parse_analysis(getattr(response, "text", None))

    @staticmethod
    def parse_analysis(text: Optional[str]) -> AnalysisResult:
        """Strictly validate the model's JSON text as an AnalysisResult."""
        if not text or not text.strip():
            raise ParseError("Gemini API 未返回数据")
        try:
            return AnalysisResult.model_validate_json(_strip_code_fence(text))
        except PydanticValidationError as e:
            logger.warning("Rejected analysis payload: %s", e)
            raise ParseError(f"Gemini 返回的数据格式无效: {e.error_count()} 个字段错误") from e

    async def translate(self, text: str, target_language: str, field: BriefField) -> str:
        """Translate one brief field's Chinese text. Empty output is not an error."""
        if not text or not text.strip():
            return ""
        prompt = build_translation_prompt(text, target_language, field)
        response = await self._generate(prompt)
        translated = getattr(response, "text", None) or ""
        emit_event(
            logger,
            "translation.response",
            field=BriefField(field).value,
            target_language=target_language,
            chars=len(translated),
        )
        return translated.strip()
