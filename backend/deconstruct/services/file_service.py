import asyncio
import base64
import inspect
from pathlib import Path
from typing import Any, Optional, Union

from ..config import settings
from ..errors import EncodingError, ValidationError
from ..models import EncodedMedia


def validate_upload(content_type: Optional[str], size: int, max_size_mb: Optional[int] = None) -> None:
    """Reject non-video or oversized uploads before they reach the core"""
    max_size_mb = max_size_mb or settings.MAX_VIDEO_SIZE_MB
    if not content_type or not content_type.startswith("video"):
        raise ValidationError("请上传有效的视频文件。")
    if size > max_size_mb * 1024 * 1024:
        raise ValidationError(f"文件大小超过 {max_size_mb}MB 限制。", too_large=True)


class MediaEncoder:
    def __init__(self, max_size_mb: Optional[int] = None):
        self.max_size_bytes = (max_size_mb or settings.MAX_VIDEO_SIZE_MB) * 1024 * 1024

    async def encode(self, source: Union[bytes, str, Path, Any], mime_type: str) -> EncodedMedia:
        """Read a video and return it base64-encoded with its MIME type.

        ``source`` may be raw bytes, a filesystem path, or an uploaded file
        exposing ``read()``.
        """
        content = await self._read(source)
        if len(content) > self.max_size_bytes:
            raise EncodingError(
                f"Media is {len(content)} bytes, above the {self.max_size_bytes} byte limit"
            )
        return EncodedMedia(
            data=base64.b64encode(content).decode("ascii"),
            mime_type=mime_type,
        )

    @staticmethod
    async def _read(source: Union[bytes, str, Path, Any]) -> bytes:
        try:
            if isinstance(source, (bytes, bytearray, memoryview)):
                return bytes(source)
            if isinstance(source, (str, Path)):
                return await asyncio.to_thread(Path(source).read_bytes)
            if hasattr(source, "read"):
                content = source.read()
                if inspect.isawaitable(content):
                    content = await content
                if not isinstance(content, (bytes, bytearray)):
                    raise EncodingError("Uploaded file did not return binary content")
                return bytes(content)
        except OSError as e:
            raise EncodingError(f"Error reading media: {str(e)}") from e
        raise EncodingError(f"Unsupported media source: {type(source).__name__}")
