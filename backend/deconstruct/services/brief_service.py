"""Editable replication brief with debounced per-field translation sync."""

from __future__ import annotations

from datetime import datetime
from typing import Awaitable, Dict, Optional, Protocol

from ..config import settings
from ..errors import TransportError, ValidationError
from ..logging_config import emit_event, get_logger
from ..models import TARGET_LANGUAGE_OPTIONS, BriefField, BriefSnapshot, VideoBrief
from .scheduler import Debouncer

logger = get_logger(__name__)


class Translator(Protocol):
    def translate(self, text: str, target_language: str, field: BriefField) -> Awaitable[str]: ...


class BriefEditSession:
    """Owns the live brief for one analysis result.

    Chinese edits schedule an automatic sync once the field has been idle for
    the debounce delay. Syncs for the same field use cancel-and-replace: only
    the newest request's translation is applied.
    """

    def __init__(
        self,
        brief: VideoBrief,
        detected_language: str,
        translator: Translator,
        debounce_seconds: Optional[float] = None,
        debouncer: Optional[Debouncer] = None,
    ):
        self.brief = brief.model_copy(deep=True)
        self.initial_target_language = brief.target_language
        self.detected_language = detected_language
        self.translator = translator
        self.debounce_seconds = (
            settings.SYNC_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self._debouncer = debouncer or Debouncer()
        self.syncing: Dict[BriefField, bool] = {field: False for field in BriefField}
        self._generations: Dict[BriefField, int] = {field: 0 for field in BriefField}

    @property
    def translation_language(self) -> str:
        return self.brief.target_language or self.detected_language

    def edit_chinese(self, field: BriefField, text: str) -> None:
        field = BriefField(field)
        self.brief.field(field).cn = text

        async def _auto_sync() -> None:
            await self.sync_field(field, override_text=text, auto=True)

        self._debouncer.schedule_after(field, self.debounce_seconds, _auto_sync)

    def edit_target(self, field: BriefField, text: str) -> None:
        self.brief.field(BriefField(field)).target = text

    async def sync_field(
        self,
        field: BriefField,
        override_text: Optional[str] = None,
        auto: bool = False,
    ) -> Optional[str]:
        """Translate the field's Chinese text into its target side.

        Returns the applied translation, or None when the result was dropped
        (superseded by a newer sync, or an auto-sync that failed). Failures of
        manual syncs propagate to the caller.
        """
        field = BriefField(field)
        text = override_text if override_text is not None else self.brief.field(field).cn
        language = self.translation_language

        self._generations[field] += 1
        generation = self._generations[field]
        self.syncing[field] = True
        emit_event(logger, "sync.start", field=field.value, auto=auto, generation=generation)
        try:
            translated = await self.translator.translate(text, language, field)
        except TransportError as e:
            if not auto:
                raise
            logger.warning("Auto-sync of %s failed: %s", field.value, e)
            return None
        finally:
            if self._generations[field] == generation:
                self.syncing[field] = False

        if self._generations[field] != generation:
            logger.info("Dropping superseded translation for %s", field.value)
            return None
        if auto and text.strip() and not translated:
            logger.warning("Auto-sync of %s returned no text", field.value)
            return None

        self.brief.field(field).target = translated
        emit_event(logger, "sync.applied", field=field.value, chars=len(translated))
        return translated

    def change_target_language(self, language: str) -> None:
        allowed = {self.detected_language, self.initial_target_language, *TARGET_LANGUAGE_OPTIONS}
        if language not in allowed:
            raise ValidationError(f"Unsupported target language: {language}")
        self.brief.target_language = language

    def export_snapshot(self, now: Optional[datetime] = None) -> BriefSnapshot:
        """Target-language-only view used for the exported brief image."""
        now = now or datetime.now()
        brief = self.brief
        return BriefSnapshot(
            target_language=brief.target_language,
            source_language=self.detected_language,
            shooting_guide=brief.shooting_guide.target,
            script_reference=brief.script_reference.target,
            selling_points=brief.selling_points.target,
            generated_at=now,
            filename=f"Brief_{brief.target_language}_{now.date().isoformat()}.png",
        )

    def syncing_view(self) -> Dict[str, bool]:
        return {field.value: flag for field, flag in self.syncing.items()}

    def pending_sync(self, field: BriefField) -> bool:
        return self._debouncer.pending(BriefField(field))

    def close(self) -> None:
        self._debouncer.cancel_all()
