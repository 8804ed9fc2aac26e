# backend/deconstruct/models.py
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    TIKTOK = "TikTok"
    INSTAGRAM = "Instagram"
    YOUTUBE = "YouTube"


class SupportedLanguage(str, Enum):
    PT_BR = "Portuguese (Brazil)"
    EN = "English"
    ES = "Spanish"
    RU = "Russian"
    JA = "Japanese"
    MS = "Malay"
    TH = "Thai"
    ID = "Indonesian"


# Selectable in the brief editor, next to the detected language
TARGET_LANGUAGE_OPTIONS = [
    "English",
    "Spanish",
    "Portuguese",
    "Russian",
    "Japanese",
    "Indonesian",
    "Thai",
    "Malay",
]


class BriefField(str, Enum):
    SHOOTING_GUIDE = "shootingGuide"
    SCRIPT_REFERENCE = "scriptReference"
    SELLING_POINTS = "sellingPoints"


class AppStep(str, Enum):
    UPLOAD = "upload"
    ANALYZING = "analyzing"
    RESULT = "result"


class DualLanguageField(BaseModel):
    cn: str
    target: str


class VideoBrief(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    shooting_guide: DualLanguageField = Field(alias="shootingGuide")
    script_reference: DualLanguageField = Field(alias="scriptReference")
    selling_points: DualLanguageField = Field(alias="sellingPoints")
    target_language: str = Field(alias="targetLanguage")

    def field(self, key: BriefField) -> DualLanguageField:
        return {
            BriefField.SHOOTING_GUIDE: self.shooting_guide,
            BriefField.SCRIPT_REFERENCE: self.script_reference,
            BriefField.SELLING_POINTS: self.selling_points,
        }[key]


class VideoStructure(BaseModel):
    hook: str
    body: str
    cta: str
    pacing: str


class OptimizedScript(BaseModel):
    original: str
    cn: str


class AnalysisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    detected_language: str = Field(alias="detectedLanguage")
    original_script: str = Field(alias="originalScript")
    chinese_script: str = Field(alias="chineseScript")
    optimized_script: OptimizedScript = Field(alias="optimizedScript")
    structure: VideoStructure
    highlights: List[str]
    optimization_suggestions: List[str] = Field(alias="optimizationSuggestions")
    initial_brief: VideoBrief = Field(alias="initialBrief")


class AnalysisRequest(BaseModel):
    media_bytes: bytes
    mime_type: str
    platform: Platform = Platform.TIKTOK


class EncodedMedia(BaseModel):
    data: str  # base64
    mime_type: str


class BriefSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    target_language: str = Field(alias="targetLanguage")
    source_language: str = Field(alias="sourceLanguage")
    shooting_guide: str = Field(alias="shootingGuide")
    script_reference: str = Field(alias="scriptReference")
    selling_points: str = Field(alias="sellingPoints")
    generated_at: datetime = Field(alias="generatedAt")
    filename: str


class WorkflowState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    step: AppStep
    platform: Platform
    progress_message: str = Field("", alias="progressMessage")
    error: Optional[str] = None
    result: Optional[AnalysisResult] = None
    brief: Optional[VideoBrief] = None
    syncing: Dict[str, bool] = Field(default_factory=dict)
    has_preview: bool = Field(False, alias="hasPreview")


# Request bodies

class PlatformUpdate(BaseModel):
    platform: Platform


class TextUpdate(BaseModel):
    text: str


class TargetLanguageUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_language: str = Field(alias="targetLanguage")
