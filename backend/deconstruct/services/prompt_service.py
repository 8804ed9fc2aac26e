"""Prompt and response-schema construction for the Gemini calls."""

from typing import Dict, Optional, Tuple

from google.genai import types

from ..models import BriefField, Platform

DETECTABLE_LANGUAGES = "Portuguese, English, Spanish, Russian, Japanese, Malay, Thai, Indonesian"

FIELD_CONTEXT_LABELS = "shootingGuide=拍摄指导, scriptReference=口播文案, sellingPoints=产品卖点"


def _string(description: Optional[str] = None) -> types.Schema:
    return types.Schema(type=types.Type.STRING, description=description)


def _string_list() -> types.Schema:
    return types.Schema(type=types.Type.ARRAY, items=_string())


def _object(properties: Dict[str, types.Schema]) -> types.Schema:
    # Every property is required; the parser rejects partial payloads anyway
    return types.Schema(
        type=types.Type.OBJECT,
        properties=properties,
        required=list(properties),
    )


def _dual_field(cn_description: str) -> types.Schema:
    return _object({"cn": _string(cn_description), "target": _string()})


def build_analysis_schema() -> types.Schema:
    """Response schema mirroring AnalysisResult, camelCase wire names."""
    return _object({
        "detectedLanguage": _string(f"One of: {DETECTABLE_LANGUAGES}"),
        "originalScript": _string(),
        "chineseScript": _string(),
        "optimizedScript": _object({
            "original": _string(
                "Rewritten script in the SAME language as the original video source."
            ),
            "cn": _string("Chinese translation of the optimized script"),
        }),
        "structure": _object({
            "hook": _string("Analysis of the first 3 seconds/hook in Chinese"),
            "body": _string("Analysis of the main content body in Chinese"),
            "cta": _string("Analysis of the CTA/ending in Chinese"),
            "pacing": _string("Analysis of the video pacing in Chinese"),
        }),
        "highlights": _string_list(),
        "optimizationSuggestions": _string_list(),
        "initialBrief": _object({
            "targetLanguage": _string(),
            "shootingGuide": _dual_field(
                "Chinese shooting instructions, with clear line breaks"
            ),
            "scriptReference": _dual_field(
                "Chinese translation of the script lines, line-by-line"
            ),
            "sellingPoints": _dual_field("Chinese selling points, one per line"),
        }),
    })


def build_analysis_prompt(platform: Platform) -> Tuple[str, types.Schema]:
    """Return the analysis instruction and its response schema for a platform."""
    platform_name = Platform(platform).value
    prompt = f"""
你是一位资深的短视频内容分析专家，服务于专业的中国出海内容团队。
请分析这个视频，该视频计划发布在 {platform_name} 平台上。

请执行以下任务：
1. **识别语言**: 识别视频中的主要口语语言 (必须是以下之一: {DETECTABLE_LANGUAGES})。
2. **原文听写**: 逐字听写视频中的原始语音内容 (Original Script)。
3. **中文翻译**: 将听写的原始内容完整、准确地翻译成简体中文 (Chinese Script)。
4. **结构分析**: 请分别分析视频的:
   - 黄金3秒开头(Hook): 开篇是如何吸引注意力的？
   - 中段内容(Body): 核心叙事逻辑是什么？
   - 结尾引导(CTA): 如何引导用户互动或转化？
   - 视频节奏(Pacing): 整体剪辑和叙事节奏如何？
   请用**中文**简练概括。
5. **爆款亮点**: 识别视频中容易引发传播的关键亮点、槽点或爽点。请用**中文**列出。
6. **优化建议**: 针对 {platform_name} 平台的算法机制和用户偏好，提出具体的优化建议，帮助视频获得更好的播放数据。请用**中文**列出。
7. **优化文案 (Optimized Script)**:
   基于上述优化建议，请对原始口播文案进行“改写升级”。
   - 强化黄金3秒开头 (Hook)。
   - 精简冗余信息，提升信息密度。
   - 增强情绪感染力或互动引导。
   请提供:
   - original: 优化后的原文 (必须保持与原视频的口语语言严格一致，即与 detectedLanguage 相同！例如：原视频是葡萄牙语，这里必须输出优化后的葡萄牙语；是英语则输出英语)。
   - cn: 优化后文案的中文翻译
8. **翻拍脚本 Brief**: 创建一个 JSON 格式的“翻拍脚本”。这个脚本将用于指导不懂中文的外籍创作者复刻该视频。
   Brief 必须包含以下3个核心部分，每个字段都需要包含 'cn' (中文指导，给运营看) 和 'target' (目标语言文案，给老外看) 两个部分。
   **特别注意：为了最终导出的图片排版美观，所有内容请务必分行显示，不要堆积成一大段。**

   - shootingGuide (拍摄指导):
     cn: 详细描述分镜画面、运镜方式、场景布置、演员动作与表情。**请务必分条陈述，每一条指令结束后必须换行。**
     target: Detailed instructions for camera angles, scene setup, and actor performance/actions. **Please format with clear line breaks between instructions.**

   - scriptReference (口播文案参考):
     cn: 视频中核心台词、旁白或字幕的**中文翻译**。**请严格按句分行，每一行对应一句台词，与外语原文一一对应。**
     target: The actual spoken script or text overlays in the target language (Original language of the video). **Format line-by-line to match the flow of the video.**

   - sellingPoints (产品卖点/核心价值):
     cn: 视频需要重点展示的产品功能点、痛点解决方案或情绪价值。**请分行展示，每行一个卖点。**
     target: Key selling points or value propositions to emphasize in the video. **Format as a bulleted list, one point per line.**

   - targetLanguage: 自动识别出的目标语言名称（英文）。

请仅返回符合指定 Schema 的 JSON 数据。
"""
    return prompt, build_analysis_schema()


def build_translation_prompt(text: str, target_language: str, field: BriefField) -> str:
    """Translation-only prompt for one brief field."""
    return f"""
你是一位专业的视频本地化专家。
请将以下视频 Brief 中的中文指令/文案翻译成地道、自然的 {target_language}。

当前上下文: {BriefField(field).value} ({FIELD_CONTEXT_LABELS})

中文原文: "{text}"

翻译要求：
1. 保持与原文一致的结构格式（如果是列表，请保持列表）。
2. **确保每一条指令或句子都换行显示，不要合并成一段。**
3. 仅返回翻译后的文本字符串，不要包含任何解释。
"""
