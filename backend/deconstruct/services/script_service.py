from ..models import AnalysisResult


def format_script_copy(result: AnalysisResult, optimized: bool = False) -> str:
    """Clipboard text for the script tabs of the analysis view"""
    language = result.detected_language
    if optimized:
        script = result.optimized_script
        original = script.original or "N/A"
        chinese = script.cn or "N/A"
        return f"优化后原文 ({language}):\n{original}\n\n优化后中文:\n{chinese}"
    return f"原文 ({language}):\n{result.original_script}\n\n中文翻译:\n{result.chinese_script}"
