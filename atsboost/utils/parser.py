"""
Robust JSON parser for LLM analysis replies.

Handles various AI output formats:
- Clean JSON
- JSON in ```json blocks
- JSON in ``` blocks (no language tag)
- JSON mixed with prose
"""

import json
import re
from typing import Any


def extract_json(text: str, expect_array: bool = False) -> dict | list | None:
    """
    Extract JSON from AI response using multiple strategies.

    Args:
        text: Raw AI response text
        expect_array: If True, expect a JSON array; if False, expect object

    Returns:
        Parsed JSON (dict or list) or None if extraction fails
    """
    if not text or not text.strip():
        return None

    strategies = [
        _try_clean_json,
        _try_fenced_json,
        _try_fenced_any,
        _try_find_json_bounds,
    ]

    fallback = None
    for strategy in strategies:
        result = strategy(text, expect_array)
        if result is None:
            continue
        if expect_array and isinstance(result, list):
            return result
        if not expect_array and isinstance(result, dict):
            return result
        if result and fallback is None:
            fallback = result

    return fallback


def _try_clean_json(text: str, expect_array: bool) -> Any:
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        return None


def _try_fenced_json(text: str, expect_array: bool) -> Any:
    """Extract JSON from ```json ... ``` blocks."""
    for match in re.findall(r"```json\s*([\s\S]*?)\s*```", text, re.IGNORECASE):
        try:
            return json.loads(match.strip())
        except json.JSONDecodeError:
            continue
    return None


def _try_fenced_any(text: str, expect_array: bool) -> Any:
    """Extract JSON from ``` ... ``` blocks (any language or none)."""
    for match in re.findall(r"```(?:\w*)\s*([\s\S]*?)\s*```", text):
        try:
            return json.loads(match.strip())
        except json.JSONDecodeError:
            continue
    return None


def _try_find_json_bounds(text: str, expect_array: bool) -> Any:
    """Find JSON by matching brackets/braces, preferring the expected kind."""
    pairs = [('[', ']'), ('{', '}')] if expect_array else [('{', '}'), ('[', ']')]

    for open_char, close_char in pairs:
        start = text.find(open_char)
        while start != -1:
            candidate = _extract_balanced(text, start, open_char, close_char)
            if candidate:
                try:
                    return json.loads(candidate)
                except json.JSONDecodeError:
                    pass
            start = text.find(open_char, start + 1)

    return None


def _extract_balanced(text: str, start: int, open_char: str, close_char: str) -> str | None:
    """Extract balanced brackets/braces starting from position."""
    depth = 0
    in_string = False
    escape_next = False

    for i, char in enumerate(text[start:], start):
        if escape_next:
            escape_next = False
            continue

        if char == '\\' and in_string:
            escape_next = True
            continue

        if char == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    return None


def _clamp_int(value: Any, low: int, high: int) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return low
    return max(low, min(high, number))


def _str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if str(v).strip()]


def parse_analysis_response(text: str) -> dict | None:
    """
    Parse and normalise an AI CV analysis.

    Returns dict with: overall_score, rating, skill_score, format_score,
    sa_score, strengths, improvements, skills_identified,
    south_african_context. None when no JSON object can be found.
    """
    data = extract_json(text, expect_array=False)
    if not isinstance(data, dict):
        return None

    context = data.get("south_african_context") or data.get("sa_context") or {}
    if not isinstance(context, dict):
        context = {}

    overall = _clamp_int(data.get("overall_score", data.get("score")), 0, 100)

    return {
        "overall_score": overall,
        "rating": str(data.get("rating") or rating_for_score(overall)),
        "skill_score": _clamp_int(data.get("skill_score"), 0, 40),
        "format_score": _clamp_int(data.get("format_score"), 0, 40),
        "sa_score": _clamp_int(data.get("sa_score", data.get("context_score")), 0, 20),
        "strengths": _str_list(data.get("strengths")),
        "improvements": _str_list(data.get("improvements") or data.get("recommendations")),
        "skills_identified": _str_list(data.get("skills_identified") or data.get("skills")),
        "south_african_context": {
            "b_bbee_mentions": _str_list(context.get("b_bbee_mentions")),
            "nqf_levels": _str_list(context.get("nqf_levels")),
            "locations": _str_list(context.get("locations")),
            "regulations": _str_list(context.get("regulations")),
            "languages": _str_list(context.get("languages")),
        },
    }


def rating_for_score(score: int) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 65:
        return "Good"
    if score >= 50:
        return "Average"
    return "Needs Improvement"
