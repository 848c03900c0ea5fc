"""
AI CV analysis for the South African job market.

Sends the CV to the DeepSeek chat model and normalises its JSON reply.
Results are cached in-process per CV and content hash for 24 hours.
"""

import logging

from cachetools import TTLCache
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_deepseek import ChatDeepSeek

from atsboost.config import settings
from atsboost.tools.errors import AnalysisError, AnalysisUnavailable
from atsboost.utils.parser import parse_analysis_response
from atsboost.utils.text import content_hash, truncate_cv

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You're an ATS expert for the South African job market."

ANALYSIS_PROMPT = """You are an expert ATS (Applicant Tracking System) analyzer specialized in the South African job market.

Analyze the following CV text and provide a detailed scoring with these components:

1. Overall ATS compatibility score (0-100)
2. Format evaluation (40% of total score):
   - Professional layout and structure
   - Consistent headers and sections
   - Proper use of bullet points
   - Appropriate date formats
3. Skills identification (40% of total score):
   - Relevant technical and soft skills
   - Certifications and qualifications
   - Work experience alignment
   - High-demand skills in South Africa carry 1.5x weight
4. South African context detection (20% of score):
   - B-BBEE status mentions (e.g. Level 1, Level 2)
   - NQF levels
   - South African cities and provinces
   - Local regulatory knowledge (POPIA, FICA, FAIS, PFMA)
   - South African languages
{job_section}
CV TEXT:
{cv_text}

## Output Format (JSON only, no explanation)
{{
    "overall_score": 72,
    "rating": "Good",
    "skill_score": 30,
    "format_score": 28,
    "sa_score": 14,
    "strengths": ["3-5 key strengths"],
    "improvements": ["3-5 suggested improvements"],
    "skills_identified": ["all identified skills"],
    "south_african_context": {{
        "b_bbee_mentions": [],
        "nqf_levels": [],
        "locations": [],
        "regulations": [],
        "languages": []
    }}
}}

rating is one of: Excellent, Good, Average, Needs Improvement.
"""

_analysis_cache: TTLCache = TTLCache(maxsize=500, ttl=settings.analysis_cache_ttl)


def is_available() -> bool:
    return bool(settings.deepseek_api_key)


def get_model() -> ChatDeepSeek:
    if not settings.deepseek_api_key:
        raise AnalysisUnavailable("DEEPSEEK_API_KEY not set")

    return ChatDeepSeek(
        model=settings.ai_model,
        api_key=settings.deepseek_api_key,
        temperature=settings.ai_temperature,
        timeout=settings.ai_timeout,
        max_tokens=2048,
    )


def build_prompt(cv_text: str, job_description: str | None = None) -> str:
    job_section = ""
    if job_description:
        job_section = f"\nConsider relevance to this job description:\n{job_description[:3000]}\n"
    return ANALYSIS_PROMPT.format(job_section=job_section, cv_text=truncate_cv(cv_text, max_chars=6000))


def analyze_cv_with_ai(cv_text: str, job_description: str | None = None) -> dict:
    """Run the AI analysis. Raises AnalysisError when the model or its reply fails."""
    model = get_model()

    try:
        response = model.invoke(
            [
                SystemMessage(content=SYSTEM_PROMPT),
                HumanMessage(content=build_prompt(cv_text, job_description)),
            ]
        )
    except Exception as e:
        logger.error(f"AI analysis request failed: {e}")
        raise AnalysisError(f"AI provider error: {e}") from e

    content = response.content if isinstance(response.content, str) else str(response.content)
    result = parse_analysis_response(content)
    if result is None:
        logger.error(f"Unparseable AI analysis reply: {content[:200]}")
        raise AnalysisError("AI provider returned an invalid analysis")

    return result


def analyze_cv_cached(cv_id: str, cv_text: str, job_description: str | None = None) -> tuple[dict, bool]:
    """Return (analysis, from_cache)."""
    key = f"{cv_id}:{content_hash(cv_text + (job_description or ''))}"
    if key in _analysis_cache:
        return _analysis_cache[key], True

    result = analyze_cv_with_ai(cv_text, job_description)
    _analysis_cache[key] = result
    return result, False


def clear_cache() -> None:
    _analysis_cache.clear()
