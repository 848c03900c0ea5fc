"""
Local ATS scoring.

Scores a CV out of 100 without calling an LLM:
- skills (max 50): recruiter keywords found, 15 matches for full marks
- South African context (max 30): local terminology, 5 matches for full marks
- format (max 20): minus 5 per ATS-hostile formatting pattern
"""

import re
from dataclasses import asdict, dataclass, field

from atsboost.services.sa_context import (
    SA_CONTEXT_KEYWORDS,
    SKILL_KEYWORDS,
    find_keywords,
    get_industry_template,
)
from atsboost.utils.parser import rating_for_score

STOPWORDS = {
    "about", "above", "after", "again", "against", "also", "and", "any", "are", "because",
    "been", "before", "being", "below", "between", "both", "but", "can", "candidate", "could",
    "did", "does", "doing", "down", "during", "each", "few", "for", "from", "further", "had",
    "has", "have", "having", "her", "here", "hers", "him", "his", "how", "into", "its",
    "just", "more", "most", "must", "other", "our", "ours", "out", "over", "own", "role",
    "same", "she", "should", "some", "such", "than", "that", "the", "their", "them", "then",
    "there", "these", "they", "this", "those", "through", "under", "until", "very", "was",
    "were", "what", "when", "where", "which", "while", "who", "will", "with", "work", "would",
    "you", "your", "able", "ability", "experience", "required", "requirements", "including",
    "within", "strong", "good", "excellent", "knowledge", "skills", "position", "company",
}

FORMAT_CHECKS = [
    (re.compile(r"<[^>]*>"), "HTML tags found in CV. These may disrupt ATS parsing."),
    (re.compile(r"\[\w+\]"), "Square brackets found in CV. These may disrupt ATS parsing."),
    (re.compile(r"\{[^}]*\}"), "Curly braces found in CV. These may disrupt ATS parsing."),
    (None, "Too many numbers/codes in CV may confuse ATS systems."),
    (re.compile(r"(?:[A-Z][a-z]*\s){7,}"), "Long sentences without keywords may reduce ATS relevance."),
    (re.compile(r"(?<!:)//[^\n]*"), "Comments or unusual formatting may not be readable by ATS."),
    (re.compile(r"\.{2,}"), "Multiple periods or unusual punctuation may confuse ATS systems."),
]

DIGIT_HEAVY_TOKEN = 10

DEFAULT_STRENGTH = "You've started creating your CV"
DEFAULT_IMPROVEMENT = "Continue improving your CV with more relevant content"


@dataclass
class AnalysisReport:
    score: int
    skills_score: int
    context_score: int
    format_score: int
    rating: str
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    skills_found: list[str] = field(default_factory=list)
    sa_keywords_found: list[str] = field(default_factory=list)
    bbbee_detected: bool = False
    nqf_detected: bool = False
    nqf_levels: list[int] = field(default_factory=list)
    keyword_recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _has_digit_heavy_token(content: str) -> bool:
    return any(sum(ch.isdigit() for ch in token) >= DIGIT_HEAVY_TOKEN for token in content.split())


def find_format_issues(content: str) -> list[str]:
    issues = []
    for pattern, message in FORMAT_CHECKS:
        if pattern is None:
            if _has_digit_heavy_token(content):
                issues.append(message)
        elif pattern.search(content):
            issues.append(message)
    return issues


def detect_nqf_levels(content: str) -> list[int]:
    levels = {int(m) for m in re.findall(r"nqf\s*(?:level\s*)?(\d{1,2})", content, re.IGNORECASE)}
    return sorted(level for level in levels if 1 <= level <= 10)


def detect_bbbee(content: str) -> bool:
    return bool(re.search(r"b-?bbee|broad-based black economic empowerment", content, re.IGNORECASE))


def analyze_cv(content: str, target_industry: str | None = None) -> AnalysisReport:
    """Score CV text and build strengths, improvements and issues."""
    normalized = content.lower()
    skill_matches = find_keywords(normalized, SKILL_KEYWORDS)
    context_matches = find_keywords(normalized, SA_CONTEXT_KEYWORDS)
    format_issues = find_format_issues(content)

    skills_score = min(50, round(len(skill_matches) / 15 * 50))
    context_score = min(30, round(len(context_matches) / 5 * 30))
    format_score = max(0, 20 - len(format_issues) * 5)
    score = skills_score + context_score + format_score

    strengths = []
    if len(skill_matches) > 5:
        strengths.append("You've included key skills that match many job descriptions")
    if len(context_matches) > 2:
        strengths.append("Your CV contains South African specific terminology that employers look for")
    if not format_issues:
        strengths.append("Your CV format is clean and ATS-friendly")
    if len(normalized) > 1500:
        strengths.append("Your CV has good content length with sufficient detail")

    improvements = []
    if len(skill_matches) <= 10:
        improvements.append("Add more industry-specific keywords found in CareerJunction job ads")
    if len(context_matches) <= 3:
        improvements.append("Include South African qualifications (NQF levels) and B-BBEE status if applicable")
    if len(normalized) < 1000:
        improvements.append("Your CV may be too brief. Consider adding more relevant experience and skills")

    issues = format_issues[:3]
    if len(skill_matches) < 3:
        issues.append("Very few relevant skills detected. Your CV needs significant keyword optimization")
    if not context_matches:
        issues.append("No South African context found. Add location, qualifications, and local terminology")

    nqf_levels = detect_nqf_levels(content)

    return AnalysisReport(
        score=score,
        skills_score=skills_score,
        context_score=context_score,
        format_score=format_score,
        rating=rating_for_score(score),
        strengths=strengths or [DEFAULT_STRENGTH],
        improvements=improvements or [DEFAULT_IMPROVEMENT],
        issues=issues,
        skills_found=skill_matches,
        sa_keywords_found=context_matches,
        bbbee_detected=detect_bbbee(content),
        nqf_detected=bool(nqf_levels) or "nqf" in context_matches,
        nqf_levels=nqf_levels,
        keyword_recommendations=_keyword_recommendations(normalized, target_industry),
    )


def _keyword_recommendations(normalized: str, target_industry: str | None) -> list[str]:
    """Industry template skills missing from the CV."""
    if not target_industry:
        return []
    template = get_industry_template(target_industry)
    return [skill for skill in template["skills"] if skill.lower() not in normalized][:5]


def extract_job_keywords(job_description: str, limit: int = 20) -> list[str]:
    """Known skill/SA keywords in a job ad, topped up with its most frequent significant words."""
    keywords = find_keywords(job_description, SKILL_KEYWORDS) + find_keywords(job_description, SA_CONTEXT_KEYWORDS)

    counts: dict[str, int] = {}
    for word in re.findall(r"[a-z][a-z+#.-]{3,}", job_description.lower()):
        word = word.strip(".-")
        if len(word) < 4 or word in STOPWORDS:
            continue
        counts[word] = counts.get(word, 0) + 1

    for word, _ in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
        if len(keywords) >= limit:
            break
        if not any(word in k or k in word for k in keywords):
            keywords.append(word)

    return keywords[:limit]


def analyze_job_fit(content: str, job_description: str) -> dict:
    """Keyword overlap between a CV and a job ad (0-100)."""
    keywords = extract_job_keywords(job_description)
    if not keywords:
        return {"score": 0, "matched_keywords": [], "missing_keywords": []}

    normalized = content.lower()
    matched = [k for k in keywords if k in normalized]
    missing = [k for k in keywords if k not in normalized]

    return {
        "score": round(len(matched) / len(keywords) * 100),
        "matched_keywords": matched,
        "missing_keywords": missing[:10],
    }


def apply_plan_limits(report: dict, features: dict) -> dict:
    """Trim a report dict to what the user's plan shows."""
    trimmed = dict(report)
    max_strengths = features.get("max_strengths")
    max_improvements = features.get("max_improvements")

    if max_strengths is not None:
        trimmed["strengths"] = trimmed.get("strengths", [])[:max_strengths]
    if max_improvements is not None:
        trimmed["improvements"] = trimmed.get("improvements", [])[:max_improvements]
    if not features.get("keyword_optimization"):
        trimmed["keyword_recommendations"] = []
    trimmed["limited"] = max_strengths is not None or max_improvements is not None

    return trimmed
