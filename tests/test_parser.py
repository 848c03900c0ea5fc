"""LLM reply parsing and CV text helpers."""

from atsboost.utils import content_hash, extract_json, parse_analysis_response, truncate_cv
from atsboost.utils.parser import rating_for_score


def test_extract_json_strategies():
    assert extract_json('{"a": 1}') == {"a": 1}
    assert extract_json('Here you go:\n```json\n{"a": 2}\n```') == {"a": 2}
    assert extract_json('```\n{"a": 3}\n```') == {"a": 3}
    assert extract_json('The analysis is {"a": {"b": "}"}} as requested.') == {"a": {"b": "}"}}
    assert extract_json("[1, 2] and {\"a\": 4}", expect_array=True) == [1, 2]
    assert extract_json("no json here") is None
    assert extract_json("") is None


def test_parse_analysis_response_normalises_and_clamps():
    reply = """```json
    {
        "overall_score": 140,
        "skill_score": "35",
        "format_score": -3,
        "sa_score": 25,
        "strengths": "Clear layout",
        "improvements": ["Add NQF levels", ""],
        "skills_identified": ["Python", "SQL"],
        "south_african_context": {"locations": ["Durban"], "languages": "isiZulu"}
    }
    ```"""
    result = parse_analysis_response(reply)
    assert result["overall_score"] == 100
    assert result["rating"] == "Excellent"
    assert result["skill_score"] == 35
    assert result["format_score"] == 0
    assert result["sa_score"] == 20
    assert result["strengths"] == ["Clear layout"]
    assert result["improvements"] == ["Add NQF levels"]
    assert result["south_african_context"]["locations"] == ["Durban"]
    assert result["south_african_context"]["languages"] == ["isiZulu"]
    assert result["south_african_context"]["regulations"] == []


def test_parse_analysis_response_with_non_finite_scores():
    result = parse_analysis_response('{"overall_score": Infinity, "skill_score": -Infinity, "format_score": NaN, "sa_score": "1e400"}')
    assert result["overall_score"] == 0
    assert result["skill_score"] == 0
    assert result["format_score"] == 0
    assert result["sa_score"] == 0


def test_parse_analysis_response_rejects_non_objects():
    assert parse_analysis_response("I cannot analyse this CV.") is None
    assert parse_analysis_response("[1, 2, 3]") is None


def test_rating_bands():
    assert rating_for_score(80) == "Excellent"
    assert rating_for_score(65) == "Good"
    assert rating_for_score(50) == "Average"
    assert rating_for_score(49) == "Needs Improvement"


def test_truncate_cv_drops_personal_particulars():
    short = "Skills: Python"
    assert truncate_cv(short) == short

    long_cv = "\n".join(
        ["ID Number: 8001015009087", "Marital Status: Single", "SKILLS"]
        + [f"Skill line {i} " + "x" * 80 for i in range(200)]
    )
    result = truncate_cv(long_cv, max_chars=2000)
    assert "ID Number" not in result
    assert "Marital Status" not in result
    assert result.startswith("SKILLS")
    assert len(result) <= 2000 + len("\n[truncated]")


def test_content_hash_is_stable():
    assert content_hash("abc") == content_hash("abc")
    assert content_hash("abc") != content_hash("abd")
    assert len(content_hash("abc")) == 16
