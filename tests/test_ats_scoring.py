"""Local ATS scoring."""

import pytest

from atsboost.services.ats_scoring import (
    DEFAULT_IMPROVEMENT,
    analyze_cv,
    analyze_job_fit,
    apply_plan_limits,
    detect_nqf_levels,
    find_format_issues,
)
from atsboost.services.plan_features import PLAN_FEATURES
from atsboost.services.sa_context import contains_keyword
from tests.conftest import SAMPLE_CV


@pytest.mark.parametrize("text", ["", "hello", SAMPLE_CV, "<b>[x]</b> {y} ..." * 50, "1234567890123 " * 20])
def test_score_is_always_between_0_and_100(text):
    report = analyze_cv(text)
    assert 0 <= report.score <= 100
    assert report.score == report.skills_score + report.context_score + report.format_score


def test_sample_cv_scores_well():
    report = analyze_cv(SAMPLE_CV)
    assert "python" in report.skills_found
    assert "johannesburg" in report.sa_keywords_found
    assert report.bbbee_detected
    assert report.nqf_detected
    assert report.nqf_levels == [7]
    assert report.format_score == 20
    assert report.score >= 65
    assert report.rating in ("Good", "Excellent")


def test_empty_cv_gets_defaults_and_issues():
    report = analyze_cv("")
    assert report.score == 20
    assert report.rating == "Needs Improvement"
    assert report.improvements[0].startswith("Add more industry-specific keywords")
    assert any("No South African context" in issue for issue in report.issues)
    assert report.strengths == ["Your CV format is clean and ATS-friendly"]
    assert DEFAULT_IMPROVEMENT not in report.improvements


def test_format_issues():
    assert find_format_issues("plain text CV") == []
    issues = find_format_issues("<div>CV</div> [photo] {json} ID 8001015009087")
    assert len(issues) == 4
    # URLs are not treated as comments
    assert find_format_issues("https://github.com/thandi") == []
    assert find_format_issues("notes // hidden") != []


def test_short_keywords_match_whole_words_only():
    assert contains_keyword("ba (hons) psychology", "ba")
    assert not contains_keyword("database administrator", "ba")
    assert contains_keyword("database administrator", "database")


def test_detect_nqf_levels():
    assert detect_nqf_levels("NQF Level 6 diploma, NQF 8 honours, nqf level 12") == [6, 8]
    assert detect_nqf_levels("no qualifications") == []


def test_keyword_recommendations_for_industry():
    report = analyze_cv("Python developer", target_industry="Information Technology")
    assert report.keyword_recommendations
    assert len(report.keyword_recommendations) <= 5
    assert analyze_cv("Python developer").keyword_recommendations == []


def test_job_fit():
    fit = analyze_job_fit(SAMPLE_CV, "We need Python, SQL and React skills. Kubernetes is a plus.")
    assert 0 <= fit["score"] <= 100
    assert "python" in fit["matched_keywords"]
    assert "kubernetes" in fit["missing_keywords"]
    assert analyze_job_fit(SAMPLE_CV, "")["score"] == 0


def test_plan_limits_trim_free_reports():
    report = analyze_cv(SAMPLE_CV, target_industry="Information Technology").to_dict()
    free = apply_plan_limits(report, PLAN_FEATURES["FREE"])
    assert len(free["strengths"]) <= 2
    assert len(free["improvements"]) <= 1
    assert free["keyword_recommendations"] == []
    assert free["limited"] is True

    premium = apply_plan_limits(report, PLAN_FEATURES["PREMIUM"])
    assert premium["strengths"] == report["strengths"]
    assert premium["limited"] is False
