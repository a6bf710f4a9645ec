from __future__ import annotations

import re
from typing import Any

from jobtracker.types import AnalysisMetadata, CoverLetterMetadata

TECH_KEYWORDS = [
    "javascript",
    "typescript",
    "python",
    "java",
    "react",
    "node.js",
    "aws",
    "docker",
    "kubernetes",
    "sql",
    "nosql",
    "mongodb",
    "postgresql",
    "git",
    "github",
    "agile",
    "scrum",
    "css",
    "html",
    "api",
    "rest",
    "graphql",
]

_TECH_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(word) for word in TECH_KEYWORDS) + r")\b",
    re.IGNORECASE,
)
_BULLET_PATTERN = re.compile(r"•|-|\*")
_NUMBERED_PATTERN = re.compile(r"\d+\.\s")

MIN_SUGGESTIONS = 5
MAX_SCORE = 95


def extract_keywords(content: str) -> list[str]:
    seen: dict[str, None] = {}
    for match in _TECH_PATTERN.findall(content):
        seen.setdefault(match.lower(), None)
    return list(seen)


def calculate_ats_score(content: str) -> int:
    length = len(content)
    keyword_count = len(extract_keywords(content))

    score = 70
    if length > 1000:
        score += 10
    elif length > 500:
        score += 5

    if keyword_count > 15:
        score += 10
    elif keyword_count > 8:
        score += 5

    if "ATS" in content or "Applicant Tracking System" in content:
        score += 5

    return min(score, MAX_SCORE)


def count_suggestions(content: str) -> int:
    bullets = len(_BULLET_PATTERN.findall(content))
    numbered = len(_NUMBERED_PATTERN.findall(content))
    return max(bullets + numbered, MIN_SUGGESTIONS)


def analysis_metadata(content: str) -> AnalysisMetadata:
    return AnalysisMetadata(
        keywords_found=extract_keywords(content),
        ats_score=calculate_ats_score(content),
        suggestions_count=count_suggestions(content),
    )


def cover_letter_metadata(content: str, form: Any) -> CoverLetterMetadata:
    lowered = content.lower()
    score = 60
    if form.company_name and form.company_name.lower() in lowered:
        score += 10
    if form.hiring_manager and form.hiring_manager.lower() in lowered:
        score += 10
    if form.personal_experience.strip():
        score += 10
    if form.why_company.strip():
        score += 5

    return CoverLetterMetadata(
        tone_used=form.tone,
        word_count=len(content.split()),
        personalization_score=min(score, MAX_SCORE),
    )
