from __future__ import annotations

from typing import List
from urllib.parse import urlsplit

from fact_feed.domain.categories import is_category
from fact_feed.domain.errors import ValidationError
from fact_feed.domain.models import MAX_TEXT_LENGTH


def is_valid_http_url(value: object) -> bool:
    if not isinstance(value, str) or not value or value != value.strip():
        return False
    try:
        parts = urlsplit(value)
        parts.port  # бросает ValueError на кривом порту
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def submission_problems(text: str, source: str, category: str) -> List[str]:
    problems: List[str] = []
    if not text:
        problems.append("text_empty")
    elif len(text) > MAX_TEXT_LENGTH:
        problems.append("text_too_long")
    if not is_valid_http_url(source):
        problems.append("source_invalid")
    if not is_category(category):
        problems.append("category_invalid")
    return problems


def validate_submission(text: str, source: str, category: str) -> bool:
    return not submission_problems(text, source, category)


def ensure_valid_submission(text: str, source: str, category: str) -> None:
    problems = submission_problems(text, source, category)
    if problems:
        raise ValidationError(problems)
