from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fact_feed.domain.errors import UnknownCategoryError

ALL = "all"


@dataclass(frozen=True)
class Category:
    name: str
    color: str


CATEGORIES: tuple[Category, ...] = (
    Category("technology", "#3b82f6"),
    Category("science", "#16a34a"),
    Category("finance", "#ef4444"),
    Category("society", "#eab308"),
    Category("entertainment", "#db2777"),
    Category("health", "#14b8a6"),
    Category("history", "#f97316"),
    Category("news", "#8b5cf6"),
)

_BY_NAME = {c.name: c for c in CATEGORIES}


def category_names() -> list[str]:
    return [c.name for c in CATEGORIES]


def is_category(name: object) -> bool:
    return isinstance(name, str) and name in _BY_NAME


def is_filter(value: object) -> bool:
    """'all' или имя категории."""
    return value == ALL or is_category(value)


def category_color(name: str, default: Optional[str] = None) -> str:
    c = _BY_NAME.get(name)
    if c is not None:
        return c.color
    if default is not None:
        return default
    raise UnknownCategoryError(name)
