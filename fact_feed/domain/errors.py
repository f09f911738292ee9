from __future__ import annotations

from typing import Optional, Sequence


class FactFeedError(Exception):
    pass


class ValidationError(FactFeedError):
    """Сабмит отклонён до сетевого вызова."""

    def __init__(self, problems: Sequence[str]):
        self.problems = list(problems)
        super().__init__("invalid submission: " + ", ".join(self.problems))


class StoreError(FactFeedError):
    """Ошибка транспорта или удалённого хранилища."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message if status is None else f"{message} (status={status})")


class FactNotFoundError(StoreError):
    def __init__(self, fact_id: object):
        self.fact_id = fact_id
        super().__init__(f"fact not found: {fact_id!r}", status=404)


class UnknownCategoryError(FactFeedError, LookupError):
    def __init__(self, name: object):
        self.name = name
        super().__init__(f"unknown category: {name!r}")
