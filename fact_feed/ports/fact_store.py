from __future__ import annotations

from typing import Protocol, runtime_checkable

from fact_feed.domain.models import Fact, FactId


@runtime_checkable
class FactStore(Protocol):
    """Удалённое хранилище фактов. Ошибки транспорта: StoreError."""

    async def fetch_facts(self, filter: str) -> list[Fact]:
        ...

    async def insert_fact(self, text: str, source: str, category: str) -> Fact:
        ...

    async def increment_vote(self, fact_id: FactId, vote_field: str) -> Fact:
        ...
