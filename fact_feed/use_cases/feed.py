from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Literal, Optional, Sequence

from fact_feed.domain.categories import ALL, is_filter
from fact_feed.domain.errors import StoreError
from fact_feed.domain.models import MAX_FETCH_LIMIT, Fact, FactForm, FactId, FeedSnapshot, is_vote_field
from fact_feed.ports.fact_store import FactStore
from fact_feed.ports.notifier import Notifier
from fact_feed.use_cases.validation import submission_problems

log = logging.getLogger("fact_feed.feed")

FETCH_ALERT = "There was a problem with getting data!"

SubmitStatus = Literal["created", "invalid", "failed", "busy"]


def _event(event: str, **fields) -> None:
    log.info(json.dumps({"event": event, **fields}, ensure_ascii=False, default=str))


def _dedupe(facts: Sequence[Fact]) -> List[Fact]:
    seen = set()
    out: List[Fact] = []
    for f in facts:
        if f.id in seen:
            continue
        seen.add(f.id)
        out.append(f)
    return out


@dataclass(frozen=True)
class SubmitResult:
    status: SubmitStatus
    fact: Optional[Fact] = None
    problems: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.status == "created"


class FactFeed:
    """
    Состояние ленты фактов: список, текущий фильтр, флаг загрузки, форма.

    Меняется только через change_filter / submit_fact / cast_vote.
    Ответ на устаревший запрос фильтра отбрасывается (сравнение номера запроса).
    """

    def __init__(self, store: FactStore, notifier: Notifier, *, fetch_limit: int = MAX_FETCH_LIMIT):
        self.store = store
        self.notifier = notifier
        self.fetch_limit = min(fetch_limit, MAX_FETCH_LIMIT)

        self._facts: List[Fact] = []
        self._filter: str = ALL
        self._loading = False
        self._form = FactForm()

        self._fetch_seq = 0
        self._vote_locks: Dict[FactId, asyncio.Lock] = {}
        self._updating: Dict[FactId, int] = {}

    # ---- read surface ----

    @property
    def facts(self) -> List[Fact]:
        return list(self._facts)

    @property
    def filter(self) -> str:
        return self._filter

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def form(self) -> FactForm:
        return self._form

    def is_updating(self, fact_id: FactId) -> bool:
        return self._updating.get(fact_id, 0) > 0

    def find(self, fact_id: FactId) -> Optional[Fact]:
        return next((f for f in self._facts if f.id == fact_id), None)

    def snapshot(self) -> FeedSnapshot:
        return FeedSnapshot(
            facts=tuple(self._facts),
            filter=self._filter,
            loading=self._loading,
            form=replace(self._form),
            updating=frozenset(k for k, n in self._updating.items() if n > 0),
        )

    # ---- filter ----

    async def change_filter(self, filter: str) -> bool:
        """True, если ответ применён к списку."""
        if not is_filter(filter):
            raise ValueError(f"unknown filter: {filter!r}")

        self._fetch_seq += 1
        seq = self._fetch_seq
        self._filter = filter
        self._loading = True

        try:
            facts = await self.store.fetch_facts(filter)
        except StoreError as e:
            if seq != self._fetch_seq:
                _event("fetch_stale", filter=filter, seq=seq, error=str(e))
                return False
            _event("fetch_failed", filter=filter, seq=seq, error=str(e))
            self._loading = False
            self.notifier.alert(FETCH_ALERT)
            return False

        if seq != self._fetch_seq:
            _event("fetch_stale", filter=filter, seq=seq, count=len(facts))
            return False

        self._facts = _dedupe(facts)[: self.fetch_limit]
        self._loading = False
        _event("fetch", filter=filter, seq=seq, count=len(self._facts))
        return True

    async def refresh(self) -> bool:
        return await self.change_filter(self._filter)

    # ---- form ----

    def open_form(self) -> None:
        self._form.is_open = True

    def close_form(self) -> None:
        self._form.is_open = False

    def toggle_form(self) -> bool:
        self._form.is_open = not self._form.is_open
        return self._form.is_open

    async def submit_fact(self, text: str, source: str, category: str) -> SubmitResult:
        form = self._form
        if form.uploading:
            # форма заблокирована, пока идёт предыдущая отправка
            _event("submit_busy")
            return SubmitResult(status="busy")

        form.text, form.source, form.category = text, source, category

        problems = submission_problems(text, source, category)
        if problems:
            _event("submit_invalid", problems=problems)
            return SubmitResult(status="invalid", problems=problems)

        form.uploading = True
        try:
            fact = await self.store.insert_fact(text, source, category)
        except StoreError as e:
            _event("submit_failed", error=str(e))
            return SubmitResult(status="failed", error=str(e))
        finally:
            form.uploading = False

        self._facts = [fact] + [f for f in self._facts if f.id != fact.id]
        form.clear()
        form.is_open = False
        _event("fact_created", id=fact.id, category=fact.category)
        return SubmitResult(status="created", fact=fact)

    # ---- votes ----

    async def cast_vote(self, fact_id: FactId, vote_field: str) -> Optional[Fact]:
        """Обновлённая строка с сервера или None при ошибке."""
        if not is_vote_field(vote_field):
            raise ValueError(f"unknown vote field: {vote_field!r}")

        lock = self._vote_locks.setdefault(fact_id, asyncio.Lock())
        self._updating[fact_id] = self._updating.get(fact_id, 0) + 1
        try:
            async with lock:
                try:
                    updated = await self.store.increment_vote(fact_id, vote_field)
                except StoreError as e:
                    _event("vote_failed", id=fact_id, field=vote_field, error=str(e))
                    return None
        finally:
            n = self._updating.get(fact_id, 1) - 1
            if n > 0:
                self._updating[fact_id] = n
            else:
                self._updating.pop(fact_id, None)
                if not lock.locked():
                    self._vote_locks.pop(fact_id, None)

        self._facts = [updated if f.id == fact_id else f for f in self._facts]
        _event("vote", id=fact_id, field=vote_field, value=updated.votes(vote_field))
        return updated
