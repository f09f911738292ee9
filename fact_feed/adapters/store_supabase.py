from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from fact_feed.domain.categories import ALL
from fact_feed.domain.errors import FactNotFoundError, StoreError
from fact_feed.domain.models import Fact, FactId, is_vote_field
from fact_feed.ports.fact_store import FactStore

log = logging.getLogger("fact_feed.store")


def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


@dataclass
class SupabaseFactStore(FactStore):
    """
    PostgREST-клиент Supabase.

    Инкремент голоса идёт через RPC-функцию, которая делает
    `update facts set <col> = <col> + 1 where id = fact_id returning *`.
    """

    base_url: str
    api_key: str
    table: str = "facts"
    increment_function: str = "increment_vote"
    limit: int = 1000
    timeout_s: float = 15.0

    session: Optional[requests.Session] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.base_url = _strip_trailing_slash(self.base_url)
        if self.session is None:
            self.session = requests.Session()

    def _headers(self, *, representation: bool = False) -> Dict[str, str]:
        h = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        if representation:
            h["Prefer"] = "return=representation"
        return h

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        assert self.session is not None

        url = f"{self.base_url}/rest/v1/{path}"
        try:
            r = self.session.request(method, url, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            raise StoreError(f"{method} {path} failed: {e}")

        if r.status_code >= 400:
            raise StoreError(f"{method} {path} rejected: {r.text[:200]}", status=r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError:
            raise StoreError(f"{method} {path}: response is not JSON", status=r.status_code)

    def _select(self, filter: str) -> List[Fact]:
        params: Dict[str, str] = {
            "select": "*",
            "order": "voteInteresting.desc",
            "limit": str(self.limit),
        }
        if filter != ALL:
            params["category"] = f"eq.{filter}"

        data = self._request("GET", self.table, params=params, headers=self._headers())
        if not isinstance(data, list):
            raise StoreError(f"unexpected select response: {type(data).__name__}")
        return [Fact.from_row(row) for row in data[: self.limit]]

    def _insert(self, text: str, source: str, category: str) -> Fact:
        data = self._request(
            "POST",
            self.table,
            json=[{"text": text, "source": source, "category": category}],
            headers=self._headers(representation=True),
        )
        if not isinstance(data, list) or not data:
            raise StoreError("insert returned no row")
        return Fact.from_row(data[0])

    def _increment(self, fact_id: FactId, vote_field: str) -> Fact:
        data = self._request(
            "POST",
            f"rpc/{self.increment_function}",
            json={"fact_id": fact_id, "vote_field": vote_field},
            headers=self._headers(),
        )
        # функция может вернуть setof (список) или одну запись
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            raise FactNotFoundError(fact_id)
        return Fact.from_row(data)

    async def fetch_facts(self, filter: str) -> list[Fact]:
        return await asyncio.to_thread(self._select, filter)

    async def insert_fact(self, text: str, source: str, category: str) -> Fact:
        return await asyncio.to_thread(self._insert, text, source, category)

    async def increment_vote(self, fact_id: FactId, vote_field: str) -> Fact:
        if not is_vote_field(vote_field):
            raise ValueError(f"unknown vote field: {vote_field!r}")
        return await asyncio.to_thread(self._increment, fact_id, vote_field)
