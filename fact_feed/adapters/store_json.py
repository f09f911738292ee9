from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from fact_feed.domain.categories import ALL
from fact_feed.domain.errors import FactNotFoundError, StoreError
from fact_feed.domain.models import Fact, FactId, is_vote_field
from fact_feed.ports.fact_store import FactStore

log = logging.getLogger("fact_feed.store")


def _atomic_write(path: Path, text: str) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


class JsonFileFactStore(FactStore):
    """
    Локальное хранилище для разработки и тестов.
    Формат:
    {
      "next_id": 3,
      "facts": [ {"id": 1, "text": "...", "source": "...", "category": "...",
                  "voteInteresting": 0, "voteMindblowing": 0, "voteIncorrect": 0,
                  "created_at": "..."} ]
    }
    """

    def __init__(self, path: str, *, limit: int = 1000):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.limit = limit
        self._data: Dict[str, Any] = {"next_id": 1, "facts": []}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self._data = {"next_id": 1, "facts": []}
            return
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw) if raw.strip() else {}
            if not isinstance(data, dict) or not isinstance(data.get("facts"), list):
                data = {"next_id": 1, "facts": []}
            self._data = data
        except (OSError, ValueError):
            backup = self.path.with_suffix(self.path.suffix + ".bad")
            log.warning(json.dumps({"event": "store_corrupt", "path": str(self.path), "moved_to": str(backup)}))
            try:
                self.path.replace(backup)
            except OSError:
                pass
            self._data = {"next_id": 1, "facts": []}

        ids = [r.get("id") for r in self._data["facts"] if isinstance(r, dict) and isinstance(r.get("id"), int)]
        self._data["next_id"] = max([int(self._data.get("next_id") or 1)] + [i + 1 for i in ids])
    def _save(self, data: Dict[str, Any]) -> None:
        """Пишет data на диск и только после успешной записи делает её текущей."""
        try:
            _atomic_write(self.path, json.dumps(data, ensure_ascii=False, indent=2))
        except OSError as e:
            raise StoreError(f"failed to write {self.path}: {e}")
        self._data = data

    def _rows(self) -> List[Dict[str, Any]]:
        return [r for r in self._data["facts"] if isinstance(r, dict)]

    def count(self) -> int:
        return len(self._rows())

    # Файловый ввод-вывод идёт прямо в event loop: так между чтением
    # счётчика и записью нет точки приостановки.

    async def fetch_facts(self, filter: str) -> list[Fact]:
        rows = self._rows()
        if filter != ALL:
            rows = [r for r in rows if r.get("category") == filter]
        facts = [Fact.from_row(r) for r in rows]
        facts.sort(key=lambda f: f.vote_interesting, reverse=True)
        return facts[: max(0, self.limit)]

    async def insert_fact(self, text: str, source: str, category: str) -> Fact:
        fact = Fact(
            id=int(self._data["next_id"]),
            text=text,
            source=source,
            category=category,
            created_at=datetime.now(timezone.utc),
        )
        self._save({
            **self._data,
            "facts": self._data["facts"] + [fact.to_row()],
            "next_id": fact.id + 1,
        })
        return fact

    async def increment_vote(self, fact_id: FactId, vote_field: str) -> Fact:
        if not is_vote_field(vote_field):
            raise ValueError(f"unknown vote field: {vote_field!r}")

        facts = list(self._data["facts"])
        for i, row in enumerate(facts):
            if isinstance(row, dict) and row.get("id") == fact_id:
                bumped = {**row, vote_field: int(row.get(vote_field) or 0) + 1}
                facts[i] = bumped
                self._save({**self._data, "facts": facts})
                return Fact.from_row(bumped)
        raise FactNotFoundError(fact_id)
