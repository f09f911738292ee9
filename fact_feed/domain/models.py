from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

from fact_feed.domain.errors import StoreError

FactId = Any

VoteField = Literal["voteInteresting", "voteMindblowing", "voteIncorrect"]

VOTE_FIELDS: Tuple[str, ...] = ("voteInteresting", "voteMindblowing", "voteIncorrect")

# wire name -> атрибут Fact
_VOTE_ATTRS: Dict[str, str] = {
    "voteInteresting": "vote_interesting",
    "voteMindblowing": "vote_mindblowing",
    "voteIncorrect": "vote_incorrect",
}

VOTE_ALIASES: Dict[str, str] = {
    "interesting": "voteInteresting",
    "mindblowing": "voteMindblowing",
    "incorrect": "voteIncorrect",
}

MAX_TEXT_LENGTH = 500
MAX_FETCH_LIMIT = 1000
SOFT_TEXT_LENGTH = 200


def is_vote_field(value: object) -> bool:
    return isinstance(value, str) and value in _VOTE_ATTRS


def resolve_vote_field(name: str) -> Optional[str]:
    """Короткие имена (interesting) -> wire-имя; полные проходят как есть."""
    if is_vote_field(name):
        return name
    return VOTE_ALIASES.get((name or "").strip().lower())


def _dt_from_iso(s: Any) -> Optional[datetime]:
    if not s:
        return None
    s = str(s).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _counter(row: Mapping[str, Any], key: str) -> int:
    v = row.get(key)
    if v is None:
        return 0
    try:
        n = int(v)
    except (TypeError, ValueError):
        raise StoreError(f"bad counter {key}={v!r}")
    if n < 0:
        raise StoreError(f"negative counter {key}={n}")
    return n


@dataclass(frozen=True)
class Fact:
    id: FactId
    text: str
    source: str
    category: str
    vote_interesting: int = 0
    vote_mindblowing: int = 0
    vote_incorrect: int = 0
    created_at: Optional[datetime] = field(default=None, compare=False)

    def votes(self, vote_field: str) -> int:
        return getattr(self, _VOTE_ATTRS[vote_field])

    def with_vote(self, vote_field: str, value: int) -> "Fact":
        return replace(self, **{_VOTE_ATTRS[vote_field]: value})

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> "Fact":
        if not isinstance(row, Mapping):
            raise StoreError(f"bad fact row: {row!r}")
        if row.get("id") is None:
            raise StoreError("fact row without id")
        return Fact(
            id=row["id"],
            text=str(row.get("text") or ""),
            source=str(row.get("source") or ""),
            category=str(row.get("category") or ""),
            vote_interesting=_counter(row, "voteInteresting"),
            vote_mindblowing=_counter(row, "voteMindblowing"),
            vote_incorrect=_counter(row, "voteIncorrect"),
            created_at=_dt_from_iso(row.get("created_at")),
        )

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "source": self.source,
            "category": self.category,
            "voteInteresting": self.vote_interesting,
            "voteMindblowing": self.vote_mindblowing,
            "voteIncorrect": self.vote_incorrect,
        }
        if self.created_at is not None:
            row["created_at"] = self.created_at.isoformat()
        return row


@dataclass
class FactForm:
    is_open: bool = False
    text: str = ""
    source: str = ""
    category: str = ""
    uploading: bool = False

    @property
    def remaining_chars(self) -> int:
        return SOFT_TEXT_LENGTH - len(self.text)

    def clear(self) -> None:
        self.text = ""
        self.source = ""
        self.category = ""


@dataclass(frozen=True)
class FeedSnapshot:
    facts: Tuple[Fact, ...]
    filter: str
    loading: bool
    form: FactForm
    updating: frozenset = frozenset()
