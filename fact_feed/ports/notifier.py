from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Блокирующее уведомление пользователя (alert)."""

    def alert(self, message: str) -> None:
        ...
