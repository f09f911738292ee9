from __future__ import annotations

from fact_feed.ports.notifier import Notifier


class ConsoleNotifier(Notifier):
    def alert(self, message: str) -> None:
        print(f"!! {message}")
