from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from fact_feed.ports.notifier import Notifier

log = logging.getLogger("fact_feed.alert")


class LogNotifier(Notifier):
    def alert(self, message: str) -> None:
        log.warning(message)


@dataclass
class CollectingNotifier(Notifier):
    """Копит алерты, пока их не заберёт презентационный слой."""

    messages: List[str] = field(default_factory=list)

    def alert(self, message: str) -> None:
        log.warning(message)
        self.messages.append(message)

    def drain(self) -> List[str]:
        out, self.messages = self.messages, []
        return out
