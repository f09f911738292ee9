from .fact_store import FactStore
from .notifier import Notifier

__all__ = [
    "FactStore",
    "Notifier",
]
