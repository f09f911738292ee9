from .notify_console import ConsoleNotifier
from .notify_log import CollectingNotifier, LogNotifier
from .store_json import JsonFileFactStore

__all__ = [
    "ConsoleNotifier",
    "CollectingNotifier", "LogNotifier",
    "JsonFileFactStore",
]
