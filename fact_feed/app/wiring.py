from __future__ import annotations

from fact_feed.app.settings import AppSettings
from fact_feed.ports.fact_store import FactStore
from fact_feed.ports.notifier import Notifier
from fact_feed.use_cases.feed import FactFeed


def build_store(settings: AppSettings) -> FactStore:
    s = settings.store
    if s.backend == "supabase":
        if not s.supabase_url or not s.supabase_key:
            raise ValueError("FF_SUPABASE_URL and FF_SUPABASE_KEY are required for the supabase store")
        from fact_feed.adapters.store_supabase import SupabaseFactStore
        return SupabaseFactStore(
            base_url=s.supabase_url,
            api_key=s.supabase_key,
            table=s.table,
            increment_function=s.increment_function,
            limit=settings.fetch_limit,
            timeout_s=s.timeout_s,
        )

    from fact_feed.adapters.store_json import JsonFileFactStore
    return JsonFileFactStore(s.json_path, limit=settings.fetch_limit)


def build_feed(settings: AppSettings, *, notifier: Notifier) -> FactFeed:
    return FactFeed(
        store=build_store(settings),
        notifier=notifier,
        fetch_limit=settings.fetch_limit,
    )
