from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace

from fact_feed.adapters.notify_console import ConsoleNotifier
from fact_feed.app.settings import AppSettings
from fact_feed.app.wiring import build_feed
from fact_feed.domain.categories import ALL, category_names, is_filter
from fact_feed.domain.models import MAX_FETCH_LIMIT, SOFT_TEXT_LENGTH, Fact, resolve_vote_field
from fact_feed.use_cases.feed import FactFeed


def _render_fact(f: Fact) -> str:
    return (
        f"  #{f.id} [{f.category}] {f.text} ({f.source})\n"
        f"      👍 {f.vote_interesting}  🤯 {f.vote_mindblowing}  ⛔️ {f.vote_incorrect}"
    )


def _render(feed: FactFeed) -> None:
    if feed.loading:
        print("Loading...")
        return
    facts = feed.facts
    print(f"-- {feed.filter} ({len(facts)}) --")
    if not facts:
        print("There are no facts! Create a new one!")
        return
    for f in facts:
        print(_render_fact(f))
    print()


async def _ask(prompt: str) -> str:
    return (await asyncio.to_thread(input, prompt)).strip()


async def _post(feed: FactFeed) -> None:
    feed.open_form()
    text = await _ask("text> ")
    print(f"({SOFT_TEXT_LENGTH - len(text)} chars left)")
    source = await _ask("source> ")
    category = await _ask(f"category ({', '.join(category_names())})> ")

    res = await feed.submit_fact(text, source, category)
    if res.status == "created":
        print(f"bot> posted #{res.fact.id}\n")
    elif res.status == "invalid":
        print(f"bot> not posted: {', '.join(res.problems)}\n")
    else:
        print("bot> not posted, try again\n")


async def _vote(feed: FactFeed, args: list[str]) -> None:
    if len(args) != 2:
        print("usage: /vote <id> <interesting|mindblowing|incorrect>\n")
        return
    fid, name = args
    vote_field = resolve_vote_field(name)
    fact = next((f for f in feed.facts if str(f.id) == fid), None)
    if vote_field is None or fact is None:
        print("bot> unknown fact or vote type\n")
        return
    updated = await feed.cast_vote(fact.id, vote_field)
    if updated is None:
        print("bot> vote not registered, try again\n")
    else:
        print(_render_fact(updated) + "\n")


async def _repl(feed: FactFeed) -> None:
    await feed.refresh()
    _render(feed)

    print("Type /exit to quit.")
    print("Commands: /all | /filter <category> | /post | /vote <id> <type> | /refresh\n")

    while True:
        user_text = await _ask("you> ")
        if not user_text:
            continue
        if user_text == "/exit":
            break

        cmd, *rest = user_text.split()

        if cmd == "/all":
            await feed.change_filter(ALL)
            _render(feed)
        elif cmd == "/filter":
            name = rest[0] if rest else ""
            if not is_filter(name):
                print(f"bot> unknown category: {name}\n")
                continue
            await feed.change_filter(name)
            _render(feed)
        elif cmd == "/refresh":
            await feed.refresh()
            _render(feed)
        elif cmd == "/post":
            await _post(feed)
        elif cmd == "/vote":
            await _vote(feed, rest)
        else:
            print("bot> unknown command\n")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--store", default=None, choices=["json", "supabase"], help="Override store backend")
    parser.add_argument("--json-store", default=None, help="Override JSON store path")
    parser.add_argument("--supabase-url", default=None)
    parser.add_argument("--supabase-key", default=None)
    parser.add_argument("--limit", type=int, default=None, help="Override fetch limit")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    settings = AppSettings.from_env()

    store = settings.store
    if args.store is not None:
        store = replace(store, backend=args.store)
    if args.json_store is not None:
        store = replace(store, json_path=args.json_store)
    if args.supabase_url is not None:
        store = replace(store, supabase_url=args.supabase_url)
    if args.supabase_key is not None:
        store = replace(store, supabase_key=args.supabase_key)
    settings = replace(settings, store=store)
    if args.limit is not None and args.limit > 0:
        settings = replace(settings, fetch_limit=min(args.limit, MAX_FETCH_LIMIT))

    logging.basicConfig(
        level=logging.DEBUG if args.debug else settings.log_level,
        format="%(message)s",
    )

    feed = build_feed(settings, notifier=ConsoleNotifier())
    try:
        asyncio.run(_repl(feed))
    except (KeyboardInterrupt, EOFError):
        print()


if __name__ == "__main__":
    main()
