from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from fact_feed.adapters.notify_log import CollectingNotifier
from fact_feed.app.settings import AppSettings
from fact_feed.app.wiring import build_feed
from fact_feed.domain.categories import CATEGORIES, category_color, is_filter
from fact_feed.domain.models import Fact, resolve_vote_field
from fact_feed.use_cases.feed import FactFeed

NEUTRAL_COLOR = "#78716c"


class FactOut(BaseModel):
    id: Union[int, str]
    text: str
    source: str
    category: str
    color: str
    voteInteresting: int
    voteMindblowing: int
    voteIncorrect: int
    updating: bool = False


class FormOut(BaseModel):
    is_open: bool
    text: str
    source: str
    category: str
    uploading: bool
    remaining_chars: int


class FeedOut(BaseModel):
    filter: str
    loading: bool
    facts: List[FactOut]
    form: FormOut
    alerts: List[str]


class FilterRequest(BaseModel):
    category: str


class SubmitRequest(BaseModel):
    text: str = ""
    source: str = ""
    category: str = ""


def _fact_out(f: Fact, *, updating: bool = False) -> FactOut:
    return FactOut(
        id=f.id,
        text=f.text,
        source=f.source,
        category=f.category,
        color=category_color(f.category, default=NEUTRAL_COLOR),
        voteInteresting=f.vote_interesting,
        voteMindblowing=f.vote_mindblowing,
        voteIncorrect=f.vote_incorrect,
        updating=updating,
    )


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    feed: Optional[FactFeed] = None,
    notifier: Optional[CollectingNotifier] = None,
) -> FastAPI:
    if feed is None:
        notifier = notifier or CollectingNotifier()
        feed = build_feed(settings or AppSettings.from_env(), notifier=notifier)
    elif notifier is None:
        notifier = feed.notifier if isinstance(feed.notifier, CollectingNotifier) else CollectingNotifier()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        await feed.refresh()
        yield

    app = FastAPI(title="fact_feed", lifespan=lifespan)
    app.state.feed = feed
    app.state.notifier = notifier

    def _find(fact_id: str) -> Fact:
        for f in feed.facts:
            if str(f.id) == fact_id:
                return f
        raise HTTPException(status_code=404, detail=f"Fact {fact_id} is not in the current list")

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/categories")
    def categories():
        return [{"name": c.name, "color": c.color} for c in CATEGORIES]

    @app.get("/feed", response_model=FeedOut)
    def get_feed():
        snap = feed.snapshot()
        return FeedOut(
            filter=snap.filter,
            loading=snap.loading,
            facts=[_fact_out(f, updating=f.id in snap.updating) for f in snap.facts],
            form=FormOut(
                is_open=snap.form.is_open,
                text=snap.form.text,
                source=snap.form.source,
                category=snap.form.category,
                uploading=snap.form.uploading,
                remaining_chars=snap.form.remaining_chars,
            ),
            alerts=notifier.drain(),
        )

    @app.post("/feed/filter")
    async def change_filter(req: FilterRequest):
        if not is_filter(req.category):
            raise HTTPException(status_code=422, detail=f"Unknown category: {req.category}")
        applied = await feed.change_filter(req.category)
        return {"applied": applied, "filter": feed.filter, "count": len(feed.facts)}

    @app.post("/facts", response_model=FactOut, status_code=201)
    async def submit_fact(req: SubmitRequest):
        feed.open_form()
        res = await feed.submit_fact(req.text, req.source, req.category)
        if res.status == "invalid":
            raise HTTPException(status_code=422, detail={"problems": res.problems})
        if res.status == "busy":
            raise HTTPException(status_code=409, detail="Another fact is being saved")
        if res.status == "failed" or res.fact is None:
            raise HTTPException(status_code=502, detail="Failed to save the fact")
        return _fact_out(res.fact)

    @app.post("/facts/{fact_id}/votes/{field}", response_model=FactOut)
    async def vote(fact_id: str, field: str):
        vote_field = resolve_vote_field(field)
        if vote_field is None:
            raise HTTPException(status_code=422, detail=f"Unknown vote field: {field}")

        fact = _find(fact_id)
        updated = await feed.cast_vote(fact.id, vote_field)
        if updated is None:
            raise HTTPException(status_code=502, detail="Failed to register the vote")
        return _fact_out(updated)

    return app


def _default_app() -> FastAPI:
    settings = AppSettings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(message)s")
    return create_app(settings)


app = _default_app()
