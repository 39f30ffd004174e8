"""
FastAPI service exposing read-only queries over a stored timeline cred result.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException

from . import address as addr
from .config import settings
from .errors import InvalidAddressError, UnknownNodeError
from .storage import load_timeline_cred
from .timeline import TimelineCred

app = FastAPI(title="Timeline Cred", version="0.1.0")


@lru_cache(maxsize=1)
def get_timeline_cred() -> TimelineCred:
    try:
        return load_timeline_cred(settings.output_path)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=503, detail="No cred result has been computed") from exc


def _parse(text: str):
    try:
        return addr.parse(text)
    except InvalidAddressError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/intervals")
def intervals(cred: TimelineCred = Depends(get_timeline_cred)):
    return [i.model_dump() for i in cred.intervals]


@app.get("/ranking")
def ranking(
    prefix: str = "",
    limit: Optional[int] = None,
    cred: TimelineCred = Depends(get_timeline_cred),
):
    if limit is not None and limit < 1:
        raise HTTPException(status_code=400, detail="limit must be positive")
    return [
        {"address": addr.to_string(a), "total": total}
        for a, total in cred.ranking(_parse(prefix), limit)
    ]


@app.get("/nodes/cred")
def node_cred(address: str, cred: TimelineCred = Depends(get_timeline_cred)):
    parsed = _parse(address)
    try:
        series = cred.cred_series(parsed)
    except UnknownNodeError as exc:
        raise HTTPException(status_code=404, detail="Node not found") from exc
    node = cred.weighted_graph.node(parsed)
    return {
        "address": addr.to_string(parsed),
        "description": node.description,
        "total": cred.total_cred(parsed),
        "series": list(series),
    }


@app.get("/breakdowns")
def breakdowns(cred: TimelineCred = Depends(get_timeline_cred)):
    return [b.model_dump() for b in cred.breakdowns]
