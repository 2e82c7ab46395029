# HTTP surface over a Rebridge instance.
from __future__ import annotations

import logging
from typing import Any, Awaitable

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, JsonValue

from .cursor import Cursor
from .errors import (
    Corrupt,
    EmptySequence,
    InvalidUsage,
    RebridgeError,
    StoreUnavailable,
    TypeMismatch,
    UnsupportedOperation,
    WriteConflict,
)
from .root import Rebridge

router = APIRouter(tags=["documents"])
logger = logging.getLogger(__name__)

STATUS_FOR_ERROR: list[tuple[type[RebridgeError], int]] = [
    (UnsupportedOperation, 400),
    (InvalidUsage, 400),
    (TypeMismatch, 409),
    (EmptySequence, 409),
    (WriteConflict, 409),
    (Corrupt, 500),
    (StoreUnavailable, 503),
]


class ValueBody(BaseModel):
    value: JsonValue


def _db(request: Request) -> Rebridge:
    return request.app.state.rebridge


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


def _cursor(request: Request, root: str, path: str = "") -> Cursor:
    try:
        cursor = _db(request)[root]
    except UnsupportedOperation as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    for segment in _segments(path):
        cursor = cursor[segment]
    return cursor


async def _run(op: Awaitable[Any]) -> Any:
    try:
        return await op
    except RebridgeError as e:
        for cls, status in STATUS_FOR_ERROR:
            if isinstance(e, cls):
                if status >= 500:
                    logger.warning("DOCUMENT OP failed: %r", e)
                raise HTTPException(status_code=status, detail=str(e)) from e
        raise


# -------------------------------------------------------------------
# Read / set
# -------------------------------------------------------------------
@router.get("/documents/{root}")
async def read_root_document(request: Request, root: str):
    return {"value": await _run(_cursor(request, root).get())}


@router.get("/documents/{root}/{path:path}")
async def read_document(request: Request, root: str, path: str):
    return {"value": await _run(_cursor(request, root, path).get())}


@router.put("/documents/{root}")
async def set_root_document(request: Request, root: str, body: ValueBody):
    return {"value": await _run(_cursor(request, root).set(body.value))}


@router.put("/documents/{root}/{path:path}")
async def set_document(request: Request, root: str, path: str, body: ValueBody):
    return {"value": await _run(_cursor(request, root, path).set(body.value))}


# -------------------------------------------------------------------
# Delete: the last path segment is the field removed from its parent
# -------------------------------------------------------------------
@router.delete("/documents/{root}/{path:path}")
async def delete_field(request: Request, root: str, path: str):
    segments = _segments(path)
    if not segments:
        raise HTTPException(status_code=400, detail="a field to delete is required")
    parent = _cursor(request, root, "/".join(segments[:-1]))
    return {"deleted": await _run(parent.delete(segments[-1]))}


# -------------------------------------------------------------------
# Sequences
# -------------------------------------------------------------------
@router.post("/push/{root}")
async def push_root(request: Request, root: str, body: ValueBody):
    return {"length": await _run(_cursor(request, root).push(body.value))}


@router.post("/push/{root}/{path:path}")
async def push(request: Request, root: str, path: str, body: ValueBody):
    return {"length": await _run(_cursor(request, root, path).push(body.value))}


@router.post("/pop/{root}")
async def pop_root(request: Request, root: str):
    return {"value": await _run(_cursor(request, root).pop())}


@router.post("/pop/{root}/{path:path}")
async def pop(request: Request, root: str, path: str):
    return {"value": await _run(_cursor(request, root, path).pop())}
