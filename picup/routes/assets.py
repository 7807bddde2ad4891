"""Serve stored uploads.

GET /asset/{name} streams a stored file so the URLs handed out by
``POST /upload`` resolve when the default URL prefix is used.
"""

from pathlib import Path
from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from picup.auth import is_safe_name
from picup.config import STORAGE_DIR
from picup.storage import media_type

router = APIRouter(tags=["assets"])


def _resolve_file(name: str) -> Path:
    if not is_safe_name(name):
        raise HTTPException(status_code=404, detail="file not found")
    d = STORAGE_DIR.resolve()
    f = (d / name).resolve()
    if not f.is_relative_to(d) or not f.is_file():
        raise HTTPException(status_code=404, detail="file not found")
    return f


@router.get("/asset/{name}")
def serve_asset(name: str):
    f = _resolve_file(name)
    return FileResponse(f, media_type=media_type(f.name))
