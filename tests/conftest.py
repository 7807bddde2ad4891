import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


TEST_TOKEN = "test-upload-token"
TEST_PREFIX = "http://testserver/asset"


@pytest.fixture()
def app_ctx(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict:
    storage_dir = tmp_path / "uploads"

    monkeypatch.setenv("PICUP_TOKEN", TEST_TOKEN)
    monkeypatch.setenv("PICUP_DIR", str(storage_dir))
    monkeypatch.setenv("PICUP_URL_PREFIX", TEST_PREFIX)
    monkeypatch.setenv("PICUP_MAX_MB", "1")
    monkeypatch.setenv("PICUP_MAX_REQUEST_MB", "3")
    monkeypatch.delenv("PICUP_IMAGES_ONLY", raising=False)

    for name in list(sys.modules.keys()):
        if name == "picup" or name.startswith("picup."):
            del sys.modules[name]

    import importlib

    main = importlib.import_module("picup.main")
    return {"app": main.app, "storage_dir": storage_dir, "token": TEST_TOKEN, "prefix": TEST_PREFIX}


@pytest.fixture()
def client(app_ctx: dict):
    with TestClient(app_ctx["app"]) as c:
        yield c


@pytest.fixture()
def storage_dir(app_ctx: dict) -> Path:
    return app_ctx["storage_dir"]


@pytest.fixture()
def token(app_ctx: dict) -> str:
    return app_ctx["token"]


@pytest.fixture()
def url_prefix(app_ctx: dict) -> str:
    return app_ctx["prefix"]


def png_bytes(fill: bytes = b"\x00") -> bytes:
    # Minimal signature + padding; only the first bytes are ever sniffed.
    return b"\x89PNG\r\n\x1a\n" + (fill * 128)


def stored_files(d: Path) -> list:
    return sorted(p.name for p in d.iterdir() if p.is_file()) if d.exists() else []
