import os
from pathlib import Path

UPLOAD_TOKEN = os.environ.get("PICUP_TOKEN", "")
STORAGE_DIR = Path(os.environ.get("PICUP_DIR", "picup-data")).resolve()
PORT = int(os.environ.get("PICUP_PORT", "19190"))
URL_PREFIX = (os.environ.get("PICUP_URL_PREFIX") or f"http://127.0.0.1:{PORT}/asset").rstrip("/")
MAX_MB = int(os.environ.get("PICUP_MAX_MB", "32"))
MAX_BYTES = MAX_MB * 1024 * 1024
# whole request body, all parts and form overhead included
MAX_REQUEST_MB = int(os.environ.get("PICUP_MAX_REQUEST_MB", str(MAX_MB * 4)))
MAX_REQUEST_BYTES = MAX_REQUEST_MB * 1024 * 1024
IMAGES_ONLY = os.environ.get("PICUP_IMAGES_ONLY", "").strip().lower() in ("1", "true", "yes", "on")
# idle keep-alive timeout for uvicorn connections, not a per-request deadline
KEEP_ALIVE_TIMEOUT = int(os.environ.get("PICUP_KEEP_ALIVE_TIMEOUT", "30"))

if not UPLOAD_TOKEN:
    raise RuntimeError("PICUP_TOKEN is required")
