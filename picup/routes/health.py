import os
import tempfile

from fastapi import APIRouter
from picup.config import STORAGE_DIR

router = APIRouter()


@router.get("/health")
def health():
    """Report whether the storage directory accepts writes.

    The probe file gets a unique name so concurrent workers never remove
    each other's probe.
    """
    try:
        fd, probe = tempfile.mkstemp(prefix=".health_", dir=STORAGE_DIR)
        os.close(fd)
        os.unlink(probe)
    except OSError as e:
        return {"status": "unhealthy", "checks": {"app": "ok", "storage": f"error: {e}"}}
    return {"status": "ok", "checks": {"app": "ok", "storage": "ok"}}
