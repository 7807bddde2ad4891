import hashlib
import logging
import os
import re
import secrets
import tempfile
from dataclasses import dataclass
from pathlib import Path

from picup.auth import is_safe_name
from picup.errors import ResponseCode, StorageError

logger = logging.getLogger(__name__)

EXT_RE = re.compile(r"^\.[a-z0-9]{1,10}$")

_MIME = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
}


@dataclass(slots=True)
class StoredFile:
    name: str
    path: Path
    size: int


def sniff_image_type(head: bytes) -> str | None:
    if head.startswith(b"\xff\xd8\xff"):
        return ".jpg"
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return ".png"
    if head[:6] in (b"GIF87a", b"GIF89a"):
        return ".gif"
    if head.startswith(b"RIFF") and b"WEBP" in head[8:16]:
        return ".webp"
    if head.startswith(b"BM"):
        return ".bmp"
    return None


def media_type(name: str) -> str:
    return _MIME.get(Path(name).suffix.lower(), "application/octet-stream")


def base_name(original_name: str) -> str:
    """Last path component of a client-supplied name, whatever separator it used."""
    name = (original_name or "").replace("\x00", "").replace("\\", "/")
    return name.rsplit("/", 1)[-1].strip()


def derive_name(original_name: str, content: bytes) -> str:
    """Pick the on-disk name for an uploaded file.

    Only the extension of the client's name survives, lower-cased, and only
    when it looks like one. Otherwise the extension is sniffed from the bytes.
    The stem is a content hash prefix plus a random suffix, so identical
    uploads still land under distinct names.
    """
    ext = Path(base_name(original_name)).suffix.lower()
    if not EXT_RE.match(ext):
        ext = sniff_image_type(content[:16]) or ""
    digest = hashlib.sha256(content).hexdigest()[:16]
    return f"{digest}_{secrets.token_hex(4)}{ext}"


def ensure_storage_dir(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def store(directory: Path, derived_name: str, content: bytes) -> StoredFile:
    """Atomically write ``content`` to ``directory/derived_name``.

    The bytes go to a hidden temp file in the same directory first and are
    renamed into place after fsync.
    """
    if not is_safe_name(derived_name):
        raise StorageError(f"invalid file name: {derived_name!r}", code=ResponseCode.BAD_FILE_NAME)
    d = Path(directory).resolve()
    target = (d / derived_name).resolve()
    if not target.is_relative_to(d) or target.parent != d:
        raise StorageError(f"invalid file name: {derived_name!r}", code=ResponseCode.BAD_FILE_NAME)

    tmp_path = None
    try:
        fd, tmp = tempfile.mkstemp(prefix=".", suffix=".part", dir=d)
        tmp_path = Path(tmp)
        with os.fdopen(fd, "wb") as w:
            w.write(content)
            w.flush()
            os.fsync(w.fileno())
        os.replace(tmp_path, target)
        tmp_path = None
    except OSError as e:
        logger.warning("store failed: name=%s dir=%s error=%s", derived_name, d, e)
        raise StorageError(f"failed to store {derived_name}: {e.strerror or e}") from e
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
    return StoredFile(name=derived_name, path=target, size=len(content))
