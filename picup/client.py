"""Client for the ``POST /upload`` API.

``upload`` checks the local files, sends them in one multipart request and
returns one ``PartResult`` per path, in the order given.
"""

import logging
import mimetypes
import os
from pathlib import Path
from typing import List, Sequence

import httpx
from pydantic import ValidationError as ModelValidationError

from picup.errors import AuthError, NetworkError, ResponseCode, ValidationError
from picup.models import PartResult, UploadResponse

DEFAULT_API_URL = "http://127.0.0.1:19190"
DEFAULT_TIMEOUT = 30.0

logger = logging.getLogger(__name__)


def check_paths(paths: Sequence[str | os.PathLike]) -> List[Path]:
    if not paths:
        raise ValidationError("no files to upload", code=ResponseCode.NO_FILES)
    out = []
    for p in paths:
        path = Path(p)
        if not path.is_file():
            raise ValidationError(f"{path} not found", code=ResponseCode.BAD_FILE)
        if not os.access(path, os.R_OK):
            raise ValidationError(f"{path} is not readable", code=ResponseCode.BAD_FILE)
        out.append(path)
    return out


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        return str(data.get("msg") or data.get("detail") or f"HTTP {resp.status_code}")
    return f"HTTP {resp.status_code}"


def _parse(resp: httpx.Response, count: int) -> List[PartResult]:
    if resp.status_code == 401:
        raise AuthError(_error_message(resp))
    if resp.status_code in (400, 413):
        raise ValidationError(_error_message(resp), status_code=resp.status_code)
    if not resp.is_success:
        raise NetworkError(f"server returned HTTP {resp.status_code}: {_error_message(resp)}")
    try:
        body = UploadResponse.model_validate(resp.json())
    except (ValueError, ModelValidationError) as e:
        raise NetworkError(f"malformed response: {e}") from e
    if body.data is None or len(body.data) != count:
        raise NetworkError(f"expected {count} results, got {len(body.data or [])}")
    return body.data


def upload(
    endpoint: str,
    token: str,
    paths: Sequence[str | os.PathLike],
    *,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.Client | None = None,
) -> List[PartResult]:
    files = check_paths(paths)
    url = f"{endpoint.rstrip('/')}/upload"

    handles = []
    try:
        parts = []
        for path in files:
            try:
                f = path.open("rb")
            except OSError as e:
                raise ValidationError(f"{path} could not be opened: {e.strerror or e}", code=ResponseCode.BAD_FILE) from e
            handles.append(f)
            ctype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            parts.append(("file", (path.name, f, ctype)))

        try:
            if client is not None:
                resp = client.post(url, data={"token": token}, files=parts, timeout=timeout)
            else:
                with httpx.Client(timeout=timeout) as c:
                    resp = c.post(url, data={"token": token}, files=parts)
        except httpx.TimeoutException as e:
            raise NetworkError(f"request to {url} timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"request to {url} failed: {e}") from e
    finally:
        for f in handles:
            f.close()

    results = _parse(resp, len(files))
    logger.debug("upload finished: url=%s files=%s failed=%s", url, len(results), sum(not r.ok for r in results))
    return results


def urls(results: Sequence[PartResult]) -> List[str]:
    return [r.url for r in results if r.ok]
