import logging
from dataclasses import dataclass

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from picup.auth import require_token
from picup.config import IMAGES_ONLY, MAX_BYTES, MAX_MB, STORAGE_DIR, URL_PREFIX
from picup.errors import ResponseCode, StorageError, ValidationError
from picup.models import PartResult, UploadResponse
from picup.storage import base_name, derive_name, sniff_image_type, store

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FilePart:
    filename: str
    content: bytes


def build_url(name: str) -> str:
    return f"{URL_PREFIX}/{name}"


async def _read_part(upload: UploadFile, index: int) -> FilePart:
    filename = upload.filename or ""
    if not base_name(filename):
        raise ValidationError(
            f"invalid file name, file no: {index + 1}", code=ResponseCode.BAD_FILE_NAME
        )
    chunks = []
    total = 0
    while True:
        chunk = await upload.read(1024 * 1024)
        if not chunk:
            break
        total += len(chunk)
        if total > MAX_BYTES:
            raise ValidationError(
                f"file too large (max {MAX_MB}MB): {filename}",
                code=ResponseCode.FILE_TOO_LARGE,
                status_code=413,
            )
        chunks.append(chunk)
    content = b"".join(chunks)
    if IMAGES_ONLY and sniff_image_type(content[:16]) is None:
        raise ValidationError(f"not a image: {filename}", code=ResponseCode.NOT_A_IMAGE)
    return FilePart(filename=filename, content=content)


async def _store_part(part: FilePart) -> PartResult:
    name = derive_name(part.filename, part.content)
    try:
        stored = await run_in_threadpool(store, STORAGE_DIR, name, part.content)
    except StorageError as e:
        logger.warning("upload part failed: file=%s code=%s error=%s", part.filename, int(e.code), e.message)
        return PartResult(filename=part.filename, code=int(e.code), error=e.message)
    logger.info("stored upload: file=%s name=%s size=%s", part.filename, stored.name, stored.size)
    return PartResult(filename=part.filename, name=stored.name, url=build_url(stored.name))


@router.post("/upload", response_model=UploadResponse)
async def api_upload(request: Request):
    """Accept a multipart body with a ``token`` field and one or more files.

    Authentication and part validation cover the whole request: nothing is
    written unless the token matches and every part is acceptable. A token
    given as the ``access_token`` query parameter is checked before the body
    is parsed. Storage failures are then reported per part.
    """
    query_token = request.query_params.get("access_token")
    if query_token is not None:
        require_token(query_token)

    form = await request.form()
    try:
        if query_token is None:
            token = form.get("token")
            require_token(token if isinstance(token, str) else None)

        uploads = [v for _, v in form.multi_items() if isinstance(v, UploadFile)]
        if not uploads:
            raise ValidationError("no files to upload", code=ResponseCode.NO_FILES)
        parts = [await _read_part(u, i) for i, u in enumerate(uploads)]

        results = [await _store_part(p) for p in parts]
    finally:
        await form.close()

    failed = sum(1 for r in results if not r.ok)
    if failed:
        return UploadResponse(
            status=int(ResponseCode.PARTIAL),
            msg=f"{failed} of {len(results)} files failed",
            data=results,
        )
    return UploadResponse(data=results)
