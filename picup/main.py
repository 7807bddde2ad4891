import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from picup.config import MAX_REQUEST_BYTES, STORAGE_DIR
from picup.errors import PicupError
from picup.middleware import ContentSizeLimitMiddleware
from picup.models import UploadResponse
from picup.routes import assets, health, upload
from picup.storage import ensure_storage_dir

logger = logging.getLogger(__name__)

app = FastAPI(title="picup", docs_url=None, redoc_url=None, openapi_url=None)
app.add_middleware(ContentSizeLimitMiddleware, max_content_size=MAX_REQUEST_BYTES)

ensure_storage_dir(STORAGE_DIR)


@app.exception_handler(PicupError)
async def picup_error_handler(request: Request, exc: PicupError):
    logger.warning(
        "request rejected: path=%s status=%s code=%s msg=%s",
        request.url.path,
        exc.status_code,
        int(exc.code),
        exc.message,
    )
    body = UploadResponse(status=int(exc.code), msg=exc.message)
    return JSONResponse(body.model_dump(), status_code=exc.status_code)


app.include_router(health.router)
app.include_router(upload.router)
app.include_router(assets.router)
