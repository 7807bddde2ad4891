"""Request body size limit.

Applied before routing, so an oversized body is refused before the multipart
form is spooled to disk and before the token is looked at.
"""

import logging

from fastapi.responses import JSONResponse

from picup.errors import ResponseCode, ValidationError
from picup.models import UploadResponse

logger = logging.getLogger(__name__)


def _too_large(max_content_size: int) -> ValidationError:
    return ValidationError(
        f"request too large (max {max_content_size} bytes)",
        code=ResponseCode.REQUEST_TOO_LARGE,
        status_code=413,
    )


class ContentSizeLimitMiddleware:
    """Rejects bodies above ``max_content_size`` bytes.

    A declared Content-Length over the limit is answered right away. Bodies
    without one (chunked) are counted as they arrive and aborted once the
    running total passes the limit.
    """

    def __init__(self, app, max_content_size: int):
        self.app = app
        self.max_content_size = max_content_size

    def receive_wrapper(self, receive):
        received = 0

        async def inner():
            nonlocal received
            message = await receive()
            if message["type"] != "http.request":
                return message
            received += len(message.get("body", b""))
            if received > self.max_content_size:
                raise _too_large(self.max_content_size)
            return message

        return inner

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = dict(scope.get("headers") or []).get(b"content-length")
        if declared is not None and declared.isdigit() and int(declared) > self.max_content_size:
            exc = _too_large(self.max_content_size)
            logger.warning("request rejected: path=%s content-length=%s", scope.get("path"), int(declared))
            body = UploadResponse(status=int(exc.code), msg=exc.message)
            response = JSONResponse(body.model_dump(), status_code=exc.status_code)
            await response(scope, receive, send)
            return

        await self.app(scope, self.receive_wrapper(receive), send)
