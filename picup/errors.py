"""Error taxonomy shared by the server and the client.

Codes 1001-1005 keep the numbering of the first PicUp server so old clients
still recognise them.
"""

from enum import IntEnum


class ResponseCode(IntEnum):
    OK = 0
    INTERNAL_ERROR = 999
    INVALID_TOKEN = 1001
    BAD_FILE_NAME = 1002
    NOT_A_IMAGE = 1003
    BAD_FILE = 1005
    NO_FILES = 1006
    FILE_TOO_LARGE = 1007
    STORAGE_ERROR = 1008
    PARTIAL = 1009
    NETWORK_ERROR = 1010
    REQUEST_TOO_LARGE = 1011


class PicupError(Exception):
    """Base error. Carries a wire code and the HTTP status it maps to."""

    code = ResponseCode.INTERNAL_ERROR
    status_code = 500

    def __init__(self, message: str, code: ResponseCode | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class AuthError(PicupError):
    code = ResponseCode.INVALID_TOKEN
    status_code = 401


class ValidationError(PicupError):
    code = ResponseCode.BAD_FILE
    status_code = 400


class StorageError(PicupError):
    code = ResponseCode.STORAGE_ERROR
    status_code = 500


class NetworkError(PicupError):
    code = ResponseCode.NETWORK_ERROR
    status_code = 502
