import re
import secrets

from picup.config import UPLOAD_TOKEN
from picup.errors import AuthError

SAFE_NAME_RE = re.compile(r"^[^/\\\x00]{1,120}$")


def validate(presented: str | None, configured: str) -> bool:
    """Constant-time comparison of a presented token against the secret."""
    if not configured or presented is None:
        return False
    return secrets.compare_digest(presented.encode("utf-8"), configured.encode("utf-8"))


def require_token(presented: str | None):
    if not validate(presented, UPLOAD_TOKEN):
        raise AuthError("invalid token")


def is_safe_name(name: str) -> bool:
    return bool(SAFE_NAME_RE.match(name)) and name not in (".", "..") and not name.startswith(".")
