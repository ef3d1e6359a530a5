from collections.abc import Collection

from .errors import OriginDenied


def is_origin_allowed(origin: str | None, allowed_origins: Collection[str]) -> bool:
    # Non-browser callers (curl, server-to-server) send no Origin header.
    if not origin:
        return True
    if not allowed_origins:
        return True
    return origin in allowed_origins


def check_origin(origin: str | None, allowed_origins: Collection[str]) -> None:
    if not is_origin_allowed(origin, allowed_origins):
        raise OriginDenied()
