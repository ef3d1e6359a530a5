from .app import create_app
from .errors import (
    GatewayError,
    OriginDenied,
    PayloadTooLarge,
    RateLimited,
    UpstreamFailure,
    ValidationFailed,
    classify,
)
from .origin import check_origin, is_origin_allowed
from .rate_limit import RateLimitDecision, RateLimiter
from .schemas import AskRequest, parse_ask_request

__all__ = [
    "AskRequest",
    "GatewayError",
    "OriginDenied",
    "PayloadTooLarge",
    "RateLimitDecision",
    "RateLimited",
    "RateLimiter",
    "UpstreamFailure",
    "ValidationFailed",
    "check_origin",
    "classify",
    "create_app",
    "is_origin_allowed",
    "parse_ask_request",
]
