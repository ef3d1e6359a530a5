from starlette.exceptions import HTTPException


class GatewayError(Exception):
    """Base for every failure the gateway reports to its caller.

    Each subclass carries the HTTP status it maps to, so classification never
    depends on the wording of a message.
    """

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(GatewayError):
    status_code = 400
    default_message = "Invalid request"


class OriginDenied(GatewayError):
    status_code = 403
    default_message = "CORS blocked"


class PayloadTooLarge(ValidationFailed):
    default_message = "Request body is too large"


class RateLimited(GatewayError):
    status_code = 429
    default_message = "Too many requests, please try again later."

    def __init__(
        self,
        message: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.headers = headers or {}


class UpstreamFailure(GatewayError):
    status_code = 500
    default_message = "Completion request failed"


def classify(exc: BaseException) -> tuple[int, str]:
    if isinstance(exc, GatewayError):
        return exc.status_code, exc.message
    if isinstance(exc, HTTPException):
        return exc.status_code, str(exc.detail)
    return GatewayError.status_code, GatewayError.default_message
