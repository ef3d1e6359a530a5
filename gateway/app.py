import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException

from app_settings import GatewaySettings
from integrations.ai import CompletionClient, CompletionError, build_completion_client

from .errors import GatewayError, PayloadTooLarge, UpstreamFailure, classify
from .origin import check_origin
from .rate_limit import RateLimiter
from .schemas import AskResponse, parse_ask_request


logger = logging.getLogger(__name__)


SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

def client_identity(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def error_response(exc: BaseException) -> JSONResponse:
    status_code, message = classify(exc)
    headers = None
    if isinstance(exc, (GatewayError, HTTPException)):
        headers = getattr(exc, "headers", None)
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


def apply_security_headers(response: Response) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


async def read_limited_body(request: Request, max_bytes: int) -> bytes:
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > max_bytes:
        raise PayloadTooLarge()

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise PayloadTooLarge()
    return bytes(body)


def create_app(
    settings: GatewaySettings,
    completion_client: CompletionClient | None = None,
) -> FastAPI:
    """Build the gateway app.

    Every request passes the origin check and the rate limiter before it
    reaches a route. ``completion_client`` defaults to one built from
    ``settings.llm``.
    """
    client = completion_client or build_completion_client(settings.llm)
    limiter = RateLimiter(
        max_requests=settings.rate_max_requests,
        window_seconds=settings.rate_window_seconds,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(
            "Gateway started: origins=%s rate_limit=%s/%ss",
            sorted(settings.allowed_origins) or "*",
            settings.rate_max_requests,
            settings.rate_window_seconds,
        )
        yield
        await client.aclose()

    app = FastAPI(title="VR101 Ask Gateway", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limiter = limiter
    app.state.completion_client = client

    # Middleware added later wraps the ones added before it. Outermost first:
    # security headers, origin check, CORS (answers preflights), rate limit.

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        try:
            decision = limiter.hit(client_identity(request))
        except GatewayError as exc:
            return error_response(exc)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            response = error_response(exc)

        for name, value in decision.headers().items():
            response.headers[name] = value
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(settings.allowed_origins) or ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def origin_guard(request: Request, call_next):
        origin = request.headers.get("origin")
        try:
            check_origin(origin, settings.allowed_origins)
        except GatewayError as exc:
            logger.info("Origin rejected: origin=%s path=%s", origin, request.url.path)
            return error_response(exc)
        return await call_next(request)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        return apply_security_headers(response)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return error_response(exc)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.post("/ask", response_model=AskResponse)
    async def ask(request: Request) -> AskResponse:
        raw_body = await read_limited_body(request, settings.max_body_bytes)
        ask_request = parse_ask_request(raw_body)

        try:
            answer = await client.ask(ask_request.question)
        except CompletionError as exc:
            raise UpstreamFailure(str(exc)) from exc

        logger.info(
            "Answered question: client=%s user=%s chars=%s",
            client_identity(request),
            ask_request.userName or "-",
            len(ask_request.question),
        )
        return AskResponse(answer=answer)

    return app
