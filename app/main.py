import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.api.router import api_router
from app.config import settings
from app.core.exceptions import ClientDisconnectedError
from app.services.github import close_github_client

# Non-standard status used by nginx for "client closed request"
CLIENT_CLOSED_REQUEST = 499


def setup_logging() -> None:
    """Configure application logging."""
    # Format: timestamp - level - logger name - message
    log_format = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
    date_format = "%H:%M:%S"

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format=log_format,
        datefmt=date_format,
        stream=sys.stdout,
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)

    # Quieten uvicorn access logs (we log requests ourselves)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    setup_logging()
    logger.info("Commit Digest API starting up")
    if not settings.github_app_enabled:
        logger.info("GitHub App not configured; installation credentials will be rejected")
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY not set; summaries are unavailable")
    yield
    await close_github_client()
    logger.info("Commit Digest API shutting down")


app = FastAPI(
    title="Commit Digest API",
    description="GitHub commit activity aggregation and AI summaries",
    version="0.1.0",
    lifespan=lifespan,
)

# Proxy headers middleware - trust X-Forwarded-Proto from reverse proxy
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

# CORS middleware; ETag must be readable by browser clients for conditional requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["ETag"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with status and duration, skipping preflight and health checks."""
    if request.method == "OPTIONS" or request.url.path == "/health":
        return await call_next(request)

    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    log = logger.warning if response.status_code >= 500 else logger.info
    log(f"{request.method} {request.url.path} → {response.status_code} ({elapsed_ms:.0f}ms)")
    return response


# ─────────────────────────────────────────────────────────────────────────────
# Error bodies: always JSON with a machine-readable "code"
# ─────────────────────────────────────────────────────────────────────────────


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        body = exc.detail
    else:
        body = {"error": str(exc.detail), "code": "HTTP_ERROR"}
    return JSONResponse(body, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        {
            "error": "Invalid request parameters",
            "code": "INVALID_REQUEST",
            "details": jsonable_encoder(exc.errors()),
        },
        status_code=422,
    )


@app.exception_handler(ClientDisconnectedError)
async def client_disconnected_handler(_request: Request, exc: ClientDisconnectedError) -> Response:
    # Nobody is listening; the status only shows up in logs
    return Response(status_code=CLIENT_CLOSED_REQUEST)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        {"error": "An unexpected error occurred", "code": "UNEXPECTED_ERROR"},
        status_code=500,
    )


# Include API routes
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
