"""Todo API - authenticated per-user todo management."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from todo_api.cache import CacheService
from todo_api.config import get_settings
from todo_api.database import SessionLocal, check_database, engine
from todo_api.rate_limit import limiter
from todo_api.routers import auth_router, health_router, todos_router

settings = get_settings()

# Logging
logger = logging.getLogger("todo_api")
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: check settings, probe the database, connect the cache. Shutdown: release both."""
    for warning in settings.validate():
        logger.warning(warning)

    with SessionLocal() as db:
        database_ok = check_database(db)
    if not database_ok:
        if settings.is_production:
            logger.error("Database not reachable at startup, aborting")
            raise RuntimeError("Database not reachable")
        logger.warning("Database not reachable at startup; readiness will report 503")

    cache = CacheService(settings.REDIS_URL, settings.REDIS_PASSWORD, settings.REDIS_DB)
    cache.connect()
    app.state.cache = cache

    logger.info("Server started (env=%s, api=/api/%s)", settings.APP_ENV, settings.API_VERSION)
    try:
        yield
    finally:
        cache.disconnect()
        engine.dispose()
        logger.info("Cache and database connections closed")


app = FastAPI(title="Todo API", version=settings.APP_VERSION, lifespan=lifespan)
app.state.limiter = limiter


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    """Standard error envelope."""
    return JSONResponse(status_code=status_code, content={"success": False, "message": message}, headers=headers)


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "0"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cross-Origin-Opener-Policy"] = "same-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "script-src 'self'; "
            "img-src 'self' data: https:"
        )
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = settings.MAX_BODY_SIZE_MB * 1024 * 1024

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.MAX_BODY_SIZE:
            return error_response(413, "Request body too large")
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log sign-ins, sign-ups, and deletes
        path = request.url.path
        method = request.method
        audited = (method == "POST" and "/auth/" in path) or (method == "DELETE" and "/todo/" in path)
        if audited:
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(AuditLogMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

# Routers: versioned API, unversioned aliases, health
app.include_router(health_router)
app.include_router(auth_router, prefix=f"/api/{settings.API_VERSION}/auth")
app.include_router(todos_router, prefix=f"/api/{settings.API_VERSION}/todo")
app.include_router(auth_router, prefix="/api/auth", include_in_schema=False)
app.include_router(todos_router, prefix="/api/todo", include_in_schema=False)


# --- Rate limit error handler (sync: SlowAPIMiddleware calls it directly) ---
def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Handle rate limit exceeded."""
    logger.warning("Rate limit exceeded for %s on %s", request.client.host if request.client else "?", request.url.path)
    return error_response(429, "Too many requests, please try again later.")


app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors in the standard envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "API endpoint not found"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Validation failures are client errors (400) with the first problem as the message."""
    errors = exc.errors()
    if not errors:
        return error_response(400, "Invalid request")

    first = errors[0]
    message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    if field and first.get("type") in ("missing", "string_type", "int_parsing", "literal_error", "json_invalid"):
        message = f"{field}: {message}"
    return error_response(400, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, hide details from the client."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
