from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from app.deps import get_user_store
from app.logging_config import configure_logging
from app.models import HealthResponse
from app.routers.users import router as users_router
from app.settings import Settings, get_settings
from app.user_store import InMemoryUserStore

logger = logging.getLogger("user_cache_api")

APP_VERSION = "1.0.0"


def _format_validation_error(err: dict) -> str:
    loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    msg = err.get("msg") or "invalid input"
    return f"{loc}: {msg}" if loc else msg


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed JSON, a missing/empty name and a non-integer id are all client errors.
    detail = "; ".join(_format_validation_error(e) for e in exc.errors()) or "invalid request"
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse({"detail": detail}, status_code=400)


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error handling %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"detail": "internal error"}, status_code=500)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with its own, empty user store.

    Tests call this directly to get an isolated store per test.
    """
    s = settings or get_settings()
    configure_logging(s.log_level)

    application = FastAPI(title="User Cache API", version=APP_VERSION)
    application.state.settings = s
    application.state.user_store = InMemoryUserStore()
    application.add_exception_handler(RequestValidationError, _validation_error_handler)
    application.add_exception_handler(Exception, _unexpected_error_handler)
    application.include_router(users_router)

    @application.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "Hello World"

    @application.get("/healthz", response_model=HealthResponse)
    def healthz(store: InMemoryUserStore = Depends(get_user_store)) -> HealthResponse:
        return HealthResponse(ok=True, service="user-cache-api", version=APP_VERSION, users=store.count())

    return application


app = create_app()
