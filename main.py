# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Club Hours Backend
==================
Member login, volunteer work-hour entries and the personal/family hours
dashboard of a sports club. Member and work-hour data live in the Records
Service; only login credentials are stored locally.

Port: 8000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from clubhours import __version__
from clubhours.controllers import (
    auth_controller,
    dashboard_controller,
    system_controller,
    work_hour_controller,
)
from clubhours.core.config import settings
from clubhours.core.dependencies import (
    close_http_client,
    get_credential_repo,
    get_reset_token_store,
    init_http_client,
)
from clubhours.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    UpstreamError,
    ValidationCode,
    WorkHourValidationError,
)
from clubhours.core.logging import get_logger
from clubhours.middleware import MetricsMiddleware, RateLimitMiddleware, RequestIDMiddleware
from clubhours.schemas import ErrorResponse

logger = get_logger(settings.SERVICE_NAME)

MSG_UPSTREAM = ("Der Mitgliederdienst ist derzeit nicht erreichbar. "
                "Bitte versuchen Sie es später erneut.")
MSG_INTERNAL = "Interner Serverfehler"


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Prepare the credential table and the Records Service client; release both on shutdown."""
    try:
        get_credential_repo().init_schema()
    except SQLAlchemyError as exc:
        logger.error("Credential database unavailable, logins will fail: %s", exc)
    init_http_client()
    logger.info("Club hours backend starting version=%s records_api=%s",
                __version__, settings.RECORDS_API_URL)
    yield
    await close_http_client()
    expired = get_reset_token_store().cleanup_expired()
    logger.info("Club hours backend shutting down, %d expired reset tokens dropped", expired)


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Club Hours Backend",
    description="Volunteer work-hour tracking with personal and family dashboards.",
    version=__version__,
    lifespan=lifespan,
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Records Service unavailable"},
    },
)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Exception handlers ────────────────────────────────────────────────────
def _error(status_code: int, error: str, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "message": message},
        headers=headers,
    )


@app.exception_handler(WorkHourValidationError)
async def validation_error_handler(request: Request, exc: WorkHourValidationError):
    status_code = 409 if exc.code == ValidationCode.DUPLICATE_FOR_DATE else 400
    return _error(status_code, exc.code.value, exc.message)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, "NOT_FOUND", exc.message)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return _error(401, "UNAUTHORIZED", exc.message, headers={"WWW-Authenticate": "Bearer"})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    req_id = getattr(request.state, "request_id", None)
    logger.error("Records Service failure during %s: %s", exc.operation, exc.detail,
                 extra={"request_id": req_id, "operation": exc.operation})
    return _error(503, "UPSTREAM_UNAVAILABLE", MSG_UPSTREAM)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail),
                  headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "INVALID_REQUEST",
            "message": "Ungültige Anfrage",
            "detail": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ],
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return _error(500, "INTERNAL_SERVER_ERROR", MSG_INTERNAL)


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(auth_controller.router)
app.include_router(dashboard_controller.router)
app.include_router(work_hour_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
