from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.responses import JSONResponse

import app.db.base  # noqa: F401
from app.api.main import api_router
from app.core.errors import (
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    OutOfHorizonError,
    RepositoryError,
    SchedulingError,
    SlotConflictError,
    WindowClosedError,
)
from app.core.logging import configure_logging, get_logger
from app.core.settings import settings
from app.middlewares.telemetry import RequestContextMiddleware
from app.version import APP_VERSION, BUILD_TIME_UTC, GIT_SHA

configure_logging(json=settings.LOG_JSON, level=settings.LOG_LEVEL)

app = FastAPI(debug=settings.DEBUG, title="Agenda de terapia")

# --- request context / logs
app.add_middleware(RequestContextMiddleware)

# --- CORS
allowed_origins = []
for host in settings.ALLOWED_HOSTS.split(","):
    _host = host.strip()
    if not _host:
        continue
    if _host.startswith("http"):
        allowed_origins.append(_host)
    else:
        allowed_origins.append(f"http://{_host}")
        allowed_origins.append(f"https://{_host}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=(allowed_origins or ["*"]) if settings.DEBUG else allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- HTTPS only in prod
if settings.APP_ENV.value == "prod":
    app.add_middleware(HTTPSRedirectMiddleware)


# --- scheduling errors -> HTTP
_STATUS_BY_ERROR: list[tuple[type[SchedulingError], int]] = [
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (OutOfHorizonError, status.HTTP_400_BAD_REQUEST),
    (SlotConflictError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (WindowClosedError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (RepositoryError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(exc: SchedulingError) -> int:
    for cls, code in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    code = status_for(exc)
    log = get_logger().bind(path=request.url.path, error=exc.code, status_code=code)
    if code >= 500:
        log.error("request.failed", message=exc.message)
    else:
        log.info("request.rejected", message=exc.message)

    body = {"detail": exc.message, "code": exc.code}
    days = getattr(exc, "days_until_renewal", None)
    if days is not None:
        body["days_until_renewal"] = days
    return JSONResponse(body, status_code=code)


app.include_router(api_router)


# --- ops
@app.get("/healthz", tags=["ops"])
def healthz():
    get_logger().info("health.check")
    return {"status": "ok", "env": settings.APP_ENV, "version": APP_VERSION}


@app.get("/version", tags=["ops"])
def version():
    return {
        "version": APP_VERSION,
        "git_sha": GIT_SHA,
        "build_time_utc": BUILD_TIME_UTC,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
    }
