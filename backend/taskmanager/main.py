from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import settings
from .db import get_session, init_db
from .logging_config import (
    configure_logging,
    RequestIdMiddleware,
    RequestLoggingMiddleware,
)
from .monitoring import router as monitoring_router
from .tasks import router as tasks_router
from .users import router as users_router


__all__ = ["app", "get_session"]

# Configure structured logging
logger = configure_logging(settings.log_level)

app = FastAPI(title="TaskManager", version=__version__)

origins = settings.parsed_allowed_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=bool(origins) and "*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(monitoring_router)
app.include_router(users_router)
app.include_router(tasks_router)


@app.on_event("startup")
def _startup() -> None:
    init_db()
    logger.info("TaskManager started successfully")


# ------------------ Error bodies ------------------
# Every failure answers {"success": false, "message": ...}; the task form
# shows `message` verbatim.


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        ctx_error = (first.get("ctx") or {}).get("error")
        if first.get("type") == "value_error" and ctx_error is not None:
            message = str(ctx_error)
        else:
            field = ".".join(str(p) for p in first.get("loc", ())[1:])
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=422, content={"success": False, "message": message})
