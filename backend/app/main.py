import logging
import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import OperationalError, ProgrammingError

from app.core.bootstrap import EnsureDatabaseSetup
from app.core.errors import DomainError
from app.core.image_storage import EnsureStorageRoot, URL_PREFIX
from app.core.logging import setup_logging
from app.modules.auth.router import router as auth_router
from app.modules.auth.users_router import router as users_router
from app.modules.chores.router import router as chores_router
from app.modules.core.router import router as core_router

setup_logging()

logger = logging.getLogger("app.request")
startup_logger = logging.getLogger("app.startup")


def _env_truthy(name: str, default: bool = False) -> bool:
    value = os.getenv(name, "").strip().lower()
    if not value:
        return default
    return value in {"1", "true", "yes", "on"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if _env_truthy("DB_BOOTSTRAP_ON_STARTUP", default=True):
        EnsureDatabaseSetup()
    startup_logger.info("startup complete")
    yield


app = FastAPI(title="Chore Chart API", lifespan=lifespan)

allowed_origins = os.getenv("ALLOWED_ORIGINS", "")
origin_list = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
if origin_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(status_code=exc.StatusCode, content=exc.ToPayload())


@app.exception_handler(OperationalError)
@app.exception_handler(ProgrammingError)
async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("storage error %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Storage unavailable. Run alembic upgrade head.", "kind": "storage"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error", "kind": "internal"})


@app.middleware("http")
async def request_logger(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = int((time.perf_counter() - start) * 1000)

    parts = [f"{request.method} {request.url.path}"]
    if request.url.query:
        parts.append(f"query={request.url.query}")

    status = response.status_code
    if status >= 400:
        if status == 404:
            parts.append("ERROR: not found")
        elif status >= 500:
            parts.append("ERROR: server error")
        else:
            parts.append("ERROR: client error")

    parts.append(f"status={status}")
    parts.append(f"{duration_ms}ms")

    level = logging.ERROR if status >= 500 else logging.WARNING if status >= 400 else logging.INFO
    logger.log(level, " | ".join(parts), extra={"request_id": request_id})

    response.headers["X-Request-Id"] = request_id
    return response


app.include_router(core_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(chores_router)
app.mount(URL_PREFIX, StaticFiles(directory=str(EnsureStorageRoot())), name="uploads")
