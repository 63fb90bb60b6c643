import logging
import subprocess
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from core.errors import AppError
from database import init_models
from routers import auth, projects, tasks
from schemas.common import BODY_REQUIRED_MESSAGE

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)

BACKEND_DIR = Path(__file__).resolve().parent
GENERIC_ERROR_MESSAGE = "Something went wrong on our end. Please try again later."


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.run_migrations:
        logger.info("Running database migrations...")
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            capture_output=True,
            text=True,
            cwd=BACKEND_DIR,
        )
        if result.returncode == 0:
            logger.info("Migrations completed successfully")
        else:
            logger.error("Migration failed: %s", result.stderr or result.stdout)
            raise RuntimeError("Database migrations failed")
    else:
        await init_models()
    logger.info("Server ready in %s mode", settings.environment)
    yield


app = FastAPI(
    title="Taskboard",
    version="1.0.0",
    description="Projects and tasks for every user",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    exc: Exception | None = None,
    timestamp: str | None = None,
) -> JSONResponse:
    log_args = (
        request.method,
        request.url.path,
        getattr(request.state, "user_id", None),
        status_code,
        error_code,
        message,
    )
    if status_code >= 500:
        logger.error("%s %s user=%s -> %s %s: %s", *log_args, exc_info=exc)
    else:
        logger.warning("%s %s user=%s -> %s %s: %s", *log_args)

    body = {
        "status": "error",
        "message": message,
        "errorCode": error_code,
        "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
    }
    if settings.is_development and exc is not None:
        body["detail"] = {
            "type": type(exc).__name__,
            "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return JSONResponse(status_code=status_code, content=body)


def _validation_message(errors) -> str:
    messages = []
    for err in errors:
        if err.get("type") == "missing" and tuple(err.get("loc", ())) == ("body",):
            messages.append(BODY_REQUIRED_MESSAGE)
            continue
        # messages raised by our own validators live in ctx["error"]; pydantic prefixes err["msg"]
        ctx_error = (err.get("ctx") or {}).get("error")
        messages.append(str(ctx_error) if ctx_error else err.get("msg", "Invalid request."))
    return " ".join(dict.fromkeys(messages))


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return _error_response(request, exc.status_code, exc.error_code, exc.message, exc, exc.timestamp)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_response(request, 400, "VALIDATION_ERROR", _validation_message(exc.errors()))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    text = str(exc.orig).lower()
    if "unique" in text or "duplicate" in text:
        return _error_response(request, 409, "CONFLICT_ERROR", "Resource already exists.", exc)
    return _error_response(request, 400, "VALIDATION_ERROR", "Invalid reference to related resource", exc)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    return _error_response(request, 500, "DATABASE_ERROR", "Database operation failed", exc)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error_response(request, 404, "ROUTE_NOT_FOUND", f"Route {request.url.path} not found")
    if exc.status_code == 405:
        return _error_response(request, 405, "METHOD_NOT_ALLOWED", f"Method {request.method} not allowed on {request.url.path}")
    return _error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    return _error_response(request, 500, "INTERNAL_SERVER_ERROR", GENERIC_ERROR_MESSAGE, exc)


app.include_router(auth.router, prefix="/api")
app.include_router(projects.router, prefix="/api")
app.include_router(tasks.router, prefix="/api")


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "taskboard"}
