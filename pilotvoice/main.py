"""FastAPI application entry point.

Serve with ``uvicorn pilotvoice.main:create_app --factory``; nothing is built at import time.
"""
import logging
import sys
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pilotvoice.config import Settings, get_settings
from pilotvoice.database import create_engine, create_session_factory
from pilotvoice.routers import competitions, health, survey_responses, surveys, user
from pilotvoice.services.ai.anonymization_service import AnonymizationStrategy
from pilotvoice.services.ai.provider import build_anonymization_service
from pilotvoice.version import APP_VERSION

# Ensure console streams can emit Unicode on Windows
for stream in (sys.stdout, sys.stderr):
    if hasattr(stream, "reconfigure"):
        stream.reconfigure(encoding="utf-8", errors="backslashreplace")

logger = logging.getLogger(__name__)
api_logger = logging.getLogger("pilotvoice.api")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class SQLTransactionFilter(logging.Filter):
    def filter(self, record):
        if record.levelno == logging.INFO and hasattr(record, 'getMessage'):
            message = record.getMessage()

            # Transaction bookkeeping is noise in the SQL log
            if any(keyword in message for keyword in ['ROLLBACK', 'BEGIN', 'COMMIT', 'generated in']):
                return False

            if any(kw in message for kw in ['SELECT', 'DELETE', 'INSERT', 'UPDATE']):
                record.msg = ' '.join(message.split())
                record.args = ()

        return True


def configure_logging(log_dir: str) -> None:
    """Console plus rotating file handlers for general, SQL and API request logs."""
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_file = logs_dir / "pilotvoice.log"
    sql_log_file = logs_dir / "pilotvoice_sql.log"
    api_log_file = logs_dir / "pilotvoice_api.log"

    rotating_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
    rotating_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    sql_rotating_handler = RotatingFileHandler(sql_log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
    sql_rotating_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    sql_rotating_handler.addFilter(SQLTransactionFilter())

    api_rotating_handler = RotatingFileHandler(
        api_log_file, maxBytes=2 * 1024 * 1024, backupCount=15, encoding='utf-8'
    )
    api_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

    # force=True overrides any configuration uvicorn installed first
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(), rotating_handler],
        force=True,
    )

    api_logger.handlers.clear()
    api_logger.addHandler(api_rotating_handler)
    api_logger.setLevel(logging.INFO)
    api_logger.propagate = False

    uvicorn_access_logger = logging.getLogger("uvicorn.access")
    uvicorn_access_logger.setLevel(logging.INFO)
    if rotating_handler not in uvicorn_access_logger.handlers:
        uvicorn_access_logger.addHandler(rotating_handler)

    sqlalchemy_logger = logging.getLogger("sqlalchemy.engine.Engine")
    sqlalchemy_logger.handlers.clear()
    sqlalchemy_logger.addHandler(sql_rotating_handler)
    sqlalchemy_logger.setLevel(logging.INFO)
    sqlalchemy_logger.propagate = False

    logger.info(f"General logging to: {log_file.absolute()}")
    logger.info(f"SQL logging to: {sql_log_file.absolute()}")
    logger.info(f"API requests logging to: {api_log_file.absolute()}")


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Manage application startup and shutdown tasks."""
    settings: Settings = app_instance.state.settings
    logger.info("=" * 60)
    logger.info(f"{settings.app_name} API Starting")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'SQLite'}")
    logger.info("=" * 60)

    try:
        yield
    finally:
        anonymizer = app_instance.state.anonymization_service
        close = getattr(getattr(anonymizer, "client", None), "close", None)
        if close is not None:
            try:
                await close()
                logger.info("OpenRouter client closed")
            except Exception as e:
                logger.error(f"Error closing OpenRouter client: {e}")

        await app_instance.state.engine.dispose()
        logger.info(f"{settings.app_name} API Shutting Down... Goodbye!")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed path, query or body input as 400 with field-level detail."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = " -> ".join(str(x) for x in loc[1:]) if len(loc) > 1 else "unknown field"
        errors.append({
            "field": field_path,
            "message": error.get("msg", "Validation error"),
            "type": error.get("type", "unknown"),
        })

    return JSONResponse(
        status_code=400,
        content={
            "detail": "validation_failed",
            "errors": errors,
        },
    )


async def log_requests(request: Request, call_next):
    """Record start, completion and failure of every request with timing."""
    start_time = time.time()

    client_ip = request.client.host if request.client else "unknown"
    user_agent = request.headers.get("user-agent", "unknown")
    method = request.method
    path = request.url.path

    request_id = f"{method}:{path}:{int(start_time * 1000) % 100000}"
    api_logger.info(f">> {request_id} | START | {method} {path} | IP: {client_ip} | UA: {user_agent[:50]}...")
    if request.query_params:
        api_logger.info(f">> {request_id} | QUERY | {request.query_params}")

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = time.time() - start_time
        api_logger.error(
            f"<< {request_id} | EXCEPTION | {method} {path} | "
            f"Error: {str(e)[:100]} | "
            f"Time: {process_time:.3f}s | "
            f"IP: {client_ip}"
        )
        raise

    process_time = time.time() - start_time
    api_logger.info(
        f"<< {request_id} | COMPLETE | {method} {path} | "
        f"Status: {response.status_code} | "
        f"Time: {process_time:.3f}s | "
        f"IP: {client_ip}"
    )
    if response.status_code >= 400:
        api_logger.warning(
            f"<< {request_id} | ERROR_RESPONSE | "
            f"Content-Type: {response.headers.get('content-type', 'unknown')}"
        )
    return response


def create_app(
        settings: Optional[Settings] = None,
        anonymization_service: Optional[AnonymizationStrategy] = None,
        configure_logs: bool = True,
) -> FastAPI:
    """Build the application with its engine, session factory and anonymization strategy."""
    settings = settings or get_settings()
    if configure_logs:
        configure_logging(settings.log_dir)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Competition surveys with GDPR-screened feedback",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    engine = create_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.anonymization_service = anonymization_service or build_anonymization_service(settings)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.middleware("http")(log_requests)

    allowed_origins = [settings.frontend_url]
    if settings.environment != "production":
        allowed_origins += [
            "http://localhost:3000",
            "http://localhost:4321",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:4321",
        ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(set(allowed_origins)),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(surveys.router)
    app.include_router(survey_responses.router)
    app.include_router(competitions.router)
    app.include_router(user.router)
    app.include_router(health.router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": f"{settings.app_name} API",
            "version": APP_VERSION,
            "environment": settings.environment,
            "docs": "/docs",
        }

    return app
