import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from alembic.config import Config
from alembic import command
from crmgen.core.config import settings
from crmgen.core.errors import ServiceError
from crmgen.core.logging import configure_logging
from crmgen.api.routes import router as api_router
from crmgen.db.seed import seed_defaults
from crmgen.db.session import SessionLocal, engine
from crmgen.generators.scaffold.errors import ArtifactExistsError, ScaffoldError, SpecValidationError
from crmgen.schemas.common import ErrorEnvelope
from crmgen.schemas.generator import validation_errors

configure_logging()
log = logging.getLogger(__name__)


def wait_for_database(max_retries: int = 30, retry_delay: float = 1.0) -> None:
    """Wait for the database to accept connections."""
    for attempt in range(max_retries):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            log.info("Database connection successful")
            return
        except Exception as e:
            if attempt < max_retries - 1:
                log.warning("Database not ready, retrying in %s seconds (attempt %d/%d): %s",
                            retry_delay, attempt + 1, max_retries, e)
                time.sleep(retry_delay)
            else:
                log.error("Database connection failed after %d attempts", max_retries)
                raise


def run_migrations() -> None:
    """Run Alembic migrations to head."""
    log.info("Running database migrations...")
    command.upgrade(Config("alembic.ini"), "head")
    log.info("Database migrations completed")


def seed() -> None:
    with SessionLocal() as db:
        seed_defaults(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Starting API server...", extra={"env": settings.app_env})
    try:
        wait_for_database()
        if settings.run_migrations_on_startup:
            run_migrations()
        seed()
        log.info("API server startup complete")
    except Exception as e:
        log.error("API startup failed: %s", e, exc_info=True)
        raise
    yield
    log.info("Shutting down API server...")


def error_response(status_code: int, message: str, errors=None) -> JSONResponse:
    body = ErrorEnvelope(message=message, errors=errors or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Validation failed", validation_errors(exc))


@app.exception_handler(SpecValidationError)
async def spec_validation_handler(request: Request, exc: SpecValidationError):
    return error_response(400, "Invalid model spec", exc.errors)


@app.exception_handler(ArtifactExistsError)
async def artifact_exists_handler(request: Request, exc: ArtifactExistsError):
    return error_response(409, str(exc))


@app.exception_handler(ScaffoldError)
async def scaffold_error_handler(request: Request, exc: ScaffoldError):
    log.error("Generation failed: %s", exc)
    return error_response(500, str(exc))


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    log.warning("Integrity error: %s", exc.orig)
    return error_response(409, "Record conflicts with an existing record")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


ERROR_RESPONSES = {code: {"model": ErrorEnvelope} for code in (400, 401, 404, 409, 500)}

app.include_router(api_router, prefix="/v1", responses=ERROR_RESPONSES)
