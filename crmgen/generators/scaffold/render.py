"""Simple string templates for the shared files of a generated backend (Jinja2-free)."""
from typing import Dict, List

from crmgen.generators.scaffold.index_patcher import IMPORTS, REGISTRATIONS, block_end, block_start
from crmgen.generators.scaffold.types import ArtifactKind, GeneratedFile


def render_server() -> str:
    """Generate main.py: mounts every router registered in routes/__init__.py."""
    return '''"""Generated backend entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

import models  # noqa: F401  imports every generated model so create_all sees it
from config.db import engine
from config.settings import settings
from models.base import Base
from routes import ROUTERS
from utils.response_handler import error

logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    log.info("Database synchronized, %d routers mounted", len(ROUTERS))
    yield


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in e["loc"] if p != "body"), "message": e["msg"]}
        for e in exc.errors()
    ]
    return error("Validation failed", 400, errors=errors)


@app.get("/health")
def health():
    return {"status": "ok"}


for name, router in ROUTERS.items():
    app.include_router(router, prefix="/api/v1")
'''


def render_settings() -> str:
    """Generate config/settings.py content."""
    return '''from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "generated-api"
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    database_url: str = "sqlite:///./app.db"

    jwt_secret: str = "change-me"
    bypass_auth: bool = False


settings = Settings()
'''


def render_db_config() -> str:
    """Generate config/db.py content."""
    return '''from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from config.settings import settings

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
'''


def render_base_model() -> str:
    """Generate models/base.py: the declarative base plus the audit columns every model inherits."""
    return '''import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CrudModel(Base):
    __abstract__ = True

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
'''


def render_response_handler() -> str:
    """Generate utils/response_handler.py: the {success, message, data} envelope."""
    return '''from typing import Any, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": True, "message": message, "data": data}),
    )


def created(message: str, data: Any = None) -> JSONResponse:
    return success(message, data, status_code=201)


def error(message: str, status_code: int = 400, errors: Optional[List[dict]] = None) -> JSONResponse:
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def not_found(message: str = "Resource not found") -> JSONResponse:
    return error(message, 404)
'''


def render_crud_helpers() -> str:
    """Generate utils/pagination.py: list metadata shared by every controller."""
    return '''import math
from typing import Any, Dict, List


def paginate(items: List[Any], total: int, page: int, limit: str) -> Dict[str, Any]:
    if limit in ("all", "-1"):
        return {
            "items": items,
            "total": total,
            "currentPage": 1,
            "totalPages": 1,
            "hasMore": False,
            "fetchedAll": True,
        }
    size = max(int(limit), 1)
    total_pages = math.ceil(total / size) if total else 0
    return {
        "items": items,
        "total": total,
        "currentPage": page,
        "totalPages": total_pages,
        "hasMore": page < total_pages,
        "fetchedAll": False,
    }
'''


def render_auth_middleware() -> str:
    """Generate middlewares/auth.py: bearer-token dependencies for protected and open routes."""
    return '''from typing import Optional

import jwt
from fastapi import Header, HTTPException

from config.settings import settings


def authenticate_user(authorization: Optional[str] = Header(None)) -> dict:
    if settings.bypass_auth:
        return {"id": "SYSTEM"}
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="No authorization token provided")
    try:
        return jwt.decode(authorization.split(" ", 1)[1], settings.jwt_secret, algorithms=["HS256"])
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


def optional_user(authorization: Optional[str] = Header(None)) -> Optional[dict]:
    if not authorization:
        return None
    try:
        return authenticate_user(authorization)
    except HTTPException:
        return None
'''


def render_requirements_txt() -> str:
    """Generate requirements.txt content."""
    return """fastapi==0.115.6
uvicorn[standard]==0.30.6
pydantic==2.9.2
pydantic-settings==2.5.2
sqlalchemy==2.0.36
PyJWT==2.9.0
"""


def render_models_index() -> str:
    """Generate models/__init__.py with an empty managed imports block."""
    lines = [
        '"""Model registry. Importing this package registers every generated model."""',
        "from models.base import Base, CrudModel",
        "",
        block_start(IMPORTS),
        block_end(IMPORTS),
        "",
    ]
    return "\n".join(lines)


def render_routes_index() -> str:
    """Generate routes/__init__.py: managed imports plus the ROUTERS registry main.py mounts."""
    lines = [
        '"""Route registry. main.py mounts every router listed in ROUTERS."""',
        block_start(IMPORTS),
        block_end(IMPORTS),
        "",
        "ROUTERS = {",
        block_start(REGISTRATIONS, "    "),
        block_end(REGISTRATIONS, "    "),
        "}",
        "",
    ]
    return "\n".join(lines)


def render_readme(model_names: List[str]) -> str:
    """Generate README.md content."""
    lines = [
        "# Generated API",
        "",
        "CRUD backend generated by crmgen.",
        "",
        "## Run",
        "",
        "```bash",
        "pip install -r requirements.txt",
        "uvicorn main:app --reload",
        "```",
        "",
        "Set `BYPASS_AUTH=true` to call protected routes without a token.",
        "",
    ]
    if model_names:
        lines.append("## Models")
        lines.append("")
        lines.extend(f"- {name}" for name in model_names)
        lines.append("")
    return "\n".join(lines)


def shared_files() -> List[GeneratedFile]:
    """Files every generated backend needs once. Written only when absent."""
    return [
        GeneratedFile("main.py", render_server(), ArtifactKind.SERVER.value),
        GeneratedFile("config/__init__.py", ""),
        GeneratedFile("config/settings.py", render_settings()),
        GeneratedFile("config/db.py", render_db_config(), ArtifactKind.DB_CONFIG.value),
        GeneratedFile("models/__init__.py", render_models_index()),
        GeneratedFile("models/base.py", render_base_model()),
        GeneratedFile("controllers/__init__.py", ""),
        GeneratedFile("middlewares/__init__.py", ""),
        GeneratedFile("middlewares/auth.py", render_auth_middleware()),
        GeneratedFile("routes/__init__.py", render_routes_index()),
        GeneratedFile("utils/__init__.py", ""),
        GeneratedFile("utils/response_handler.py", render_response_handler()),
        GeneratedFile("utils/pagination.py", render_crud_helpers()),
        GeneratedFile("requirements.txt", render_requirements_txt()),
    ]


def shared_index_paths() -> Dict[str, str]:
    return {"models": "models/__init__.py", "routes": "routes/__init__.py"}
