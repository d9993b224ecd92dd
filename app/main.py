from contextlib import asynccontextmanager
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from app.api.auth import router as auth_router
from app.api.branches import router as branches_router
from app.api.exports import router as exports_router
from app.api.payments import router as payments_router
from app.api.suppliers import router as suppliers_router
from app.api.users import router as users_router
from app.core.auth import parse_session_token
from app.core.config import Settings, settings as default_settings
from app.core.errors import AppError
from app.db.base import Base
from app.db.seed import seed_default_branches
from app.db.session import build_engine, build_session_factory
import app.models  # noqa: F401 - register models with Base.metadata

request_logger = logging.getLogger("app.request")
error_logger = logging.getLogger("app.errors")

PUBLIC_PATHS = {
    "/auth/login",
    "/auth/register",
    "/auth/logout",
    "/health",
    "/openapi.json",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    msg = first.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        error_logger.warning("integrity_error path=%s %s", request.url.path, exc.orig)
        return _error(400, "Duplicate or conflicting record")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        error_logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s %(message)s",
    )
    engine = build_engine(settings.database_url)
    session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: create DB tables
        Base.metadata.create_all(bind=engine)
        if settings.seed_branches_on_startup:
            db = session_factory()
            try:
                seed_default_branches(db)
            finally:
                db.close()
        yield
        engine.dispose()

    app = FastAPI(
        title="Puro Proveedores API",
        description="Supplier invoices, partial payments and branches (sucursales)",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app_cors_origins.split(",") if settings.app_cors_origins else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        req_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            request_logger.exception(
                "request_failed id=%s method=%s path=%s ms=%s",
                req_id,
                request.method,
                request.url.path,
                elapsed_ms,
            )
            raise
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        response.headers["x-request-id"] = req_id
        request_logger.info(
            "request_done id=%s method=%s path=%s status=%s ms=%s",
            req_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        path = request.url.path
        if (
            path in PUBLIC_PATHS
            or path.startswith("/docs")
            or path.startswith("/redoc")
            or request.method == "OPTIONS"
        ):
            return await call_next(request)

        token = request.cookies.get(settings.auth_cookie_name)
        user = parse_session_token(token, settings.auth_secret)
        if not user:
            return _error(401, "Authentication required")
        request.state.user = user
        return await call_next(request)

    register_exception_handlers(app)

    @app.get("/health", include_in_schema=False)
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(auth_router)
    app.include_router(branches_router)
    app.include_router(exports_router)
    app.include_router(payments_router)
    app.include_router(suppliers_router)
    app.include_router(users_router)
    return app


app = create_app()
