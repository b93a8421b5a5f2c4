import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from agent_platform.config import Settings, get_settings
from agent_platform.database import Database, utcnow
from agent_platform.errors import AgentPlatformError
from agent_platform.observability import bind_context, clear_context, configure_logging, get_logger
from agent_platform.routes import agents, executions, system
from agent_platform.schemas import HealthResponse
from agent_platform.services.metrics import MetricsCollector
from agent_platform.services.runtime_config import RuntimeConfig

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    try:
        await app.state.database.create_tables()
    except Exception as e:
        logger.error("database_init_failed", error=str(e), error_type=type(e).__name__)

    logger.info(
        "app_started",
        environment=settings.ENVIRONMENT,
        qwen_api_key_configured=app.state.runtime_config.qwen_api_key_configured,
    )
    yield

    await app.state.database.dispose()
    logger.info("app_shutdown_complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.ENVIRONMENT, settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title="Agent Platform API",
        description="Agent management with a Qwen chat proxy, execution log and metrics",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings.DATABASE_URL)
    app.state.metrics = MetricsCollector()
    app.state.runtime_config = RuntimeConfig(settings.QWEN_API_KEY)

    # Allow all origins in dev mode, specific origins in production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.DEV_MODE else settings.CORS_ORIGINS,
        allow_credentials=not settings.DEV_MODE,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        clear_context()
        bind_context(request_id=str(uuid.uuid4()), method=request.method, path=request.url.path)
        start_time = time.monotonic()
        response = await call_next(request)
        logger.info(
            "request_completed",
            status_code=response.status_code,
            elapsed_ms=round((time.monotonic() - start_time) * 1000, 2),
        )
        return response

    app.include_router(agents.router, prefix="/api")
    app.include_router(executions.router, prefix="/api")
    app.include_router(system.router, prefix="/api")

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        return HealthResponse(
            status="ok",
            timestamp=utcnow(),
            environment=settings.ENVIRONMENT,
            qwen_api_key_configured=request.app.state.runtime_config.qwen_api_key_configured,
        )

    _register_exception_handlers(app)
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Every failure leaves the API as ``{"error": message}``."""

    @app.exception_handler(AgentPlatformError)
    async def platform_error_handler(request: Request, exc: AgentPlatformError):
        if exc.status_code >= 500:
            logger.error("request_failed", error=exc.message, error_type=type(exc).__name__)
        else:
            logger.warning("request_rejected", error=exc.message, error_type=type(exc).__name__)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        if exc.status_code == 404 and message == "Not Found":
            message = "Endpoint not found"
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
            problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
        message = "Invalid request: " + "; ".join(problems)
        logger.warning("request_rejected", error=message)
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("storage_error", error=str(exc), error_type=type(exc).__name__)
        return JSONResponse(status_code=500, content={"error": "Storage error"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception", error=str(exc), error_type=type(exc).__name__)
        return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})


app = create_app()
