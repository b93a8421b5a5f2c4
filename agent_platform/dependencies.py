from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from agent_platform.config import Settings
from agent_platform.database import Database
from agent_platform.engine.executor import AgentExecutor, GatewayFactory
from agent_platform.observability import get_logger
from agent_platform.services.metrics import MetricsCollector
from agent_platform.services.persistence import PersistenceService
from agent_platform.services.qwen import QwenGateway
from agent_platform.services.runtime_config import RuntimeConfig

logger = get_logger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_metrics(request: Request) -> MetricsCollector:
    return request.app.state.metrics


def get_runtime_config(request: Request) -> RuntimeConfig:
    return request.app.state.runtime_config


async def get_db(database: Database = Depends(get_database)) -> AsyncIterator[AsyncSession]:
    # A store that cannot be initialised must not block the request; the data
    # access that follows fails on its own.
    try:
        await database.create_tables()
    except Exception as e:
        logger.error("database_init_failed", error=str(e), error_type=type(e).__name__)

    async for session in database.session():
        yield session


def get_persistence(
    database: Database = Depends(get_database),
    session: AsyncSession = Depends(get_db),
) -> PersistenceService:
    return PersistenceService(database, session)


def get_gateway_factory(
    settings: Settings = Depends(get_app_settings),
    runtime_config: RuntimeConfig = Depends(get_runtime_config),
) -> GatewayFactory:
    def build() -> QwenGateway:
        return QwenGateway(
            runtime_config.qwen_api_key,
            base_url=settings.QWEN_BASE_URL,
            timeout=settings.QWEN_TIMEOUT_SECONDS,
        )

    return build


def get_executor(
    persistence: PersistenceService = Depends(get_persistence),
    metrics: MetricsCollector = Depends(get_metrics),
    gateway_factory: GatewayFactory = Depends(get_gateway_factory),
) -> AgentExecutor:
    return AgentExecutor(persistence, metrics, gateway_factory)
