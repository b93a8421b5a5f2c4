"""Shared fixtures: a temp SQLite app and a scripted stand-in for the Qwen API."""

import json

import httpx
import pytest
import pytest_asyncio
from fastapi import Depends
from fastapi.testclient import TestClient

from agent_platform.config import Settings
from agent_platform.database import Database
from agent_platform.dependencies import get_app_settings, get_gateway_factory, get_runtime_config
from agent_platform.main import create_app
from agent_platform.services.persistence import PersistenceService
from agent_platform.services.qwen import QwenGateway
from agent_platform.services.runtime_config import RuntimeConfig

TEST_API_KEY = "sk-test-0123456789abcdef"


class FakeQwenProvider:
    """Answers every generation call with ``body`` and remembers what it was sent."""

    def __init__(self):
        self.requests: list[dict] = []
        self.headers: list[httpx.Headers] = []
        self.status_code = 200
        self.body: dict = {
            "output": {"text": "Hello from Qwen", "finish_reason": "stop"},
            "usage": {"input_tokens": 1000, "output_tokens": 500, "total_tokens": 1500},
            "request_id": "req-1",
        }
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        self.headers.append(request.headers)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        QWEN_API_KEY=TEST_API_KEY,
        DEFAULT_MODEL="qwen-plus",
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def provider() -> FakeQwenProvider:
    return FakeQwenProvider()


@pytest.fixture
def app(settings, provider):
    app = create_app(settings)

    def gateway_factory(
        app_settings: Settings = Depends(get_app_settings),
        runtime_config: RuntimeConfig = Depends(get_runtime_config),
    ):
        return lambda: QwenGateway(
            runtime_config.qwen_api_key,
            base_url=app_settings.QWEN_BASE_URL,
            transport=provider.transport(),
        )

    app.dependency_overrides[get_gateway_factory] = gateway_factory
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def agent_payload() -> dict:
    return {
        "name": "Support bot",
        "description": "Answers product questions",
        "model": "qwen-turbo",
        "systemPrompt": "You are a helpful support assistant.",
        "temperature": 0.3,
        "maxTokens": 512,
        "tools": ["search", "calculator"],
    }


@pytest.fixture
def active_agent_id(client, agent_payload) -> str:
    agent_id = client.post("/api/agents", json=agent_payload).json()["agentId"]
    assert client.post(f"/api/agents/{agent_id}/activate").status_code == 200
    return agent_id


@pytest_asyncio.fixture
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'persistence.db'}")
    await database.create_tables()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def persistence(database):
    async for session in database.session():
        yield PersistenceService(database, session)
