"""Execute-agent flow against a temp database and the scripted provider."""

import pytest
from sqlalchemy.exc import OperationalError

from agent_platform.errors import AgentStateError, UpstreamError
from agent_platform.engine.executor import AgentExecutor
from agent_platform.services.metrics import MetricsCollector
from agent_platform.services.persistence import PersistenceService
from agent_platform.services.qwen import QwenGateway, estimate_cost

TEST_API_KEY = "sk-test-0123456789abcdef"


class FailingSuccessWrite(PersistenceService):
    """Storage that accepts every write except closing an execution as success."""

    async def update_execution(self, execution_id, fields):
        if fields.get("status") == "success":
            raise OperationalError("UPDATE executions", {}, Exception("disk I/O error"))
        return await super().update_execution(execution_id, fields)


async def _active_agent(persistence) -> str:
    return await persistence.create_agent(
        {
            "name": "Writer",
            "model": "qwen-max",
            "systemPrompt": "You write haiku.",
            "status": "active",
        }
    )


def _executor(persistence, metrics, provider) -> AgentExecutor:
    return AgentExecutor(
        persistence,
        metrics,
        lambda: QwenGateway(TEST_API_KEY, transport=provider.transport()),
    )


@pytest.mark.asyncio
async def test_success_closes_execution_and_records_cost(persistence, provider):
    metrics = MetricsCollector()
    agent_id = await _active_agent(persistence)

    result = await _executor(persistence, metrics, provider).execute(agent_id, "Write about rain")

    assert result.output == "Hello from Qwen"
    assert result.cost == pytest.approx(estimate_cost("qwen-max", 1500))
    [execution] = await persistence.get_executions(agent_id)
    assert execution.id == result.execution_id
    assert execution.status == "success"
    assert execution.output == "Hello from Qwen"

    snapshot = metrics.get_metrics()
    assert (snapshot.api_calls, snapshot.error_count) == (1, 0)
    assert snapshot.total_cost == pytest.approx(result.cost)


@pytest.mark.asyncio
async def test_failed_success_write_closes_execution_as_error(database, provider):
    metrics = MetricsCollector()
    async for session in database.session():
        persistence = FailingSuccessWrite(database, session)
        agent_id = await _active_agent(persistence)

        with pytest.raises(UpstreamError) as exc_info:
            await _executor(persistence, metrics, provider).execute(agent_id, "Write about rain")

        assert exc_info.value.message.startswith("Agent execution failed")
        assert "disk I/O error" in exc_info.value.message
        [execution] = await persistence.get_executions(agent_id)
        assert execution.status == "error"
        assert execution.cost == 0

    snapshot = metrics.get_metrics()
    assert snapshot.api_calls == 1
    assert snapshot.error_count == 1
    assert snapshot.total_cost == 0
    assert snapshot.success_rate == "0.00%"


@pytest.mark.asyncio
async def test_inactive_agent_is_not_called(persistence, provider):
    metrics = MetricsCollector()
    agent_id = await persistence.create_agent(
        {"name": "Idle", "model": "qwen-plus", "systemPrompt": "x", "status": "inactive"}
    )

    with pytest.raises(AgentStateError):
        await _executor(persistence, metrics, provider).execute(agent_id, "hi")

    assert provider.requests == []
    assert await persistence.get_executions(agent_id) == []
    assert metrics.get_metrics().api_calls == 0
