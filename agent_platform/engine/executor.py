"""
Agent Execution Engine
- Load the agent and check it is active
- Record a running execution before calling the provider
- Call the model, time the call, estimate the cost
- Close the execution as success or error and feed the metrics
"""

import time
from typing import Callable

from agent_platform.database import utcnow
from agent_platform.errors import AgentNotFoundError, AgentStateError, UpstreamError
from agent_platform.observability import get_logger
from agent_platform.schemas.agent import AgentResponse
from agent_platform.schemas.execution import ExecuteResponse
from agent_platform.services.metrics import MetricsCollector
from agent_platform.services.persistence import PersistenceService
from agent_platform.services.qwen import QwenGateway, estimate_cost, extract_reply_text, extract_total_tokens

logger = get_logger(__name__)

GatewayFactory = Callable[[], QwenGateway]


class AgentExecutor:
    def __init__(
        self,
        persistence: PersistenceService,
        metrics: MetricsCollector,
        gateway_factory: GatewayFactory,
    ):
        self.persistence = persistence
        self.metrics = metrics
        self.gateway_factory = gateway_factory

    async def execute(self, agent_id: str, user_input: str) -> ExecuteResponse:
        agent = await self.persistence.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        if agent.status != "active":
            raise AgentStateError("Agent is not active")

        execution_id = await self.persistence.create_execution(
            {
                "agentId": agent_id,
                "input": user_input,
                "output": "",
                "status": "running",
                "cost": 0,
                "duration": 0,
            }
        )
        log = logger.bind(agent_id=agent_id, execution_id=execution_id, model=agent.model)

        start_time = time.monotonic()
        try:
            output, cost, duration = await self._call_model(agent, user_input, start_time)
            await self.persistence.update_execution(
                execution_id,
                {"output": output, "status": "success", "cost": cost, "duration": duration},
            )
        except Exception as e:
            duration = _elapsed_ms(start_time)
            log.error("execution_failed", error=str(e), error_type=type(e).__name__, duration=duration)
            # a failed success write leaves the session unusable until rolled back
            await self.persistence.rollback()
            self.metrics.record_api_call(duration, 0, False)
            await self.persistence.update_execution(
                execution_id,
                {"output": str(e), "status": "error", "cost": 0, "duration": duration},
            )
            raise UpstreamError(f"Agent execution failed: {e}") from e

        self.metrics.record_api_call(duration, cost, True)
        log.info("execution_completed", cost=cost, duration=duration)

        return ExecuteResponse(
            execution_id=execution_id,
            agent_id=agent_id,
            input=user_input,
            output=output,
            cost=cost,
            duration=duration,
            model=agent.model,
            timestamp=utcnow(),
        )

    async def _call_model(self, agent: AgentResponse, user_input: str, start_time: float) -> tuple[str, float, int]:
        gateway = self.gateway_factory()
        messages = [
            {"role": "system", "content": agent.system_prompt},
            {"role": "user", "content": user_input},
        ]
        response = await gateway.chat(
            messages,
            agent.model,
            temperature=agent.temperature,
            max_tokens=agent.max_tokens,
        )
        duration = _elapsed_ms(start_time)
        output = extract_reply_text(response)
        cost = estimate_cost(agent.model, extract_total_tokens(response))
        return output, cost, duration


def _elapsed_ms(start_time: float) -> int:
    return max(0, int((time.monotonic() - start_time) * 1000))
