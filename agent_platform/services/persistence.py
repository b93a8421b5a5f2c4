"""
Relational storage for agents and their executions.

External callers speak camelCase (``systemPrompt``, ``maxTokens``); the tables
use snake_case. Every write goes through one explicit field table per record
type, so an unknown key is rejected instead of turning into a bogus column.
"""

import json
import uuid
from typing import Any, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from agent_platform.database import Database, utcnow
from agent_platform.errors import UnknownFieldError
from agent_platform.models.agent import Agent
from agent_platform.models.execution import Execution
from agent_platform.observability import get_logger
from agent_platform.schemas.agent import AgentResponse
from agent_platform.schemas.execution import ExecutionResponse

logger = get_logger(__name__)

AGENT_FIELDS: dict[str, str] = {
    "id": "id",
    "name": "name",
    "description": "description",
    "model": "model",
    "systemPrompt": "system_prompt",
    "temperature": "temperature",
    "maxTokens": "max_tokens",
    "tools": "tools",
    "status": "status",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
AGENT_GENERATED = frozenset({"id", "createdAt", "updatedAt"})

EXECUTION_FIELDS: dict[str, str] = {
    "id": "id",
    "agentId": "agent_id",
    "input": "input",
    "output": "output",
    "status": "status",
    "cost": "cost",
    "duration": "duration",
    "timestamp": "timestamp",
}
EXECUTION_GENERATED = frozenset({"id", "timestamp"})
EXECUTION_FROZEN = EXECUTION_GENERATED | {"agentId", "input"}

DEFAULT_EXECUTION_LIMIT = 50


def _verify_field_table(fields: dict[str, str], model: type) -> None:
    missing = set(fields.values()) - set(model.__table__.columns.keys())
    if missing:
        raise RuntimeError(f"{model.__name__} field table names unknown columns: {sorted(missing)}")


_verify_field_table(AGENT_FIELDS, Agent)
_verify_field_table(EXECUTION_FIELDS, Execution)


def to_columns(fields: dict[str, Any], table: dict[str, str], ignored: frozenset[str]) -> dict[str, Any]:
    """Translate external keys to column names, dropping ``ignored`` keys.

    Raises UnknownFieldError for keys the table does not know.
    """
    unknown = [key for key in fields if key not in table]
    if unknown:
        raise UnknownFieldError(unknown)

    values: dict[str, Any] = {}
    for key, value in fields.items():
        if key in ignored:
            continue
        column = table[key]
        if column == "tools":
            value = json.dumps(list(value or []))
        values[column] = value
    return values


def _decode_tools(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return json.loads(raw)


def format_agent(row: Agent) -> AgentResponse:
    return AgentResponse(
        id=row.id,
        name=row.name,
        description=row.description,
        model=row.model,
        system_prompt=row.system_prompt,
        temperature=row.temperature,
        max_tokens=row.max_tokens,
        tools=_decode_tools(row.tools),
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def format_execution(row: Execution) -> ExecutionResponse:
    return ExecutionResponse.model_validate(row)


class PersistenceService:
    """Agent and execution records. Each write commits its own single statement."""

    def __init__(self, database: Database, session: AsyncSession):
        self.database = database
        self.session = session

    async def initialize_tables(self) -> None:
        await self.database.create_tables()

    async def rollback(self) -> None:
        await self.session.rollback()

    # ─── Agents ────────────────────────────────────────────────────────────
    async def create_agent(self, fields: dict[str, Any]) -> str:
        values = to_columns(fields, AGENT_FIELDS, AGENT_GENERATED)
        now = utcnow()
        agent = Agent(**values, id=str(uuid.uuid4()), created_at=now, updated_at=now)
        if agent.tools is None:
            agent.tools = json.dumps([])
        self.session.add(agent)
        await self.session.commit()
        logger.info("agent_created", agent_id=agent.id, model=agent.model)
        return agent.id

    async def get_agent(self, agent_id: str) -> Optional[AgentResponse]:
        result = await self.session.execute(select(Agent).where(Agent.id == agent_id))
        row = result.scalar_one_or_none()
        return format_agent(row) if row else None

    async def get_all_agents(self) -> list[AgentResponse]:
        result = await self.session.execute(select(Agent).order_by(Agent.created_at.desc()))
        return [format_agent(row) for row in result.scalars().all()]

    async def update_agent(self, agent_id: str, fields: dict[str, Any]) -> bool:
        """Apply the supplied fields and refresh ``updated_at``.

        Returns False when no agent has ``agent_id``. An update that carries no
        writable field is a no-op: True if the agent exists, False otherwise.
        """
        values = to_columns(fields, AGENT_FIELDS, AGENT_GENERATED)
        if not values:
            return await self._agent_exists(agent_id)

        values["updated_at"] = utcnow()
        result = await self.session.execute(
            update(Agent).where(Agent.id == agent_id).values(**values)
        )
        await self.session.commit()
        matched = result.rowcount > 0
        if matched:
            logger.info("agent_updated", agent_id=agent_id, fields=sorted(values))
        return matched

    async def delete_agent(self, agent_id: str) -> bool:
        result = await self.session.execute(delete(Agent).where(Agent.id == agent_id))
        await self.session.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info("agent_deleted", agent_id=agent_id)
        return deleted

    async def _agent_exists(self, agent_id: str) -> bool:
        result = await self.session.execute(select(Agent.id).where(Agent.id == agent_id))
        return result.scalar_one_or_none() is not None

    # ─── Executions ────────────────────────────────────────────────────────
    async def create_execution(self, fields: dict[str, Any]) -> str:
        values = to_columns(fields, EXECUTION_FIELDS, EXECUTION_GENERATED)
        execution = Execution(**values, id=str(uuid.uuid4()), timestamp=utcnow())
        self.session.add(execution)
        await self.session.commit()
        return execution.id

    async def update_execution(self, execution_id: str, fields: dict[str, Any]) -> bool:
        """Overwrite the supplied fields. Same not-found vs. no-op rule as ``update_agent``."""
        values = to_columns(fields, EXECUTION_FIELDS, EXECUTION_FROZEN)
        if not values:
            return await self._execution_exists(execution_id)
        result = await self.session.execute(
            update(Execution).where(Execution.id == execution_id).values(**values)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def _execution_exists(self, execution_id: str) -> bool:
        result = await self.session.execute(select(Execution.id).where(Execution.id == execution_id))
        return result.scalar_one_or_none() is not None

    async def get_executions(
        self, agent_id: Optional[str] = None, limit: int = DEFAULT_EXECUTION_LIMIT
    ) -> list[ExecutionResponse]:
        query = select(Execution)
        if agent_id:
            query = query.where(Execution.agent_id == agent_id)
        query = query.order_by(Execution.timestamp.desc()).limit(limit)
        result = await self.session.execute(query)
        return [format_execution(row) for row in result.scalars().all()]
