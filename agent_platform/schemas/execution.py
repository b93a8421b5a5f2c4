from typing import Optional

from pydantic import Field

from agent_platform.schemas.base import CamelModel, UtcDateTime


class ExecuteRequest(CamelModel):
    input: str = Field(min_length=1)


class ExecuteResponse(CamelModel):
    execution_id: str
    agent_id: str
    input: str
    output: str
    cost: float
    duration: int
    model: str
    timestamp: UtcDateTime


class ExecutionResponse(CamelModel):
    id: str
    agent_id: str
    input: str
    output: Optional[str] = ""
    status: str
    cost: float
    duration: int
    timestamp: UtcDateTime
