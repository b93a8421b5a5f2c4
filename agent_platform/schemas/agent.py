from typing import Any, Literal, Optional

from pydantic import Field, model_validator

from agent_platform.schemas.base import CamelModel, UtcDateTime

ModelId = Literal["qwen-turbo", "qwen-plus", "qwen-max"]
AgentStatus = Literal["active", "inactive", "error"]


class AgentCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    model: Optional[ModelId] = None
    system_prompt: str = Field(min_length=1)
    temperature: float = Field(0.7, ge=0, le=2)
    max_tokens: int = Field(2048, ge=1)
    tools: list[str] = []


class AgentUpdate(CamelModel):
    """Partial update. ``id``/``createdAt``/``updatedAt`` are accepted and ignored downstream."""

    model_config = {"extra": "forbid"}

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    model: Optional[ModelId] = None
    system_prompt: Optional[str] = Field(None, min_length=1)
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, ge=1)
    tools: Optional[list[str]] = None
    status: Optional[AgentStatus] = None
    id: Optional[Any] = None
    created_at: Optional[Any] = None
    updated_at: Optional[Any] = None

    @model_validator(mode="after")
    def _reject_null_required(self) -> "AgentUpdate":
        for field in ("name", "model", "system_prompt", "temperature", "max_tokens", "tools", "status"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Supplied fields keyed by their external (camelCase) names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class AgentResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    model: str
    system_prompt: str
    temperature: float
    max_tokens: int
    tools: list[str] = []
    status: str
    created_at: UtcDateTime
    updated_at: UtcDateTime


class AgentCreatedResponse(CamelModel):
    success: bool = True
    agent_id: str
    message: str
