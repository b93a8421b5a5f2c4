from typing import Optional

from agent_platform.schemas.base import CamelModel, UtcDateTime


class HealthResponse(CamelModel):
    status: str
    timestamp: UtcDateTime
    environment: str
    qwen_api_key_configured: bool


class ApiKeyRequest(CamelModel):
    api_key: Optional[str] = None


class ApiKeyResponse(CamelModel):
    success: bool = True
    message: str
    masked_key: str


class ConfigStatusResponse(CamelModel):
    qwen_api_key_configured: bool
    qwen_api_key_hint: Optional[str] = None


class ModelDescriptor(CamelModel):
    id: str
    name: str
    description: str
    max_tokens: int
    cost: str


class MetricsSnapshot(CamelModel):
    api_calls: int
    total_cost: float
    avg_response_time: float
    error_count: int
    success_rate: str
