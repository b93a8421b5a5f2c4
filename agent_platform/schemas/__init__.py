from agent_platform.schemas.base import MessageResponse
from agent_platform.schemas.agent import AgentCreate, AgentUpdate, AgentResponse, AgentCreatedResponse
from agent_platform.schemas.execution import ExecuteRequest, ExecuteResponse, ExecutionResponse
from agent_platform.schemas.system import (
    HealthResponse,
    ApiKeyRequest,
    ApiKeyResponse,
    ConfigStatusResponse,
    ModelDescriptor,
    MetricsSnapshot,
)
