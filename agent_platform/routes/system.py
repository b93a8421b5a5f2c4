from fastapi import APIRouter, Depends
from agent_platform.dependencies import get_metrics, get_runtime_config
from agent_platform.schemas import (
    ApiKeyRequest,
    ApiKeyResponse,
    ConfigStatusResponse,
    MessageResponse,
    MetricsSnapshot,
    ModelDescriptor,
)
from agent_platform.services.metrics import MetricsCollector
from agent_platform.services.qwen import get_supported_models
from agent_platform.services.runtime_config import RuntimeConfig

router = APIRouter(tags=["system"])


@router.post("/config/qwen-key", response_model=ApiKeyResponse)
async def configure_qwen_key(
    payload: ApiKeyRequest,
    runtime_config: RuntimeConfig = Depends(get_runtime_config),
):
    masked = runtime_config.set_qwen_api_key(payload.api_key)
    return ApiKeyResponse(message="API key configured", masked_key=masked)


@router.get("/config/status", response_model=ConfigStatusResponse)
async def config_status(runtime_config: RuntimeConfig = Depends(get_runtime_config)):
    return ConfigStatusResponse(
        qwen_api_key_configured=runtime_config.qwen_api_key_configured,
        qwen_api_key_hint=runtime_config.qwen_api_key_hint,
    )


@router.get("/models", response_model=list[ModelDescriptor])
async def list_models():
    return get_supported_models()


@router.get("/metrics", response_model=MetricsSnapshot)
async def get_metrics_snapshot(metrics: MetricsCollector = Depends(get_metrics)):
    return metrics.get_metrics()


@router.post("/metrics/reset", response_model=MessageResponse)
async def reset_metrics(metrics: MetricsCollector = Depends(get_metrics)):
    metrics.reset()
    return MessageResponse(message="Metrics reset")
