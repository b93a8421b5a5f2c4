"""
DashScope (Qwen) chat gateway.

Builds the text-generation request, performs one call per chat, and knows the
static model catalog and price table. No retries: a failed call is reported
once to the caller.
"""

from typing import Any, Optional

import httpx

from agent_platform.errors import GatewayConfigurationError, UnrecognizedResponseError, UpstreamError
from agent_platform.observability import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com/api/v1"
GENERATION_PATH = "/services/aigc/text-generation/generation"
DEFAULT_MODEL = "qwen-plus"
NO_CONTENT_PLACEHOLDER = "no response content"

# USD per 1K tokens
PRICE_PER_THOUSAND_TOKENS: dict[str, float] = {
    "qwen-turbo": 0.0008,
    "qwen-plus": 0.004,
    "qwen-max": 0.02,
}

SUPPORTED_MODELS: list[dict[str, Any]] = [
    {
        "id": "qwen-turbo",
        "name": "Qwen Turbo",
        "description": "Fast inference model for simple tasks",
        "maxTokens": 8192,
        "cost": "low",
    },
    {
        "id": "qwen-plus",
        "name": "Qwen Plus",
        "description": "Balanced model, recommended default",
        "maxTokens": 32768,
        "cost": "medium",
    },
    {
        "id": "qwen-max",
        "name": "Qwen Max",
        "description": "Strongest reasoning model for complex scenarios",
        "maxTokens": 8192,
        "cost": "high",
    },
]


def get_supported_models() -> list[dict[str, Any]]:
    return [dict(model) for model in SUPPORTED_MODELS]


def estimate_cost(model: str, total_tokens: int) -> float:
    price = PRICE_PER_THOUSAND_TOKENS.get(model, PRICE_PER_THOUSAND_TOKENS[DEFAULT_MODEL])
    return (total_tokens / 1000) * price


def extract_reply_text(body: Any) -> str:
    """Pull the reply out of either response shape the provider uses.

    ``{"output": {"text": ...}}`` is the native text-generation shape and
    ``{"choices": [{"message": {"content": ...}}]}`` the chat-completions one.
    A known shape without text yields the placeholder. Any other body, or a
    text field that is not a string (multimodal content lists), raises.
    """
    if isinstance(body, dict):
        output = body.get("output")
        if isinstance(output, dict):
            text = output.get("text")
            if text is not None and not isinstance(text, str):
                raise UnrecognizedResponseError("Unrecognized provider response shape: non-text output")
            if text:
                return text
            # native mode with result_format=message nests choices under output
            if "choices" not in output:
                return NO_CONTENT_PLACEHOLDER
            body = output

        choices = body.get("choices")
        if isinstance(choices, list):
            if choices and isinstance(choices[0], dict):
                message = choices[0].get("message") or {}
                content = message.get("content") if isinstance(message, dict) else None
                if content is not None and not isinstance(content, str):
                    raise UnrecognizedResponseError("Unrecognized provider response shape: non-text content")
                if content:
                    return content
            return NO_CONTENT_PLACEHOLDER

    raise UnrecognizedResponseError("Unrecognized provider response shape")


def extract_total_tokens(body: Any) -> int:
    if not isinstance(body, dict):
        return 0
    usage = body.get("usage") or {}
    if not isinstance(usage, dict):
        return 0
    if usage.get("total_tokens") is not None:
        return int(usage["total_tokens"])
    return int(usage.get("input_tokens") or 0) + int(usage.get("output_tokens") or 0)


class QwenGateway:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise GatewayConfigurationError("Qwen API key is not configured")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def chat(
        self,
        messages: list[dict[str, str]],
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        top_p: float = 0.8,
    ) -> dict[str, Any]:
        body = {
            "model": model,
            "input": {"messages": messages},
            "parameters": {
                "temperature": temperature,
                "max_tokens": max_tokens,
                "top_p": top_p,
            },
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-DashScope-SSE": "disable",
        }
        url = f"{self.base_url}{GENERATION_PATH}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.error("qwen_request_failed", model=model, error=str(e), error_type=type(e).__name__)
            raise UpstreamError(f"Qwen API request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.error("qwen_api_error", model=model, status_code=response.status_code)
            raise UpstreamError(
                f"Qwen API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Qwen API returned invalid JSON: {response.text[:200]}") from e

        logger.info("qwen_usage", model=model, total_tokens=extract_total_tokens(data))
        return data
