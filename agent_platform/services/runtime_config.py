"""Operator-changeable settings that live in memory for the process lifetime."""

import threading
from typing import Optional

from agent_platform.errors import ValidationFailed
from agent_platform.utils.masking import mask_key

API_KEY_PREFIX = "sk-"


class RuntimeConfig:
    def __init__(self, qwen_api_key: str = ""):
        self._lock = threading.Lock()
        self._qwen_api_key = qwen_api_key

    @property
    def qwen_api_key(self) -> str:
        return self._qwen_api_key

    @property
    def qwen_api_key_configured(self) -> bool:
        return bool(self._qwen_api_key)

    @property
    def qwen_api_key_hint(self) -> Optional[str]:
        return mask_key(self._qwen_api_key) if self._qwen_api_key else None

    def set_qwen_api_key(self, api_key: Optional[str]) -> str:
        """Replace the provider key and return its masked form.

        The current key is left untouched when the new one is rejected.
        """
        if not api_key:
            raise ValidationFailed("API key must not be empty")
        if not api_key.startswith(API_KEY_PREFIX):
            raise ValidationFailed(f"Invalid API key format: expected prefix '{API_KEY_PREFIX}'")
        with self._lock:
            self._qwen_api_key = api_key
        return mask_key(api_key)
