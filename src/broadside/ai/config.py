"""Settings for the language-model move source."""

from __future__ import annotations

import os
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from broadside.telemetry.config import env_flag

DEFAULT_ENDPOINT = "http://localhost:1234"
DEFAULT_MODEL = "local-model"


class ExternalSourceConfig(BaseModel):
    """Where and how to ask a chat-completion server for moves."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = DEFAULT_ENDPOINT
    model: str = DEFAULT_MODEL
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(default=10, ge=1)
    debug: bool = False
    api_key: str = "not-needed"
    timeout: float = Field(default=30.0, gt=0)

    @property
    def base_url(self) -> str:
        """OpenAI-style base URL, i.e. the endpoint with ``/v1`` appended once."""
        base = self.endpoint.rstrip("/")
        return base if base.endswith("/v1") else f"{base}/v1"

    @classmethod
    def from_env(cls, **overrides: Any) -> "ExternalSourceConfig":
        """Construct config from `BROADSIDE_LLM_*` env vars."""

        data: Dict[str, Any] = {}
        env_fields = {
            "endpoint": "BROADSIDE_LLM_ENDPOINT",
            "model": "BROADSIDE_LLM_MODEL",
            "temperature": "BROADSIDE_LLM_TEMPERATURE",
            "max_tokens": "BROADSIDE_LLM_MAX_TOKENS",
            "api_key": "BROADSIDE_LLM_API_KEY",
            "timeout": "BROADSIDE_LLM_TIMEOUT",
        }
        for field, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value:
                data[field] = value
        debug = env_flag("BROADSIDE_LLM_DEBUG")
        if debug is not None:
            data["debug"] = debug

        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)
