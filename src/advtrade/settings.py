from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, SecretStr

from .auth.signer import ApiKeyType


class Credentials(BaseModel):
    api_key: SecretStr | None = None
    api_secret: SecretStr | None = None
    oauth_token: SecretStr | None = None
    key_type: ApiKeyType = ApiKeyType.CDP

    model_config = {"extra": "forbid"}


class StreamingSettings(BaseModel):
    url: str = "wss://advanced-trade-ws.coinbase.com"
    buffer_size: int = Field(default=5 * 1024 * 1024, gt=0)
    heartbeat: float = Field(default=30.0, gt=0)
    shutdown_timeout: float = Field(default=2.0, gt=0)

    model_config = {"extra": "forbid"}


class RestSettings(BaseModel):
    base_url: str = "https://api.coinbase.com"
    timeout: float = Field(default=100.0, gt=0)
    user_agent: str = "advtrade/1.0"

    model_config = {"extra": "forbid"}


class Settings(BaseModel):
    env: str = "dev"
    credentials: Credentials = Field(default_factory=Credentials)
    streaming: StreamingSettings = Field(default_factory=StreamingSettings)
    rest: RestSettings = Field(default_factory=RestSettings)

    model_config = {"extra": "forbid"}

    def redacted(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        creds = data.get("credentials")
        if isinstance(creds, dict):
            for key in ("api_key", "api_secret", "oauth_token"):
                if creds.get(key) is not None:
                    creds[key] = "***"
        return data
