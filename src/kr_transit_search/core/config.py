"""Runtime settings for provider access."""

import os
from typing import Literal

from pydantic import BaseModel, Field, SecretStr

ENV_PREFIX = "KR_TRANSIT_"

DEFAULT_BUS_BASE_URL = "http://ws.bus.go.kr/api/rest/stationinfo"
DEFAULT_SUBWAY_BASE_URL = "http://apis.data.go.kr/1613000/SubwayInfoService"
DEFAULT_RADIUS = 500


class TransitSettings(BaseModel):
    """Settings threaded into a ProviderClient at construction time."""

    service_key: SecretStr = Field(
        SecretStr(""), description="Public data portal key shared by both providers"
    )
    bus_service_key: SecretStr | None = Field(
        None, description="Bus registry key, overrides service_key"
    )
    subway_service_key: SecretStr | None = Field(
        None, description="Subway registry key, overrides service_key"
    )
    bus_base_url: str = Field(DEFAULT_BUS_BASE_URL)
    subway_base_url: str = Field(DEFAULT_SUBWAY_BASE_URL)
    timeout: float = Field(10.0, gt=0, description="Per-request timeout in seconds")
    retry_attempts: int = Field(
        2, ge=1, description="Attempts per request on connection errors"
    )
    subway_page_size: int = Field(100, ge=1, description="numOfRows for subway search")
    tool_profile: Literal["dual", "single"] = Field(
        "dual", description="dual: bus+subway name search, single: bus only"
    )

    def key_for(self, provider: str) -> str:
        """Return the credential for a provider ("bus" or "subway")."""
        override = self.bus_service_key if provider == "bus" else self.subway_service_key
        if override is not None and override.get_secret_value():
            return override.get_secret_value()
        return self.service_key.get_secret_value()

    @classmethod
    def from_env(cls, **overrides: object) -> "TransitSettings":
        """Build settings from KR_TRANSIT_* environment variables.

        Keyword overrides that are not None win over the environment.
        """
        values: dict[str, object] = {}
        for name in cls.model_fields:
            env_value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if env_value is not None and env_value != "":
                values[name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def masked(self) -> dict[str, object]:
        """Settings as a dict with credentials masked for display."""

        def mask(secret: SecretStr | None) -> str:
            if secret is None or not secret.get_secret_value():
                return "(not set)"
            value = secret.get_secret_value()
            return f"{value[:4]}…" if len(value) > 8 else "****"

        data = self.model_dump(
            exclude={"service_key", "bus_service_key", "subway_service_key"}
        )
        data["service_key"] = mask(self.service_key)
        data["bus_service_key"] = mask(self.bus_service_key)
        data["subway_service_key"] = mask(self.subway_service_key)
        return data
