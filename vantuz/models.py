"""Configuration models for vantuz.

All models use Pydantic v2.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TIMEOUT = 20.0
DEFAULT_USER_AGENT = "vantuz"


class RateLimitConfig(BaseModel):
    """Rate limit: `requests` per `per` seconds.

    Zero or negative values are accepted and disable limiting, matching
    Client.set_rate_limit().
    """

    model_config = ConfigDict(extra="forbid")

    requests: int = Field(description="Maximum requests per interval (0 disables)")
    per: float = Field(default=1.0, description="Interval length in seconds")


class ClientConfig(BaseModel):
    """Client defaults, usually loaded from a YAML file.

    Example YAML:
        timeout: 10
        user_agent: my-service/1.0
        authorization: Bearer ${API_TOKEN}
        headers:
          Accept: application/json
        query:
          api_version: ["2"]
        rate_limit:
          requests: 5
          per: 1
    """

    model_config = ConfigDict(extra="forbid")

    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Transport timeout in seconds")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header")
    authorization: str | None = Field(default=None, description="Authorization header")
    headers: dict[str, str] = Field(default_factory=dict, description="Default headers")
    query: dict[str, list[str]] = Field(
        default_factory=dict, description="Default query parameters (arrays for repeated params)"
    )
    rate_limit: RateLimitConfig | None = Field(default=None, description="Rate limit, or none")

    @field_validator("timeout")
    @classmethod
    def check_timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout must be positive, got {v}")
        return v

    @field_validator("query", mode="before")
    @classmethod
    def wrap_single_query_values(cls, v: object) -> object:
        """Allow `key: value` as shorthand for `key: [value]`; YAML scalars become strings."""
        if not isinstance(v, dict):
            return v
        normalized: dict[object, object] = {}
        for key, val in v.items():
            if isinstance(val, list):
                normalized[key] = [str(item) for item in val]
            elif isinstance(val, (str, int, float)):
                normalized[key] = [str(val)]
            else:
                normalized[key] = val
        return normalized
