"""Configuration models and loading."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.exceptions import ConfigurationError

CONFIG_FILE = Path("reserve-config.json")


class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8448


class CaptureSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    directory: Path = Path("responses")


class UpstreamSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # None disables the timeout: a hung upstream holds the request
    timeout: float | None = None
    max_connections: int = 100
    max_keepalive_connections: int = 20


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    mappings: dict[str, str] = Field(default_factory=dict)
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)

    def without_capture(self) -> "Config":
        """Return a copy with response capture disabled."""
        return self.model_copy(
            update={"capture": self.capture.model_copy(update={"enabled": False})}
        )


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from a JSON file.

    Raises:
        ConfigurationError: if the file cannot be read, parsed or validated.
    """
    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigurationError(f"error reading config file: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"error parsing config file: {e}") from e

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid config file {path}: {e}") from e
