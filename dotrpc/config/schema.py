"""Configuration schema using Pydantic.

Single data model and defaults for dotrpc, persisted to ~/.dotrpc/config.json.
"""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """Request handling behaviour of a Server."""
    # Reject requests without "jsonrpc": "2.0" instead of treating them as 1.x calls
    strict_version: bool = False
    # Accept ?method=...&params=a,b calls from query parameters
    allow_get_calls: bool = False
    # Do not write output to the writer; embedder reads get_output()/get_raw_output()
    suppress_output: bool = False


class ClientConfig(BaseModel):
    """Defaults for the HTTP client transport."""
    endpoint: str = "http://127.0.0.1:8080/"
    timeout_seconds: float = 10.0
    headers: dict[str, str] = Field(default_factory=dict)
    debug: bool = False


class HttpConfig(BaseModel):
    """FastAPI/uvicorn adapter settings."""
    host: str = "127.0.0.1"
    port: int = 8080
    path: str = "/"


class LoggingConfig(BaseModel):
    """Loguru sink settings."""
    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_name: str | None = None  # rotating file under ~/.dotrpc/logs when set


class Config(BaseSettings):
    """Root configuration for dotrpc."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="DOTRPC_",
        env_nested_delimiter="__",
    )
