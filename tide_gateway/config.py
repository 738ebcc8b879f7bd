"""
Configuration for the Tide-Data Gateway.

Uses pydantic-settings for environment variable loading.

The CHS API base origin is intentionally not configurable here: it must
never be influenced by anything outside this package.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Gateway configuration loaded from environment."""

    # Server settings
    host: str = Field(default="0.0.0.0", description="Gateway bind host")
    port: int = Field(default=8080, description="Gateway bind port")

    # Routing
    route_prefix: str = Field(default="", description="Prefix for the /proxy routes")

    # Observability
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="text", description="Log format: text or json")

    model_config = {"env_prefix": "TIDE_GATEWAY_"}
