"""
Configuration Management
Environment-based settings for the gateway, read once at startup
"""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    """Gateway configuration"""

    # Service info
    service_name: str = "gateway"
    service_version: str = "1.0.0"
    debug: bool = False

    # Listener
    gateway_host: str = "0.0.0.0"
    gateway_port: int = 5921

    # Upstream backend
    backend_url: str = "http://backend:3847"
    backend_health_path: str = "/api/health"
    api_prefix: str = "/api"

    # Outbound call bounds
    request_timeout: float = 30.0
    max_body_bytes: int = 50 * 1024 * 1024
    health_check_timeout: float = 5.0

    # Honour X-Forwarded-* headers set by a proxy in front of the gateway
    trust_proxy: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_config_path: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @field_validator('gateway_port')
    @classmethod
    def validate_gateway_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError('Gateway port must be between 1 and 65535')
        return v

    @field_validator('backend_url')
    @classmethod
    def validate_backend_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError('Backend URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('api_prefix')
    @classmethod
    def validate_api_prefix(cls, v):
        if not v.startswith('/'):
            raise ValueError('API prefix must start with /')
        v = v.rstrip('/')
        if not v:
            raise ValueError('API prefix cannot be the root path')
        return v

    @field_validator('request_timeout', 'health_check_timeout')
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError('Timeouts must be positive')
        return v

    @field_validator('max_body_bytes')
    @classmethod
    def validate_max_body_bytes(cls, v):
        if v <= 0:
            raise ValueError('Body size limit must be positive')
        return v

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError('Log format must be "json" or "console"')
        return v


@lru_cache
def get_settings() -> GatewaySettings:
    """Get gateway settings instance"""
    return GatewaySettings()
