#!/usr/bin/env python3
"""
Gateway registration configuration

Builds the immutable RegistrationConfig the agent is constructed with.
Environment lookups live here only; the agent never reads os.environ.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "http://localhost:8080"
DEFAULT_HEARTBEAT_INTERVAL_MS = 5000
DEFAULT_RETRY_INTERVAL_MS = 15000
DEFAULT_HEALTH_CHECK_INTERVAL_MS = 30000
DEFAULT_REQUEST_TIMEOUT_MS = 5000


class ConfigurationError(ValueError):
    """Raised when the registration configuration is unusable"""


def generate_instance_id(service_name: str) -> str:
    """Instance ID of the form '<service>-<8 hex chars>'"""
    return f"{service_name}-{uuid.uuid4().hex[:8]}"


def _millis(environ: Mapping[str, str], key: str, default: int) -> float:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default / 1000.0
    try:
        return int(raw) / 1000.0
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer number of milliseconds, got {raw!r}")


@dataclass(frozen=True)
class RegistrationConfig:
    gateway_url: str
    service_name: str
    base_url: str
    instance_id: str
    heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL_MS / 1000.0
    retry_interval: float = DEFAULT_RETRY_INTERVAL_MS / 1000.0
    health_check_interval: float = DEFAULT_HEALTH_CHECK_INTERVAL_MS / 1000.0
    enabled: bool = True
    environment: str = "development"
    version: str = "1.0.0"
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_MS / 1000.0

    def __post_init__(self):
        self.validate()

    def validate(self):
        """
        Check the configuration

        Raises:
            ConfigurationError: on an empty identity field (only when enabled)
                or a non-positive interval/timeout
        """
        intervals = {
            "heartbeat_interval": self.heartbeat_interval,
            "retry_interval": self.retry_interval,
            "health_check_interval": self.health_check_interval,
            "request_timeout": self.request_timeout,
        }
        for name, value in intervals.items():
            if value is None or value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value!r}")

        if not self.enabled:
            return

        for name in ("gateway_url", "service_name", "base_url", "instance_id"):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} is required when registration is enabled")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RegistrationConfig":
        """
        Build the configuration from environment variables

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            RegistrationConfig: validated configuration
        """
        env = os.environ if environ is None else environ

        service_name = env.get("SERVICE_NAME") or "unknown"
        port = env.get("PORT") or "3000"
        host = env.get("SERVICE_HOST") or "localhost"
        protocol = env.get("SERVICE_PROTOCOL") or "http"

        config = cls(
            gateway_url=(env.get("GATEWAY_URL") or DEFAULT_GATEWAY_URL).rstrip("/"),
            service_name=service_name,
            base_url=env.get("SERVICE_BASE_URL") or f"{protocol}://{host}:{port}",
            instance_id=env.get("SERVICE_INSTANCE_ID") or generate_instance_id(service_name),
            heartbeat_interval=_millis(env, "GATEWAY_HEARTBEAT_INTERVAL", DEFAULT_HEARTBEAT_INTERVAL_MS),
            retry_interval=_millis(env, "GATEWAY_RETRY_INTERVAL", DEFAULT_RETRY_INTERVAL_MS),
            health_check_interval=_millis(
                env, "GATEWAY_HEALTH_CHECK_INTERVAL", DEFAULT_HEALTH_CHECK_INTERVAL_MS
            ),
            enabled=(env.get("GATEWAY_REGISTRY_ENABLED") or "").lower() != "false",
            environment=env.get("ENVIRONMENT") or "development",
            version=env.get("SERVICE_VERSION") or "1.0.0",
            request_timeout=_millis(env, "GATEWAY_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT_MS),
        )

        logger.debug(f"Registration config loaded for {config.service_name} ({config.instance_id})")
        return config
