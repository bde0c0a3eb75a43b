"""Gateway registration agent for microservice instances"""

from gateway_registry.agent import GatewayRegistryAgent
from gateway_registry.client import (
    HeartbeatOutcome,
    HeartbeatResult,
    RegisterResult,
    RegistrationClient,
    VerifyOutcome,
)
from gateway_registry.config import ConfigurationError, RegistrationConfig
from gateway_registry.scheduler import Scheduler, TaskKind
from gateway_registry.state import FAILURE_THRESHOLD, RegistrationState

__all__ = [
    "ConfigurationError",
    "FAILURE_THRESHOLD",
    "GatewayRegistryAgent",
    "HeartbeatOutcome",
    "HeartbeatResult",
    "RegisterResult",
    "RegistrationClient",
    "RegistrationConfig",
    "RegistrationState",
    "Scheduler",
    "TaskKind",
    "VerifyOutcome",
]
