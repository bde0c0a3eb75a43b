"""Prometheus metrics for the gateway registration agent"""

from prometheus_client import Counter, Gauge

registration_registered = Gauge(
    "gateway_registry_registered",
    "1 while the gateway holds this instance, 0 otherwise",
)
registration_attempts_total = Counter(
    "gateway_registry_registration_attempts_total",
    "Registration attempts against the gateway",
    ["outcome"],
)
heartbeats_total = Counter(
    "gateway_registry_heartbeats_total",
    "Heartbeats sent to the gateway",
    ["outcome"],
)
health_checks_total = Counter(
    "gateway_registry_health_checks_total",
    "Registry listings used to verify this instance is known",
    ["outcome"],
)
forced_reregistrations_total = Counter(
    "gateway_registry_forced_reregistrations_total",
    "Forced re-registrations",
    ["reason"],
)
deregistrations_total = Counter(
    "gateway_registry_deregistrations_total",
    "Deregistration calls made on shutdown",
    ["outcome"],
)
