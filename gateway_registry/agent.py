#!/usr/bin/env python3
"""
Gateway Registration Agent

Keeps this service instance registered with the gateway:
- Registers on start, retries on a fixed interval until it succeeds
- Heartbeats while registered; a 404 or 3 consecutive failures re-register
- Periodically verifies the registry listing still contains this instance
- Deregisters on stop

All state transitions happen under one lock; network calls are made
outside it. Errors never propagate to the host process.
"""

import logging
import threading
from typing import Optional

from gateway_registry.client import HeartbeatOutcome, RegistrationClient, VerifyOutcome
from gateway_registry.config import RegistrationConfig
from gateway_registry.metrics import (
    deregistrations_total,
    forced_reregistrations_total,
    health_checks_total,
    heartbeats_total,
    registration_attempts_total,
    registration_registered,
)
from gateway_registry.scheduler import Scheduler, TaskKind
from gateway_registry.state import RegistrationState

logger = logging.getLogger(__name__)


class GatewayRegistryAgent:
    def __init__(
        self,
        config: RegistrationConfig,
        client: Optional[RegistrationClient] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize the agent

        Args:
            config: Registration configuration
            client: Gateway registry client (default: built from config)
            scheduler: Periodic task scheduler (default: threaded Scheduler)
        """
        self.config = config
        self.client = client or RegistrationClient(config)
        self.scheduler = scheduler or Scheduler()

        self._state = RegistrationState()
        self._lock = threading.Lock()
        self._registering = False
        self._started = False
        self._stopped = False

    @property
    def registered(self) -> bool:
        with self._lock:
            return self._state.registered

    def start(self):
        """Register once, then keep the registration alive in the background"""
        if not self.config.enabled:
            logger.warning("Gateway registry is disabled")
            return

        with self._lock:
            if self._started or self._stopped:
                return
            self._started = True

        logger.info(f"🔄 Registering with gateway: {self.config.gateway_url}")
        logger.info(f"   Service: {self.config.service_name}, Instance: {self.config.instance_id}")

        self.attempt_registration()

        with self._lock:
            if self._stopped:
                return
            self.scheduler.arm(
                TaskKind.HEALTH_CHECK,
                self.config.health_check_interval,
                self.health_check_tick,
            )

    def stop(self):
        """Halt all tasks and deregister if registered. Never raises."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            was_registered = self._state.registered
            self._state.mark_unregistered()

        registration_registered.set(0)
        self.scheduler.shutdown(timeout=self.config.request_timeout)

        if was_registered:
            self._deregister()

    def attempt_registration(self) -> bool:
        """
        Register with the gateway unless already registered or an attempt is in flight

        Returns:
            bool: True if this call registered the instance
        """
        with self._lock:
            if self._stopped or self._state.registered or self._registering:
                return False
            self._registering = True

        try:
            result = self.client.register()
        except Exception as e:
            logger.exception(f"❌ Unexpected error during registration: {e}")
            result = None

        ok = result is not None and result.ok
        retry_armed = False
        late_success = False

        with self._lock:
            self._registering = False
            if self._stopped:
                late_success = ok
            elif ok:
                self._state.mark_registered()
                self.scheduler.disarm(TaskKind.RETRY)
                self.scheduler.arm(
                    TaskKind.HEARTBEAT,
                    self.config.heartbeat_interval,
                    self.heartbeat_tick,
                )
            elif self._state.mark_retrying():
                self.scheduler.arm(
                    TaskKind.RETRY,
                    self.config.retry_interval,
                    self.retry_tick,
                )
                retry_armed = True

        registration_attempts_total.labels(outcome="success" if ok else "failure").inc()

        if late_success:
            logger.warning("Registration completed after shutdown began, withdrawing it")
            self._deregister()
            return False

        if ok:
            registration_registered.set(1)
            logger.info(f"✅ Registered: {self.config.service_name} ({self.config.instance_id})")
            logger.info(f"   Accessible at: {self.config.gateway_url}/{self.config.service_name}/...")
        else:
            reason = result.reason if result is not None else "unexpected error"
            logger.error(f"❌ Registration failed: {reason}")
            if retry_armed:
                logger.warning(f"   Retrying every {self.config.retry_interval}s...")

        return ok

    def retry_tick(self):
        with self._lock:
            if self._stopped or self._state.registered or self._registering:
                return

        logger.info("🔄 Retrying registration...")
        self.attempt_registration()

    def heartbeat_tick(self):
        with self._lock:
            if self._stopped or not self._state.registered:
                return
            generation = self._state.generation

        result = self.client.heartbeat()
        heartbeats_total.labels(outcome=result.outcome.value).inc()

        force_reason = None
        with self._lock:
            # Registration may have been withdrawn or replaced while the call was in flight
            if self._stopped or self._state.generation != generation:
                return

            if result.outcome is HeartbeatOutcome.OK:
                self._state.heartbeat_succeeded()
            elif result.outcome is HeartbeatOutcome.NOT_FOUND:
                force_reason = "heartbeat_not_found"
            elif self._state.heartbeat_failed():
                force_reason = "heartbeat_failures"
            failures = self._state.consecutive_failures

        if result.outcome is HeartbeatOutcome.NOT_FOUND:
            logger.warning("⚠️  Gateway does not know this instance (heartbeat 404)")
        elif result.outcome is HeartbeatOutcome.FAILED:
            logger.warning(
                f"⚠️  Heartbeat failed ({failures}/{self._state.failure_threshold}): {result.reason}"
            )

        if force_reason:
            self.force_reregistration(force_reason, generation)

    def health_check_tick(self):
        with self._lock:
            if self._stopped or not self._state.registered:
                return
            generation = self._state.generation

        outcome = self.client.verify()
        health_checks_total.labels(outcome=outcome.value).inc()

        if outcome is VerifyOutcome.ABSENT:
            logger.warning("⚠️  Instance missing from gateway registry listing")
            self.force_reregistration("health_check_absent", generation)
        elif outcome is VerifyOutcome.UNREACHABLE:
            logger.debug("Registry listing unavailable, leaving registration as is")

    def force_reregistration(self, reason: str, generation: Optional[int] = None) -> bool:
        """
        Drop the current registration and register again immediately

        Idempotent: only the first of concurrent callers proceeds.

        Args:
            reason: Metric label and log text
            generation: Registration the evidence was gathered under; a
                mismatch means it is already replaced and nothing is done

        Returns:
            bool: True if this call performed the reset
        """
        with self._lock:
            if self._stopped or not self._state.registered:
                return False
            if generation is not None and generation != self._state.generation:
                return False
            self.scheduler.disarm(TaskKind.HEARTBEAT)
            self._state.mark_unregistered()

        registration_registered.set(0)
        forced_reregistrations_total.labels(reason=reason).inc()
        logger.warning(f"🔄 Forcing re-registration ({reason})")

        self.attempt_registration()
        return True

    def _deregister(self):
        try:
            ok = self.client.deregister()
        except Exception as e:
            logger.error(f"❌ Failed to deregister from gateway: {e}")
            ok = False

        deregistrations_total.labels(outcome="success" if ok else "failure").inc()
        if ok:
            logger.info("Service deregistered from gateway")

    def registration_info(self) -> dict:
        with self._lock:
            snapshot = self._state.snapshot()

        return {
            "registered": snapshot["registered"],
            "serviceName": self.config.service_name,
            "instanceId": self.config.instance_id,
            "baseUrl": self.config.base_url,
            "gatewayUrl": self.config.gateway_url,
            "retrying": snapshot["retrying"],
            "consecutiveFailures": snapshot["consecutiveFailures"],
        }
