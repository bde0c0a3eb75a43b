#!/usr/bin/env python3
"""
Gateway Registry Client

Wire operations against the gateway registry:
- Register this instance
- Heartbeat (404 distinguished from other failures)
- Verify via the registry listing
- Deregister (best-effort)

No local state is kept here; results are returned as typed outcomes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from urllib.parse import quote

import requests

from gateway_registry.config import RegistrationConfig

logger = logging.getLogger(__name__)


class HeartbeatOutcome(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class VerifyOutcome(Enum):
    PRESENT = "present"
    ABSENT = "absent"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class RegisterResult:
    ok: bool
    status_code: Optional[int] = None
    reason: str = ""


@dataclass(frozen=True)
class HeartbeatResult:
    outcome: HeartbeatOutcome
    status_code: Optional[int] = None
    reason: str = ""


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class RegistrationClient:
    def __init__(self, config: RegistrationConfig, session: Optional[requests.Session] = None):
        """
        Initialize the registry client

        Args:
            config: Registration configuration
            session: HTTP session to issue requests with (default: a new session)
        """
        self.config = config
        self.session = session or requests.Session()

    def _instance_path(self) -> str:
        return f"{quote(self.config.service_name, safe='')}/{quote(self.config.instance_id, safe='')}"

    def register(self) -> RegisterResult:
        """
        Register this instance with the gateway

        Returns:
            RegisterResult: ok on 2xx, otherwise status and response text
                (or the transport error text)
        """
        url = f"{self.config.gateway_url}/registry/register"
        payload = {
            "service": self.config.service_name,
            "baseUrl": self.config.base_url,
            "instanceId": self.config.instance_id,
            "meta": {
                "environment": self.config.environment,
                "version": self.config.version,
                "startedAt": datetime.now(timezone.utc).isoformat(),
            },
        }

        try:
            response = self.session.post(url, json=payload, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            logger.error(f"❌ Error registering with gateway: {e}")
            return RegisterResult(ok=False, reason=str(e))

        if not _is_success(response.status_code):
            logger.warning(f"⚠️  Registration failed: {response.status_code} {response.text}")
            return RegisterResult(
                ok=False,
                status_code=response.status_code,
                reason=f"Registration failed: {response.status_code} {response.text}",
            )

        return RegisterResult(ok=True, status_code=response.status_code)

    def heartbeat(self) -> HeartbeatResult:
        """
        Send a heartbeat for this instance

        Returns:
            HeartbeatResult: OK on 2xx, NOT_FOUND on 404, FAILED otherwise
        """
        url = f"{self.config.gateway_url}/registry/heartbeat/{self._instance_path()}"

        try:
            response = self.session.post(url, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            logger.warning(f"⚠️  Failed to send heartbeat: {e}")
            return HeartbeatResult(HeartbeatOutcome.FAILED, reason=str(e))

        if _is_success(response.status_code):
            logger.debug("💓 Heartbeat sent successfully")
            return HeartbeatResult(HeartbeatOutcome.OK, status_code=response.status_code)

        if response.status_code == 404:
            return HeartbeatResult(
                HeartbeatOutcome.NOT_FOUND,
                status_code=404,
                reason="Instance not known to gateway",
            )

        logger.warning(f"⚠️  Heartbeat failed: {response.status_code}")
        return HeartbeatResult(
            HeartbeatOutcome.FAILED,
            status_code=response.status_code,
            reason=f"Heartbeat failed: {response.status_code} {response.text}",
        )

    def verify(self) -> VerifyOutcome:
        """
        Check the registry listing for this instance

        Returns:
            VerifyOutcome: PRESENT/ABSENT from a readable listing,
                UNREACHABLE when the gateway cannot tell us
        """
        url = f"{self.config.gateway_url}/registry"

        try:
            response = self.session.get(
                url,
                params={"service": self.config.service_name},
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"⚠️  Registry listing unreachable: {e}")
            return VerifyOutcome.UNREACHABLE

        if not _is_success(response.status_code):
            logger.warning(f"⚠️  Registry listing failed: {response.status_code}")
            return VerifyOutcome.UNREACHABLE

        try:
            body = response.json()
        except ValueError as e:
            logger.warning(f"⚠️  Registry listing is not valid JSON: {e}")
            return VerifyOutcome.UNREACHABLE

        if isinstance(body, dict):
            instances = body.get("instances")
        else:
            instances = body

        if not isinstance(instances, list):
            logger.warning("⚠️  Registry listing has an unexpected shape")
            return VerifyOutcome.UNREACHABLE

        for record in instances:
            if isinstance(record, dict) and record.get("instanceId") == self.config.instance_id:
                return VerifyOutcome.PRESENT

        return VerifyOutcome.ABSENT

    def deregister(self) -> bool:
        """
        Remove this instance from the gateway (best-effort, never raises)

        Returns:
            bool: True if the gateway acknowledged with 2xx
        """
        url = f"{self.config.gateway_url}/registry/{self._instance_path()}"

        try:
            response = self.session.delete(url, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            logger.error(f"❌ Failed to deregister from gateway: {e}")
            return False

        if not _is_success(response.status_code):
            logger.warning(f"⚠️  Deregistration failed: {response.status_code}")
            return False

        return True
