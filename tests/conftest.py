"""
Pytest configuration and shared fixtures for gateway registry tests.
"""

from unittest.mock import Mock

import pytest
import requests

from gateway_registry.client import (
    HeartbeatOutcome,
    HeartbeatResult,
    RegisterResult,
    RegistrationClient,
    VerifyOutcome,
)
from gateway_registry.config import RegistrationConfig


class FakeScheduler:
    """Records armed tasks; tests fire them by hand"""

    def __init__(self):
        self.tasks = {}
        self.arm_calls = []
        self.shutdown_calls = 0

    def arm(self, kind, interval, action):
        self.arm_calls.append((kind, interval))
        self.tasks[kind] = (interval, action)

    def disarm(self, kind):
        return self.tasks.pop(kind, None) is not None

    def is_armed(self, kind):
        return kind in self.tasks

    def armed_kinds(self):
        return list(self.tasks)

    def shutdown(self, timeout=None):
        self.shutdown_calls += 1
        self.tasks.clear()

    def fire(self, kind):
        interval, action = self.tasks[kind]
        action()

    def arm_count(self, kind):
        return sum(1 for k, _ in self.arm_calls if k is kind)


def _response(status_code=200, json_body=None, text=""):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    if json_body is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture
def config():
    return RegistrationConfig(
        gateway_url="http://gateway:8080",
        service_name="orders",
        base_url="http://orders:3000",
        instance_id="orders-1a2b3c4d",
        heartbeat_interval=5.0,
        retry_interval=15.0,
        health_check_interval=30.0,
        request_timeout=2.0,
    )


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture
def mock_client():
    """RegistrationClient double that succeeds by default"""
    client = Mock(spec=RegistrationClient)
    client.register.return_value = RegisterResult(ok=True, status_code=201)
    client.heartbeat.return_value = HeartbeatResult(HeartbeatOutcome.OK, status_code=200)
    client.verify.return_value = VerifyOutcome.PRESENT
    client.deregister.return_value = True
    return client


@pytest.fixture
def make_response():
    """Factory for canned requests.Response doubles"""
    return _response
