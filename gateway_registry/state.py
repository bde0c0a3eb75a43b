#!/usr/bin/env python3
"""
Registration lifecycle state

Flags and counters owned by the agent:
- registered / retrying (never both true)
- consecutive heartbeat failures, escalating at FAILURE_THRESHOLD
- generation, bumped on every registration and every withdrawal so that
  results of calls made under an earlier registration can be recognised
"""

FAILURE_THRESHOLD = 3


class RegistrationState:
    """
    Mutable lifecycle flags and heartbeat failure counter.

    Not thread-safe on its own: the agent holds its lock around every call.
    """

    def __init__(self, failure_threshold: int = FAILURE_THRESHOLD):
        self.registered = False
        self.retrying = False
        self.consecutive_failures = 0
        self.failure_threshold = failure_threshold
        self.generation = 0

    def mark_registered(self):
        self.registered = True
        self.retrying = False
        self.consecutive_failures = 0
        self.generation += 1

    def mark_retrying(self) -> bool:
        """Flag a pending retry. Returns False if one was already pending."""
        if self.retrying:
            return False
        self.registered = False
        self.retrying = True
        return True

    def mark_unregistered(self):
        self.registered = False
        self.retrying = False
        self.consecutive_failures = 0
        self.generation += 1

    def heartbeat_succeeded(self):
        self.consecutive_failures = 0

    def heartbeat_failed(self) -> bool:
        """Count a failed heartbeat. Returns True once the threshold is reached."""
        self.consecutive_failures += 1
        return self.consecutive_failures >= self.failure_threshold

    def snapshot(self) -> dict:
        return {
            "registered": self.registered,
            "retrying": self.retrying,
            "consecutiveFailures": self.consecutive_failures,
            "failureThreshold": self.failure_threshold,
        }
