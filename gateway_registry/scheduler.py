#!/usr/bin/env python3
"""
Periodic task scheduler

One daemon thread per task kind. A task first runs one interval after it
is armed, then every interval until disarmed. Re-arming a kind cancels the
previous task of that kind. No retry or backoff policy lives here.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class TaskKind(Enum):
    HEARTBEAT = "heartbeat"
    RETRY = "retry"
    HEALTH_CHECK = "health-check"


class PeriodicTask:
    """Cancelable handle for one periodic action"""

    def __init__(self, kind: TaskKind, interval: float, action: Callable[[], None]):
        self.kind = kind
        self.interval = interval
        self.action = action
        self._cancelled = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            name=f"gateway-registry-{kind.value}",
            daemon=True,
        )

    def start(self):
        self._thread.start()

    def cancel(self):
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def join(self, timeout: Optional[float] = None):
        if self._thread is not threading.current_thread() and self._thread.is_alive():
            self._thread.join(timeout)

    def _run(self):
        while not self._cancelled.wait(self.interval):
            try:
                self.action()
            except Exception:
                logger.exception(f"❌ Periodic {self.kind.value} task failed")


class Scheduler:
    def __init__(self):
        self._tasks: Dict[TaskKind, PeriodicTask] = {}
        self._lock = threading.Lock()

    def arm(self, kind: TaskKind, interval: float, action: Callable[[], None]) -> PeriodicTask:
        """
        Run action every interval seconds, first run one interval from now

        Args:
            kind: Task kind; any live task of the same kind is cancelled first
            interval: Seconds between runs
            action: Zero-argument callable

        Returns:
            PeriodicTask: the new handle
        """
        task = PeriodicTask(kind, interval, action)
        with self._lock:
            previous = self._tasks.pop(kind, None)
            if previous is not None:
                previous.cancel()
            self._tasks[kind] = task
            task.start()

        logger.debug(f"Armed {kind.value} task every {interval}s")
        return task

    def disarm(self, kind: TaskKind) -> bool:
        """Cancel the task of this kind. Returns False if none was armed."""
        with self._lock:
            task = self._tasks.pop(kind, None)
        if task is None:
            return False

        task.cancel()
        logger.debug(f"Disarmed {kind.value} task")
        return True

    def is_armed(self, kind: TaskKind) -> bool:
        with self._lock:
            return kind in self._tasks

    def armed_kinds(self) -> List[TaskKind]:
        with self._lock:
            return list(self._tasks)

    def shutdown(self, timeout: Optional[float] = None):
        """Cancel every task, then wait at most timeout seconds in total for the threads"""
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()

        for task in tasks:
            task.cancel()

        deadline = None if timeout is None else time.monotonic() + timeout
        for task in tasks:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            task.join(remaining)
