import logging
import threading
import time
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterable, Protocol

from .context import ok
from .duration import Duration, to_timeout_sec

logger = logging.getLogger(__name__)


class ExternalShutdownException(RuntimeError):
    """Raised when spin exits because the context was shutdown externally."""


class DriveResult(Enum):
    READY = "ready"
    TIMED_OUT = "timed_out"
    SHUTTING_DOWN = "shutting_down"


class Reactor(Protocol):
    """Anything that can run queued callbacks until a condition holds."""

    def drive_until(
        self,
        predicate: Callable[[], bool],
        timeout_sec: Duration | float | None = None,
    ) -> DriveResult:
        ...


class Executor:
    """Runs the callbacks queued on its nodes, only while explicitly driven.

    All callbacks run on the thread that calls spin/spin_once/drive_until;
    the executor never starts threads of its own.
    """

    def __init__(self):
        self._nodes = []
        self._stopped = False
        self._lock = threading.Lock()
        self._driving = False

    def add_node(self, node):
        if node not in self._nodes:
            self._nodes.append(node)

    def remove_node(self, node):
        if node in self._nodes:
            self._nodes.remove(node)

    def get_nodes(self) -> list:
        return list(self._nodes)

    def spin(self):
        result = self.drive_until(lambda: False)
        if result is DriveResult.SHUTTING_DOWN and not ok():
            raise ExternalShutdownException()

    def spin_once(self, timeout_sec: float | None = None) -> bool:
        """Run at most one ready callback, waiting up to timeout_sec for one; return True if one ran."""
        with self._driving_guard():
            return self._spin_once(timeout_sec)

    def spin_some(self):
        if not ok() or self._stopped:
            return
        with self._driving_guard():
            self._process_all_ready(self._nodes)

    def drive_until(
        self,
        predicate: Callable[[], bool],
        timeout_sec: Duration | float | None = None,
    ) -> DriveResult:
        """Run callbacks until predicate() is true, the timeout expires or the context shuts down.

        The predicate is checked first, so an already satisfied predicate
        returns READY without running any callback. Otherwise at least one
        non-blocking pass over the queues is made, even with a zero timeout.
        Driving an executor that is already being driven (for example from
        inside one of its own callbacks) raises RuntimeError.
        """
        timeout = to_timeout_sec(timeout_sec)
        with self._driving_guard():
            deadline = None if timeout is None else time.monotonic() + timeout
            spun = False
            while True:
                if predicate():
                    return DriveResult.READY
                if not ok() or self._stopped:
                    return DriveResult.SHUTTING_DOWN
                wait = 0.01
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        if spun:
                            return DriveResult.TIMED_OUT
                        remaining = 0
                    wait = min(wait, remaining)
                self._spin_once(wait)
                spun = True

    def spin_until_future_complete(self, future, timeout_sec: Duration | float | None = None) -> DriveResult:
        return self.drive_until(future.done, timeout_sec)

    def shutdown(self):
        self._stopped = True

    @contextmanager
    def _driving_guard(self):
        with self._lock:
            if self._driving:
                raise RuntimeError("Executor is already being driven; reentrant drive is not allowed")
            self._driving = True
        try:
            yield
        finally:
            with self._lock:
                self._driving = False

    def _spin_once(self, timeout_sec: float | None) -> bool:
        item = _pop_any_callback(self._nodes, timeout_sec, self._stopped)
        if not item:
            return False
        cb, msg, _node = item
        _invoke_callback(cb, msg)
        return True

    def _process_all_ready(self, nodes: Iterable):
        for node in list(nodes):
            while True:
                item = node._pop_callback()
                if not item:
                    break
                cb, msg = item
                _invoke_callback(cb, msg)


class SingleThreadedExecutor(Executor):
    """Runs callbacks sequentially in the calling thread."""

    def __init__(self):
        super().__init__()


def spin(node, executor: Executor | None = None):
    if executor is None:
        executor = SingleThreadedExecutor()
        executor.add_node(node)
        try:
            executor.spin()
        finally:
            executor.remove_node(node)
            executor.shutdown()
    else:
        added = False
        if node not in executor.get_nodes():
            executor.add_node(node)
            added = True
        try:
            executor.spin()
        finally:
            if added:
                executor.remove_node(node)


def spin_once(node, timeout_sec: float | None = None) -> bool:
    item = _pop_any_callback([node], timeout_sec, False)
    if not item:
        return False
    cb, msg, _node = item
    _invoke_callback(cb, msg)
    return True


def spin_some(node):
    for cb, msg in node._drain_callbacks():
        _invoke_callback(cb, msg)


def spin_until_future_complete(
    node,
    future,
    timeout_sec: Duration | float | None = None,
    *,
    executor: Executor | None = None,
) -> DriveResult:
    own_executor = executor is None
    exec_obj = executor or SingleThreadedExecutor()
    added = False
    if node not in exec_obj.get_nodes():
        exec_obj.add_node(node)
        added = True
    try:
        return exec_obj.spin_until_future_complete(future, timeout_sec)
    finally:
        if added:
            exec_obj.remove_node(node)
        if own_executor:
            exec_obj.shutdown()


def _invoke_callback(cb, msg):
    try:
        if msg is not None:
            cb(msg)
        else:
            cb()
    except Exception:
        logger.exception("Callback %r raised", cb)


def _pop_any_callback(nodes: Iterable, timeout_sec: float | None, stopped: bool):
    start = time.monotonic()
    while ok() and not stopped:
        for node in list(nodes):
            item = node._pop_callback()
            if item:
                cb, msg = item
                return (cb, msg, node)
        if timeout_sec is None:
            time.sleep(0.001)
            continue
        elapsed = time.monotonic() - start
        if elapsed >= max(timeout_sec, 0):
            return None
        time.sleep(0.001)
    return None
