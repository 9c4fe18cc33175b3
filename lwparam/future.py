import logging
import threading
from typing import Any, Callable, Optional

from .exceptions import InvalidStateError

logger = logging.getLogger(__name__)


class Future:
    """Write-once result holder shared by blocking and callback consumers.

    Any number of threads may read a completed Future. It is fulfilled exactly
    once with set_result() or set_exception(); a second attempt raises
    InvalidStateError. There is no cancellation.
    """

    def __init__(self):
        self._event = threading.Event()
        self._result: Any = None
        self._exception: BaseException | None = None
        self._done = False
        self._callbacks: list[Callable[["Future"], None]] = []
        self._lock = threading.Lock()

    def done(self) -> bool:
        return self._done

    def result(self, timeout: Optional[float] = None):
        """Return the value, raising the stored exception if there is one.

        Waits up to ``timeout`` seconds (forever when None) for another thread
        to fulfil the Future. With a single-threaded executor, drive the
        executor until done() before calling this.
        """
        if not self._event.wait(timeout):
            raise TimeoutError("Future result not ready")
        if self._exception is not None:
            raise self._exception
        return self._result

    def exception(self) -> BaseException | None:
        if not self._done:
            return None
        return self._exception

    def set_result(self, value) -> None:
        with self._lock:
            if self._done:
                raise InvalidStateError("Future is already done")
            self._result = value
            self._done = True
        self._event.set()
        self._run_callbacks()

    def set_exception(self, exc: BaseException) -> None:
        with self._lock:
            if self._done:
                raise InvalidStateError("Future is already done")
            self._exception = exc
            self._done = True
        self._event.set()
        self._run_callbacks()

    def add_done_callback(self, callback: Callable[["Future"], None]) -> None:
        with self._lock:
            if self._done:
                run_now = True
            else:
                self._callbacks.append(callback)
                run_now = False
        if run_now:
            _invoke_done_callback(callback, self)

    def _run_callbacks(self):
        with self._lock:
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for cb in callbacks:
            _invoke_done_callback(cb, self)

    def __repr__(self) -> str:
        if not self._done:
            state = "pending"
        elif self._exception is not None:
            state = f"exception={self._exception!r}"
        else:
            state = f"result={self._result!r}"
        return f"<Future {state}>"


def completed_future(value) -> Future:
    """Return a Future that is already fulfilled with ``value``."""
    future = Future()
    future.set_result(value)
    return future


def _invoke_done_callback(cb, future):
    try:
        cb(future)
    except Exception:
        logger.exception("Future done callback %r raised", cb)
