import itertools
import logging
import threading
import time
from typing import Any, Callable, NamedTuple, Optional

from .exceptions import ServiceResponseError, TransportError
from .future import Future
from .srv import resolve_service_type
from .transport import Transport

logger = logging.getLogger(__name__)


class PendingCall(NamedTuple):
    """One request that has been sent and not yet answered."""

    sequence_number: int
    service_name: str
    request: Any
    future: Future


class Client:
    """rclpy-like service client supporting any number of outstanding requests.

    Every call_async() registers a PendingCall keyed by its sequence number.
    Replies arrive from the transport on any thread and are queued on the
    owning node; the matching future is fulfilled when an executor runs that
    queue.
    """

    def __init__(
        self,
        service_type,
        service_name: str,
        *,
        transport: Transport,
        enqueue_cb=None,
    ):
        self._service_name = service_name
        self._transport = transport
        self._enqueue_cb = enqueue_cb or (lambda cb, msg: cb(msg))

        req_cls, res_cls = resolve_service_type(service_type)
        self._request_cls = req_cls
        self._response_cls = res_cls

        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._pending: dict[int, PendingCall] = {}

        self._endpoint = transport.create_service_client(service_name, self._on_reply)

    @property
    def service_name(self) -> str:
        return self._service_name

    @property
    def pending_calls(self) -> list[PendingCall]:
        with self._lock:
            return list(self._pending.values())

    def call_async(self, request, callback: Optional[Callable[[Future], None]] = None) -> Future:
        """Send ``request`` and return a Future resolved with the raw response.

        ``callback``, if given, is called with the Future once it is done.
        Nothing is retried: if the service never answers, the Future stays
        pending.
        """
        if not isinstance(request, self._request_cls):
            raise TypeError(
                f"Service '{self._service_name}' expects {self._request_cls.__qualname__}, "
                f"got {type(request).__qualname__}"
            )
        if self._endpoint is None:
            raise TransportError(f"Client for service '{self._service_name}' was destroyed")
        future = Future()
        if callback is not None:
            future.add_done_callback(callback)
        with self._lock:
            sequence_number = next(self._sequence)
            self._pending[sequence_number] = PendingCall(sequence_number, self._service_name, request, future)
        try:
            self._endpoint.send(sequence_number, request)
        except Exception:
            with self._lock:
                self._pending.pop(sequence_number, None)
            raise
        return future

    def service_is_ready(self) -> bool:
        return self._transport.service_is_ready(self._service_name)

    def wait_for_service(self, timeout_sec: Optional[float] = None) -> bool:
        """Poll until a server is available; return False if timeout_sec elapses first."""
        start = time.monotonic()
        while not self.service_is_ready():
            if timeout_sec is not None and time.monotonic() - start >= timeout_sec:
                return False
            time.sleep(0.01)
        return True

    def destroy(self):
        """Release the endpoint. Outstanding futures are left pending."""
        if self._endpoint is not None:
            self._endpoint.destroy()
            self._endpoint = None
        with self._lock:
            if self._pending:
                logger.debug(
                    "Client for '%s' destroyed with %d unanswered request(s)",
                    self._service_name, len(self._pending),
                )
            self._pending.clear()

    # Called by the transport, possibly from another thread.
    def _on_reply(self, sequence_number: int, response, error: str | None = None):
        self._enqueue_cb(self._complete, (sequence_number, response, error))

    # Runs on the executor thread.
    def _complete(self, reply):
        sequence_number, response, error = reply
        with self._lock:
            pending = self._pending.pop(sequence_number, None)
        if pending is None:
            logger.warning(
                "Dropping reply for unknown request %d on service '%s'",
                sequence_number, self._service_name,
            )
            return
        if error is not None:
            pending.future.set_exception(ServiceResponseError(self._service_name, error))
        else:
            pending.future.set_result(response)
