"""Request/response transport used by clients and services.

Clients and services never talk to each other directly: a client endpoint
sends ``(sequence_number, request)`` on a service's request channel and the
transport later calls the client's ``deliver(sequence_number, response,
error)``. Delivery may happen on any thread; clients move the work onto
their node's callback queue.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .exceptions import TransportError
from .utils import service_request_channel

logger = logging.getLogger(__name__)

Deliver = Callable[[int, Any, Optional[str]], None]
Reply = Callable[..., None]
Handler = Callable[[Any, Reply], None]


class ClientEndpoint(ABC):
    @abstractmethod
    def send(self, sequence_number: int, request) -> None:
        ...

    @abstractmethod
    def destroy(self) -> None:
        ...


class ServerEndpoint(ABC):
    @abstractmethod
    def destroy(self) -> None:
        ...


class Transport(ABC):
    @abstractmethod
    def create_service_client(self, service_name: str, deliver: Deliver) -> ClientEndpoint:
        ...

    @abstractmethod
    def create_service_server(self, service_name: str, handler: Handler) -> ServerEndpoint:
        """Serve ``service_name``; ``handler(request, reply)`` must call reply at most once."""

    @abstractmethod
    def service_is_ready(self, service_name: str) -> bool:
        ...


class LoopbackTransport(Transport):
    """In-process transport connecting every node of one domain in this process.

    Server handlers run synchronously in the sending thread. Requests sent to
    a service nobody serves are dropped and never answered.
    """

    def __init__(self, domain_id: int = 0):
        self.domain_id = domain_id
        self._lock = threading.RLock()
        self._servers: dict[str, Handler] = {}

    def create_service_client(self, service_name: str, deliver: Deliver) -> ClientEndpoint:
        request_channel = service_request_channel(service_name)
        return _LoopbackClientEndpoint(self, request_channel, deliver)

    def create_service_server(self, service_name: str, handler: Handler) -> ServerEndpoint:
        request_channel = service_request_channel(service_name)
        with self._lock:
            if request_channel in self._servers:
                raise TransportError(f"Service '{service_name}' is already served in domain {self.domain_id}")
            self._servers[request_channel] = handler
        return _LoopbackServerEndpoint(self, request_channel)

    def service_is_ready(self, service_name: str) -> bool:
        request_channel = service_request_channel(service_name)
        with self._lock:
            return request_channel in self._servers

    def _dispatch(self, request_channel: str, request, reply: Reply) -> None:
        with self._lock:
            handler = self._servers.get(request_channel)
        if handler is None:
            logger.debug("No server on %s; request dropped", request_channel)
            return
        handler(request, reply)

    def _remove_server(self, request_channel: str) -> None:
        with self._lock:
            self._servers.pop(request_channel, None)


class _LoopbackClientEndpoint(ClientEndpoint):
    def __init__(self, transport: LoopbackTransport, request_channel: str, deliver: Deliver):
        self._transport = transport
        self._request_channel = request_channel
        self._deliver = deliver
        self._destroyed = False

    def send(self, sequence_number: int, request) -> None:
        if self._destroyed:
            raise TransportError(f"Endpoint {self._request_channel} was destroyed")
        replied = threading.Event()

        def reply(response=None, error: str | None = None):
            if replied.is_set():
                raise TransportError(f"Request {sequence_number} on {self._request_channel} already answered")
            replied.set()
            if self._destroyed:
                logger.debug(
                    "Reply to request %d on %s after destroy; dropped", sequence_number, self._request_channel
                )
                return
            self._deliver(sequence_number, response, error)

        self._transport._dispatch(self._request_channel, request, reply)

    def destroy(self) -> None:
        self._destroyed = True


class _LoopbackServerEndpoint(ServerEndpoint):
    def __init__(self, transport: LoopbackTransport, request_channel: str):
        self._transport = transport
        self._request_channel = request_channel

    def destroy(self) -> None:
        self._transport._remove_server(self._request_channel)
