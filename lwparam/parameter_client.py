"""Clients for reading and writing another node's parameters.

AsyncParameterClient returns a Future per call and never blocks.
SyncParameterClient wraps it and blocks by driving an executor until that
call's Future is done.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, NamedTuple, Optional

from .client import Client, PendingCall
from .duration import Duration, to_timeout_sec
from .exceptions import ConstructionError, ShapeMismatchError, UnfulfilledFutureError
from .executors import DriveResult, Executor, Reactor, SingleThreadedExecutor, spin_until_future_complete
from .future import Future, completed_future
from .parameters import (
    ListParametersResult,
    Parameter,
    ParameterDescriptor,
    ParameterMsg,
    ParameterType,
    SetParametersResult,
    coerce_parameter,
    decode_parameter_type,
)
from .srv import (
    PARAMETER_SERVICE_TYPES,
    DescribeParameters,
    GetParameters,
    GetParameterTypes,
    ListParameters,
    SetParameters,
    SetParametersAtomically,
)
from .utils import is_valid_name

logger = logging.getLogger(__name__)

DoneCallback = Optional[Callable[[Future], None]]


class ParameterEndpoints(NamedTuple):
    """The service clients of one AsyncParameterClient, in PARAMETER_SERVICE_TYPES order."""

    get_parameters: Client
    get_parameter_types: Client
    set_parameters: Client
    set_parameters_atomically: Client
    list_parameters: Client
    describe_parameters: Client


class CreateResult(NamedTuple):
    """Outcome of a create() factory: exactly one of ``client`` and ``error`` is set."""

    client: Any = None
    error: Optional[ConstructionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AsyncParameterClient:
    """Non-blocking access to the parameters of ``remote_node_name``.

    Every operation sends one request and immediately returns a Future for
    the converted result. The optional ``callback`` is called with that
    Future once it is done. Futures are only fulfilled while an executor
    that holds ``node`` is being driven.

    Args:
        node: Local node whose transport and callback queue are used.
        remote_node_name: Node owning the parameters; defaults to ``node`` itself.

    Raises:
        ConstructionError: The name is invalid or a service client could not be created.
    """

    def __init__(self, node, remote_node_name: str = ""):
        self._node = node
        remote = remote_node_name or node.get_name()
        if not is_valid_name(remote):
            raise ConstructionError(f"Invalid remote node name '{remote}'")
        self._remote_node_name = remote

        created = []
        try:
            for srv_type in PARAMETER_SERVICE_TYPES:
                created.append(node.create_client(srv_type, remote + srv_type.SUFFIX))
        except Exception as e:
            for client in created:
                node.destroy_client(client)
            raise ConstructionError(f"Could not create parameter clients for node '{remote}': {e}") from e
        self._endpoints = ParameterEndpoints(*created)
        logger.debug("Parameter client for '%s' created on node '%s'", remote, node.get_name())

    @classmethod
    def create(cls, node, remote_node_name: str = "") -> CreateResult:
        """Like the constructor, but returns construction failures instead of raising them."""
        try:
            return CreateResult(client=cls(node, remote_node_name))
        except ConstructionError as e:
            return CreateResult(error=e)

    @property
    def remote_node_name(self) -> str:
        return self._remote_node_name

    @property
    def endpoints(self) -> ParameterEndpoints:
        return self._endpoints

    def get_parameters(self, names, callback: DoneCallback = None) -> Future:
        """Future[list[Parameter]], one per name and in request order."""
        names = list(names)
        if not names:
            return _completed([], callback)
        service = self._endpoints.get_parameters

        def transform(response: GetParameters.Response) -> list[Parameter]:
            _check_cardinality(service.service_name, len(names), len(response.values))
            return [Parameter.from_parameter_msg(ParameterMsg(n, v)) for n, v in zip(names, response.values)]

        return _call(service, GetParameters.Request(names), transform, callback)

    def get_parameter_types(self, names, callback: DoneCallback = None) -> Future:
        """Future[list[ParameterType]], one per name and in request order."""
        names = list(names)
        if not names:
            return _completed([], callback)
        service = self._endpoints.get_parameter_types

        def transform(response: GetParameterTypes.Response) -> list[ParameterType]:
            _check_cardinality(service.service_name, len(names), len(response.types))
            return [decode_parameter_type(code) for code in response.types]

        return _call(service, GetParameterTypes.Request(names), transform, callback)

    def set_parameters(self, parameters, callback: DoneCallback = None) -> Future:
        """Future[list[SetParametersResult]], one per entry.

        Entries are applied independently: some may succeed while others fail.
        """
        msgs = [coerce_parameter(p).to_parameter_msg() for p in parameters]
        if not msgs:
            return _completed([], callback)
        service = self._endpoints.set_parameters

        def transform(response: SetParameters.Response) -> list[SetParametersResult]:
            _check_cardinality(service.service_name, len(msgs), len(response.results))
            return list(response.results)

        return _call(service, SetParameters.Request(msgs), transform, callback)

    def set_parameters_atomically(self, parameters, callback: DoneCallback = None) -> Future:
        """Future[SetParametersResult] for the whole batch, as reported by the remote node."""
        msgs = [coerce_parameter(p).to_parameter_msg() for p in parameters]

        def transform(response: SetParametersAtomically.Response) -> SetParametersResult:
            return response.result

        return _call(
            self._endpoints.set_parameters_atomically, SetParametersAtomically.Request(msgs), transform, callback
        )

    def list_parameters(
        self,
        prefixes=None,
        depth: int = ListParameters.Request.DEPTH_RECURSIVE,
        callback: DoneCallback = None,
    ) -> Future:
        """Future[ListParametersResult]; ``depth`` 0 means no depth limit."""
        if isinstance(prefixes, (str, bytes)):
            raise TypeError(f"prefixes must be a list of names, got {prefixes!r}")
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise ValueError(f"depth must be a non-negative integer, got {depth!r}")

        def transform(response: ListParameters.Response) -> ListParametersResult:
            return response.result

        return _call(
            self._endpoints.list_parameters, ListParameters.Request(prefixes, depth), transform, callback
        )

    def describe_parameters(self, names, callback: DoneCallback = None) -> Future:
        """Future[list[ParameterDescriptor]], one per name and in request order."""
        names = list(names)
        if not names:
            return _completed([], callback)
        service = self._endpoints.describe_parameters

        def transform(response: DescribeParameters.Response) -> list[ParameterDescriptor]:
            _check_cardinality(service.service_name, len(names), len(response.descriptors))
            return list(response.descriptors)

        return _call(service, DescribeParameters.Request(names), transform, callback)

    def pending_calls(self) -> list[PendingCall]:
        """Requests sent by this client that have not been answered yet."""
        return [call for client in self._endpoints for call in client.pending_calls]

    def services_are_ready(self) -> bool:
        return all(client.service_is_ready() for client in self._endpoints)

    def wait_for_services(self, timeout_sec: Duration | float | None = None) -> bool:
        timeout = to_timeout_sec(timeout_sec)
        start = time.monotonic()
        for client in self._endpoints:
            remaining = None if timeout is None else max(0.0, timeout - (time.monotonic() - start))
            if not client.wait_for_service(remaining):
                return False
        return True

    def destroy(self) -> None:
        for client in self._endpoints:
            self._node.destroy_client(client)


class SyncParameterClient:
    """Blocking access to the parameters of ``remote_node_name``.

    Each call sends the request and then drives an executor until the
    answer arrives. Without ``executor`` a private SingleThreadedExecutor is
    used; a shared executor must not already be driven when a call is made,
    so do not call these methods from a callback running on that executor.

    Raises:
        ConstructionError: As for AsyncParameterClient.
    """

    def __init__(
        self,
        node,
        remote_node_name: str = "",
        *,
        executor: Reactor | None = None,
        timeout_sec: Duration | float | None = None,
    ):
        self._node = node
        self._owns_executor = executor is None
        self._executor = executor if executor is not None else SingleThreadedExecutor()
        self._timeout_sec = to_timeout_sec(timeout_sec)
        self._async_client = AsyncParameterClient(node, remote_node_name)

    @classmethod
    def create(cls, node, remote_node_name: str = "", **kwargs) -> CreateResult:
        """Like the constructor, but returns construction failures instead of raising them."""
        try:
            return CreateResult(client=cls(node, remote_node_name, **kwargs))
        except ConstructionError as e:
            return CreateResult(error=e)

    @property
    def async_client(self) -> AsyncParameterClient:
        return self._async_client

    def get_parameters(self, names) -> list[Parameter]:
        future = self._async_client.get_parameters(names)
        return self._wait(future, self._async_client.endpoints.get_parameters)

    def get_parameter_types(self, names) -> list[ParameterType]:
        future = self._async_client.get_parameter_types(names)
        return self._wait(future, self._async_client.endpoints.get_parameter_types)

    def set_parameters(self, parameters) -> list[SetParametersResult]:
        future = self._async_client.set_parameters(parameters)
        return self._wait(future, self._async_client.endpoints.set_parameters)

    def set_parameters_atomically(self, parameters) -> SetParametersResult:
        future = self._async_client.set_parameters_atomically(parameters)
        return self._wait(future, self._async_client.endpoints.set_parameters_atomically)

    def list_parameters(self, prefixes=None, depth: int = ListParameters.Request.DEPTH_RECURSIVE) -> ListParametersResult:
        future = self._async_client.list_parameters(prefixes, depth)
        return self._wait(future, self._async_client.endpoints.list_parameters)

    def describe_parameters(self, names) -> list[ParameterDescriptor]:
        future = self._async_client.describe_parameters(names)
        return self._wait(future, self._async_client.endpoints.describe_parameters)

    def wait_for_services(self, timeout_sec: Duration | float | None = None) -> bool:
        return self._async_client.wait_for_services(timeout_sec)

    def destroy(self) -> None:
        self._async_client.destroy()
        if self._owns_executor:
            self._executor.shutdown()

    def _wait(self, future: Future, service: Client):
        if not future.done():
            if isinstance(self._executor, Executor):
                result = spin_until_future_complete(
                    self._node, future, self._timeout_sec, executor=self._executor
                )
            else:
                result = self._executor.drive_until(future.done, self._timeout_sec)
            if result is not DriveResult.READY:
                raise UnfulfilledFutureError(service.service_name, result)
        return future.result()


def _call(service: Client, request, transform, callback: DoneCallback) -> Future:
    """Send ``request`` and return a Future for ``transform(response)``.

    Failures of the call or of the transform are stored in the returned
    Future rather than raised.
    """
    result_future = Future()
    if callback is not None:
        result_future.add_done_callback(callback)

    def on_response(raw_future: Future):
        try:
            value = transform(raw_future.result())
        except Exception as e:
            result_future.set_exception(e)
        else:
            result_future.set_result(value)

    service.call_async(request, on_response)
    return result_future


def _completed(value, callback: DoneCallback) -> Future:
    future = completed_future(value)
    if callback is not None:
        future.add_done_callback(callback)
    return future


def _check_cardinality(service_name: str, expected: int, actual: int) -> None:
    if expected != actual:
        raise ShapeMismatchError(service_name, expected, actual)
