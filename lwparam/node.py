import logging
import os
from collections import deque
from typing import Callable, Optional

from .context import get_transport
from .parameters import (
    ListParametersResult,
    Parameter,
    ParameterDescriptor,
    ParameterType,
    SetParametersResult,
    coerce_parameter,
)
from .transport import Transport
from .utils import is_valid_name, resolve_name
from .client import Client
from .service import Service

PARAMETER_SEPARATOR = "."


def _log_level_from_env() -> int:
    level = os.environ.get("LWPARAM_LOG_LEVEL", "INFO").strip()
    if level.isdigit():
        return int(level)
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


class _NodeLogger:
    """Minimal rclpy.get_logger() equivalent backed by Python logging."""

    _configured = False

    def __init__(self, name: str):
        if not _NodeLogger._configured and not logging.getLogger().handlers:
            logging.basicConfig(
                level=_log_level_from_env(),
                format="[%(levelname)s] %(name)s: %(message)s",
            )
            _NodeLogger._configured = True
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def warn(self, msg, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def fatal(self, msg, *args, **kwargs):
        self._logger.critical(msg, *args, **kwargs)

    def critical(self, msg, *args, **kwargs):
        self._logger.critical(msg, *args, **kwargs)


class Node:
    def __init__(
        self,
        name: str,
        namespace: str = "",
        *,
        allow_undeclared_parameters: bool = True,
        parameters: Optional[list] = None,
        start_parameter_services: bool = True,
        transport: Transport | None = None,
    ):
        if not is_valid_name(name) or "/" in name or name.startswith("~"):
            raise ValueError(f"Invalid node name '{name}'")
        self._name = name
        self._namespace = namespace if namespace.startswith("/") or namespace == "" else "/" + namespace
        self._transport = transport if transport is not None else get_transport()
        self._logger = _NodeLogger(self.get_fully_qualified_name())
        self._clients: list[Client] = []
        self._services: list[Service] = []
        self._callback_queue = deque()
        self._parameters: dict[str, Parameter] = {}
        self._descriptors: dict[str, ParameterDescriptor] = {}
        self._on_set_parameters_callbacks: list[Callable[[list[Parameter]], SetParametersResult]] = []
        self._allow_undeclared_parameters = allow_undeclared_parameters
        self._parameter_service = None

        if parameters:
            self.declare_parameters("", parameters)

        if start_parameter_services:
            from .parameter_service import ParameterService
            self._parameter_service = ParameterService(self)

    # ------------------- Logger / Namespace -------------------
    def get_logger(self):
        return self._logger

    def get_name(self) -> str:
        return self._name

    def get_namespace(self) -> str:
        return self._namespace if self._namespace else "/"

    def get_fully_qualified_name(self) -> str:
        ns = self.get_namespace().rstrip("/")
        return f"{ns}/{self._name}" if ns else f"/{self._name}"

    def resolve_service_name(self, name: str) -> str:
        return resolve_name(name, self._namespace, self._name)

    # ------------------- Parameters -------------------
    def declare_parameter(self, name: str, value=None, descriptor: ParameterDescriptor | None = None):
        """Declare a parameter locally; re-declaring returns the existing one."""
        if name in self._parameters:
            return self._parameters[name]
        param = Parameter(name, value)
        self._parameters[name] = param
        desc = descriptor or ParameterDescriptor()
        self._descriptors[name] = ParameterDescriptor(
            name=name, type=param.type, description=desc.description, read_only=desc.read_only,
        )
        return param

    def declare_parameters(self, namespace: str, parameters):
        """Bulk declare with optional namespace prefix."""
        ns = namespace.rstrip(PARAMETER_SEPARATOR) + PARAMETER_SEPARATOR if namespace else ""
        declared = []
        for p in parameters:
            if isinstance(p, Parameter):
                name, value = p.name, p.value
            else:
                name, value = p
            declared.append(self.declare_parameter(ns + name, value))
        return declared

    def undeclare_parameter(self, name: str) -> None:
        if name not in self._parameters:
            raise KeyError(f"Parameter '{name}' is not declared")
        if self._descriptors[name].read_only:
            raise ValueError(f"Parameter '{name}' is read-only")
        del self._parameters[name]
        del self._descriptors[name]

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def get_parameter(self, name: str) -> Parameter:
        if name in self._parameters:
            return self._parameters[name]
        if self._allow_undeclared_parameters:
            return Parameter(name, ParameterType.NOT_SET)
        raise KeyError(f"Parameter '{name}' is not declared")

    def get_parameters(self, names) -> list[Parameter]:
        return [self.get_parameter(n) for n in names]

    def get_parameter_or(self, name: str, alternative: Parameter | None = None) -> Parameter:
        if name in self._parameters:
            return self._parameters[name]
        return alternative if alternative is not None else Parameter(name, ParameterType.NOT_SET)

    def describe_parameter(self, name: str) -> ParameterDescriptor:
        desc = self._descriptors.get(name)
        if desc is not None:
            return ParameterDescriptor(
                name=desc.name, type=desc.type, description=desc.description, read_only=desc.read_only,
            )
        if self._allow_undeclared_parameters:
            return ParameterDescriptor(name=name)
        raise KeyError(f"Parameter '{name}' is not declared")

    def describe_parameters(self, names) -> list[ParameterDescriptor]:
        return [self.describe_parameter(n) for n in names]

    def add_on_set_parameters_callback(self, callback: Callable[[list[Parameter]], SetParametersResult]) -> None:
        """Register a validator called with the parameters about to be set."""
        self._on_set_parameters_callbacks.append(callback)

    def remove_on_set_parameters_callback(self, callback) -> None:
        self._on_set_parameters_callbacks.remove(callback)

    def set_parameters(self, parameters) -> list[SetParametersResult]:
        """Set parameters from Parameter objects or (name, value) tuples, one result per entry."""
        results = []
        for p in parameters:
            param = coerce_parameter(p)
            result = self._check_parameters([param])
            if result.successful:
                self._apply(param)
            results.append(result)
        return results

    def set_parameters_atomically(self, parameters) -> SetParametersResult:
        """Set all parameters or none of them."""
        params = [coerce_parameter(p) for p in parameters]
        result = self._check_parameters(params)
        if result.successful:
            for param in params:
                self._apply(param)
        return result

    def list_parameters(self, prefixes, depth: int) -> ListParametersResult:
        """List declared names matching ``prefixes`` up to ``depth`` levels (0 means unlimited).

        A name matches a prefix when it equals the prefix or continues it
        after a "." separator. Depth counts the separators below the matched
        prefix (or in the whole name when no prefixes are given).
        """
        prefixes = list(prefixes or [])
        result = ListParametersResult()
        for name in sorted(self._parameters):
            if prefixes:
                relative = _relative_to_prefixes(name, prefixes)
                if relative is None:
                    continue
            else:
                relative = name
            if depth and relative.count(PARAMETER_SEPARATOR) >= depth:
                continue
            result.names.append(name)
            if PARAMETER_SEPARATOR in name:
                parent = name.rsplit(PARAMETER_SEPARATOR, 1)[0]
                if parent not in result.prefixes:
                    result.prefixes.append(parent)
        return result

    def _check_parameters(self, params: list[Parameter]) -> SetParametersResult:
        for param in params:
            if param.name not in self._parameters and not self._allow_undeclared_parameters:
                return SetParametersResult(False, f"Parameter '{param.name}' not declared")
            desc = self._descriptors.get(param.name)
            if desc is not None and desc.read_only:
                return SetParametersResult(False, f"Parameter '{param.name}' is read-only")
        for callback in self._on_set_parameters_callbacks:
            result = callback(params)
            if not result.successful:
                return result
        return SetParametersResult(True, "")

    def _apply(self, param: Parameter) -> None:
        if param.type == ParameterType.NOT_SET:
            # Setting NOT_SET undeclares, as in rclpy.
            self._parameters.pop(param.name, None)
            self._descriptors.pop(param.name, None)
            return
        self._parameters[param.name] = param
        desc = self._descriptors.get(param.name) or ParameterDescriptor(name=param.name)
        self._descriptors[param.name] = ParameterDescriptor(
            name=param.name, type=param.type, description=desc.description, read_only=desc.read_only,
        )

    # ------------------- Clients / Services -------------------
    def create_client(self, srv_type, srv_name: str) -> Client:
        resolved = self.resolve_service_name(srv_name)
        client = Client(srv_type, resolved, transport=self._transport, enqueue_cb=self._enqueue_callback)
        self._clients.append(client)
        return client

    def create_service(self, srv_type, srv_name: str, callback) -> Service:
        resolved = self.resolve_service_name(srv_name)
        service = Service(srv_type, resolved, callback, transport=self._transport)
        self._services.append(service)
        return service

    def destroy_client(self, client: Client):
        try:
            client.destroy()
        finally:
            if client in self._clients:
                self._clients.remove(client)

    def destroy_service(self, service: Service):
        try:
            service.destroy()
        finally:
            if service in self._services:
                self._services.remove(service)

    def destroy_node(self):
        for client in list(self._clients):
            self.destroy_client(client)
        for service in list(self._services):
            self.destroy_service(service)
        self._parameter_service = None
        self._callback_queue.clear()

    # ---- executor enqueue/dequeue -----------------------------------
    def _enqueue_callback(self, cb, msg):
        self._callback_queue.append((cb, msg))

    def _drain_callbacks(self):
        drained = []
        while self._callback_queue:
            drained.append(self._callback_queue.popleft())
        return drained

    def _pop_callback(self):
        try:
            return self._callback_queue.popleft()
        except IndexError:
            return None


def _relative_to_prefixes(name: str, prefixes) -> str | None:
    for prefix in prefixes:
        if name == prefix:
            return ""
        if name.startswith(prefix + PARAMETER_SEPARATOR):
            return name[len(prefix) + 1:]
    return None


# --- Module-level helpers to mirror rclpy API --------------------------------
def create_node(name: str, **kwargs) -> Node:
    return Node(name, **kwargs)
