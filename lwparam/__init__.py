from .context import init, ok, shutdown, get_transport
from .duration import Duration
from .exceptions import (
    ConstructionError,
    InvalidStateError,
    ParameterClientError,
    ParameterValueError,
    ServiceResponseError,
    ShapeMismatchError,
    TransportError,
    UnfulfilledFutureError,
)
from .executors import (
    DriveResult,
    Executor,
    ExternalShutdownException,
    Reactor,
    SingleThreadedExecutor,
    spin,
    spin_once,
    spin_some,
    spin_until_future_complete,
)
from .future import Future
from .node import Node, create_node
from .parameters import (
    ListParametersResult,
    Parameter,
    ParameterDescriptor,
    ParameterType,
    ParameterValue,
    SetParametersResult,
)
from .client import Client, PendingCall
from .service import Service
from .parameter_client import AsyncParameterClient, CreateResult, SyncParameterClient
from .transport import LoopbackTransport, Transport

__all__ = [
    "init", "shutdown", "ok", "get_transport",
    "spin", "spin_once", "spin_some", "spin_until_future_complete",
    "Executor", "SingleThreadedExecutor", "Reactor", "DriveResult", "ExternalShutdownException",
    "Node", "create_node", "Future", "Duration",
    "Parameter", "ParameterType", "ParameterValue", "ParameterDescriptor",
    "SetParametersResult", "ListParametersResult",
    "Client", "PendingCall", "Service",
    "AsyncParameterClient", "SyncParameterClient", "CreateResult",
    "Transport", "LoopbackTransport",
    "ParameterClientError", "ConstructionError", "UnfulfilledFutureError", "ShapeMismatchError",
    "ParameterValueError", "ServiceResponseError", "TransportError", "InvalidStateError",
]
