"""Request/response records of the parameter services.

Each service type exposes nested ``Request`` and ``Response`` classes, the
same shape rclpy service types have (``GetParameters.Request()``).
"""
from __future__ import annotations

from .parameters import ListParametersResult, SetParametersResult


class _Record:
    __slots__ = ()

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, s) == getattr(other, s) for s in self.__slots__)

    def __repr__(self) -> str:
        fields = ", ".join(f"{s}={getattr(self, s)!r}" for s in self.__slots__)
        return f"{type(self).__qualname__}({fields})"


class GetParameters:
    SUFFIX = "__get_parameters"

    class Request(_Record):
        __slots__ = ("names",)

        def __init__(self, names=None):
            self.names = list(names or [])

    class Response(_Record):
        __slots__ = ("values",)

        def __init__(self, values=None):
            self.values = list(values or [])


class GetParameterTypes:
    SUFFIX = "__get_parameter_types"

    class Request(_Record):
        __slots__ = ("names",)

        def __init__(self, names=None):
            self.names = list(names or [])

    class Response(_Record):
        __slots__ = ("types",)

        def __init__(self, types=None):
            self.types = list(types or [])


class SetParameters:
    SUFFIX = "__set_parameters"

    class Request(_Record):
        __slots__ = ("parameters",)

        def __init__(self, parameters=None):
            self.parameters = list(parameters or [])

    class Response(_Record):
        __slots__ = ("results",)

        def __init__(self, results=None):
            self.results = list(results or [])


class SetParametersAtomically:
    SUFFIX = "__set_parameters_atomically"

    class Request(_Record):
        __slots__ = ("parameters",)

        def __init__(self, parameters=None):
            self.parameters = list(parameters or [])

    class Response(_Record):
        __slots__ = ("result",)

        def __init__(self, result: SetParametersResult | None = None):
            self.result = result if result is not None else SetParametersResult()


class ListParameters:
    SUFFIX = "__list_parameters"

    class Request(_Record):
        __slots__ = ("prefixes", "depth")

        DEPTH_RECURSIVE = 0

        def __init__(self, prefixes=None, depth: int = 0):
            self.prefixes = list(prefixes or [])
            self.depth = depth

    class Response(_Record):
        __slots__ = ("result",)

        def __init__(self, result: ListParametersResult | None = None):
            self.result = result if result is not None else ListParametersResult()


class DescribeParameters:
    SUFFIX = "__describe_parameters"

    class Request(_Record):
        __slots__ = ("names",)

        def __init__(self, names=None):
            self.names = list(names or [])

    class Response(_Record):
        __slots__ = ("descriptors",)

        def __init__(self, descriptors=None):
            self.descriptors = list(descriptors or [])


PARAMETER_SERVICE_TYPES = (
    GetParameters,
    GetParameterTypes,
    SetParameters,
    SetParametersAtomically,
    ListParameters,
    DescribeParameters,
)


def resolve_service_type(obj):
    """Return (request_cls, response_cls) for a service type with nested Request/Response."""
    req = getattr(obj, "Request", None)
    res = getattr(obj, "Response", None)
    if not isinstance(req, type) or not isinstance(res, type):
        raise TypeError(f"{obj!r} is not a service type (missing Request/Response classes)")
    return req, res
