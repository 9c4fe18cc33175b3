"""Exception types raised by lwparam."""


class ParameterClientError(Exception):
    """Base class for parameter client failures."""


class ConstructionError(ParameterClientError):
    """The remote node name could not be resolved or an endpoint could not be created."""


class UnfulfilledFutureError(ParameterClientError):
    """A blocking call gave up before the remote node answered."""

    def __init__(self, service_name: str, reason):
        super().__init__(f"No response from service '{service_name}' ({reason.name.lower()})")
        self.service_name = service_name
        self.reason = reason


class ShapeMismatchError(ParameterClientError):
    """The response does not carry one entry per requested entry."""

    def __init__(self, service_name: str, expected: int, actual: int):
        super().__init__(
            f"Service '{service_name}' returned {actual} entries for a request of {expected}"
        )
        self.service_name = service_name
        self.expected = expected
        self.actual = actual


class ParameterValueError(ParameterClientError, ValueError):
    """A received value carries an unknown type code or a slot that does not match its type."""


class ServiceResponseError(ParameterClientError):
    """The remote service reported an error instead of a response."""

    def __init__(self, service_name: str, error: str):
        super().__init__(f"Service '{service_name}' failed: {error}")
        self.service_name = service_name
        self.error = error


class TransportError(RuntimeError):
    """An endpoint could not be created on the transport."""


class InvalidStateError(RuntimeError):
    """A Future was fulfilled more than once."""
