"""Graph name helpers shared by nodes, clients and services."""
import re

SERVICE_REQUEST_PREFIX = "rq/"

# Tokens: alphanumerics and underscores, not starting with a digit.
_NAME_RE = re.compile(r"^~?/?([A-Za-z_][A-Za-z0-9_]*)(/[A-Za-z_][A-Za-z0-9_]*)*$")


def is_valid_name(name: str) -> bool:
    """Return True if ``name`` is a usable node or service name."""
    return bool(name) and _NAME_RE.match(name) is not None


def _absolute(*parts: str) -> str:
    tokens = [token for part in parts for token in part.split("/") if token]
    return "/" + "/".join(tokens)


def resolve_name(name: str, namespace: str, node_name: str) -> str:
    """Resolve a service name against a node, returning an absolute name.

    ``/foo`` stays as is, ``foo`` becomes ``<namespace>/foo`` and the
    private form ``~foo`` becomes ``<namespace>/<node_name>/foo``.
    """
    if name.startswith("/"):
        return _absolute(name)
    if name.startswith("~"):
        return _absolute(namespace, node_name, name[1:])
    return _absolute(namespace, name)


def service_request_channel(name: str) -> str:
    """Return the channel a resolved service name receives its requests on."""
    cleaned = name.lstrip("/")
    return f"{SERVICE_REQUEST_PREFIX}{cleaned}Request"
