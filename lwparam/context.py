import os
import threading

from .transport import LoopbackTransport, Transport

__all__ = ["init", "shutdown", "ok", "is_shutdown", "get_transport", "get_domain_id"]

_lock = threading.RLock()
_initialized = False
_shutdown = False
_transport = None
_domain_id = 0


def _domain_from_env() -> int:
    domain_env = os.environ.get("LWPARAM_DOMAIN_ID")
    # ROS 2 compatible: fall back to ROS_DOMAIN_ID
    if domain_env is None:
        domain_env = os.environ.get("ROS_DOMAIN_ID")
    try:
        return int(domain_env) if domain_env is not None else 0
    except ValueError:
        return 0


def init(args=None, *, domain_id: int | None = None, transport: Transport | None = None):
    """Create the process context; a no-op if it is already initialized.

    ``args`` is accepted for rclpy compatibility and ignored.
    """
    global _initialized, _shutdown, _transport, _domain_id
    del args
    with _lock:
        if _initialized:
            return
        _domain_id = domain_id if domain_id is not None else _domain_from_env()
        _transport = transport if transport is not None else LoopbackTransport(_domain_id)
        _initialized = True
        _shutdown = False


def shutdown():
    """Shut the context down; executors stop driving and report shutdown."""
    global _initialized, _shutdown, _transport
    with _lock:
        if not _initialized or _shutdown:
            return
        _shutdown = True
        _transport = None
        _initialized = False


def ok() -> bool:
    return _initialized and not _shutdown


def is_shutdown() -> bool:
    """Return True if context is shutting down or has shutdown."""
    return _shutdown


def get_transport() -> Transport:
    if not _initialized:
        raise RuntimeError("lwparam.init() must be called first")
    return _transport


def get_domain_id() -> int:
    return _domain_id
