from __future__ import annotations


class Duration:
    """Span of time used for blocking-call timeouts, mirroring rclpy.duration.Duration."""

    def __init__(self, *, seconds: float = 0.0, nanoseconds: int = 0):
        total_ns = int(nanoseconds)
        total_ns += int(seconds * 1_000_000_000)
        if total_ns < 0:
            raise ValueError("Duration must not be negative")
        self._nanoseconds = total_ns

    @property
    def nanoseconds(self) -> int:
        return self._nanoseconds

    def seconds(self) -> float:
        return self._nanoseconds / 1_000_000_000

    def __eq__(self, other) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._nanoseconds == other._nanoseconds

    def __hash__(self) -> int:
        return hash(self._nanoseconds)

    def __repr__(self) -> str:
        return f"Duration(nanoseconds={self._nanoseconds})"


def to_timeout_sec(timeout: Duration | float | int | None) -> float | None:
    """Normalize a Duration or number of seconds to float seconds (None stays None)."""
    if timeout is None:
        return None
    if isinstance(timeout, Duration):
        return timeout.seconds()
    seconds = float(timeout)
    if seconds < 0:
        raise ValueError("timeout must not be negative")
    return seconds
