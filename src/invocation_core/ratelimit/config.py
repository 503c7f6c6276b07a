"""
Rate limit configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitConfig:
    """
    Configuration for one service's sliding window.

    Attributes:
        max_requests: Maximum admissions inside any trailing window (default: 10)
        window: Window length in seconds (default: 60.0)
        buffer: Extra seconds added to computed waits so a waiter wakes up
            after the oldest admission has left the window (default: 0.1)
    """

    max_requests: int = 10
    window: float = 60.0
    buffer: float = 0.1

    def __post_init__(self) -> None:
        if self.max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {self.max_requests}")
        if self.window <= 0:
            raise ValueError(f"window must be positive, got {self.window}")
        if self.buffer < 0:
            raise ValueError(f"buffer must not be negative, got {self.buffer}")

    @classmethod
    def per_minute(cls, max_requests: int) -> "RateLimitConfig":
        """Preset for `max_requests` calls per minute."""
        return cls(max_requests=max_requests, window=60.0)

    @classmethod
    def per_second(cls, max_requests: int) -> "RateLimitConfig":
        """Preset for `max_requests` calls per second."""
        return cls(max_requests=max_requests, window=1.0, buffer=0.01)
