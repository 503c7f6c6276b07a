"""
Backoff calculation.
"""

import random
from typing import Protocol

from .config import RetryConfig, RetryStrategy

# bounds 2**attempt; the delay stays a finite float
MAX_EXPONENT = 64


class RandomSource(Protocol):
    def random(self) -> float: ...


def compute_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    *,
    jitter: float = 0.3,
    rng: RandomSource | None = None,
) -> float:
    """
    Exponential backoff with additive jitter.

    Args:
        attempt: Zero-based attempt number
        base_delay: Delay for attempt 0, in seconds
        max_delay: Upper bound for the returned delay
        jitter: Jitter as a fraction of the raw delay, drawn from [0, jitter)
        rng: Source of randomness, anything with `.random()`

    Returns:
        Delay in seconds: min(base * 2**attempt + jitter_amount, max_delay)
    """
    if attempt < 0:
        raise ValueError(f"attempt must not be negative, got {attempt}")
    raw = base_delay * (2 ** min(attempt, MAX_EXPONENT))
    return _jittered(raw, max_delay, jitter, rng)


def calculate_backoff(
    attempt: int, config: RetryConfig, rng: RandomSource | None = None
) -> float:
    """
    Calculate backoff delay for a given attempt.

    Args:
        attempt: Zero-based attempt number
        config: Retry configuration
        rng: Source of randomness (default: the `random` module)

    Returns:
        Delay in seconds with jitter applied, capped at `config.max_delay`
    """
    if config.strategy == RetryStrategy.EXPONENTIAL:
        return compute_delay(
            attempt, config.base_delay, config.max_delay, jitter=config.jitter, rng=rng
        )
    if config.strategy == RetryStrategy.LINEAR:
        raw = config.base_delay * (attempt + 1)
    else:  # CONSTANT
        raw = config.base_delay
    return _jittered(raw, config.max_delay, config.jitter, rng)


def _jittered(raw: float, max_delay: float, jitter: float, rng: RandomSource | None) -> float:
    source = rng if rng is not None else random
    # cap applies after jitter
    jitter_amount = source.random() * jitter * raw if jitter > 0 else 0.0
    return min(raw + jitter_amount, max_delay)
