"""
Retry policies for data provider calls.

Provider calls back off linearly: attempt ``n`` (0-based) waits
``initial_interval * (n + 1)`` capped at ``maximum_interval``.

Defaults:
    Initial Interval: 1 second
    Maximum Interval: 10 seconds
    Maximum Attempts: 3
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional


@dataclass
class RetryConfig:
    """
    Retry configuration for provider calls.

    Attributes:
        initial_interval: Interval before the first retry
        maximum_interval: Maximum time between retries
        maximum_attempts: Maximum number of attempts (1 = no retry)
        non_retryable_errors: Error type names that are raised immediately
    """
    initial_interval: timedelta = field(default_factory=lambda: timedelta(seconds=1))
    maximum_interval: timedelta = field(default_factory=lambda: timedelta(seconds=10))
    maximum_attempts: int = 3
    non_retryable_errors: List[str] = field(default_factory=list)

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the given (0-based) failed attempt."""
        return min(
            self.initial_interval.total_seconds() * (attempt + 1),
            self.maximum_interval.total_seconds(),
        )

    def is_retryable(self, error: BaseException) -> bool:
        return type(error).__name__ not in self.non_retryable_errors


# Default provider policy (reads)
PROVIDER_RETRY_CONFIG = RetryConfig(
    initial_interval=timedelta(seconds=1),
    maximum_interval=timedelta(seconds=10),
    maximum_attempts=3,
    non_retryable_errors=[
        "ValidationError",
        "PathNotFoundError",
        "ConfigurationError",
    ],
)


# Persistence policy (writes)
PERSISTENCE_RETRY_CONFIG = RetryConfig(
    initial_interval=timedelta(seconds=2),
    maximum_interval=timedelta(seconds=30),
    maximum_attempts=4,
    non_retryable_errors=[
        "ValidationError",
        "IntegrityError",
    ],
)


# No retry policy
NO_RETRY_CONFIG = RetryConfig(
    initial_interval=timedelta(seconds=0),
    maximum_interval=timedelta(seconds=0),
    maximum_attempts=1,
    non_retryable_errors=[],
)


def get_provider_retry_policy() -> RetryConfig:
    """Get the retry policy for provider reads."""
    return PROVIDER_RETRY_CONFIG


def get_persistence_retry_policy() -> RetryConfig:
    """Get the retry policy for provider writes."""
    return PERSISTENCE_RETRY_CONFIG


def get_no_retry_policy() -> RetryConfig:
    """Get a policy with no retries."""
    return NO_RETRY_CONFIG


def create_custom_retry_policy(
    max_attempts: int = 3,
    initial_interval_seconds: float = 1,
    max_interval_seconds: float = 10,
    non_retryable_errors: Optional[List[str]] = None,
) -> RetryConfig:
    """
    Create a custom retry policy.

    Args:
        max_attempts: Maximum attempts
        initial_interval_seconds: Initial retry interval in seconds
        max_interval_seconds: Maximum retry interval in seconds
        non_retryable_errors: List of non-retryable error types

    Returns:
        Custom RetryConfig
    """
    return RetryConfig(
        initial_interval=timedelta(seconds=initial_interval_seconds),
        maximum_interval=timedelta(seconds=max_interval_seconds),
        maximum_attempts=max_attempts,
        non_retryable_errors=non_retryable_errors or [],
    )
