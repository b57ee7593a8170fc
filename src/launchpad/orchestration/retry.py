"""
launchpad.orchestration.retry - Bounded Retry With Backoff
============================================================

Retry configuration for stages that are safe to repeat. Only read-only,
side-effect-free stages (reading infrastructure outputs) carry a retry
policy; the policy table refuses one on any stage that mutates
infrastructure (see policy.py).

Delay Formula:
    base_delay = initial_delay * (backoff_multiplier ^ attempt)
    jitter     = random(0, base_delay * 0.1)
    delay      = min(base_delay + jitter, max_delay)

Example progression (initial_delay=1.0, multiplier=2.0):
    attempt 0: ~1.0s
    attempt 1: ~2.0s
    attempt 2: ~4.0s
"""

from __future__ import annotations

import random

from pydantic import BaseModel, Field

from launchpad.core.exceptions import CommandError


class RetryPolicy(BaseModel):
    """Exponential backoff with jitter for idempotent stages.

    Attributes:
        max_retries: Retries after the first attempt. 0 disables retrying.
        initial_delay: Base delay in seconds before the first retry.
        max_delay: Cap on any single delay.
        backoff_multiplier: Growth factor between retries.

    Example:
        >>> policy = RetryPolicy(max_retries=3, initial_delay=0.5)
        >>> policy.calculate_delay(2)  # ~2.0s
    """

    max_retries: int = Field(default=3, ge=0, le=10)
    initial_delay: float = Field(default=1.0, gt=0, le=30.0)
    max_delay: float = Field(default=30.0, gt=0, le=300.0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0, le=10.0)

    def calculate_delay(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (zero-based)."""
        base_delay = self.initial_delay * (self.backoff_multiplier ** attempt)
        jitter = random.uniform(0, base_delay * 0.1)
        return min(base_delay + jitter, self.max_delay)

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Whether a failure on zero-based ``attempt`` earns another try.

        Only command failures are transient candidates. A missing output
        name or a build error will fail the same way on every attempt.
        """
        return isinstance(error, CommandError) and attempt < self.max_retries
