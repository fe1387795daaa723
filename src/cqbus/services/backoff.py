"""Backoff policy validation and retry-delay calculation.

``validate`` and ``delay_milliseconds`` are pure functions of the policy;
``BackoffCalculator`` binds a policy to the randomness source used by the
Random algorithm and serializes draws so one calculator can be shared by
concurrent dispatch calls.
"""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass

from cqbus.config.models import BackoffPolicy, RetryAlgorithm
from cqbus.domain.errors import ConfigurationError

_DELAY_POSITIVE = "'delay' must be greater than 0."


def validate(policy: BackoffPolicy) -> list[str]:
    """Return every rule *policy* breaks, in reporting order. Empty means valid."""
    violations: list[str] = []

    if policy.delay < 0:
        violations.append("'delay' must be greater than or equal to 0.")
    if policy.maximum_delay < 0:
        violations.append("'maximum_delay' must be greater than or equal to 0.")

    algorithm = policy.algorithm
    if algorithm == RetryAlgorithm.EXPONENTIAL:
        if policy.delay <= 0:
            violations.append(_DELAY_POSITIVE)
        if policy.exponential_base <= 1:
            violations.append("'exponential_base' must be greater than 1.")
    elif algorithm == RetryAlgorithm.LINEAR:
        if policy.delay <= 0:
            violations.append(_DELAY_POSITIVE)
        elif policy.maximum_delay != 0:
            violations.append("'maximum_delay' must be 0 when 'algorithm' is Linear.")
    elif algorithm == RetryAlgorithm.RANDOM:
        if policy.delay <= 0:
            violations.append(_DELAY_POSITIVE)
        if policy.random_variation <= 0:
            violations.append("'random_variation' must be greater than 0.")
        elif policy.random_variation > policy.delay:
            violations.append("'random_variation' must be less than or equal to 'delay'.")
        if policy.maximum_delay != 0:
            violations.append("'maximum_delay' must be 0 when 'algorithm' is Random.")

    if not isinstance(algorithm, RetryAlgorithm):
        violations.append("'algorithm' is not a valid retry algorithm.")
    if policy.maximum_retries < 0:
        violations.append("'maximum_retries' must be greater than or equal to 0.")

    return violations


def ensure_valid(policy: BackoffPolicy) -> None:
    """Raise ConfigurationError listing every violation of *policy*."""
    violations = validate(policy)
    if violations:
        raise ConfigurationError(violations)


def delay_milliseconds(
    policy: BackoffPolicy,
    attempt: int,
    rng: random.Random | None = None,
) -> int:
    """Milliseconds to wait after failed *attempt* (1-based) before the next one.

    A non-positive base delay disables backoff for every algorithm. Only the
    Random algorithm consumes *rng*; a private generator is created when none
    is given.
    """
    if attempt < 1:
        msg = f"attempt must be >= 1, got {attempt}"
        raise ValueError(msg)

    base = policy.delay
    if base <= 0:
        return 0

    algorithm = policy.algorithm
    if algorithm == RetryAlgorithm.EXPONENTIAL:
        if policy.exponential_base > 1:
            return int(policy.exponential_base ** (attempt - 1)) * base
    elif algorithm == RetryAlgorithm.FIXED:
        return base
    elif algorithm == RetryAlgorithm.LINEAR:
        return base * attempt
    elif algorithm == RetryAlgorithm.RANDOM:
        variation = policy.random_variation
        if 0 < variation < base:
            return (rng or random.Random()).randint(base - variation, base + variation)
    return 0


def retry_limit_reached(policy: BackoffPolicy, attempt: int, delay: int) -> bool:
    """Whether the dispatcher must give up after failed *attempt* with *delay* ms pending."""
    if policy.algorithm == RetryAlgorithm.NONE:
        return True
    if policy.maximum_retries > 0 and attempt > policy.maximum_retries:
        return True
    return policy.maximum_delay > 0 and delay > policy.maximum_delay


@dataclass(frozen=True)
class RetryStep:
    """One row of a retry schedule preview."""

    attempt: int
    delay_ms: int
    retry: bool


class BackoffCalculator:
    """Delay calculator owning the randomness source for one policy."""

    def __init__(self, policy: BackoffPolicy, *, rng: random.Random | None = None) -> None:
        self._policy = policy
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.Lock()

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    def delay_milliseconds(self, attempt: int) -> int:
        if self._policy.algorithm == RetryAlgorithm.RANDOM:
            with self._lock:
                return delay_milliseconds(self._policy, attempt, self._rng)
        return delay_milliseconds(self._policy, attempt)

    def schedule(self, attempts: int) -> list[RetryStep]:
        """Preview the decision taken after each of the first *attempts* failures.

        Stops at the first step where the dispatcher would give up.
        """
        steps: list[RetryStep] = []
        for attempt in range(1, attempts + 1):
            delay = self.delay_milliseconds(attempt)
            retry = not retry_limit_reached(self._policy, attempt, delay)
            steps.append(RetryStep(attempt=attempt, delay_ms=delay, retry=retry))
            if not retry:
                break
        return steps
