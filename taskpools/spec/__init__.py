"""Spec module - pool sizing and failure policies."""

from taskpools.spec.policy import (
    UNBOUNDED,
    FailurePolicy,
    FailurePolicyLike,
    FailurePolicyLiteral,
    PoolPolicies,
    ThreadAssignmentPolicy,
    normalize_failure_policy,
    round_half_away_from_zero,
)

__all__ = [
    "UNBOUNDED",
    "FailurePolicy",
    "FailurePolicyLike",
    "FailurePolicyLiteral",
    "PoolPolicies",
    "ThreadAssignmentPolicy",
    "normalize_failure_policy",
    "round_half_away_from_zero",
]
