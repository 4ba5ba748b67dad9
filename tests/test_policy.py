from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from taskpools.core.exceptions import ConfigurationError
from taskpools.spec.policy import (
    UNBOUNDED,
    FailurePolicy,
    PoolPolicies,
    ThreadAssignmentPolicy,
    normalize_failure_policy,
    round_half_away_from_zero,
)

pytestmark = [pytest.mark.xdist_group("unit")]


def _policy(min_threads: int = 1, max_threads: int = 4, percent: float = 0.25) -> ThreadAssignmentPolicy:
    return ThreadAssignmentPolicy(min_threads=min_threads, max_threads=max_threads, percent=percent)


class TestRounding:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.0, 0), (0.25, 0), (0.49, 0), (0.5, 1), (1.5, 2), (2.5, 3), (2.0, 2), (3.75, 4)],
    )
    def test_ties_round_up(self, value: float, expected: int):
        assert round_half_away_from_zero(value) == expected

    def test_differs_from_builtin_round(self):
        assert round(2.5) == 2
        assert round_half_away_from_zero(2.5) == 3

    def test_negative_ties_round_down(self):
        assert round_half_away_from_zero(-2.5) == -3


class TestGetNumberOfThreads:
    def test_percent_of_total(self):
        assert _policy().get_number_of_threads(8, 8) == 2

    def test_capped_by_remaining(self):
        policy = _policy(min_threads=0, max_threads=UNBOUNDED, percent=1.0)
        assert policy.get_number_of_threads(remaining_threads=3, total_threads=8) == 3

    def test_capped_by_max_threads(self):
        assert _policy(max_threads=4, percent=0.5).get_number_of_threads(64, 64) == 4

    def test_min_threads_exceeds_remaining(self):
        # Intended over-allocation on small machines
        assert _policy(min_threads=1).get_number_of_threads(remaining_threads=0, total_threads=1) == 1

    def test_zero_total_still_gets_minimum(self):
        assert _policy(min_threads=2, max_threads=4).get_number_of_threads(0, 0) == 2

    def test_zero_minimum_can_return_zero(self):
        assert _policy(min_threads=0).get_number_of_threads(1, 1) == 0

    def test_full_percent_takes_everything_left(self):
        policy = _policy(min_threads=1, max_threads=UNBOUNDED, percent=1.0)
        assert policy.get_number_of_threads(remaining_threads=4, total_threads=8) == 4

    def test_half_rounds_away_from_zero(self):
        # 10 * 0.25 = 2.5
        assert _policy(min_threads=0, max_threads=10).get_number_of_threads(10, 10) == 3

    def test_percent_above_one(self):
        policy = _policy(min_threads=0, max_threads=UNBOUNDED, percent=2.0)
        assert policy.get_number_of_threads(remaining_threads=16, total_threads=4) == 8

    def test_huge_percent_saturates_at_remaining(self):
        policy = _policy(min_threads=0, max_threads=UNBOUNDED, percent=1e308)
        assert policy.get_number_of_threads(remaining_threads=5, total_threads=8) == 5

    def test_infinite_percent_saturates_at_remaining(self):
        policy = _policy(min_threads=1, max_threads=4, percent=float("inf"))
        assert policy.get_number_of_threads(remaining_threads=3, total_threads=8) == 3

    def test_infinite_percent_of_zero_total(self):
        policy = _policy(min_threads=1, max_threads=4, percent=float("inf"))
        assert policy.get_number_of_threads(remaining_threads=0, total_threads=0) == 1

    def test_is_pure(self):
        policy = _policy()
        assert [policy.get_number_of_threads(6, 12) for _ in range(3)] == [3, 3, 3]

    @pytest.mark.parametrize("percent", [0.0, 0.1, 0.25, 0.33, 0.5, 0.75, 1.0])
    @pytest.mark.parametrize(("min_threads", "max_threads"), [(0, 0), (0, 3), (1, 4), (2, 2), (3, 16)])
    @pytest.mark.parametrize("total", [0, 1, 2, 7, 16])
    def test_result_within_bounds(self, percent: float, min_threads: int, max_threads: int, total: int):
        policy = _policy(min_threads, max_threads, percent)
        for remaining in range(total + 1):
            n = policy.get_number_of_threads(remaining, total)
            assert min_threads <= n <= max_threads
            desired = round_half_away_from_zero(total * percent)
            if desired <= remaining and min_threads <= desired <= max_threads:
                assert n == desired
            if n > remaining:
                # only the floor can push past what's left
                assert n == min_threads


class TestValidation:
    @pytest.mark.parametrize("percent", [-0.01, -1.0, float("-inf"), float("nan")])
    def test_negative_percent_rejected(self, percent: float):
        with pytest.raises(ConfigurationError, match="percent"):
            _policy(percent=percent)

    @pytest.mark.parametrize(("min_threads", "max_threads"), [(0, 0), (1, 1), (0, UNBOUNDED)])
    def test_negative_percent_rejected_regardless_of_bounds(self, min_threads: int, max_threads: int):
        with pytest.raises(ConfigurationError):
            _policy(min_threads, max_threads, -0.5)

    def test_negative_min_rejected(self):
        with pytest.raises(ConfigurationError, match="min_threads"):
            _policy(min_threads=-1)

    def test_max_below_min_rejected(self):
        with pytest.raises(ConfigurationError, match="max_threads"):
            _policy(min_threads=4, max_threads=2)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            _policy(percent=-1.0)

    def test_frozen(self):
        policy = _policy()
        with pytest.raises(FrozenInstanceError):
            policy.percent = -1.0  # type: ignore[misc]


class TestFailurePolicy:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("propagate", FailurePolicy.PROPAGATE),
            ("catch-and-ignore", FailurePolicy.CATCH_AND_IGNORE),
            ("catch_and_ignore", FailurePolicy.CATCH_AND_IGNORE),
            ("CATCH_AND_IGNORE", FailurePolicy.CATCH_AND_IGNORE),
            (FailurePolicy.PROPAGATE, FailurePolicy.PROPAGATE),
        ],
    )
    def test_normalize(self, raw: str, expected: FailurePolicy):
        assert normalize_failure_policy(raw) is expected

    def test_unknown_rejected(self):
        with pytest.raises(ConfigurationError, match="Invalid failure policy"):
            normalize_failure_policy("restart")

    def test_pool_policies_normalize_strings(self):
        policies = PoolPolicies(assignment=_policy(), failure="catch-and-ignore")  # type: ignore[arg-type]
        assert policies.failure is FailurePolicy.CATCH_AND_IGNORE

    def test_pool_policies_default_to_propagate(self):
        assert PoolPolicies(assignment=_policy()).failure is FailurePolicy.PROPAGATE
