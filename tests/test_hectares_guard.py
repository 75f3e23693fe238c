"""
Tests for the hectares accumulation guard.

The guard prefers applied hectares as the limit and only falls back to
theoretical hectares when the job has no applied surface.
"""
from app.services.hectares_guard import (
    LIMIT_APPLIED,
    LIMIT_THEORETICAL,
    build_hectares_summary,
    check_hectares_limit,
    sum_hectares_done,
)


class TestCheckHectaresLimit:
    """Tests for check_hectares_limit()."""

    def test_applied_exceeded(self):
        warning = check_hectares_limit(120, applied_hectares=100, theoretical_hectares=150)
        assert warning is not None
        assert warning.limit_kind == LIMIT_APPLIED
        assert warning.limit_hectares == 100
        assert "120.00" in warning.message
        assert "aplicadas" in warning.message

    def test_applied_takes_priority_over_theoretical(self):
        """Within applied but above theoretical: applied wins, no warning."""
        assert check_hectares_limit(120, applied_hectares=130, theoretical_hectares=100) is None

    def test_theoretical_used_when_applied_missing(self):
        warning = check_hectares_limit(120, applied_hectares=None, theoretical_hectares=100)
        assert warning.limit_kind == LIMIT_THEORETICAL
        assert "teóricas" in warning.message

    def test_zero_applied_falls_back_to_theoretical(self):
        warning = check_hectares_limit(120, applied_hectares=0, theoretical_hectares=100)
        assert warning.limit_kind == LIMIT_THEORETICAL

    def test_equal_to_limit_is_fine(self):
        assert check_hectares_limit(100, applied_hectares=100, theoretical_hectares=None) is None

    def test_no_limits(self):
        assert check_hectares_limit(1e6, applied_hectares=None, theoretical_hectares=None) is None


class TestHectaresSummary:

    def test_sum_ignores_missing(self):
        assert sum_hectares_done([10, None, 5.5, 0]) == 15.5

    def test_summary_flags(self):
        summary = build_hectares_summary([60, 50], theoretical_hectares=100, applied_hectares=120)
        assert summary.total_hectares_done == 110
        assert summary.exceeds_theoretical is True
        assert summary.exceeds_applied is False

    def test_summary_without_limits(self):
        summary = build_hectares_summary([], theoretical_hectares=None, applied_hectares=None)
        assert summary.total_hectares_done == 0
        assert summary.exceeds_theoretical is False
        assert summary.exceeds_applied is False
