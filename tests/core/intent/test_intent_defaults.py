"""
Tests for the defaults table and the adjustment pipeline.
"""

import logging
from dataclasses import replace
from fractions import Fraction

import pytest

from intenus.core.intent import (
    DEFAULTS_TABLE,
    IntentOverrides,
    MarketSnapshot,
    Priority,
    RiskTolerance,
    Urgency,
    VolatilityClass,
    apply_adjustments,
    baseline_for,
    resolve_parameters,
)
from intenus.core.intent.adjustments import (
    MAX_DEADLINE_MINUTES,
    MAX_SLIPPAGE_BPS,
    MIN_DEADLINE_MINUTES,
    MIN_SLIPPAGE_BPS,
    clamp,
    scale_stake,
)


# =============================================================================
# Defaults Table
# =============================================================================

class TestDefaultsTable:
    """Baseline bundle per priority."""

    def test_table_covers_every_priority(self):
        assert set(DEFAULTS_TABLE) == set(Priority)

    @pytest.mark.parametrize(
        "priority,slippage,deadline,hops,stake,tee,weights",
        [
            ("maximize_output", 100, 30, 4, 1_000_000_000_000, False, (70, 10, 10, 10)),
            ("minimize_gas", 200, 60, 2, 500_000_000_000, False, (20, 60, 10, 10)),
            ("fastest_execution", 300, 5, 2, 2_000_000_000_000, False, (20, 20, 50, 10)),
            ("maximum_safety", 50, 60, 3, 5_000_000_000_000, True, (25, 25, 25, 25)),
            ("balanced", 100, 15, 3, 1_000_000_000_000, False, (40, 30, 20, 10)),
        ],
    )
    def test_baseline_values(self, priority, slippage, deadline, hops, stake, tee, weights):
        bundle = baseline_for(priority)
        assert bundle.priority == Priority(priority)
        assert bundle.slippage_bps == slippage
        assert bundle.deadline_minutes == deadline
        assert bundle.max_hops == hops
        assert bundle.min_solver_stake == stake
        assert bundle.requires_tee is tee
        assert bundle.ranking_weights.as_tuple() == weights

    def test_priority_lookup_is_case_insensitive(self):
        assert baseline_for(" Maximum_Safety ").priority == Priority.MAXIMUM_SAFETY

    def test_unknown_priority_falls_back_to_balanced(self, caplog):
        with caplog.at_level(logging.WARNING):
            bundle = baseline_for("yolo")
        assert bundle.priority == Priority.BALANCED
        assert "falling back to balanced" in caplog.text

    def test_missing_priority_falls_back_to_balanced(self):
        assert baseline_for(None).priority == Priority.BALANCED

    def test_stake_serializes_as_string(self):
        assert baseline_for("balanced").to_dict()["min_solver_stake"] == "1000000000000"


# =============================================================================
# Adjustment Pipeline
# =============================================================================

class TestAdjustments:
    """Risk, urgency and market multipliers."""

    def test_maximize_output_medium_normal_is_baseline(self):
        bundle = resolve_parameters("maximize_output", "medium", "normal")
        assert bundle.slippage_bps == 100
        assert bundle.deadline_minutes == 30
        assert bundle.max_hops == 4
        assert bundle.requires_tee is False
        assert bundle.should_encrypt is False

    def test_maximum_safety_low_risk_low_urgency(self):
        bundle = resolve_parameters("maximum_safety", "low", "low")
        # 50 * 0.5 * 0.8
        assert bundle.slippage_bps == 20
        assert bundle.deadline_minutes == 120
        assert bundle.min_solver_stake == 10_000_000_000_000
        assert bundle.requires_tee is True
        assert bundle.should_encrypt is True

    def test_high_risk_urgent_loosens_slippage(self):
        bundle = resolve_parameters("fastest_execution", "high", "urgent")
        # 300 * 1.5 * 1.5 = 675, deadline 5 * 0.3 = 1.5 -> 2
        assert bundle.slippage_bps == 675
        assert bundle.deadline_minutes == 2
        assert bundle.min_solver_stake == 1_000_000_000_000

    def test_rounding_is_half_up(self):
        # 15 * 0.3 = 4.5
        assert resolve_parameters("balanced", "medium", "urgent").deadline_minutes == 5

    def test_high_volatility_widens_slippage(self):
        market = MarketSnapshot(volatility=VolatilityClass.HIGH)
        bundle = resolve_parameters("minimize_gas", "high", "urgent", market)
        # 200 * 1.5 * 1.5 * 1.25 = 562.5
        assert bundle.slippage_bps == 563
        assert bundle.deadline_minutes == 18

    def test_low_volatility_tightens_slippage(self):
        market = MarketSnapshot(volatility=VolatilityClass.LOW)
        assert resolve_parameters("maximize_output", "medium", "normal", market).slippage_bps == 80

    def test_missing_market_is_a_no_op(self):
        with_empty = resolve_parameters("balanced", market=MarketSnapshot())
        without = resolve_parameters("balanced")
        assert with_empty == without

    def test_medium_risk_inherits_tee_requirement(self):
        assert resolve_parameters("maximum_safety", "medium").requires_tee is True
        assert resolve_parameters("balanced", "medium").requires_tee is False

    def test_high_risk_disables_tee_but_safety_still_encrypts(self):
        bundle = resolve_parameters("maximum_safety", "high")
        assert bundle.requires_tee is False
        assert bundle.should_encrypt is True

    def test_low_risk_requires_tee_and_encryption(self):
        bundle = resolve_parameters("balanced", "low")
        assert bundle.requires_tee is True
        assert bundle.should_encrypt is True

    def test_stake_math_is_exact_integer(self):
        assert resolve_parameters("maximum_safety", "high").min_solver_stake == 2_500_000_000_000
        assert resolve_parameters("minimize_gas", "high").min_solver_stake == 250_000_000_000
        assert scale_stake(10**30 + 1, Fraction(1, 2)) == (10**30 + 1) // 2

    def test_clamps_computed_values(self):
        wide = replace(baseline_for("balanced"), slippage_bps=5000, deadline_minutes=500)
        bundle = apply_adjustments(wide, "high", "low")
        assert bundle.slippage_bps == MAX_SLIPPAGE_BPS
        assert bundle.deadline_minutes == MAX_DEADLINE_MINUTES

        narrow = replace(baseline_for("balanced"), slippage_bps=1, deadline_minutes=1)
        bundle = apply_adjustments(narrow, "low", "urgent")
        assert bundle.slippage_bps == MIN_SLIPPAGE_BPS
        assert bundle.deadline_minutes == MIN_DEADLINE_MINUTES

    def test_clamp_helper(self):
        assert clamp(5, 10, 20) == 10
        assert clamp(25, 10, 20) == 20
        assert clamp(15, 10, 20) == 15

    def test_unknown_risk_and_urgency_fall_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            bundle = resolve_parameters("balanced", "extreme", "whenever")
        assert bundle == resolve_parameters("balanced", "medium", "normal")
        assert "risk tolerance" in caplog.text
        assert "urgency" in caplog.text

    def test_overrides_are_used_verbatim(self):
        overrides = IntentOverrides(slippage_bps=5000, deadline_minutes=500)
        bundle = resolve_parameters("balanced", overrides=overrides)
        assert bundle.slippage_bps == 5000
        assert bundle.deadline_minutes == 500

    def test_partial_override_keeps_computed_deadline(self):
        bundle = resolve_parameters("balanced", overrides=IntentOverrides(slippage_bps=42))
        assert bundle.slippage_bps == 42
        assert bundle.deadline_minutes == 15


# =============================================================================
# Invariants
# =============================================================================

class TestInvariants:
    """Properties that hold across the whole input space."""

    def test_every_combination_stays_in_bounds(self):
        for priority in Priority:
            for risk in RiskTolerance:
                for urgency in Urgency:
                    for volatility in (None, *VolatilityClass):
                        market = MarketSnapshot(volatility=volatility)
                        bundle = resolve_parameters(priority, risk, urgency, market)
                        assert MIN_SLIPPAGE_BPS <= bundle.slippage_bps <= MAX_SLIPPAGE_BPS
                        assert MIN_DEADLINE_MINUTES <= bundle.deadline_minutes <= MAX_DEADLINE_MINUTES
                        assert min(bundle.ranking_weights.as_tuple()) >= 0

    def test_urgent_strictly_shortens_deadline(self):
        for priority in Priority:
            for risk in RiskTolerance:
                normal = resolve_parameters(priority, risk, Urgency.NORMAL)
                urgent = resolve_parameters(priority, risk, Urgency.URGENT)
                assert urgent.deadline_minutes < normal.deadline_minutes

    def test_low_risk_strictly_tightens_slippage(self):
        for priority in Priority:
            for urgency in Urgency:
                high = resolve_parameters(priority, RiskTolerance.HIGH, urgency)
                low = resolve_parameters(priority, RiskTolerance.LOW, urgency)
                assert low.slippage_bps < high.slippage_bps
