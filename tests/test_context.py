"""
Context adapter tests.

Run with:
    pytest tests/test_context.py -v
"""

import pytest

from maturity_twin import (
    GoalType,
    InterventionType,
    InvalidGoalError,
    InvalidInterventionError,
    TwinContext,
    adapt_context,
    goal_from_dict,
    intervention_from_dict,
)
from maturity_twin.models import TwinCapabilities, CapabilityGap


class TestDefaults:

    def test_empty_context_is_fully_populated(self):
        slices = adapt_context({})

        assert slices.maturity.data_maturity_index == 50
        assert slices.maturity.data_maturity_stage == 2
        assert slices.maturity.ai_maturity_score == 50
        assert slices.maturity.ai_maturity_stage == 2
        assert slices.financial.revenue == 5_000_000
        assert slices.financial.profit_margin_pct == 10
        assert slices.financial.profit == pytest.approx(500_000)
        assert slices.financial.valuation == pytest.approx(12_500_000)
        assert slices.risk.overall_risk_score == 50
        assert slices.risk.risk_level == "medium"
        assert slices.capabilities.gap_count == 0
        assert slices.capabilities.areas == []
        assert slices.roadmap.total_initiatives == 0

    def test_none_context(self):
        assert adapt_context(None).financial.revenue == 5_000_000

    def test_valuation_defaults_to_multiple_of_supplied_revenue(self):
        slices = adapt_context({"financial": {"revenue": 2_000_000}})
        assert slices.financial.valuation == pytest.approx(5_000_000)

    def test_null_and_nan_count_as_missing(self):
        slices = adapt_context({
            "maturity": {"data_maturity_index": None, "ai_maturity_score": float("nan")},
            "risk": {"risk_level": ""},
        })
        assert slices.maturity.data_maturity_index == 50
        assert slices.maturity.ai_maturity_score == 50
        assert slices.risk.risk_level == "medium"

    def test_optional_subscores_stay_absent(self):
        slices = adapt_context({})
        assert slices.maturity.governance_score is None
        assert slices.risk.strategic_score is None
        assert slices.financial.revenue_upside is None


class TestClamping:

    def test_scores_clamped(self):
        slices = adapt_context({
            "maturity": {"data_maturity_index": 140, "ai_maturity_score": -20,
                         "governance_score": 250, "data_maturity_stage": 9,
                         "ai_maturity_stage": 0},
            "risk": {"overall_risk_score": 101, "operational_score": -1},
        })
        assert slices.maturity.data_maturity_index == 100
        assert slices.maturity.ai_maturity_score == 0
        assert slices.maturity.governance_score == 100
        assert slices.maturity.data_maturity_stage == 6
        assert slices.maturity.ai_maturity_stage == 1
        assert slices.risk.overall_risk_score == 100
        assert slices.risk.operational_score == 0

    def test_negative_revenue_and_margin_corrected(self):
        slices = adapt_context({"financial": {"revenue": -10, "profit_margin_pct": 180}})
        assert slices.financial.revenue == 0
        assert slices.financial.profit_margin_pct == 100
        assert slices.financial.profit == 0

    def test_profit_always_derived(self):
        slices = adapt_context({"financial": {"revenue": 1_000_000, "profit_margin_pct": 20,
                                              "profit": 999}})
        assert slices.financial.profit == pytest.approx(200_000)

    def test_counts_floored_at_zero(self):
        slices = adapt_context({"capabilities": {"gap_count": -3},
                                "roadmap": {"completed": -1, "progress_pct": 130}})
        assert slices.capabilities.gap_count == 0
        assert slices.roadmap.completed == 0
        assert slices.roadmap.progress_pct == 100


class TestInputShapes:

    def test_accepts_twin_context(self):
        ctx = TwinContext(maturity={"ai_maturity_score": 70})
        assert adapt_context(ctx).maturity.ai_maturity_score == 70

    def test_accepts_dataclass_slices(self):
        caps = TwinCapabilities(gap_count=2, areas=["Data"],
                                top_gaps=[CapabilityGap(description="Lineage", area="Data")])
        slices = adapt_context({"capabilities": caps})
        assert slices.capabilities.gap_count == 2
        assert slices.capabilities.top_gaps[0].description == "Lineage"

    def test_output_independent_of_input(self, baseline_context):
        slices = adapt_context(baseline_context)
        baseline_context["capabilities"]["areas"].append("Mutated")
        baseline_context["capabilities"]["top_gaps"][0]["description"] = "Mutated"

        assert "Mutated" not in slices.capabilities.areas
        assert slices.capabilities.top_gaps[0].description == "No feature store"


class TestNonFiniteInputs:

    @pytest.mark.parametrize("value", [float("inf"), float("-inf")])
    def test_infinite_metrics_fall_back_to_defaults(self, value):
        slices = adapt_context({
            "maturity": {"data_maturity_stage": value, "ai_maturity_score": value},
            "financial": {"revenue": value, "valuation": value},
            "capabilities": {"gap_count": value, "high_priority_count": value},
            "roadmap": {"total_initiatives": value, "progress_pct": value},
        })
        assert slices.maturity.data_maturity_stage == 2
        assert slices.maturity.ai_maturity_score == 50
        assert slices.financial.revenue == 5_000_000
        assert slices.financial.valuation == pytest.approx(12_500_000)
        assert slices.capabilities.gap_count == 0
        assert slices.capabilities.high_priority_count == 0
        assert slices.roadmap.total_initiatives == 0
        assert slices.roadmap.progress_pct is None

    @pytest.mark.parametrize("value", [float("inf"), float("-inf")])
    def test_infinite_descriptor_fields(self, value):
        intervention = intervention_from_dict({"duration_months": value, "intensity": value})
        assert intervention.duration_months is None
        assert intervention.intensity == 0.5

        goal = goal_from_dict({"type": "risk_reduction", "horizon_months": value,
                               "target_value": value})
        assert goal.horizon_months == 12
        assert goal.target_value == 5


class TestInterventionParsing:

    def test_defaults(self):
        intervention = intervention_from_dict({})
        assert intervention.id.startswith("int-")
        assert intervention.type is InterventionType.INVESTMENT
        assert intervention.target == ""
        assert intervention.intensity == 0.5
        assert intervention.duration_months is None

    def test_intensity_clamped(self):
        assert intervention_from_dict({"intensity": 3}).intensity == 1.0
        assert intervention_from_dict({"intensity": -1}).intensity == 0.0

    def test_explicit_fields_kept(self):
        intervention = intervention_from_dict({
            "id": "x1", "type": "governance", "target": "Policy",
            "intensity": 0.4, "duration_months": 6, "description": "Set up council",
        })
        assert intervention.id == "x1"
        assert intervention.type is InterventionType.GOVERNANCE
        assert intervention.duration_months == 6
        assert intervention.description == "Set up council"

    def test_unknown_type_rejected(self):
        with pytest.raises(InvalidInterventionError):
            intervention_from_dict({"type": "magic"})


class TestGoalParsing:

    def test_defaults_and_clamp(self):
        goal = goal_from_dict({"type": "risk_reduction", "horizon_months": 100})
        assert goal.type is GoalType.RISK_REDUCTION
        assert goal.target_value == 5
        assert goal.horizon_months == 48
        assert goal.minimize_risk is False

    def test_short_horizon_raised_to_minimum(self):
        assert goal_from_dict({"type": "risk_reduction", "horizon_months": 1}).horizon_months == 6

    def test_default_horizon(self):
        assert goal_from_dict({"type": "revenue_increase_pct"}).horizon_months == 12

    @pytest.mark.parametrize("raw", [{"type": "bogus"}, {}, {"type": None}])
    def test_unknown_goal_type_fails(self, raw):
        with pytest.raises(InvalidGoalError):
            goal_from_dict(raw)

    def test_invalid_goal_is_value_error(self):
        with pytest.raises(ValueError):
            goal_from_dict({"type": "market_share"})
