"""Shared fixtures for the twin engine tests."""

import pytest

from maturity_twin import build_state

AS_OF = "2025-01-15T00:00:00+00:00"


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def baseline_context():
    """data=50, AI=50, revenue=5M, margin=10%, risk=50."""
    return {
        "maturity": {"data_maturity_index": 50, "ai_maturity_score": 50},
        "financial": {"revenue": 5_000_000, "profit_margin_pct": 10},
        "risk": {"overall_risk_score": 50, "risk_level": "medium"},
        "capabilities": {
            "gap_count": 4,
            "high_priority_count": 1,
            "areas": ["Data platform", "MLOps"],
            "top_gaps": [{"description": "No feature store", "area": "MLOps", "priority": "High"}],
        },
        "roadmap": {"total_initiatives": 6, "completed": 1, "in_progress": 2},
    }


@pytest.fixture
def baseline_state(baseline_context):
    return build_state(baseline_context, timestamp=AS_OF, label="current")
