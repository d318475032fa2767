"""
Maturity Twin
=============

Causal digital-twin simulation and transformation planning for
business-maturity analytics.

Usage:
    from maturity_twin import build_state, simulate_state, optimize_path

    state = build_state(context, timestamp="2025-01-01T00:00:00+00:00", label="current")
    future = simulate_state(state, 12, [{"type": "governance", "intensity": 0.6}])
    plan = optimize_path(state, goal_from_dict({"type": "ai_maturity_stage", "target_value": 5}))
"""

from .context import TwinContext, adapt_context, goal_from_dict, intervention_from_dict
from .errors import (
    CausalGraphError,
    InvalidGoalError,
    InvalidInterventionError,
    TwinConfigError,
    TwinError,
)
from .graph import build_graph, causal_digraph, propagation_order
from .models import (
    GoalType,
    InterventionType,
    NodeType,
    OptimizedAction,
    OptimizedTransformationPlan,
    SimulatedTwinState,
    TwinGoal,
    TwinIntervention,
    TwinState,
)
from .optimizer import PathOptimizer, optimize_path
from .simulator import ForwardSimulator, simulate_state
from .state import build_state
from .twin import EnterpriseDigitalTwin, run_scenarios

__version__ = "0.1.0"

__all__ = [
    "TwinContext", "adapt_context", "goal_from_dict", "intervention_from_dict",
    "CausalGraphError", "InvalidGoalError", "InvalidInterventionError",
    "TwinConfigError", "TwinError",
    "build_graph", "causal_digraph", "propagation_order",
    "GoalType", "InterventionType", "NodeType", "OptimizedAction",
    "OptimizedTransformationPlan", "SimulatedTwinState", "TwinGoal",
    "TwinIntervention", "TwinState",
    "PathOptimizer", "optimize_path",
    "ForwardSimulator", "simulate_state",
    "build_state",
    "EnterpriseDigitalTwin", "run_scenarios",
]
