"""
Maturity Twin: Enterprise Digital Twin

Holds the most recently constructed state of one organisation and runs
simulations, optimizations and what-if branches against it. The held state
is copied on the way in and on the way out; callers never share a live
reference with the engine.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import pandas as pd

from . import config
from .context import TwinContext, goal_from_dict
from .models import (
    OptimizedTransformationPlan,
    SimulatedTwinState,
    TwinGoal,
    TwinIntervention,
    TwinState,
)
from .optimizer import PathOptimizer
from .simulator import ForwardSimulator
from .state import Timestamp, build_state, resolve_timestamp

logger = logging.getLogger(__name__)

# metric -> (state slice, higher is better)
BRANCH_METRICS: dict[str, tuple[str, bool]] = {
    "data_maturity_index": ("maturity", True),
    "ai_maturity_score": ("maturity", True),
    "revenue": ("financial", True),
    "profit": ("financial", True),
    "valuation": ("financial", True),
    "overall_risk_score": ("risk", False),
}


def _metric(result: SimulatedTwinState, metric: str) -> float:
    slice_name, _ = BRANCH_METRICS[metric]
    return float(getattr(getattr(result.state, slice_name), metric))


class EnterpriseDigitalTwin:
    """
    Digital twin of one organisation.

    Usage:
        twin = EnterpriseDigitalTwin.from_context("org-1", context)
        future = twin.simulate(12, [{"type": "governance", "intensity": 0.6}])
        plan = twin.optimize({"type": "ai_maturity_stage", "target_value": 5})
    """

    def __init__(
        self,
        organisation_id: str,
        initial_state: TwinState,
        effects: Mapping[str, Sequence[config.EffectRule]] | None = None,
    ):
        self.organisation_id = organisation_id
        self._state = initial_state.snapshot()
        self.simulator = ForwardSimulator(effects)
        self.optimizer = PathOptimizer(self.simulator)

    @classmethod
    def from_context(
        cls,
        organisation_id: str,
        context: TwinContext | Mapping | None,
        timestamp: Timestamp | None = None,
        label: str | None = "current",
        effects: Mapping[str, Sequence[config.EffectRule]] | None = None,
    ) -> EnterpriseDigitalTwin:
        return cls(organisation_id, build_state(context, timestamp=timestamp, label=label), effects)

    # ── State ──

    def get_state(self) -> TwinState:
        return self._state.snapshot()

    def update_state(self, context: TwinContext | Mapping | None,
                     timestamp: Timestamp | None = None):
        """Rebuild the held state from fresh upstream metrics, keeping its label."""
        self._state = build_state(context, timestamp=timestamp, label=self._state.label)
        logger.info("Twin state for %s replaced at %s", self.organisation_id, self._state.timestamp)

    def snapshot(self, label: str | None = None, as_of: Timestamp | None = None) -> TwinState:
        """A relabelled copy of the held state, ready for an external store."""
        state = self.get_state()
        state.label = label.strip() if label and label.strip() else (
            f"snapshot_{resolve_timestamp(as_of)[:10]}"
        )
        return state

    # ── Simulation & Optimization ──

    def simulate(
        self,
        future_months: int,
        interventions: Sequence[TwinIntervention | Mapping] | None = None,
        as_of: Timestamp | None = None,
    ) -> SimulatedTwinState:
        return self.simulator.simulate(self._state, future_months, interventions, as_of=as_of)

    def optimize(self, goal: TwinGoal | Mapping[str, Any],
                 as_of: Timestamp | None = None) -> OptimizedTransformationPlan:
        if not isinstance(goal, TwinGoal):
            goal = goal_from_dict(goal)
        return self.optimizer.optimize(self._state, goal, as_of=as_of)

    # ── Branching ──

    def branch(
        self,
        branch_id: str,
        future_months: int,
        interventions: Sequence[TwinIntervention | Mapping] | None = None,
        as_of: Timestamp | None = None,
    ) -> SimulatedTwinState:
        """Simulate a what-if branch from the held state, labelled ``branch_id``."""
        result = self.simulate(future_months, interventions, as_of=as_of)
        result.state.label = branch_id
        return result

    def branch_scenarios(
        self,
        scenarios: Mapping[str, Sequence[TwinIntervention | Mapping]],
        future_months: int,
        as_of: Timestamp | None = None,
    ) -> dict[str, SimulatedTwinState]:
        """
        Branch multiple what-if scenarios from the held state.

        Args:
            scenarios: {name: interventions} dict
            future_months: Months to simulate per branch
            as_of: Shared reference time so branches line up

        Returns:
            {name: SimulatedTwinState} for each scenario
        """
        as_of = resolve_timestamp(as_of)
        return {
            name: self.branch(name, future_months, interventions, as_of=as_of)
            for name, interventions in scenarios.items()
        }

    @staticmethod
    def merge_branches(branches: Mapping[str, SimulatedTwinState]) -> dict[str, Any]:
        """
        Compare simulated branches metric by metric.

        Produces per-branch values, summary statistics, the best and worst
        branch per metric (lower risk is better) and a recommendation: the
        branch with the highest projected valuation.
        """
        if not branches:
            return {}

        branch_names = list(branches.keys())
        comparison = {}
        for metric, (_, higher_is_better) in BRANCH_METRICS.items():
            values = {name: _metric(branches[name], metric) for name in branch_names}
            vals = np.array(list(values.values()))
            best = max(values, key=values.get) if higher_is_better else min(values, key=values.get)
            worst = min(values, key=values.get) if higher_is_better else max(values, key=values.get)
            comparison[metric] = {
                "per_branch": values,
                "mean": float(np.mean(vals)),
                "std": float(np.std(vals)),
                "min": float(np.min(vals)),
                "max": float(np.max(vals)),
                "best_branch": best,
                "worst_branch": worst,
            }

        return {
            "branch_count": len(branches),
            "branch_names": branch_names,
            "months_ahead": branches[branch_names[0]].months_ahead,
            "comparison": comparison,
            "recommendation": comparison["valuation"]["best_branch"],
        }

    @staticmethod
    def scenario_frame(branches: Mapping[str, SimulatedTwinState]) -> pd.DataFrame:
        """One row per branch: headline metrics plus the intervention count."""
        rows = {
            name: {
                **{metric: _metric(result, metric) for metric in BRANCH_METRICS},
                "interventions": len(result.interventions_applied),
                "months_ahead": result.months_ahead,
            }
            for name, result in branches.items()
        }
        frame = pd.DataFrame.from_dict(rows, orient="index")
        frame.index.name = "branch"
        return frame


# ──────────────────────────────────────────────────────────────────────
# Scenario Runner
# ──────────────────────────────────────────────────────────────────────

def run_scenarios(
    state: TwinState,
    future_months: int = 12,
    as_of: Timestamp | None = None,
    presets: Mapping[str, Sequence[TwinIntervention | Mapping]] | None = None,
) -> dict[str, SimulatedTwinState]:
    """Run the preset scenarios (organic, balanced, aggressive) from ``state``."""
    twin = EnterpriseDigitalTwin("scenarios", state)
    return twin.branch_scenarios(presets or config.SCENARIO_PRESETS, future_months, as_of=as_of)
