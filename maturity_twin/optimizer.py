"""
Maturity Twin: Path Optimizer

Rule-table planner: each goal type maps to a fixed, hand-authored set of
candidate interventions (``config.GOAL_PLAYBOOK``). The chosen candidates
are sequenced back to back within the goal horizon and the plan's outcome
is projected with a single forward simulation. There is no search over
alternative plans.
"""

from __future__ import annotations

import copy
import dataclasses
import logging

from . import config
from .context import clamp, clamp_months
from .errors import TwinConfigError
from .models import (
    GoalType,
    OptimizedAction,
    OptimizedTransformationPlan,
    ProjectedState,
    TwinGoal,
    TwinIntervention,
    TwinState,
)
from .simulator import ForwardSimulator, intervention_deltas
from .state import Timestamp

logger = logging.getLogger(__name__)

# Delta keys reported per action, mapped to the state field they move
_IMPACT_FIELDS = {
    "data_maturity": "data_maturity_index",
    "ai_maturity": "ai_maturity_score",
    "risk": "overall_risk_score",
}


class PathOptimizer:
    """Builds an OptimizedTransformationPlan for a goal from the playbook."""

    def __init__(self, simulator: ForwardSimulator | None = None,
                 playbook: dict[GoalType, config.GoalPolicy] | None = None):
        self.simulator = simulator or ForwardSimulator()
        self.playbook = config.GOAL_PLAYBOOK if playbook is None else playbook

    def _policy(self, goal_type: GoalType) -> config.GoalPolicy:
        try:
            return self.playbook[goal_type]
        except KeyError:
            raise TwinConfigError(f"No playbook entry for goal type {goal_type.value!r}") from None

    def stage_gap(self, state: TwinState, goal: TwinGoal) -> float | None:
        """
        Points between the goal's target stage (mapped onto 0-100) and the
        current score, or None for goals that are not stage targets.
        """
        policy = self._policy(goal.type)
        if policy.stage_scale is None:
            return None
        stage = clamp(goal.target_value, 1, policy.stage_scale)
        target_score = stage * (100.0 / policy.stage_scale)
        return target_score - getattr(state.maturity, policy.current_field)

    def candidate_interventions(self, state: TwinState, goal: TwinGoal) -> list[TwinIntervention]:
        """Interventions the playbook prescribes for ``goal`` given ``state``."""
        policy = self._policy(goal.type)
        gap = self.stage_gap(state, goal)
        if gap is not None and gap <= config.STAGE_GAP_THRESHOLD:
            logger.debug("Stage gap %.2f within threshold for %s; no interventions",
                         gap, goal.type.value)
            return []

        horizon = goal.horizon_months
        return [
            TwinIntervention(
                id=candidate.id,
                type=candidate.type,
                target=candidate.target,
                intensity=candidate.intensity,
                duration_months=horizon if candidate.duration_cap is None else min(candidate.duration_cap, horizon),
                description=candidate.description,
            )
            for candidate in policy.candidates
        ]

    def sequence(self, interventions: list[TwinIntervention], horizon: int) -> list[OptimizedAction]:
        """Back-to-back schedule: each action starts where the previous one ended."""
        actions = []
        start = 0
        for order, intervention in enumerate(interventions, start=1):
            duration = intervention.duration_months
            if duration is None:
                duration = config.DEFAULT_INTERVENTION_DURATION
            end = min(start + duration, horizon)
            deltas = intervention_deltas(intervention, horizon, self.simulator.effects)
            actions.append(OptimizedAction(
                order=order,
                intervention=intervention,
                start_month=start,
                end_month=end,
                expected_impact={
                    _IMPACT_FIELDS[var]: delta for var, delta in sorted(deltas.items())
                },
            ))
            start = end
        return actions

    def optimize(self, state: TwinState, goal: TwinGoal,
                 as_of: Timestamp | None = None) -> OptimizedTransformationPlan:
        """
        Plan interventions toward ``goal``.

        Raises:
            InvalidGoalError: ``goal.type`` is not a recognised goal type.
        """
        goal_type = GoalType.parse(goal.type)
        horizon = clamp_months(goal.horizon_months, config.GOAL_HORIZON_RANGE)
        if horizon != goal.horizon_months:
            logger.warning("Goal horizon %s months clamped to %d", goal.horizon_months, horizon)
        goal = dataclasses.replace(goal, type=goal_type, horizon_months=horizon)

        interventions = self.candidate_interventions(state, goal)
        actions = self.sequence(interventions, horizon)

        if interventions:
            projected = self.simulator.simulate(state, horizon, interventions, as_of=as_of).state
        else:
            projected = state
        projected_final_state = ProjectedState(
            maturity=copy.deepcopy(projected.maturity),
            financial=copy.deepcopy(projected.financial),
            risk=copy.deepcopy(projected.risk),
        )

        risks = list(config.PLAN_RISKS)
        risks.append(config.LOW_RISK_PATH_NOTE if goal.minimize_risk else config.AGGRESSIVE_PATH_NOTE)

        logger.debug("Optimized %s over %d months: %d action(s)",
                     goal_type.value, horizon, len(actions))
        return OptimizedTransformationPlan(
            goal=goal,
            actions=actions,
            projected_final_state=projected_final_state,
            total_duration_months=horizon,
            confidence_score=config.PLAN_CONFIDENCE,
            trade_offs=list(config.PLAN_TRADE_OFFS),
            risks=risks,
        )


def optimize_path(state: TwinState, goal: TwinGoal,
                  as_of: Timestamp | None = None) -> OptimizedTransformationPlan:
    """Functional shortcut for ``PathOptimizer().optimize(...)``."""
    return PathOptimizer().optimize(state, goal, as_of=as_of)
