"""
Maturity Twin: Forward Simulator

Projects a twin state ``horizon`` months ahead under a list of
interventions:

  1. Each intervention nudges data maturity, AI maturity and/or risk
     according to its type and target keywords, scaled by intensity and by
     how many of its duration-years fit inside the horizon. Effects add up
     per variable and every variable is clamped to 0-100 after each one.
  2. Financials follow the combined maturity factor:
         factor    = (data + ai) / 200
         revenue  *= (1 + 2% + factor × 6%) ^ (horizon / 12)
         margin   += factor × 4 points
         valuation = revenue × (2 + factor × 1.2)

Variables are processed in the topological order of the causal graph, so
every financial variable sees the final maturity values.
"""

from __future__ import annotations

import copy
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from . import config
from .context import clamp, clamp_months, intervention_from_dict
from .graph import propagation_order
from .models import (
    ConfidenceInterval,
    InterventionType,
    SimulatedTwinState,
    TwinIntervention,
    TwinState,
)
from .state import Timestamp, add_months, build_state

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────
# 1. Causal Rules
# ──────────────────────────────────────────────────────────────────────

def maturity_factor(data_maturity: float, ai_maturity: float) -> float:
    """Combined data/AI sophistication normalized to [0, 1]."""
    return (data_maturity + ai_maturity) / 200.0


def derive_data_stage(index: float) -> int:
    return int(min(config.DATA_STAGE_RANGE[1], math.floor(index / config.DATA_STAGE_BAND) + 1))


def derive_ai_stage(score: float) -> int:
    return int(min(config.AI_STAGE_RANGE[1], math.floor(score / config.AI_STAGE_BAND) + 1))


def risk_level_for(score: float) -> str:
    if score > config.RISK_LEVEL_THRESHOLDS["high"]:
        return "high"
    if score > config.RISK_LEVEL_THRESHOLDS["medium"]:
        return "medium"
    return "low"


def intervention_deltas(
    intervention: TwinIntervention,
    horizon_months: int,
    effects: Mapping[str, Sequence[config.EffectRule]] | None = None,
) -> dict[str, float]:
    """
    Per-variable change one intervention contributes over ``horizon_months``.

    The effect is scaled by intensity (clamped to [0, 1]) and by
    min(duration, horizon) / 12. Interventions with no matching rule
    contribute nothing.
    """
    effects = config.INTERVENTION_EFFECTS if effects is None else effects
    intensity = clamp(float(intervention.intensity), 0.0, 1.0)
    duration = intervention.duration_months
    if duration is None:
        duration = config.DEFAULT_INTERVENTION_DURATION
    effective_months = min(max(duration, 0), horizon_months)
    scale = intensity * (effective_months / 12.0)

    type_key = InterventionType.parse(intervention.type).value
    target = intervention.target or ""
    for rule in effects.get(type_key, ()):
        if rule.matches(target):
            return {var: coef * scale for var, coef in rule.deltas.items()}
    return {}


def _coerce_intervention(item: TwinIntervention | Mapping) -> TwinIntervention:
    if isinstance(item, TwinIntervention):
        return copy.deepcopy(item)
    return intervention_from_dict(item)


@dataclass
class _Projection:
    """Working values for one simulation call; discarded afterwards."""
    horizon: int
    data_maturity: float
    ai_maturity: float
    risk: float
    revenue: float
    margin_pct: float
    valuation: float
    deltas: list[dict[str, float]] = field(default_factory=list)

    @property
    def maturity_factor(self) -> float:
        return maturity_factor(self.data_maturity, self.ai_maturity)

    def accumulate(self, variable: str, value: float) -> float:
        for delta in self.deltas:
            value = clamp(value + delta.get(variable, 0.0), *config.SCORE_RANGE)
        return value


# ──────────────────────────────────────────────────────────────────────
# 2. Simulator
# ──────────────────────────────────────────────────────────────────────

class ForwardSimulator:
    """
    Stateless forward projection of a TwinState.

    Each call takes an explicit state and returns a new SimulatedTwinState;
    the input state and interventions are never modified.
    """

    NODE_PROCESSORS = {
        "data_maturity": "_process_data_maturity",
        "ai_maturity": "_process_ai_maturity",
        "risk": "_process_risk",
        "revenue": "_process_revenue",
        "profit": "_process_profit",
        "valuation": "_process_valuation",
    }

    def __init__(self, effects: Mapping[str, Sequence[config.EffectRule]] | None = None):
        self.effects = config.INTERVENTION_EFFECTS if effects is None else effects
        self.execution_order = propagation_order()

    # ── Node Processors ──

    def _process_data_maturity(self, proj: _Projection):
        proj.data_maturity = proj.accumulate("data_maturity", proj.data_maturity)

    def _process_ai_maturity(self, proj: _Projection):
        proj.ai_maturity = proj.accumulate("ai_maturity", proj.ai_maturity)

    def _process_risk(self, proj: _Projection):
        proj.risk = proj.accumulate("risk", proj.risk)

    def _process_revenue(self, proj: _Projection):
        """Compound annual growth over horizon/12 years."""
        growth = config.BASE_REVENUE_GROWTH + proj.maturity_factor * config.MATURITY_REVENUE_GROWTH
        proj.revenue = proj.revenue * (1 + growth) ** (proj.horizon / 12.0)

    def _process_profit(self, proj: _Projection):
        proj.margin_pct = clamp(
            proj.margin_pct + proj.maturity_factor * config.MATURITY_MARGIN_POINTS, 0.0, 100.0
        )

    def _process_valuation(self, proj: _Projection):
        multiple = (config.BASE_VALUATION_MULTIPLE
                    + proj.maturity_factor * config.MATURITY_VALUATION_MULTIPLE)
        proj.valuation = proj.revenue * multiple

    # ── Public API ──

    def simulate(
        self,
        state: TwinState,
        horizon_months: int,
        interventions: Sequence[TwinIntervention | Mapping] | None = None,
        as_of: Timestamp | None = None,
    ) -> SimulatedTwinState:
        """
        Simulate ``state`` forward ``horizon_months`` (clamped to 1-60).

        Args:
            state: Current twin state (not modified)
            horizon_months: Months to project
            interventions: Interventions or raw descriptors; empty → organic drift
            as_of: Reference time for the future timestamp (default: now)

        Returns:
            SimulatedTwinState stamped at ``as_of + horizon`` months.
        """
        horizon = clamp_months(horizon_months, config.SIMULATION_HORIZON_RANGE)
        if horizon != horizon_months:
            logger.warning("Simulation horizon %s months clamped to %d", horizon_months, horizon)

        applied = [_coerce_intervention(i) for i in interventions or []]
        proj = _Projection(
            horizon=horizon,
            data_maturity=state.maturity.data_maturity_index,
            ai_maturity=state.maturity.ai_maturity_score,
            risk=state.risk.overall_risk_score,
            revenue=state.financial.revenue,
            margin_pct=state.financial.profit_margin_pct,
            valuation=state.financial.valuation,
            deltas=[intervention_deltas(i, horizon, self.effects) for i in applied],
        )

        for node_id in self.execution_order:
            processor = self.NODE_PROCESSORS.get(node_id)
            if processor:
                getattr(self, processor)(proj)

        future_timestamp = add_months(as_of, horizon)
        simulated = build_state(
            {
                "maturity": {
                    "data_maturity_index": proj.data_maturity,
                    "data_maturity_stage": derive_data_stage(proj.data_maturity),
                    "ai_maturity_score": proj.ai_maturity,
                    "ai_maturity_stage": derive_ai_stage(proj.ai_maturity),
                },
                "financial": {
                    "revenue": proj.revenue,
                    "profit_margin_pct": proj.margin_pct,
                    "valuation": proj.valuation,
                },
                "risk": {
                    "overall_risk_score": proj.risk,
                    "risk_level": risk_level_for(proj.risk),
                },
                "capabilities": state.capabilities,
                "roadmap": state.roadmap,
            },
            timestamp=future_timestamp,
            label="simulated",
        )

        logger.debug(
            "Simulated %d months with %d intervention(s): data=%.2f ai=%.2f risk=%.2f revenue=%.0f",
            horizon, len(applied), proj.data_maturity, proj.ai_maturity, proj.risk, proj.revenue,
        )
        low, high = config.SIMULATION_CONFIDENCE
        return SimulatedTwinState(
            state=simulated,
            future_timestamp=future_timestamp,
            months_ahead=horizon,
            interventions_applied=applied,
            confidence_interval=ConfidenceInterval(low=low, high=high),
        )


def simulate_state(
    state: TwinState,
    horizon_months: int,
    interventions: Sequence[TwinIntervention | Mapping] | None = None,
    as_of: Timestamp | None = None,
    effects: Mapping[str, Sequence[config.EffectRule]] | None = None,
) -> SimulatedTwinState:
    """Functional shortcut for ``ForwardSimulator(effects).simulate(...)``."""
    return ForwardSimulator(effects).simulate(state, horizon_months, interventions, as_of)
