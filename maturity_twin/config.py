"""
Maturity Twin: Policy & Model Configuration

Every tunable of the twin lives here as a module-level table:
  - Adapter defaults for missing upstream metrics
  - The fixed causal topology (nodes + directed weighted edges)
  - Intervention effect rules used by the forward simulator
  - The goal playbook used by the path optimizer
  - Financial projection coefficients and placeholder confidence figures

Changing a causal assumption means editing a table here, not simulation code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .errors import TwinConfigError
from .models import GoalType, InterventionType, NodeType

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────
# 1. Context Defaults & Ranges
# ──────────────────────────────────────────────────────────────────────

CONTEXT_DEFAULTS: dict[str, float | str] = {
    "data_maturity_index": 50.0,
    "data_maturity_stage": 2,
    "ai_maturity_score": 50.0,
    "ai_maturity_stage": 2,
    "revenue": 5_000_000.0,
    "profit_margin_pct": 10.0,
    "valuation_multiple": 2.5,     # valuation = revenue × multiple when absent
    "overall_risk_score": 50.0,
    "risk_level": "medium",
}

SCORE_RANGE = (0.0, 100.0)
DATA_STAGE_RANGE = (1, 6)
AI_STAGE_RANGE = (1, 7)

SIMULATION_HORIZON_RANGE = (1, 60)   # months
GOAL_HORIZON_RANGE = (6, 48)         # months
DEFAULT_GOAL_HORIZON = 12
DEFAULT_GOAL_TARGET = 5.0
DEFAULT_INTERVENTION_DURATION = 12   # months, when an intervention gives none
DEFAULT_INTERVENTION_INTENSITY = 0.5

# Stage bands used when deriving a stage from a simulated score
DATA_STAGE_BAND = 17.0
AI_STAGE_BAND = 15.0

# Risk level thresholds: score > high → "high", > medium → "medium", else "low"
RISK_LEVEL_THRESHOLDS = {"high": 60.0, "medium": 35.0}


# ──────────────────────────────────────────────────────────────────────
# 2. Causal Topology
# ──────────────────────────────────────────────────────────────────────

# (node id, label, node type, state slice, field, unit)
NODE_TABLE: tuple[tuple[str, str, NodeType, str, str, str], ...] = (
    ("data_maturity", "Data maturity", NodeType.MATURITY, "maturity", "data_maturity_index", "0-100"),
    ("ai_maturity", "AI maturity", NodeType.MATURITY, "maturity", "ai_maturity_score", "0-100"),
    ("revenue", "Revenue", NodeType.FINANCIAL, "financial", "revenue", "currency"),
    ("profit", "Profit", NodeType.FINANCIAL, "financial", "profit", "currency"),
    ("valuation", "Valuation", NodeType.FINANCIAL, "financial", "valuation", "currency"),
    ("risk", "Risk score", NodeType.RISK, "risk", "overall_risk_score", "0-100"),
)

# (source id, target id, strength, label); negative strength inhibits
CAUSAL_EDGES: tuple[tuple[str, str, float, str], ...] = (
    ("data_maturity", "ai_maturity", 0.8, "Data quality → AI accuracy"),
    ("ai_maturity", "revenue", 0.6, "AI → Revenue upside"),
    ("ai_maturity", "profit", 0.5, "Efficiency → Profit"),
    ("data_maturity", "risk", -0.5, "Governance → Risk reduction"),
    ("revenue", "valuation", 0.7, "Revenue → Valuation"),
)

# Variables an intervention may move directly
SIMULATED_VARIABLES = ("data_maturity", "ai_maturity", "risk")


# ──────────────────────────────────────────────────────────────────────
# 3. Intervention Effects
# ──────────────────────────────────────────────────────────────────────

@dataclass
class EffectRule:
    """
    One effect rule for an intervention type.

    The rule applies when any keyword is a case-insensitive substring of the
    intervention target (an empty keyword tuple always applies). Deltas are the
    points added per year of effective duration at full intensity.
    """
    keywords: tuple[str, ...] = ()
    deltas: dict[str, float] = field(default_factory=dict)

    def matches(self, target: str) -> bool:
        if not self.keywords:
            return True
        lowered = target.lower()
        return any(k in lowered for k in self.keywords)


# Per type, rules are tried in order and the first match wins
INTERVENTION_EFFECTS: dict[str, tuple[EffectRule, ...]] = {
    InterventionType.INVESTMENT.value: (
        EffectRule(("data",), {"data_maturity": 8.0}),
        EffectRule(("ai", "ml"), {"ai_maturity": 7.0}),
    ),
    InterventionType.GOVERNANCE.value: (
        EffectRule((), {"data_maturity": 5.0, "risk": -6.0}),
    ),
    InterventionType.TECHNOLOGY.value: (
        EffectRule((), {"ai_maturity": 6.0, "data_maturity": 3.0}),
    ),
    InterventionType.CAPABILITY.value: (
        EffectRule((), {"ai_maturity": 4.0, "data_maturity": 3.0}),
    ),
    InterventionType.PROCESS.value: (
        EffectRule((), {"ai_maturity": 4.0, "data_maturity": 3.0}),
    ),
}


def load_intervention_effects(path: str | Path) -> dict[str, tuple[EffectRule, ...]]:
    """
    Load intervention effect overrides from a YAML file.

    Expected layout (types not listed keep their built-in rules):

        governance:
          - keywords: []
            deltas: {data_maturity: 6, risk: -8}

    Raises:
        TwinConfigError: unknown intervention type, unknown variable,
                         or a malformed rule.
    """
    path = Path(path)
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise TwinConfigError(f"Effect overrides must be a mapping: {path}")

    effects = dict(INTERVENTION_EFFECTS)
    for type_name, rules in raw.items():
        if type_name not in INTERVENTION_EFFECTS:
            raise TwinConfigError(f"Unknown intervention type in {path}: {type_name!r}")
        parsed = []
        for rule in rules or []:
            if not isinstance(rule, dict):
                raise TwinConfigError(f"Malformed rule for {type_name!r} in {path}")
            keywords = rule.get("keywords") or []
            if isinstance(keywords, str):
                keywords = [keywords]
            if not isinstance(keywords, list):
                raise TwinConfigError(f"Keywords for {type_name!r} must be a list in {path}")
            raw_deltas = rule.get("deltas") or {}
            if not isinstance(raw_deltas, dict):
                raise TwinConfigError(f"Deltas for {type_name!r} must be a mapping in {path}")
            deltas = {}
            for var, coef in raw_deltas.items():
                if var not in SIMULATED_VARIABLES:
                    raise TwinConfigError(
                        f"Unknown variable {var!r} for {type_name!r} in {path}"
                    )
                try:
                    deltas[var] = float(coef)
                except (TypeError, ValueError):
                    raise TwinConfigError(
                        f"Non-numeric delta {coef!r} for {var!r} in {path}"
                    ) from None
            keywords = tuple(str(k).lower() for k in keywords)
            parsed.append(EffectRule(keywords, deltas))
        effects[type_name] = tuple(parsed)

    logger.info("Loaded intervention effect overrides for %d type(s) from %s",
                len(raw), path)
    return effects


# ──────────────────────────────────────────────────────────────────────
# 4. Financial Projection
# ──────────────────────────────────────────────────────────────────────

BASE_REVENUE_GROWTH = 0.02          # annual, independent of maturity
MATURITY_REVENUE_GROWTH = 0.06      # annual, scaled by maturity factor
MATURITY_MARGIN_POINTS = 4.0        # margin points at maturity factor 1.0
BASE_VALUATION_MULTIPLE = 2.0
MATURITY_VALUATION_MULTIPLE = 1.2

# Placeholder figures, not derived from any variance computation
SIMULATION_CONFIDENCE = (0.75, 0.95)
PLAN_CONFIDENCE = 0.78


# ──────────────────────────────────────────────────────────────────────
# 5. Goal Playbook
# ──────────────────────────────────────────────────────────────────────

@dataclass
class CandidateIntervention:
    """A hand-authored intervention the optimizer may emit for a goal."""
    id: str
    type: InterventionType
    target: str
    intensity: float
    description: str
    duration_cap: int | None = 12   # None runs for the whole horizon


@dataclass
class GoalPolicy:
    stage_scale: int | None                 # stage count for stage goals
    current_field: str | None               # maturity field compared to the target
    candidates: tuple[CandidateIntervention, ...]


GOAL_PLAYBOOK: dict[GoalType, GoalPolicy] = {
    GoalType.AI_MATURITY_STAGE: GoalPolicy(
        stage_scale=7,
        current_field="ai_maturity_score",
        candidates=(
            CandidateIntervention("opt-ai-1", InterventionType.INVESTMENT, "AI/ML capability", 0.8,
                                  "Invest in AI talent and platforms"),
            CandidateIntervention("opt-data-1", InterventionType.INVESTMENT, "Data infrastructure", 0.6,
                                  "Improve data quality for AI"),
        ),
    ),
    GoalType.DATA_MATURITY_STAGE: GoalPolicy(
        stage_scale=6,
        current_field="data_maturity_index",
        candidates=(
            CandidateIntervention("opt-gov-1", InterventionType.GOVERNANCE, "Data governance", 0.7,
                                  "Implement data governance policy"),
            CandidateIntervention("opt-tech-1", InterventionType.TECHNOLOGY, "Data platform", 0.6,
                                  "Deploy modern data stack"),
        ),
    ),
    GoalType.PROFIT_INCREASE_PCT: GoalPolicy(
        stage_scale=None,
        current_field=None,
        candidates=(
            CandidateIntervention("opt-ai-profit", InterventionType.INVESTMENT, "AI automation", 0.7,
                                  "AI-driven efficiency to expand margin", duration_cap=None),
            CandidateIntervention("opt-data-profit", InterventionType.INVESTMENT, "Data quality", 0.5,
                                  "Better data for decisioning", duration_cap=None),
        ),
    ),
    GoalType.RISK_REDUCTION: GoalPolicy(
        stage_scale=None,
        current_field=None,
        candidates=(
            CandidateIntervention("opt-gov-risk", InterventionType.GOVERNANCE, "Governance and compliance", 0.8,
                                  "Strengthen governance to reduce risk"),
        ),
    ),
    GoalType.REVENUE_INCREASE_PCT: GoalPolicy(
        stage_scale=None,
        current_field=None,
        candidates=(
            CandidateIntervention("opt-ai-rev", InterventionType.INVESTMENT, "AI products", 0.75,
                                  "AI-enabled revenue growth", duration_cap=None),
        ),
    ),
}

# Interventions are emitted only when the stage target is more than this many points away
STAGE_GAP_THRESHOLD = 5.0

PLAN_TRADE_OFFS = (
    "Execution depends on organisational capacity and change management.",
    "Financial outlay required for recommended interventions.",
)
PLAN_RISKS = ("Delays or scope creep may extend timeline.",)
LOW_RISK_PATH_NOTE = "Lower-risk path may slow goal achievement."
AGGRESSIVE_PATH_NOTE = "Aggressive path may increase short-term risk."


# ──────────────────────────────────────────────────────────────────────
# 6. Scenario Presets
# ──────────────────────────────────────────────────────────────────────

# name -> list of intervention descriptors (parsed by context.intervention_from_dict)
SCENARIO_PRESETS: dict[str, list[dict]] = {
    "organic": [],
    "balanced": [
        {"id": "bal-gov", "type": "governance", "target": "Data governance", "intensity": 0.5},
        {"id": "bal-ai", "type": "investment", "target": "AI capability", "intensity": 0.5},
    ],
    "aggressive": [
        {"id": "agg-data", "type": "investment", "target": "Data platform", "intensity": 0.9},
        {"id": "agg-ai", "type": "investment", "target": "AI/ML products", "intensity": 0.9},
        {"id": "agg-tech", "type": "technology", "target": "MLOps tooling", "intensity": 0.8},
    ],
}
