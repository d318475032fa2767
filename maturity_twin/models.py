"""
Maturity Twin: Value Objects

Twin state slices (maturity, financial, risk, capabilities, roadmap), the
derived causal graph view, interventions, goals, simulation results and
optimized plans. All are plain dataclasses: created by a function call,
copied with ``snapshot()`` / ``copy.deepcopy`` and never shared between
snapshots. ``to_dict()`` returns JSON-safe nested dicts/lists.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any

from .errors import InvalidGoalError, InvalidInterventionError


# ──────────────────────────────────────────────────────────────────────
# 1. Enums
# ──────────────────────────────────────────────────────────────────────

class NodeType(str, Enum):
    MATURITY = "maturity"
    FINANCIAL = "financial"
    RISK = "risk"
    CAPABILITY = "capability"
    ROADMAP = "roadmap"
    PROCESS = "process"


class InterventionType(str, Enum):
    INVESTMENT = "investment"
    GOVERNANCE = "governance"
    TECHNOLOGY = "technology"
    CAPABILITY = "capability"
    PROCESS = "process"

    @classmethod
    def parse(cls, value: Any) -> InterventionType:
        try:
            return cls(value)
        except ValueError:
            raise InvalidInterventionError(
                f"Unknown intervention type {value!r}; expected one of "
                f"{[t.value for t in cls]}"
            ) from None


class GoalType(str, Enum):
    AI_MATURITY_STAGE = "ai_maturity_stage"
    DATA_MATURITY_STAGE = "data_maturity_stage"
    PROFIT_INCREASE_PCT = "profit_increase_pct"
    RISK_REDUCTION = "risk_reduction"
    REVENUE_INCREASE_PCT = "revenue_increase_pct"

    @classmethod
    def parse(cls, value: Any) -> GoalType:
        try:
            return cls(value)
        except ValueError:
            raise InvalidGoalError(
                f"Unknown goal type {value!r}; expected one of "
                f"{[t.value for t in cls]}"
            ) from None


def to_plain(obj: Any) -> Any:
    """Recursively convert dataclasses/enums into plain dicts, lists and scalars."""
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_plain(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {str(k): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    return obj


# ──────────────────────────────────────────────────────────────────────
# 2. State Slices
# ──────────────────────────────────────────────────────────────────────

@dataclass
class TwinMaturity:
    data_maturity_index: float          # 0-100
    data_maturity_stage: int            # 1-6
    ai_maturity_score: float            # 0-100
    ai_maturity_stage: int              # 1-7
    collection_score: float | None = None
    storage_score: float | None = None
    integration_score: float | None = None
    governance_score: float | None = None
    accessibility_score: float | None = None
    automation_score: float | None = None
    ai_usage_score: float | None = None
    deployment_score: float | None = None


@dataclass
class TwinFinancial:
    revenue: float
    profit: float                       # revenue × margin%
    profit_margin_pct: float            # 0-100
    valuation: float
    revenue_upside: float | None = None
    cost_reduction: float | None = None


@dataclass
class TwinRisk:
    overall_risk_score: float           # 0-100
    risk_level: str
    ai_misalignment_score: float | None = None
    infrastructure_score: float | None = None
    operational_score: float | None = None
    strategic_score: float | None = None


@dataclass
class CapabilityGap:
    description: str
    area: str | None = None
    priority: str | None = None
    id: str | None = None


@dataclass
class TwinCapabilities:
    gap_count: int = 0
    high_priority_count: int = 0
    areas: list[str] = field(default_factory=list)
    top_gaps: list[CapabilityGap] = field(default_factory=list)


@dataclass
class TwinRoadmap:
    total_initiatives: int = 0
    completed: int = 0
    in_progress: int = 0
    target_data_maturity: float | None = None
    target_ai_maturity: float | None = None
    progress_pct: float | None = None


# ──────────────────────────────────────────────────────────────────────
# 3. Graph View
# ──────────────────────────────────────────────────────────────────────

@dataclass
class TwinNode:
    """A state variable exposed for visualization; recomputed on every build."""
    id: str
    label: str
    type: NodeType
    value: float
    unit: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class TwinEdge:
    """Directed causal link between two node ids; strength < 0 inhibits."""
    source_id: str
    target_id: str
    strength: float
    label: str | None = None


# ──────────────────────────────────────────────────────────────────────
# 4. Twin State
# ──────────────────────────────────────────────────────────────────────

@dataclass
class TwinState:
    """Complete snapshot of the organisation at one instant."""
    timestamp: str
    version: int
    maturity: TwinMaturity
    financial: TwinFinancial
    risk: TwinRisk
    capabilities: TwinCapabilities
    roadmap: TwinRoadmap
    nodes: list[TwinNode] = field(default_factory=list)
    edges: list[TwinEdge] = field(default_factory=list)
    label: str | None = None

    def snapshot(self) -> TwinState:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return to_plain(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TwinState:
        """Rebuild a state previously produced by ``to_dict()``."""
        caps = dict(data.get("capabilities") or {})
        caps["top_gaps"] = [CapabilityGap(**g) for g in caps.get("top_gaps") or []]
        caps["areas"] = list(caps.get("areas") or [])
        return cls(
            timestamp=data["timestamp"],
            version=int(data.get("version", 1)),
            maturity=TwinMaturity(**data["maturity"]),
            financial=TwinFinancial(**data["financial"]),
            risk=TwinRisk(**data["risk"]),
            capabilities=TwinCapabilities(**caps),
            roadmap=TwinRoadmap(**(data.get("roadmap") or {})),
            nodes=[
                TwinNode(**{**n, "type": NodeType(n["type"]),
                            "metadata": copy.deepcopy(n.get("metadata") or {})})
                for n in data.get("nodes") or []
            ],
            edges=[TwinEdge(**e) for e in data.get("edges") or []],
            label=data.get("label"),
        )


# ──────────────────────────────────────────────────────────────────────
# 5. Interventions, Goals & Results
# ──────────────────────────────────────────────────────────────────────

@dataclass
class TwinIntervention:
    id: str
    type: InterventionType
    target: str
    intensity: float                    # 0-1
    duration_months: int | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return to_plain(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TwinIntervention:
        return cls(
            id=str(data["id"]),
            type=InterventionType.parse(data["type"]),
            target=str(data.get("target", "")),
            intensity=float(data["intensity"]),
            duration_months=data.get("duration_months"),
            description=data.get("description"),
        )


@dataclass
class TwinGoal:
    type: GoalType
    target_value: float
    horizon_months: int                 # 6-48
    minimize_risk: bool = False

    def to_dict(self) -> dict[str, Any]:
        return to_plain(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TwinGoal:
        return cls(
            type=GoalType.parse(data["type"]),
            target_value=float(data["target_value"]),
            horizon_months=int(data["horizon_months"]),
            minimize_risk=bool(data.get("minimize_risk", False)),
        )


@dataclass
class ConfidenceInterval:
    low: float
    high: float


@dataclass
class SimulatedTwinState:
    state: TwinState
    future_timestamp: str
    months_ahead: int
    interventions_applied: list[TwinIntervention]
    confidence_interval: ConfidenceInterval

    def to_dict(self) -> dict[str, Any]:
        return to_plain(self)


@dataclass
class ProjectedState:
    """The maturity/financial/risk slices of a projected TwinState."""
    maturity: TwinMaturity
    financial: TwinFinancial
    risk: TwinRisk


@dataclass
class OptimizedAction:
    order: int                          # 1-based position in the plan
    intervention: TwinIntervention
    start_month: int
    end_month: int
    expected_impact: dict[str, float] = field(default_factory=dict)


@dataclass
class OptimizedTransformationPlan:
    goal: TwinGoal
    actions: list[OptimizedAction]
    projected_final_state: ProjectedState
    total_duration_months: int
    confidence_score: float
    trade_offs: list[str] = field(default_factory=list)
    risks: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return to_plain(self)
