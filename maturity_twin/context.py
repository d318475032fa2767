"""
Maturity Twin: Context Adapter

Normalizes heterogeneous upstream metrics (data/AI maturity audits,
financial-impact and risk-assessment results, capability gaps, roadmap
counts) into fully-populated, range-clamped state slices. Any field may be
absent in the input; nothing is left undefined in the output.

Also holds the descriptor parsers that turn raw caller input into
interventions and goals.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any

from . import config
from .models import (
    CapabilityGap,
    GoalType,
    InterventionType,
    TwinCapabilities,
    TwinFinancial,
    TwinGoal,
    TwinIntervention,
    TwinMaturity,
    TwinRisk,
    TwinRoadmap,
)

logger = logging.getLogger(__name__)

_MATURITY_SUBSCORES = (
    "collection_score", "storage_score", "integration_score", "governance_score",
    "accessibility_score", "automation_score", "ai_usage_score", "deployment_score",
)
_RISK_SUBSCORES = (
    "ai_misalignment_score", "infrastructure_score", "operational_score", "strategic_score",
)


def clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


def clamp_months(value: Any, bounds: tuple[int, int]) -> int:
    """Whole months within ``bounds``; infinities saturate and NaN takes the lower bound."""
    value = float(value)
    if math.isnan(value):
        return bounds[0]
    return int(clamp(value, *bounds))


def _number(partial: Mapping, key: str) -> float | None:
    """Numeric field or None when absent, null, non-numeric or non-finite."""
    raw = partial.get(key)
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _score(partial: Mapping, key: str, default: float | None = None) -> float | None:
    value = _number(partial, key)
    if value is None:
        return default
    return clamp(value, *config.SCORE_RANGE)


def _count(partial: Mapping, key: str) -> int:
    value = _number(partial, key)
    return max(0, int(value)) if value is not None else 0


def _stage(partial: Mapping, key: str, default: int, bounds: tuple[int, int]) -> int:
    value = _number(partial, key)
    if value is None:
        value = default
    return int(clamp(round(value), *bounds))


def _as_mapping(partial: Any) -> dict:
    if partial is None:
        return {}
    if is_dataclass(partial) and not isinstance(partial, type):
        return asdict(partial)
    return dict(partial)


@dataclass
class TwinContext:
    """Partial per-dimension records supplied by the upstream scorers."""
    maturity: dict[str, Any] = field(default_factory=dict)
    financial: dict[str, Any] = field(default_factory=dict)
    risk: dict[str, Any] = field(default_factory=dict)
    capabilities: dict[str, Any] = field(default_factory=dict)
    roadmap: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, context: TwinContext | Mapping | None) -> TwinContext:
        if isinstance(context, cls):
            return context
        context = context or {}
        return cls(
            maturity=_as_mapping(context.get("maturity")),
            financial=_as_mapping(context.get("financial")),
            risk=_as_mapping(context.get("risk")),
            capabilities=_as_mapping(context.get("capabilities")),
            roadmap=_as_mapping(context.get("roadmap")),
        )


@dataclass
class TwinSlices:
    """Populated output of the adapter, one record per dimension."""
    maturity: TwinMaturity
    financial: TwinFinancial
    risk: TwinRisk
    capabilities: TwinCapabilities
    roadmap: TwinRoadmap


# ──────────────────────────────────────────────────────────────────────
# 1. Per-dimension Normalizers
# ──────────────────────────────────────────────────────────────────────

def normalize_maturity(partial: Any) -> TwinMaturity:
    p = _as_mapping(partial)
    d = config.CONTEXT_DEFAULTS
    return TwinMaturity(
        data_maturity_index=_score(p, "data_maturity_index", d["data_maturity_index"]),
        data_maturity_stage=_stage(p, "data_maturity_stage", d["data_maturity_stage"],
                                   config.DATA_STAGE_RANGE),
        ai_maturity_score=_score(p, "ai_maturity_score", d["ai_maturity_score"]),
        ai_maturity_stage=_stage(p, "ai_maturity_stage", d["ai_maturity_stage"],
                                 config.AI_STAGE_RANGE),
        **{key: _score(p, key) for key in _MATURITY_SUBSCORES},
    )


def normalize_financial(partial: Any) -> TwinFinancial:
    """
    Revenue is floored at zero, margin clamped to 0-100, and profit is always
    derived as revenue × margin% (a supplied profit figure is ignored).
    Valuation defaults to revenue × the default multiple.
    """
    p = _as_mapping(partial)
    d = config.CONTEXT_DEFAULTS
    revenue = _number(p, "revenue")
    revenue = max(0.0, d["revenue"] if revenue is None else revenue)
    margin = _number(p, "profit_margin_pct")
    margin = clamp(d["profit_margin_pct"] if margin is None else margin, 0.0, 100.0)
    valuation = _number(p, "valuation")
    if valuation is None:
        valuation = revenue * d["valuation_multiple"]
    return TwinFinancial(
        revenue=revenue,
        profit=revenue * (margin / 100.0),
        profit_margin_pct=margin,
        valuation=max(0.0, valuation),
        revenue_upside=_number(p, "revenue_upside"),
        cost_reduction=_number(p, "cost_reduction"),
    )


def normalize_risk(partial: Any) -> TwinRisk:
    p = _as_mapping(partial)
    d = config.CONTEXT_DEFAULTS
    level = p.get("risk_level")
    return TwinRisk(
        overall_risk_score=_score(p, "overall_risk_score", d["overall_risk_score"]),
        risk_level=str(level) if level else d["risk_level"],
        **{key: _score(p, key) for key in _RISK_SUBSCORES},
    )


def _gap(raw: Any) -> CapabilityGap:
    g = _as_mapping(raw)
    return CapabilityGap(
        description=str(g.get("description") or ""),
        area=g.get("area"),
        priority=g.get("priority"),
        id=g.get("id"),
    )


def normalize_capabilities(partial: Any) -> TwinCapabilities:
    p = _as_mapping(partial)
    return TwinCapabilities(
        gap_count=_count(p, "gap_count"),
        high_priority_count=_count(p, "high_priority_count"),
        areas=[str(a) for a in p.get("areas") or []],
        top_gaps=[_gap(g) for g in p.get("top_gaps") or []],
    )


def normalize_roadmap(partial: Any) -> TwinRoadmap:
    p = _as_mapping(partial)
    return TwinRoadmap(
        total_initiatives=_count(p, "total_initiatives"),
        completed=_count(p, "completed"),
        in_progress=_count(p, "in_progress"),
        target_data_maturity=_score(p, "target_data_maturity"),
        target_ai_maturity=_score(p, "target_ai_maturity"),
        progress_pct=_score(p, "progress_pct"),
    )


def adapt_context(context: TwinContext | Mapping | None) -> TwinSlices:
    """Normalize every dimension of an upstream context. Pure; never raises on values."""
    ctx = TwinContext.coerce(context)
    return TwinSlices(
        maturity=normalize_maturity(ctx.maturity),
        financial=normalize_financial(ctx.financial),
        risk=normalize_risk(ctx.risk),
        capabilities=normalize_capabilities(ctx.capabilities),
        roadmap=normalize_roadmap(ctx.roadmap),
    )


# ──────────────────────────────────────────────────────────────────────
# 2. Descriptor Parsers
# ──────────────────────────────────────────────────────────────────────

def intervention_from_dict(raw: Mapping[str, Any]) -> TwinIntervention:
    """
    Default and clamp a raw intervention descriptor.

    Missing id → generated ``int-xxxxxx``; missing type → investment;
    intensity defaults to 0.5 and is clamped to [0, 1].

    Raises:
        InvalidInterventionError: type present but not recognised.
    """
    raw = raw or {}
    intensity = _number(raw, "intensity")
    if intensity is None:
        intensity = config.DEFAULT_INTERVENTION_INTENSITY
    duration = _number(raw, "duration_months")
    description = raw.get("description")
    return TwinIntervention(
        id=str(raw.get("id") or f"int-{uuid.uuid4().hex[:6]}"),
        type=InterventionType.parse(raw.get("type") or InterventionType.INVESTMENT.value),
        target=str(raw.get("target") or ""),
        intensity=clamp(intensity, 0.0, 1.0),
        duration_months=max(0, int(duration)) if duration is not None else None,
        description=str(description) if description is not None else None,
    )


def goal_from_dict(raw: Mapping[str, Any]) -> TwinGoal:
    """
    Default and clamp a raw goal descriptor.

    Raises:
        InvalidGoalError: missing or unrecognised goal type.
    """
    raw = raw or {}
    target = _number(raw, "target_value")
    horizon = _number(raw, "horizon_months")
    if horizon is None:
        horizon = config.DEFAULT_GOAL_HORIZON
    return TwinGoal(
        type=GoalType.parse(raw.get("type")),
        target_value=config.DEFAULT_GOAL_TARGET if target is None else target,
        horizon_months=clamp_months(horizon, config.GOAL_HORIZON_RANGE),
        minimize_risk=bool(raw.get("minimize_risk", False)),
    )
