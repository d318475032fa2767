"""State constructor: adapter + graph builder → one TwinState snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

import pandas as pd

from .context import TwinContext, adapt_context
from .graph import build_graph
from .models import TwinState

STATE_SCHEMA_VERSION = 1

Timestamp = str | datetime | pd.Timestamp


def resolve_timestamp(timestamp: Timestamp | None = None) -> str:
    """ISO-8601 string for ``timestamp``, or for the current UTC time when omitted."""
    if timestamp is None:
        return pd.Timestamp.now(tz="UTC").isoformat()
    return pd.Timestamp(timestamp).isoformat()


def add_months(timestamp: Timestamp | None, months: int) -> str:
    """Calendar-aware month offset (end-of-month dates roll back, never over)."""
    base = pd.Timestamp(resolve_timestamp(timestamp))
    return (base + pd.DateOffset(months=int(months))).isoformat()


def build_state(
    context: TwinContext | Mapping | None,
    timestamp: Timestamp | None = None,
    label: str | None = None,
) -> TwinState:
    """
    Construct a full twin state from an integrated upstream context.

    Deterministic for identical ``context``, ``timestamp`` and ``label``;
    pass an explicit timestamp whenever exact output matters.
    """
    slices = adapt_context(context)
    nodes, edges = build_graph(slices.maturity, slices.financial, slices.risk)
    return TwinState(
        timestamp=resolve_timestamp(timestamp),
        version=STATE_SCHEMA_VERSION,
        maturity=slices.maturity,
        financial=slices.financial,
        risk=slices.risk,
        capabilities=slices.capabilities,
        roadmap=slices.roadmap,
        nodes=nodes,
        edges=edges,
        label=label,
    )
