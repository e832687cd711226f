"""
Pro Forma Engine
================

Pure N-period compounding projection engine with zero external dependencies.

Public API:
- ``AssumptionSet`` / ``coerce_number`` : permissive parameter container
- ``ModelSpec`` / ``SegmentSpec`` / ``TierSpec`` / ``RecurrenceConfig`` : model definition
- ``project(model, assumptions, periods)`` : period-by-period projection
- ``summarize(periods)`` : annual rollups; ``find_breakeven_month`` / ``compute_key_metrics``
- ``compute_unit_economics`` : per-segment ARPU, CAC, LTV, payback
- ``build_assumption_set(model_name, snapshot, overrides)`` : canonical input preparation
- ``AnnualPlan`` / ``compute_plan_metrics`` : year-level plan variant
- ``project_runway`` / ``stress_test_runway`` : cash runway walk-forward and burn scenarios
- ``marketing_roi`` / ``estimate_breakeven`` : what-if calculators
"""

from proforma_engine.aggregator import (
    AnnualSummary,
    KeyMetrics,
    UnitEconomics,
    blended_cac,
    breakeven_from_periods,
    compute_key_metrics,
    compute_stream_unit_economics,
    compute_unit_economics,
    find_breakeven_month,
    lifetime_value,
    summarize,
)
from proforma_engine.annual_plan import (
    AnnualPlan,
    compute_plan_metrics,
    default_plan,
    extrapolate_revenue,
    summarize_plan,
)
from proforma_engine.assumptions import AssumptionSet, coerce_number
from proforma_engine.calculators import BreakevenEstimate, MarketingRoi, estimate_breakeven, marketing_roi
from proforma_engine.engine import (
    DEFAULT_HORIZON_MONTHS,
    PERIODS_PER_YEAR,
    CompoundingStreamLine,
    InputError,
    ModelSpec,
    PeriodResult,
    PerUnitLine,
    RecurrenceConfig,
    SegmentSpec,
    TierSpec,
    compound,
    project,
    round_half_up,
)
from proforma_engine.inputs_builder import build_assumption_set
from proforma_engine.presets import MODELS, default_assumptions, get_model
from proforma_engine.runway import (
    RunwayProjection,
    StressSettings,
    StressTestResult,
    project_runway,
    quarter_to_month,
    stress_test_runway,
)

__all__ = [
    "DEFAULT_HORIZON_MONTHS",
    "MODELS",
    "PERIODS_PER_YEAR",
    "AnnualPlan",
    "AnnualSummary",
    "AssumptionSet",
    "BreakevenEstimate",
    "CompoundingStreamLine",
    "InputError",
    "KeyMetrics",
    "MarketingRoi",
    "ModelSpec",
    "PerUnitLine",
    "PeriodResult",
    "RecurrenceConfig",
    "RunwayProjection",
    "SegmentSpec",
    "StressSettings",
    "StressTestResult",
    "TierSpec",
    "UnitEconomics",
    "blended_cac",
    "breakeven_from_periods",
    "build_assumption_set",
    "coerce_number",
    "compound",
    "compute_key_metrics",
    "compute_plan_metrics",
    "compute_stream_unit_economics",
    "compute_unit_economics",
    "default_assumptions",
    "default_plan",
    "estimate_breakeven",
    "extrapolate_revenue",
    "find_breakeven_month",
    "get_model",
    "lifetime_value",
    "marketing_roi",
    "project",
    "project_runway",
    "quarter_to_month",
    "round_half_up",
    "stress_test_runway",
    "summarize",
    "summarize_plan",
]
