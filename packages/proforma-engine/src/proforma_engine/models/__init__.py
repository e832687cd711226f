"""
Convenience re-exports of data models.

Models are defined across ``proforma_engine.engine``, ``.aggregator``,
``.annual_plan``, ``.calculators`` and ``.runway`` and re-exported here for consumers who
prefer ``from proforma_engine.models import PeriodResult``.
"""

from proforma_engine.aggregator import AnnualSummary, KeyMetrics, UnitEconomics
from proforma_engine.annual_plan import AnnualPlan
from proforma_engine.assumptions import AssumptionSet
from proforma_engine.calculators import BreakevenEstimate, MarketingRoi
from proforma_engine.engine import (
    CompoundingStreamLine,
    InputError,
    ModelSpec,
    PeriodResult,
    PerUnitLine,
    RecurrenceConfig,
    SegmentSpec,
    TierSpec,
)
from proforma_engine.runway import RunwayMonth, RunwayProjection, StressSettings, StressTestResult

__all__ = [
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
    "RunwayMonth",
    "RunwayProjection",
    "SegmentSpec",
    "StressSettings",
    "StressTestResult",
    "TierSpec",
    "UnitEconomics",
]
