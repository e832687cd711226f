"""
Projection Service
==================

Thin orchestration layer: load a saved scenario via a snapshot store, prepare
assumptions via the shared ``build_assumption_set`` builder, run the engine,
and return results.

All input-preparation and computation logic lives in **proforma_engine** so
there is exactly one source of truth.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from proforma_engine import (
    AnnualPlan,
    AnnualSummary,
    AssumptionSet,
    InputError,
    ModelSpec,
    PeriodResult,
    StressSettings,
    UnitEconomics,
    breakeven_from_periods,
    build_assumption_set,
    compute_plan_metrics,
    compute_stream_unit_economics,
    compute_unit_economics,
    default_plan,
    estimate_breakeven,
    extrapolate_revenue,
    get_model,
    marketing_roi,
    project,
    project_runway,
    stress_test_runway,
    summarize,
    summarize_plan,
)
from proforma_engine.presets import MODELS, default_assumptions
from proforma_service.config import settings
from proforma_service.exporters import export_csv, export_workbook
from proforma_service.stores.base import BaseSnapshotStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=settings.projection_cache_size)
def _cached_projection(model: ModelSpec, assumptions: AssumptionSet, periods: int) -> Tuple[PeriodResult, ...]:
    logger.debug(f"Projection cache miss: {model.name} x {periods}")
    return tuple(project(model, assumptions, periods))


def clear_projection_cache() -> None:
    _cached_projection.cache_clear()


@dataclass(frozen=True)
class ProjectionRun:
    model: ModelSpec
    assumptions: AssumptionSet
    periods: Tuple[PeriodResult, ...]
    summaries: List[AnnualSummary]
    unit_economics: List[UnitEconomics]
    breakeven_month: Optional[int]


class ProjectionService:
    def __init__(self, store: BaseSnapshotStore):
        self.store = store

    # ------------------------------------------------------------------ #
    # Projections
    # ------------------------------------------------------------------ #

    def prepare(
        self,
        model_name: str,
        scenario: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Tuple[ModelSpec, AssumptionSet]:
        model = get_model(model_name)
        snapshot = self.store.load(scenario) if scenario else None
        return model, build_assumption_set(model_name, snapshot, overrides)

    def run(
        self,
        model_name: str,
        overrides: Optional[Dict[str, Any]] = None,
        months: Optional[int] = None,
        scenario: Optional[str] = None,
    ) -> ProjectionRun:
        """
        Orchestrates a projection.

        1. Resolve the model and merge defaults, snapshot and overrides.
        2. Run (or reuse) the engine projection.
        3. Roll up annual summaries, unit economics (segments, then advertiser
           tiers) and breakeven.
        """
        months = settings.default_months if months is None else months
        if months < 0:
            raise InputError("months must be >= 0")

        model, assumptions = self.prepare(model_name, scenario, overrides)
        periods = _cached_projection(model, assumptions, months)

        return ProjectionRun(
            model=model,
            assumptions=assumptions,
            periods=periods,
            summaries=summarize(periods),
            unit_economics=[
                *compute_unit_economics(model, assumptions, periods),
                *compute_stream_unit_economics(model, assumptions, periods),
            ],
            breakeven_month=breakeven_from_periods(periods),
        )

    def calculate(
        self,
        model_name: str,
        overrides: Optional[Dict[str, Any]] = None,
        months: Optional[int] = None,
        scenario: Optional[str] = None,
    ) -> Dict[str, Any]:
        result = self.run(model_name, overrides, months, scenario)
        logger.info(
            f"Projected {model_name} for {len(result.periods)} periods, breakeven month {result.breakeven_month}"
        )
        return {
            "model": model_name,
            "months": len(result.periods),
            "assumptions": result.assumptions.to_dict(),
            "periods": list(result.periods),
            "annual_summaries": result.summaries,
            "unit_economics": result.unit_economics,
            "breakeven_month": result.breakeven_month,
        }

    def export_csv(self, model_name: str, overrides=None, months=None, scenario=None) -> str:
        result = self.run(model_name, overrides, months, scenario)
        return export_csv(result.model, result.periods, result.summaries)

    def export_xlsx(self, model_name: str, overrides=None, months=None, scenario=None) -> bytes:
        result = self.run(model_name, overrides, months, scenario)
        return export_workbook(
            result.model,
            result.assumptions,
            result.periods,
            result.summaries,
            result.unit_economics,
        )

    def compare_scenarios(
        self,
        model_name: str,
        scenarios: Sequence[Mapping[str, Any]],
        months: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Year-1 headline figures for each scenario, in request order."""
        rows = []
        for entry in scenarios:
            result = self.run(model_name, entry.get("assumptions"), months, entry.get("scenario"))
            first = result.summaries[0] if result.summaries else None
            rows.append(
                {
                    "name": entry.get("name") or entry.get("scenario") or f"scenario_{len(rows) + 1}",
                    "total_revenue": first.total_revenue if first else 0.0,
                    "total_costs": first.total_costs if first else 0.0,
                    "net_profit": first.net_profit if first else 0.0,
                    "gross_margin_pct": first.gross_margin_pct if first else 0.0,
                    "ending_users": first.ending_users if first else 0.0,
                    "breakeven_month": result.breakeven_month,
                }
            )
        return rows

    # ------------------------------------------------------------------ #
    # Annual plan / runway
    # ------------------------------------------------------------------ #

    def plan_metrics(
        self,
        plan: Optional[AnnualPlan] = None,
        assumptions: Optional[Dict[str, Any]] = None,
        extrapolate_growth_pct: Optional[float] = None,
    ) -> Dict[str, Any]:
        plan = plan or default_plan()
        if extrapolate_growth_pct is not None:
            plan = extrapolate_revenue(plan, extrapolate_growth_pct)
        overrides = AssumptionSet(assumptions) if assumptions else None
        return {
            "plan": plan,
            "annual_summaries": summarize_plan(plan),
            "metrics": compute_plan_metrics(plan, overrides),
        }

    def runway(
        self,
        starting_cash: float,
        monthly_expenses: float,
        monthly_revenue: float,
        revenue_growth_pct: float,
        months: Optional[int] = None,
        capital_events: Sequence[Tuple[int, float]] = (),
    ):
        months = settings.default_months if months is None else months
        return project_runway(
            starting_cash,
            monthly_expenses,
            monthly_revenue,
            revenue_growth_pct,
            months=months,
            capital_events=capital_events,
        )

    def stress_test(
        self,
        stress: StressSettings,
        annual_ebitda: Optional[Sequence[float]] = None,
        capital_events: Sequence[Tuple[int, float]] = (),
    ):
        """Stress the runway; EBITDA defaults to the default annual plan's."""
        if annual_ebitda is None:
            annual_ebitda = [s.net_profit for s in summarize_plan(default_plan())]
        result = stress_test_runway(annual_ebitda, stress, capital_events)
        logger.info(
            f"Stress test ({stress.scenario}): runway {result.runway_months} months, "
            f"next raise month {result.next_raise_month}"
        )
        return result

    def marketing_roi(self, marketing_spend: float, cac: float, churn_pct: float, arpu: float):
        return marketing_roi(marketing_spend, cac, churn_pct, arpu)

    def estimate_breakeven(
        self,
        initial_revenue: float,
        fixed_opex: float,
        variable_opex_pct: float,
        revenue_growth_pct: float,
        months: Optional[int] = None,
    ):
        months = settings.default_months if months is None else months
        return estimate_breakeven(initial_revenue, fixed_opex, variable_opex_pct, revenue_growth_pct, months)

    # ------------------------------------------------------------------ #
    # Scenario snapshots / catalogue
    # ------------------------------------------------------------------ #

    def list_models(self) -> Dict[str, Any]:
        return {
            name: {
                "title": model.title,
                "segments": [s.name for s in model.segments],
                "defaults": default_assumptions(name).to_dict(),
            }
            for name, model in MODELS.items()
        }

    def list_scenarios(self) -> List[str]:
        return self.store.list_names()

    def get_scenario(self, name: str) -> Dict[str, Any]:
        return self.store.load(name)

    def save_scenario(self, name: str, assumptions: Mapping[str, Any]) -> Dict[str, float]:
        values = AssumptionSet(assumptions).to_dict()
        self.store.save(name, values)
        return values

    def delete_scenario(self, name: str) -> None:
        self.store.delete(name)
