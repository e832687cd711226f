"""
Annual Plan
===========

Year-level pro forma: revenue, COGS and OpEx are entered per year rather
than derived from a monthly cohort recurrence. The plan rolls up into the
same ``AnnualSummary`` shape as a monthly projection so key metrics,
breakeven detection and exports work on either.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .aggregator import AnnualSummary, KeyMetrics, compute_key_metrics
from .assumptions import AssumptionSet
from .engine import PERIODS_PER_YEAR, InputError, compound, margin_pct, round_half_up

ENTERPRISE_LINE = "enterprise_licensing"

CFO_STUDIO_DEFAULTS: Dict[str, float] = {
    "monthly_creator_growth": 8,
    "avg_revenue_per_creator": 45,
    "ai_tools_adoption": 35,
    "ad_fill_rate": 65,
    "avg_cpm": 22,
    "churn_rate": 5,
    "cac_paid": 85,
    "cac_organic": 15,
    "gross_margin_target": 70,
    "cash_on_hand": 500000,
}

# Year-over-year uplift applied on top of the growth multiplier when a plan is
# extrapolated from its first year.
REVENUE_UPLIFT: Dict[str, Tuple[float, ...]] = {
    "ai_production_tools": (1.2, 1.3),
    "advertising_marketplace": (1.1, 1.2),
}


@dataclass(frozen=True)
class AnnualPlan:
    revenue: Dict[str, List[float]]
    cogs: Dict[str, List[float]]
    opex: Dict[str, List[float]]
    enterprise_enabled: bool = True
    headcount: Dict[str, List[int]] = field(default_factory=dict)

    @property
    def year_count(self) -> int:
        lengths = {len(v) for group in (self.revenue, self.cogs, self.opex) for v in group.values()}
        if not lengths:
            return 0
        if len(lengths) != 1:
            raise InputError(f"All plan lines must cover the same number of years, got {sorted(lengths)}")
        return lengths.pop()

    def active_revenue(self) -> Dict[str, List[float]]:
        if self.enterprise_enabled:
            return dict(self.revenue)
        return {k: v for k, v in self.revenue.items() if k != ENTERPRISE_LINE}


def default_plan() -> AnnualPlan:
    return AnnualPlan(
        revenue={
            "saas_subscriptions": [480000, 1200000, 2400000],
            "ai_production_tools": [120000, 420000, 960000],
            "advertising_marketplace": [180000, 720000, 1800000],
            ENTERPRISE_LINE: [0, 150000, 500000],
        },
        cogs={
            "hosting_bandwidth": [48000, 96000, 180000],
            "ai_inference": [36000, 84000, 192000],
            "payment_processing": [24000, 60000, 144000],
        },
        opex={
            "product_engineering": [360000, 540000, 720000],
            "sales_marketing": [180000, 360000, 540000],
            "general_admin": [120000, 180000, 240000],
            "customer_success": [60000, 120000, 180000],
            "contractors_ai": [48000, 72000, 96000],
        },
        headcount={
            "Engineering": [4, 7, 12],
            "Product": [2, 3, 5],
            "Sales": [2, 4, 8],
            "Marketing": [1, 2, 4],
            "Customer Success": [1, 2, 4],
            "G&A": [2, 3, 4],
        },
    )


def summarize_plan(plan: AnnualPlan, periods_per_year: int = PERIODS_PER_YEAR) -> List[AnnualSummary]:
    """Roll a year-level plan into annual summaries (gross margin from COGS, EBITDA after OpEx)."""
    revenue = plan.active_revenue()
    summaries: List[AnnualSummary] = []

    for i in range(plan.year_count):
        revenue_by_line = {k: float(v[i]) for k, v in revenue.items()}
        cogs_by_line = {k: float(v[i]) for k, v in plan.cogs.items()}
        opex_by_line = {k: float(v[i]) for k, v in plan.opex.items()}

        total_revenue = sum(revenue_by_line.values())
        cost_of_revenue = sum(cogs_by_line.values())
        total_costs = cost_of_revenue + sum(opex_by_line.values())
        gross_profit = total_revenue - cost_of_revenue
        ebitda = total_revenue - total_costs

        summaries.append(
            AnnualSummary(
                year=i + 1,
                period_count=periods_per_year,
                total_revenue=total_revenue,
                total_costs=total_costs,
                cost_of_revenue=cost_of_revenue,
                gross_profit=gross_profit,
                net_profit=ebitda,
                new_users=0.0,
                revenue_by_line=revenue_by_line,
                costs_by_line={**cogs_by_line, **opex_by_line},
                average_cohorts={},
                average_users=0.0,
                ending_cohorts={},
                ending_users=0.0,
                gross_margin_pct=margin_pct(gross_profit, total_revenue),
                net_margin_pct=margin_pct(ebitda, total_revenue),
                arpu_annual=0.0,
                arpu_monthly=0.0,
                user_growth=0.0,
                yoy_growth_pct=None,
            )
        )
    return summaries


def compute_plan_metrics(
    plan: AnnualPlan,
    assumptions: Optional[AssumptionSet] = None,
    periods_per_year: int = PERIODS_PER_YEAR,
) -> KeyMetrics:
    a = AssumptionSet(CFO_STUDIO_DEFAULTS).with_overrides(assumptions)
    return compute_key_metrics(
        summarize_plan(plan, periods_per_year),
        cac_paid=a.get("cac_paid"),
        cac_organic=a.get("cac_organic"),
        avg_revenue_per_user=a.get("avg_revenue_per_creator"),
        churn_pct=a.get("churn_rate"),
        cash_on_hand=a.get("cash_on_hand"),
        periods_per_year=periods_per_year,
    )


def extrapolate_revenue(
    plan: AnnualPlan,
    monthly_growth_pct: float,
    uplift: Optional[Mapping[str, Sequence[float]]] = None,
) -> AnnualPlan:
    """
    Rebuild later-year revenue from year 1.

    Year ``k`` (0-based) becomes ``round(year1 x m^k x uplift[k-1])`` with
    ``m = 1 + monthly_growth x 12``. Enterprise licensing is contracted, not
    extrapolated, and is left untouched.
    """
    uplift = REVENUE_UPLIFT if uplift is None else uplift
    multiplier = 1.0 + monthly_growth_pct / 100.0 * 12

    revenue: Dict[str, List[float]] = {}
    for name, values in plan.revenue.items():
        if name == ENTERPRISE_LINE or not values:
            revenue[name] = list(values)
            continue
        base = values[0]
        factors = uplift.get(name, ())
        series = [base]
        for k in range(1, len(values)):
            factor = factors[k - 1] if k - 1 < len(factors) else 1.0
            series.append(round_half_up(base * compound(multiplier, k) * factor))
        revenue[name] = series

    return AnnualPlan(
        revenue=revenue,
        cogs=plan.cogs,
        opex=plan.opex,
        enterprise_enabled=plan.enterprise_enabled,
        headcount=plan.headcount,
    )
