"""
Quick what-if calculators used alongside the annual plan.

- ``marketing_roi`` : customers, lifetime revenue and ROI bought by a
  marketing budget at a given CAC
- ``estimate_breakeven`` : month a compounding revenue line covers a
  fixed plus variable cost base
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .aggregator import lifetime_value
from .engine import DEFAULT_HORIZON_MONTHS, PERIODS_PER_YEAR, compound


@dataclass(frozen=True)
class MarketingRoi:
    new_customers: float
    revenue_from_new: float
    ltv: float
    ltv_to_cac: float
    roi_pct: float
    payback_months: float


@dataclass(frozen=True)
class BreakevenEstimate:
    break_even_month: Optional[int]
    # Annualized revenue at the breakeven month, or at the horizon when it is never reached
    run_rate: float
    months: int


def marketing_roi(marketing_spend: float, cac: float, churn_pct: float, arpu: float) -> MarketingRoi:
    """
    Customers acquired by ``marketing_spend`` at ``cac`` and the lifetime
    revenue they bring.

    ``roi_pct = (new customers x LTV - spend) / spend x 100``; every ratio is
    0 when its denominator is not positive.
    """
    ltv = lifetime_value(arpu, churn_pct)
    new_customers = marketing_spend / cac if cac > 0 else 0.0
    revenue_from_new = new_customers * ltv
    return MarketingRoi(
        new_customers=new_customers,
        revenue_from_new=revenue_from_new,
        ltv=ltv,
        ltv_to_cac=ltv / cac if cac > 0 else 0.0,
        roi_pct=(revenue_from_new - marketing_spend) / marketing_spend * 100.0 if marketing_spend > 0 else 0.0,
        payback_months=cac / arpu if arpu > 0 else 0.0,
    )


def estimate_breakeven(
    initial_revenue: float,
    fixed_opex: float,
    variable_opex_pct: float,
    revenue_growth_pct: float,
    months: int = DEFAULT_HORIZON_MONTHS,
) -> BreakevenEstimate:
    """
    Walk ``months`` months of revenue compounding at ``revenue_growth_pct / 12``
    per month from an annual ``initial_revenue``.

    Monthly cost is ``fixed_opex / 12`` plus ``variable_opex_pct`` of revenue.
    The breakeven month is the first where cumulative EBITDA is non-negative.
    """
    monthly_growth = 1.0 + revenue_growth_pct / 100.0 / PERIODS_PER_YEAR
    horizon = max(months, 0)

    cumulative = 0.0
    for month in range(1, horizon + 1):
        revenue = initial_revenue / PERIODS_PER_YEAR * compound(monthly_growth, month)
        cost = fixed_opex / PERIODS_PER_YEAR + revenue * variable_opex_pct / 100.0
        cumulative += revenue - cost
        if cumulative >= 0:
            return BreakevenEstimate(break_even_month=month, run_rate=revenue * PERIODS_PER_YEAR, months=horizon)

    return BreakevenEstimate(
        break_even_month=None,
        run_rate=initial_revenue * compound(monthly_growth, horizon),
        months=horizon,
    )
