"""
Aggregator
==========

Derives yearly rollups and summary metrics from a period sequence.

Ratios (margins, ARPU, growth) are recomputed from the summed window
values, never averaged across periods.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .assumptions import AssumptionSet
from .engine import (
    CHURN_PER_SEGMENT,
    PERIODS_PER_YEAR,
    CompoundingStreamLine,
    InputError,
    ModelSpec,
    PeriodResult,
    compound,
    margin_pct,
    tier_weights,
)

# Blended CAC mix used by the CFO studio: 60% paid, 40% organic.
PAID_ACQUISITION_SHARE = 0.6
# Customer lifetime (months) assumed when churn is zero.
ZERO_CHURN_LIFETIME_MONTHS = 24
# Advertiser tiers: CAC as a multiple of the user CAC, and annual churn (%).
STREAM_CAC_MULTIPLIER = 2.0
STREAM_ANNUAL_CHURN_PCT = 15.0
STREAM_TIER_TERMS: Dict[str, Tuple[float, float]] = {"enterprise": (3.0, 10.0)}


@dataclass(frozen=True)
class AnnualSummary:
    year: int
    period_count: int

    # Sums
    total_revenue: float
    total_costs: float
    cost_of_revenue: float
    gross_profit: float
    net_profit: float  # EBITDA
    new_users: float
    revenue_by_line: Dict[str, float]
    costs_by_line: Dict[str, float]

    # Averages / ending snapshot
    average_cohorts: Dict[str, float]
    average_users: float
    ending_cohorts: Dict[str, float]
    ending_users: float

    # Ratios, recomputed from the sums above
    gross_margin_pct: float
    net_margin_pct: float
    arpu_annual: float
    arpu_monthly: float
    user_growth: float
    yoy_growth_pct: Optional[float]


def summarize(
    periods: Sequence[PeriodResult],
    periods_per_year: int = PERIODS_PER_YEAR,
) -> List[AnnualSummary]:
    """
    Partition ``periods`` into contiguous windows of ``periods_per_year``.

    A trailing window shorter than ``periods_per_year`` is summarized on its
    own; check ``period_count`` to tell it apart from a full year.
    """
    if periods_per_year <= 0:
        raise InputError("periods_per_year must be > 0")

    summaries: List[AnnualSummary] = []
    previous_ending: Optional[float] = None

    for start in range(0, len(periods), periods_per_year):
        window = periods[start : start + periods_per_year]
        summary = _summarize_window(
            window,
            year=start // periods_per_year + 1,
            previous_ending_users=previous_ending,
        )
        summaries.append(summary)
        previous_ending = summary.ending_users

    return summaries


def _summarize_window(
    window: Sequence[PeriodResult],
    *,
    year: int,
    previous_ending_users: Optional[float],
) -> AnnualSummary:
    count = len(window)

    total_revenue = sum(p.total_revenue for p in window)
    total_costs = sum(p.total_costs for p in window)
    cost_of_revenue = sum(p.cost_of_revenue for p in window)
    gross_profit = total_revenue - cost_of_revenue
    net_profit = total_revenue - total_costs

    revenue_by_line = _sum_lines([p.revenue for p in window])
    costs_by_line = _sum_lines([p.costs for p in window])

    average_cohorts = {name: total / count for name, total in _sum_lines([p.cohorts for p in window]).items()}
    average_users = sum(p.total_users for p in window) / count
    ending = window[-1]

    arpu_annual = total_revenue / average_users if average_users else 0.0

    if previous_ending_users is None:
        user_growth = ending.total_users
        yoy_growth_pct = None
    else:
        user_growth = ending.total_users - previous_ending_users
        yoy_growth_pct = user_growth / previous_ending_users * 100.0 if previous_ending_users else None

    return AnnualSummary(
        year=year,
        period_count=count,
        total_revenue=total_revenue,
        total_costs=total_costs,
        cost_of_revenue=cost_of_revenue,
        gross_profit=gross_profit,
        net_profit=net_profit,
        new_users=sum(p.new_users for p in window),
        revenue_by_line=revenue_by_line,
        costs_by_line=costs_by_line,
        average_cohorts=average_cohorts,
        average_users=average_users,
        ending_cohorts=dict(ending.cohorts),
        ending_users=ending.total_users,
        gross_margin_pct=margin_pct(gross_profit, total_revenue),
        net_margin_pct=margin_pct(net_profit, total_revenue),
        arpu_annual=arpu_annual,
        arpu_monthly=arpu_annual / count,
        user_growth=user_growth,
        yoy_growth_pct=yoy_growth_pct,
    )


def _sum_lines(rows: Sequence[Dict[str, float]]) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for row in rows:
        for name, value in row.items():
            totals[name] = totals.get(name, 0.0) + value
    return totals


# ---------------------------------------------------------------------- #
# Breakeven
# ---------------------------------------------------------------------- #


def find_breakeven_month(
    annual_ebitda: Sequence[float],
    periods_per_year: int = PERIODS_PER_YEAR,
    horizon: Optional[int] = None,
    period_counts: Optional[Sequence[int]] = None,
) -> Optional[int]:
    """
    Spread each year's EBITDA evenly over its months and walk the cumulative
    sum. Returns the 1-indexed month where it first becomes non-negative, or
    None when it stays negative for the whole horizon.

    ``period_counts`` gives the number of months in each window (a trailing
    partial year has fewer than ``periods_per_year``); by default every
    window is a full year.
    """
    if periods_per_year <= 0:
        raise InputError("periods_per_year must be > 0")
    if period_counts is None:
        period_counts = [periods_per_year] * len(annual_ebitda)
    if horizon is None:
        horizon = sum(period_counts)

    cumulative = 0.0
    month = 0
    for ebitda, count in zip(annual_ebitda, period_counts):
        for _ in range(count):
            month += 1
            if month > horizon:
                return None
            cumulative += ebitda / count
            if cumulative >= 0:
                return month
    return None


def breakeven_from_periods(periods: Sequence[PeriodResult]) -> Optional[int]:
    """Same walk as ``find_breakeven_month`` over actual monthly net profit."""
    cumulative = 0.0
    for period in periods:
        cumulative += period.net_profit
        if cumulative >= 0:
            return period.index
    return None


# ---------------------------------------------------------------------- #
# Key metrics
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class KeyMetrics:
    arr: List[float]
    gross_margin_pct: List[float]
    ebitda: List[float]
    burn_rate: List[float]
    cac: float
    ltv: float
    ltv_to_cac: float
    runway_months: float
    break_even_month: Optional[int]


def blended_cac(cac_paid: float, cac_organic: float) -> float:
    return cac_paid * PAID_ACQUISITION_SHARE + cac_organic * (1.0 - PAID_ACQUISITION_SHARE)


def lifetime_value(monthly_arpu: float, monthly_churn_pct: float) -> float:
    churn = monthly_churn_pct / 100.0
    if churn > 0:
        return monthly_arpu / churn
    return monthly_arpu * ZERO_CHURN_LIFETIME_MONTHS


def compute_key_metrics(
    summaries: Sequence[AnnualSummary],
    *,
    cac_paid: float,
    cac_organic: float,
    avg_revenue_per_user: float,
    churn_pct: float,
    cash_on_hand: float,
    periods_per_year: int = PERIODS_PER_YEAR,
) -> KeyMetrics:
    """
    Investor-style metrics over annual summaries.

    Runway is measured against the first year's burn and capped at the
    horizon; a profitable first year reports the full horizon. Burn and the
    horizon use each window's own ``period_count``, so a trailing partial
    year is neither diluted nor padded to twelve months.
    """
    counts = [s.period_count for s in summaries]
    horizon = sum(counts)
    ebitda = [s.net_profit for s in summaries]
    burn_rate = [abs(e) / count if e < 0 and count else 0.0 for e, count in zip(ebitda, counts)]

    current_burn = burn_rate[0] if burn_rate else 0.0
    runway = cash_on_hand / current_burn if current_burn > 0 else float(horizon)

    cac = blended_cac(cac_paid, cac_organic)
    ltv = lifetime_value(avg_revenue_per_user, churn_pct)

    return KeyMetrics(
        arr=[s.total_revenue for s in summaries],
        gross_margin_pct=[s.gross_margin_pct for s in summaries],
        ebitda=ebitda,
        burn_rate=burn_rate,
        cac=cac,
        ltv=ltv,
        ltv_to_cac=ltv / cac if cac else 0.0,
        runway_months=min(runway, float(horizon)),
        break_even_month=find_breakeven_month(ebitda, periods_per_year, horizon, counts),
    )


# ---------------------------------------------------------------------- #
# Unit economics
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class UnitEconomics:
    segment: str
    label: str
    average_users: float
    monthly_arpu: float
    cac: float
    ltv: float
    payback_months: float


def compute_unit_economics(
    model: ModelSpec,
    assumptions: AssumptionSet,
    periods: Sequence[PeriodResult],
) -> List[UnitEconomics]:
    """Per billing segment: average users, ARPU, CAC, LTV and CAC payback."""
    cac = assumptions.get(model.acquisition_cost_key) if model.acquisition_cost_key else 0.0
    config = model.recurrence

    rows: List[UnitEconomics] = []
    for segment in model.billing_segments:
        average_users = (
            sum(p.cohorts[segment.name] for p in periods) / len(periods) if periods else 0.0
        )
        weights = tier_weights(segment.tiers, assumptions, config.normalize_tier_weights)
        arpu = sum(w * tier.price(assumptions) for w, tier in zip(weights, segment.tiers))

        if config.churn_mode == CHURN_PER_SEGMENT and segment.churn_key:
            churn_pct = assumptions.get(segment.churn_key)
        else:
            churn_pct = assumptions.get(config.shared_churn_key)

        rows.append(
            UnitEconomics(
                segment=segment.name,
                label=segment.display_label,
                average_users=average_users,
                monthly_arpu=arpu,
                cac=cac,
                ltv=lifetime_value(arpu, churn_pct),
                payback_months=cac / arpu if arpu else 0.0,
            )
        )
    return rows


def compute_stream_unit_economics(
    model: ModelSpec,
    assumptions: AssumptionSet,
    periods: Sequence[PeriodResult],
) -> List[UnitEconomics]:
    """
    Per tier of each compounding revenue stream (advertisers).

    Average head-count follows the stream's own compounding over the
    horizon. CAC is a multiple of the model's user CAC and LTV is
    ``ARPU x 12 / annual churn``, both per ``STREAM_TIER_TERMS``.
    """
    base_cac = assumptions.get(model.acquisition_cost_key) if model.acquisition_cost_key else 0.0
    config = model.recurrence

    rows: List[UnitEconomics] = []
    for line in model.revenue_lines:
        if not isinstance(line, CompoundingStreamLine):
            continue
        start = assumptions.get(line.starting_key)
        growth = 1.0 + assumptions.rate(line.growth_key)
        average_count = (
            sum(start * compound(growth, p.index - 1) for p in periods) / len(periods) if periods else 0.0
        )
        weights = tier_weights(line.tiers, assumptions, config.normalize_tier_weights)

        for weight, tier in zip(weights, line.tiers):
            multiplier, annual_churn_pct = STREAM_TIER_TERMS.get(
                tier.name, (STREAM_CAC_MULTIPLIER, STREAM_ANNUAL_CHURN_PCT)
            )
            arpu = tier.price(assumptions)
            cac = base_cac * multiplier
            rows.append(
                UnitEconomics(
                    segment=f"{line.name}_{tier.name}",
                    label=f"{line.label.replace(' Revenue', '')} {tier.name.title()}",
                    average_users=average_count * weight,
                    monthly_arpu=arpu,
                    cac=cac,
                    ltv=arpu * 12 / (annual_churn_pct / 100.0),
                    payback_months=cac / arpu if arpu else 0.0,
                )
            )
    return rows
