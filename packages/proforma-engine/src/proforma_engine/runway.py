"""
Capital runway projection.

Cash walk-forward at constant expenses with compounding revenue and planned
capital events (fundraises, grants) landing in specific months, and a stress
test that runs annual EBITDA through burn scenarios.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .engine import DEFAULT_HORIZON_MONTHS, PERIODS_PER_YEAR, InputError

# (month, amount); month is 1-indexed
CapitalEvent = Tuple[int, float]

SCENARIO_BURN_MULTIPLIERS = {"base": 1.0, "best": 0.8, "worst": 1.3}
HIRING_FREEZE_FACTOR = 0.7
# Months ahead of the cash-out month to start the next raise.
RAISE_BUFFER_MONTHS = 6


@dataclass(frozen=True)
class RunwayMonth:
    month: int
    starting_cash: float
    revenue: float
    expenses: float
    capital_in: float
    net_burn: float
    ending_cash: float
    is_break_even: bool


@dataclass(frozen=True)
class RunwayProjection:
    months: List[RunwayMonth]
    runway_months: Optional[int]  # first month ending cash < 0
    break_even_month: Optional[int]
    total_capital: float


def quarter_to_month(quarter: str, year: int, start_year: int) -> int:
    """``("Q3", 2026)`` with a plan starting in 2025 -> month 19 (first month of the quarter)."""
    q = int(quarter.strip().upper().lstrip("Q"))
    return (year - start_year) * 12 + (q - 1) * 3 + 1


def project_runway(
    starting_cash: float,
    monthly_expenses: float,
    monthly_revenue: float,
    revenue_growth_pct: float,
    months: int = DEFAULT_HORIZON_MONTHS,
    capital_events: Sequence[CapitalEvent] = (),
) -> RunwayProjection:
    growth = revenue_growth_pct / 100.0
    cash = starting_cash
    revenue = monthly_revenue

    rows: List[RunwayMonth] = []
    runway_month: Optional[int] = None
    break_even_month: Optional[int] = None

    for month in range(1, max(months, 0) + 1):
        if month > 1:
            revenue = revenue * (1.0 + growth)
        capital_in = sum(amount for event_month, amount in capital_events if event_month == month)
        net_burn = monthly_expenses - revenue
        ending = cash + capital_in - net_burn
        is_break_even = revenue >= monthly_expenses

        rows.append(
            RunwayMonth(
                month=month,
                starting_cash=cash,
                revenue=revenue,
                expenses=monthly_expenses,
                capital_in=capital_in,
                net_burn=net_burn,
                ending_cash=ending,
                is_break_even=is_break_even,
            )
        )

        if runway_month is None and ending < 0:
            runway_month = month
        if break_even_month is None and is_break_even:
            break_even_month = month
        cash = ending

    return RunwayProjection(
        months=rows,
        runway_months=runway_month,
        break_even_month=break_even_month,
        total_capital=sum(amount for _, amount in capital_events),
    )


# ---------------------------------------------------------------------- #
# Stress test
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class StressSettings:
    starting_cash: float
    minimum_cash_target: float = 0.0
    scenario: str = "base"
    burn_rate_change_pct: float = 0.0
    revenue_shock_pct: float = 0.0
    opex_compression_pct: float = 0.0
    hiring_freeze: bool = False
    # Share of positive monthly EBITDA that lands as cash
    cash_to_ebitda_conversion_pct: float = 0.0


@dataclass(frozen=True)
class StressTestResult:
    monthly_burn: List[float]
    cash_balance: List[float]
    runway_months: int
    next_raise_month: Optional[int]
    survives_year: List[bool]


def stressed_burn(annual_ebitda: float, settings: StressSettings, periods_per_year: int = PERIODS_PER_YEAR) -> float:
    """Monthly burn for one year of EBITDA after the scenario and cost levers."""
    burn = max(0.0, -annual_ebitda / periods_per_year)
    burn *= SCENARIO_BURN_MULTIPLIERS[settings.scenario]
    burn *= 1.0 + settings.burn_rate_change_pct / 100.0

    revenue_retained = 1.0 - settings.revenue_shock_pct / 100.0
    if revenue_retained > 0:
        burn /= revenue_retained
    elif burn > 0:
        burn = math.inf

    burn *= 1.0 - settings.opex_compression_pct / 100.0
    if settings.hiring_freeze:
        burn *= HIRING_FREEZE_FACTOR
    return burn


def stress_test_runway(
    annual_ebitda: Sequence[float],
    settings: StressSettings,
    capital_events: Sequence[CapitalEvent] = (),
    periods_per_year: int = PERIODS_PER_YEAR,
) -> StressTestResult:
    """
    Run annual EBITDA through a burn scenario month by month.

    Each month adds capital landing that month and the converted share of
    positive EBITDA, then subtracts the stressed burn. The balance is floored
    at zero. Runway counts the leading months that stay above
    ``minimum_cash_target``; when it falls short of the horizon the next raise
    is due ``RAISE_BUFFER_MONTHS`` earlier.
    """
    if settings.scenario not in SCENARIO_BURN_MULTIPLIERS:
        raise InputError(f"Unknown stress scenario: {settings.scenario!r}")
    if periods_per_year <= 0:
        raise InputError("periods_per_year must be > 0")

    conversion = settings.cash_to_ebitda_conversion_pct / 100.0
    cash = settings.starting_cash
    monthly_burn: List[float] = []
    balances: List[float] = []

    for year_index, ebitda in enumerate(annual_ebitda):
        burn = stressed_burn(ebitda, settings, periods_per_year)
        monthly_ebitda = ebitda / periods_per_year
        for month_in_year in range(1, periods_per_year + 1):
            month = year_index * periods_per_year + month_in_year
            cash += sum(amount for event_month, amount in capital_events if event_month == month)
            if monthly_ebitda > 0:
                cash += monthly_ebitda * conversion
            cash -= burn
            monthly_burn.append(burn)
            balances.append(max(0.0, cash))

    horizon = len(balances)
    runway = 0
    for balance in balances:
        if balance <= settings.minimum_cash_target:
            break
        runway += 1

    next_raise: Optional[int] = None
    if runway < horizon:
        next_raise = max(0, runway - RAISE_BUFFER_MONTHS) + 1

    return StressTestResult(
        monthly_burn=monthly_burn,
        cash_balance=balances,
        runway_months=runway,
        next_raise_month=next_raise,
        survives_year=[
            balances[(i + 1) * periods_per_year - 1] > settings.minimum_cash_target
            for i in range(len(annual_ebitda))
        ],
    )
