"""
Projection Engine
=================

This module contains the *pure* N-period compounding projection engine:

- No CSV / XLSX writing
- No persistence
- No HTTP layer

A projection is fully described by a ``ModelSpec`` (which segments exist, how
they are priced, which extra revenue and cost lines apply, and how the cohort
recurrence behaves) plus an ``AssumptionSet`` holding the numbers.

API surface area (stable):
- ``ModelSpec`` / ``SegmentSpec`` / ``TierSpec`` / ``RecurrenceConfig``
- ``PerUnitLine`` / ``CompoundingStreamLine`` (extra revenue and cost lines)
- ``PeriodResult`` (one record per period)
- ``project(model, assumptions, periods)``

The recurrence variants found in the product (growth-then-churn vs.
churn-then-growth, shared vs. per-segment churn, rounding, tier weight
normalization) are configuration on ``RecurrenceConfig``, not separate code
paths.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .assumptions import AssumptionSet

PERIODS_PER_YEAR: int = 12
DEFAULT_HORIZON_MONTHS: int = 36

GROWTH_THEN_CHURN = "growth_then_churn"
CHURN_THEN_GROWTH = "churn_then_growth"

CHURN_SHARED = "shared"
CHURN_PER_SEGMENT = "per_segment"
CHURN_NONE = "none"

MARGIN_BASIS_COST_OF_REVENUE = "cost_of_revenue"
MARGIN_BASIS_TOTAL_COSTS = "total_costs"

ACQUISITION_LINE = "marketing_costs"
PROCESSING_LINE = "payment_processing_costs"


class InputError(ValueError):
    pass


def round_half_up(value: float) -> float:
    """
    Round to the nearest integer with .5 going up (spreadsheet/JS rounding).

    Non-finite values (an overflowed cohort, inf x 0) pass through unchanged.
    """
    if not math.isfinite(value):
        return value
    return int(math.floor(value + 0.5))


def compound(factor: float, exponent: int) -> float:
    """``factor ** exponent``, saturating to +/-inf instead of raising on overflow."""
    try:
        return factor**exponent
    except OverflowError:
        if factor < 0 and exponent % 2:
            return -math.inf
        return math.inf


@dataclass(frozen=True)
class RecurrenceConfig:
    order: str = GROWTH_THEN_CHURN
    churn_mode: str = CHURN_SHARED
    shared_churn_key: str = "monthly_churn_rate"
    round_cohorts: bool = True
    round_tier_counts: bool = False
    normalize_tier_weights: bool = False
    # False: period 1 reports the starting cohort, compounding starts at period 2.
    grow_first_period: bool = True


@dataclass(frozen=True)
class TierSpec:
    """
    One priced subscription level.

    The tier price is the mean of ``price_keys`` (usually a single key; the
    enterprise advertiser tier is priced as the midpoint of a low/high pair).
    A tier without ``weight_key`` carries the whole cohort.
    """

    name: str
    price_keys: Tuple[str, ...]
    weight_key: Optional[str] = None

    def price(self, assumptions: AssumptionSet) -> float:
        if not self.price_keys:
            return 0.0
        return sum(assumptions.get(key) for key in self.price_keys) / len(self.price_keys)

    def weight(self, assumptions: AssumptionSet) -> float:
        if self.weight_key is None:
            return 1.0
        return assumptions.rate(self.weight_key)


@dataclass(frozen=True)
class SegmentSpec:
    """
    A tracked cohort.

    Recurrent segments compound from ``starting_key`` every period. Derived
    segments (``share_of`` set) are a percentage share of an earlier segment
    and have no recurrence of their own.
    """

    name: str
    label: str = ""
    starting_key: Optional[str] = None
    growth_key: Optional[str] = None
    churn_key: Optional[str] = None
    tiers: Tuple[TierSpec, ...] = ()
    share_of: Optional[str] = None
    share_key: Optional[str] = None
    counts_as_user: bool = True

    @property
    def is_derived(self) -> bool:
        return self.share_of is not None

    @property
    def bills(self) -> bool:
        return bool(self.tiers)

    @property
    def revenue_line(self) -> str:
        return f"{self.name}_revenue"

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace("_", " ").title()


@dataclass(frozen=True)
class PerUnitLine:
    """
    ``base x factors x rate_factors/100 x (1 - complement/100) x mean(averaged) x scale``

    ``base`` is the cohort of ``segment`` or total users when ``segment`` is None.
    CPM-style ad revenue is ``members x episodes x listeners x CPM x fill`` with
    ``scale = 1/1000``.
    """

    name: str
    label: str
    segment: Optional[str] = None
    factors: Tuple[str, ...] = ()
    rate_factors: Tuple[str, ...] = ()
    complement_rate_factors: Tuple[str, ...] = ()
    averaged_factors: Tuple[str, ...] = ()
    scale: float = 1.0
    cost_of_revenue: bool = False

    def evaluate(self, context: "_PeriodContext") -> float:
        a = context.assumptions
        value = context.base(self.segment) * self.scale
        for key in self.factors:
            value *= a.get(key)
        for key in self.rate_factors:
            value *= a.rate(key)
        for key in self.complement_rate_factors:
            value *= 1.0 - a.rate(key)
        if self.averaged_factors:
            value *= sum(a.get(key) for key in self.averaged_factors) / len(self.averaged_factors)
        return value


@dataclass(frozen=True)
class CompoundingStreamLine:
    """
    Revenue stream with its own compounding head-count, independent of users.

    ``start x (1 + growth)^(period - 1) x sum(tier weight x tier price)``
    """

    name: str
    label: str
    starting_key: str
    growth_key: str
    tiers: Tuple[TierSpec, ...] = ()

    def evaluate(self, context: "_PeriodContext") -> float:
        a = context.assumptions
        count = a.get(self.starting_key) * compound(1.0 + a.rate(self.growth_key), context.index - 1)
        weights = tier_weights(self.tiers, a, context.config.normalize_tier_weights)
        blended_price = sum(w * tier.price(a) for w, tier in zip(weights, self.tiers))
        return count * blended_price


RevenueLine = Union[PerUnitLine, CompoundingStreamLine]


@dataclass(frozen=True)
class ModelSpec:
    name: str
    segments: Tuple[SegmentSpec, ...]
    title: str = ""
    revenue_lines: Tuple[RevenueLine, ...] = ()
    cost_lines: Tuple[PerUnitLine, ...] = ()
    trailing_cost_lines: Tuple[PerUnitLine, ...] = ()
    acquisition_cost_key: Optional[str] = None
    acquisition_label: str = "Marketing Costs (CAC)"
    processing_rate_key: Optional[str] = None
    processing_label: str = "Payment Processing"
    recurrence: RecurrenceConfig = field(default_factory=RecurrenceConfig)
    gross_margin_basis: str = MARGIN_BASIS_COST_OF_REVENUE

    def segment(self, name: str) -> SegmentSpec:
        for segment in self.segments:
            if segment.name == name:
                return segment
        raise InputError(f"Unknown segment: {name!r}")

    @property
    def billing_segments(self) -> Tuple[SegmentSpec, ...]:
        return tuple(s for s in self.segments if s.bills)

    def revenue_labels(self) -> Dict[str, str]:
        labels = {s.revenue_line: f"{s.display_label} Revenue" for s in self.billing_segments}
        for line in self.revenue_lines:
            labels[line.name] = line.label
        return labels

    def cost_labels(self) -> Dict[str, str]:
        labels = {line.name: line.label for line in self.cost_lines}
        if self.acquisition_cost_key:
            labels[ACQUISITION_LINE] = self.acquisition_label
        if self.processing_rate_key:
            labels[PROCESSING_LINE] = self.processing_label
        for line in self.trailing_cost_lines:
            labels[line.name] = line.label
        return labels


@dataclass(frozen=True)
class PeriodResult:
    index: int  # 1..N
    year: int  # 1-based year index
    cohorts: Dict[str, float]
    tier_counts: Dict[str, Dict[str, float]]
    total_users: float
    new_users: float
    revenue: Dict[str, float]
    subscription_revenue: float
    total_revenue: float
    costs: Dict[str, float]
    total_costs: float
    cost_of_revenue: float
    gross_profit: float
    gross_margin_pct: float
    net_profit: float  # EBITDA
    net_margin_pct: float


class _PeriodContext:
    def __init__(
        self,
        *,
        index: int,
        assumptions: AssumptionSet,
        config: RecurrenceConfig,
        cohorts: Dict[str, float],
        total_users: float,
    ):
        self.index = index
        self.assumptions = assumptions
        self.config = config
        self.cohorts = cohorts
        self.total_users = total_users

    def base(self, segment: Optional[str]) -> float:
        if segment is None:
            return self.total_users
        return self.cohorts[segment]


def project(
    model: ModelSpec,
    assumptions: AssumptionSet,
    periods: int = DEFAULT_HORIZON_MONTHS,
    *,
    periods_per_year: int = PERIODS_PER_YEAR,
) -> List[PeriodResult]:
    """
    Run the cohort recurrence for ``periods`` periods.

    Pure function: the same model, assumptions and period count always give
    the same sequence. Returns an empty list when ``periods <= 0``.
    """
    if periods <= 0:
        return []
    if periods_per_year <= 0:
        raise InputError("periods_per_year must be > 0")
    _validate_model(model)

    config = model.recurrence
    recurrent = [s for s in model.segments if not s.is_derived]
    previous: Dict[str, float] = {
        s.name: assumptions.get(s.starting_key) if s.starting_key else 0.0 for s in recurrent
    }

    results: List[PeriodResult] = []
    previous_total: Optional[float] = None

    for index in range(1, periods + 1):
        if index == 1 and not config.grow_first_period:
            current = dict(previous)
        else:
            current = {
                s.name: _advance_cohort(previous[s.name], segment=s, config=config, assumptions=assumptions)
                for s in recurrent
            }
        previous = current

        cohorts = _resolve_cohorts(model, current, assumptions)
        total_users = sum(cohorts[s.name] for s in model.segments if s.counts_as_user)
        new_users = total_users if previous_total is None else total_users - previous_total
        previous_total = total_users

        context = _PeriodContext(
            index=index,
            assumptions=assumptions,
            config=config,
            cohorts=cohorts,
            total_users=total_users,
        )

        # Revenue
        tier_counts: Dict[str, Dict[str, float]] = {}
        revenue: Dict[str, float] = {}
        for segment in model.billing_segments:
            counts = _compute_tier_counts(segment, cohorts[segment.name], config, assumptions)
            tier_counts[segment.name] = counts
            revenue[segment.revenue_line] = sum(
                counts[tier.name] * tier.price(assumptions) for tier in segment.tiers
            )
        subscription_revenue = sum(revenue.values())
        for line in model.revenue_lines:
            revenue[line.name] = line.evaluate(context)
        total_revenue = sum(revenue.values())

        # Costs
        costs: Dict[str, float] = {}
        cost_of_revenue = 0.0
        for line in model.cost_lines:
            costs[line.name] = line.evaluate(context)
            if line.cost_of_revenue:
                cost_of_revenue += costs[line.name]
        if model.acquisition_cost_key:
            costs[ACQUISITION_LINE] = new_users * assumptions.get(model.acquisition_cost_key)
        if model.processing_rate_key:
            costs[PROCESSING_LINE] = total_revenue * assumptions.rate(model.processing_rate_key)
        for line in model.trailing_cost_lines:
            costs[line.name] = line.evaluate(context)
            if line.cost_of_revenue:
                cost_of_revenue += costs[line.name]
        total_costs = sum(costs.values())

        if model.gross_margin_basis == MARGIN_BASIS_TOTAL_COSTS:
            cost_of_revenue = total_costs

        gross_profit = total_revenue - cost_of_revenue
        net_profit = total_revenue - total_costs

        results.append(
            PeriodResult(
                index=index,
                year=(index - 1) // periods_per_year + 1,
                cohorts=cohorts,
                tier_counts=tier_counts,
                total_users=total_users,
                new_users=new_users,
                revenue=revenue,
                subscription_revenue=subscription_revenue,
                total_revenue=total_revenue,
                costs=costs,
                total_costs=total_costs,
                cost_of_revenue=cost_of_revenue,
                gross_profit=gross_profit,
                gross_margin_pct=margin_pct(gross_profit, total_revenue),
                net_profit=net_profit,
                net_margin_pct=margin_pct(net_profit, total_revenue),
            )
        )

    return results


def margin_pct(profit: float, revenue: float) -> float:
    """``profit / revenue x 100``, or 0 when there is no revenue."""
    if revenue == 0:
        return 0.0
    return profit / revenue * 100.0


def _validate_model(model: ModelSpec) -> None:
    config = model.recurrence
    if config.order not in {GROWTH_THEN_CHURN, CHURN_THEN_GROWTH}:
        raise InputError(f"Unknown recurrence order: {config.order!r}")
    if config.churn_mode not in {CHURN_SHARED, CHURN_PER_SEGMENT, CHURN_NONE}:
        raise InputError(f"Unknown churn mode: {config.churn_mode!r}")
    if model.gross_margin_basis not in {MARGIN_BASIS_COST_OF_REVENUE, MARGIN_BASIS_TOTAL_COSTS}:
        raise InputError(f"Unknown gross margin basis: {model.gross_margin_basis!r}")

    seen = set()
    for segment in model.segments:
        if segment.name in seen:
            raise InputError(f"Duplicate segment: {segment.name!r}")
        if segment.is_derived:
            if segment.share_of not in seen:
                raise InputError(
                    f"Segment {segment.name!r} is a share of {segment.share_of!r}, "
                    "which must be declared before it"
                )
            if not segment.share_key:
                raise InputError(f"Derived segment {segment.name!r} requires share_key")
        seen.add(segment.name)

    lines: Sequence[RevenueLine] = (*model.revenue_lines, *model.cost_lines, *model.trailing_cost_lines)
    for line in lines:
        segment_name = getattr(line, "segment", None)
        if segment_name is not None and segment_name not in seen:
            raise InputError(f"Line {line.name!r} references unknown segment {segment_name!r}")


def _churn_rate(segment: SegmentSpec, config: RecurrenceConfig, assumptions: AssumptionSet) -> float:
    if config.churn_mode == CHURN_SHARED:
        return assumptions.rate(config.shared_churn_key)
    if config.churn_mode == CHURN_PER_SEGMENT and segment.churn_key:
        return assumptions.rate(segment.churn_key)
    return 0.0


def _advance_cohort(
    previous: float,
    *,
    segment: SegmentSpec,
    config: RecurrenceConfig,
    assumptions: AssumptionSet,
) -> float:
    growth_multiplier = 1.0 + (assumptions.rate(segment.growth_key) if segment.growth_key else 0.0)
    retention_multiplier = 1.0 - _churn_rate(segment, config, assumptions)

    def stage(value: float) -> float:
        return round_half_up(value) if config.round_cohorts else value

    if config.order == GROWTH_THEN_CHURN:
        grown = stage(previous * growth_multiplier)
        return stage(grown * retention_multiplier)

    retained = stage(previous * retention_multiplier)
    return stage(retained * growth_multiplier)


def _resolve_cohorts(
    model: ModelSpec,
    recurrent_sizes: Dict[str, float],
    assumptions: AssumptionSet,
) -> Dict[str, float]:
    cohorts: Dict[str, float] = {}
    for segment in model.segments:
        if not segment.is_derived:
            cohorts[segment.name] = recurrent_sizes[segment.name]
            continue
        size = cohorts[segment.share_of] * assumptions.rate(segment.share_key)
        cohorts[segment.name] = round_half_up(size) if model.recurrence.round_cohorts else size
    return cohorts


def tier_weights(
    tiers: Sequence[TierSpec],
    assumptions: AssumptionSet,
    normalize: bool,
) -> List[float]:
    weights = [tier.weight(assumptions) for tier in tiers]
    if normalize:
        total = sum(weights)
        weights = [w / total if total else 0.0 for w in weights]
    return weights


def _compute_tier_counts(
    segment: SegmentSpec,
    size: float,
    config: RecurrenceConfig,
    assumptions: AssumptionSet,
) -> Dict[str, float]:
    weights = tier_weights(segment.tiers, assumptions, config.normalize_tier_weights)
    counts: Dict[str, float] = {}
    for tier, weight in zip(segment.tiers, weights):
        count = size * weight
        counts[tier.name] = round_half_up(count) if config.round_tier_counts else count
    return counts
