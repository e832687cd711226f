"""
Metric table shared by the CSV and XLSX exporters.

Rows are metrics, columns are ``Metric``, ``Month 1..N`` and ``Year 1..Y``.
Year columns come from the annual summaries: flows are summed, cohort counts
are averaged and margins are recomputed from the summed values.
"""

from typing import Callable, List, Sequence, Tuple

import pandas as pd

from proforma_engine import AnnualSummary, ModelSpec, PeriodResult, SegmentSpec


class ExportError(RuntimeError):
    """Raised when a projection cannot be serialized."""


MonthlyValue = Callable[[PeriodResult], float]
YearlyValue = Callable[[AnnualSummary], float]


USER_ROWS = ("Total Users", "New Users")


def _segment_label(segment: SegmentSpec) -> str:
    label = segment.display_label
    if not label.endswith("Users"):
        label = f"{label} Users"
    if label in USER_ROWS:
        label = f"{segment.display_label} Segment Users"
    return label


def _metric_rows(model: ModelSpec) -> List[Tuple[str, MonthlyValue, YearlyValue]]:
    rows: List[Tuple[str, MonthlyValue, YearlyValue]] = []

    # A lone user-counting segment is the user base itself; Total Users covers it.
    counted = [s for s in model.segments if s.counts_as_user]
    for segment in model.segments:
        if len(counted) == 1 and segment is counted[0]:
            continue
        name = segment.name
        label = _segment_label(segment)
        rows.append(
            (
                label,
                lambda p, n=name: p.cohorts.get(n, 0.0),
                lambda s, n=name: s.average_cohorts.get(n, 0.0),
            )
        )
    rows.append(("Total Users", lambda p: p.total_users, lambda s: s.average_users))
    rows.append(("New Users", lambda p: p.new_users, lambda s: s.new_users))

    for key, label in model.revenue_labels().items():
        rows.append((label, lambda p, k=key: p.revenue.get(k, 0.0), lambda s, k=key: s.revenue_by_line.get(k, 0.0)))
    rows.append(("Total Revenue", lambda p: p.total_revenue, lambda s: s.total_revenue))

    for key, label in model.cost_labels().items():
        rows.append((label, lambda p, k=key: p.costs.get(k, 0.0), lambda s, k=key: s.costs_by_line.get(k, 0.0)))
    rows.extend(
        [
            ("Total Costs", lambda p: p.total_costs, lambda s: s.total_costs),
            ("Cost of Revenue", lambda p: p.cost_of_revenue, lambda s: s.cost_of_revenue),
            ("Gross Profit", lambda p: p.gross_profit, lambda s: s.gross_profit),
            ("Gross Margin %", lambda p: p.gross_margin_pct, lambda s: s.gross_margin_pct),
            ("Net Profit (EBITDA)", lambda p: p.net_profit, lambda s: s.net_profit),
            ("Net Margin %", lambda p: p.net_margin_pct, lambda s: s.net_margin_pct),
        ]
    )
    return rows


def build_metric_table(
    model: ModelSpec,
    periods: Sequence[PeriodResult],
    summaries: Sequence[AnnualSummary],
) -> pd.DataFrame:
    month_columns = [f"Month {p.index}" for p in periods]
    year_columns = [f"Year {s.year}" for s in summaries]

    records = []
    for label, monthly, yearly in _metric_rows(model):
        record = {"Metric": label}
        for column, period in zip(month_columns, periods):
            record[column] = float(monthly(period))
        for column, summary in zip(year_columns, summaries):
            record[column] = float(yearly(summary))
        records.append(record)

    return pd.DataFrame.from_records(records, columns=["Metric", *month_columns, *year_columns])
