"""
CSV exporters.

All numeric output is written with two decimals.
"""

import io
import logging
from typing import Mapping, Sequence

import pandas as pd

from proforma_engine import AnnualSummary, ModelSpec, PeriodResult
from proforma_service.exporters.base import ExportError, build_metric_table

logger = logging.getLogger(__name__)

FLOAT_FORMAT = "%.2f"


def _to_csv(frame: pd.DataFrame) -> str:
    try:
        return frame.to_csv(index=False, float_format=FLOAT_FORMAT)
    except (ValueError, TypeError) as e:
        logger.error(f"CSV serialization failed: {e}")
        raise ExportError(f"Could not write CSV: {e}") from e


def export_csv(
    model: ModelSpec,
    periods: Sequence[PeriodResult],
    summaries: Sequence[AnnualSummary],
) -> str:
    """Metric table (rows = metrics, columns = months then years) as CSV text."""
    return _to_csv(build_metric_table(model, periods, summaries))


def export_monthly_csv(periods: Sequence[PeriodResult]) -> str:
    """One row per period with every cohort, revenue line and cost line."""
    records = []
    for p in periods:
        record = {"Month": p.index, "Year": p.year, "Total Users": p.total_users, "New Users": p.new_users}
        record.update({f"users_{k}": v for k, v in p.cohorts.items()})
        record.update(p.revenue)
        record["Total Revenue"] = p.total_revenue
        record.update(p.costs)
        record["Total Costs"] = p.total_costs
        record["Gross Profit"] = p.gross_profit
        record["Gross Margin %"] = p.gross_margin_pct
        record["Net Profit"] = p.net_profit
        record["Net Margin %"] = p.net_margin_pct
        records.append(record)
    return _to_csv(pd.DataFrame.from_records(records))


def export_assumptions_csv(assumptions: Mapping[str, float]) -> str:
    frame = pd.DataFrame({"Parameter": list(assumptions.keys()), "Value": [float(v) for v in assumptions.values()]})
    return _to_csv(frame)


def read_metric_csv(text: str) -> pd.DataFrame:
    try:
        return pd.read_csv(io.StringIO(text))
    except (ValueError, pd.errors.ParserError) as e:
        raise ExportError(f"Could not parse CSV: {e}") from e
