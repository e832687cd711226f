"""
XLSX workbook exporter.

Seven sheets: Executive Summary, Assumptions, {N}-Month Forecast, Annual
Summary, Revenue Breakdown, Cost Breakdown and Unit Economics.
"""

import io
import logging
from typing import Iterable, List, Mapping, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from proforma_engine import (
    AnnualSummary,
    ModelSpec,
    PeriodResult,
    UnitEconomics,
    breakeven_from_periods,
)
from proforma_service.exporters.base import ExportError, build_metric_table

logger = logging.getLogger(__name__)

TITLE_FONT = Font(bold=True, size=16)
HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
BOLD = Font(bold=True)
HEADER_FILL = PatternFill(start_color="1E3A5F", end_color="1E3A5F", fill_type="solid")
TOTAL_FILL = PatternFill(start_color="F3F4F6", end_color="F3F4F6", fill_type="solid")
MONEY = "#,##0.00"
COUNT = "#,##0"
PERCENT = "0.0"

TOTAL_ROWS = {"Total Users", "Total Revenue", "Total Costs", "Gross Profit", "Net Profit (EBITDA)"}


def _header(ws: Worksheet, row: int, values: Iterable) -> None:
    for col, value in enumerate(values, start=1):
        cell = ws.cell(row=row, column=col, value=value)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL


def _number_format(label: str) -> str:
    if label.endswith("%"):
        return PERCENT
    if label.endswith("Users"):
        return COUNT
    return MONEY


def _write_rows(ws: Worksheet, start_row: int, rows: Iterable[Sequence]) -> int:
    row = start_row
    for values in rows:
        label = str(values[0])
        fmt = _number_format(label)
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row, column=col, value=value)
            if col > 1 and isinstance(value, (int, float)):
                cell.number_format = fmt
            if label in TOTAL_ROWS:
                cell.font = BOLD
                cell.fill = TOTAL_FILL
        row += 1
    return row


def _widths(ws: Worksheet, first: int, rest: int, columns: int) -> None:
    ws.column_dimensions["A"].width = first
    for col in range(2, columns + 1):
        ws.column_dimensions[get_column_letter(col)].width = rest


# ---------------------------------------------------------------------- #
# Sheets
# ---------------------------------------------------------------------- #


def _executive_summary(
    ws: Worksheet,
    model: ModelSpec,
    periods: Sequence[PeriodResult],
    summaries: Sequence[AnnualSummary],
) -> None:
    ws["A1"] = model.title or model.name
    ws["A1"].font = TITLE_FONT
    ws["A2"] = f"{len(periods)}-month projection"

    _header(ws, 4, ["Metric", *[f"Year {s.year}" for s in summaries]])
    rows = [
        ["Total Revenue", *[s.total_revenue for s in summaries]],
        ["Total Costs", *[s.total_costs for s in summaries]],
        ["Gross Profit", *[s.gross_profit for s in summaries]],
        ["Gross Margin %", *[s.gross_margin_pct for s in summaries]],
        ["Net Profit (EBITDA)", *[s.net_profit for s in summaries]],
        ["Net Margin %", *[s.net_margin_pct for s in summaries]],
        ["Ending Users", *[s.ending_users for s in summaries]],
        ["Monthly ARPU", *[s.arpu_monthly for s in summaries]],
    ]
    row = _write_rows(ws, 5, rows)

    breakeven = breakeven_from_periods(periods)
    ws.cell(row=row + 1, column=1, value="Breakeven Month").font = BOLD
    ws.cell(row=row + 1, column=2, value=breakeven if breakeven is not None else "Not reached")
    _widths(ws, 28, 18, len(summaries) + 1)


def _assumptions(ws: Worksheet, assumptions: Mapping[str, float]) -> None:
    _header(ws, 1, ["Parameter", "Value"])
    for row, (name, value) in enumerate(assumptions.items(), start=2):
        ws.cell(row=row, column=1, value=name)
        ws.cell(row=row, column=2, value=value)
    _widths(ws, 36, 16, 2)


def _forecast(
    ws: Worksheet,
    model: ModelSpec,
    periods: Sequence[PeriodResult],
    summaries: Sequence[AnnualSummary],
) -> None:
    table = build_metric_table(model, periods, summaries)
    month_columns = ["Metric", *[f"Month {p.index}" for p in periods]]
    _header(ws, 1, month_columns)
    _write_rows(ws, 2, table[month_columns].itertuples(index=False, name=None))
    ws.freeze_panes = "B2"
    _widths(ws, 30, 14, len(month_columns))


def _annual_summary(
    ws: Worksheet,
    model: ModelSpec,
    periods: Sequence[PeriodResult],
    summaries: Sequence[AnnualSummary],
) -> None:
    table = build_metric_table(model, periods, summaries)
    year_columns = ["Metric", *[f"Year {s.year}" for s in summaries]]
    _header(ws, 1, year_columns)
    _write_rows(ws, 2, table[year_columns].itertuples(index=False, name=None))
    _widths(ws, 30, 18, len(year_columns))


def _breakdown(
    ws: Worksheet,
    labels: Mapping[str, str],
    summaries: Sequence[AnnualSummary],
    *,
    values_of,
    total_label: str,
    total_of,
) -> None:
    columns: List[str] = ["Line"]
    for s in summaries:
        columns.extend([f"Year {s.year}", f"Year {s.year} Share %"])
    _header(ws, 1, columns)

    rows = []
    for key, label in labels.items():
        row: List = [label]
        for s in summaries:
            value = values_of(s).get(key, 0.0)
            total = total_of(s)
            row.extend([value, value / total * 100.0 if total else 0.0])
        rows.append(row)
    total_row: List = [total_label]
    for s in summaries:
        total_row.extend([total_of(s), 100.0 if total_of(s) else 0.0])
    rows.append(total_row)

    row_index = 2
    for values in rows:
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row_index, column=col, value=value)
            if col > 1:
                cell.number_format = MONEY if col % 2 == 0 else PERCENT
            if values is total_row:
                cell.font = BOLD
                cell.fill = TOTAL_FILL
        row_index += 1
    _widths(ws, 32, 16, len(columns))


def _unit_economics(ws: Worksheet, unit_economics: Sequence[UnitEconomics]) -> None:
    _header(ws, 1, ["Segment", "Average Users", "Monthly ARPU", "CAC", "LTV", "LTV:CAC", "Payback (Months)"])
    for row, ue in enumerate(unit_economics, start=2):
        values = [
            ue.label,
            ue.average_users,
            ue.monthly_arpu,
            ue.cac,
            ue.ltv,
            ue.ltv / ue.cac if ue.cac else 0.0,
            ue.payback_months,
        ]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row, column=col, value=value)
            if col == 2:
                cell.number_format = COUNT
            elif col > 2:
                cell.number_format = MONEY
    _widths(ws, 28, 16, 7)


# ---------------------------------------------------------------------- #
# Public API
# ---------------------------------------------------------------------- #


def forecast_sheet_name(period_count: int) -> str:
    return f"{period_count}-Month Forecast"


def export_workbook(
    model: ModelSpec,
    assumptions: Mapping[str, float],
    periods: Sequence[PeriodResult],
    summaries: Sequence[AnnualSummary],
    unit_economics: Optional[Sequence[UnitEconomics]] = None,
) -> bytes:
    """Build the seven-sheet pro forma workbook and return it as XLSX bytes."""
    wb = Workbook()

    ws = wb.active
    ws.title = "Executive Summary"
    _executive_summary(ws, model, periods, summaries)

    _assumptions(wb.create_sheet("Assumptions"), assumptions)
    _forecast(wb.create_sheet(forecast_sheet_name(len(periods))), model, periods, summaries)
    _annual_summary(wb.create_sheet("Annual Summary"), model, periods, summaries)
    _breakdown(
        wb.create_sheet("Revenue Breakdown"),
        model.revenue_labels(),
        summaries,
        values_of=lambda s: s.revenue_by_line,
        total_label="Total Revenue",
        total_of=lambda s: s.total_revenue,
    )
    _breakdown(
        wb.create_sheet("Cost Breakdown"),
        model.cost_labels(),
        summaries,
        values_of=lambda s: s.costs_by_line,
        total_label="Total Costs",
        total_of=lambda s: s.total_costs,
    )
    _unit_economics(wb.create_sheet("Unit Economics"), unit_economics or [])

    buffer = io.BytesIO()
    try:
        wb.save(buffer)
    except (ValueError, TypeError) as e:
        logger.error(f"Workbook serialization failed: {e}")
        raise ExportError(f"Could not write workbook: {e}") from e
    return buffer.getvalue()
