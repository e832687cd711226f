from proforma_service.exporters.base import ExportError, build_metric_table
from proforma_service.exporters.csv_export import (
    export_assumptions_csv,
    export_csv,
    export_monthly_csv,
    read_metric_csv,
)
from proforma_service.exporters.workbook import export_workbook, forecast_sheet_name

__all__ = [
    "ExportError",
    "build_metric_table",
    "export_assumptions_csv",
    "export_csv",
    "export_monthly_csv",
    "export_workbook",
    "forecast_sheet_name",
    "read_metric_csv",
]
