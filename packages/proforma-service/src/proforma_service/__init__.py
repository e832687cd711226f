"""
Pro Forma Service
=================

FastAPI service around ``proforma_engine``: projections, scenario snapshots
and CSV / XLSX exports.
"""
