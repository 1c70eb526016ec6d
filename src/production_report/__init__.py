"""production_report package.

Turns monthly per-workshop production records (CSV upload, fetched CSV or a
spreadsheet-backed JSON feed) into quarterly and annual rollups and renders
them as tables, charts and a PDF report.

Architecture:
- CSV / feed text → typed `Record` objects (pydantic)
- Records → monthly index per workshop → quarterly/annual aggregates (pandas)
- Immutable `ReportModel` consumed by the table, chart and PDF renderers
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
