"""
Report output package.

Exports the entry points used by `run_reports.py`:
- render / write_result (one report in text, csv, json or markdown)
- generate_catalog_report (markdown + json + html catalog report)
"""

from reporting.formatters import format_text_table, render, to_csv, to_json, to_markdown, write_result
from reporting.catalog_report import generate_catalog_report
from reporting.report_data import build_report_payload
