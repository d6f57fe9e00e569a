from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from reporting.formatters import result_to_dict
from reporting.utils import json_safe


def _kind_counts(data: pd.DataFrame) -> Dict[str, int]:
    if data.empty:
        return {}
    counts = data["type"].value_counts(sort=False)
    return {str(k): int(v) for k, v in counts.items()}


def _load_section(load_summary: Any) -> Optional[Dict[str, Any]]:
    if load_summary is None:
        return None
    return {
        "source": load_summary.source,
        "rows_read": int(load_summary.rows_read),
        "rows_kept": int(load_summary.rows_kept),
        "rows_skipped": int(load_summary.rows_skipped),
        "skipped": [str(e) for e in load_summary.errors],
        "parse_warnings": [str(w) for w in load_summary.warnings],
    }


def build_catalog_overview(table: Any) -> Dict[str, Any]:
    """Headline numbers for the loaded catalog."""
    data = table.data
    span = table.release_year_span()
    added = data["date_added_parsed"].dropna() if "date_added_parsed" in data.columns else pd.Series(dtype="datetime64[ns]")
    return {
        "records": len(table),
        "by_type": _kind_counts(data),
        "release_year_min": span[0] if span else None,
        "release_year_max": span[1] if span else None,
        "date_added_min": json_safe(added.min()) if not added.empty else None,
        "date_added_max": json_safe(added.max()) if not added.empty else None,
        "missing_director": int(data["director"].isna().sum()),
        "missing_country": int(data["country"].isna().sum()),
    }


def build_report_payload(
    results: Sequence[Any],
    table: Any,
    *,
    load_summary: Any = None,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    JSON-safe payload behind the catalog report.

    Keys: generated_at, overview, load (or None), reports (one dict per
    result, in run order).
    """
    generated_at = generated_at or datetime.now()
    reports: List[Dict[str, Any]] = [result_to_dict(r) for r in results]
    return {
        "generated_at": generated_at.strftime("%Y-%m-%d %H:%M:%S"),
        "overview": build_catalog_overview(table),
        "load": _load_section(load_summary),
        "reports": reports,
    }
