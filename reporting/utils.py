from __future__ import annotations

import base64
import html
import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import numpy as np
import pandas as pd


MISSING = "—"


def fmt_count(x: Optional[float]) -> str:
    """Format a count with thousands separators for display."""
    if x is None:
        return MISSING
    try:
        return f"{int(x):,}"
    except (TypeError, ValueError):
        return MISSING


def fmt_pct2(x: Optional[float]) -> str:
    """Format a percent value with 2 decimal places (e.g. 12.50%)."""
    if x is None:
        return MISSING
    try:
        return f"{float(x):.2f}%"
    except (TypeError, ValueError):
        return MISSING


def json_safe(value: Any) -> Any:
    """Convert numpy / pandas scalars and dates into JSON-serializable values."""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return None if pd.isna(value) else value.isoformat()[:10]
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def fmt_cell(value: Any) -> str:
    """Text for one table cell; missing values render as an empty string."""
    value = json_safe(value)
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def embed_image_as_img_tag(path: Path, *, alt: str = "") -> str:
    """Return an <img> tag with an image embedded as base64 (png/jpg/jpeg/gif/webp)."""
    with open(path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("utf-8")
    alt_esc = html.escape(alt or path.name)
    ext = path.suffix.lower().lstrip(".")
    mime = {
        "png": "image/png",
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "gif": "image/gif",
        "webp": "image/webp",
    }.get(ext, "application/octet-stream")
    return f'<img alt="{alt_esc}" src="data:{mime};base64,{encoded}" style="max-width:100%; height:auto;" />'


def dump_json(data: Any) -> str:
    return json.dumps(json_safe(data), ensure_ascii=False, indent=2)


def html_escape_text(s: Any) -> str:
    return html.escape("" if s is None else str(s))


def ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def write_text(path: Path, content: str) -> None:
    ensure_parent_dir(path)
    path.write_text(content, encoding="utf-8")
