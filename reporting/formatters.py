from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Dict, List

from reporting.utils import dump_json, fmt_cell, json_safe, write_text


FORMAT_EXTENSIONS: Dict[str, str] = {
    "text": "txt",
    "csv": "csv",
    "json": "json",
    "markdown": "md",
}

# Long free-text cells are clipped in the fixed-width view only.
MAX_TEXT_WIDTH = 60


def _clip(text: str, width: int = MAX_TEXT_WIDTH) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def format_text_table(result: Any, *, max_width: int = MAX_TEXT_WIDTH) -> str:
    """
    Fixed-width text table with a title line.

    Numbers are right-aligned, text left-aligned. Empty results print
    "(no rows)" under the header.
    """
    columns = result.columns
    raw_rows = result.rows()
    rows = [[_clip(fmt_cell(v), max_width) for v in row] for row in raw_rows]
    numeric = [
        all(isinstance(r[i], (int, float)) for r in raw_rows if r[i] is not None)
        and any(r[i] is not None for r in raw_rows)
        for i in range(len(columns))
    ]

    widths = [len(c) for c in columns]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def _line(cells: List[str]) -> str:
        parts = []
        for i, cell in enumerate(cells):
            parts.append(cell.rjust(widths[i]) if numeric[i] else cell.ljust(widths[i]))
        return "  ".join(parts).rstrip()

    lines = [result.title, "=" * max(len(result.title), 1)]
    lines.append(_line(list(columns)))
    lines.append("  ".join("-" * w for w in widths))
    if not rows:
        lines.append("(no rows)")
    for row in rows:
        lines.append(_line(row))
    lines.append(f"({len(rows)} rows)")
    return "\n".join(lines)


def to_csv(result: Any) -> str:
    buf = io.StringIO()
    result.frame.to_csv(buf, index=False)
    return buf.getvalue()


def to_json(result: Any) -> str:
    return dump_json(result_to_dict(result))


def result_to_dict(result: Any) -> Dict[str, Any]:
    return {
        "report": result.name,
        "title": result.title,
        "params": json_safe(result.params),
        "columns": result.columns,
        "rows": [json_safe(list(row)) for row in result.rows()],
    }


def _md_escape(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def to_markdown(result: Any, *, heading_level: int = 2) -> str:
    """Markdown section: heading, parameter line and a pipe table."""
    lines = [f"{'#' * heading_level} {result.title}", ""]
    if result.params:
        params = ", ".join(f"`{k}={v}`" for k, v in json_safe(result.params).items())
        lines.extend([f"Parameters: {params}", ""])
    if result.empty:
        lines.append("_No rows._")
        return "\n".join(lines) + "\n"

    lines.append("| " + " | ".join(_md_escape(c) for c in result.columns) + " |")
    lines.append("|" + "|".join(" --- " for _ in result.columns) + "|")
    for row in result.rows():
        lines.append("| " + " | ".join(_md_escape(fmt_cell(v)) for v in row) + " |")
    return "\n".join(lines) + "\n"


FORMATTERS = {
    "text": format_text_table,
    "csv": to_csv,
    "json": to_json,
    "markdown": to_markdown,
}


def render(result: Any, fmt: str = "text") -> str:
    try:
        formatter = FORMATTERS[fmt]
    except KeyError:
        raise ValueError(f"Unknown output format: {fmt!r}. Choose from {sorted(FORMATTERS)}") from None
    text = formatter(result)
    return text if text.endswith("\n") else text + "\n"


def write_result(result: Any, output_dir: str, fmt: str = "csv") -> Path:
    """Write one result as {output_dir}/{report name}.{ext}."""
    path = Path(output_dir) / f"{result.name}.{FORMAT_EXTENSIONS[fmt]}"
    write_text(path, render(result, fmt))
    return path
