from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import markdown

from reporting.formatters import to_markdown
from reporting.report_data import build_report_payload
from reporting.utils import (
    dump_json,
    embed_image_as_img_tag,
    fmt_count,
    html_escape_text,
    write_text,
)


REPORT_TITLE = "Netflix Catalog Report"


def render_markdown_to_html(md_text: str) -> str:
    return markdown.markdown(md_text, extensions=["extra", "toc", "tables"])


def build_html_document(title: str, body_html: str) -> str:
    return "\n".join(
        [
            "<!doctype html>",
            '<html style="color-scheme: light;">',
            "  <head>",
            '    <meta charset="utf-8" />',
            '    <meta name="viewport" content="width=device-width, initial-scale=1" />',
            "    <style>",
            "      body { margin: 0; background: #141414; font-family: -apple-system, 'Segoe UI', Helvetica, Arial, sans-serif; }",
            "      .report-body {",
            "        color: #1f2328;",
            "        box-sizing: border-box;",
            "        min-width: 200px;",
            "        max-width: 1100px;",
            "        margin: 0 auto;",
            "        padding: 45px;",
            "        background: #ffffff;",
            "      }",
            "      .report-body table { border-collapse: collapse; margin-bottom: 24px; }",
            "      .report-body th, .report-body td { border: 1px solid #d0d7de; padding: 4px 10px; }",
            "      .report-body th { background: #f6f8fa; }",
            "      .report-body h2 { border-bottom: 2px solid #E50914; padding-bottom: 4px; }",
            "      @media (max-width: 767px) {",
            "        .report-body { padding: 15px; }",
            "      }",
            "    </style>",
            f"    <title>{html_escape_text(title)}</title>",
            "  </head>",
            "  <body>",
            '    <article class="report-body">',
            body_html,
            "    </article>",
            "  </body>",
            "</html>",
            "",
        ]
    )


def _overview_markdown(payload: Mapping[str, Any]) -> str:
    ov = payload["overview"]
    lines = [
        "## Catalog overview",
        "",
        f"- Records: **{fmt_count(ov['records'])}**",
    ]
    for kind, n in ov["by_type"].items():
        lines.append(f"- {kind}: {fmt_count(n)}")
    if ov["release_year_min"] is not None:
        lines.append(f"- Release years: {ov['release_year_min']}–{ov['release_year_max']}")
    if ov["date_added_min"] is not None:
        lines.append(f"- Added to catalog: {ov['date_added_min']} to {ov['date_added_max']}")
    lines.append(f"- Titles without a director: {fmt_count(ov['missing_director'])}")

    load = payload.get("load")
    if load:
        lines.extend(
            [
                "",
                f"Source `{load['source']}`: {fmt_count(load['rows_read'])} rows read, "
                f"{fmt_count(load['rows_kept'])} kept, {fmt_count(load['rows_skipped'])} skipped, "
                f"{fmt_count(len(load['parse_warnings']))} parse warnings.",
            ]
        )
    return "\n".join(lines) + "\n"


def build_catalog_markdown(
    results: Sequence[Any],
    payload: Mapping[str, Any],
    *,
    chart_tags: Optional[Mapping[str, str]] = None,
) -> str:
    """Markdown body: title, overview, then one section per report (chart above the table when given)."""
    chart_tags = chart_tags or {}
    parts = [
        f"# {REPORT_TITLE}",
        "",
        f"_Generated {payload['generated_at']}_",
        "",
        _overview_markdown(payload),
    ]
    for result in results:
        section = to_markdown(result)
        tag = chart_tags.get(result.name)
        if tag:
            heading, _, rest = section.partition("\n")
            section = f"{heading}\n\n{tag}\n{rest}"
        parts.append(section)
    return "\n".join(parts)


def generate_catalog_report(
    results: Sequence[Any],
    table: Any,
    output_dir: str,
    *,
    load_summary: Any = None,
    chart_paths: Optional[Mapping[str, str]] = None,
    html: bool = True,
    generated_at: Optional[datetime] = None,
) -> Dict[str, str]:
    """
    Generate the catalog report.

    Writes:
      {output_dir}/catalog_report.md
      {output_dir}/catalog_report.json
      {output_dir}/catalog_report.html   (when html=True; charts embedded as base64)

    Returns a mapping of format -> written path.
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    payload = build_report_payload(results, table, load_summary=load_summary, generated_at=generated_at)

    written: Dict[str, str] = {}

    md_path = out / "catalog_report.md"
    write_text(md_path, build_catalog_markdown(results, payload))
    written["markdown"] = str(md_path)

    json_path = out / "catalog_report.json"
    write_text(json_path, dump_json(payload) + "\n")
    written["json"] = str(json_path)

    if html:
        chart_tags = {}
        for name, path in (chart_paths or {}).items():
            p = Path(path)
            if p.is_file():
                chart_tags[name] = embed_image_as_img_tag(p, alt=name.replace("_", " "))
        body = render_markdown_to_html(build_catalog_markdown(results, payload, chart_tags=chart_tags))
        html_path = out / "catalog_report.html"
        write_text(html_path, build_html_document(REPORT_TITLE, body))
        written["html"] = str(html_path)

    return written
