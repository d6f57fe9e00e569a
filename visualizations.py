"""
Visualization Module for Catalog Reports

Bar charts for the count-style reports:
- Movies vs TV shows
- Top countries / genres / actors
- Release-year share for a country
- Good vs Bad keyword categories

Usage:
    from visualizations import create_all_plots

    create_all_plots(results, output_dir='./output/plots')
"""

import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path
from typing import Dict, Optional, Sequence

from catalog_reports import REPORTS, ReportResult

# Set style
sns.set_style("whitegrid")
plt.rcParams['figure.figsize'] = (12, 8)
plt.rcParams['font.size'] = 10

NETFLIX_RED = "#E50914"
NETFLIX_DARK = "#221F1F"


# ============================================================================
# GENERIC BAR CHART
# ============================================================================

def plot_result_bar(
    result: ReportResult,
    label_col: str,
    value_col: str,
    output_path: Optional[str] = None,
    figsize=(10, 6),
    max_bars: int = 25,
):
    """
    Horizontal bar chart of one aggregate result

    Parameters:
    ----------
    result : ReportResult
        Aggregate report output (e.g. top_countries)

    label_col, value_col : str
        Columns used for bar labels and lengths

    output_path : str, optional
        Path to save plot

    Returns:
    -------
    matplotlib.figure.Figure, or None for an empty result
    """
    if result.empty:
        print(f"{result.name}: no rows - skipping chart")
        return None

    frame = result.frame.head(max_bars)
    labels = [str(v) for v in frame[label_col].tolist()]
    values = [float(v) for v in frame[value_col].tolist()]

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    # Largest bar on top
    ax.barh(labels[::-1], values[::-1], color=NETFLIX_RED, alpha=0.85, edgecolor=NETFLIX_DARK)

    for y, v in enumerate(values[::-1]):
        text = f"{v:.2f}%" if value_col == 'percentage' else f"{v:,.0f}"
        ax.text(v, y, f" {text}", va="center", fontsize=9)

    ax.set_title(result.title, fontweight="bold")
    ax.set_xlabel(value_col.replace('_', ' ').title())
    ax.grid(alpha=0.25, axis="x")

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        print(f"{result.name} chart saved to {output_path}")

    return fig


# ============================================================================
# NAMED CHARTS
# ============================================================================

def plot_count_by_type(result: ReportResult, output_path: Optional[str] = None, figsize=(6, 6)):
    """Pie chart of movies vs TV shows"""
    if result.empty:
        print("count_by_type: no rows - skipping chart")
        return None

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.pie(
        result.frame['count'].tolist(),
        labels=[str(v) for v in result.frame['type'].tolist()],
        autopct="%1.1f%%",
        colors=[NETFLIX_RED, NETFLIX_DARK, "#B81D24", "#F5F5F1"][: len(result)],
        startangle=90,
    )
    ax.set_title(result.title, fontweight="bold")
    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        print(f"count_by_type chart saved to {output_path}")

    return fig


# ============================================================================
# CONVENIENCE FUNCTION
# ============================================================================

def create_all_plots(results: Sequence[ReportResult], output_dir='./plots') -> Dict[str, str]:
    """
    Create one chart per chartable result

    Record listings (filter_by_year, documentaries, ...) have no chart and
    are skipped, as are empty results.

    Returns:
    -------
    Dict
        report name -> saved PNG path
    """

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    saved = {}

    for result in results:
        spec = REPORTS.get(result.name)
        if spec is None or spec.chart is None or result.empty:
            continue

        path = output_dir / f"{result.name}.png"
        if result.name == 'count_by_type':
            fig = plot_count_by_type(result, output_path=str(path))
        else:
            label_col, value_col = spec.chart
            fig = plot_result_bar(result, label_col, value_col, output_path=str(path))
        plt.close(fig)
        saved[result.name] = str(path)

    print(f"\n✓ {len(saved)} charts saved to {output_dir}")

    return saved
