"""
Example 1: Catalog Overview - Basic Usage

This example demonstrates:
- Loading the Netflix catalog export (bad rows skipped, parse warnings collected)
- Running reports one by one through the ReportEngine
- Printing results as fixed-width tables
- Writing the Markdown / HTML catalog report

Use this when:
- Exploring a new catalog export
- Getting started with the report functions
"""

import sys
from pathlib import Path

# Allow running this file directly: `python examples/example_01_catalog_overview.py`
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from catalog_prep import CatalogDataPrep, CatalogPrepConfig
from catalog_reports import ReportEngine
from reporting import format_text_table, generate_catalog_report


def main():
    # ============================================================================
    # STEP 1: LOAD CATALOG
    # ============================================================================

    print("="*80)
    print("EXAMPLE 1: CATALOG OVERVIEW")
    print("="*80)

    DATA_DIR = REPO_ROOT / "data"
    source = DATA_DIR / "netflix_titles.csv"

    if not source.exists():
        raise FileNotFoundError(
            "Missing input CSV. Expected file:\n"
            f"  - {source}\n\n"
            "Place the Netflix titles export in the repo's data/ folder."
        )

    prep = CatalogDataPrep(CatalogPrepConfig(verbose=True))
    table = prep.load(source)

    print(f"\nCatalog loaded: {len(table)} records")
    print(f"Load summary: {prep.summary}")

    # ============================================================================
    # STEP 2: HEADLINE REPORTS
    # ============================================================================

    engine = ReportEngine(table)

    results = [
        engine.run('count_by_type'),
        engine.run('top_rating_by_type'),
        engine.run('top_countries', n=10),
        engine.run('genre_counts'),
    ]

    for result in results:
        print("\n" + format_text_table(result))

    # ============================================================================
    # STEP 3: COUNTRY DEEP DIVE
    # ============================================================================

    print("\n" + "="*80)
    print("COUNTRY DEEP DIVE: INDIA")
    print("="*80)

    india = [
        engine.run('top_years_by_country', country='India', n=5),
        engine.run('top_actors_by_country', country='India', n=10),
    ]
    for result in india:
        print("\n" + format_text_table(result))
    results.extend(india)

    # ============================================================================
    # STEP 4: CONTENT CHECKS
    # ============================================================================

    shows = engine.run('tv_shows_over_seasons', seasons=5)
    no_director = engine.run('missing_director')
    categories = engine.run('categorize_by_keyword', keywords=['kill', 'violence'])

    print(f"\nTV shows with more than 5 seasons: {len(shows)}")
    print(f"Titles without a director: {len(no_director)}")
    print("\n" + format_text_table(categories))
    results.append(categories)

    # ============================================================================
    # STEP 5: GENERATE REPORT
    # ============================================================================

    print("\n" + "="*80)
    print("GENERATING REPORT")
    print("="*80)

    report_paths = generate_catalog_report(
        results,
        table,
        output_dir='./output_example_01',
        load_summary=prep.summary,
    )

    print(f"\n✓ Reports generated:")
    for k, v in report_paths.items():
        print(f"  - {k}: {v}")

    print("\n" + "="*80)
    print("✓ EXAMPLE 1 COMPLETE")
    print("="*80)


if __name__ == "__main__":
    main()
