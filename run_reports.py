"""
Command-Line Interface for Netflix Catalog Reports

Loads the catalog once, runs the requested reports and writes their outputs.

Usage:
    # All reports that need no parameters (plus any whose parameters are given)
    python run_reports.py --source data/netflix_titles.csv --output ./output

    # With configuration file
    python run_reports.py --config config.yaml

    # Selected reports with parameters
    python run_reports.py --source data/netflix_titles.csv --report top_countries --top-n 10
    python run_reports.py --source data/netflix_titles.csv --report top_years_by_country --country India
"""

import argparse
import yaml
import sys
from pathlib import Path
import logging
from datetime import datetime

# Import our modules
from catalog_model import ReportError
from catalog_prep import CatalogDataPrep, CatalogPrepConfig, DEFAULT_COLUMN_ALIASES
from catalog_reports import REPORTS, ReportEngine
from reporting import generate_catalog_report, render, write_result
from reporting.formatters import FORMAT_EXTENSIONS


# ============================================================================
# LOGGING SETUP
# ============================================================================

def setup_logging(output_dir: Path, verbose: bool = True):
    """Setup logging to file and console"""

    log_file = output_dir / 'analysis.log'

    # Create logger
    logger = logging.getLogger('CatalogReports')
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Re-running main() in one process must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # File handler
    fh = logging.FileHandler(log_file, encoding='utf-8')
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO if verbose else logging.WARNING)
    ch.setFormatter(logging.Formatter('%(message)s'))

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger


# ============================================================================
# CONFIG HELPERS
# ============================================================================

def _get_verbose_flag(config: dict, default: bool = True) -> bool:
    """Return verbose flag from config (`logging.verbose`)."""
    if not isinstance(config, dict):
        return default
    if isinstance(config.get('logging'), dict) and 'verbose' in config['logging']:
        return bool(config['logging']['verbose'])
    return default


def _get_output_dir(config: dict, default: str = './output') -> str:
    """Return output directory from config (`output.output_dir`, legacy `output.directory`)."""
    if not isinstance(config, dict):
        return default
    output = config.get('output', {})
    if isinstance(output, dict):
        return output.get('output_dir') or output.get('directory') or default
    return default


def _get_formats(config: dict) -> list:
    output = config.get('output', {}) if isinstance(config, dict) else {}
    formats = output.get('formats') or ['csv']
    if isinstance(formats, str):
        formats = [formats]
    unknown = [f for f in formats if f not in FORMAT_EXTENSIONS]
    if unknown:
        raise ValueError(f"Unknown output format(s) {unknown}. Choose from {sorted(FORMAT_EXTENSIONS)}")
    return list(formats)


# CLI parameter -> {report name: report parameter}
CLI_PARAM_TARGETS = {
    'year': {'filter_by_year': 'year'},
    'country': {'top_years_by_country': 'country', 'top_actors_by_country': 'country'},
    'director': {'by_director': 'name'},
    'actor': {'actor_recent_movies': 'actor'},
    'years': {'added_within_years': 'years', 'actor_recent_movies': 'years'},
    'seasons': {'tv_shows_over_seasons': 'seasons'},
    'top_n': {'top_countries': 'n', 'top_years_by_country': 'n', 'top_actors_by_country': 'n'},
    'keywords': {'categorize_by_keyword': 'keywords'},
    'today': {'added_within_years': 'today', 'actor_recent_movies': 'today'},
}


def build_report_requests(report_names, cli_params: dict) -> list:
    """
    Turn selected report names plus flat CLI parameters into
    [{'name': ..., 'params': {...}}, ...].

    With no names, every report is selected; reports whose required
    parameters are not supplied are then left out rather than failing.
    """
    explicit = bool(report_names)
    names = list(report_names) if explicit else list(REPORTS)

    requests = []
    for name in names:
        params = {}
        for cli_name, value in cli_params.items():
            if value is None:
                continue
            target = CLI_PARAM_TARGETS.get(cli_name, {}).get(name)
            if target:
                params[target] = value
        spec = REPORTS.get(name)
        if not explicit and spec is not None and any(p not in params for p in spec.required):
            continue
        requests.append({'name': name, 'params': params})
    return requests


def append_run_log(config: dict, results, output_dir: Path, repo_root: Path = None):
    """
    Append a one-line summary to run_log.txt after each run.
    Captures: timestamp, source, reports run with row counts, output dir.
    """
    if repo_root is None:
        repo_root = Path.cwd()

    log_path = repo_root / "run_log.txt"

    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    source = config.get('data', {}).get('source_path', '?')
    counts = " ".join(f"{r.name}={len(r)}" for r in results)

    line = f"{timestamp} | source={source} | reports={len(results)} {counts} | output={output_dir}\n"

    try:
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(line)
    except OSError:
        pass  # Don't let run-log failures break the pipeline


# ============================================================================
# CONFIGURATION LOADING
# ============================================================================

def load_config(config_path: str) -> dict:
    """Load configuration from YAML file"""

    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")

    return config


def parse_arguments(argv=None):
    """Parse command-line arguments"""

    parser = argparse.ArgumentParser(
        description='Netflix Catalog Reports',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Every report that needs no parameters
  python run_reports.py --source data/netflix_titles.csv

  # With configuration file
  python run_reports.py --config config.yaml

  # One report, JSON output
  python run_reports.py --source data/netflix_titles.csv --report by_director --director "Rajiv Chilaka" --format json

Reports:
""" + "\n".join(f"  {name:<24} {spec.description}" for name, spec in REPORTS.items())
    )

    # Input
    parser.add_argument('--source', type=str, help='Path to the catalog CSV/JSON file')
    parser.add_argument('--config', type=str, help='Path to YAML configuration file')

    # Report selection
    parser.add_argument('--report', action='append', default=None, choices=list(REPORTS),
                        help='Report to run (repeatable; default: all runnable reports)')

    # Report parameters
    parser.add_argument('--year', type=int, help='Release year (filter_by_year)')
    parser.add_argument('--country', type=str, help='Country (top_years_by_country, top_actors_by_country)')
    parser.add_argument('--director', type=str, help='Director name (by_director)')
    parser.add_argument('--actor', type=str, help='Actor name (actor_recent_movies)')
    parser.add_argument('--years', type=int, help='Look-back window in years (added_within_years, actor_recent_movies)')
    parser.add_argument('--seasons', type=int, help='Season threshold (tv_shows_over_seasons)')
    parser.add_argument('--top-n', type=int, help='Number of rows for top-N reports')
    parser.add_argument('--keyword', action='append', default=None,
                        help='Description keyword (repeatable; categorize_by_keyword)')
    parser.add_argument('--today', type=str, help='Reference date YYYY-MM-DD (default: today)')

    # Output options
    parser.add_argument('--format', action='append', default=None, choices=list(FORMAT_EXTENSIONS),
                        help='Output format for report files (repeatable; default: csv)')
    parser.add_argument('--output', type=str, default='./output',
                        help='Output directory (default: ./output)')
    parser.add_argument('--no-plots', action='store_true',
                        help='Skip chart generation')
    parser.add_argument('--no-html', action='store_true',
                        help='Skip HTML report generation')

    # Other
    parser.add_argument('--strict', action='store_true',
                        help='Fail on the first bad source row instead of skipping it')
    parser.add_argument('--verbose', action='store_true',
                        help='Verbose output')

    return parser.parse_args(argv)


def config_from_args(args) -> dict:
    """Build the same config dict a YAML file provides from CLI arguments"""
    cli_params = {
        'year': args.year,
        'country': args.country,
        'director': args.director,
        'actor': args.actor,
        'years': args.years,
        'seasons': args.seasons,
        'top_n': args.top_n,
        'keywords': args.keyword,
        'today': args.today,
    }
    return {
        'data': {
            'source_path': args.source,
            'source_format': None,
            'column_aliases': dict(DEFAULT_COLUMN_ALIASES),
            'strict': args.strict,
        },
        'reports': build_report_requests(args.report, cli_params),
        'output': {
            'output_dir': args.output,
            'formats': args.format or ['csv'],
            'generate_plots': not args.no_plots,
            'generate_html': not args.no_html,
            'print_tables': True,
        },
        'logging': {
            'verbose': args.verbose,
            'log_to_file': True,
        },
    }


# ============================================================================
# MAIN PIPELINE
# ============================================================================

def run_pipeline(config: dict, logger):
    """
    Main reporting pipeline

    Steps:
    1. Load catalog
    2. Run reports
    3. Save report files
    4. Charts
    5. Catalog report (markdown / json / html)
    """

    logger.info("=" * 80)
    logger.info("STARTING NETFLIX CATALOG REPORTS")
    logger.info("=" * 80)
    logger.info(f"\nTimestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    data_cfg = config.get('data') or {}
    output_cfg = config.get('output') or {}
    verbose = _get_verbose_flag(config, default=True)

    if not data_cfg.get('source_path'):
        raise ValueError("data.source_path is required (or pass --source)")

    # Create output directory
    output_dir = Path(_get_output_dir(config))
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Output directory: {output_dir}")

    # ========================================================================
    # STEP 1: LOAD CATALOG
    # ========================================================================

    logger.info("\n" + "=" * 80)
    logger.info("STEP 1: LOAD CATALOG")
    logger.info("=" * 80)

    prep_config = CatalogPrepConfig(
        source_format=data_cfg.get('source_format'),
        encoding=data_cfg.get('encoding', 'utf-8'),
        column_aliases=data_cfg.get('column_aliases') or dict(DEFAULT_COLUMN_ALIASES),
        strict=bool(data_cfg.get('strict', False)),
        verbose=verbose,
    )
    prep = CatalogDataPrep(prep_config)
    table = prep.load(data_cfg['source_path'])

    logger.info(f"\n✓ Catalog loaded: {len(table)} records")
    if prep.summary.rows_skipped:
        logger.warning(f"  ⚠️ {prep.summary.rows_skipped} rows skipped (see log)")
    for err in prep.summary.errors:
        logger.debug(f"  skipped {err}")
    for warn in prep.summary.warnings:
        logger.debug(f"  {warn}")

    # ========================================================================
    # STEP 2: RUN REPORTS
    # ========================================================================

    logger.info("\n" + "=" * 80)
    logger.info("STEP 2: RUN REPORTS")
    logger.info("=" * 80)

    requests = config.get('reports')
    if not requests:
        requests = build_report_requests(None, {})
    engine = ReportEngine(table, verbose=verbose)
    results = engine.run_many(requests)

    if output_cfg.get('print_tables', True):
        for result in results:
            logger.info("\n" + render(result, 'text'))

    # ========================================================================
    # STEP 3: SAVE REPORT FILES
    # ========================================================================

    logger.info("\n" + "=" * 80)
    logger.info("STEP 3: SAVING REPORT FILES")
    logger.info("=" * 80)

    reports_dir = output_dir / 'reports'
    for fmt in _get_formats(config):
        for result in results:
            path = write_result(result, str(reports_dir), fmt)
            logger.debug(f"  wrote {path}")
        logger.info(f"✓ {len(results)} {fmt} files saved to: {reports_dir}")

    # ========================================================================
    # STEP 4: CHARTS
    # ========================================================================

    chart_paths = {}
    if output_cfg.get('generate_plots', True):
        logger.info("\n" + "=" * 80)
        logger.info("STEP 4: GENERATING CHARTS")
        logger.info("=" * 80)

        from visualizations import create_all_plots

        plots_dir = output_dir / 'plots'
        chart_paths = create_all_plots(results, output_dir=str(plots_dir))

        logger.info(f"\n✓ {len(chart_paths)} charts saved to: {plots_dir}")

    # ========================================================================
    # STEP 5: CATALOG REPORT
    # ========================================================================

    logger.info("\n" + "=" * 80)
    logger.info("STEP 5: GENERATING CATALOG REPORT")
    logger.info("=" * 80)

    written = generate_catalog_report(
        results,
        table,
        output_dir=str(output_dir),
        load_summary=prep.summary,
        chart_paths=chart_paths,
        html=bool(output_cfg.get('generate_html', True)),
    )
    for fmt, path in written.items():
        logger.info(f"✓ Catalog report ({fmt}): {path}")

    # ========================================================================
    # FINAL SUMMARY
    # ========================================================================

    logger.info("\n" + "=" * 80)
    logger.info("✓ REPORTS COMPLETE")
    logger.info("=" * 80)
    logger.info(f"\n📊 {len(results)} reports over {len(table)} records")
    for result in results:
        logger.info(f"  - {result.name}: {len(result)} rows")
    logger.info(f"\n📁 OUTPUT FILES:")
    logger.info(f"  Directory: {output_dir}")
    logger.info(f"  - reports/ (one file per report and format)")
    if chart_paths:
        logger.info(f"  - plots/ (charts)")
    logger.info(f"  - catalog_report.md / catalog_report.json")
    if 'html' in written:
        logger.info(f"  - catalog_report.html")
    logger.info(f"  - analysis.log")

    return results


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def main(argv=None):
    """Main entry point"""

    # Parse arguments
    args = parse_arguments(argv)

    # Load or create configuration
    if args.config:
        try:
            config = load_config(args.config)
        except (OSError, yaml.YAMLError, ValueError) as e:
            print(f"Error: could not load configuration {args.config}: {e}")
            return 1
    else:
        if not args.source:
            print("Error: --source is required (or use --config)")
            return 1
        config = config_from_args(args)

    # Setup logging
    output_dir = Path(_get_output_dir(config))
    output_dir.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(output_dir, verbose=_get_verbose_flag(config, default=True))

    # Run pipeline
    try:
        results = run_pipeline(config, logger)
        logger.info("\n✓ Pipeline completed successfully!")

        append_run_log(config, results, output_dir)
        logger.info(f"✓ Run logged to: {Path.cwd() / 'run_log.txt'}")

        return 0

    except Exception as e:
        kind = "Report error" if isinstance(e, ReportError) else "Pipeline failed with error"
        logger.error(f"\n❌ {kind}:")
        logger.error(f"  {str(e)}")
        logger.exception("Full traceback:")
        return 1


if __name__ == '__main__':
    sys.exit(main())
