"""
Catalog Report Engine

Fifteen independent, read-only reports over a loaded ContentTable.

Features:
- One pure function per report, each returning a column-labeled ReportResult
- Split-before-aggregate for multi-valued fields (country, cast, director, genres)
- Stable ordering: ties keep first-seen order
- Parse failures (duration, date_added) exclude a record, never raise
- ReportEngine: registry lookup, parameter checks, logging

Usage:
    from catalog_prep import CatalogDataPrep
    from catalog_reports import ReportEngine

    table = CatalogDataPrep().load('netflix_titles.csv')
    engine = ReportEngine(table)
    result = engine.run('top_countries', n=10)
    print(result.rows())
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from catalog_model import (
    DATE_ADDED_PARSED,
    DURATION_UNIT,
    DURATION_VALUE,
    RECORD_COLUMNS,
    ContentKind,
    ContentTable,
    ReportError,
)


DEFAULT_KEYWORDS: Tuple[str, ...] = ("kill", "violence")

GOOD = "Good"
BAD = "Bad"


# ============================================================================
# RESULTS
# ============================================================================

@dataclass
class ReportResult:
    """Ordered, column-labeled output of one report"""

    name: str
    title: str
    frame: pd.DataFrame
    params: Dict[str, Any] = field(default_factory=dict)
    # 'aggregate' rows are (label, value...) tuples; 'records' rows are catalog records
    shape: str = 'aggregate'

    @property
    def columns(self) -> List[str]:
        return [str(c) for c in self.frame.columns]

    @property
    def empty(self) -> bool:
        return self.frame.empty

    def __len__(self) -> int:
        return len(self.frame)

    def rows(self) -> List[tuple]:
        """Rows as tuples of plain Python values (NA -> None)."""
        return [
            tuple(_to_python(v) for v in row)
            for row in self.frame.itertuples(index=False, name=None)
        ]

    def column(self, name: str) -> List[Any]:
        return [_to_python(v) for v in self.frame[name].tolist()]


def _to_python(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    if isinstance(value, np.generic):
        value = value.item()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


# ============================================================================
# PARAMETER HELPERS
# ============================================================================

def _non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ReportError(f"{name} must be an integer, got {value!r}")
    try:
        as_int = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError) as e:
        raise ReportError(f"{name} must be an integer, got {value!r}") from e
    if isinstance(value, float) and not value.is_integer():
        raise ReportError(f"{name} must be an integer, got {value!r}")
    if as_int < 0:
        raise ReportError(f"{name} must be >= 0, got {as_int}")
    return as_int


def _text(value: Any, name: str) -> str:
    if value is None or not str(value).strip():
        raise ReportError(f"{name} must be a non-empty string")
    return str(value).strip()


def _resolve_today(today: Optional[Union[date, str]]) -> date:
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return today.date()
    if isinstance(today, date):
        return today
    try:
        return datetime.strptime(str(today).strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ReportError(f"today must be YYYY-MM-DD, got {today!r}") from e


# ============================================================================
# RESULT BUILDERS
# ============================================================================

def _records(name: str, title: str, table: ContentTable, mask: pd.Series, params: Dict[str, Any],
             sort_by: Optional[str] = None) -> ReportResult:
    selected = table.data.loc[mask]
    if sort_by is not None:
        selected = selected.sort_values(sort_by, ascending=False, kind='mergesort')
    frame = selected[RECORD_COLUMNS].reset_index(drop=True)
    return ReportResult(name=name, title=title, frame=frame, params=params, shape='records')


def _percentage(count: int, total: int) -> float:
    """count / total * 100 rounded half-up to 2 decimals, computed exactly"""
    share = Decimal(int(count) * 100) / Decimal(int(total))
    return float(share.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _ranked_counts(values: pd.Series, label: str) -> pd.DataFrame:
    """
    Count occurrences per value, sorted descending by count.

    Groups are formed in first-seen order and the sort is stable, so equal
    counts keep first-seen order.
    """
    if values.empty:
        return pd.DataFrame({label: pd.Series(dtype=object), 'count': pd.Series(dtype='int64')})
    counts = values.groupby(values, sort=False).size()
    counts = counts.sort_values(ascending=False, kind='mergesort')
    frame = counts.rename('count').rename_axis(label).reset_index()
    frame['count'] = frame['count'].astype('int64')
    return frame


# ============================================================================
# REPORTS
# ============================================================================

def count_by_type(table: ContentTable) -> ReportResult:
    """Number of titles per kind (Movie / TV Show), first-seen order."""
    kinds = table.data['type']
    if kinds.empty:
        frame = pd.DataFrame({'type': pd.Series(dtype=object), 'count': pd.Series(dtype='int64')})
    else:
        frame = kinds.groupby(kinds, sort=False).size().rename('count').rename_axis('type').reset_index()
    return ReportResult('count_by_type', 'Movies vs TV Shows', frame)


def top_rating_by_type(table: ContentTable) -> ReportResult:
    """
    Most common rating per kind.

    Ratings are counted per (kind, rating), stably sorted by count within each
    kind and ranked; rank 1 is kept. On equal counts the rating seen first in
    the catalog wins. Records without a rating are not counted.
    """
    data = table.data
    rated = data.loc[data['rating'].notna(), ['type', 'rating']]
    columns = ['type', 'rating']
    if rated.empty:
        return ReportResult('top_rating_by_type', 'Most common rating per type',
                            pd.DataFrame(columns=columns))

    counts = rated.groupby(['type', 'rating'], sort=False).size().rename('count').reset_index()
    counts = counts.sort_values('count', ascending=False, kind='mergesort')
    counts['rank'] = counts.groupby('type', sort=False).cumcount() + 1
    top = counts[counts['rank'] == 1]

    kind_order = {kind: i for i, kind in enumerate(pd.unique(rated['type']))}
    top = top.assign(_order=top['type'].map(kind_order)).sort_values('_order', kind='mergesort')
    return ReportResult('top_rating_by_type', 'Most common rating per type',
                        top[columns].reset_index(drop=True))


def filter_by_year(table: ContentTable, year: int) -> ReportResult:
    """All titles released in `year`."""
    year = _non_negative_int(year, 'year')
    mask = table.data['release_year'] == year
    return _records('filter_by_year', f'Titles released in {year}', table, mask, {'year': year})


def top_countries(table: ContentTable, n: int = 5) -> ReportResult:
    """Countries with the most titles; a title counts once for each country it lists."""
    n = _non_negative_int(n, 'n')
    frame = _ranked_counts(table.exploded('country'), 'country').head(n).reset_index(drop=True)
    return ReportResult('top_countries', f'Top {n} countries by content', frame, {'n': n})


def longest_movies(table: ContentTable) -> ReportResult:
    """Movies sorted by runtime, longest first. Durations without a numeric prefix are left out."""
    data = table.data
    mask = table.kind_mask(ContentKind.MOVIE) & data[DURATION_VALUE].notna()
    return _records('longest_movies', 'Longest movies', table, mask, {}, sort_by=DURATION_VALUE)


def added_within_years(table: ContentTable, years: int = 5, today: Optional[Union[date, str]] = None) -> ReportResult:
    """Titles added to the catalog in the last `years` years (unparsable dates excluded)."""
    years = _non_negative_int(years, 'years')
    today = _resolve_today(today)
    cutoff = pd.Timestamp(today) - pd.DateOffset(years=years)
    added = table.data[DATE_ADDED_PARSED]
    mask = added.notna() & (added >= cutoff)
    return _records('added_within_years', f'Added in the last {years} years', table, mask,
                    {'years': years, 'today': today.isoformat()})


def by_director(table: ContentTable, name: str) -> ReportResult:
    """Titles where `name` is one of the credited directors."""
    name = _text(name, 'name')
    mask = table.tokens_match('director', name)
    return _records('by_director', f'Titles directed by {name}', table, mask, {'name': name})


def tv_shows_over_seasons(table: ContentTable, seasons: int = 5) -> ReportResult:
    """TV shows with strictly more than `seasons` seasons."""
    seasons = _non_negative_int(seasons, 'seasons')
    data = table.data
    unit = data[DURATION_UNIT].fillna('').astype(str)
    value = data[DURATION_VALUE]
    mask = (
        table.kind_mask(ContentKind.TV_SHOW)
        & value.notna()
        & unit.str.startswith('season')
        & (value.fillna(0) > seasons)
    )
    return _records('tv_shows_over_seasons', f'TV shows with more than {seasons} seasons', table,
                    mask.astype(bool), {'seasons': seasons})


def genre_counts(table: ContentTable) -> ReportResult:
    """Titles per genre; a title counts once for each genre it lists."""
    frame = _ranked_counts(table.exploded('listed_in'), 'genre')
    return ReportResult('genre_counts', 'Content per genre', frame)


def top_years_by_country(table: ContentTable, country: str, n: int = 5) -> ReportResult:
    """
    Release years contributing the largest share of a country's titles.

    percentage = titles from the country released that year / all titles
    from the country * 100, rounded half-up to 2 decimals. A country with no titles
    gives an empty result.
    """
    country = _text(country, 'country')
    n = _non_negative_int(n, 'n')
    params = {'country': country, 'n': n}
    title = f'Top {n} release years for {country}'
    columns = ['release_year', 'count', 'percentage']

    mask = table.tokens_match('country', country)
    total = int(mask.sum())
    if total == 0:
        return ReportResult('top_years_by_country', title, pd.DataFrame(columns=columns), params)

    years = table.data.loc[mask, 'release_year']
    frame = _ranked_counts(years, 'release_year')
    frame['percentage'] = [_percentage(c, total) for c in frame['count'].tolist()]
    frame = frame.sort_values('percentage', ascending=False, kind='mergesort').head(n)
    return ReportResult('top_years_by_country', title, frame[columns].reset_index(drop=True), params)


def documentaries(table: ContentTable) -> ReportResult:
    """Titles whose genre list ends with 'Documentaries'."""
    genres = table.data['listed_in'].fillna('').astype(str).str.strip()
    mask = genres.str.lower().str.endswith('documentaries')
    return _records('documentaries', 'Documentaries', table, mask, {})


def missing_director(table: ContentTable) -> ReportResult:
    directors = table.data['director'].fillna('').astype(str).str.strip()
    return _records('missing_director', 'Titles without a director', table, directors == '', {})


def actor_recent_movies(table: ContentTable, actor: str, years: int = 10,
                        today: Optional[Union[date, str]] = None) -> ReportResult:
    """Titles featuring `actor` released after (current year - `years`)."""
    actor = _text(actor, 'actor')
    years = _non_negative_int(years, 'years')
    today = _resolve_today(today)
    mask = table.tokens_match('casts', actor) & (table.data['release_year'] > today.year - years)
    return _records('actor_recent_movies', f'{actor}: titles from the last {years} years', table, mask,
                    {'actor': actor, 'years': years, 'today': today.isoformat()})


def top_actors_by_country(table: ContentTable, country: str, n: int = 10) -> ReportResult:
    """Actors appearing in the most titles produced in `country`."""
    country = _text(country, 'country')
    n = _non_negative_int(n, 'n')
    in_country = table.data.index[table.tokens_match('country', country)]
    cast = table.exploded('casts')
    cast = cast[cast.index.isin(in_country)]
    frame = _ranked_counts(cast, 'actor').head(n).reset_index(drop=True)
    return ReportResult('top_actors_by_country', f'Top {n} actors in titles from {country}', frame,
                        {'country': country, 'n': n})


def categorize_by_keyword(table: ContentTable, keywords: Optional[Sequence[str]] = None) -> ReportResult:
    """
    Label each title 'Bad' when its description contains any keyword
    (case-insensitive), otherwise 'Good'. Both categories are always reported.
    """
    if keywords is None:
        keywords = DEFAULT_KEYWORDS
    if isinstance(keywords, str):
        keywords = [keywords]
    cleaned = [str(k).strip() for k in keywords if k is not None and str(k).strip()]

    descriptions = table.data['description'].fillna('').astype(str)
    if cleaned:
        pattern = '|'.join(re.escape(k) for k in cleaned)
        bad = descriptions.str.contains(pattern, case=False, regex=True)
    else:
        bad = pd.Series(False, index=descriptions.index)

    n_bad = int(bad.sum())
    frame = pd.DataFrame({'category': [BAD, GOOD], 'count': [n_bad, len(table) - n_bad]})
    return ReportResult('categorize_by_keyword', 'Content categorized by description keywords', frame,
                        {'keywords': cleaned})


# ============================================================================
# REGISTRY
# ============================================================================

@dataclass(frozen=True)
class ReportSpec:
    """Registry entry: how to call a report and how to chart it"""

    name: str
    func: Callable[..., ReportResult]
    description: str
    params: Tuple[str, ...] = ()
    required: Tuple[str, ...] = ()
    # (label column, value column) for bar charts; None for record listings
    chart: Optional[Tuple[str, str]] = None


REPORTS: Dict[str, ReportSpec] = {
    spec.name: spec for spec in [
        ReportSpec('count_by_type', count_by_type, 'Count of movies vs TV shows',
                   chart=('type', 'count')),
        ReportSpec('top_rating_by_type', top_rating_by_type, 'Most common rating for movies and TV shows'),
        ReportSpec('filter_by_year', filter_by_year, 'Titles released in a given year',
                   params=('year',), required=('year',)),
        ReportSpec('top_countries', top_countries, 'Countries with the most content',
                   params=('n',), chart=('country', 'count')),
        ReportSpec('longest_movies', longest_movies, 'Movies sorted by runtime'),
        ReportSpec('added_within_years', added_within_years, 'Content added in the last N years',
                   params=('years', 'today')),
        ReportSpec('by_director', by_director, 'Titles by a director',
                   params=('name',), required=('name',)),
        ReportSpec('tv_shows_over_seasons', tv_shows_over_seasons, 'TV shows with more than N seasons',
                   params=('seasons',)),
        ReportSpec('genre_counts', genre_counts, 'Content items per genre',
                   chart=('genre', 'count')),
        ReportSpec('top_years_by_country', top_years_by_country, "Release years with the largest share of a country's content",
                   params=('country', 'n'), required=('country',), chart=('release_year', 'percentage')),
        ReportSpec('documentaries', documentaries, 'All documentaries'),
        ReportSpec('missing_director', missing_director, 'Titles without a director'),
        ReportSpec('actor_recent_movies', actor_recent_movies, "An actor's titles from the last N years",
                   params=('actor', 'years', 'today'), required=('actor',)),
        ReportSpec('top_actors_by_country', top_actors_by_country, 'Actors with the most titles from a country',
                   params=('country', 'n'), required=('country',), chart=('actor', 'count')),
        ReportSpec('categorize_by_keyword', categorize_by_keyword, 'Good/Bad split by description keywords',
                   params=('keywords',), chart=('category', 'count')),
    ]
}


# ============================================================================
# ENGINE
# ============================================================================

class ReportEngine:
    """
    Runs named reports against one loaded table

    Example:
    -------
    >>> engine = ReportEngine(table)
    >>> engine.run('top_years_by_country', country='India', n=5)
    """

    def __init__(self, table: ContentTable, verbose: bool = True):
        self.table = table
        self.verbose = verbose
        self.logger = self._setup_logger()

    def _setup_logger(self):
        """Setup logging"""
        logger = logging.getLogger('CatalogReportEngine')
        logger.setLevel(logging.INFO if self.verbose else logging.WARNING)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter('%(message)s')
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    @staticmethod
    def available_reports() -> List[str]:
        return list(REPORTS)

    @staticmethod
    def get_spec(name: str) -> ReportSpec:
        try:
            return REPORTS[name]
        except KeyError:
            raise ReportError(f"Unknown report: {name!r}. Available: {', '.join(REPORTS)}") from None

    def run(self, report_name: str, /, **params) -> ReportResult:
        """Run one report by name"""
        spec = self.get_spec(report_name)

        params = {k: v for k, v in params.items() if v is not None}
        unknown = set(params) - set(spec.params)
        if unknown:
            raise ReportError(f"{report_name}: unknown parameter(s) {sorted(unknown)}")
        missing = [p for p in spec.required if p not in params]
        if missing:
            raise ReportError(f"{report_name}: missing required parameter(s) {missing}")

        result = spec.func(self.table, **params)
        self.logger.info(f"  ✓ {report_name}: {len(result)} rows")
        return result

    def run_many(self, requests: Iterable[Union[str, Tuple[str, Dict[str, Any]], Dict[str, Any]]]) -> List[ReportResult]:
        """
        Run several reports, returning results in request order.

        Each request is a report name, a (name, params) tuple, or a
        {'name': ..., 'params': {...}} mapping.
        """
        results = []
        for request in requests:
            if isinstance(request, str):
                name, params = request, {}
            elif isinstance(request, dict):
                name, params = request.get('name'), request.get('params') or {}
            else:
                name, params = request
            if not isinstance(params, dict):
                raise ReportError(f"{name}: params must be a mapping, got {type(params).__name__}")
            results.append(self.run(name, **params))
        return results
