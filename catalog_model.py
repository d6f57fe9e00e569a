"""
Catalog Data Model

Record model, immutable table and field parsers for the Netflix catalog.

Features:
- ContentRecord: one catalog entry (movie or TV show)
- ContentTable: load-once, query-many wrapper around a pandas DataFrame
- Explicit split step for multi-valued fields (director, cast, country, genres)
- Single parsing utilities for "Month DD, YYYY" dates and "90 min" / "3 Seasons" durations
- Error taxonomy shared by the loader and the report engine

Usage:
    from catalog_model import ContentTable, split_multi_value

    table = ContentTable.from_records(records)
    split_multi_value("India, United States")  # ['India', 'United States']
"""

from __future__ import annotations

import re
from dataclasses import dataclass, asdict, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

import numpy as np
import pandas as pd


# ============================================================================
# ERRORS
# ============================================================================

class CatalogError(Exception):
    """Base class for catalog loading and reporting errors"""


class SourceUnavailable(CatalogError):
    """The whole source is missing or unreadable (fatal)."""


class LoadError(CatalogError):
    """A single source row could not be turned into a record (recoverable)."""

    def __init__(self, reason: str, row: Optional[int] = None, show_id: Optional[str] = None):
        self.reason = reason
        self.row = row
        self.show_id = show_id
        where = f"row {row}" if row is not None else "row ?"
        if show_id:
            where += f" (show_id={show_id})"
        super().__init__(f"{where}: {reason}")


class ParseWarning(UserWarning):
    """A field could not be parsed; the field is treated as absent."""

    def __init__(self, field_name: str, value: Any, row: Optional[int] = None, show_id: Optional[str] = None):
        self.field_name = field_name
        self.value = value
        self.row = row
        self.show_id = show_id
        where = f"row {row}" if row is not None else "row ?"
        if show_id:
            where += f" (show_id={show_id})"
        super().__init__(f"{where}: unparsable {field_name} {value!r}")


class ReportError(CatalogError):
    """Unknown report or invalid report parameters."""


# ============================================================================
# CONSTANTS
# ============================================================================

class ContentKind(str, Enum):
    MOVIE = "Movie"
    TV_SHOW = "TV Show"

    @classmethod
    def parse(cls, value: Any) -> Optional["ContentKind"]:
        """Map raw type labels ('Movie', 'TV Show', 'TVShow', ...) to a kind."""
        if value is None:
            return None
        key = re.sub(r"[\s_-]+", "", str(value)).lower()
        return _KIND_KEYS.get(key)


_KIND_KEYS = {
    "movie": ContentKind.MOVIE,
    "tvshow": ContentKind.TV_SHOW,
}

# Source column order; `casts` is the canonical name of the cast column.
RECORD_COLUMNS: List[str] = [
    "show_id",
    "type",
    "title",
    "director",
    "casts",
    "country",
    "date_added",
    "release_year",
    "rating",
    "duration",
    "listed_in",
    "description",
]

MULTI_VALUE_COLUMNS = ("director", "casts", "country", "listed_in")

DATE_ADDED_FORMAT = "%B %d, %Y"
MULTI_VALUE_DELIMITER = ","

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([A-Za-z]*)\s*$")

# Derived columns kept next to the raw ones in ContentTable.data
DATE_ADDED_PARSED = "date_added_parsed"
DURATION_VALUE = "duration_value"
DURATION_UNIT = "duration_unit"


# ============================================================================
# FIELD PARSERS
# ============================================================================

def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def split_multi_value(value: Any, delimiter: str = MULTI_VALUE_DELIMITER) -> List[str]:
    """
    Split a delimited multi-valued field into trimmed, non-empty tokens.

    None / NaN / blank strings give an empty list.
    """
    if _is_missing(value):
        return []
    return [token.strip() for token in str(value).split(delimiter) if token.strip()]


def parse_date_added(value: Any) -> Optional[date]:
    """Parse 'Month DD, YYYY' (e.g. 'September 25, 2021'). Returns None when unparsable."""
    if _is_missing(value):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, DATE_ADDED_FORMAT).date()
    except ValueError:
        return None


def parse_date_added_series(series: pd.Series) -> pd.Series:
    """Vectorized parse_date_added; unparsable values become NaT."""
    text = series.where(series.notna(), "").astype(str).str.strip()
    return pd.to_datetime(text, format=DATE_ADDED_FORMAT, errors="coerce")


@dataclass(frozen=True)
class Duration:
    """Parsed duration: numeric prefix plus unit ('min', 'season', 'seasons')."""

    value: int
    unit: str

    @property
    def is_minutes(self) -> bool:
        return self.unit.startswith("min")

    @property
    def is_seasons(self) -> bool:
        return self.unit.startswith("season")

    def __str__(self):
        return f"{self.value} {self.unit}".strip()


def parse_duration(value: Any) -> Optional[Duration]:
    """Parse '90 min' / '3 Seasons'. Returns None when there is no numeric prefix."""
    if _is_missing(value):
        return None
    match = _DURATION_RE.match(str(value))
    if match is None:
        return None
    return Duration(value=int(match.group(1)), unit=match.group(2).lower())


def parse_duration_series(series: pd.Series) -> pd.DataFrame:
    """
    Vectorized parse_duration.

    Returns a frame with `duration_value` (nullable Int64) and `duration_unit`
    (lower-cased, NA when the value did not parse).
    """
    text = series.where(series.notna(), "").astype(str)
    extracted = text.str.extract(_DURATION_RE.pattern)
    out = pd.DataFrame(index=series.index)
    out[DURATION_VALUE] = pd.to_numeric(extracted[0], errors="coerce").astype("Int64")
    out[DURATION_UNIT] = extracted[1].str.lower().where(out[DURATION_VALUE].notna())
    return out


# ============================================================================
# RECORD
# ============================================================================

@dataclass(frozen=True)
class ContentRecord:
    """One catalog entry"""

    show_id: str
    type: ContentKind
    title: str
    release_year: int
    director: Optional[str] = None
    casts: Optional[str] = None
    country: Optional[str] = None
    date_added: Optional[str] = None
    rating: Optional[str] = None
    duration: Optional[str] = None
    listed_in: Optional[str] = None
    description: Optional[str] = None

    @property
    def directors(self) -> List[str]:
        return split_multi_value(self.director)

    @property
    def cast_members(self) -> List[str]:
        return split_multi_value(self.casts)

    @property
    def countries(self) -> List[str]:
        return split_multi_value(self.country)

    @property
    def genres(self) -> List[str]:
        return split_multi_value(self.listed_in)

    @property
    def added_on(self) -> Optional[date]:
        return parse_date_added(self.date_added)

    @property
    def parsed_duration(self) -> Optional[Duration]:
        return parse_duration(self.duration)

    def to_dict(self) -> Dict[str, Any]:
        row = asdict(self)
        row["type"] = self.type.value
        return {col: row[col] for col in RECORD_COLUMNS}

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "ContentRecord":
        kind = ContentKind.parse(row.get("type"))
        if kind is None:
            raise LoadError(f"unknown type {row.get('type')!r}", show_id=row.get("show_id"))
        kwargs = {}
        for f in fields(cls):
            value = row.get(f.name)
            kwargs[f.name] = None if _is_missing(value) else value
        kwargs["type"] = kind
        kwargs["release_year"] = int(kwargs["release_year"])
        return cls(**kwargs)


# ============================================================================
# TABLE
# ============================================================================

class ContentTable:
    """
    Immutable, in-memory catalog table.

    `data` holds the raw record columns plus derived columns
    (`date_added_parsed`, `duration_value`, `duration_unit`). Callers treat
    it as read-only; `to_frame()` hands out a copy.
    """

    def __init__(self, data: pd.DataFrame):
        self._data = data
        self._exploded: Dict[str, pd.Series] = {}

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "ContentTable":
        """Build a table from an already validated frame of record columns."""
        data = df.reindex(columns=RECORD_COLUMNS).reset_index(drop=True).copy()
        data["release_year"] = data["release_year"].astype(int)
        data[DATE_ADDED_PARSED] = parse_date_added_series(data["date_added"])
        durations = parse_duration_series(data["duration"])
        data[DURATION_VALUE] = durations[DURATION_VALUE]
        data[DURATION_UNIT] = durations[DURATION_UNIT]
        return cls(data)

    @classmethod
    def from_records(cls, records: Iterable[ContentRecord]) -> "ContentTable":
        rows = [r.to_dict() for r in records]
        ids = [r["show_id"] for r in rows]
        if len(ids) != len(set(ids)):
            raise LoadError("duplicate show_id in records")
        df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
        df = df.astype(object).where(df.notna(), None)
        return cls.from_frame(df)

    @property
    def data(self) -> pd.DataFrame:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self):
        return f"ContentTable({len(self)} records)"

    def to_frame(self) -> pd.DataFrame:
        """Copy of the record columns."""
        return self._data[RECORD_COLUMNS].copy()

    def records(self) -> Iterator[ContentRecord]:
        for row in self.to_frame().to_dict(orient="records"):
            yield ContentRecord.from_dict(row)

    def exploded(self, column: str) -> pd.Series:
        """
        Split a multi-valued column into one row per token.

        Returns a Series of tokens indexed by the record's position in `data`
        (an index value repeats once per token). Records whose field is absent
        contribute no rows. Memoized per column.
        """
        if column not in MULTI_VALUE_COLUMNS:
            raise ValueError(f"Not a multi-valued column: {column}")
        if column not in self._exploded:
            tokens = self._data[column].map(split_multi_value).explode()
            self._exploded[column] = tokens.dropna().astype(str)
        return self._exploded[column]

    def tokens_match(self, column: str, value: str) -> pd.Series:
        """Boolean mask over records: True where `value` is one of the column's tokens (case-insensitive)."""
        target = str(value).strip().casefold()
        tokens = self.exploded(column)
        hits = tokens[tokens.str.casefold() == target]
        return pd.Series(self._data.index.isin(hits.index.unique()), index=self._data.index)

    def kind_mask(self, kind: ContentKind) -> pd.Series:
        return self._data["type"] == kind.value

    def release_year_span(self) -> Optional[tuple]:
        if self._data.empty:
            return None
        years = self._data["release_year"].to_numpy()
        return int(np.min(years)), int(np.max(years))
