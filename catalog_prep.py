"""
Netflix Catalog Data Preparation Module

Loads the raw catalog export into an immutable ContentTable.

Features:
- CSV, JSON array and JSON-lines sources
- Config-driven column aliases (e.g. Kaggle's `cast` -> `casts`)
- Row-level validation: bad rows are skipped and recorded, never fatal
- Field-level parse warnings for date_added / duration
- Load summary logged at the end of every load

Usage:
    from catalog_prep import CatalogDataPrep, CatalogPrepConfig

    prep = CatalogDataPrep()
    table = prep.load('netflix_titles.csv')
    print(prep.summary)
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from catalog_model import (
    DATE_ADDED_PARSED,
    DURATION_VALUE,
    RECORD_COLUMNS,
    ContentKind,
    ContentTable,
    LoadError,
    ParseWarning,
    SourceUnavailable,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

REQUIRED_COLUMNS = ["show_id", "type", "title", "release_year"]

DEFAULT_COLUMN_ALIASES: Dict[str, str] = {
    "cast": "casts",
    "listed in": "listed_in",
    "genres": "listed_in",
    "id": "show_id",
}


def _blank_to_none(value):
    """Stripped text, or None for blank strings and missing scalars (None, NaN, pd.NA)"""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return None
    return value


@dataclass
class CatalogPrepConfig:
    """Configuration for catalog loading"""

    # 'csv', 'json', 'jsonl' or None to infer from the file extension
    source_format: Optional[str] = None
    encoding: str = 'utf-8'
    # Raw (normalized, lower-case) column name -> canonical column name
    column_aliases: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLUMN_ALIASES))
    # Raise the first LoadError instead of skipping the row
    strict: bool = False
    verbose: bool = True


@dataclass
class LoadSummary:
    """What happened during one load"""

    source: str = ''
    rows_read: int = 0
    rows_kept: int = 0
    errors: List[LoadError] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)

    @property
    def rows_skipped(self) -> int:
        return len(self.errors)

    def __str__(self):
        return (
            f"{self.source}: read {self.rows_read}, kept {self.rows_kept}, "
            f"skipped {self.rows_skipped}, parse warnings {len(self.warnings)}"
        )


# ============================================================================
# MAIN DATA PREP CLASS
# ============================================================================

class CatalogDataPrep:
    """
    Catalog loading pipeline

    Read -> normalize columns -> validate rows -> build ContentTable.
    """

    def __init__(self, config: Optional[CatalogPrepConfig] = None):
        """Initialize with configuration"""
        self.config = config or CatalogPrepConfig()
        self.logger = self._setup_logger()
        self.raw_data = None
        self.table = None
        self.summary = LoadSummary()
        self._source_rows: List[int] = []

    def _setup_logger(self):
        """Setup logging"""
        logger = logging.getLogger('CatalogDataPrep')
        logger.setLevel(logging.INFO if self.config.verbose else logging.WARNING)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter('%(message)s')
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    # ========================================================================
    # MAIN PIPELINE
    # ========================================================================

    def load(self, path: Union[str, Path]) -> ContentTable:
        """Main loading pipeline"""

        self.summary = LoadSummary(source=str(path))

        self.logger.info("=" * 80)
        self.logger.info("LOADING CATALOG")
        self.logger.info("=" * 80)

        self.logger.info("\nStep 1: Reading source...")
        self.raw_data = self._read_source(path)
        self.summary.rows_read = len(self.raw_data)
        self.logger.info(f"  Read {len(self.raw_data)} rows")

        self.logger.info("\nStep 2: Normalizing columns...")
        df = self._normalize_columns(self.raw_data)

        self.logger.info("\nStep 3: Validating rows...")
        df = self._validate_rows(df)
        self.logger.info(f"  Kept {len(df)} rows")

        self.logger.info("\nStep 4: Building table...")
        self.table = ContentTable.from_frame(df)
        self._collect_parse_warnings(self.table)
        self.summary.rows_kept = len(self.table)

        for err in self.summary.errors:
            self.logger.warning(f"  ⚠️ Skipped {err}")
        for warn in self.summary.warnings:
            self.logger.warning(f"  ⚠️ {warn}")

        self.logger.info("\n" + "=" * 80)
        self.logger.info(f"✓ LOAD COMPLETE ({self.summary})")
        self.logger.info("=" * 80)

        return self.table

    # ========================================================================
    # READING
    # ========================================================================

    def _infer_format(self, path: Path) -> str:
        if self.config.source_format:
            return self.config.source_format.lower()
        suffix = path.suffix.lower().lstrip('.')
        if suffix in ('csv', 'txt', 'tsv'):
            return 'csv'
        if suffix == 'json':
            return 'json'
        if suffix in ('jsonl', 'ndjson'):
            return 'jsonl'
        raise SourceUnavailable(f"Unsupported source format: {path.name}")

    def _read_source(self, path: Union[str, Path]) -> pd.DataFrame:
        """Read the raw file with every column as text"""
        path = Path(path)
        if not path.is_file():
            raise SourceUnavailable(f"Source file not found: {path}")

        fmt = self._infer_format(path)
        self.logger.info(f"  Loading {path.name}... (format={fmt})")

        try:
            if fmt == 'csv':
                sep = '\t' if path.suffix.lower() == '.tsv' else ','
                df = pd.read_csv(path, dtype=str, sep=sep, encoding=self.config.encoding)
            elif fmt == 'json':
                with open(path, 'r', encoding=self.config.encoding) as f:
                    payload = json.load(f)
                if isinstance(payload, dict):
                    payload = payload.get('records', payload.get('data'))
                if not isinstance(payload, list):
                    raise SourceUnavailable(f"Expected a list of records in {path}")
                df = pd.DataFrame(payload, dtype=object)
            elif fmt == 'jsonl':
                df = pd.read_json(path, lines=True, dtype=False, convert_dates=False, encoding=self.config.encoding)
            else:
                raise SourceUnavailable(f"Unsupported source format: {fmt}")
        except SourceUnavailable:
            raise
        except (OSError, UnicodeDecodeError, ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise SourceUnavailable(f"Could not read {path}: {e}") from e

        return df

    def _normalize_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Lower-case / strip headers, apply aliases, check required columns"""
        aliases = {str(k).strip().lower(): v for k, v in self.config.column_aliases.items()}
        renamed = {}
        for col in df.columns:
            clean = str(col).strip().lower()
            clean = aliases.get(clean, clean)
            renamed[col] = clean.replace(' ', '_')
        df = df.rename(columns=renamed)
        df = df.loc[:, ~df.columns.duplicated()]

        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise SourceUnavailable(f"Missing required columns: {missing}")

        absent = [c for c in RECORD_COLUMNS if c not in df.columns]
        if absent:
            self.logger.info(f"    Optional columns absent (treated as empty): {absent}")

        df = df.reindex(columns=RECORD_COLUMNS)

        # Strip text; blanks and NaN become None (object dtype keeps them as None)
        for col in RECORD_COLUMNS:
            df[col] = pd.Series([_blank_to_none(v) for v in df[col].tolist()], index=df.index, dtype=object)

        return df

    # ========================================================================
    # VALIDATION
    # ========================================================================

    def _reject(self, reason: str, row: int, show_id=None):
        err = LoadError(reason, row=row, show_id=show_id)
        if self.config.strict:
            raise err
        self.summary.errors.append(err)

    def _validate_rows(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop rows that cannot become records; coerce release_year and type"""

        keep = []
        self._source_rows = []
        kinds = []
        years = []
        seen_ids = set()

        # Row numbers are 1-based data rows (header excluded)
        for pos, row in enumerate(df.itertuples(index=False), start=1):
            show_id = _blank_to_none(row.show_id)
            if show_id is None:
                self._reject("missing show_id", pos)
                continue
            show_id = str(show_id)
            if show_id in seen_ids:
                self._reject("duplicate show_id", pos, show_id)
                continue

            kind = ContentKind.parse(row.type)
            if kind is None:
                self._reject(f"unknown type {row.type!r}", pos, show_id)
                continue

            year = self._coerce_year(row.release_year)
            if year is None:
                self._reject(f"unparsable release_year {row.release_year!r}", pos, show_id)
                continue

            seen_ids.add(show_id)
            keep.append(pos - 1)
            self._source_rows.append(pos)
            kinds.append(kind.value)
            years.append(year)

        out = df.iloc[keep].copy()
        out['show_id'] = out['show_id'].astype(str)
        out['type'] = kinds
        out['release_year'] = pd.Series(years, index=out.index, dtype='int64')
        out['title'] = out['title'].map(lambda v: '' if v is None else str(v))
        return out.reset_index(drop=True)

    @staticmethod
    def _coerce_year(value) -> Optional[int]:
        if value is None:
            return None
        try:
            as_float = float(str(value).strip())
        except ValueError:
            return None
        if pd.isna(as_float) or not as_float.is_integer():
            return None
        return int(as_float)

    def _collect_parse_warnings(self, table: ContentTable):
        """Record a ParseWarning for each present-but-unparsable date_added / duration"""
        data = table.data

        bad_dates = data['date_added'].notna() & data[DATE_ADDED_PARSED].isna()
        bad_durations = data['duration'].notna() & data[DURATION_VALUE].isna()

        for idx in data.index[bad_dates]:
            self.summary.warnings.append(
                ParseWarning('date_added', data.at[idx, 'date_added'], row=self._source_rows[idx], show_id=data.at[idx, 'show_id'])
            )
        for idx in data.index[bad_durations]:
            self.summary.warnings.append(
                ParseWarning('duration', data.at[idx, 'duration'], row=self._source_rows[idx], show_id=data.at[idx, 'show_id'])
            )

    # ========================================================================
    # UTILITIES
    # ========================================================================

    def export_csv(self, path: str):
        """Export the loaded records to CSV"""
        if self.table is None:
            raise ValueError("No data. Run load() first.")
        self.table.to_frame().to_csv(path, index=False)
        self.logger.info(f"Exported to {path}")


# ============================================================================
# CONVENIENCE FUNCTION
# ============================================================================

def load_catalog(path: Union[str, Path], **kwargs) -> ContentTable:
    """Quick catalog load"""
    config = CatalogPrepConfig(**kwargs)
    prep = CatalogDataPrep(config)
    return prep.load(path)
