"""
LinkView Dataset Loader
=======================

Read the dashboard CSV files into validated records.
Zero statistics: correlations, p-values and distances arrive precomputed.

File roles (names configurable, see config.DEFAULT_FILES):

    target / system         wide series: timestamp + one column per field
    zero_value / sharp_change  anomaly events: Timestamp, Field, Value
    correlation             Field1, Field2, Cross_Correlation, Lag
    granger                 Field1, Field2, Lag, P-Value
    dtw                     Field1, Field2, DTW_Distance
    cointegration           Field1, Field2, Score, P-Value

Rules:
- missing or empty file      -> warning, no records for that role
- row with extra fields      -> extras truncated (warning)
- missing required column    -> MalformedRecordError
- unparseable timestamp      -> row dropped
- unparseable value          -> that single cell dropped
- literal '-inf' / 'inf'     -> kept as infinities
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import polars as pl

from .anomaly import AnomalyCategory, AnomalyEvent, TimeSeriesPoint
from .config import LinkViewConfig
from .errors import MalformedRecordError
from .matrix import MatrixEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatrixColumns:
    value: str
    p_value: Optional[str] = None
    lag: Optional[str] = None


MATRIX_COLUMNS: Dict[str, MatrixColumns] = {
    'correlation': MatrixColumns(value='Cross_Correlation', lag='Lag'),
    'granger': MatrixColumns(value='P-Value', p_value='P-Value', lag='Lag'),
    'dtw': MatrixColumns(value='DTW_Distance'),
    'cointegration': MatrixColumns(value='Score', p_value='P-Value'),
}

ANOMALY_ROLES = {
    'zero_value': AnomalyCategory.ZERO_VALUE,
    'sharp_change': AnomalyCategory.SHARP_CHANGE,
}


@dataclass
class LoadedDataset:
    """Everything the workspace needs, fully in memory."""
    field_names: List[str]
    series: Dict[str, List[TimeSeriesPoint]] = field(default_factory=dict)
    anomalies: List[AnomalyEvent] = field(default_factory=list)
    matrices: Dict[str, List[MatrixEntry]] = field(default_factory=dict)

    def timestamps(self):
        """All series and anomaly timestamps (timeline extent)."""
        stamps = [p.timestamp for points in self.series.values() for p in points]
        stamps.extend(e.timestamp for e in self.anomalies)
        return stamps


def parse_float(column: str) -> pl.Expr:
    """String column -> Float64, keeping '-inf'/'inf' literals; junk becomes null."""
    s = pl.col(column).str.strip_chars()
    lowered = s.str.to_lowercase()
    return (
        pl.when(lowered == '-inf').then(pl.lit(float('-inf')))
        .when(lowered.is_in(['inf', '+inf'])).then(pl.lit(float('inf')))
        .otherwise(s.cast(pl.Float64, strict=False))
    )


class DatasetLoader:
    """Load every configured source file from config.data_dir."""

    def __init__(self, config: LinkViewConfig):
        self.config = config
        if config.data_dir is None:
            raise ValueError("DatasetLoader needs config.data_dir")
        self.data_dir = Path(config.data_dir).expanduser()
        self._frames: Dict[str, pl.DataFrame] = {}

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    def _read(self, role: str) -> pl.DataFrame:
        """
        Read a role's CSV as all-string columns, once per loader.

        A missing or empty file gives an empty frame. Rows with more
        fields than the header are cut back to the header's width.
        """
        if role in self._frames:
            return self._frames[role]
        path = self.config.path_for(role)
        if not path.exists():
            logger.warning("%s file not found: %s", role, path)
            df = pl.DataFrame()
        else:
            try:
                df = pl.read_csv(path, infer_schema_length=0)
            except pl.exceptions.NoDataError:
                logger.warning("%s file is empty: %s", role, path)
                df = pl.DataFrame()
            except pl.exceptions.ComputeError as e:
                logger.warning("%s: extra fields truncated in %s (%s)", role, path, e)
                try:
                    df = pl.read_csv(path, infer_schema_length=0, truncate_ragged_lines=True)
                except pl.exceptions.ComputeError as e2:
                    raise MalformedRecordError(f"{role}: cannot parse {path}: {e2}") from e2
        self._frames[role] = df
        return df

    @staticmethod
    def _require(df: pl.DataFrame, role: str, columns: List[str]):
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise MalformedRecordError(f"{role}: missing column(s) {', '.join(missing)}")

    def _parse_timestamp(self, column: str) -> pl.Expr:
        return pl.col(column).str.strip_chars().str.to_datetime(
            format=self.config.timestamp_format, strict=False,
        )

    def _drop_bad_timestamps(self, df: pl.DataFrame, column: str, role: str) -> pl.DataFrame:
        df = df.with_columns(self._parse_timestamp(column).alias(column))
        bad = df[column].null_count()
        if bad:
            logger.warning("%s: dropped %d row(s) with unparseable timestamps", role, bad)
        return df.filter(pl.col(column).is_not_null())

    # ------------------------------------------------------------------
    # Wide series
    # ------------------------------------------------------------------

    def series_fields(self, role: str) -> List[str]:
        """Field columns of a wide file, in header order."""
        df = self._read(role)
        return [c for c in df.columns if c != self.config.timestamp_column]

    def load_series(self, role: str) -> List[TimeSeriesPoint]:
        """Flatten a wide file into long (timestamp, field, value) points."""
        df = self._read(role)
        if df.is_empty() and not df.columns:
            return []
        ts = self.config.timestamp_column
        self._require(df, role, [ts])
        fields = [c for c in df.columns if c != ts]
        if not fields:
            return []

        df = self._drop_bad_timestamps(df, ts, role)
        long = (
            df.unpivot(index=ts, on=fields, variable_name='field', value_name='raw')
            .with_columns(parse_float('raw').alias('value'))
        )
        valid = long.filter(pl.col('value').is_not_null() & pl.col('value').is_finite())
        dropped = len(long) - len(valid)
        if dropped:
            logger.info("%s: dropped %d malformed value cell(s)", role, dropped)

        return [
            TimeSeriesPoint(timestamp=row[ts], field=row['field'], value=row['value'])
            for row in valid.select([ts, 'field', 'value']).iter_rows(named=True)
        ]

    # ------------------------------------------------------------------
    # Anomalies
    # ------------------------------------------------------------------

    def load_anomalies(self, role: str) -> List[AnomalyEvent]:
        category = ANOMALY_ROLES[role]
        df = self._read(role)
        if df.is_empty() and not df.columns:
            return []
        self._require(df, role, ['Timestamp', 'Field', 'Value'])

        df = self._drop_bad_timestamps(df, 'Timestamp', role)
        df = df.with_columns(
            pl.col('Field').str.strip_chars(),
            parse_float('Value').alias('Value'),
        )
        valid = df.filter(
            pl.col('Field').is_not_null() & (pl.col('Field') != '') & pl.col('Value').is_not_null()
        )
        if len(valid) < len(df):
            logger.info("%s: dropped %d malformed event row(s)", role, len(df) - len(valid))

        return [
            AnomalyEvent(
                timestamp=row['Timestamp'],
                field=row['Field'],
                value=row['Value'],
                category=category,
            )
            for row in valid.iter_rows(named=True)
        ]

    # ------------------------------------------------------------------
    # Matrices
    # ------------------------------------------------------------------

    def load_matrix(self, role: str) -> List[MatrixEntry]:
        cols = MATRIX_COLUMNS[role]
        df = self._read(role)
        if df.is_empty() and not df.columns:
            return []
        self._require(df, role, ['Field1', 'Field2', cols.value])

        exprs = [
            pl.col('Field1').str.strip_chars(),
            pl.col('Field2').str.strip_chars(),
            parse_float(cols.value).alias('_value'),
        ]
        if cols.p_value and cols.p_value in df.columns:
            exprs.append(parse_float(cols.p_value).alias('_p'))
        else:
            exprs.append(pl.lit(None, dtype=pl.Float64).alias('_p'))
        if cols.lag and cols.lag in df.columns:
            exprs.append(parse_float(cols.lag).alias('_lag'))
        else:
            exprs.append(pl.lit(None, dtype=pl.Float64).alias('_lag'))

        parsed = df.select(exprs)
        valid = parsed.filter(
            pl.col('Field1').is_not_null() & (pl.col('Field1') != '')
            & pl.col('Field2').is_not_null() & (pl.col('Field2') != '')
            & pl.col('_value').is_not_null()
        )
        if len(valid) < len(parsed):
            logger.info("%s: dropped %d malformed entry row(s)", role, len(parsed) - len(valid))

        return [
            MatrixEntry(
                field1=row['Field1'],
                field2=row['Field2'],
                value=row['_value'],
                p_value=row['_p'],
                lag=row['_lag'],
            )
            for row in valid.iter_rows(named=True)
        ]

    # ------------------------------------------------------------------
    # Everything
    # ------------------------------------------------------------------

    def field_names(self) -> List[str]:
        """Union of the dictionary sources' columns, in discovery order."""
        names: Dict[str, None] = {}
        for role in self.config.dictionary_sources:
            for name in self.series_fields(role):
                names.setdefault(name, None)
        return list(names)

    def load(self) -> LoadedDataset:
        dataset = LoadedDataset(field_names=self.field_names())
        for role in ('target', 'system'):
            dataset.series[role] = self.load_series(role)
        for role in ANOMALY_ROLES:
            dataset.anomalies.extend(self.load_anomalies(role))
        for role in MATRIX_COLUMNS:
            dataset.matrices[role] = self.load_matrix(role)

        logger.info(
            "Loaded %d fields, %d series points, %d anomaly events from %s",
            len(dataset.field_names),
            sum(len(p) for p in dataset.series.values()),
            len(dataset.anomalies),
            self.data_dir,
        )
        return dataset
