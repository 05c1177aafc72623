"""
LinkView Configuration
======================

All display settings, file names and thresholds in one place.

Defaults reproduce the original dashboard layout. A YAML file can override
any field; environment variables win over both.

Usage:
    from linkview.config import load_config
    config = load_config('linkview.yaml')
    config.significance_threshold  # 0.01

YAML format (every key optional):
    data_dir: ~/data/plant_7
    significance_threshold: 0.005
    files:
      granger: granger_v2.csv
    matrix_size: [900, 900]
"""

import logging
import math
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)


DEFAULT_FILES: Dict[str, str] = {
    'target': 'target_fields_new.csv',
    'system': 'system_fields_new.csv',
    'zero_value': 'zero_value_periods.csv',
    'sharp_change': 'sharp_change_periods.csv',
    'correlation': 'cross_correlation_analysis_new.csv',
    'granger': 'grangerTest_new.csv',
    'dtw': 'similar_time_series_pairs_new.csv',
    'cointegration': 'cointegration_results_new.csv',
}

# Smallest p-value the Granger source files are known to report.
PVALUE_FLOOR = 1e-314


@dataclass
class Margin:
    top: int
    right: int
    bottom: int
    left: int


@dataclass
class LinkViewConfig:
    """Display settings and source locations."""
    data_dir: Optional[Path] = None
    files: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FILES))

    # Wide-format sources whose columns make up the field dictionary
    dictionary_sources: List[str] = field(default_factory=lambda: ['target', 'system'])
    timestamp_column: str = 'timestamp'
    timestamp_format: Optional[str] = None

    # Layout (pixels)
    timeline_size: Tuple[int, int] = (800, 100)
    timeline_margin: Margin = field(default_factory=lambda: Margin(30, 20, 50, 40))
    chart_size: Tuple[int, int] = (600, 300)
    chart_margin: Margin = field(default_factory=lambda: Margin(70, 30, 30, 50))
    bar_chart_width: int = 600
    bar_row_height: int = 20
    bar_margin: Margin = field(default_factory=lambda: Margin(30, 20, 50, 40))
    matrix_size: Tuple[int, int] = (800, 800)
    matrix_margin: Margin = field(default_factory=lambda: Margin(50, 20, 65, 50))
    band_padding: float = 0.1
    tooltip_offset: int = 5

    # Thresholds and color domains
    significance_threshold: float = 0.01
    correlation_domain: Tuple[float, float] = (0.65, 1.0)
    cointegration_domain: Tuple[float, float] = (-50.0, 0.0)
    pvalue_log_domain: Tuple[float, float] = (math.log10(PVALUE_FLOOR), 0.0)

    # Markers
    zero_value_color: str = 'blue'
    sharp_change_color: str = 'red'
    series_color: str = 'grey'
    highlight_color: str = 'orange'

    log_level: str = 'INFO'

    def path_for(self, role: str) -> Path:
        """Absolute path of the source file for a role ('target', 'granger', ...)."""
        if self.data_dir is None:
            raise ValueError("data_dir is not configured")
        return Path(self.data_dir).expanduser() / self.files[role]


_MARGIN_FIELDS = {'timeline_margin', 'chart_margin', 'bar_margin', 'matrix_margin'}
_PAIR_FIELDS = {
    'timeline_size', 'chart_size', 'matrix_size',
    'correlation_domain', 'cointegration_domain', 'pvalue_log_domain',
}


def _coerce(name: str, value):
    """Turn a YAML value into the type the dataclass field expects."""
    if name in _MARGIN_FIELDS:
        if isinstance(value, dict):
            return Margin(**value)
        return Margin(*value)
    if name in _PAIR_FIELDS:
        return tuple(value)
    if name == 'data_dir':
        return Path(value).expanduser()
    if name == 'files':
        merged = dict(DEFAULT_FILES)
        merged.update(value)
        return merged
    return value


def apply_overrides(config: LinkViewConfig, overrides: dict) -> LinkViewConfig:
    """Return a copy of config with known keys replaced. Unknown keys are warned and skipped."""
    known = {f.name for f in fields(LinkViewConfig)}
    changes = {}
    for key, value in (overrides or {}).items():
        if key not in known:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        changes[key] = _coerce(key, value)
    return replace(config, **changes)


def load_config(path: Optional[Path] = None, data_dir: Optional[Path] = None) -> LinkViewConfig:
    """
    Build the effective configuration.

    Precedence (lowest to highest): dataclass defaults, YAML file,
    environment (LINKVIEW_DATA_DIR, LINKVIEW_LOG_LEVEL), explicit data_dir.
    """
    config = LinkViewConfig()

    if path is not None:
        path = Path(path).expanduser()
        with open(path) as f:
            overrides = yaml.safe_load(f) or {}
        if not isinstance(overrides, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        config = apply_overrides(config, overrides)
        logger.debug("Loaded config overrides from %s", path)

    env_dir = os.environ.get('LINKVIEW_DATA_DIR')
    if env_dir:
        config = replace(config, data_dir=Path(env_dir).expanduser())
    env_level = os.environ.get('LINKVIEW_LOG_LEVEL')
    if env_level:
        config = replace(config, log_level=env_level.upper())

    if data_dir is not None:
        config = replace(config, data_dir=Path(data_dir).expanduser())

    return config
