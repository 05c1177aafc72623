"""Shared fixtures: a three-field dictionary and a small diagnostics data directory."""

from datetime import datetime

import matplotlib
matplotlib.use('Agg')

import pytest

from linkview.config import LinkViewConfig
from linkview.fields import FieldDictionary


TARGET_CSV = """timestamp,cpu,mem
2024-01-01 10:00:00,1.0,2.0
2024-01-01 10:01:00,0.0,bad
2024-01-01 10:02:00,3.0,4.0
not-a-time,5.0,6.0
2024-01-01 10:10:00,2.0,1.0
"""

SYSTEM_CSV = """timestamp,io,mem
2024-01-01 10:00:00,7.0,1.0
2024-01-01 10:05:00,8.0,1.5
"""

ZERO_CSV = """Timestamp,Field,Value
2024-01-01 10:01:00,cpu,0.0
2024-01-01 10:03:00,io,0.0
"""

SHARP_CSV = """Timestamp,Field,Value
2024-01-01 10:10:00,mem,4.0
2024-01-01 10:02:00,cpu,abc
"""

CORRELATION_CSV = """Field1,Field2,Cross_Correlation,Lag
cpu,mem,0.9,1
cpu,io,-0.7,0
mem,io,0.66,2
"""

GRANGER_CSV = """Field1,Field2,Lag,P-Value
cpu,mem,1,0.001
mem,cpu,2,0.5
io,cpu,1,1e-20
"""

DTW_CSV = """Field1,Field2,DTW_Distance
cpu,mem,12.5
cpu,io,3.2
"""

COINTEGRATION_CSV = """Field1,Field2,Score,P-Value
cpu,mem,-inf,0.0001
cpu,io,-2.5,0.3
mem,io,-12.0,0.005
"""

FILES = {
    'target_fields_new.csv': TARGET_CSV,
    'system_fields_new.csv': SYSTEM_CSV,
    'zero_value_periods.csv': ZERO_CSV,
    'sharp_change_periods.csv': SHARP_CSV,
    'cross_correlation_analysis_new.csv': CORRELATION_CSV,
    'grangerTest_new.csv': GRANGER_CSV,
    'similar_time_series_pairs_new.csv': DTW_CSV,
    'cointegration_results_new.csv': COINTEGRATION_CSV,
}


@pytest.fixture
def dictionary():
    return FieldDictionary.build(['cpu', 'mem', 'io'])


@pytest.fixture
def t0():
    return datetime(2024, 1, 1, 10, 0, 0)


@pytest.fixture
def data_dir(tmp_path):
    for name, text in FILES.items():
        (tmp_path / name).write_text(text)
    return tmp_path


@pytest.fixture
def config(data_dir):
    return LinkViewConfig(data_dir=data_dir, timestamp_format='%Y-%m-%d %H:%M:%S')
