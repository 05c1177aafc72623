"""Tests for the generic relationship matrix model."""

import math

import pytest

from linkview.errors import EmptyMatrixError
from linkview.matrix import MatrixEntry, RelationshipMatrixModel, rank_key
from linkview.semantics import (
    COINTEGRATION,
    CORRELATION,
    DTW,
    GRANGER,
    Ranking,
)


def _model(entries, dictionary, semantics):
    return RelationshipMatrixModel.from_entries(entries, dictionary, semantics)


@pytest.fixture
def correlation(dictionary):
    return _model([
        MatrixEntry('cpu', 'mem', 0.3),
        MatrixEntry('mem', 'io', -0.9),
        MatrixEntry('cpu', 'io', 0.5),
    ], dictionary, CORRELATION)


@pytest.fixture
def cointegration(dictionary):
    return _model([
        MatrixEntry('cpu', 'mem', 0.9, p_value=0.001),
        MatrixEntry('cpu', 'io', 0.2, p_value=0.5),
    ], dictionary, COINTEGRATION)


class TestLoad:

    def test_empty_raises(self, dictionary):
        with pytest.raises(EmptyMatrixError):
            _model([], dictionary, CORRELATION)

    def test_starts_in_canonical_order(self, correlation):
        assert correlation.display_order == ('cpu', 'mem', 'io')
        assert not correlation.is_sorted

    def test_unknown_fields_are_not_displayed(self, dictionary):
        model = _model([
            MatrixEntry('cpu', 'disk', 0.9),
            MatrixEntry('cpu', 'mem', 0.8),
        ], dictionary, CORRELATION)
        assert len(model.entries) == 2
        assert [(c.entry.field1, c.entry.field2) for c in model.cells()] == [('cpu', 'mem')]


class TestSort:

    def test_correlation_sort_by_strength(self, correlation):
        order = correlation.sort_by_significance()
        assert order == ('mem', 'io', 'cpu')
        assert correlation.axis_labels() == ['2', '3', '1']
        assert correlation.is_sorted

    def test_labels_follow_fields(self, correlation):
        """A field's label is its dictionary index in any display order."""
        correlation.sort_by_significance()
        for name, label in zip(correlation.display_order, correlation.axis_labels()):
            assert int(label) == correlation.dictionary.index_of(name)

    def test_entries_untouched(self, correlation):
        before = correlation.entries
        correlation.sort_by_significance()
        assert correlation.entries == before

    def test_sort_idempotent(self, correlation):
        first = correlation.sort_by_significance()
        assert correlation.sort_by_significance() == first

    def test_reset_restores_canonical(self, correlation):
        correlation.sort_by_significance()
        assert correlation.reset() == correlation.canonical_order
        assert not correlation.is_sorted

    def test_significance_sort(self, dictionary):
        model = _model([
            MatrixEntry('cpu', 'mem', 0.5, p_value=0.5),
            MatrixEntry('io', 'mem', 0.5, p_value=0.001),
            MatrixEntry('io', 'cpu', 0.5, p_value=0.01),
        ], dictionary, GRANGER)
        # io 2, mem 1, cpu 1; ties keep first-encounter order (cpu before mem)
        assert model.sort_by_significance() == ('io', 'cpu', 'mem')

    def test_distance_sort_ascending(self, dictionary):
        model = _model([
            MatrixEntry('cpu', 'mem', 12.5),
            MatrixEntry('io', 'cpu', 3.2),
        ], dictionary, DTW)
        assert model.sort_by_significance() == ('io', 'cpu', 'mem')


class TestSummary:

    def test_cointegration_summary(self, cointegration):
        summary = [(rc.field, rc.count) for rc in cointegration.field_counts_summary()]
        assert summary == [('cpu', 1), ('mem', 1), ('io', 0)]

    def test_summary_lists_every_field(self, dictionary):
        model = _model([MatrixEntry('io', 'mem', 4.0)], dictionary, DTW)
        summary = model.field_counts_summary()
        assert [(rc.index, rc.count) for rc in summary] == [(2, 1), (3, 1), (1, 0)]


class TestRanking:

    def test_neg_inf_first(self, dictionary):
        model = _model([
            MatrixEntry('cpu', 'mem', -2.0),
            MatrixEntry('cpu', 'io', -math.inf),
            MatrixEntry('mem', 'io', -30.0),
        ], dictionary, COINTEGRATION)
        assert [e.value for e in model.ranked_entries()] == [-math.inf, -30.0, -2.0]

    def test_nan_last(self):
        nan = MatrixEntry('a', 'b', math.nan)
        for ranking in Ranking:
            assert rank_key(nan, ranking) > rank_key(MatrixEntry('a', 'b', 1e9), ranking)

    def test_abs_desc(self, correlation):
        assert [e.value for e in correlation.ranked_entries()] == [-0.9, 0.5, 0.3]


class TestColorAndCells:

    def test_neg_inf_colored_at_extreme(self, dictionary):
        model = _model([
            MatrixEntry('cpu', 'mem', -math.inf),
            MatrixEntry('cpu', 'io', -10.0),
        ], dictionary, COINTEGRATION)
        assert model.color_of(-math.inf) == model.color_of(-50.0)
        assert model.color_of(-math.inf) == model.color_of(-80.0)

    def test_outline_follows_significance(self, cointegration):
        outlines = {(c.entry.field1, c.entry.field2): c.outline for c in cointegration.cells()}
        assert outlines == {('cpu', 'mem'): True, ('cpu', 'io'): False}

    def test_explicit_significance_wins(self, dictionary):
        model = _model([MatrixEntry('cpu', 'mem', 0.9, p_value=0.5, significant=True)],
                       dictionary, GRANGER)
        assert model.cells()[0].outline

    def test_cells_follow_display_order(self, correlation):
        correlation.sort_by_significance()
        position = {f: i for i, f in enumerate(correlation.display_order)}
        for cell in correlation.cells():
            assert cell.row == position[cell.entry.field1]
            assert cell.col == position[cell.entry.field2]

    def test_snapshot(self, correlation):
        snap = correlation.snapshot()
        assert snap.display_order == ('cpu', 'mem', 'io')
        assert snap.axis_labels == ('1', '2', '3')
        assert len(snap.cells) == 3
        assert snap.semantics is CORRELATION


class TestTooltip:

    def test_lines(self, dictionary):
        model = _model([MatrixEntry('cpu', 'io', 0.7512, lag=3.0)], dictionary, CORRELATION)
        tip = model.tooltip(model.entries[0])
        assert tip.get('Field1') == 'cpu (Idx: 1)'
        assert tip.get('Field2') == 'io (Idx: 3)'
        assert tip.get('Correlation') == '0.75'
        assert tip.get('Lag') == '3'

    def test_pvalue_shown_once(self, dictionary):
        model = _model([MatrixEntry('cpu', 'io', 1e-20, p_value=1e-20, lag=1.0)], dictionary, GRANGER)
        tip = model.tooltip(model.entries[0])
        labels = [label for label, _ in tip.lines]
        assert labels.count('P-Value') == 1
        assert tip.get('P-Value') == '1.00e-20'

    def test_inf_prints_literally(self, dictionary):
        model = _model([MatrixEntry('cpu', 'mem', -math.inf, p_value=0.0001)], dictionary, COINTEGRATION)
        tip = model.tooltip(model.entries[0])
        assert tip.get('Score') == '-inf'
        assert tip.get('P-Value') == '1.00e-04'
