"""
Relationship Matrix Model
=========================

One model for every pairwise analysis (cross-correlation, Granger,
DTW, co-integration). Behaviour differences live in the ValueSemantics
descriptor, not in separate classes.

The model owns:
    entries          as loaded, never mutated
    canonical order  dictionary order
    display order    canonical, or the significance-sorted order

Axis labels are dictionary indices, so sorting moves a field's row and
column but never changes the number printed next to it.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import EmptyMatrixError
from .fields import FieldDictionary
from .semantics import Ranking, ValueSemantics, format_number, ValueFormat
from .tooltip import TooltipContent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatrixEntry:
    field1: str
    field2: str
    value: float
    p_value: Optional[float] = None
    lag: Optional[float] = None
    significant: Optional[bool] = None  # None = derive from the semantics


@dataclass(frozen=True)
class MatrixCell:
    row: int  # position of field1 in the display order
    col: int  # position of field2 in the display order
    color: str
    outline: bool
    entry: MatrixEntry


@dataclass(frozen=True)
class RelationshipCount:
    index: int
    field: str
    count: int


@dataclass(frozen=True)
class MatrixSnapshot:
    """Everything a renderer needs, frozen at one moment."""
    semantics: ValueSemantics
    display_order: Tuple[str, ...]
    axis_labels: Tuple[str, ...]
    cells: Tuple[MatrixCell, ...]
    is_sorted: bool


def rank_key(entry: MatrixEntry, ranking: Ranking):
    """
    Sort key for ranked entry lists.

    -inf always ranks first and NaN always last, whatever the direction.
    """
    v = entry.value
    if math.isnan(v):
        return (2, 0.0)
    if v == -math.inf:
        return (0, 0.0)
    if ranking is Ranking.ABS_DESC:
        return (1, -abs(v))
    if ranking is Ranking.DESC:
        return (1, -v)
    return (1, v)


class RelationshipMatrixModel:
    """Pairwise values plus canonical and display field orderings."""

    def __init__(self, dictionary: FieldDictionary, semantics: ValueSemantics):
        self.dictionary = dictionary
        self.semantics = semantics
        self._entries: Tuple[MatrixEntry, ...] = ()
        self._display_order: Tuple[str, ...] = dictionary.names
        self._sorted = False
        self._color = None

    @classmethod
    def from_entries(
        cls,
        entries: Sequence[MatrixEntry],
        dictionary: FieldDictionary,
        semantics: ValueSemantics,
    ) -> 'RelationshipMatrixModel':
        model = cls(dictionary, semantics)
        model.load(entries)
        return model

    # ------------------------------------------------------------------
    # Loading and ordering
    # ------------------------------------------------------------------

    def load(self, entries: Sequence[MatrixEntry]) -> Tuple[str, ...]:
        """Load entries and reset the display to dictionary order."""
        entries = tuple(entries)
        if not entries:
            raise EmptyMatrixError(f"{self.semantics.title}: no matrix entries")

        unknown = {
            f for e in entries for f in (e.field1, e.field2)
            if f not in self.dictionary
        }
        if unknown:
            logger.info(
                "%s: %d field(s) not in the dictionary will not be displayed: %s",
                self.semantics.title, len(unknown), ', '.join(sorted(unknown)[:5]),
            )

        self._entries = entries
        self._color = self.semantics.color_scale([e.value for e in entries])
        return self.reset()

    @property
    def entries(self) -> Tuple[MatrixEntry, ...]:
        return self._entries

    @property
    def canonical_order(self) -> Tuple[str, ...]:
        return self.dictionary.names

    @property
    def display_order(self) -> Tuple[str, ...]:
        return self._display_order

    @property
    def is_sorted(self) -> bool:
        return self._sorted

    def is_significant(self, entry: MatrixEntry) -> bool:
        if entry.significant is not None:
            return entry.significant
        return self.semantics.is_significant(entry.p_value)

    def _first_encounter(self, entries: Sequence[MatrixEntry]) -> List[str]:
        seen: Dict[str, None] = {}
        for e in entries:
            for f in (e.field1, e.field2):
                if f not in seen and f in self.dictionary:
                    seen[f] = None
        return list(seen)

    def sort_by_significance(self) -> Tuple[str, ...]:
        """
        Reorder the displayed fields (entries are untouched).

        With a significance test: fields by descending count of significant
        relationships. Without: fields in order of their strongest entry
        (|value| descending for correlation, value ascending for distance).
        Ties keep first-encountered order in the entry list.
        """
        self._require_loaded()
        if self.semantics.has_significance:
            counts = Counter()
            for e in self._entries:
                if self.is_significant(e):
                    counts[e.field1] += 1
                    counts[e.field2] += 1
            order = sorted(self._first_encounter(self._entries), key=lambda f: -counts[f])
        else:
            order = self._first_encounter(self.ranked_entries())

        self._display_order = tuple(order)
        self._sorted = True
        logger.debug("%s sorted: %d fields displayed", self.semantics.title, len(order))
        return self._display_order

    def reset(self) -> Tuple[str, ...]:
        """Restore canonical dictionary order."""
        self._display_order = self.dictionary.names
        self._sorted = False
        return self._display_order

    # ------------------------------------------------------------------
    # Side lists
    # ------------------------------------------------------------------

    def ranked_entries(self) -> List[MatrixEntry]:
        """Working copy of the entries ranked by the descriptor."""
        ranking = self.semantics.ranking
        return sorted(self._entries, key=lambda e: rank_key(e, ranking))

    def field_counts_summary(self) -> List[RelationshipCount]:
        """
        (field, relationship count) for every dictionary field.

        Counts significant relationships when the semantics has a test,
        otherwise every entry referencing the field. Sorted by count
        descending, ties by dictionary index.
        """
        counts = Counter()
        for e in self._entries:
            if self.semantics.has_significance and not self.is_significant(e):
                continue
            counts[e.field1] += 1
            counts[e.field2] += 1
        summary = [
            RelationshipCount(index=i, field=name, count=counts[name])
            for i, name in self.dictionary.items()
        ]
        return sorted(summary, key=lambda rc: (-rc.count, rc.index))

    # ------------------------------------------------------------------
    # Render contract
    # ------------------------------------------------------------------

    def color_of(self, value: float) -> str:
        self._require_loaded()
        return self._color(value)

    def cells(self, display_order: Optional[Sequence[str]] = None) -> List[MatrixCell]:
        """Cell geometry for a display order (defaults to the current one)."""
        self._require_loaded()
        order = self._display_order if display_order is None else tuple(display_order)
        position = {f: i for i, f in enumerate(order)}
        cells = []
        for e in self._entries:
            row = position.get(e.field1)
            col = position.get(e.field2)
            if row is None or col is None:
                continue
            cells.append(MatrixCell(
                row=row,
                col=col,
                color=self._color(e.value),
                outline=self.is_significant(e),
                entry=e,
            ))
        return cells

    def axis_labels(self, display_order: Optional[Sequence[str]] = None) -> List[str]:
        """Tick labels: dictionary index of each displayed field."""
        order = self._display_order if display_order is None else display_order
        return [str(self.dictionary.index_of(f)) for f in order]

    def tooltip(self, entry: MatrixEntry) -> TooltipContent:
        idx1 = self.dictionary.get_index(entry.field1)
        idx2 = self.dictionary.get_index(entry.field2)
        lines = [
            ('Field1', f"{entry.field1} (Idx: {idx1 if idx1 is not None else '-'})"),
            ('Field2', f"{entry.field2} (Idx: {idx2 if idx2 is not None else '-'})"),
            (self.semantics.value_label, self.semantics.format_value(entry.value)),
        ]
        if entry.lag is not None:
            lag = int(entry.lag) if float(entry.lag).is_integer() else entry.lag
            lines.append(('Lag', str(lag)))
        if entry.p_value is not None and self.semantics.value_label != 'P-Value':
            lines.append(('P-Value', format_number(entry.p_value, ValueFormat.EXPONENTIAL)))
        return TooltipContent(lines=tuple(lines))

    def snapshot(self) -> MatrixSnapshot:
        self._require_loaded()
        return MatrixSnapshot(
            semantics=self.semantics,
            display_order=self._display_order,
            axis_labels=tuple(self.axis_labels()),
            cells=tuple(self.cells()),
            is_sorted=self._sorted,
        )

    def _require_loaded(self):
        if not self._entries:
            raise EmptyMatrixError(f"{self.semantics.title}: matrix not loaded")
