"""
Field dictionary: stable name <-> 1-based index registry.

Indices follow first-encounter order and never change for the lifetime
of a loaded dataset. Every view labels fields by these indices, so a
field keeps its number however a matrix is reordered.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import EmptyDictionaryError, IndexOutOfRangeError, UnknownFieldError


class FieldDictionary:
    """Immutable bidirectional field registry."""

    __slots__ = ('_names', '_index')

    def __init__(self, names: Tuple[str, ...]):
        self._names = names
        self._index: Dict[str, int] = {name: i + 1 for i, name in enumerate(names)}

    @classmethod
    def build(cls, field_names: Iterable[str]) -> 'FieldDictionary':
        """
        Build a dictionary from field names in discovery order.

        Duplicates keep their first position. Raises EmptyDictionaryError
        when no names are given.
        """
        seen: Dict[str, None] = {}
        for name in field_names:
            if name not in seen:
                seen[name] = None
        if not seen:
            raise EmptyDictionaryError("Cannot build a field dictionary from no fields")
        return cls(tuple(seen))

    def index_of(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError:
            raise UnknownFieldError(name) from None

    def name_of(self, index: int) -> str:
        if not isinstance(index, int) or isinstance(index, bool) or not 1 <= index <= len(self._names):
            raise IndexOutOfRangeError(index, len(self._names))
        return self._names[index - 1]

    def get_index(self, name: str) -> Optional[int]:
        """Index of name, or None when the field is not in the dictionary."""
        return self._index.get(name)

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    def items(self) -> List[Tuple[int, str]]:
        """(index, name) pairs in dictionary order."""
        return [(i + 1, name) for i, name in enumerate(self._names)]

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __contains__(self, name) -> bool:
        return name in self._index

    def __eq__(self, other) -> bool:
        if not isinstance(other, FieldDictionary):
            return NotImplemented
        return self._names == other._names

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"FieldDictionary({len(self._names)} fields)"
