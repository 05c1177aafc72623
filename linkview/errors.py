"""
LinkView error taxonomy.

Structural errors (empty dictionary, empty matrix) are raised at
construction and surface to the caller. Lookup errors (unknown field,
index out of range) are raised by the dictionary and recovered as no-ops
by the search path.
"""


class LinkViewError(Exception):
    """Base class for all linkview errors."""


class EmptyDictionaryError(LinkViewError):
    """Field dictionary built from an empty name set."""


class UnknownFieldError(LinkViewError, KeyError):
    """Field name not present in the dictionary."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"Unknown field: {self.name!r}"


class IndexOutOfRangeError(LinkViewError, IndexError):
    """Field index outside [1, len(dictionary)]."""

    def __init__(self, index: int, size: int):
        super().__init__(index, size)
        self.index = index
        self.size = size

    def __str__(self):
        return f"Field index {self.index} outside [1, {self.size}]"


class EmptyMatrixError(LinkViewError):
    """Relationship matrix loaded without entries."""


class MalformedRecordError(LinkViewError, ValueError):
    """Source file is structurally unusable (e.g. a required column is missing)."""
