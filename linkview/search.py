"""
Search-by-index navigation for the field dictionary panel.

Bad input is a no-op: the user typed something that is not a field
number, and nothing should interrupt rendering because of it.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .errors import IndexOutOfRangeError
from .fields import FieldDictionary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchHit:
    index: int
    name: str

    @property
    def element_id(self) -> str:
        return f"field-{self.index}"


def resolve_index(dictionary: FieldDictionary, raw: Union[str, int, None]) -> Optional[SearchHit]:
    """Resolve user input to a dictionary entry, or None when it names no field."""
    if raw is None:
        return None
    try:
        index = int(str(raw).strip())
    except ValueError:
        logger.debug("Search ignored non-numeric input %r", raw)
        return None
    try:
        name = dictionary.name_of(index)
    except IndexOutOfRangeError as e:
        logger.debug("Search ignored: %s", e)
        return None
    return SearchHit(index=index, name=name)
