"""
Type mapping domain logic for the entity generator.

Translates MySQL ``COLUMN_TYPE`` strings (``varchar(64)``, ``int(10) unsigned``,
``enum('a','b')``...) into ``TypeMapping`` values used by the emitter.
"""

import logging
import re
from functools import lru_cache
from typing import List, Optional, Tuple

from ..constants import (
    ENUM_STORAGE_KIND,
    FALLBACK_COLUMN_TYPE,
    FALLBACK_STORAGE_KIND,
    LENGTH_TYPES,
    MYSQL_TYPE_MAP,
    PRECISION_TYPES,
    LogicalTypes,
)
from .models import TypeMapping

logger = logging.getLogger(__name__)

_TYPE_RE = re.compile(r"^\s*([A-Za-z]+)\s*(?:\((.*)\))?\s*(.*)$", re.DOTALL)
_ENUM_LITERAL_RE = re.compile(r"'((?:[^']|'')*)'")

UNTYPED = TypeMapping(
    logical_type=LogicalTypes.UNTYPED,
    storage_kind=FALLBACK_STORAGE_KIND,
    column_type=FALLBACK_COLUMN_TYPE,
)


def parse_enum_values(arguments: str) -> List[str]:
    """
    Extract the quoted literals of an ``enum(...)`` declaration, in order.

    Doubled quotes inside a literal are unescaped so the raw stored value is
    returned.

    Example:
        >>> parse_enum_values("'a','it''s','2'")
        ['a', "it's", '2']
    """
    return [match.replace("''", "'") for match in _ENUM_LITERAL_RE.findall(arguments)]


def _parse_numbers(arguments: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
    if not arguments:
        return None, None
    parts = [part.strip() for part in arguments.split(",")]
    numbers = []
    for part in parts[:2]:
        if not part.isdigit():
            return None, None
        numbers.append(int(part))
    first = numbers[0] if numbers else None
    second = numbers[1] if len(numbers) > 1 else None
    return first, second


@lru_cache(maxsize=None)
def map_column_type(physical_type: str) -> TypeMapping:
    """
    Map a physical column type to its logical counterpart.

    The mapping is total: anything not recognised maps to the untyped
    fallback instead of raising.

    Args:
        physical_type: Raw ``COLUMN_TYPE`` as reported by the catalog

    Returns:
        TypeMapping describing the column
    """
    if not isinstance(physical_type, str):
        return UNTYPED

    match = _TYPE_RE.match(physical_type)
    if not match:
        logger.debug(f"Unparsable column type '{physical_type}', falling back to untyped")
        return UNTYPED

    base = match.group(1).lower()
    arguments = match.group(2)

    if base == ENUM_STORAGE_KIND:
        values = parse_enum_values(arguments or "")
        if not values:
            return UNTYPED
        return TypeMapping(
            logical_type=LogicalTypes.STR,
            storage_kind=ENUM_STORAGE_KIND,
            column_type="Enum",
            enum_values=tuple(values),
        )

    spec = MYSQL_TYPE_MAP.get(base)
    if spec is None:
        logger.debug(f"Unknown column type '{physical_type}', falling back to untyped")
        return UNTYPED

    first, second = _parse_numbers(arguments)
    length = precision = scale = None
    if base in LENGTH_TYPES:
        length = first if first is not None else spec.length
    elif base in PRECISION_TYPES:
        precision, scale = first, second

    return TypeMapping(
        logical_type=spec.logical_type,
        storage_kind=base,
        column_type=spec.column_type,
        length=length,
        precision=precision,
        scale=scale,
        transform=spec.transform,
    )
