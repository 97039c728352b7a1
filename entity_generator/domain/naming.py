"""
Naming convention utilities for the entity generator.

This module derives every identifier that ends up in generated code: class
names from table names, attribute names from column names, relation property
names, enum class and member names. All functions are pure and
deterministic; ``MemberNameRegistry`` guards uniqueness inside one entity.
"""

import re
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..constants import FieldNames
from .models import EnumMember

_NUMBER_RE = re.compile(r"^[+-]?\d+(\.\d+)?$")
_WORD_SPLIT_RE = re.compile(r"[\W_]+")


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase or PascalCase to snake_case.

    Example:
        >>> to_snake_case("UserAccount")
        'user_account'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def to_pascal_case(name: str) -> str:
    """
    Convert a snake_case or mixed-case name to PascalCase.

    The first character and every character following a separator are
    upper-cased; separators are removed and the remaining characters are
    kept as they are.

    Example:
        >>> to_pascal_case("user_account")
        'UserAccount'
        >>> to_pascal_case("userAccount")
        'UserAccount'
        >>> to_pascal_case("in-progress")
        'InProgress'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    words = [word for word in _WORD_SPLIT_RE.split(name) if word]
    return "".join(word[0].upper() + word[1:] for word in words)


def is_number(value: str) -> bool:
    return bool(_NUMBER_RE.match(value.strip()))


def pluralize(name: str) -> str:
    """Append the plural suffix unless ``name`` already ends with it."""
    if name.lower().endswith(FieldNames.PLURAL_SUFFIX):
        return name
    return f"{name}{FieldNames.PLURAL_SUFFIX}"


def clean_field_name(name: str) -> str:
    """
    Turn a catalog name into a safe attribute name for a declarative class.

    Valid names are kept untouched. Otherwise invalid characters are replaced
    by underscores, a leading digit gets an underscore prefix, and Python
    keywords or names owned by SQLAlchemy's declarative machinery get an
    underscore suffix.

    Example:
        >>> clean_field_name("class")
        'class_'
        >>> clean_field_name("123invalid")
        '_123invalid'
        >>> clean_field_name("first name")
        'first_name'
    """
    name = re.sub(r"\W", "_", name)
    if name and not (name[0].isalpha() or name[0] == "_"):
        name = "_" + name
    if not name:
        return "_field"

    if name in FieldNames.PYTHON_KEYWORDS or name in FieldNames.DECLARATIVE_RESERVED:
        name += "_"
    return name


def _ensure_identifier(name: str, prefix: str) -> str:
    if not name:
        return prefix
    if name[0].isdigit():
        name = prefix + name
    if name in FieldNames.PYTHON_KEYWORDS:
        name += "_"
    return name


def generate_class_name(table_name: str) -> str:
    """Entity class name for a table (``order_item`` -> ``OrderItem``)."""
    name = _ensure_identifier(to_pascal_case(table_name), "Table")
    if name in FieldNames.GENERATED_MODULE_NAMES or name in FieldNames.ENTRY_MODULE_NAMES:
        name += "Entity"
    return name


def generate_module_name(table_name: str) -> str:
    """Module name of the generated file for a table."""
    name = clean_field_name(table_name)
    if name.startswith("__"):
        # Dunder modules such as __init__ belong to the package itself
        name = name.lstrip("_") or "_table"
    return name


def generate_relationship_name(column_name: str) -> str:
    """
    Strip the conventional foreign-key suffix from a column name.

    Example:
        >>> generate_relationship_name("author_id")
        'author'
    """
    suffix = FieldNames.FOREIGN_KEY_COLUMN_SUFFIX
    if column_name.lower().endswith(suffix) and len(column_name) > len(suffix):
        return column_name[:-len(suffix)]
    return column_name


def forward_relation_name(referenced_table: str, column_name: Optional[str] = None) -> str:
    """
    Property name of a forward relation.

    Built from the referenced table's class name with a prefix so it cannot
    shadow a plain column. ``column_name`` disambiguates several foreign keys
    pointing at the same table.
    """
    base = FieldNames.FORWARD_RELATION_PREFIX + to_snake_case(generate_class_name(referenced_table))
    if column_name:
        base = f"{base}_{to_snake_case(generate_relationship_name(column_name))}"
    return clean_field_name(base)


def inverse_relation_name(referencing_table: str) -> str:
    """Property name of an inverse relation: the referencing table, pluralized."""
    return clean_field_name(pluralize(referencing_table))


def inverse_alternate_name(name: str, column_name: str) -> str:
    return clean_field_name(f"{name}_by_{generate_relationship_name(column_name)}")


def many_to_many_name(other_table: str) -> str:
    """Property name pointing at the other participant of a many-to-many."""
    return clean_field_name(pluralize(other_table))


def enum_member_name(value: str) -> str:
    """
    Derive an enum member name from a raw enum literal.

    Numeric literals get a prefix so they stay valid identifiers; all other
    literals are converted to PascalCase.

    Example:
        >>> enum_member_name("in_stock")
        'InStock'
        >>> enum_member_name("2")
        'Val2'
    """
    prefix = FieldNames.NUMERIC_MEMBER_PREFIX
    if is_number(value):
        return prefix + re.sub(r"\W", "_", value.strip())
    name = to_pascal_case(value)
    if not name:
        return FieldNames.EMPTY_MEMBER_NAME
    return _ensure_identifier(name, prefix)


def generate_enum_members(values: Sequence[str]) -> List[EnumMember]:
    """Enum members in declaration order with unique names."""
    seen: Dict[str, int] = {}
    members = []
    for value in values:
        base = enum_member_name(value)
        name = base
        while name in seen:
            seen[base] += 1
            name = f"{base}_{seen[base]}"
        seen[name] = 1
        members.append(EnumMember(name=name, value=value))
    return members


def generate_enum_name(column_name: str, class_name: str, taken: Iterable[str]) -> str:
    """
    Enum class name for an enum column.

    Falls back to prefixing the entity class name when the plain name is
    already used in the module.
    """
    taken = set(taken)
    name = _ensure_identifier(to_pascal_case(column_name), "Enum")
    if name in taken:
        name = f"{class_name}{name}"
    counter = 2
    candidate = name
    while candidate in taken:
        candidate = f"{name}{counter}"
        counter += 1
    return candidate


class MemberNameRegistry:
    """
    Tracks attribute names already used by one entity.

    Columns are registered first, then forward, inverse and many-to-many
    relations; the first registration of a name wins.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._names: Set[str] = set()
        for name in names:
            self.register(name)

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def register(self, name: str) -> bool:
        if name in self._names:
            return False
        self._names.add(name)
        return True

    def claim(self, candidates: Sequence[Optional[str]]) -> Optional[str]:
        """Register the first free candidate and return it, or ``None``."""
        for candidate in candidates:
            if candidate and self.register(candidate):
                return candidate
        return None
