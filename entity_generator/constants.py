"""
Centralized constants for the entity generator.

This module keeps the type tables, default values and reserved names in one
place so the mapping, naming and emission layers agree on them.
"""

from typing import Dict, FrozenSet, NamedTuple, Optional, Set


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    OUTPUT_DIR = "src/entities"
    ENV_FILE = ".env"
    ENV_DATABASE_KEY = "DATABASE_URL"
    FORMAT_CODE = True

    # Generated entry module; makes the output directory an importable package
    ENTRY_MODULE = "__init__"


class SupportedDatabases:
    """Connection string schemes accepted by the catalog reader."""

    MYSQL = "mysql"

    ALL = [MYSQL]

    DEFAULT_PORT = {MYSQL: 3306}

    # SQLAlchemy driver used for each scheme
    DRIVERS = {MYSQL: "mysql+pymysql"}


# =============================================================================
# TYPE MAPPINGS
# =============================================================================

class LogicalTypes:
    """Python-side value types used in ``Mapped[...]`` annotations."""

    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal.Decimal"
    STR = "str"
    BOOL = "bool"
    DATETIME = "datetime.datetime"
    DATE = "datetime.date"
    TIME = "datetime.time"
    BYTES = "bytes"
    JSON = "Any"
    UNTYPED = "untyped"

    NUMERIC: FrozenSet[str] = frozenset({INT, FLOAT, DECIMAL})

    # Module imported by generated code for qualified annotations
    MODULES: Dict[str, str] = {
        DECIMAL: "decimal",
        DATETIME: "datetime",
        DATE: "datetime",
        TIME: "datetime",
    }


class Transformers:
    """Value transforms shipped by ``entity_generator.runtime``."""

    BOOLEAN = "BooleanTransformer"
    BIG_INT = "BigIntTransformer"

    ALL = [BOOLEAN, BIG_INT]


class TypeSpec(NamedTuple):
    logical_type: str
    column_type: str
    length: Optional[int] = None
    transform: Optional[str] = None


# MySQL base keyword -> mapping. The keyword itself is the storage kind.
MYSQL_TYPE_MAP: Dict[str, TypeSpec] = {
    # Integer family
    "tinyint": TypeSpec(LogicalTypes.BOOL, "SmallInteger", transform=Transformers.BOOLEAN),
    "smallint": TypeSpec(LogicalTypes.INT, "SmallInteger"),
    "mediumint": TypeSpec(LogicalTypes.INT, "Integer"),
    "int": TypeSpec(LogicalTypes.INT, "Integer"),
    "integer": TypeSpec(LogicalTypes.INT, "Integer"),
    "bigint": TypeSpec(LogicalTypes.STR, "BigInteger", transform=Transformers.BIG_INT),
    "year": TypeSpec(LogicalTypes.INT, "SmallInteger"),

    # Fractional
    "decimal": TypeSpec(LogicalTypes.DECIMAL, "Numeric"),
    "numeric": TypeSpec(LogicalTypes.DECIMAL, "Numeric"),
    "float": TypeSpec(LogicalTypes.FLOAT, "Float"),
    "double": TypeSpec(LogicalTypes.FLOAT, "Double"),
    "real": TypeSpec(LogicalTypes.FLOAT, "Double"),

    # Text family
    "varchar": TypeSpec(LogicalTypes.STR, "String", length=255),
    "char": TypeSpec(LogicalTypes.STR, "String", length=1),
    "tinytext": TypeSpec(LogicalTypes.STR, "Text"),
    "text": TypeSpec(LogicalTypes.STR, "Text"),
    "mediumtext": TypeSpec(LogicalTypes.STR, "Text"),
    "longtext": TypeSpec(LogicalTypes.STR, "Text"),

    # Temporal family
    "datetime": TypeSpec(LogicalTypes.DATETIME, "DateTime"),
    "timestamp": TypeSpec(LogicalTypes.DATETIME, "DateTime"),
    "date": TypeSpec(LogicalTypes.DATE, "Date"),
    "time": TypeSpec(LogicalTypes.TIME, "Time"),

    # Binary / large object family
    "binary": TypeSpec(LogicalTypes.BYTES, "LargeBinary"),
    "varbinary": TypeSpec(LogicalTypes.BYTES, "LargeBinary"),
    "tinyblob": TypeSpec(LogicalTypes.BYTES, "LargeBinary"),
    "blob": TypeSpec(LogicalTypes.BYTES, "LargeBinary"),
    "mediumblob": TypeSpec(LogicalTypes.BYTES, "LargeBinary"),
    "longblob": TypeSpec(LogicalTypes.BYTES, "LargeBinary"),

    "json": TypeSpec(LogicalTypes.JSON, "JSON"),
}

# Column types whose declared length is carried over to the entity
LENGTH_TYPES: FrozenSet[str] = frozenset({"varchar", "char"})
PRECISION_TYPES: FrozenSet[str] = frozenset({"decimal", "numeric"})

ENUM_STORAGE_KIND = "enum"
FALLBACK_STORAGE_KIND = "text"
FALLBACK_COLUMN_TYPE = "Text"


# =============================================================================
# CATALOG VALUES
# =============================================================================

class CatalogFlags:
    """Raw values reported by MySQL's information_schema."""

    PRIMARY_KEY = "PRI"
    NULLABLE = "YES"
    AUTO_INCREMENT = "auto_increment"
    BASE_TABLE = "BASE TABLE"

    # Defaults that are SQL expressions rather than literals
    SQL_EXPRESSION_DEFAULTS: FrozenSet[str] = frozenset({
        "CURRENT_TIMESTAMP", "CURRENT_DATE", "CURRENT_TIME",
        "NOW()", "LOCALTIME", "LOCALTIMESTAMP", "UUID()",
    })


# =============================================================================
# NAMING
# =============================================================================

class FieldNames:
    """Reserved names and naming patterns."""

    # Reserved Python keywords (for identifier validation)
    PYTHON_KEYWORDS: Set[str] = {
        "False", "None", "True", "and", "as", "assert", "async", "await",
        "break", "class", "continue", "def", "del", "elif", "else", "except",
        "finally", "for", "from", "global", "if", "import", "in", "is",
        "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
        "while", "with", "yield"
    }

    # Attributes owned by SQLAlchemy's declarative machinery
    DECLARATIVE_RESERVED: Set[str] = {
        "metadata", "registry", "__tablename__", "__table__",
        "__mapper__", "__table_args__", "__mapper_args__",
    }

    # Module-level names of a generated entity module; class attributes
    # with these names would shadow them inside the class body
    GENERATED_MODULE_NAMES: Set[str] = {
        "datetime", "decimal", "enum", "sa", "TYPE_CHECKING", "Any", "List",
        "Optional", "Mapped", "mapped_column", "relationship", "Base",
        "BooleanTransformer", "BigIntTransformer", "enum_values",
    }

    # Names bound by the generated entry module next to the imported entity classes
    ENTRY_MODULE_NAMES: Set[str] = {
        "os", "load_dotenv", "DataSource", "entities", "data_source",
    }

    FORWARD_RELATION_PREFIX = "fk_"
    PLURAL_SUFFIX = "s"
    NUMERIC_MEMBER_PREFIX = "Val"
    EMPTY_MEMBER_NAME = "Empty"
    FOREIGN_KEY_COLUMN_SUFFIX = "_id"


# =============================================================================
# CODE GENERATION
# =============================================================================

class GenerationOptions:
    """Code generation options."""

    DEFAULT_LINE_LENGTH = 120
    TEMPLATE_DIR = "templates"
    ENTITY_TEMPLATE = "entity.py.j2"
    ENTRY_TEMPLATE = "index.py.j2"

    RUNTIME_MODULE = "entity_generator.runtime"
    DECLARATIVE_BASE = "Base"
    ENUM_VALUES_CALLABLE = "enum_values"
    DATA_SOURCE = "DataSource"

    # Generated modules reference SQLAlchemy through this alias
    SQLALCHEMY_ALIAS = "sa"
    IMPORT_ALIASES = {"sqlalchemy": SQLALCHEMY_ALIAS}
    HEADER_TITLE = "AutoGenerated by entity-generator."
    TIMESTAMP_FORMAT = "%a %b %d %Y %H:%M:%S"


class WarningCodes:
    """Codes attached to non-fatal schema warnings."""

    MISSING_PRIMARY_KEY = "missing_primary_key"
    NAME_COLLISION = "name_collision"
    UNKNOWN_REFERENCE = "unknown_reference"
    UNTYPED_COLUMN = "untyped_column"
