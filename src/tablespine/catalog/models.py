"""
Catalog declarations and naming rules.

A :class:`TableDeclaration` / :class:`ColumnDeclaration` is one catalog row
describing the intended shape of a user table or column.  The semantic
column types form the closed :class:`DataType` set; everything downstream
(physical DDL, validators, record encoding) switches on it.

Examples:
    >>> DataType("number").is_numeric
    True
    >>> validate_table_name("widgets")
    >>> parse_default(DataType.BOOLEAN, "false")
    False

Tags:
    catalog, declarations, data-types, naming, table-spine
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from tablespine.core.errors import ValidationError
from tablespine.core.timestamps import canonical_date, canonical_timestamp


class DataType(str, Enum):
    """Semantic column types.  Values are the wire names."""

    STRING = "string"      # short text
    TEXT = "text"          # long text
    NUMBER = "number"      # integer
    DECIMAL = "decimal"    # floating point
    BOOLEAN = "boolean"
    DATE = "date"          # YYYY-MM-DD
    DATETIME = "datetime"  # ISO-8601 timestamp

    @property
    def is_text(self) -> bool:
        return self in (DataType.STRING, DataType.TEXT)

    @property
    def is_numeric(self) -> bool:
        return self in (DataType.NUMBER, DataType.DECIMAL)

    @property
    def is_temporal(self) -> bool:
        return self in (DataType.DATE, DataType.DATETIME)


# Surrogate key and timestamps present on every user table
SYSTEM_COLUMNS: tuple[str, ...] = ("id", "created_at", "updated_at")

RESERVED_COLUMNS: frozenset[str] = frozenset(SYSTEM_COLUMNS)
RESERVED_TABLES: frozenset[str] = frozenset({"tables", "columns", "sqlite_sequence", "sqlite_master"})

NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")
MAX_NAME_LENGTH = 50

# SQLite INTEGER is a signed 64-bit value
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1


def _validate_name(kind: str, name: str) -> None:
    if not name or not name.strip():
        raise ValidationError(f"{kind} name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"{kind} name must be {MAX_NAME_LENGTH} characters or less")
    if not NAME_PATTERN.match(name):
        raise ValidationError(
            f"{kind} name must start with a letter and contain only letters, numbers, and underscores"
        )


def validate_table_name(name: str) -> None:
    """Raise :class:`ValidationError` unless *name* is a usable table name."""
    _validate_name("Table", name)
    lowered = name.lower()
    if lowered in RESERVED_TABLES or lowered.startswith("sqlite_"):
        raise ValidationError(f"Table name '{name}' is reserved")


def validate_column_name(name: str) -> None:
    """Raise :class:`ValidationError` unless *name* is a usable column name."""
    _validate_name("Column", name)
    if name.lower() in RESERVED_COLUMNS:
        raise ValidationError(f"Column name '{name}' is reserved")


def check_integer(value: int) -> int:
    """Reject integers SQLite cannot store."""
    if not INTEGER_MIN <= value <= INTEGER_MAX:
        raise ValueError(f"must be between {INTEGER_MIN} and {INTEGER_MAX}")
    return value


def check_finite(value: int | float) -> float:
    """Convert to float, rejecting NaN, infinities and overflow."""
    try:
        converted = float(value)
    except OverflowError:
        raise ValueError("must be a finite number") from None
    if not math.isfinite(converted):
        raise ValueError("must be a finite number")
    return converted


def parse_default(data_type: DataType, raw: Any) -> Any:
    """Convert a declared default into a Python value of *data_type*.

    Raises ``ValueError`` when the value cannot represent the type.
    """
    if data_type.is_text:
        if isinstance(raw, bool):
            return "true" if raw else "false"
        return str(raw)

    if data_type is DataType.NUMBER:
        if isinstance(raw, bool):
            raise ValueError("expected an integer")
        if isinstance(raw, float):
            if not raw.is_integer():
                raise ValueError("expected an integer")
            return check_integer(int(raw))
        return check_integer(int(raw))

    if data_type is DataType.DECIMAL:
        if isinstance(raw, bool):
            raise ValueError("expected a number")
        if isinstance(raw, str):
            raw = float(raw)
        return check_finite(raw)

    if data_type is DataType.BOOLEAN:
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in ("true", "1"):
            return True
        if text in ("false", "0"):
            return False
        raise ValueError("expected true or false")

    if data_type is DataType.DATE:
        return canonical_date(str(raw))

    return canonical_timestamp(str(raw))


def format_default(value: Any) -> str:
    """Catalog text form of a parsed default."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True, slots=True)
class TableDeclaration:
    """Catalog row for one user table."""

    id: int
    name: str
    display_name: str | None
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> TableDeclaration:
        return cls(
            id=row["id"],
            name=row["name"],
            display_name=row.get("display_name"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ColumnDeclaration:
    """Catalog row for one user column.

    ``position`` is presentation order only; it has no physical meaning.
    ``default_value`` is kept in its catalog text form, use
    :attr:`default` for the typed value.
    """

    id: int
    table_id: int
    name: str
    display_name: str | None
    data_type: DataType
    is_required: bool
    is_unique: bool
    default_value: str | None
    max_length: int | None
    position: int
    created_at: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ColumnDeclaration:
        return cls(
            id=row["id"],
            table_id=row["table_id"],
            name=row["name"],
            display_name=row.get("display_name"),
            data_type=DataType(row["data_type"]),
            is_required=bool(row["is_required"]),
            is_unique=bool(row["is_unique"]),
            default_value=row.get("default_value"),
            max_length=row.get("max_length"),
            position=row["position"],
            created_at=row["created_at"],
        )

    @property
    def default(self) -> Any:
        if self.default_value is None:
            return None
        return parse_default(self.data_type, self.default_value)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["data_type"] = self.data_type.value
        return d


__all__ = [
    "DataType",
    "SYSTEM_COLUMNS",
    "RESERVED_COLUMNS",
    "RESERVED_TABLES",
    "NAME_PATTERN",
    "MAX_NAME_LENGTH",
    "INTEGER_MIN",
    "INTEGER_MAX",
    "validate_table_name",
    "validate_column_name",
    "parse_default",
    "check_integer",
    "check_finite",
    "format_default",
    "TableDeclaration",
    "ColumnDeclaration",
]
