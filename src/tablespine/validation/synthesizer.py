"""
Validator synthesis: per-table pydantic models built from column declarations.

For each table three descriptors are generated with
:func:`pydantic.create_model`:

    ┌───────────┬──────────────────────────────────────────────────────┐
    │ create    │ required columns required and non-null, others       │
    │           │ optional and nullable; unknown fields rejected       │
    │ update    │ every field optional; required columns non-null      │
    │           │ when present; unknown fields rejected                │
    │ response  │ id, created_at, updated_at + declared columns        │
    └───────────┴──────────────────────────────────────────────────────┘

Field names are positional (``f0``, ``f1``, ...) with the column name as
alias, so a column called ``json`` or ``model_config`` can never collide with
``BaseModel`` attributes.  Input is validated by alias and dumped by alias.

Scalar rules::

    string, text    strict str, max_length when declared
    number          strict int within the signed 64-bit range (booleans rejected)
    decimal         strict int or finite float, stored as float
    boolean         strict bool
    date            YYYY-MM-DD
    datetime        ISO-8601, offsets normalised to UTC with a Z suffix

Examples:
    >>> validators = synthesize("widgets", columns)
    >>> validators.validate_create({"label": "a"})
    {'label': 'a'}

Tags:
    validation, pydantic, create_model, table-spine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    create_model,
)
from pydantic import ValidationError as PydanticValidationError

from tablespine.catalog.models import ColumnDeclaration, DataType, check_finite, check_integer
from tablespine.core.errors import ValidationError
from tablespine.core.timestamps import canonical_date, canonical_timestamp


def _date(value: str) -> str:
    try:
        return canonical_date(value)
    except ValueError:
        raise ValueError("must be a date in YYYY-MM-DD format") from None


def _timestamp(value: str) -> str:
    try:
        return canonical_timestamp(value)
    except ValueError:
        raise ValueError("must be an ISO-8601 timestamp") from None


DateStr = Annotated[StrictStr, AfterValidator(_date)]
TimestampStr = Annotated[StrictStr, AfterValidator(_timestamp)]
Integer = Annotated[StrictInt, AfterValidator(check_integer)]
Decimal = Annotated[StrictInt | StrictFloat, AfterValidator(check_finite)]

_INPUT_TYPES: dict[DataType, Any] = {
    DataType.NUMBER: Integer,
    DataType.DECIMAL: Decimal,
    DataType.BOOLEAN: StrictBool,
    DataType.DATE: DateStr,
    DataType.DATETIME: TimestampStr,
}

_OUTPUT_TYPES: dict[DataType, Any] = {
    DataType.STRING: str,
    DataType.TEXT: str,
    DataType.NUMBER: int,
    DataType.DECIMAL: float,
    DataType.BOOLEAN: bool,
    DataType.DATE: str,
    DataType.DATETIME: str,
}

_INPUT_CONFIG = ConfigDict(extra="forbid", populate_by_name=False)
_OUTPUT_CONFIG = ConfigDict(extra="ignore")


def input_type(column: ColumnDeclaration) -> Any:
    """Annotation accepted on writes for *column*."""
    if column.data_type.is_text:
        if column.max_length is not None:
            return Annotated[StrictStr, Field(max_length=column.max_length)]
        return StrictStr
    return _INPUT_TYPES[column.data_type]


def _model_name(table: str, suffix: str) -> str:
    base = "".join(part[:1].upper() + part[1:] for part in table.split("_") if part)
    return f"{base}{suffix}"


def _field_name(index: int) -> str:
    return f"f{index}"


@dataclass(frozen=True)
class TableValidators:
    """Create/update/response descriptors for one table."""

    table: str
    columns: tuple[ColumnDeclaration, ...]
    create: type[BaseModel]
    update: type[BaseModel]
    response: type[BaseModel]

    def _validate(self, model: type[BaseModel], payload: Any) -> dict[str, Any]:
        try:
            instance = model.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(
                exc, f"Invalid record for table '{self.table}'"
            ) from exc
        return instance.model_dump(by_alias=True, exclude_unset=True)

    def validate_create(self, payload: Any) -> dict[str, Any]:
        """Validated column values for an insert.  Omitted columns are absent
        so the physical default applies."""
        return self._validate(self.create, payload)

    def validate_update(self, payload: Any) -> dict[str, Any]:
        """Validated column values for a partial update."""
        return self._validate(self.update, payload)

    def shape_response(self, record: dict[str, Any]) -> dict[str, Any]:
        """Project a decoded row onto the response descriptor."""
        return self.response.model_validate(record).model_dump(by_alias=True)


def synthesize(table: str, columns: Sequence[ColumnDeclaration]) -> TableValidators:
    """Build the three descriptors for *table* from its declared *columns*."""
    create_fields: dict[str, Any] = {}
    update_fields: dict[str, Any] = {}
    response_fields: dict[str, Any] = {
        "id": (int, ...),
        "created_at": (str, ...),
        "updated_at": (str, ...),
    }

    for index, column in enumerate(columns):
        field = _field_name(index)
        annotation = input_type(column)
        output = _OUTPUT_TYPES[column.data_type]

        if column.is_required:
            create_fields[field] = (annotation, Field(..., alias=column.name))
            # default is never validated, so null is still rejected when sent
            update_fields[field] = (annotation, Field(None, alias=column.name))
            response_fields[field] = (output, Field(..., alias=column.name))
        else:
            create_fields[field] = (annotation | None, Field(None, alias=column.name))
            update_fields[field] = (annotation | None, Field(None, alias=column.name))
            response_fields[field] = (output | None, Field(None, alias=column.name))

    return TableValidators(
        table=table,
        columns=tuple(columns),
        create=create_model(_model_name(table, "Create"), __config__=_INPUT_CONFIG, **create_fields),
        update=create_model(_model_name(table, "Update"), __config__=_INPUT_CONFIG, **update_fields),
        response=create_model(_model_name(table, "Record"), __config__=_OUTPUT_CONFIG, **response_fields),
    )


__all__ = ["TableValidators", "input_type", "synthesize"]
