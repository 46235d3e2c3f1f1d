"""
Catalog router — table and column declarations.

Endpoints:
    GET    /tables                 List declared tables
    POST   /tables                 Declare a table
    GET    /tables/{id}            Get a table
    DELETE /tables/{id}            Delete a table and its records
    GET    /tables/{id}/columns    List a table's columns
    POST   /columns                Declare a column
    GET    /columns/{id}           Get a column
    PUT    /columns/{id}           Change catalog-only column attributes
    DELETE /columns/{id}           Delete a column

Tags:
    table-spine, api, catalog, tables, columns

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from fastapi import APIRouter, Path, Response
from pydantic import BaseModel, Field

from tablespine.api.deps import Catalog
from tablespine.api.schemas.common import SuccessResponse
from tablespine.catalog.models import DataType

router = APIRouter()


# ------------------------------------------------------------------ #
# Pydantic Schemas
# ------------------------------------------------------------------ #


class TableSchema(BaseModel):
    """Table declaration."""

    id: int
    name: str
    display_name: str | None = None
    created_at: str
    updated_at: str


class ColumnSchema(BaseModel):
    """Column declaration."""

    id: int
    table_id: int
    name: str
    display_name: str | None = None
    data_type: DataType
    is_required: bool
    is_unique: bool
    default_value: str | None = None
    max_length: int | None = None
    position: int
    created_at: str


class TableCreateRequest(BaseModel):
    """Request body for declaring a table."""

    name: str = Field(..., description="Table name, letters/digits/underscores, starts with a letter")
    display_name: str | None = Field(default=None, description="Human-readable label")


class ColumnCreateRequest(BaseModel):
    """Request body for declaring a column."""

    table_id: int = Field(..., description="Owning table id")
    name: str = Field(..., description="Column name, unique within the table")
    display_name: str | None = Field(default=None, description="Human-readable label")
    data_type: DataType = Field(..., description="Semantic type")
    is_required: bool = Field(default=False, description="Reject records without a value")
    is_unique: bool = Field(default=False, description="Not supported; must be false")
    default_value: str | int | float | bool | None = Field(
        default=None, description="Default for records that omit the column"
    )
    max_length: int | None = Field(default=None, description="Maximum length, text types only")
    position: int = Field(default=0, description="Presentation order")


class ColumnUpdateRequest(BaseModel):
    """Request body for changing a column.

    Only ``display_name``, ``position`` and ``max_length`` may change; the
    other attributes are accepted so a client can send the whole object back,
    but must equal their current value.
    """

    name: str | None = None
    display_name: str | None = None
    data_type: DataType | None = None
    is_required: bool | None = None
    is_unique: bool | None = None
    default_value: str | int | float | bool | None = None
    max_length: int | None = None
    position: int | None = None


# ------------------------------------------------------------------ #
# Tables
# ------------------------------------------------------------------ #


@router.get("/tables", response_model=SuccessResponse[list[TableSchema]])
def list_tables(catalog: Catalog):
    """List declared tables, most recently created first."""
    return {"data": [t.to_dict() for t in catalog.list_tables()]}


@router.post("/tables", status_code=201, response_model=SuccessResponse[TableSchema])
def create_table(catalog: Catalog, body: TableCreateRequest):
    """Declare a table.  Its data endpoints are live as soon as this returns."""
    table = catalog.create_table(body.name, body.display_name)
    return {"data": table.to_dict()}


@router.get("/tables/{table_id}", response_model=SuccessResponse[TableSchema])
def get_table(catalog: Catalog, table_id: int = Path(..., description="Table ID")):
    return {"data": catalog.get_table(table_id).to_dict()}


@router.delete("/tables/{table_id}", status_code=204, response_class=Response)
def delete_table(catalog: Catalog, table_id: int = Path(..., description="Table ID")):
    """Delete a table, its columns and all of its records."""
    catalog.delete_table(table_id)
    return Response(status_code=204)


@router.get("/tables/{table_id}/columns", response_model=SuccessResponse[list[ColumnSchema]])
def list_table_columns(catalog: Catalog, table_id: int = Path(..., description="Table ID")):
    return {"data": [c.to_dict() for c in catalog.list_columns(table_id)]}


# ------------------------------------------------------------------ #
# Columns
# ------------------------------------------------------------------ #


@router.post("/columns", status_code=201, response_model=SuccessResponse[ColumnSchema])
def create_column(catalog: Catalog, body: ColumnCreateRequest):
    """Declare a column and add it to the table."""
    column = catalog.create_column(
        body.table_id,
        body.name,
        body.data_type,
        display_name=body.display_name,
        is_required=body.is_required,
        is_unique=body.is_unique,
        default_value=body.default_value,
        max_length=body.max_length,
        position=body.position,
    )
    return {"data": column.to_dict()}


@router.get("/columns/{column_id}", response_model=SuccessResponse[ColumnSchema])
def get_column(catalog: Catalog, column_id: int = Path(..., description="Column ID")):
    return {"data": catalog.get_column(column_id).to_dict()}


@router.put("/columns/{column_id}", response_model=SuccessResponse[ColumnSchema])
def update_column(
    catalog: Catalog,
    body: ColumnUpdateRequest,
    column_id: int = Path(..., description="Column ID"),
):
    """Change catalog-only attributes of a column."""
    column = catalog.update_column(column_id, body.model_dump(exclude_unset=True))
    return {"data": column.to_dict()}


@router.delete("/columns/{column_id}", status_code=204, response_class=Response)
def delete_column(catalog: Catalog, column_id: int = Path(..., description="Column ID")):
    catalog.delete_column(column_id)
    return Response(status_code=204)
