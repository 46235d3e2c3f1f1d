"""
Data router — generic CRUD over every declared table.

One set of routes serves all tables; ``{table_name}`` is resolved against
the endpoint registry on each request, so tables appear and disappear
without touching the route table.  Table names match regardless of case.

Endpoints:
    GET    /data                           List served table names
    GET    /data/{table_name}              List records (limit, offset)
    POST   /data/{table_name}              Create a record
    GET    /data/{table_name}/{id}         Get a record
    PUT    /data/{table_name}/{id}         Partially update a record
    DELETE /data/{table_name}/{id}         Delete a record

Tags:
    table-spine, api, data, records, crud

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Path, Response

from tablespine.api.deps import Pagination, Registry
from tablespine.api.schemas.common import ErrorEnvelope, PagedResponse, SuccessResponse

router = APIRouter(
    prefix="/data",
    responses={400: {"model": ErrorEnvelope}, 404: {"model": ErrorEnvelope}},
)

Record = dict[str, Any]

TableName = Annotated[str, Path(description="Declared table name")]
RecordId = Annotated[int, Path(description="Record ID")]


@router.get("", response_model=SuccessResponse[list[str]])
def list_served_tables(registry: Registry):
    """Names of the tables currently served."""
    return {"data": registry.names()}


@router.get("/{table_name}", response_model=PagedResponse[Record])
def list_records(registry: Registry, pagination: Pagination, table_name: TableName):
    """List records, most recent first."""
    return registry.handlers(table_name).list(pagination.limit, pagination.offset)


@router.post("/{table_name}", status_code=201, response_model=SuccessResponse[Record])
def create_record(
    registry: Registry,
    table_name: TableName,
    body: dict[str, Any] = Body(...),
):
    return {"data": registry.handlers(table_name).create(body)}


@router.get("/{table_name}/{record_id}", response_model=SuccessResponse[Record])
def get_record(registry: Registry, table_name: TableName, record_id: RecordId):
    return {"data": registry.handlers(table_name).get(record_id)}


@router.put("/{table_name}/{record_id}", response_model=SuccessResponse[Record])
def update_record(
    registry: Registry,
    table_name: TableName,
    record_id: RecordId,
    body: dict[str, Any] = Body(...),
):
    """Partial update; ``updated_at`` is always refreshed."""
    return {"data": registry.handlers(table_name).update(record_id, body)}


@router.delete("/{table_name}/{record_id}", status_code=204, response_class=Response)
def delete_record(registry: Registry, table_name: TableName, record_id: RecordId):
    registry.handlers(table_name).delete(record_id)
    return Response(status_code=204)
