"""Tests for tablespine.core.errors module."""

import pytest
from pydantic import BaseModel, StrictInt
from pydantic import ValidationError as PydanticValidationError

from tablespine.core.errors import (
    DuplicateError,
    ErrorCategory,
    InternalError,
    NotFoundError,
    PolicyViolation,
    TableSpineError,
    ValidationError,
)


class TestTaxonomy:
    """Codes, statuses and categories per error class."""

    @pytest.mark.parametrize(
        "exc,code,status,category",
        [
            (ValidationError("bad"), "VALIDATION_ERROR", 400, ErrorCategory.VALIDATION),
            (NotFoundError("Table"), "NOT_FOUND", 404, ErrorCategory.NOT_FOUND),
            (DuplicateError("Table", "widgets"), "DUPLICATE_ERROR", 409, ErrorCategory.CONFLICT),
            (PolicyViolation("nope"), "POLICY_VIOLATION", 400, ErrorCategory.POLICY),
            (InternalError(), "INTERNAL_SERVER_ERROR", 500, ErrorCategory.INTERNAL),
        ],
    )
    def test_code_status_category(self, exc, code, status, category):
        assert isinstance(exc, TableSpineError)
        assert exc.code == code
        assert exc.status_code == status
        assert exc.category == category

    def test_not_found_message(self):
        assert NotFoundError("Record").message == "Record not found"

    def test_duplicate_message(self):
        err = DuplicateError("Column", "label")
        assert err.message == "Column 'label' already exists"
        assert err.name == "label"

    def test_internal_message_is_generic(self):
        cause = RuntimeError("no such table: secret_internal")
        err = InternalError(cause=cause)
        assert "secret_internal" not in err.message
        assert err.cause is cause
        assert err.__cause__ is cause


class TestEnvelope:
    def test_to_dict_without_details(self):
        assert PolicyViolation("nope").to_dict() == {
            "error": {"code": "POLICY_VIOLATION", "message": "nope"}
        }

    def test_to_dict_with_details(self):
        err = ValidationError("bad", details=[{"field": "qty", "message": "x", "type": "int_type"}])
        body = err.to_dict()["error"]
        assert body["details"][0]["field"] == "qty"

    def test_log_fields_include_cause(self):
        fields = InternalError(cause=ValueError("boom")).log_fields()
        assert fields["error_code"] == "INTERNAL_SERVER_ERROR"
        assert fields["cause"] == "boom"

    def test_repr(self):
        assert repr(NotFoundError("Table")) == "NotFoundError('Table not found', code=NOT_FOUND)"


class TestFromPydantic:
    def test_details_per_field(self):
        class Model(BaseModel):
            qty: StrictInt
            name: str

        with pytest.raises(PydanticValidationError) as info:
            Model.model_validate({"qty": "3"})

        err = ValidationError.from_pydantic(info.value, "Invalid record")
        assert err.message == "Invalid record"
        fields = {d["field"] for d in err.details}
        assert fields == {"qty", "name"}
        types = {d["type"] for d in err.details}
        assert "missing" in types
