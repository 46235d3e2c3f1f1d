"""Tests for per-table validator synthesis."""

from __future__ import annotations

import pytest

from tablespine.catalog.models import ColumnDeclaration, DataType
from tablespine.core.errors import ValidationError
from tablespine.validation.synthesizer import synthesize


def _column(name, data_type, position=0, **kwargs) -> ColumnDeclaration:
    values = {
        "id": position + 1,
        "table_id": 1,
        "name": name,
        "display_name": None,
        "data_type": data_type,
        "is_required": False,
        "is_unique": False,
        "default_value": None,
        "max_length": None,
        "position": position,
        "created_at": "2024-01-01T00:00:00.000000Z",
    }
    values.update(kwargs)
    return ColumnDeclaration(**values)


@pytest.fixture
def validators():
    columns = [
        _column("label", DataType.STRING, 0, is_required=True, max_length=5),
        _column("notes", DataType.TEXT, 1),
        _column("qty", DataType.NUMBER, 2, default_value="0"),
        _column("price", DataType.DECIMAL, 3),
        _column("active", DataType.BOOLEAN, 4),
        _column("due", DataType.DATE, 5),
        _column("seen_at", DataType.DATETIME, 6),
    ]
    return synthesize("order_items", columns)


class TestCreate:
    def test_model_names(self, validators):
        assert validators.create.__name__ == "OrderItemsCreate"
        assert validators.update.__name__ == "OrderItemsUpdate"
        assert validators.response.__name__ == "OrderItemsRecord"

    def test_minimal(self, validators):
        assert validators.validate_create({"label": "a"}) == {"label": "a"}

    def test_missing_required(self, validators):
        with pytest.raises(ValidationError) as info:
            validators.validate_create({"qty": 1})
        assert info.value.details[0]["field"] == "label"
        assert info.value.details[0]["type"] == "missing"

    def test_null_required(self, validators):
        with pytest.raises(ValidationError):
            validators.validate_create({"label": None})

    def test_empty_string_allowed(self, validators):
        assert validators.validate_create({"label": ""}) == {"label": ""}

    def test_optional_null(self, validators):
        assert validators.validate_create({"label": "a", "notes": None}) == {"label": "a", "notes": None}

    def test_unknown_field(self, validators):
        with pytest.raises(ValidationError) as info:
            validators.validate_create({"label": "a", "colour": "red"})
        assert info.value.details[0]["field"] == "colour"

    def test_system_fields_rejected(self, validators):
        with pytest.raises(ValidationError):
            validators.validate_create({"label": "a", "id": 5})

    def test_max_length(self, validators):
        with pytest.raises(ValidationError):
            validators.validate_create({"label": "toolong"})

    @pytest.mark.parametrize(
        "field,value",
        [
            ("label", 5),
            ("qty", "3"),
            ("qty", True),
            ("qty", 1.5),
            ("price", "1.5"),
            ("price", False),
            ("active", 1),
            ("active", "true"),
            ("due", "2024-13-01"),
            ("due", 20240101),
            ("seen_at", "whenever"),
            ("qty", 2**63),
            ("qty", -(2**63) - 1),
            ("price", float("nan")),
            ("price", float("inf")),
            ("price", 10**400),
        ],
    )
    def test_strict_types(self, validators, field, value):
        with pytest.raises(ValidationError):
            validators.validate_create({"label": "a", field: value})

    def test_scalar_values(self, validators):
        values = validators.validate_create({
            "label": "a",
            "qty": 0,
            "price": -2,
            "active": False,
            "due": "2024-02-29",
            "seen_at": "2024-05-01T12:00:00+02:00",
        })
        assert values["qty"] == 0
        assert values["price"] == -2.0 and isinstance(values["price"], float)
        assert values["active"] is False
        assert values["due"] == "2024-02-29"
        assert values["seen_at"] == "2024-05-01T10:00:00Z"

    def test_integer_range_edges(self, validators):
        assert validators.validate_create({"label": "a", "qty": 2**63 - 1})["qty"] == 2**63 - 1
        assert validators.validate_create({"label": "a", "qty": -(2**63)})["qty"] == -(2**63)

    def test_not_finite_reports_field(self, validators):
        with pytest.raises(ValidationError) as info:
            validators.validate_create({"label": "a", "price": float("nan")})
        assert info.value.details[0]["field"] == "price"

    def test_not_an_object(self, validators):
        with pytest.raises(ValidationError):
            validators.validate_create(["label"])


class TestUpdate:
    def test_empty(self, validators):
        assert validators.validate_update({}) == {}

    def test_partial(self, validators):
        assert validators.validate_update({"qty": 5}) == {"qty": 5}

    def test_required_not_nullable(self, validators):
        with pytest.raises(ValidationError):
            validators.validate_update({"label": None})

    def test_optional_nullable(self, validators):
        assert validators.validate_update({"notes": None}) == {"notes": None}

    def test_unknown_field(self, validators):
        with pytest.raises(ValidationError):
            validators.validate_update({"nope": 1})


class TestResponse:
    def test_shape(self, validators):
        record = validators.shape_response({
            "id": 1,
            "created_at": "2024-01-01T00:00:00.000000Z",
            "updated_at": "2024-01-01T00:00:00.000000Z",
            "label": "a",
            "notes": None,
            "qty": 0,
            "price": None,
            "active": True,
            "due": None,
            "seen_at": None,
        })
        assert list(record)[:3] == ["id", "created_at", "updated_at"]
        assert record["label"] == "a"
        assert record["active"] is True
        assert record["notes"] is None

    def test_extra_keys_dropped(self, validators):
        record = validators.shape_response({
            "id": 1,
            "created_at": "x",
            "updated_at": "x",
            "label": "a",
            "orphan": "hidden",
        })
        assert "orphan" not in record


class TestAwkwardColumnNames:
    def test_names_shadowing_basemodel_attributes(self):
        columns = [
            _column("json", DataType.STRING, 0),
            _column("model_config", DataType.NUMBER, 1),
            _column("copy", DataType.BOOLEAN, 2),
        ]
        v = synthesize("odd", columns)
        assert v.validate_create({"json": "x", "model_config": 1, "copy": True}) == {
            "json": "x",
            "model_config": 1,
            "copy": True,
        }
