"""Tests for specbind.compiler.operations and specbind.compiler.naming."""

from __future__ import annotations

import pytest

from specbind.compiler.naming import (
    nice_pascal_name,
    sanitize_field_name,
    sanitize_param_name,
    unique_names,
)
from specbind.compiler.operations import (
    ROOT_GROUP,
    group_operations,
    method_name,
    order_parameters,
    select_return_node,
    select_success_response,
)
from specbind.models import (
    BOOLEAN,
    INT32,
    STRING,
    HTTPMethod,
    Operation,
    Parameter,
    ParameterLocation,
    Response,
)


def _operation(operation_id: str, tags: tuple[str, ...] = ()) -> Operation:
    return Operation(method=HTTPMethod.GET, path="/x", operation_id=operation_id, tags=tags)


def _param(name: str, required: bool) -> Parameter:
    return Parameter(name=name, location=ParameterLocation.QUERY, required=required)


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


class TestGroupOperations:
    def test_untagged_operations_go_to_root(self) -> None:
        groups = group_operations([_operation("a"), _operation("b")])
        assert [(name, [op.operation_id for op in ops]) for name, ops in groups] == [
            (ROOT_GROUP, ["a", "b"])
        ]
        assert ROOT_GROUP == "Root"

    def test_first_tag_wins(self) -> None:
        groups = group_operations([
            _operation("a", ("pets", "store")),
            _operation("b", ("store",)),
            _operation("c", ("pets",)),
        ])
        assert [(name, [op.operation_id for op in ops]) for name, ops in groups] == [
            ("pets", ["a", "c"]),
            ("store", ["b"]),
        ]

    def test_groups_in_order_of_first_occurrence(self) -> None:
        groups = group_operations([
            _operation("a"),
            _operation("b", ("users",)),
            _operation("c"),
        ])
        assert [name for name, _ in groups] == [ROOT_GROUP, "users"]


# ---------------------------------------------------------------------------
# Parameter order
# ---------------------------------------------------------------------------


class TestOrderParameters:
    def test_required_first_preserving_relative_order(self) -> None:
        params = [
            _param("a", False),
            _param("b", True),
            _param("c", False),
            _param("d", True),
        ]
        assert [p.name for p in order_parameters(params)] == ["b", "d", "a", "c"]

    def test_empty(self) -> None:
        assert order_parameters([]) == []


# ---------------------------------------------------------------------------
# Method names
# ---------------------------------------------------------------------------


class TestMethodName:
    def test_tag_prefix_is_stripped(self) -> None:
        assert method_name(_operation("pets_listPets", ("pets",)), "pets") == "ListPets"

    def test_no_prefix(self) -> None:
        assert method_name(_operation("listPets", ("pets",)), "pets") == "ListPets"

    def test_leading_slash_in_tag(self) -> None:
        assert method_name(_operation("store_getInventory", ("/store",)), "/store") == "GetInventory"

    def test_prefix_of_other_tag_is_kept(self) -> None:
        assert method_name(_operation("store_getInventory", ("pets",)), "pets") == "StoreGetInventory"


class TestNaming:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("listPets", "ListPets"),
            ("get_pet-by_ID", "GetPetById"),
            ("/store", "Store"),
            ("HTTPServer", "HttpServer"),
            ("pets", "Pets"),
        ],
    )
    def test_nice_pascal_name(self, name: str, expected: str) -> None:
        assert nice_pascal_name(name) == expected

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("petId", "pet_id"),
            ("X-Request-ID", "x_request_id"),
            ("class", "class_"),
            ("2fa", "_2fa"),
            ("$", "param"),
        ],
    )
    def test_sanitize_param_name(self, name: str, expected: str) -> None:
        assert sanitize_param_name(name) == expected

    def test_sanitize_field_name_avoids_model_attributes(self) -> None:
        assert sanitize_field_name("schema") == "schema_"
        assert sanitize_field_name("model_config") == "model_config_"
        assert sanitize_field_name("2fa") == "field_2fa"

    def test_unique_names(self) -> None:
        assert unique_names(["a", "b", "a", "a"]) == ["a", "b", "a_2", "a_3"]


# ---------------------------------------------------------------------------
# Success response
# ---------------------------------------------------------------------------


class TestSuccessResponse:
    def test_first_200_wins_over_later_default(self) -> None:
        responses = [
            Response(status_code=201, schema=INT32),
            Response(status_code=200, schema=STRING),
            Response(status_code=None, schema=BOOLEAN),
        ]
        assert select_return_node(responses) == STRING

    def test_default_when_no_200(self) -> None:
        responses = [
            Response(status_code=201, schema=INT32),
            Response(status_code=None, schema=BOOLEAN),
        ]
        assert select_return_node(responses) == BOOLEAN

    def test_default_before_200_wins(self) -> None:
        responses = [
            Response(status_code=None, schema=BOOLEAN),
            Response(status_code=200, schema=STRING),
        ]
        assert select_return_node(responses) == BOOLEAN

    def test_no_match_is_no_value(self) -> None:
        responses = [Response(status_code=201, schema=INT32), Response(status_code=204)]
        assert select_success_response(responses) is None
        assert select_return_node(responses) is None

    def test_selected_without_schema_is_no_value(self) -> None:
        assert select_return_node([Response(status_code=200)]) is None
