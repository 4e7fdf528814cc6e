"""Tests for specbind.parser.adapter."""

from __future__ import annotations

from typing import Any

import pytest

from specbind.exceptions import SpecParseError, UnsupportedSchemaConstruct
from specbind.models import (
    INT32,
    INT64,
    STRING,
    ApiDocument,
    ArrayType,
    CollectionFormat,
    DictionaryType,
    EnumType,
    HTTPMethod,
    ObjectType,
    Operation,
    ParameterLocation,
)
from specbind.parser.adapter import adapt_document


def _op(document: ApiDocument, operation_id: str) -> Operation:
    return next(op for op in document.paths if op.operation_id == operation_id)


def _minimal(**extra: Any) -> dict[str, Any]:
    spec: dict[str, Any] = {"swagger": "2.0", "info": {"title": "T", "version": "1"}, "paths": {}}
    spec.update(extra)
    return spec


# ---------------------------------------------------------------------------
# Swagger 2.0
# ---------------------------------------------------------------------------


class TestSwagger2:
    def test_info_and_server(self, swagger2_doc: ApiDocument) -> None:
        assert swagger2_doc.info.title == "Swagger Petstore"
        assert swagger2_doc.info.version == "1.0.0"
        assert swagger2_doc.host == "petstore.example.com"
        assert swagger2_doc.base_path == "/v1"
        assert swagger2_doc.schemes == ("https", "http")

    def test_operations_in_document_order(self, swagger2_doc: ApiDocument) -> None:
        assert [(op.method, op.path) for op in swagger2_doc.paths] == [
            (HTTPMethod.GET, "/pets"),
            (HTTPMethod.POST, "/pets"),
            (HTTPMethod.GET, "/pets/{petId}"),
            (HTTPMethod.DELETE, "/pets/{petId}"),
            (HTTPMethod.POST, "/pets/{petId}/photo"),
            (HTTPMethod.GET, "/health"),
        ]

    def test_patch_is_skipped(self, swagger2_doc: ApiDocument) -> None:
        assert all(op.operation_id != "patchPet" for op in swagger2_doc.paths)

    def test_query_parameters(self, swagger2_doc: ApiDocument) -> None:
        limit, tags = _op(swagger2_doc, "pets_listPets").parameters
        assert limit.location == ParameterLocation.QUERY
        assert limit.type == INT32
        assert limit.required is False
        assert limit.description == "How many items to return at one time"
        assert tags.type == ArrayType(item=STRING)
        assert tags.collection_format == CollectionFormat.CSV

    def test_path_level_parameters_are_merged(self, swagger2_doc: ApiDocument) -> None:
        params = _op(swagger2_doc, "showPetById").parameters
        assert [(p.name, p.location) for p in params] == [
            ("petId", ParameterLocation.PATH),
            ("X-Request-ID", ParameterLocation.HEADER),
        ]
        assert params[0].required is True

    def test_body_parameter_uses_schema(self, swagger2_doc: ApiDocument) -> None:
        (body,) = _op(swagger2_doc, "createPets").parameters
        assert body.location == ParameterLocation.BODY
        assert body.required is True
        assert isinstance(body.type, ObjectType)
        assert [p.name for p in body.type.properties] == ["id", "name", "tag", "status"]

    def test_form_data_parameters(self, swagger2_doc: ApiDocument) -> None:
        op = _op(swagger2_doc, "uploadPhoto")
        locations = [p.location for p in op.parameters]
        assert locations == [
            ParameterLocation.PATH,
            ParameterLocation.FORM_DATA,
            ParameterLocation.FORM_DATA,
        ]
        assert op.consumes == ("application/x-www-form-urlencoded",)
        assert op.produces == ("application/json",)

    def test_responses(self, swagger2_doc: ApiDocument) -> None:
        responses = _op(swagger2_doc, "pets_listPets").responses
        assert [r.status_code for r in responses] == [200, None]
        assert isinstance(responses[0].schema_, ArrayType)
        assert responses[1].description == "unexpected error"

    def test_response_without_schema(self, swagger2_doc: ApiDocument) -> None:
        (created,) = _op(swagger2_doc, "createPets").responses
        assert created.status_code == 201
        assert created.schema_ is None

    def test_definitions_and_tags(self, swagger2_doc: ApiDocument) -> None:
        assert [d.name for d in swagger2_doc.definitions] == ["Pet", "Error"]
        pet = swagger2_doc.definitions[0].type
        assert pet.properties[3].type == EnumType(values=("available", "pending", "sold"))
        assert swagger2_doc.tags[0].name == "pets"
        assert swagger2_doc.tags[0].description == "Everything about your pets"

    def test_untagged_operation_keeps_empty_tags(self, swagger2_doc: ApiDocument) -> None:
        assert _op(swagger2_doc, "health").tags == ()

    def test_zero_schemes(self) -> None:
        document = adapt_document(_minimal(host="api.example.com"))
        assert document.schemes == ()
        assert document.base_path == ""

    def test_multi_collection_format(self) -> None:
        spec = _minimal(
            paths={
                "/search": {
                    "get": {
                        "operationId": "search",
                        "parameters": [
                            {
                                "name": "ids",
                                "in": "query",
                                "type": "array",
                                "items": {"type": "integer"},
                                "collectionFormat": "multi",
                            }
                        ],
                        "responses": {},
                    }
                }
            }
        )
        (ids,) = adapt_document(spec).paths[0].parameters
        assert ids.collection_format == CollectionFormat.MULTI
        assert ids.type == ArrayType(item=INT64)

    def test_missing_operation_id_is_synthesised(self) -> None:
        spec = _minimal(paths={"/pets/{petId}": {"get": {"responses": {}}}})
        assert adapt_document(spec).paths[0].operation_id == "get_pets_petId"

    def test_polymorphic_definition_fails(self) -> None:
        spec = _minimal(definitions={"Animal": {"discriminator": "kind"}})
        with pytest.raises(UnsupportedSchemaConstruct):
            adapt_document(spec)


# ---------------------------------------------------------------------------
# OpenAPI 3.x
# ---------------------------------------------------------------------------


class TestOpenAPI3:
    def test_first_server_with_variables(self, openapi3_doc: ApiDocument) -> None:
        assert openapi3_doc.schemes == ("https",)
        assert openapi3_doc.host == "petstore.example.com:8443"
        assert openapi3_doc.base_path == "/api/v1"

    def test_cookie_parameter_travels_as_header(self, openapi3_doc: ApiDocument) -> None:
        _, session = _op(openapi3_doc, "listPets").parameters
        assert session.name == "session"
        assert session.location == ParameterLocation.HEADER

    def test_json_request_body_named_by_extension(self, openapi3_doc: ApiDocument) -> None:
        (body,) = _op(openapi3_doc, "createPet").parameters
        assert body.name == "pet"
        assert body.location == ParameterLocation.BODY
        assert body.required is True

    def test_form_request_body_becomes_form_fields(self, openapi3_doc: ApiDocument) -> None:
        params = _op(openapi3_doc, "uploadPhoto").parameters
        assert [(p.name, p.location, p.required) for p in params] == [
            ("caption", ParameterLocation.FORM_DATA, True),
            ("rating", ParameterLocation.FORM_DATA, False),
        ]

    def test_response_prefers_json_and_skips_ranges(self, openapi3_doc: ApiDocument) -> None:
        (response,) = _op(openapi3_doc, "pets_showPetById").responses
        assert response.status_code == 200
        assert isinstance(response.schema_, ObjectType)
        assert [p.name for p in response.schema_.properties] == ["name", "tag", "id"]

    def test_path_parameter_from_path_item(self, openapi3_doc: ApiDocument) -> None:
        (pet_id,) = _op(openapi3_doc, "pets_showPetById").parameters
        assert pet_id.type == INT64
        assert pet_id.required is True

    def test_default_response_and_synthesised_id(self, openapi3_doc: ApiDocument) -> None:
        stats = openapi3_doc.paths[-1]
        assert stats.operation_id == "get_stats"
        assert stats.responses[0].status_code is None
        assert stats.responses[0].schema_ == DictionaryType(value=INT64)

    def test_media_types_aggregate_per_path_item(self, openapi3_doc: ApiDocument) -> None:
        op = _op(openapi3_doc, "listPets")
        assert op.consumes == ("application/json",)
        assert "application/json" in op.produces

    def test_allof_definition(self, openapi3_doc: ApiDocument) -> None:
        pet = next(d for d in openapi3_doc.definitions if d.name == "Pet")
        assert [(p.name, p.required) for p in pet.type.properties] == [
            ("name", True),
            ("tag", False),
            ("id", True),
        ]

    def test_unsupported_version(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported"):
            adapt_document({"openapi": "4.0.0", "info": {"title": "T", "version": "1"}})

    def test_server_root_path_is_empty(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "info": {"title": "T", "version": "1"},
            "servers": [{"url": "https://api.example.com/"}],
            "paths": {},
        }
        document = adapt_document(spec)
        assert document.host == "api.example.com"
        assert document.base_path == ""

    def test_relative_server_url_keeps_path_only(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "info": {"title": "T", "version": "1"},
            "servers": [{"url": "/api/v3"}],
            "paths": {},
        }
        document = adapt_document(spec)
        assert document.host == ""
        assert document.base_path == "/api/v3"
        assert document.schemes == ()

    def test_relative_server_url_uses_legacy_host(self) -> None:
        spec = {
            "openapi": "3.0.0",
            "info": {"title": "T", "version": "1"},
            "host": "pets.example.com",
            "schemes": ["https"],
            "servers": [{"url": "/api/v3/"}],
            "paths": {},
        }
        document = adapt_document(spec)
        assert document.host == "pets.example.com"
        assert document.base_path == "/api/v3"
        assert document.schemes == ("https",)
