"""Normalise a raw API document into an :class:`~specbind.models.ApiDocument`.

The adapter is the only place that knows the difference between Swagger 2.0
and OpenAPI 3.x.  It resolves ``$ref`` pointers, then walks the document and
hands every schema it meets (parameter schemas, request bodies, responses,
named definitions) to :func:`~specbind.parser.schema_mapper.classify`.

The single public entry point is :func:`adapt_document`.  Internally it
delegates to private helpers that each handle one section of the document:

* ``_adapt_info`` -- the ``info`` object.
* ``_adapt_server`` -- scheme, host and base path, from ``servers[0]`` or the
  legacy ``schemes``/``host``/``basePath`` fields.
* ``_adapt_paths`` -- the ``paths`` object, flattened to one
  :class:`~specbind.models.Operation` per bound path + method pair.
* ``_adapt_definitions`` / ``_adapt_tags``.

Parameter merging follows the OpenAPI rules: path-level parameters provide
defaults, and operation-level parameters override them when they share the
same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx

from specbind.exceptions import SpecParseError
from specbind.models import (
    ApiDocument,
    ApiInfo,
    CollectionFormat,
    Definition,
    HTTPMethod,
    ObjectType,
    Operation,
    Parameter,
    ParameterLocation,
    Response,
    Tag,
)
from specbind.parser.loader import detect_spec_version
from specbind.parser.resolver import resolve_refs
from specbind.parser.schema_mapper import classify

logger = logging.getLogger(__name__)

_PATH_ITEM_METHODS = frozenset(
    {"get", "put", "post", "delete", "options", "head", "patch", "trace"}
)
_BOUND_METHODS = frozenset(m.value for m in HTTPMethod)

_LOCATIONS: dict[str, ParameterLocation] = {
    "path": ParameterLocation.PATH,
    "query": ParameterLocation.QUERY,
    "header": ParameterLocation.HEADER,
    # Cookies travel as a header.
    "cookie": ParameterLocation.HEADER,
    "body": ParameterLocation.BODY,
    "formData": ParameterLocation.FORM_DATA,
}

_FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# Keys of a Swagger 2 non-body parameter that describe its value.
_INLINE_SCHEMA_KEYS = ("type", "format", "items", "enum", "additionalProperties")

_SERVER_VARIABLE_RE = re.compile(r"\{([^}]+)\}")


def adapt_document(raw_spec: dict[str, Any]) -> ApiDocument:
    """Adapt a parsed (not yet ``$ref``-resolved) document.

    Args:
        raw_spec: The document as returned by
            :func:`~specbind.parser.loader.load_spec`.

    Returns:
        The immutable :class:`~specbind.models.ApiDocument`.

    Raises:
        SpecParseError: If the version is unsupported or a ``$ref`` is broken.
        UnsupportedSchemaConstruct: If any schema is polymorphic.

    Example::

        raw = load_spec("petstore.yaml")
        document = adapt_document(raw)
        for op in document.paths:
            print(op.method.value.upper(), op.path)
    """
    version = detect_spec_version(raw_spec)
    legacy = version.startswith("2.")
    spec = resolve_refs(raw_spec)

    host, base_path, schemes = _adapt_server(spec)
    document = ApiDocument(
        info=_adapt_info(spec),
        host=host,
        base_path=base_path,
        schemes=schemes,
        paths=_adapt_paths(spec, legacy),
        definitions=_adapt_definitions(spec, legacy),
        tags=_adapt_tags(spec),
    )
    logger.debug(
        "Adapted '%s' (%s): %d operations, %d definitions",
        document.info.title,
        version,
        len(document.paths),
        len(document.definitions),
    )
    return document


def _adapt_info(spec: dict[str, Any]) -> ApiInfo:
    info = spec.get("info") or {}
    return ApiInfo(
        title=info.get("title", "Untitled API"),
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
    )


def _adapt_server(spec: dict[str, Any]) -> tuple[str, str, tuple[str, ...]]:
    """Return ``(host, base_path, schemes)``.

    The first declared server wins.  Server variables are replaced with
    their ``default`` values.  Without servers, the Swagger 2 ``host``,
    ``basePath`` and ``schemes`` fields are used as-is.

    A relative server URL (``/api/v3``) only supplies the base path; host
    and schemes then come from the legacy fields.  The host stays empty
    when those are absent too, and binding requires an explicit base URL.
    """
    legacy_schemes = tuple(str(s) for s in spec.get("schemes") or ())
    legacy_host = spec.get("host", "")

    servers = spec.get("servers") or []
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        server = servers[0]
        url_text = _substitute_server_variables(server["url"], server.get("variables") or {})
        try:
            url = httpx.URL(url_text)
        except httpx.InvalidURL as exc:
            raise SpecParseError(f"Invalid server URL '{url_text}': {exc}") from exc
        if not url.host:
            logger.debug("Relative server URL %r, using legacy host %r", url_text, legacy_host)
            return legacy_host, url.path.rstrip("/"), legacy_schemes
        host = url.host
        if url.port is not None:
            host = f"{host}:{url.port}"
        schemes = (url.scheme,) if url.scheme else ()
        return host, url.path.rstrip("/"), schemes

    return legacy_host, (spec.get("basePath") or "").rstrip("/"), legacy_schemes


def _substitute_server_variables(url: str, variables: dict[str, Any]) -> str:
    def _default(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1)) or {}
        return str(variable.get("default", match.group(0)))

    return _SERVER_VARIABLE_RE.sub(_default, url)


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def _adapt_paths(spec: dict[str, Any], legacy: bool) -> tuple[Operation, ...]:
    """Flatten ``paths`` into operations, in document order.

    Only GET, POST, PUT and DELETE are bound; other verbs are skipped.
    """
    operations: list[Operation] = []

    for path, path_item in (spec.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue

        declared = {
            method: op
            for method, op in path_item.items()
            if method in _PATH_ITEM_METHODS and isinstance(op, dict)
        }
        path_params = path_item.get("parameters") or []
        aggregated = _aggregate_media_types(declared.values())

        for method, op in declared.items():
            if method not in _BOUND_METHODS:
                logger.debug("Skipping unsupported method %s %s", method.upper(), path)
                continue

            if legacy:
                consumes = tuple(op.get("consumes") or spec.get("consumes") or ())
                produces = tuple(op.get("produces") or spec.get("produces") or ())
            else:
                consumes, produces = aggregated

            parameters = _adapt_parameters(
                _merge_parameters(path_params, op.get("parameters") or []),
                legacy,
            )
            if not legacy and op.get("requestBody"):
                parameters += _adapt_request_body(
                    op["requestBody"], op.get("x-codegen-request-body-name")
                )

            operations.append(
                Operation(
                    method=HTTPMethod(method),
                    path=path,
                    operation_id=op.get("operationId") or _synthesize_operation_id(method, path),
                    summary=op.get("summary"),
                    description=op.get("description"),
                    deprecated=bool(op.get("deprecated", False)),
                    tags=tuple(op.get("tags") or ()),
                    parameters=parameters,
                    responses=_adapt_responses(op.get("responses") or {}, legacy),
                    consumes=consumes,
                    produces=produces,
                )
            )

    return tuple(operations)


def _aggregate_media_types(
    operations: Any,
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Collect request and response media types across every operation of a path item."""
    consumes: list[str] = []
    produces: list[str] = []
    for op in operations:
        body = op.get("requestBody") or {}
        consumes.extend((body.get("content") or {}).keys())
        for response in (op.get("responses") or {}).values():
            if isinstance(response, dict):
                produces.extend((response.get("content") or {}).keys())
    return tuple(consumes), tuple(produces)


def _synthesize_operation_id(method: str, path: str) -> str:
    segments = [s.strip("{}") for s in path.split("/") if s]
    return "_".join([method, *segments]) if segments else method


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters (operation wins on ``(name, in)``)."""
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params
        if (p.get("name", ""), p.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _adapt_parameters(
    params_list: list[dict[str, Any]], legacy: bool
) -> tuple[Parameter, ...]:
    parameters: list[Parameter] = []

    for param in params_list:
        name = param.get("name", "")
        location = _LOCATIONS.get(param.get("in", "query"))
        if location is None:
            logger.debug("Skipping parameter '%s' with location '%s'", name, param.get("in"))
            continue

        if location == ParameterLocation.BODY or not legacy:
            schema = param.get("schema")
            if schema is None:
                schema = _first_media_schema(param.get("content") or {})
        else:
            schema = {k: param[k] for k in _INLINE_SCHEMA_KEYS if k in param}

        try:
            collection_format = CollectionFormat(param.get("collectionFormat", "csv"))
        except ValueError:
            collection_format = CollectionFormat.CSV

        parameters.append(
            Parameter(
                name=name,
                location=location,
                # Path parameters are always required.
                required=location == ParameterLocation.PATH or bool(param.get("required", False)),
                description=param.get("description"),
                collection_format=collection_format,
                type=classify(schema),
            )
        )

    return tuple(parameters)


def _adapt_request_body(
    body: dict[str, Any], body_name: Optional[str] = None
) -> tuple[Parameter, ...]:
    """Turn an OpenAPI 3 ``requestBody`` into payload parameters.

    A form media type yields one ``formData`` parameter per schema property;
    anything else yields a single ``body`` parameter named by
    ``x-codegen-request-body-name`` (on the operation or the body), else
    ``"body"``.
    """
    content = body.get("content") or {}
    if not content:
        return ()

    media_type, media = next(iter(content.items()))
    schema = (media or {}).get("schema")

    if media_type in _FORM_MEDIA_TYPES:
        shape = classify(schema)
        if isinstance(shape, ObjectType):
            return tuple(
                Parameter(
                    name=prop.name,
                    location=ParameterLocation.FORM_DATA,
                    required=prop.required,
                    description=prop.description,
                    type=prop.type,
                )
                for prop in shape.properties
            )

    return (
        Parameter(
            name=body_name or body.get("x-codegen-request-body-name", "body"),
            location=ParameterLocation.BODY,
            required=bool(body.get("required", False)),
            description=body.get("description"),
            type=classify(schema),
        ),
    )


def _first_media_schema(content: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Pick a schema from a content map, preferring JSON media types."""
    entries = [
        (media_type, media) for media_type, media in content.items()
        if isinstance(media, dict) and "schema" in media
    ]
    for media_type, media in entries:
        if "json" in media_type:
            return media["schema"]
    return entries[0][1]["schema"] if entries else None


def _adapt_responses(responses: dict[str, Any], legacy: bool) -> tuple[Response, ...]:
    """Extract responses in declaration order.

    ``default`` becomes a response without a status code.  Range keys such
    as ``2XX`` are skipped.
    """
    result: list[Response] = []

    for code, response in responses.items():
        if not isinstance(response, dict):
            continue
        code_text = str(code)
        if code_text == "default":
            status_code = None
        elif code_text.isdigit():
            status_code = int(code_text)
        else:
            logger.debug("Skipping response range '%s'", code_text)
            continue

        if legacy:
            schema = response.get("schema")
        else:
            schema = _first_media_schema(response.get("content") or {})

        result.append(
            Response(
                status_code=status_code,
                description=response.get("description"),
                schema=classify(schema) if schema is not None else None,
            )
        )

    return tuple(result)


# ---------------------------------------------------------------------------
# Definitions and tags
# ---------------------------------------------------------------------------


def _adapt_definitions(spec: dict[str, Any], legacy: bool) -> tuple[Definition, ...]:
    if legacy:
        schemas = spec.get("definitions") or {}
    else:
        schemas = (spec.get("components") or {}).get("schemas") or {}
    return tuple(
        Definition(name=name, type=classify(schema)) for name, schema in schemas.items()
    )


def _adapt_tags(spec: dict[str, Any]) -> tuple[Tag, ...]:
    return tuple(
        Tag(name=tag["name"], description=tag.get("description"))
        for tag in spec.get("tags") or ()
        if isinstance(tag, dict) and "name" in tag
    )
