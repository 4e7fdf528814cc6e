"""Canonical Pydantic models shared across all specbind modules.

This is the single source of truth for data shapes in the project.  The
models fall into three groups:

**Type model** -- the closed set of shapes a schema node can classify into:
    :class:`PrimitiveType`, :class:`ArrayType`, :class:`DictionaryType`,
    :class:`EnumType`, :class:`ObjectType` (with :class:`Property`), joined
    by the discriminated union :data:`TypeNode`.

**Document model** -- produced by :func:`~specbind.parser.adapter.adapt_document`
and consumed by the operation compiler:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`CollectionFormat`,
    :class:`Parameter`, :class:`Response`, :class:`Operation`,
    :class:`ApiInfo`, :class:`Definition`, :class:`Tag`, and
    :class:`ApiDocument`.

**Configuration** -- :class:`BinderConfig`, resolved by
:func:`~specbind.config.resolve_config`.

Type and document models are frozen and use tuples for sequences, so a
compiled document is immutable and every node is hashable (the definition
compiler caches on node identity).
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# --- Type model ---


PrimitiveKind = Literal[
    "boolean",
    "int32",
    "int64",
    "float",
    "double",
    "string",
    "date",
    "date-time",
    "file",
    "byte",
]


class PrimitiveType(_Frozen):
    """A scalar leaf of the type model.

    ``byte`` only ever appears as the item of an :class:`ArrayType`; the
    mapper produces ``ArrayType(item=BYTE)`` for ``format: byte`` strings.
    """

    kind: PrimitiveKind


class ArrayType(_Frozen):
    """A homogeneous list of ``item``."""

    kind: Literal["array"] = "array"
    item: TypeNode


class DictionaryType(_Frozen):
    """A string-keyed map whose values are ``value`` (``additionalProperties``)."""

    kind: Literal["dictionary"] = "dictionary"
    value: TypeNode


class EnumType(_Frozen):
    """A closed set of string values."""

    kind: Literal["enum"] = "enum"
    values: tuple[str, ...] = ()


class Property(_Frozen):
    """A named member of an :class:`ObjectType`.

    ``required`` is taken from the ``required`` list of the schema that
    *declares* the property, not from the property's own schema node.
    """

    name: str
    description: Optional[str] = None
    required: bool = False
    type: TypeNode


class ObjectType(_Frozen):
    """A structural record.  ``ObjectType()`` (no properties) is the fallback shape."""

    kind: Literal["object"] = "object"
    properties: tuple[Property, ...] = ()


TypeNode = Annotated[
    Union[PrimitiveType, ArrayType, DictionaryType, EnumType, ObjectType],
    Field(discriminator="kind"),
]
"""Discriminated union of every type shape.  Exactly one case applies to any schema node."""

for _model in (ArrayType, DictionaryType, Property, ObjectType):
    _model.model_rebuild()

BOOLEAN = PrimitiveType(kind="boolean")
INT32 = PrimitiveType(kind="int32")
INT64 = PrimitiveType(kind="int64")
FLOAT = PrimitiveType(kind="float")
DOUBLE = PrimitiveType(kind="double")
STRING = PrimitiveType(kind="string")
DATE = PrimitiveType(kind="date")
DATE_TIME = PrimitiveType(kind="date-time")
FILE = PrimitiveType(kind="file")
BYTE = PrimitiveType(kind="byte")


# --- Document model ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods the operation compiler binds.

    Other verbs declared in a document (PATCH, HEAD, ...) are skipped by
    the adapter.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"


class ParameterLocation(str, enum.Enum):
    """Where a parameter travels in the request.

    ``BODY`` and ``FORM_DATA`` are *payload-bearing*; an operation may carry
    one JSON body or any number of form fields, never both.
    """

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"
    FORM_DATA = "formData"


class CollectionFormat(str, enum.Enum):
    """Join strategy for array-valued parameters (Swagger 2 ``collectionFormat``)."""

    CSV = "csv"
    SSV = "ssv"
    TSV = "tsv"
    PIPES = "pipes"
    MULTI = "multi"


class Parameter(_Frozen):
    """A single operation parameter after location and type normalisation."""

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    collection_format: CollectionFormat = CollectionFormat.CSV
    type: TypeNode = STRING


class Response(_Frozen):
    """One declared response.  ``status_code`` is ``None`` for ``default``."""

    status_code: Optional[int] = None
    description: Optional[str] = None
    schema_: Optional[TypeNode] = Field(default=None, alias="schema")


class Operation(_Frozen):
    """One HTTP method bound to one path template."""

    method: HTTPMethod
    path: str
    operation_id: str
    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: bool = False
    tags: tuple[str, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    responses: tuple[Response, ...] = ()
    consumes: tuple[str, ...] = ()
    produces: tuple[str, ...] = ()


class ApiInfo(_Frozen):
    """Document metadata from the *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None


class Definition(_Frozen):
    """A named schema from ``components/schemas`` (or Swagger 2 ``definitions``)."""

    name: str
    type: TypeNode


class Tag(_Frozen):
    """A declared tag and its description."""

    name: str
    description: Optional[str] = None


class ApiDocument(_Frozen):
    """The normalised API document the operation compiler works from.

    ``host`` may include a port.  ``base_path`` never ends with ``/``.
    ``schemes`` may be empty, in which case the binder falls back to
    ``http``.
    """

    info: ApiInfo
    host: str = ""
    base_path: str = ""
    schemes: tuple[str, ...] = ()
    paths: tuple[Operation, ...] = ()
    definitions: tuple[Definition, ...] = ()
    tags: tuple[Tag, ...] = ()


# --- Configuration ---


class BinderConfig(BaseModel):
    """Settings captured by a binding at construction time.

    Loaded and layered by :func:`~specbind.config.resolve_config`.  Every
    compiled operation sees the same values for the lifetime of the binding.
    """

    base_url: Optional[str] = Field(
        default=None, description="Override the scheme://host/basePath derived from the document"
    )
    default_headers: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Ordered (name, value) pairs sent with every request",
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")
    lowercase_json_body: bool = Field(
        default=True,
        description="Lower-case serialized JSON bodies (legacy behaviour, corrupts mixed-case values)",
    )
