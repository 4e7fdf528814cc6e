"""Turn type-model nodes into concrete Python types.

The operation compiler never inspects a concrete type itself; it asks a
:class:`DefinitionCompiler` for "the type to use here" once per parameter
and once per return type.  :class:`PydanticDefinitionCompiler` is the
default collaborator:

================  =============================================
node              concrete type
================  =============================================
boolean           ``bool``
int32 / int64     ``int``
float / double    ``float``
string            ``str``
date / date-time  ``datetime.date`` / ``datetime.datetime``
file              ``bytes``
Array(byte)       ``pydantic.Base64Bytes``
Array(T)          ``list[T]``
Dictionary(T)     ``dict[str, T]``
Enum(values)      ``Literal[values]``
Object(props)     a ``pydantic.create_model`` model (``Any`` when empty)
================  =============================================

Optional positions (``required=False``) become ``Optional[T]`` with a
``None`` default, so a JSON ``null`` or an absent field decodes to ``None``
and, dumped with ``exclude_none=True``, is omitted again on the way out.
"""

from __future__ import annotations

import datetime
import itertools
import logging
from typing import Any, Iterable, Literal, Optional, Protocol

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field, create_model

from specbind.compiler.naming import nice_pascal_name, sanitize_field_name, unique_names
from specbind.models import (
    BYTE,
    ArrayType,
    Definition,
    DictionaryType,
    EnumType,
    ObjectType,
    PrimitiveType,
    TypeNode,
)

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[str, Any] = {
    "boolean": bool,
    "int32": int,
    "int64": int,
    "float": float,
    "double": float,
    "string": str,
    "date": datetime.date,
    "date-time": datetime.datetime,
    "file": bytes,
    "byte": int,
}


class DefinitionCompiler(Protocol):
    """Collaborator that maps a type node plus a required flag to a concrete type."""

    def compile_type(self, node: TypeNode, required: bool) -> Any:
        ...


class PydanticDefinitionCompiler:
    """Build Python annotations and pydantic models from type nodes.

    Object models are cached by structure, so the same shape met in two
    places compiles to one class.  Shapes that match a named definition
    take that definition's name; the rest are numbered
    ``AnonymousModel1``, ``AnonymousModel2``, ...

    Args:
        definitions: Named definitions from the document, used for model
            names.
    """

    def __init__(self, definitions: Iterable[Definition] = ()) -> None:
        self._definitions = tuple(definitions)
        self._names: dict[ObjectType, str] = {}
        for definition in self._definitions:
            if isinstance(definition.type, ObjectType) and definition.type.properties:
                self._names.setdefault(
                    definition.type, nice_pascal_name(definition.name) or "Model"
                )
        self._models: dict[ObjectType, type[BaseModel]] = {}
        self._anonymous = itertools.count(1)

    def compile_type(self, node: TypeNode, required: bool) -> Any:
        """Return the annotation for *node*, wrapped in ``Optional`` unless *required*."""
        annotation = self._compile(node)
        return annotation if required else Optional[annotation]

    def compile_definitions(self) -> dict[str, Any]:
        """Compile every named definition, keyed by its document name."""
        return {d.name: self.compile_type(d.type, True) for d in self._definitions}

    def _compile(self, node: TypeNode) -> Any:
        if isinstance(node, PrimitiveType):
            return _PRIMITIVES[node.kind]
        if isinstance(node, ArrayType):
            if node.item == BYTE:
                return Base64Bytes
            return list[self._compile(node.item)]  # type: ignore[misc]
        if isinstance(node, DictionaryType):
            return dict[str, self._compile(node.value)]  # type: ignore[misc]
        if isinstance(node, EnumType):
            return Literal[node.values] if node.values else str
        return self._compile_object(node)

    def _compile_object(self, node: ObjectType) -> Any:
        if not node.properties:
            return Any

        model = self._models.get(node)
        if model is not None:
            return model

        # Composed objects may redeclare a property; the later declaration wins.
        properties = list({prop.name: prop for prop in node.properties}.values())
        field_names = unique_names([sanitize_field_name(p.name) for p in properties])
        fields: dict[str, Any] = {}
        for field_name, prop in zip(field_names, properties):
            fields[field_name] = (
                self.compile_type(prop.type, prop.required),
                Field(
                    ... if prop.required else None,
                    alias=prop.name,
                    description=prop.description,
                ),
            )

        name = self._names.get(node) or f"AnonymousModel{next(self._anonymous)}"
        model = create_model(
            name,
            __config__=ConfigDict(populate_by_name=True),
            **fields,
        )
        logger.debug("Compiled model %s (%d fields)", name, len(fields))
        self._models[node] = model
        return model
