"""Classify raw schema nodes into the closed :data:`~specbind.models.TypeNode` set.

:func:`classify` is total: every node (including ``{}``, ``None`` and a bare
unresolved ``$ref``) maps to exactly one shape.  It is also order-sensitive.
A node with both ``enum`` and ``type: array`` is an enum, and a node with
``properties`` *and* a ``discriminator`` is an object.  The precedence lives
in :data:`CLASSIFICATION_RULES`, evaluated top to bottom:

==  =================  =====================================================
#   rule               result
==  =================  =====================================================
1   ``enum``           ``EnumType`` of the declared string values
2   ``array``          ``ArrayType(classify(items))``
3   ``primitive``      the primitive for ``type``/``format``
4   ``dictionary``     ``DictionaryType(classify(additionalProperties))``
5   ``composed``       ``ObjectType`` of ``allOf`` properties then own ones
6   ``properties``     ``ObjectType`` of own properties
7   ``composition``    ``ObjectType`` of ``allOf`` properties
8   ``polymorphism``   raises :class:`~specbind.exceptions.UnsupportedSchemaConstruct`
9   ``fallback``       ``ObjectType()``
==  =================  =====================================================

Rules return ``None`` when they do not apply.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from specbind.exceptions import UnsupportedSchemaConstruct
from specbind.models import (
    BOOLEAN,
    BYTE,
    DATE,
    DATE_TIME,
    DOUBLE,
    FILE,
    FLOAT,
    INT32,
    INT64,
    STRING,
    ArrayType,
    DictionaryType,
    EnumType,
    ObjectType,
    Property,
    TypeNode,
)

SchemaRule = Callable[[dict[str, Any]], Optional[TypeNode]]

_ISSUES_HINT = (
    "Models with polymorphism (discriminator) are not supported yet. "
    "If you see this error please report it with an example of the schema."
)


def classify(node: Any) -> TypeNode:
    """Map a schema node to its :data:`~specbind.models.TypeNode`.

    Args:
        node: A ``$ref``-resolved schema dict.  Anything that is not a dict
            is treated as the empty schema.

    Raises:
        UnsupportedSchemaConstruct: If the node is polymorphic (rule 8).

    Example::

        >>> classify({"type": "integer", "format": "int32"})
        PrimitiveType(kind='int32')
        >>> classify({"type": "array", "items": {"type": "string", "enum": ["a"]}})
        ArrayType(kind='array', item=EnumType(kind='enum', values=('a',)))
    """
    schema = node if isinstance(node, dict) else {}
    for _name, rule in CLASSIFICATION_RULES:
        shape = rule(schema)
        if shape is not None:
            return shape
    raise AssertionError("fallback rule must always match")  # pragma: no cover


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def schema_type(schema: dict[str, Any]) -> Optional[str]:
    """Return the schema's ``type``, picking the first non-null entry of a 3.1 type array."""
    value = schema.get("type")
    if isinstance(value, list):
        non_null = [t for t in value if t != "null"]
        return non_null[0] if non_null else None
    return value


def _declared_properties(schema: dict[str, Any]) -> Optional[tuple[Property, ...]]:
    """Properties declared directly on *schema*, or ``None`` if it declares none.

    ``required`` comes from *schema*'s own ``required`` list.
    """
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return None
    required = set(schema.get("required") or ())
    return tuple(
        Property(
            name=name,
            description=prop.get("description") if isinstance(prop, dict) else None,
            required=name in required,
            type=classify(prop),
        )
        for name, prop in properties.items()
    )


def _composed_properties(schema: dict[str, Any]) -> Optional[tuple[Property, ...]]:
    """Properties gathered from every ``allOf`` member, in member order.

    Returns ``None`` when ``allOf`` is absent or empty.
    """
    members = schema.get("allOf")
    if not isinstance(members, list) or not members:
        return None
    collected: list[Property] = []
    for member in members:
        if isinstance(member, dict):
            collected.extend(_declared_properties(member) or ())
    return tuple(collected)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _enum_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    values = schema.get("enum")
    if not isinstance(values, list):
        return None
    strings = tuple(v for v in values if isinstance(v, str))
    if not strings:
        return None
    return EnumType(values=strings)


def _array_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    if schema_type(schema) != "array":
        return None
    items = schema.get("items")
    if isinstance(items, list):
        # Tuple validation: only the first position is representable.
        items = items[0] if items else None
    return ArrayType(item=classify(items))


_INTEGER_FORMATS: dict[Optional[str], TypeNode] = {"int32": INT32}
_NUMBER_FORMATS: dict[Optional[str], TypeNode] = {
    "float": FLOAT,
    "int32": INT32,
    "int64": INT64,
}
_STRING_FORMATS: dict[Optional[str], TypeNode] = {
    "date": DATE,
    "date-time": DATE_TIME,
    "byte": ArrayType(item=BYTE),
}


def _primitive_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    fmt = schema.get("format")
    kind = schema_type(schema)
    if kind == "boolean":
        return BOOLEAN
    if kind == "integer":
        return _INTEGER_FORMATS.get(fmt, INT64)
    if kind == "number":
        return _NUMBER_FORMATS.get(fmt, DOUBLE)
    if kind == "string":
        return _STRING_FORMATS.get(fmt, STRING)
    if kind == "file":
        return FILE
    return None


def _dictionary_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    if schema_type(schema) != "object" or "properties" in schema:
        return None
    extra = schema.get("additionalProperties")
    if extra is None or extra is False:
        return None
    # ``additionalProperties: true`` allows any value.
    return DictionaryType(value=classify(extra if isinstance(extra, dict) else {}))


def _composed_object_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    own = _declared_properties(schema)
    composed = _composed_properties(schema)
    if own is None or composed is None:
        return None
    return ObjectType(properties=composed + own)


def _object_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    own = _declared_properties(schema)
    return ObjectType(properties=own) if own is not None else None


def _composition_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    composed = _composed_properties(schema)
    return ObjectType(properties=composed) if composed is not None else None


def _polymorphism_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    if schema.get("discriminator") is not None:
        raise UnsupportedSchemaConstruct(_ISSUES_HINT)
    return None


def _fallback_rule(schema: dict[str, Any]) -> Optional[TypeNode]:
    # Underspecified nodes such as ``{}``.
    return ObjectType()


CLASSIFICATION_RULES: tuple[tuple[str, SchemaRule], ...] = (
    ("enum", _enum_rule),
    ("array", _array_rule),
    ("primitive", _primitive_rule),
    ("dictionary", _dictionary_rule),
    ("composed", _composed_object_rule),
    ("properties", _object_rule),
    ("composition", _composition_rule),
    ("polymorphism", _polymorphism_rule),
    ("fallback", _fallback_rule),
)
"""Ordered ``(name, rule)`` pairs; the first rule returning a shape wins."""
