"""Operation grouping and the per-operation selection rules.

These are the small, order-sensitive decisions the operation compiler makes
before any binding happens:

* :func:`group_operations` -- bucket operations by their first tag
  (``"Root"`` when untagged), preserving declaration order.
* :func:`order_parameters` -- required parameters first, then optional ones,
  each in input order.
* :func:`method_name` -- strip a ``<tag>_`` prefix from the operation id and
  PascalCase the rest.
* :func:`select_success_response` / :func:`select_return_node` -- pick the
  response whose body becomes the return value.

The success selection takes the *first* response whose code is exactly 200
or that has no code (``default``), scanning in declaration order.  It does
not rank other 2xx codes, so ``[201, default]`` returns the ``default``
body.
"""

from __future__ import annotations

from typing import Optional, Sequence, TypeVar

from specbind.compiler.naming import nice_pascal_name
from specbind.models import Operation, Parameter, Response, TypeNode

ROOT_GROUP = "Root"

_P = TypeVar("_P", bound=Parameter)


def grouping_tag(operation: Operation) -> str:
    """Return the operation's first tag, or :data:`ROOT_GROUP` when it has none."""
    return operation.tags[0] if operation.tags else ROOT_GROUP


def group_operations(operations: Sequence[Operation]) -> list[tuple[str, list[Operation]]]:
    """Group *operations* by :func:`grouping_tag`.

    Groups appear in order of first occurrence and keep declaration order
    inside.  Tags after the first stay on the operation record but do not
    affect grouping.
    """
    groups: dict[str, list[Operation]] = {}
    for operation in operations:
        groups.setdefault(grouping_tag(operation), []).append(operation)
    return list(groups.items())


def order_parameters(parameters: Sequence[_P]) -> list[_P]:
    """Return required parameters followed by optional ones, each in input order."""
    required = [p for p in parameters if p.required]
    optional = [p for p in parameters if not p.required]
    return required + optional


def method_name(operation: Operation, tag: str) -> str:
    """Derive the generated method name from the operation id.

    Swashbuckle-style ids repeat the tag (``pets_listPets`` under tag
    ``pets``); that prefix is dropped before beautification, so both
    ``pets_listPets`` and ``listPets`` become ``ListPets``.
    """
    prefix = tag.lstrip("/") + "_"
    operation_id = operation.operation_id
    if operation_id.startswith(prefix):
        operation_id = operation_id[len(prefix):]
    return nice_pascal_name(operation_id)


def select_success_response(responses: Sequence[Response]) -> Optional[Response]:
    """Return the first response with status 200 or without a status code."""
    for response in responses:
        if response.status_code is None or response.status_code == 200:
            return response
    return None


def select_return_node(responses: Sequence[Response]) -> Optional[TypeNode]:
    """Return the body type of :func:`select_success_response`, or ``None`` for no value."""
    response = select_success_response(responses)
    return response.schema_ if response is not None else None
