"""Inline internal ``$ref`` pointers before the document is adapted.

The schema type mapper classifies schema *nodes*; it never follows
references itself.  :func:`resolve_refs` therefore produces a deep copy of
the raw document where every ``{"$ref": "#/..."}`` is replaced by the object
it points to, so that a response schema referencing
``#/components/schemas/Pet`` (or Swagger 2 ``#/definitions/Pet``) reaches
the mapper as the full ``Pet`` schema.

Self-referencing schemas are left as their ``$ref`` dict at the point where
the cycle closes.  The mapper has no rule for a bare reference, so such a
node classifies as the empty :class:`~specbind.models.ObjectType`.

External references (other files or URLs) are not supported and raise
:class:`~specbind.exceptions.SpecParseError`.
"""

from __future__ import annotations

import copy
from typing import Any

from specbind.exceptions import SpecParseError


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *spec* with all internal ``$ref`` pointers inlined.

    The input is not modified.

    Raises:
        SpecParseError: If a pointer is external or names a missing location.
    """
    root = copy.deepcopy(spec)
    return _RefResolver(root).resolve(root, frozenset())


class _RefResolver:
    """Walks a document, inlining references against a fixed root."""

    def __init__(self, root: dict[str, Any]) -> None:
        self._root = root

    def resolve(self, node: Any, active: frozenset[str]) -> Any:
        """Resolve *node* recursively.

        ``active`` holds the pointers currently being expanded on this
        branch; meeting one again means the schema is recursive.
        """
        if isinstance(node, list):
            return [self.resolve(item, active) for item in node]
        if not isinstance(node, dict):
            return node

        pointer = node.get("$ref")
        if isinstance(pointer, str):
            if pointer in active:
                return node
            return self.resolve(self.lookup(pointer), active | {pointer})

        return {key: self.resolve(value, active) for key, value in node.items()}

    def lookup(self, pointer: str) -> Any:
        """Follow a ``#/a/b/0`` JSON Pointer (RFC 6901) from the root."""
        if not pointer.startswith("#/"):
            raise SpecParseError(
                f"External $ref not supported: {pointer}. "
                "Only internal references (#/...) are handled."
            )

        target: Any = self._root
        for raw_segment in pointer[2:].split("/"):
            segment = raw_segment.replace("~1", "/").replace("~0", "~")
            if isinstance(target, dict):
                if segment not in target:
                    raise SpecParseError(
                        f"Cannot resolve $ref '{pointer}': key '{segment}' not found"
                    )
                target = target[segment]
            elif isinstance(target, list):
                try:
                    target = target[int(segment)]
                except (ValueError, IndexError) as exc:
                    raise SpecParseError(
                        f"Cannot resolve $ref '{pointer}': invalid array index '{segment}'"
                    ) from exc
            else:
                raise SpecParseError(
                    f"Cannot resolve $ref '{pointer}': "
                    f"cannot navigate into {type(target).__name__}"
                )
        return target
