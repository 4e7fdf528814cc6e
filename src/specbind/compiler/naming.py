"""Name beautification for generated members.

Two transforms are needed when turning document names into Python ones:

* :func:`nice_pascal_name` -- operation ids and tag names become PascalCase
  method and group names (``pets_listPets`` → ``PetsListPets``).
* :func:`sanitize_param_name` -- parameter and property names become valid
  snake_case identifiers (``X-Request-ID`` → ``x_request_id``); the wire
  name is kept alongside for building the request.
"""

from __future__ import annotations

import keyword
import re

from pydantic import BaseModel

# Lower/digit → Upper boundaries, then acronym → Word boundaries.
_CAMEL_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_RE = re.compile(r"[A-Za-z0-9]+")
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")

_RESERVED_FIELD_NAMES = frozenset(dir(BaseModel))


def _split_words(name: str) -> list[str]:
    spaced = _CAMEL_BOUNDARY_RE.sub(r"\1 \2", name)
    spaced = _ACRONYM_BOUNDARY_RE.sub(r"\1 \2", spaced)
    return _WORD_RE.findall(spaced)


def nice_pascal_name(name: str) -> str:
    """Convert *name* to PascalCase at word boundaries.

    Words are split on separators and case changes; each word keeps an
    upper-case first letter and lower-cases the rest.

    Example::

        >>> nice_pascal_name("listPets")
        'ListPets'
        >>> nice_pascal_name("get_pet-by_ID")
        'GetPetById'
        >>> nice_pascal_name("/store")
        'Store'
    """
    return "".join(word[0].upper() + word[1:].lower() for word in _split_words(name))


def sanitize_param_name(name: str) -> str:
    """Convert a wire parameter or property name to a valid Python identifier.

    CamelCase boundaries become underscores, the result is lower-cased,
    invalid characters are replaced, a leading digit gets an underscore
    prefix, and keywords get a trailing underscore (PEP 8).

    Example::

        >>> sanitize_param_name("petId")
        'pet_id'
        >>> sanitize_param_name("X-Request-ID")
        'x_request_id'
        >>> sanitize_param_name("class")
        'class_'
    """
    result = _CAMEL_BOUNDARY_RE.sub(r"\1_\2", name)
    result = _ACRONYM_BOUNDARY_RE.sub(r"\1_\2", result)
    result = _INVALID_IDENT_RE.sub("_", result.lower())
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


def sanitize_field_name(name: str) -> str:
    """Like :func:`sanitize_param_name`, but also avoids names pydantic reserves on models."""
    result = sanitize_param_name(name)
    if result.startswith("_"):
        # Leading underscores mark private attributes on pydantic models.
        result = f"field{result}"
    if result in _RESERVED_FIELD_NAMES or result.startswith("model_"):
        result = f"{result}_"
    return result


def unique_names(names: list[str]) -> list[str]:
    """Suffix repeated entries of *names* with ``_2``, ``_3``, ... keeping order."""
    seen: dict[str, int] = {}
    result: list[str] = []
    for name in names:
        count = seen.get(name, 0) + 1
        seen[name] = count
        result.append(name if count == 1 else f"{name}_{count}")
    return result
