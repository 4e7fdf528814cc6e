"""API document parser -- load, resolve ``$ref`` pointers, classify schemas, adapt.

This sub-package is the first half of the specbind pipeline: turning a raw
Swagger 2.0 or OpenAPI 3.x document (JSON or YAML, local file or remote URL)
into the immutable :class:`~specbind.models.ApiDocument` the operation
compiler consumes.

Typical usage::

    from specbind.parser import adapt_document, load_spec

    document = adapt_document(load_spec("https://petstore.swagger.io/v2/swagger.json"))

Sub-modules:

* :mod:`~specbind.parser.loader` -- I/O layer (URL, file, stdin, text) plus
  format and version detection.
* :mod:`~specbind.parser.resolver` -- ``$ref`` inlining with cycle detection.
* :mod:`~specbind.parser.schema_mapper` -- the ordered schema classifier.
* :mod:`~specbind.parser.adapter` -- walks the resolved document and builds
  the :class:`~specbind.models.ApiDocument`.
"""

from specbind.parser.adapter import adapt_document
from specbind.parser.loader import detect_spec_version, load_spec, parse_spec_text
from specbind.parser.schema_mapper import classify

__all__ = [
    "adapt_document",
    "classify",
    "detect_spec_version",
    "load_spec",
    "parse_spec_text",
]
