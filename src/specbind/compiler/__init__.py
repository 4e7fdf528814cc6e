"""Operation compiler -- signatures, return types and request binding.

Second half of the pipeline: takes an :class:`~specbind.models.ApiDocument`
and produces :class:`OperationGroup` objects whose :class:`CompiledOperation`
entries know how to build a request and decode its response.

Sub-modules:

* :mod:`~specbind.compiler.naming` -- PascalCase and identifier sanitising.
* :mod:`~specbind.compiler.operations` -- grouping, ordering, name and
  success-response selection.
* :mod:`~specbind.compiler.definitions` -- type nodes to Python types.
* :mod:`~specbind.compiler.binder` -- coercion, routing and JSON encoding.
* :mod:`~specbind.compiler.operation_compiler` -- ties the above together.
"""

from specbind.compiler.binder import PreparedRequest, RequestBinder, coerce_string
from specbind.compiler.definitions import DefinitionCompiler, PydanticDefinitionCompiler
from specbind.compiler.operation_compiler import (
    CompiledOperation,
    CompiledParameter,
    OperationCompiler,
    OperationGroup,
    base_address,
)

__all__ = [
    "CompiledOperation",
    "CompiledParameter",
    "DefinitionCompiler",
    "OperationCompiler",
    "OperationGroup",
    "PreparedRequest",
    "PydanticDefinitionCompiler",
    "RequestBinder",
    "base_address",
    "coerce_string",
]
