"""Compile operation records into callable metadata.

:class:`OperationCompiler` walks an :class:`~specbind.models.ApiDocument`
once and produces one :class:`OperationGroup` per grouping tag, each holding
:class:`CompiledOperation` entries.  A compiled operation is pure data plus
a shared :class:`~specbind.compiler.binder.RequestBinder`:

* an ordered, typed parameter list (required first) and a return type, both
  obtained from the :class:`~specbind.compiler.definitions.DefinitionCompiler`;
* :meth:`CompiledOperation.build_request`, which maps call arguments onto
  the parameters and produces a :class:`~specbind.compiler.binder.PreparedRequest`;
* :meth:`CompiledOperation.decode`, which turns response text into the
  return type.

Nothing here performs I/O; :class:`~specbind.client.SyncClient` sends the
prepared requests.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Sequence

from pydantic import TypeAdapter

from specbind.compiler.binder import (
    PreparedRequest,
    RequestBinder,
    check_single_payload,
    decode_response,
)
from specbind.compiler.definitions import DefinitionCompiler, PydanticDefinitionCompiler
from specbind.compiler.naming import nice_pascal_name, sanitize_param_name, unique_names
from specbind.compiler.operations import (
    ROOT_GROUP,
    group_operations,
    method_name,
    order_parameters,
    select_return_node,
)
from specbind.exceptions import ArgumentShapeError, SpecParseError
from specbind.models import (
    ApiDocument,
    BinderConfig,
    Operation,
    Parameter,
    ParameterLocation,
    TypeNode,
)

logger = logging.getLogger(__name__)

DEFAULT_SCHEME = "http"


@dataclass(frozen=True)
class CompiledParameter:
    """A declared parameter with its Python-side name and annotation."""

    parameter: Parameter
    python_name: str
    annotation: Any

    @property
    def name(self) -> str:
        return self.parameter.name

    @property
    def location(self) -> ParameterLocation:
        return self.parameter.location

    @property
    def required(self) -> bool:
        return self.parameter.required


@dataclass(frozen=True, eq=False)
class CompiledOperation:
    """One operation, ready to be bound and invoked.

    Attributes:
        group: The grouping tag (``"Root"`` for untagged operations).
        method_name: PascalCase member name inside the group.
        operation: The source operation record.
        parameters: Compiled parameters, required ones first.
        return_node: Type node of the selected success response, or ``None``.
        return_type: Concrete return type; ``None`` means no value.
        binder: The binding instance's request binder.
    """

    group: str
    method_name: str
    operation: Operation
    parameters: tuple[CompiledParameter, ...]
    return_node: Optional[TypeNode]
    return_type: Any
    binder: RequestBinder
    _decoder: Optional[TypeAdapter[Any]] = field(default=None, repr=False)

    @property
    def summary(self) -> Optional[str]:
        return self.operation.summary

    def signature(self) -> inspect.Signature:
        """Return the call signature: required parameters, then optional ones defaulting to ``None``."""
        params = [
            inspect.Parameter(
                cp.python_name,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
                default=inspect.Parameter.empty if cp.required else None,
                annotation=cp.annotation,
            )
            for cp in self.parameters
        ]
        return inspect.Signature(params, return_annotation=self.return_type)

    def bind_arguments(self, args: Sequence[Any], kwargs: Mapping[str, Any]) -> dict[str, Any]:
        """Map positional and keyword arguments to ``{python_name: value}``.

        Keywords may use either the Python name or the wire name of a
        parameter.  A wire name shared by parameters in different locations
        addresses the first of them; the others are reached by Python name.

        Raises:
            ArgumentShapeError: On too many positional arguments, unknown
                keywords, or a parameter given twice.
        """
        if len(args) > len(self.parameters):
            raise ArgumentShapeError(
                f"{self.method_name}() takes {len(self.parameters)} positional "
                f"argument(s) but {len(args)} were given"
            )

        by_name: dict[str, CompiledParameter] = {}
        for cp in self.parameters:
            by_name.setdefault(cp.name, cp)
        for cp in self.parameters:
            by_name[cp.python_name] = cp

        bound: dict[str, Any] = {}
        for cp, value in zip(self.parameters, args):
            bound[cp.python_name] = value
        for key, value in kwargs.items():
            cp = by_name.get(key)
            if cp is None:
                raise ArgumentShapeError(
                    f"{self.method_name}() got an unexpected keyword argument '{key}'"
                )
            if cp.python_name in bound:
                raise ArgumentShapeError(
                    f"{self.method_name}() got multiple values for argument '{key}'"
                )
            bound[cp.python_name] = value
        return bound

    def build_request(self, *args: Any, **kwargs: Any) -> PreparedRequest:
        """Bind call arguments and build the request without sending it."""
        arguments = self.bind_arguments(args, kwargs)
        return self.binder.bind_values(
            self.operation.method,
            self.operation.path,
            [(cp.parameter, arguments.get(cp.python_name)) for cp in self.parameters],
        )

    def decode(self, text: str) -> Any:
        """Decode a response body into :attr:`return_type` (``None`` when there is no value)."""
        return decode_response(text, self._decoder)


@dataclass(frozen=True)
class OperationGroup:
    """Compiled operations sharing a grouping tag."""

    name: str
    type_name: str
    description: Optional[str]
    operations: tuple[CompiledOperation, ...]


def base_address(document: ApiDocument, config: Optional[BinderConfig] = None) -> str:
    """Return ``scheme://host`` + base path, using the first scheme or ``http``.

    A ``base_url`` in *config* replaces the derived address.

    Raises:
        SpecParseError: If the document names no host and no ``base_url``
            is configured.
    """
    if config is not None and config.base_url:
        return config.base_url.rstrip("/")
    if not document.host:
        raise SpecParseError(
            "The document declares no absolute server address; "
            "set BinderConfig.base_url (or SPECBIND_BASE_URL)"
        )
    scheme = document.schemes[0] if document.schemes else DEFAULT_SCHEME
    return f"{scheme}://{document.host}{document.base_path}"


class OperationCompiler:
    """Compile every operation of *document* in a single pass.

    Args:
        document: The adapted API document.
        definition_compiler: Collaborator mapping type nodes to concrete
            types.  Defaults to a :class:`PydanticDefinitionCompiler` over
            the document's definitions.
        headers: Default ``(name, value)`` pairs sent with every request.
            When omitted, ``config.default_headers`` is used.
        config: Binder settings (base URL override, JSON lower-casing).
    """

    def __init__(
        self,
        document: ApiDocument,
        definition_compiler: Optional[DefinitionCompiler] = None,
        headers: Optional[Sequence[tuple[str, str]]] = None,
        config: Optional[BinderConfig] = None,
    ) -> None:
        self.document = document
        self.config = config or BinderConfig()
        self.definition_compiler = definition_compiler or PydanticDefinitionCompiler(
            document.definitions
        )
        default_headers = headers if headers is not None else self.config.default_headers
        self.binder = RequestBinder(
            base_address(document, self.config),
            default_headers,
            lowercase_json_body=self.config.lowercase_json_body,
        )

    def compile(self) -> list[OperationGroup]:
        """Compile all operations, grouped by tag in order of first occurrence.

        Raises:
            AmbiguousPayload: If an operation declares conflicting payloads.
        """
        descriptions = {tag.name: tag.description for tag in self.document.tags}
        groups: list[OperationGroup] = []
        for tag, operations in group_operations(self.document.paths):
            compiled = [self.compile_operation(tag, op) for op in operations]
            names = unique_names([c.method_name for c in compiled])
            renamed: list[CompiledOperation] = []
            for entry, name in zip(compiled, names):
                if name != entry.method_name:
                    logger.warning(
                        "Duplicate method name %s in group %s, renamed to %s",
                        entry.method_name, tag, name,
                    )
                    entry = replace(entry, method_name=name)
                renamed.append(entry)
            groups.append(
                OperationGroup(
                    name=tag,
                    type_name=nice_pascal_name(tag) or ROOT_GROUP,
                    description=descriptions.get(tag),
                    operations=tuple(renamed),
                )
            )

        logger.info(
            "Compiled %d operations in %d groups for %s",
            sum(len(g.operations) for g in groups), len(groups), self.binder.base_address,
        )
        return groups

    def compile_operation(self, tag: str, operation: Operation) -> CompiledOperation:
        """Compile a single operation under grouping tag *tag*."""
        check_single_payload(operation.parameters, operation.operation_id)

        ordered = order_parameters(operation.parameters)
        python_names = unique_names([sanitize_param_name(p.name) for p in ordered])
        parameters = tuple(
            CompiledParameter(
                parameter=p,
                python_name=py_name,
                annotation=self.definition_compiler.compile_type(p.type, p.required),
            )
            for p, py_name in zip(ordered, python_names)
        )

        return_node = select_return_node(operation.responses)
        return_type: Any = None
        decoder: Optional[TypeAdapter[Any]] = None
        if return_node is not None:
            return_type = self.definition_compiler.compile_type(return_node, True)
            decoder = TypeAdapter(return_type)

        name = method_name(operation, tag)
        logger.debug("Compiled %s %s as %s.%s", operation.method.value.upper(), operation.path, tag, name)
        return CompiledOperation(
            group=tag,
            method_name=name,
            operation=operation,
            parameters=parameters,
            return_node=return_node,
            return_type=return_type,
            binder=self.binder,
            _decoder=decoder,
        )
