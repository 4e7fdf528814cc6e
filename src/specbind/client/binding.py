"""Runtime binding: one attribute per tag group, one method per operation.

:class:`ApiBinding` is the generated surface.  It compiles an API document
once and exposes each :class:`~specbind.compiler.OperationGroup` as a
namespace attribute named after the group's PascalCase type name.  Every
operation becomes a callable carrying the compiled ``__signature__`` and
the operation summary as ``__doc__``::

    api = ApiBinding.from_source("petstore.yaml")
    api.Pets.ListPets(limit=10)
    api["pets"].ShowPetById("42")
"""

from __future__ import annotations

import functools
import logging
from types import SimpleNamespace
from typing import Any, Callable, Optional

import httpx

from specbind.client.sync_client import SyncClient
from specbind.compiler.definitions import DefinitionCompiler, PydanticDefinitionCompiler
from specbind.compiler.operation_compiler import (
    CompiledOperation,
    OperationCompiler,
    OperationGroup,
)
from specbind.models import ApiDocument, BinderConfig
from specbind.parser import adapt_document, load_spec, parse_spec_text

logger = logging.getLogger(__name__)


def _make_method(client: SyncClient, operation: CompiledOperation) -> Callable[..., Any]:
    """Wrap *operation* in a plain function that ``inspect`` and ``help()`` understand."""

    def call(*args: Any, **kwargs: Any) -> Any:
        return client.invoke(operation, *args, **kwargs)

    call.__name__ = operation.method_name
    call.__qualname__ = f"{operation.group}.{operation.method_name}"
    call.__doc__ = operation.summary
    call.__signature__ = operation.signature()  # type: ignore[attr-defined]
    call.operation = operation  # type: ignore[attr-defined]
    return call


class ApiBinding:
    """Typed, callable view of an API document.

    Args:
        document: The adapted API document.
        config: Binder and transport settings.
        client: Transport to use.  A :class:`SyncClient` built from
            *config* when omitted.
        definition_compiler: Type collaborator; defaults to
            :class:`~specbind.compiler.PydanticDefinitionCompiler`.
        transport: Optional httpx transport for the default client.

    Raises:
        UnsupportedSchemaConstruct: Raised while adapting, before any
            binding exists.
        AmbiguousPayload: If an operation declares conflicting payloads.
    """

    def __init__(
        self,
        document: ApiDocument,
        config: Optional[BinderConfig] = None,
        client: Optional[SyncClient] = None,
        definition_compiler: Optional[DefinitionCompiler] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.document = document
        self.config = config or BinderConfig()
        self.client = client or SyncClient(self.config, transport=transport)
        self._definitions = definition_compiler or PydanticDefinitionCompiler(
            document.definitions
        )
        compiler = OperationCompiler(
            document, definition_compiler=self._definitions, config=self.config
        )
        self.groups: list[OperationGroup] = compiler.compile()
        self._by_tag: dict[str, SimpleNamespace] = {}
        for group in self.groups:
            namespace = SimpleNamespace(
                **{op.method_name: _make_method(self.client, op) for op in group.operations}
            )
            namespace.__doc__ = group.description
            self._by_tag[group.name] = namespace
            if hasattr(type(self), group.type_name) or group.type_name in vars(self):
                logger.warning(
                    "Group %s clashes with an existing attribute; use binding[%r]",
                    group.type_name, group.name,
                )
                continue
            setattr(self, group.type_name, namespace)

    @classmethod
    def from_source(cls, source: str, **kwargs: Any) -> ApiBinding:
        """Load a document from a file path, URL or ``"-"`` (stdin) and bind it."""
        return cls(adapt_document(load_spec(source)), **kwargs)

    @classmethod
    def from_text(cls, content: str, **kwargs: Any) -> ApiBinding:
        """Bind a document given as JSON or YAML text."""
        return cls(adapt_document(parse_spec_text(content)), **kwargs)

    @functools.cached_property
    def models(self) -> dict[str, Any]:
        """Concrete types for every named definition, keyed by document name."""
        if isinstance(self._definitions, PydanticDefinitionCompiler):
            return self._definitions.compile_definitions()
        return {
            d.name: self._definitions.compile_type(d.type, True)
            for d in self.document.definitions
        }

    def operations(self) -> list[CompiledOperation]:
        """All compiled operations, group by group."""
        return [op for group in self.groups for op in group.operations]

    def __getitem__(self, tag: str) -> SimpleNamespace:
        """Return the namespace for grouping tag *tag* (``"Root"`` for untagged operations)."""
        return self._by_tag[tag]

    def __enter__(self) -> ApiBinding:
        self.client.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self.client.close()

    def close(self) -> None:
        self.client.close()
