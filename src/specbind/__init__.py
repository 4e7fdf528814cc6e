"""specbind -- Typed Python bindings for Swagger 2.0 / OpenAPI 3.x documents.

The package reads an API document and compiles every operation into a
callable with an ordered, typed signature and a request-construction
algorithm, grouped by the operation's first tag.

Typical usage::

    from specbind import ApiBinding

    api = ApiBinding.from_source("https://petstore.swagger.io/v2/swagger.json")
    pet = api.Pet.GetPetById(10)

The pipeline runs in two phases.  Compilation (``parser`` then ``compiler``)
is pure and happens once; the runtime (``client``) sends one request per
call.

Modules:
    models: Type model, document model and configuration.
    parser: Loading, ``$ref`` resolution, schema classification, adaptation.
    compiler: Grouping, signatures, return types and request binding.
    client: httpx transport and the attribute-style binding surface.
    config: Configuration precedence resolution.
    log: Optional Rich logging setup.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
"""

from specbind.client import ApiBinding, SyncClient
from specbind.compiler import OperationCompiler
from specbind.config import resolve_config
from specbind.parser import adapt_document, load_spec

__version__ = "0.1.0"

__all__ = [
    "ApiBinding",
    "OperationCompiler",
    "SyncClient",
    "adapt_document",
    "load_spec",
    "resolve_config",
]
