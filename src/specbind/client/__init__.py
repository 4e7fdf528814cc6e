"""Runtime for compiled operations.

Classes:
    :class:`SyncClient` -- sends prepared requests through :class:`httpx.Client`.
    :class:`ApiBinding` -- exposes compiled groups and operations as attributes.

Example::

    from specbind.client import ApiBinding

    with ApiBinding.from_source("petstore.yaml") as api:
        pets = api.Pets.ListPets(limit=10)
"""

from specbind.client.binding import ApiBinding
from specbind.client.sync_client import SyncClient

__all__ = ["ApiBinding", "SyncClient"]
