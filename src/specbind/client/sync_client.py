"""Synchronous transport for prepared requests.

:class:`SyncClient` is the thin runtime half of specbind: it sends the
:class:`~specbind.compiler.binder.PreparedRequest` a compiled operation
builds, maps failures onto :class:`~specbind.exceptions.TransportFailure`,
and hands the response text back for decoding.  It performs exactly one
round trip per call: no retry, no caching.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from specbind.compiler.binder import PreparedRequest
from specbind.compiler.operation_compiler import CompiledOperation
from specbind.exceptions import TransportFailure
from specbind.models import BinderConfig

logger = logging.getLogger(__name__)


class SyncClient:
    """Blocking HTTP client backed by :class:`httpx.Client`.

    The underlying :class:`httpx.Client` is created on first use (or on
    ``__enter__``) and closed by :meth:`close` / ``__exit__``.

    Args:
        config: Timeout, SSL and redirect settings.  Defaults to
            :class:`~specbind.models.BinderConfig` defaults.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        with SyncClient(config) as client:
            pets = client.invoke(operation, limit=10)
    """

    def __init__(
        self,
        config: Optional[BinderConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or BinderConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        self._get_client()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying connection, if one was opened."""
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def send(self, prepared: PreparedRequest) -> str:
        """Send *prepared* and return the response text.

        Raises:
            TransportFailure: On network errors, or when the server answers
                with a status of 400 or above.
        """
        kwargs: dict[str, Any] = {
            "method": prepared.method,
            "url": prepared.url,
            "headers": list(prepared.headers),
            "params": list(prepared.query),
        }
        if prepared.form is not None:
            kwargs["data"] = dict(prepared.form)
        elif prepared.content is not None:
            kwargs["content"] = prepared.content

        logger.debug("%s %s", prepared.method, prepared.url)
        try:
            response = self._get_client().request(**kwargs)
        except httpx.HTTPError as exc:
            raise TransportFailure(
                f"{prepared.method} {prepared.url} failed: {exc}"
            ) from exc

        self._map_response_error(response)
        return response.text

    def invoke(self, operation: CompiledOperation, *args: Any, **kwargs: Any) -> Any:
        """Build, send and decode one call of *operation*."""
        prepared = operation.build_request(*args, **kwargs)
        return operation.decode(self.send(prepared))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._config.timeout,
                verify=self._config.verify_ssl,
                follow_redirects=self._config.follow_redirects,
                transport=self._transport,
            )
        return self._client

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise :class:`TransportFailure` for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        # Try to extract an error message from the response body.
        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix
        raise TransportFailure(full_msg, status_code=status, body=response.text)
