"""Request construction for compiled operations.

:class:`RequestBinder` turns bound argument values into a transport-neutral
:class:`PreparedRequest`.  Per invocation it:

1. coerces each argument to text (:func:`coerce_string`);
2. routes it by location -- ``{name}`` path placeholders, an ordered query
   list, headers appended after the binder's default headers, accumulated
   form fields, or the raw body value;
3. prefixes the resolved path with the base address;
4. serialises the payload: form fields are left for the transport to
   URL-encode, a body is JSON-encoded by :func:`encode_json_body` and gets
   ``Content-Type: application/json`` unless a header already sets one;
5. marks a POST without payload with an explicit ``Content-Length: 0``.

Decoding the reply is :func:`decode_response`.  Both directions share the
same JSON settings: ``None`` means "no value", is omitted when encoding, and
is what a ``null`` or absent optional field decodes to.
"""

from __future__ import annotations

import datetime
import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from specbind.exceptions import AmbiguousPayload, ArgumentShapeError, DecodeFailure
from specbind.models import (
    STRING,
    ArrayType,
    EnumType,
    HTTPMethod,
    Parameter,
    ParameterLocation,
)

logger = logging.getLogger(__name__)

# Written after every element regardless of the declared collection format.
ARRAY_SEPARATOR = ","

_PAYLOAD_LOCATIONS = (ParameterLocation.BODY, ParameterLocation.FORM_DATA)

PAYLOAD_BODY = "body"
PAYLOAD_FORM = "form"


@dataclass(frozen=True)
class PreparedRequest:
    """A fully resolved HTTP request, ready for the transport.

    ``content`` holds the JSON body bytes; ``form`` holds form fields for
    the transport to URL-encode.  At most one of them is set, and
    ``payload_kind`` says which (``"body"``, ``"form"`` or ``None``).
    """

    method: str
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    query: tuple[tuple[str, str], ...] = ()
    content: Optional[bytes] = None
    form: Optional[tuple[tuple[str, str], ...]] = None
    payload_kind: Optional[str] = None


def is_joined_array(parameter: Parameter) -> bool:
    """Whether *parameter* is an ``Array(String)`` or ``Array(Enum)``, joined on coercion."""
    node = parameter.type
    return isinstance(node, ArrayType) and (node.item == STRING or isinstance(node.item, EnumType))


def to_text(value: Any) -> str:
    """Default textual form of a scalar argument."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def coerce_string(parameter: Parameter, value: Any) -> str:
    """Coerce an argument to the string sent on the wire.

    ``Array(String)`` and ``Array(Enum)`` values are joined with ``","``
    written after *every* element, the last one included: ``["a", "b"]``
    becomes ``"a,b,"``.  The declared collection format does not change
    the separator.  Servers generated from the same tooling expect the
    trailing separator, so it is kept.
    """
    if is_joined_array(parameter):
        return "".join(f"{to_text(item)}{ARRAY_SEPARATOR}" for item in value)
    return to_text(value)


def check_single_payload(parameters: Sequence[Parameter], operation_id: str) -> None:
    """Fail unless the payload-bearing parameters form one payload.

    Allowed: nothing, exactly one ``body`` parameter, or any number of
    ``formData`` fields (they accumulate into one form).

    Raises:
        AmbiguousPayload: On two ``body`` parameters or ``body`` mixed with ``formData``.
    """
    bodies = [p.name for p in parameters if p.location == ParameterLocation.BODY]
    forms = [p.name for p in parameters if p.location == ParameterLocation.FORM_DATA]
    if len(bodies) > 1 or (bodies and forms):
        names = ", ".join(bodies + forms)
        raise AmbiguousPayload(
            f"Operation '{operation_id}' can only contain one payload (got: {names})"
        )


def _has_header(headers: Sequence[tuple[str, str]], name: str) -> bool:
    wanted = name.lower()
    return any(key.lower() == wanted for key, _ in headers)


def _strip_none(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Mapping):
        return {k: _strip_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_strip_none(v) for v in value]
    return value


def encode_json_body(value: Any, lowercase: bool = True) -> bytes:
    """Serialise a body payload to JSON bytes.

    ``None`` members are omitted, models are dumped by wire name.  With
    *lowercase* the serialised text is lower-cased as a whole -- keys *and*
    string values -- which is lossy for mixed-case data.
    """
    text = json.dumps(to_jsonable_python(_strip_none(value)))
    if lowercase:
        logger.debug("Lower-casing serialized JSON body")
        text = text.lower()
    return text.encode("utf-8")


def decode_response(text: str, adapter: Optional[TypeAdapter[Any]]) -> Any:
    """Decode response text with *adapter*; ``None`` adapter means the body is ignored.

    Raises:
        DecodeFailure: If the text is not valid for the return type.
    """
    if adapter is None:
        return None
    try:
        return adapter.validate_json(text)
    except ValidationError as exc:
        raise DecodeFailure(f"Response does not match the declared return type: {exc}") from exc


class RequestBinder:
    """Builds :class:`PreparedRequest` objects for one binding instance.

    The base address, default headers and JSON settings are captured once
    and shared by every operation; the binder holds no other state, so
    concurrent use needs no locking.

    Args:
        base_address: ``scheme://host`` plus base path, without trailing ``/``.
        default_headers: Ordered ``(name, value)`` pairs sent first on every request.
        lowercase_json_body: Passed to :func:`encode_json_body`.
    """

    def __init__(
        self,
        base_address: str,
        default_headers: Sequence[tuple[str, str]] = (),
        lowercase_json_body: bool = True,
    ) -> None:
        self.base_address = base_address.rstrip("/")
        self.default_headers = tuple((str(k), str(v)) for k, v in default_headers)
        self.lowercase_json_body = lowercase_json_body

    def bind(
        self,
        method: HTTPMethod,
        path: str,
        parameters: Sequence[Parameter],
        arguments: Mapping[str, Any],
    ) -> PreparedRequest:
        """Build the request for one invocation from values keyed by wire name.

        When two parameters share a wire name in different locations, a
        single key cannot address both; use :meth:`bind_values` instead.

        Args:
            method: The operation's HTTP method.
            path: The path template with ``{name}`` placeholders.
            parameters: Declared parameters, in compiled order.
            arguments: Values keyed by wire name.  ``None`` values and
                missing optional parameters are not sent.

        Raises:
            ArgumentShapeError: If an argument names no declared parameter
                or a required one is missing.
            AmbiguousPayload: If more than one payload would be attached.
        """
        declared = {p.name for p in parameters}
        unknown = [name for name in arguments if name not in declared]
        if unknown:
            raise ArgumentShapeError(f"Unknown argument(s): {', '.join(unknown)}")
        return self.bind_values(method, path, [(p, arguments.get(p.name)) for p in parameters])

    def bind_values(
        self,
        method: HTTPMethod,
        path: str,
        values: Sequence[tuple[Parameter, Any]],
    ) -> PreparedRequest:
        """Build the request from ``(parameter, value)`` pairs, in compiled order.

        Each value is routed by its own parameter, so parameters sharing a
        wire name in different locations keep their values apart.

        Raises:
            ArgumentShapeError: If a required parameter has no value.
            AmbiguousPayload: If more than one payload would be attached.
        """
        resolved_path = path
        query: list[tuple[str, str]] = []
        headers: list[tuple[str, str]] = list(self.default_headers)
        form: Optional[list[tuple[str, str]]] = None
        body: Any = None
        has_body = False

        for parameter, value in values:
            if value is None:
                if parameter.required:
                    raise ArgumentShapeError(f"Missing required argument '{parameter.name}'")
                continue

            location = parameter.location
            if location in _PAYLOAD_LOCATIONS:
                if has_body or (location == ParameterLocation.BODY and form is not None):
                    raise AmbiguousPayload("Can only contain one payload")
                if location == ParameterLocation.BODY:
                    body, has_body = value, True
                else:
                    form = (form or []) + [(parameter.name, coerce_string(parameter, value))]
            elif location == ParameterLocation.PATH:
                resolved_path = resolved_path.replace(
                    "{" + parameter.name + "}", coerce_string(parameter, value)
                )
            elif location == ParameterLocation.QUERY:
                query.append((parameter.name, coerce_string(parameter, value)))
            else:
                headers.append((parameter.name, coerce_string(parameter, value)))

        content: Optional[bytes] = None
        payload_kind: Optional[str] = None
        if has_body:
            content = encode_json_body(body, self.lowercase_json_body)
            if not _has_header(headers, "Content-Type"):
                headers.append(("Content-Type", "application/json"))
            payload_kind = PAYLOAD_BODY
        elif form is not None:
            payload_kind = PAYLOAD_FORM
        elif method == HTTPMethod.POST:
            headers.append(("Content-Length", "0"))

        return PreparedRequest(
            method=method.value.upper(),
            url=self.base_address + resolved_path,
            headers=tuple(headers),
            query=tuple(query),
            content=content,
            form=tuple(form) if form is not None else None,
            payload_kind=payload_kind,
        )
