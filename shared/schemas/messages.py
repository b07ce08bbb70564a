"""Wire primitives shared by every robostate message.

This module defines the frozen Pydantic base used by all schema types, the
forward-compatible integer enum base, and the common request/response
headers. Messages are serialized using MessagePack with JSON fallback.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Self

import msgpack
from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class MessageBase(BaseModel):
    """Base class for all messages.

    Messages are immutable snapshots: fields cannot be reassigned after
    construction and repeated fields are stored as tuples.
    """

    model_config = ConfigDict(frozen=True)

    def to_msgpack(self) -> bytes:
        """Serialize message to MessagePack format."""
        data = self.model_dump(mode="json")
        return msgpack.packb(data)  # type: ignore[return-value]

    @classmethod
    def from_msgpack(cls, data: bytes) -> Self:
        """Deserialize message from MessagePack format."""
        return cls.model_validate(msgpack.unpackb(data))

    def to_json(self) -> str:
        """Serialize message to JSON string."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str | bytes) -> Self:
        """Deserialize message from JSON string."""
        return cls.model_validate_json(data)


class WireEnum(IntEnum):
    """Integer enum with a zero-valued UNKNOWN sentinel.

    Values received from newer producers that this code does not know about
    decode to the zero member instead of failing validation. Every subclass
    must define a member with value 0.
    """

    @classmethod
    def _missing_(cls, value: object) -> "WireEnum | None":
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(0)
        return None


def select_variant(
    data: Any,
    variants: Mapping[str, Any],
    target: str,
    owner: str,
) -> tuple[Any, str | None, Any]:
    """Collapse a one-of field given in wire form into a single entry.

    Accepts either the already-collapsed ``target`` key or exactly one of the
    named ``variants`` keys. Raises ValueError when no variant or more than
    one variant is present.

    Args:
        data: Raw input handed to a ``mode="before"`` model validator
        variants: Wire variant names mapped to a tag returned with the selection
        target: Name of the field holding the selected payload
        owner: Message name used in error text

    Returns:
        Tuple of (remaining data, selected variant name, mapped value). Name and
        mapped value are None when the target key was given or data is not a mapping
    """
    if not isinstance(data, Mapping):
        return data, None, None

    data = dict(data)
    present = [name for name in variants if name in data and data[name] is not None]
    for name in variants:
        if name in data and data[name] is None:
            del data[name]

    has_target = data.get(target) is not None
    count = len(present) + (1 if has_target else 0)
    if count == 0:
        raise ValueError(f"{owner} requires exactly one of {sorted(variants)}, got none")
    if count > 1:
        raise ValueError(f"{owner} requires exactly one of {sorted(variants)}, got {count}")

    if has_target:
        return data, None, None

    name = present[0]
    data[target] = data.pop(name)
    return data, name, variants[name]


class ErrorCode(WireEnum):
    """Status codes carried in a response header."""

    UNSPECIFIED = 0
    OK = 1
    INTERNAL_SERVER_ERROR = 2
    MALFORMED = 3
    NOT_FOUND = 4
    UNAVAILABLE = 5


class CommonError(MessageBase):
    """Outcome of a request.

    Attributes:
        code: Status code, OK on success
        message: Human-readable detail for non-OK codes
    """

    code: ErrorCode = ErrorCode.UNSPECIFIED
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.code == ErrorCode.OK


class RequestHeader(MessageBase):
    """Caller identity and context; passed through to the response untouched.

    Attributes:
        request_timestamp: Client clock when the request was sent
        client_name: Name of the requesting client
        disable_rpc_logging: Ask the server not to log this request
    """

    request_timestamp: AwareDatetime | None = None
    client_name: str = ""
    disable_rpc_logging: bool = False


class ResponseHeader(MessageBase):
    """Header attached to every response.

    Attributes:
        request_header: Copy of the request header
        request_received_timestamp: Server clock when the request arrived
        response_timestamp: Server clock when the response was built
        error: Request outcome
    """

    request_header: RequestHeader = Field(default_factory=RequestHeader)
    request_received_timestamp: AwareDatetime | None = None
    response_timestamp: AwareDatetime | None = None
    error: CommonError = Field(default_factory=CommonError)
