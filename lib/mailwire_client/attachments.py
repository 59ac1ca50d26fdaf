from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Mapping, Union

DEFAULT_FILENAME = "file"


@dataclass(frozen=True)
class BytesPayload:
    data: bytes


@dataclass(frozen=True)
class StreamPayload:
    handle: BinaryIO


AttachmentPayload = Union[BytesPayload, StreamPayload]


@dataclass(frozen=True)
class Attachment:
    payload: AttachmentPayload
    filename: str | None = None
    content_type: str | None = None
    known_length: int | None = None

    @classmethod
    def from_bytes(
            cls,
            data: bytes | str,
            *,
            filename: str | None = None,
            content_type: str | None = None,
            known_length: int | None = None,
    ) -> "Attachment":
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls(BytesPayload(bytes(data)), filename, content_type, known_length)

    @classmethod
    def from_stream(
            cls,
            handle: BinaryIO,
            *,
            filename: str | None = None,
            content_type: str | None = None,
            known_length: int | None = None,
    ) -> "Attachment":
        return cls(StreamPayload(handle), filename, content_type, known_length)

    @property
    def is_bare_stream(self) -> bool:
        """A stream handed over without any metadata of its own."""
        return (
            isinstance(self.payload, StreamPayload)
            and not self.filename
            and not self.content_type
            and not self.known_length
        )

    def part_options(self) -> "PartOptions | None":
        if self.is_bare_stream:
            return None
        return PartOptions(
            filename=self.filename or DEFAULT_FILENAME,
            content_type=self.content_type or None,
            known_length=self.known_length or None,
        )

    def value(self) -> bytes | BinaryIO:
        if isinstance(self.payload, StreamPayload):
            return self.payload.handle
        return self.payload.data


@dataclass(frozen=True)
class PartOptions:
    filename: str | None = None
    content_type: str | None = None
    known_length: int | None = None


def is_stream(value: Any) -> bool:
    return hasattr(value, "read") and callable(value.read) and not isinstance(value, (bytes, str))


def to_attachment(item: Any) -> Attachment:
    """Convert a caller-supplied attachment description into an ``Attachment``.

    Accepts an ``Attachment``, a binary stream, raw bytes, or a mapping with
    ``data`` plus optional ``filename``, ``contentType``/``content_type`` and
    ``knownLength``/``known_length``.
    """
    if isinstance(item, Attachment):
        return item
    if isinstance(item, (bytes, bytearray, str)):
        return Attachment.from_bytes(item)
    if is_stream(item):
        return Attachment.from_stream(item)
    if isinstance(item, Mapping):
        data = item.get("data")
        filename = item.get("filename") or DEFAULT_FILENAME
        content_type = item.get("contentType") or item.get("content_type")
        known_length = item.get("knownLength") or item.get("known_length")
        if is_stream(data):
            return Attachment.from_stream(
                data,
                filename=filename,
                content_type=content_type,
                known_length=known_length,
            )
        if data is None:
            raise TypeError("attachment mapping requires a 'data' entry")
        return Attachment.from_bytes(
            data,
            filename=filename,
            content_type=content_type,
            known_length=known_length,
        )
    raise TypeError(f"unsupported attachment type: {type(item).__name__}")
