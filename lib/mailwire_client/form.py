from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping
from urllib.parse import urlencode

from .attachments import PartOptions, is_stream, to_attachment

ATTACHMENT_KEYS = ("attachment", "inline")


def coerce_scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def is_absent(value: Any) -> bool:
    # 0 and False are real values; only None and "" mean "not provided"
    return value is None or (isinstance(value, str) and value == "")


def urlencode_body(data: Mapping[str, Any] | None) -> str | None:
    """Encode a flat mapping as ``key=value&...`` in insertion order.

    ``None`` means no body at all, which differs from an empty mapping
    (an empty but present body).
    """
    if data is None:
        return None
    return urlencode([(str(key), coerce_scalar(value)) for key, value in data.items()])


@dataclass(frozen=True)
class FormPart:
    name: str
    value: Any
    options: PartOptions | None = None

    @property
    def filename(self) -> str | None:
        return self.options.filename if self.options else None

    @property
    def content_type(self) -> str | None:
        return self.options.content_type if self.options else None

    @property
    def known_length(self) -> int | None:
        return self.options.known_length if self.options else None


class FormData:
    """Ordered multipart container; repeated names are separate parts."""

    def __init__(self) -> None:
        self._parts: list[FormPart] = []

    def append(self, name: str, value: Any, options: PartOptions | None = None) -> None:
        if options is None and not is_stream(value) and not isinstance(value, bytes):
            value = coerce_scalar(value)
        self._parts.append(FormPart(name=name, value=value, options=options))

    @property
    def parts(self) -> tuple[FormPart, ...]:
        return tuple(self._parts)

    def get_all(self, name: str) -> list[FormPart]:
        return [p for p in self._parts if p.name == name]

    def names(self) -> list[str]:
        return [p.name for p in self._parts]

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[FormPart]:
        return iter(self._parts)

    def to_files(self) -> list[tuple[str, Any]]:
        """Render as an httpx ``files=`` list, preserving part order."""
        files: list[tuple[str, Any]] = []
        for part in self._parts:
            if part.options is not None:
                files.append((part.name, (part.filename, part.value, part.content_type)))
            elif is_stream(part.value):
                # bare handle: httpx takes the filename from the handle itself
                files.append((part.name, part.value))
            else:
                files.append((part.name, (None, part.value)))
        return files


def create_form_data(data: Mapping[str, Any]) -> FormData:
    form = FormData()
    for key, value in data.items():
        if is_absent(value):
            continue

        if key in ATTACHMENT_KEYS:
            items = value if isinstance(value, (list, tuple)) else [value]
            for item in items:
                attachment = to_attachment(item)
                form.append(key, attachment.value(), attachment.part_options())
            continue

        if isinstance(value, (list, tuple)):
            for item in value:
                form.append(key, item)
        else:
            form.append(key, value)
    return form
