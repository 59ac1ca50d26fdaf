from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class ClientConfig:
    username: str
    key: str
    base_url: str
    timeout_s: float = 15.0
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # frozen: copy default headers so later mutation by the caller is not observed
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))


@dataclass(frozen=True)
class CallOptions:
    """Per-call request options.

    A header value of ``None`` removes that header from the outgoing request.
    """

    query: Mapping[str, Any] | None = None
    headers: Mapping[str, str | None] | None = None
    body: bytes | str | None = None
    files: list[tuple[str, Any]] | None = None
