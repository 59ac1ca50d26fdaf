from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterable

import httpx

from .errors import ApiError, AuthError


@dataclass(frozen=True)
class ApiResponse:
    status: int
    body: Any


async def drain_stream(chunks: AsyncIterable[bytes | str]) -> str:
    """Concatenate every chunk of a byte stream and decode it as UTF-8.

    Invalid bytes are replaced rather than raised. Chunks are buffered in
    memory without a size cap; error bodies are expected to be small.
    """
    buffer: list[bytes] = []
    async for chunk in chunks:
        buffer.append(chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk))
    return b"".join(buffer).decode("utf-8", errors="replace")


def is_json_response(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def read_json(response: httpx.Response) -> Any:
    content = await response.aread()
    if not content.strip():
        return None
    return response.json()


async def normalize_response(response: httpx.Response) -> ApiResponse:
    if response.is_success:
        return ApiResponse(status=response.status_code, body=await read_json(response))

    if is_json_response(response):
        try:
            message = await read_json(response)
        except ValueError:
            # declared JSON but the body is not; keep the text
            message = response.text
    else:
        message = await drain_stream(response.aiter_bytes())

    error_cls = AuthError if response.status_code in (401, 403) else ApiError
    raise error_cls(response.status_code, response.reason_phrase, {"message": message})
