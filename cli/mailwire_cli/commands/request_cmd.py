from __future__ import annotations

import asyncio
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx
import typer
from mailwire_client import ApiError, Attachment, CallOptions, RequestBuilder
from mailwire_client.responses import ApiResponse

from .. import console
from ..config import load_config, split_header_arg
from ..http import make_builder

QUERY_VERBS = ("get", "head", "options")
BODY_VERBS = ("post", "put", "patch", "delete")


def _parse_pairs(values: list[str] | None, *, option: str, allow_repeat: bool = True) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for raw in values or []:
        if "=" not in raw:
            console.err(f"Invalid {option} value {raw!r}: expected key=value.")
            raise typer.Exit(code=2)
        key, value = raw.split("=", 1)
        key = key.strip()
        if key in result:
            if not allow_repeat:
                console.err(f"Duplicate {option} key {key!r}: url-encoded bodies are flat.")
                raise typer.Exit(code=2)
            existing = result[key]
            result[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            result[key] = value
    return result


def _parse_headers(values: list[str] | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values or []:
        pair = split_header_arg(raw)
        if pair is None or not pair[0]:
            console.err(f"Invalid --header value {raw!r}: expected 'Name: value'.")
            raise typer.Exit(code=2)
        headers[pair[0]] = pair[1]
    return headers


def _call_options(header: list[str] | None) -> CallOptions | None:
    headers = _parse_headers(header)
    return CallOptions(headers=headers) if headers else None


def _execute(
        call: Callable[[RequestBuilder], Awaitable[ApiResponse]],
        *,
        profile: str | None,
        base_url: str | None,
        json_out: bool,
) -> None:
    cfg = load_config()

    async def _run() -> ApiResponse:
        async with make_builder(cfg, profile=profile, base_url_override=base_url) as builder:
            return await call(builder)

    try:
        result = asyncio.run(_run())
    except ApiError as e:
        console.api_error(e.status, e.status_text, e.message)
        raise typer.Exit(code=1)
    except httpx.RequestError as e:
        console.err(f"Network error: {e}")
        raise typer.Exit(code=1)
    console.response(result.status, result.body, json_only=json_out)


def query_command(verb: str) -> Callable[..., None]:
    def command(
            path: str = typer.Argument(..., help="Path relative to base_url, e.g. /domains."),
            query: list[str] | None = typer.Option(None, "--query", "-q", help="Query parameter key=value (repeatable)."),
            header: list[str] | None = typer.Option(None, "--header", "-H", help="Extra header 'Name: value' (repeatable)."),
            profile: str | None = typer.Option(None, "--profile", help="Config profile to use."),
            base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
            json_out: bool = typer.Option(False, "--json", help="Print the JSON body only."),
    ) -> None:
        params = _parse_pairs(query, option="--query")
        options = _call_options(header)
        _execute(
            lambda builder: getattr(builder, verb)(path, params, options),
            profile=profile,
            base_url=base_url,
            json_out=json_out,
        )

    command.__name__ = f"{verb}_cmd"
    command.__doc__ = f"Send a {verb.upper()} request with a query string."
    return command


def body_command(verb: str) -> Callable[..., None]:
    def command(
            path: str = typer.Argument(..., help="Path relative to base_url, e.g. /messages."),
            data: list[str] | None = typer.Option(None, "--data", "-d", help="Form field key=value (repeatable)."),
            header: list[str] | None = typer.Option(None, "--header", "-H", help="Extra header 'Name: value' (repeatable)."),
            profile: str | None = typer.Option(None, "--profile", help="Config profile to use."),
            base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
            json_out: bool = typer.Option(False, "--json", help="Print the JSON body only."),
    ) -> None:
        fields = _parse_pairs(data, option="--data", allow_repeat=False) if data else None
        options = _call_options(header)
        _execute(
            lambda builder: getattr(builder, verb)(path, fields, options),
            profile=profile,
            base_url=base_url,
            json_out=json_out,
        )

    command.__name__ = f"{verb}_cmd"
    command.__doc__ = f"Send a {verb.upper()} request with a url-encoded body."
    return command


def upload(
        path: str = typer.Argument(..., help="Path relative to base_url, e.g. /messages."),
        data: list[str] | None = typer.Option(None, "--data", "-d", help="Form field key=value (repeatable)."),
        attach: list[Path] | None = typer.Option(
            None, "--attach", "-a", exists=True, dir_okay=False, readable=True,
            help="File sent as an 'attachment' part (repeatable).",
        ),
        inline: list[Path] | None = typer.Option(
            None, "--inline", "-i", exists=True, dir_okay=False, readable=True,
            help="File sent as an 'inline' part (repeatable).",
        ),
        put: bool = typer.Option(False, "--put", help="Use PUT instead of POST."),
        profile: str | None = typer.Option(None, "--profile", help="Config profile to use."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
        json_out: bool = typer.Option(False, "--json", help="Print the JSON body only."),
) -> None:
    """Send a multipart/form-data request with optional file parts."""
    fields = _parse_pairs(data, option="--data")

    with ExitStack() as stack:
        def _open(files: list[Path] | None) -> list[Attachment]:
            return [
                Attachment.from_stream(stack.enter_context(open(p, "rb")), filename=p.name)
                for p in files or []
            ]

        if attach:
            fields["attachment"] = _open(attach)
        if inline:
            fields["inline"] = _open(inline)

        def _call(builder: RequestBuilder) -> Awaitable[ApiResponse]:
            if put:
                return builder.put_multi(path, fields)
            return builder.post_multi(path, fields)

        _execute(_call, profile=profile, base_url=base_url, json_out=json_out)
