from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape

console = Console()
stderr = Console(stderr=True)


def print_json(data: Any) -> None:
    console.print_json(data=data)


def info(msg: str) -> None:
    console.print(f"[bold cyan]•[/] {escape(msg)}")


def ok(msg: str) -> None:
    console.print(f"[bold green]OK[/] {escape(msg)}")


def warn(msg: str) -> None:
    console.print(f"[bold yellow]WARN[/] {escape(msg)}")


def err(msg: str) -> None:
    console.print(f"[bold red]ERR[/] {escape(msg)}")


def response(status: int, body: Any, *, json_only: bool = False) -> None:
    """Print a normalized API response; ``json_only`` drops the status line."""
    if json_only:
        print_json(body)
        return
    ok(f"HTTP {status}")
    if body is not None:
        print_json(body)


def api_error(status: int, status_text: str, message: Any) -> None:
    err(f"{status} {status_text}")
    if isinstance(message, (dict, list)):
        print_json(message)
    elif message:
        console.print(str(message), markup=False, highlight=False)
