from __future__ import annotations

import os

import typer

from .. import console
from ..config import config_path, default_config, load_config, normalize_base_url, save_config, split_header_arg

app = typer.Typer(help="Manage local CLI settings (~/.config/mailwire/config.toml).")


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        base_url: str = typer.Option(
            ...,
            "--base-url",
            prompt="API base URL",
            help="API base URL like https://api.example.com/v3",
        ),
        username: str = typer.Option("api", "--username", help="Basic auth username."),
        key: str = typer.Option(
            ...,
            "--key",
            prompt="API key",
            hide_input=True,
            help="API key used as the Basic auth secret.",
        ),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.base_url = normalize_base_url(base_url, warn=True)
    if not cfg.base_url:
        console.err("Base URL cannot be empty.")
        raise typer.Exit(code=2)
    cfg.auth.username = username.strip() or "api"
    cfg.auth.key = key.strip()
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    key_state = "(set)" if (cfg.auth.key or "").strip() else "(empty)"
    console.console.print(
        f"base_url={cfg.base_url} username={cfg.auth.username} key={key_state} timeout_s={cfg.timeout_s}",
        markup=False,
    )
    for name, value in cfg.headers.items():
        console.console.print(f"header {name}: {value}", markup=False)


@app.command("get")
def get_setting(
        key: str = typer.Argument(..., help="Setting key (base_url, username, timeout_s)."),
):
    cfg = load_config()
    k = key.strip().lower()
    if k == "base_url":
        console.console.print(cfg.base_url, markup=False)
        return
    if k == "username":
        console.console.print(cfg.auth.username, markup=False)
        return
    if k == "timeout_s":
        console.console.print(str(cfg.timeout_s))
        return
    console.err(f"Unknown setting: {key}")
    raise typer.Exit(code=2)


@app.command("set")
def set_setting(
        base_url: str | None = typer.Option(None, "--base-url", help="Set API base URL."),
        username: str | None = typer.Option(None, "--username", help="Set Basic auth username."),
        key: str | None = typer.Option(None, "--key", help="Set API key."),
        timeout_s: float | None = typer.Option(None, "--timeout", min=0.1, help="Set request timeout in seconds."),
        header: list[str] | None = typer.Option(
            None, "--header", "-H", help="Default header 'Name: value'; empty value removes it (repeatable).",
        ),
):
    cfg = load_config()
    if base_url is not None:
        cfg.base_url = normalize_base_url(base_url, warn=True)
    if username is not None:
        cfg.auth.username = username.strip()
    if key is not None:
        cfg.auth.key = key.strip()
    if timeout_s is not None:
        cfg.timeout_s = timeout_s
    for raw in header or []:
        name, value = split_header_arg(raw) or (raw.strip(), "")
        if not name:
            console.err(f"Invalid --header value {raw!r}.")
            raise typer.Exit(code=2)
        if value:
            cfg.headers[name] = value
        else:
            cfg.headers.pop(name, None)
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")
