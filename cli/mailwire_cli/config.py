from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from . import console

APP_NAME = "mailwire"
CONFIG_FILENAME = "config.toml"
DEFAULT_BASE_URL = "http://127.0.0.1:8025/v3"
DEFAULT_TIMEOUT_S = 15.0
ENV_BASE_URL = "MAILWIRE_BASE_URL"
ENV_USERNAME = "MAILWIRE_USERNAME"
ENV_KEY = "MAILWIRE_KEY"

_WARNED_BASE_URL_SCHEME = False


@dataclass
class AuthConfig:
    username: str = "api"
    key: str = ""


@dataclass
class AppConfig:
    base_url: str
    auth: AuthConfig
    timeout_s: float = DEFAULT_TIMEOUT_S
    headers: dict[str, str] = field(default_factory=dict)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig(
        base_url=DEFAULT_BASE_URL,
        auth=AuthConfig(username="api", key=""),
        timeout_s=DEFAULT_TIMEOUT_S,
        headers={},
    )


def normalize_base_url(raw: str | None, *, warn: bool = False) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"

    normalized = f"{scheme}{value}"
    if warn:
        _warn_missing_scheme(normalized)
    return normalized


def _warn_missing_scheme(normalized: str) -> None:
    global _WARNED_BASE_URL_SCHEME
    if _WARNED_BASE_URL_SCHEME:
        return
    if not _is_interactive():
        return
    console.warn(f"base_url missing scheme, assuming {normalized}")
    _WARNED_BASE_URL_SCHEME = True


def _is_interactive() -> bool:
    import sys
    return bool(sys.stderr.isatty() or sys.stdout.isatty())


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def _parse_timeout(raw: Any, fallback: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value > 0 else fallback


def _parse_headers(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items() if v is not None}


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    return _prune_none(
        {
            "base_url": cfg.base_url,
            "timeout_s": cfg.timeout_s,
            "auth": {
                "username": cfg.auth.username,
                "key": cfg.auth.key,
            },
            "headers": dict(cfg.headers),
        }
    )


def _prune_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_prune_none(item) for item in value if item is not None]
    return value


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    base_url = normalize_base_url(str(data.get("base_url") or ""), warn=True)
    if base_url:
        cfg.base_url = base_url
    cfg.timeout_s = _parse_timeout(data.get("timeout_s"), DEFAULT_TIMEOUT_S)
    auth_raw = data.get("auth") or {}
    if isinstance(auth_raw, dict):
        cfg.auth = AuthConfig(
            username=str(auth_raw.get("username") or "api"),
            key=str(auth_raw.get("key") or ""),
        )
    cfg.headers = _parse_headers(data.get("headers"))
    return cfg


def _read_toml() -> dict[str, Any] | None:
    try:
        with open(config_path(), "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return None


def load_config() -> AppConfig:
    data = _read_toml()
    if data is None:
        return default_config()
    return from_toml(data)


def apply_profile(cfg: AppConfig, profile: str | None) -> AppConfig:
    if not profile:
        return cfg
    data = _read_toml()
    if data is None:
        return cfg

    profiles_raw = data.get("profiles") or {}
    if not isinstance(profiles_raw, dict):
        return cfg
    prof = profiles_raw.get(profile)
    if not isinstance(prof, dict):
        console.warn(f"Profile {profile!r} not found, using defaults.")
        return cfg

    base_url = normalize_base_url(str(prof.get("base_url") or cfg.base_url), warn=True)
    headers = dict(cfg.headers)
    headers.update(_parse_headers(prof.get("headers")))
    return AppConfig(
        base_url=base_url or cfg.base_url,
        auth=AuthConfig(
            username=str(prof.get("username") or cfg.auth.username),
            key=str(prof.get("key") or cfg.auth.key),
        ),
        timeout_s=_parse_timeout(prof.get("timeout_s"), cfg.timeout_s),
        headers=headers,
    )


def apply_env(cfg: AppConfig) -> AppConfig:
    base_url = os.getenv(ENV_BASE_URL, "").strip()
    username = os.getenv(ENV_USERNAME, "").strip()
    key = os.getenv(ENV_KEY, "").strip()
    return replace(
        cfg,
        base_url=normalize_base_url(base_url) if base_url else cfg.base_url,
        auth=AuthConfig(username=username or cfg.auth.username, key=key or cfg.auth.key),
    )


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    # holds the API key
    os.chmod(path, 0o600)
    return path


def split_header_arg(raw: str) -> tuple[str, str] | None:
    """Split ``Name: value`` or ``Name=value`` at whichever separator comes first."""
    positions = [i for i in (raw.find(":"), raw.find("=")) if i >= 0]
    if not positions:
        return None
    cut = min(positions)
    return raw[:cut].strip(), raw[cut + 1:].strip()
