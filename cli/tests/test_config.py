from __future__ import annotations

import os
import stat

from mailwire_cli import config


def test_save_and_load_round_trip(tmp_path, monkeypatch) -> None:
    def _config_dir(_: str) -> str:
        return str(tmp_path)

    monkeypatch.setattr(config, "user_config_dir", _config_dir)
    cfg = config.AppConfig(
        base_url="https://api.example.test/v3",
        auth=config.AuthConfig(username="api", key="secret"),
        timeout_s=5.0,
        headers={"X-Team": "core"},
    )

    path = config.save_config(cfg)
    loaded = config.load_config()

    assert loaded == cfg
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


def test_load_config_missing_file_returns_default(tmp_path, monkeypatch) -> None:
    def _config_dir(_: str) -> str:
        return str(tmp_path / "nope")

    monkeypatch.setattr(config, "user_config_dir", _config_dir)
    assert config.load_config() == config.default_config()


def test_from_toml_ignores_bad_values() -> None:
    cfg = config.from_toml({"timeout_s": "soon", "auth": "oops", "headers": ["x"]})
    assert cfg.timeout_s == config.DEFAULT_TIMEOUT_S
    assert cfg.auth == config.AuthConfig()
    assert cfg.headers == {}


def test_unknown_profile_keeps_config(tmp_path, monkeypatch) -> None:
    def _config_dir(_: str) -> str:
        return str(tmp_path)

    monkeypatch.setattr(config, "user_config_dir", _config_dir)
    cfg = config.default_config()
    config.save_config(cfg)
    assert config.apply_profile(cfg, "missing") == cfg


def test_normalize_base_url_defaults_to_https() -> None:
    assert config.normalize_base_url("api.example.com/v3") == "https://api.example.com/v3"


def test_normalize_base_url_defaults_to_http_for_localhost() -> None:
    assert config.normalize_base_url("127.0.0.1:8025") == "http://127.0.0.1:8025"


def test_normalize_base_url_strips_trailing_slash() -> None:
    assert config.normalize_base_url("https://example.com/") == "https://example.com"


def test_split_header_arg_uses_first_separator() -> None:
    assert config.split_header_arg("X-Callback=http://h.test/x") == ("X-Callback", "http://h.test/x")
    assert config.split_header_arg("X-Query: a=b") == ("X-Query", "a=b")
    assert config.split_header_arg("X-Empty=") == ("X-Empty", "")
    assert config.split_header_arg("no-separator") is None
