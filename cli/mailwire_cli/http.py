from __future__ import annotations

from mailwire_client import RequestBuilder
from mailwire_client.config_types import ClientConfig

from .config import AppConfig, apply_env, apply_profile, normalize_base_url


def make_builder(
    cfg: AppConfig,
    *,
    profile: str | None,
    base_url_override: str | None,
) -> RequestBuilder:
    effective_cfg = apply_env(apply_profile(cfg, profile))
    base_url = normalize_base_url(base_url_override or effective_cfg.base_url, warn=True)
    return RequestBuilder(
        ClientConfig(
            username=effective_cfg.auth.username,
            key=effective_cfg.auth.key,
            base_url=base_url,
            timeout_s=effective_cfg.timeout_s,
            headers=effective_cfg.headers,
        )
    )
