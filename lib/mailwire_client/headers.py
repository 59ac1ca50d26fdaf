from __future__ import annotations

import base64
import logging
from typing import Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

AUTHORIZATION = "Authorization"
CONTENT_TYPE = "Content-Type"
FORM_URLENCODED = "application/x-www-form-urlencoded"

HeaderLayer = Optional[Mapping[str, Optional[str]]]


def basic_auth_header(username: str | None, key: str | None) -> str:
    credentials = f"{username or ''}:{key or ''}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


def merge_headers(*layers: HeaderLayer) -> httpx.Headers:
    """Merge header layers, later layers overriding earlier ones.

    Names compare case-insensitively. A ``None`` value removes the header
    set by an earlier layer, e.g. a multipart call clearing
    ``Content-Type`` so httpx can emit its own boundary. An empty
    ``Content-Type`` is removed too; other empty values are sent as-is.
    """
    merged = httpx.Headers()
    for layer in layers:
        for name, value in (layer or {}).items():
            if value is None or (value == "" and name.lower() == CONTENT_TYPE.lower()):
                if name in merged:
                    del merged[name]
                continue
            merged[name] = str(value)
    return merged


def build_headers(
        authorization: str,
        defaults: HeaderLayer = None,
        *call_layers: HeaderLayer,
) -> httpx.Headers:
    """Headers for one call: computed auth < instance defaults < call headers.

    Authorization always ends up as the computed value; a default or call
    header of the same name never replaces credentials.
    """
    headers = merge_headers({AUTHORIZATION: authorization}, defaults, *call_layers)
    if headers.get(AUTHORIZATION) != authorization:
        logger.debug("ignoring caller-supplied %s header", AUTHORIZATION)
    headers[AUTHORIZATION] = authorization
    return headers
