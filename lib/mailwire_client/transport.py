from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

import httpx

from .config_types import CallOptions, ClientConfig
from .form import FormData, create_form_data, urlencode_body
from .headers import CONTENT_TYPE, FORM_URLENCODED, HeaderLayer, basic_auth_header, build_headers
from .responses import ApiResponse, normalize_response

logger = logging.getLogger(__name__)

USER_AGENT = "mailwire-client/0.1.0"


class RequestBuilder:
    """Builds authenticated requests and normalizes what comes back.

    Only the config and the httpx client are shared between calls, so one
    instance can serve any number of concurrent requests. A client passed in
    by the caller is left open by ``aclose()``.
    """

    def __init__(self, cfg: ClientConfig, *, client: httpx.AsyncClient | None = None):
        self._cfg = cfg
        self._authorization = basic_auth_header(cfg.username, cfg.key)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=cfg.base_url.rstrip("/"),
            timeout=cfg.timeout_s,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RequestBuilder":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def request(
            self,
            method: str,
            url: str,
            options: CallOptions | None = None,
            *,
            headers: HeaderLayer = None,
    ) -> ApiResponse:
        """Send one request.

        ``headers`` sits between the instance defaults and ``options.headers``
        in precedence; verb helpers use it for their own defaults.
        """
        options = options or CallOptions()
        merged = build_headers(self._authorization, self._cfg.headers, headers, options.headers)

        params = None
        if isinstance(options.query, Mapping) and len(options.query) > 0:
            params = dict(options.query)

        request = self._client.build_request(
            method.upper(),
            url,
            headers=merged,
            params=params,
            content=options.body,
            files=options.files,
        )

        # httpx.RequestError (connect, timeout, read) propagates unchanged
        response = await self._client.send(request, stream=True)
        logger.debug("%s %s -> %s", request.method, request.url, response.status_code)
        try:
            return await normalize_response(response)
        finally:
            await response.aclose()

    async def query(
            self,
            method: str,
            url: str,
            query: Mapping[str, Any] | None = None,
            options: CallOptions | None = None,
    ) -> ApiResponse:
        options = options or CallOptions()
        if options.query is None:
            options = replace(options, query=query)
        return await self.request(method, url, options)

    async def command(
            self,
            method: str,
            url: str,
            data: str | bytes | FormData | None,
            options: CallOptions | None = None,
    ) -> ApiResponse:
        options = options or CallOptions()
        if options.body is None and options.files is None:
            if isinstance(data, FormData):
                options = replace(options, files=data.to_files())
            else:
                options = replace(options, body=data)
        return await self.request(method, url, options, headers={CONTENT_TYPE: FORM_URLENCODED})

    def create_form_data(self, data: Mapping[str, Any]) -> FormData:
        return create_form_data(data)

    # --- query-string verbs ---
    async def get(self, url: str, query: Mapping[str, Any] | None = None,
                  options: CallOptions | None = None) -> ApiResponse:
        return await self.query("get", url, query, options)

    async def head(self, url: str, query: Mapping[str, Any] | None = None,
                   options: CallOptions | None = None) -> ApiResponse:
        return await self.query("head", url, query, options)

    async def options(self, url: str, query: Mapping[str, Any] | None = None,
                      options: CallOptions | None = None) -> ApiResponse:
        return await self.query("options", url, query, options)

    # --- url-encoded body verbs ---
    async def post(self, url: str, data: Mapping[str, Any] | None = None,
                   options: CallOptions | None = None) -> ApiResponse:
        return await self.command("post", url, urlencode_body(data), options)

    async def put(self, url: str, data: Mapping[str, Any] | None = None,
                  options: CallOptions | None = None) -> ApiResponse:
        return await self.command("put", url, urlencode_body(data), options)

    async def patch(self, url: str, data: Mapping[str, Any] | None = None,
                    options: CallOptions | None = None) -> ApiResponse:
        return await self.command("patch", url, urlencode_body(data), options)

    async def delete(self, url: str, data: Mapping[str, Any] | None = None,
                     options: CallOptions | None = None) -> ApiResponse:
        return await self.command("delete", url, urlencode_body(data), options)

    # --- multipart verbs ---
    async def post_multi(self, url: str, data: Mapping[str, Any]) -> ApiResponse:
        return await self._send_multipart("post", url, data)

    async def put_multi(self, url: str, data: Mapping[str, Any]) -> ApiResponse:
        return await self._send_multipart("put", url, data)

    async def _send_multipart(self, method: str, url: str, data: Mapping[str, Any]) -> ApiResponse:
        # Content-Type cleared: httpx writes the boundary-bearing value itself
        options = CallOptions(headers={CONTENT_TYPE: None})
        return await self.command(method, url, self.create_form_data(data), options)
