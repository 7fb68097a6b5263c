#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Assistants API client

Talks to the remote thread/run/message/file/vector-store resources.
Every request goes through the retry policy in core.retry.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from ..config.settings import OPENAI_BETA_HEADER, BridgeConfig
from ..core.errors import HttpError
from ..core.logging import logger
from ..core.retry import with_retry

ERROR_LOG_LIMIT = 500


class AssistantsApiClient:
    """Long-lived async HTTP client for the Assistants v2 API."""

    def __init__(self, config: BridgeConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config

        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            http2=True,
            timeout=httpx.Timeout(config.request_timeout_s),
            verify=True,
            trust_env=True,
            transport=transport,
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _headers(self, multipart: bool) -> Dict[str, str]:
        headers = {
            "authorization": f"Bearer {self.config.api_key}",
            "openai-beta": OPENAI_BETA_HEADER,
        }
        # httpx sets the multipart boundary itself
        if not multipart:
            headers["content-type"] = "application/json"
        return headers

    async def _send_once(
        self,
        path: str,
        body: Optional[Any],
        method: str,
        multipart: bool,
        params: Optional[Dict[str, Any]],
    ) -> Any:
        logger.debug(f"Assistants API request: {method} {path}")
        kwargs: Dict[str, Any] = {"headers": self._headers(multipart), "params": params}
        if multipart:
            kwargs["data"] = (body or {}).get("data")
            kwargs["files"] = (body or {}).get("files")
        elif body is not None:
            kwargs["json"] = body

        response = await self._client.request(method, path, **kwargs)
        if not response.is_success:
            error_text = response.text
            logger.error(
                f"Assistants API error: HTTP {response.status_code} {method} {path}: "
                f"{error_text[:ERROR_LOG_LIMIT]}"
            )
            raise HttpError(
                f"OpenAI API error ({response.status_code}): {error_text}",
                response.status_code,
                error_text,
            )

        logger.debug(f"Assistants API response: {method} {path} -> HTTP {response.status_code}")
        return response.json()

    async def request(
        self,
        path: str,
        body: Optional[Any] = None,
        method: str = "POST",
        multipart: bool = False,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send one request with retries and return the decoded JSON body."""
        return await with_retry(
            lambda: self._send_once(path, body, method, multipart, params),
            max_retries=self.config.max_retries,
            initial_delay_ms=self.config.retry_initial_delay_ms,
            max_delay_ms=self.config.retry_max_delay_ms,
            backoff_multiplier=self.config.retry_backoff_multiplier,
            description=f"{method} {path}",
        )

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request(path, None, "GET", params=params)

    async def upload_file(self, filename: str, content: bytes, purpose: str) -> Any:
        """Multipart upload with the ``purpose`` and ``file`` form fields."""
        body = {
            "data": {"purpose": purpose},
            "files": {"file": (Path(filename).name, content)},
        }
        return await self.request("/files", body, "POST", multipart=True)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()
        logger.info("Assistants API client closed")
