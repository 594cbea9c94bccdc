"""HTTP client for the bulk postcode lookup endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests

from postcode_enricher.common.constants import USER_AGENT
from postcode_enricher.common.errors import HttpRequestError, RetryableHttpError


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


class HttpClient:
    """One request per call; retrying is left to the caller."""

    def __init__(
        self,
        *,
        user_agent: str = USER_AGENT,
        timeout: TimeoutConfig | None = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if headers:
            out.update(headers)
        return out

    def _raise_for_status(self, response: requests.Response) -> None:
        status = response.status_code
        if not 200 <= status < 300:
            raise RetryableHttpError(f"HTTP status: {status}")

    def request_json(
        self,
        method: str,
        url: str,
        *,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        timeout = (self.timeout.connect, self.timeout.read) if self.timeout else None
        try:
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=self._headers(headers),
                timeout=timeout,
            )
        except requests.RequestException as exc:
            raise RetryableHttpError(f"Transport error for {url}: {exc}") from exc
        self._raise_for_status(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise RetryableHttpError(f"Invalid JSON payload from {url}") from exc
        if not isinstance(payload, dict):
            raise HttpRequestError(f"Unexpected JSON payload from {url}")
        return payload

    def post_json(
        self,
        url: str,
        payload: Any,
        *,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return self.request_json("POST", url, json_body=payload, headers=headers)
