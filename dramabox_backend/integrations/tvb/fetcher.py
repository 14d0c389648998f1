from __future__ import annotations

import logging
import re
from typing import Mapping

import requests

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "accept": "text/html,application/xhtml+xml",
    "accept-language": "en-US,en;q=0.9",
    "user-agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
}


class NetworkError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


def _parse_charset(content_type: str | None) -> str | None:
    if not content_type:
        return None
    match = re.search(r"charset=([^\s;]+)", content_type, re.IGNORECASE)
    if not match:
        return None
    return match.group(1).strip("\"'")


def _decode_bytes(data: bytes, content_type: str | None) -> str:
    charset = _parse_charset(content_type) or "utf-8"
    try:
        return data.decode(charset)
    except (LookupError, UnicodeDecodeError):
        return data.decode("utf-8", errors="replace")


class PageFetcher:
    """
    Fetches raw HTML documents from the scraped site.

    One call is one outbound GET; retries belong to the caller. The underlying
    `requests.Session` pools connections and is shared by the worker threads.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 15.0,
        extra_headers: Mapping[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._headers = {**_DEFAULT_HEADERS, **dict(extra_headers or {})}

    def fetch(self, url: str) -> str:
        try:
            resp = self._session.get(url, headers=self._headers, timeout=self._timeout_seconds)
        except requests.Timeout as exc:
            raise NetworkError(f"Timed out after {self._timeout_seconds}s fetching {url}", url=url) from exc
        except requests.RequestException as exc:
            raise NetworkError(f"Request failed for {url}: {exc}", url=url) from exc

        if not 200 <= resp.status_code < 300:
            raise NetworkError(
                f"HTTP {resp.status_code} fetching {url}",
                url=url,
                status_code=resp.status_code,
            )

        logger.debug("Fetched %s (%d bytes)", url, len(resp.content or b""))
        return _decode_bytes(resp.content or b"", resp.headers.get("content-type"))

    def close(self) -> None:
        self._session.close()


def check_online(url: str, *, timeout_seconds: float = 5.0, session: requests.Session | None = None) -> bool:
    """Best-effort reachability probe; any HTTP answer counts as online."""

    http = session or requests
    try:
        http.head(url, timeout=timeout_seconds, allow_redirects=True)
    except requests.RequestException as exc:
        logger.info("Offline: %s is unreachable (%s)", url, exc)
        return False
    return True
