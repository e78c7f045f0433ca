"""Archive fetcher - downloads module archives from their hosting site."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from modcheck.config import DEFAULT_MAX_ARCHIVE_BYTES, DEFAULT_TIMEOUT
from modcheck.errors import FetchError
from modcheck.locator import archive_url
from modcheck.models import FetchedArchive

logger = logging.getLogger(__name__)


class ArchiveFetcher:
    """Fetches content archives over HTTP(S).

    A caller-supplied client is used as is and left open on close().
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_bytes: int = DEFAULT_MAX_ARCHIVE_BYTES,
        user_agent: Optional[str] = None,
    ):
        self._owns_client = client is None
        if client is None:
            headers = {"User-Agent": user_agent} if user_agent else None
            client = httpx.Client(timeout=timeout, follow_redirects=True, headers=headers)
        self._client = client
        self._max_bytes = max_bytes

    def __enter__(self) -> ArchiveFetcher:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(self, module_path: str, version: str) -> FetchedArchive:
        url = archive_url(module_path, version)
        logger.debug("Fetching %s@%s from %s", module_path, version, url)

        try:
            with self._client.stream("GET", url) as resp:
                if not resp.is_success:
                    raise FetchError(
                        f"failed to fetch module: HTTP {resp.status_code}",
                        url=url,
                        status=resp.status_code,
                    )
                content = self._read_limited(resp, url)
        except httpx.HTTPError as e:
            raise FetchError(f"failed to fetch module: {e}", url=url) from e

        logger.debug("Fetched %d bytes from %s", len(content), url)
        return FetchedArchive(url=url, content=content)

    def _read_limited(self, resp: httpx.Response, url: str) -> bytes:
        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > self._max_bytes:
            raise FetchError(
                f"archive too large: {declared} bytes (limit {self._max_bytes})",
                url=url,
                status=resp.status_code,
            )

        buf = bytearray()
        for chunk in resp.iter_bytes():
            buf.extend(chunk)
            if len(buf) > self._max_bytes:
                raise FetchError(
                    f"archive too large: exceeds {self._max_bytes} bytes",
                    url=url,
                    status=resp.status_code,
                )
        return bytes(buf)
