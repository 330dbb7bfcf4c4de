from __future__ import annotations

import logging
import threading
from urllib.parse import urlparse

import requests

from app.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0

_HEADERS = {
    "User-Agent": "fabric-pdf-engine/1.0",
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}


class ImageFetcher:
    """Retrieves image bytes over HTTP(S). One call per image object."""

    def __init__(self, timeout_s: float = DEFAULT_TIMEOUT_S, session: requests.Session | None = None) -> None:
        self.timeout_s = float(timeout_s)
        self._session = session
        self._lock = threading.Lock()

    def _get_session(self) -> requests.Session:
        with self._lock:
            if self._session is None:
                self._session = requests.Session()
                self._session.headers.update(_HEADERS)
            return self._session

    def fetch(self, url: str) -> bytes:
        src = str(url or "").strip()
        scheme = urlparse(src).scheme.lower()
        if scheme not in {"http", "https"}:
            raise FetchError(f"unsupported image url: {src!r}", urls=[src])

        try:
            resp = self._get_session().get(src, timeout=self.timeout_s, allow_redirects=True)
        except requests.Timeout as e:
            logger.warning("IMAGE_FETCH_FAILED", extra={"url": src, "reason": "timeout"})
            raise FetchError(f"timed out fetching {src}", urls=[src]) from e
        except requests.RequestException as e:
            logger.warning("IMAGE_FETCH_FAILED", extra={"url": src, "reason": str(e)})
            raise FetchError(f"could not fetch {src}: {e}", urls=[src]) from e

        status = int(resp.status_code)
        if status < 200 or status >= 300:
            logger.warning("IMAGE_FETCH_FAILED", extra={"url": src, "status": status})
            raise FetchError(f"fetching {src} returned HTTP {status}", urls=[src])

        content = resp.content or b""
        if not content:
            logger.warning("IMAGE_FETCH_FAILED", extra={"url": src, "status": status, "reason": "empty body"})
            raise FetchError(f"empty image body from {src}", urls=[src])

        logger.debug("IMAGE_FETCHED", extra={"url": src, "status": status, "bytes": len(content)})
        return content

    def close(self) -> None:
        with self._lock:
            if self._session is not None:
                self._session.close()
                self._session = None
