"""HTTP objects opened by byte range, using requests."""

import logging
from typing import Optional

import requests
from urllib3.exceptions import HTTPError as Urllib3Error

from ..core.model import RangeOption
from .base import RangeNotSupportedError, UnknownSizeError, RANGE_FALLBACK_MAX

logger = logging.getLogger(__name__)

# Module-level session for connection pooling
_session = None

_SKIP_BLOCK = 64 * 1024


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPStream:
    """Body of a single streaming GET."""

    def __init__(self, owner: "HTTPObject", response: requests.Response):
        self._owner = owner
        self._response = response

    def read(self, size: int = -1) -> bytes:
        try:
            data = self._response.raw.read(None if size < 0 else size)
        except (Urllib3Error, OSError) as e:
            raise IOError(f"GET body read failed: {e}") from e
        self._owner.bytes_fetched += len(data)
        return data

    def skip(self, count: int):
        """Discard `count` bytes from the front of the body."""
        while count > 0:
            data = self.read(min(count, _SKIP_BLOCK))
            if not data:
                raise IOError(f"Not enough data: could not skip to offset {count}")
            count -= len(data)

    def close(self):
        self._response.close()


class HTTPObject:
    """HTTP object served by Range requests; every open is a new GET."""

    def __init__(self, url: str, *, session: Optional[requests.Session] = None, timeout: float = 30):
        self.url = url
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._accept_ranges = False
        self._session = session or _get_session()

        # Perform HEAD request immediately
        self._perform_head()

    def _perform_head(self):
        """Perform HEAD request to check capabilities."""
        self.requests_made += 1
        try:
            response = self._session.head(self.url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise IOError(f"HEAD request failed: {e}") from e
        if response.status_code >= 400:
            raise IOError(f"HEAD request failed with status {response.status_code}")

        content_length_header = response.headers.get('content-length')
        if content_length_header:
            self.content_length = int(content_length_header)

        accept_ranges = response.headers.get('accept-ranges', '').lower()
        self._accept_ranges = accept_ranges == 'bytes'

    @property
    def size(self) -> int:
        if self.content_length is None:
            raise UnknownSizeError(f"Size of {self.url} is unknown (no Content-Length)")
        return self.content_length

    def open(self, range_option: Optional[RangeOption] = None) -> HTTPStream:
        """Issue a streaming GET for the whole object or the given range."""
        headers = {'Accept-Encoding': 'identity'}
        if range_option is not None:
            headers['Range'] = range_option.header()
        logger.debug("GET %s range=%s", self.url, headers.get('Range', 'all'))

        self.requests_made += 1
        try:
            response = self._session.get(self.url, headers=headers, timeout=self.timeout, stream=True)
        except requests.RequestException as e:
            raise IOError(f"GET request failed: {e}") from e

        if response.status_code == 206 and self.content_length is None:
            self._learn_size(response.headers.get('content-range', ''))
        if response.status_code == 206 or (response.status_code == 200 and range_option is None):
            return HTTPStream(self, response)

        if response.status_code == 200:
            # Server ignored the Range header and sent the whole body
            return self._skip_to(response, range_option.start)

        response.close()
        raise IOError(f"Range request failed with status {response.status_code}")

    def _learn_size(self, content_range: str):
        """Take the total from `Content-Range: bytes a-b/total`, unless it is '*'."""
        _, _, total = content_range.rpartition('/')
        if total.isdigit():
            self.content_length = int(total)

    def _skip_to(self, response: requests.Response, start: int) -> HTTPStream:
        if self.content_length is None or self.content_length >= RANGE_FALLBACK_MAX:
            response.close()
            raise RangeNotSupportedError("Server doesn't support ranges and file is too large")
        stream = HTTPStream(self, response)
        try:
            stream.skip(start)
        except IOError:
            stream.close()
            raise
        return stream

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Session is shared, don't close it here
        pass


def open_http_object(url: str, **kwargs) -> HTTPObject:
    """Create an HTTP remote object."""
    return HTTPObject(url, **kwargs)
