"""Remote text files: download to a temporary file, then read it locally.

:func:`fetch_to_temp` only produces a local copy; :class:`WebTextFile`
pairs that copy with an independent :class:`TextFile`.
"""

from __future__ import annotations

import logging
import os
import tempfile

import requests
from requests.adapters import HTTPAdapter, Retry

from ._encoding import Encoding
from ._exceptions import RemoteFetchError
from ._textfile import TextFile

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE: int = 10 * 1024 * 1024
MAX_COMPRESSED_SIZE: int = 10 * 1024 * 1024
CHUNK_SIZE: int = 1024
CONNECT_TIMEOUT: float = 10.0
READ_TIMEOUT: float = 30.0

_URL_PREFIXES = ("http://", "https://")


def is_url(path: str) -> bool:
    return path.startswith(_URL_PREFIXES)


def make_session() -> requests.Session:
    sess = requests.Session()
    retries = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=[502, 503, 504],
        allowed_methods=frozenset({"GET"}),
    )
    adapter = HTTPAdapter(max_retries=retries)
    sess.mount("http://", adapter)
    sess.mount("https://", adapter)
    return sess


class FetchedResource:
    """A downloaded temporary file, deleted on :meth:`close`."""

    def __init__(self, path: str, url: str, redirect_url: str | None = None) -> None:
        self._path = path
        self._url = url
        self._redirect_url = redirect_url
        self._is_closed: bool = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def url(self) -> str:
        return self._url

    @property
    def redirect_url(self) -> str | None:
        """Final URL when the request was redirected, else ``None``."""
        return self._redirect_url

    @property
    def closed(self) -> bool:
        return self._is_closed

    def close(self) -> None:
        if self._is_closed:
            return
        self._is_closed = True
        try:
            os.remove(self._path)
        except FileNotFoundError:
            pass

    def __enter__(self) -> FetchedResource:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _download(
    session: requests.Session,
    url: str,
    fd: int,
    max_size: int,
    max_compressed_size: int,
    timeout: tuple[float, float],
) -> str | None:
    """Stream ``url`` into ``fd``; return the redirect URL (or ``None``).

    Raises :class:`RemoteFetchError` when nothing usable was received.
    """
    try:
        with session.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            redirect_url = response.url if response.history else None
            if response.headers.get("Content-Encoding"):
                declared = int(response.headers.get("Content-Length") or 0)
                if declared > max_compressed_size:
                    raise RemoteFetchError(
                        url, f"compressed body of {declared} bytes exceeds {max_compressed_size}"
                    )
            total = 0
            with os.fdopen(fd, "wb", closefd=False) as out:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    chunk = chunk[: max_size - total]
                    out.write(chunk)
                    total += len(chunk)
                    if total >= max_size:
                        logger.debug("Download of %s capped at %d bytes", url, max_size)
                        break
    except requests.RequestException as exc:
        raise RemoteFetchError(url, str(exc)) from exc
    except ValueError as exc:
        raise RemoteFetchError(url, f"bad response header: {exc}") from exc
    if total == 0:
        raise RemoteFetchError(url, "empty response body")
    return redirect_url


def fetch_to_temp(
    url: str,
    *,
    max_size: int = DEFAULT_MAX_SIZE,
    max_compressed_size: int = MAX_COMPRESSED_SIZE,
    timeout: tuple[float, float] = (CONNECT_TIMEOUT, READ_TIMEOUT),
    session: requests.Session | None = None,
) -> FetchedResource | None:
    """Download ``url`` into a temporary ``.tmp`` file.

    Redirects are followed and compressed bodies are decompressed by
    ``requests``.  At most ``max_size`` bytes are kept.

    Returns
    -------
    FetchedResource | None
        ``None`` when the request failed or produced no data; no temporary
        file is left behind in that case.
    """
    if max_size <= 0 or max_compressed_size <= 0:
        raise ValueError("max_size and max_compressed_size must be positive")
    fd, path = tempfile.mkstemp(suffix=".tmp")
    own_session = session is None
    sess = make_session() if own_session else session
    try:
        try:
            redirect_url = _download(sess, url, fd, max_size, max_compressed_size, timeout)
        finally:
            os.close(fd)
            if own_session:
                sess.close()
    except OSError as exc:
        # RemoteFetchError included; local write errors land here too.
        logger.warning("Fetch of %s failed: %s", url, exc)
        os.remove(path)
        return None
    return FetchedResource(path, url, redirect_url)


class WebTextFile:
    """Opens local paths directly and URLs through a temporary download.

    Example
    -------
    >>> with WebTextFile(Encoding.UTF8) as wf:
    ...     if wf.open("https://example.com/subs.srt"):
    ...         lines = list(wf.text_file)
    """

    def __init__(
        self,
        encoding: Encoding = Encoding.SYSTEM_TEXT,
        default_encoding: Encoding = Encoding.SYSTEM_TEXT,
        *,
        max_size: int = DEFAULT_MAX_SIZE,
        max_compressed_size: int = MAX_COMPRESSED_SIZE,
        timeout: tuple[float, float] = (CONNECT_TIMEOUT, READ_TIMEOUT),
        session: requests.Session | None = None,
        **text_file_options,
    ) -> None:
        if max_size <= 0 or max_compressed_size <= 0:
            raise ValueError("max_size and max_compressed_size must be positive")
        self._text_file = TextFile(encoding, default_encoding, **text_file_options)
        self._max_size = max_size
        self._max_compressed_size = max_compressed_size
        self._timeout = timeout
        self._session = session
        self._fetched: FetchedResource | None = None
        self._redirect_url: str | None = None

    @property
    def text_file(self) -> TextFile:
        return self._text_file

    @property
    def redirect_url(self) -> str | None:
        return self._redirect_url

    def open(self, path: str | os.PathLike[str]) -> bool:
        self.close()
        path = os.fspath(path)
        if not is_url(path):
            return self._text_file.open(path)
        fetched = fetch_to_temp(
            path,
            max_size=self._max_size,
            max_compressed_size=self._max_compressed_size,
            timeout=self._timeout,
            session=self._session,
        )
        if fetched is None:
            return False
        self._fetched = fetched
        self._redirect_url = fetched.redirect_url
        return self._text_file.open(fetched.path)

    def close(self) -> None:
        self._text_file.close()
        if self._fetched is not None:
            self._fetched.close()
            self._fetched = None
        self._redirect_url = None

    def __enter__(self) -> WebTextFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
