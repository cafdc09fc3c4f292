# src/zenodo_publisher/transport.py

import io
import logging
from typing import Any, Dict, Optional, Protocol, Union

import requests
from tqdm import tqdm

log = logging.getLogger(__name__)

Body = Union[bytes, str, None]


class Response(Protocol):
    """The slice of `requests.Response` the publisher relies on."""

    status_code: int
    reason: str

    def json(self) -> Any: ...


class Transport(Protocol):
    """Generic request/response capability injected into the publisher."""

    def request(self, method: str, url: str, *, headers: Dict[str, str], data: Body = None) -> Response: ...


class RequestsTransport:
    """Transport backed by a `requests.Session`.

    Byte bodies (file uploads) are streamed through a tqdm progress bar when
    `progress` is on. A session passed in by the caller is left open on close().
    """

    def __init__(self, session: Optional[requests.Session] = None, progress: bool = False, timeout: Optional[float] = None):
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.progress = progress
        self.timeout = timeout

    def request(self, method: str, url: str, *, headers: Dict[str, str], data: Body = None) -> requests.Response:
        log.debug(f"   > {method} {url}")
        if self.progress and isinstance(data, bytes):
            filename = url.rsplit("/", 1)[-1]
            with tqdm.wrapattr(io.BytesIO(data), "read", total=len(data), desc=f"   - Uploading {filename}", unit="B", unit_scale=True, unit_divisor=1024) as bar:
                r = self.session.request(method, url, headers=headers, data=bar, timeout=self.timeout)
        else:
            r = self.session.request(method, url, headers=headers, data=data, timeout=self.timeout)
        log.debug(f"   < {r.status_code} {r.reason}")
        return r

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
