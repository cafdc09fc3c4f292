# src/zenodo_publisher/errors.py

from typing import Optional


class ZenodoApiError(Exception):
    """Raised when a Zenodo API call answers with a non-2xx status."""

    def __init__(
        self,
        reason: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        step: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(f"Zenodo API communication error: {reason}")
        self.reason = reason
        self.status_code = status_code
        self.url = url
        self.step = step
        # `message` field of the JSON error body, when Zenodo sends one
        self.detail = detail


ApiCommunicationError = ZenodoApiError
