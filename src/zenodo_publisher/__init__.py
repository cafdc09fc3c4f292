# src/zenodo_publisher/__init__.py

# Public API of the package:
# `from zenodo_publisher import publish, ZenodoApiError`.

from .errors import ApiCommunicationError, ZenodoApiError
from .publisher import PublishedRecord, publish
from .transport import RequestsTransport
