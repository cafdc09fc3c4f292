# src/zenodo_publisher/publisher.py

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .errors import ZenodoApiError
from .transport import RequestsTransport, Response, Transport

# =============================================================================
# 1. CONSTANTS & DATA MODEL
# =============================================================================

ZENODO_URLS = {"production": "https://zenodo.org/api", "sandbox": "https://sandbox.zenodo.org/api"}

log = logging.getLogger(__name__)

DepositionId = Union[int, str]


@dataclass(frozen=True)
class DraftDeposition:
    """Unpublished new version of a deposition, as seen by the API."""

    self_url: str
    bucket_url: str = ""
    version: Optional[str] = None


@dataclass(frozen=True)
class UploadedFile:
    id: str
    filename: str
    filesize: int
    checksum: str


@dataclass(frozen=True)
class PublishedRecord:
    id: Any
    html: str
    doi: str
    version: str

    def as_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "html": self.html, "doi": self.doi}


# --- Helper Functions ---
def _get_api_base(sandbox: bool) -> str:
    """Gets the correct API base URL based on the sandbox flag."""
    return ZENODO_URLS["sandbox"] if sandbox else ZENODO_URLS["production"]


def _auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _checked(response: Response, step: str, url: str) -> Dict[str, Any]:
    """Returns the JSON payload of a 2xx response, raises ZenodoApiError otherwise."""
    if 200 <= response.status_code < 300:
        return response.json()
    detail = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get("message")
    log.debug(f"   {step} failed with {response.status_code} {response.reason}: {detail}")
    raise ZenodoApiError(response.reason, status_code=response.status_code, url=url, step=step, detail=detail)


# =============================================================================
# 2. PUBLISHING STEPS
# =============================================================================

def create_new_version(transport: Transport, token: str, deposition_id: DepositionId, base_url: str) -> DraftDeposition:
    """Asks Zenodo for a new draft version of an existing deposition."""
    url = f"{base_url}/deposit/depositions/{deposition_id}/actions/newversion"
    r = transport.request("POST", url, headers=_auth_headers(token))
    dep = _checked(r, "create_new_version", url)
    return DraftDeposition(self_url=dep["links"]["latest_draft"])


def fetch_draft(transport: Transport, token: str, draft: DraftDeposition) -> DraftDeposition:
    """Retrieves the draft to learn its bucket URL and current version."""
    r = transport.request("GET", draft.self_url, headers=_auth_headers(token))
    dep = _checked(r, "fetch_draft", draft.self_url)
    return DraftDeposition(
        self_url=draft.self_url,
        bucket_url=dep["links"]["bucket"],
        version=(dep.get("metadata") or {}).get("version"),
    )


def upload_file(transport: Transport, token: str, draft: DraftDeposition, file_path: str) -> UploadedFile:
    """Uploads the file into the draft bucket under its base name.

    The file is read in full before the request is made, so an unreadable
    file surfaces as the OSError raised by open(). The checksum returned by
    Zenodo is not compared against the local file.
    """
    filename = os.path.basename(file_path)
    with open(file_path, "rb") as fp:
        content = fp.read()
    url = f"{draft.bucket_url}/{filename}"
    r = transport.request("PUT", url, headers=_auth_headers(token), data=content)
    f = _checked(r, "upload_file", url)
    return UploadedFile(id=f.get("id"), filename=f.get("filename"), filesize=f.get("filesize"), checksum=f.get("checksum"))


def update_version(transport: Transport, token: str, draft: DraftDeposition, version: str) -> DraftDeposition:
    """Sets metadata.version on the draft. The echoed version is not checked."""
    headers = _auth_headers(token)
    headers["Content-Type"] = "application/json"
    data = {"metadata": {"version": version}}
    r = transport.request("PUT", draft.self_url, headers=headers, data=json.dumps(data))
    dep = _checked(r, "update_version", draft.self_url)
    return DraftDeposition(
        self_url=draft.self_url,
        bucket_url=draft.bucket_url,
        version=(dep.get("metadata") or {}).get("version"),
    )


def publish_draft(transport: Transport, token: str, draft: DraftDeposition, version: str) -> PublishedRecord:
    url = f"{draft.self_url}/actions/publish"
    r = transport.request("POST", url, headers=_auth_headers(token))
    rec = _checked(r, "publish_draft", url)
    return PublishedRecord(id=rec["id"], html=rec["links"]["latest_html"], doi=rec["links"]["doi"], version=version)


# =============================================================================
# 3. ORCHESTRATION
# =============================================================================

def publish(
    deposition_id: DepositionId,
    file_path: str,
    version: str,
    token: str,
    sandbox: bool = False,
    transport: Optional[Transport] = None,
) -> PublishedRecord:
    """Publishes `file_path` as version `version` of an existing deposition.

    Runs the five Zenodo calls in order: new version, fetch draft, upload,
    set version, publish. The first non-2xx response raises ZenodoApiError
    and nothing after it is sent. Remote effects of the steps that did
    succeed (such as a created draft) are left in place.

    Args:
        deposition_id: ID of any published version of the deposition.
        file_path: Local file to upload; stored remotely under its base name.
        version: Version string, forwarded to Zenodo verbatim.
        token: Zenodo personal access token.
        sandbox: Use sandbox.zenodo.org instead of zenodo.org.
        transport: HTTP transport. A RequestsTransport is created (and closed
            afterwards) when omitted.

    Returns:
        The published record with its id, HTML URL and DOI URL.
    """
    if transport is None:
        with RequestsTransport() as owned:
            return publish(deposition_id, file_path, version, token, sandbox=sandbox, transport=owned)

    env = "sandbox" if sandbox else "production"
    base_url = _get_api_base(sandbox)
    log.info(f"--- Using {env.upper()} environment ---")

    log.info(f"1. Creating new version of deposition {deposition_id}...")
    draft = create_new_version(transport, token, deposition_id, base_url)
    log.info(f"   ✓ Draft created: {draft.self_url}")

    log.info("2. Fetching draft details...")
    draft = fetch_draft(transport, token, draft)
    log.debug(f"   Bucket: {draft.bucket_url}")
    log.info(f"   ✓ Draft fetched (previous version: {draft.version})")

    log.info(f"3. Uploading {os.path.basename(file_path)}...")
    uploaded = upload_file(transport, token, draft, file_path)
    log.debug(f"   Remote file {uploaded.filename}: {uploaded.filesize} bytes, checksum {uploaded.checksum}")
    log.info("   ✓ File uploaded successfully.")

    log.info(f"4. Setting version to {version}...")
    draft = update_version(transport, token, draft, version)
    log.info("   ✓ Version updated.")

    log.info("5. Publishing record...")
    record = publish_draft(transport, token, draft, version)
    log.info(f"   ✓ Published record {record.id}")
    return record
