"""HTTP transport for the remote sheet document.

Reads are plain authenticated GETs. Writes replace the whole document with
a multipart POST carrying the serialized sheet as a single file field.
There is no merge on the remote side, no version check and no retry: the
last upload to a path wins.
"""

import json
import logging
from pathlib import PurePosixPath

import httpx

from .config import RemoteConfig
from .errors import TransportError
from .sheet.models import Sheet

logger = logging.getLogger(__name__)

NOT_FOUND_STATUSES = (404, 410)
UPLOAD_FIELD = "data"


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def upload_filename(path: str) -> str:
    """Attachment name for a document path, always with a .json suffix."""
    name = PurePosixPath(path).name or "sheet"
    if not name.endswith(".json"):
        name = f"{name}.json"
    return name


class SheetTransport:
    """Fetches and replaces sheet documents on the source API."""

    def __init__(self, remote: RemoteConfig):
        """Initialize the transport.

        Args:
            remote: Remote endpoints; paths are resolved against its bases.
        """
        self.remote = remote
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SheetTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def source_url(self, path: str) -> str:
        return f"{self.remote.source_base.rstrip('/')}/{path.lstrip('/')}"

    def upload_url(self, path: str) -> str:
        return f"{self.remote.upload_base.rstrip('/')}/{path.lstrip('/')}"

    async def fetch_sheet(self, path: str, token: str) -> Sheet | None:
        """Fetch and decode the document at ``path``.

        Args:
            path: Document path below the source base.
            token: Bearer token.

        Returns:
            The decoded Sheet, or None if the document does not exist.

        Raises:
            TransportError: On network failure, an unexpected status or an
                undecodable body.
        """
        url = self.source_url(path)
        client = await self._get_client()
        try:
            response = await client.get(url, headers=_auth_headers(token))
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}") from e

        if response.status_code in NOT_FOUND_STATUSES:
            logger.info(f"No document at {path} (HTTP {response.status_code})")
            return None

        if not response.is_success:
            raise TransportError(
                response.text or response.reason_phrase, response.status_code
            )

        try:
            document = response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {url}: {e}", response.status_code
            ) from e
        if not isinstance(document, dict):
            raise TransportError(
                f"Unexpected document shape from {url}", response.status_code
            )

        try:
            sheet = Sheet.from_document(document)
        except (TypeError, ValueError) as e:
            raise TransportError(
                f"Undecodable sheet from {url}: {e}", response.status_code
            ) from e
        logger.debug(f"Fetched {path}: {len(sheet.data)} rows")
        return sheet

    async def upload_sheet(self, path: str, sheet: Sheet, token: str) -> None:
        """Replace the document at ``path`` with ``sheet``.

        Args:
            path: Document path below the upload base.
            sheet: Sheet to serialize.
            token: Bearer token.

        Raises:
            TransportError: On network failure or a non-2xx response.
        """
        url = self.upload_url(path)
        body = json.dumps(sheet.to_document()).encode("utf-8")
        files = {UPLOAD_FIELD: (upload_filename(path), body, "application/json")}

        client = await self._get_client()
        try:
            response = await client.post(url, headers=_auth_headers(token), files=files)
        except httpx.HTTPError as e:
            raise TransportError(f"POST {url} failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                response.text or response.reason_phrase, response.status_code
            )

        logger.info(f"Uploaded {path}: {len(sheet.data)} rows")

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Plain GET against an absolute URL.

        Raises:
            TransportError: On network failure. Status codes are not checked.
        """
        client = await self._get_client()
        try:
            return await client.get(url, headers=headers, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}") from e
