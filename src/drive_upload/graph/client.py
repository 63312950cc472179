"""Microsoft Graph API client with MSAL authentication."""

from __future__ import annotations

import json
import logging
from typing import IO, TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError

import msal

from drive_upload.exceptions import RemoteStoreError

if TYPE_CHECKING:
    from drive_upload.config import ActionConfig

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]
AUTHORITY_BASE_URL = "https://login.microsoftonline.com"


class GraphAuthError(RemoteStoreError):
    """Raised when MSAL token acquisition fails."""


class GraphApiError(RemoteStoreError):
    """Raised when the Graph API returns a non-2xx response or is unreachable."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Graph API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class GraphClient:
    """Authenticated client for Microsoft Graph API."""

    def __init__(self, client_id: str, client_secret: str, tenant_id: str) -> None:
        """Initialise the MSAL confidential client application.

        Args:
            client_id: Azure AD application (client) ID.
            client_secret: Azure AD application client secret.
            tenant_id: Azure AD tenant ID.
        """
        authority = f"{AUTHORITY_BASE_URL}/{tenant_id}"
        self._app = msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=authority,
        )

    def _acquire_token(self) -> str:
        """Acquire a Bearer token using client credentials flow.

        MSAL serves the token from its in-memory cache until it expires.

        Returns:
            Access token string.

        Raises:
            GraphAuthError: If MSAL cannot acquire a token.
        """
        result: dict[str, Any] = self._app.acquire_token_for_client(scopes=GRAPH_SCOPES) or {}
        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[_acquire_token] MSAL token acquisition failed; error:%s", error)
            raise GraphAuthError(f"Token acquisition failed: {error} ({description})")
        return str(result["access_token"])

    def _send(self, req: urllib_request.Request) -> dict[str, Any]:
        """Send a prepared request and parse the JSON body.

        Returns:
            Parsed JSON body, or an empty dict for an empty body.

        Raises:
            GraphApiError: On a non-2xx status or a transport failure.
        """
        try:
            with urllib_request.urlopen(req) as resp:
                body = resp.read()
        except HTTPError as exc:
            raw = exc.read()
            try:
                detail = json.loads(raw).get("error", {}).get("message", exc.reason)
            except Exception:
                detail = exc.reason
            raise GraphApiError(exc.code, detail) from exc
        except URLError as exc:
            raise GraphApiError(0, str(exc.reason)) from exc
        if not body:
            return {}
        return json.loads(body)  # type: ignore[no-any-return]

    def _request(
        self,
        method: str,
        path: str,
        data: bytes | IO[bytes] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        token = self._acquire_token()
        all_headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        all_headers.update(headers or {})
        req = urllib_request.Request(
            f"{GRAPH_BASE_URL}{path}",
            data=data,
            headers=all_headers,
            method=method,
        )
        return self._send(req)

    def get(self, path: str) -> dict[str, Any]:
        """Perform an authenticated GET request to the Graph API.

        Args:
            path: URL path relative to GRAPH_BASE_URL (must start with '/').

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the API returns a non-2xx status code.
        """
        return self._request("GET", path)

    def post_json(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """Perform an authenticated POST with a JSON body.

        Args:
            path: URL path relative to GRAPH_BASE_URL.
            body: JSON-serialisable request body.

        Returns:
            Parsed JSON response body.
        """
        return self._request(
            "POST",
            path,
            data=json.dumps(body).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def patch_json(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """Perform an authenticated PATCH with a JSON body.

        Args:
            path: URL path relative to GRAPH_BASE_URL.
            body: JSON-serialisable request body.

        Returns:
            Parsed JSON response body.
        """
        return self._request(
            "PATCH",
            path,
            data=json.dumps(body).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def put_content(
        self,
        path: str,
        content: bytes | IO[bytes],
        content_type: str = "application/octet-stream",
        content_length: int | None = None,
    ) -> dict[str, Any]:
        """Upload raw content with an authenticated PUT request.

        A file object is streamed by urllib; its length must be given so the
        request is not sent with chunked transfer encoding.

        Args:
            path: URL path relative to GRAPH_BASE_URL (must start with '/').
            content: Bytes or a binary file object to upload.
            content_type: MIME type for the Content-Type header.
            content_length: Payload size in bytes (required for file objects).

        Returns:
            Parsed JSON driveItem of the uploaded content.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the API returns a non-2xx status code.
        """
        if content_length is None:
            if not isinstance(content, bytes):
                raise ValueError("content_length is required when streaming a file object")
            content_length = len(content)
        return self._request(
            "PUT",
            path,
            data=content,
            headers={
                "Content-Type": content_type,
                "Content-Length": str(content_length),
            },
        )

    def put_chunk(
        self,
        upload_url: str,
        chunk: bytes,
        start: int,
        total: int,
        content_type: str = "application/octet-stream",
    ) -> dict[str, Any]:
        """Upload one byte range to an upload session.

        Upload session URLs are pre-authenticated; sending a Bearer token to
        them is rejected, so none is attached.

        Args:
            upload_url: Absolute uploadUrl returned by createUploadSession.
            chunk: Bytes of this range.
            start: Offset of the first byte of the chunk.
            total: Total size of the upload.
            content_type: MIME type of the whole upload.

        Returns:
            Parsed JSON body: the session status for intermediate chunks, the
            driveItem after the final chunk.
        """
        end = start + len(chunk) - 1
        req = urllib_request.Request(
            upload_url,
            data=chunk,
            headers={
                "Content-Length": str(len(chunk)),
                "Content-Type": content_type,
                "Content-Range": f"bytes {start}-{end}/{total}",
            },
            method="PUT",
        )
        return self._send(req)


def graph_client_from_config(config: ActionConfig) -> GraphClient:
    """Construct a GraphClient from action configuration.

    Args:
        config: Action configuration instance.

    Returns:
        Configured GraphClient instance.
    """
    return GraphClient(
        client_id=config.credentials.client_id,
        client_secret=config.credentials.client_secret,
        tenant_id=config.credentials.tenant_id,
    )
