"""RemoteStore implementation backed by a Microsoft Graph drive."""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING, Any
from urllib.parse import quote

from drive_upload.exceptions import LocalFileError
from drive_upload.graph.client import GraphApiError, GraphClient, graph_client_from_config
from drive_upload.graph.models import FIELD_CONFLICT_BEHAVIOR, FIELD_UPLOAD_URL, RemoteItem

if TYPE_CHECKING:
    from drive_upload.config import ActionConfig

logger = logging.getLogger(__name__)

# Graph accepts a single PUT of up to 4 MiB; larger payloads need an upload session.
SIMPLE_UPLOAD_MAX_BYTES = 4 * 1024 * 1024

# Upload session chunks must be a multiple of 320 KiB.
CHUNK_ALIGNMENT_BYTES = 320 * 1024
CHUNK_SIZE_BYTES = 32 * CHUNK_ALIGNMENT_BYTES

ITEM_SELECT = "id,name,file,folder,parentReference,createdDateTime"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# OneDrive and SharePoint reject path separators in item names.
PATH_SEPARATORS = ("/", "\\")
PATH_SEPARATOR_SUBSTITUTE = "_"

HTTP_NOT_FOUND = 404


def graph_item_name(name: str) -> str:
    """Return ``name`` as stored on the drive: path separators become ``_``.

    ``dist/app.zip`` is stored as ``dist_app.zip``. Lookups, creates and
    renames all go through this mapping, so overwrite finds the item a
    previous run created.
    """
    for separator in PATH_SEPARATORS:
        name = name.replace(separator, PATH_SEPARATOR_SUBSTITUTE)
    return name


class GraphDriveStore:
    """The upload capability set over one OneDrive / SharePoint drive."""

    def __init__(self, graph_client: GraphClient, drive_id: str) -> None:
        """Initialise the store.

        Args:
            graph_client: Authenticated GraphClient.
            drive_id: ID of the drive that holds every folder and file addressed.
        """
        self._graph = graph_client
        self._drive_id = drive_id

    @property
    def _drive(self) -> str:
        return f"/drives/{self._drive_id}"

    def _child_path(self, parent_id: str, name: str) -> str:
        return f"{self._drive}/items/{parent_id}:/{quote(graph_item_name(name), safe='')}:"

    def search(self, name: str, parent_id: str, folders_only: bool = False) -> list[RemoteItem]:
        """Return the item named ``name`` directly inside ``parent_id``.

        The child is addressed by path below its parent, which reads the drive
        itself rather than the search index, so an item created moments
        earlier in the same run is found. Drive names are unique within a
        folder (case-insensitively), so at most one item is returned.

        Args:
            name: Item name to look for.
            parent_id: ID of the folder to look in.
            folders_only: Keep folders only.

        Returns:
            A list holding the matching item, or an empty list.
        """
        try:
            raw = self._graph.get(f"{self._child_path(parent_id, name)}?$select={ITEM_SELECT}")
        except GraphApiError as exc:
            if exc.status_code == HTTP_NOT_FOUND:
                logger.debug("[search] no such child; name:%s;parent_id:%s", name, parent_id)
                return []
            raise

        item = RemoteItem.from_graph(raw)
        if item.name.casefold() != graph_item_name(name).casefold():
            return []
        if folders_only and not item.is_folder:
            logger.info("[search] name is taken by a file; name:%s;id:%s", name, item.id)
            return []
        return [item]

    def create_folder(self, name: str, parent_id: str) -> RemoteItem:
        raw = self._graph.post_json(
            f"{self._drive}/items/{parent_id}/children",
            {"name": graph_item_name(name), "folder": {}, FIELD_CONFLICT_BEHAVIOR: "fail"},
        )
        return RemoteItem.from_graph(raw)

    def create_file(
        self,
        name: str,
        parent_id: str,
        stream: IO[bytes],
        size: int,
        mime_type: str,
    ) -> RemoteItem:
        """Create a new file in ``parent_id``.

        A name already taken in the folder gets renamed by Graph so that a new
        item is always created.
        """
        item_path = self._child_path(parent_id, name)
        content_type = mime_type or DEFAULT_CONTENT_TYPE
        if size <= SIMPLE_UPLOAD_MAX_BYTES:
            raw = self._graph.put_content(
                f"{item_path}/content?{FIELD_CONFLICT_BEHAVIOR}=rename",
                stream,
                content_type=content_type,
                content_length=size,
            )
        else:
            session = self._graph.post_json(
                f"{item_path}/createUploadSession",
                {"item": {FIELD_CONFLICT_BEHAVIOR: "rename", "name": graph_item_name(name)}},
            )
            raw = self._upload_session(session, stream, size, content_type)
        return RemoteItem.from_graph(raw)

    def update_file(
        self,
        item: RemoteItem,
        parent_id: str,
        name: str,
        stream: IO[bytes],
        size: int,
        mime_type: str,
    ) -> RemoteItem:
        """Replace the content of ``item``, then set its name and parent.

        A Graph item has exactly one parent. The item located for an update
        is already in ``parent_id``, so setting the parent reference keeps it
        in place.
        """
        item_path = f"{self._drive}/items/{item.id}"
        content_type = mime_type or DEFAULT_CONTENT_TYPE
        if size <= SIMPLE_UPLOAD_MAX_BYTES:
            self._graph.put_content(
                f"{item_path}/content",
                stream,
                content_type=content_type,
                content_length=size,
            )
        else:
            session = self._graph.post_json(
                f"{item_path}/createUploadSession",
                {"item": {FIELD_CONFLICT_BEHAVIOR: "replace"}},
            )
            self._upload_session(session, stream, size, content_type)

        raw = self._graph.patch_json(
            item_path,
            {"name": graph_item_name(name), "parentReference": {"id": parent_id}},
        )
        return RemoteItem.from_graph(raw)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _upload_session(
        self, session: dict[str, Any], stream: IO[bytes], size: int, content_type: str
    ) -> dict[str, Any]:
        """Stream ``size`` bytes to an upload session, one chunk at a time.

        Returns:
            The driveItem Graph returns after the final chunk.

        Raises:
            GraphApiError: If the session has no upload URL.
            LocalFileError: If the local file ends before ``size`` bytes.
        """
        upload_url = session.get(FIELD_UPLOAD_URL)
        if not upload_url:
            raise GraphApiError(0, "createUploadSession response has no uploadUrl")

        logger.info("[_upload_session] uploading in chunks; size:%d", size)
        offset = 0
        response: dict[str, Any] = {}
        while offset < size:
            chunk = stream.read(min(CHUNK_SIZE_BYTES, size - offset))
            if not chunk:
                raise LocalFileError(f"local file ended after {offset} of {size} bytes")
            response = self._graph.put_chunk(
                upload_url, chunk, offset, size, content_type=content_type
            )
            offset += len(chunk)
            logger.debug("[_upload_session] chunk sent; offset:%d;size:%d", offset, size)
        return response


def graph_drive_store_from_config(config: ActionConfig) -> GraphDriveStore:
    """Construct a GraphDriveStore from action configuration.

    Args:
        config: Action configuration instance.

    Returns:
        Configured GraphDriveStore instance.
    """
    return GraphDriveStore(graph_client_from_config(config), config.drive_id)
