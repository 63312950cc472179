"""Capability interface between the upload logic and a remote store."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from drive_upload.graph.models import RemoteItem


class RemoteStore(Protocol):
    """The four remote operations the upload logic needs.

    Implementations raise a RemoteStoreError subclass on any failure.
    """

    def search(self, name: str, parent_id: str, folders_only: bool = False) -> list[RemoteItem]:
        """Return the items named ``name`` directly inside ``parent_id``.

        Results must reflect writes made earlier in the same run.
        """
        ...

    def create_folder(self, name: str, parent_id: str) -> RemoteItem:
        """Create a folder named ``name`` inside ``parent_id``."""
        ...

    def create_file(
        self,
        name: str,
        parent_id: str,
        stream: IO[bytes],
        size: int,
        mime_type: str,
    ) -> RemoteItem:
        """Create a new file inside ``parent_id`` with the content of ``stream``."""
        ...

    def update_file(
        self,
        item: RemoteItem,
        parent_id: str,
        name: str,
        stream: IO[bytes],
        size: int,
        mime_type: str,
    ) -> RemoteItem:
        """Replace the content and metadata of ``item`` and attach it to ``parent_id``."""
        ...
