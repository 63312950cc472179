"""Data models for remote drive items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_FILE = "file"
FIELD_FOLDER = "folder"
FIELD_MIME_TYPE = "mimeType"
FIELD_PARENT_REFERENCE = "parentReference"
FIELD_CREATED_DATE_TIME = "createdDateTime"
FIELD_UPLOAD_URL = "uploadUrl"
FIELD_CONFLICT_BEHAVIOR = "@microsoft.graph.conflictBehavior"


@dataclass
class RemoteItem:
    """A file or folder in the remote store.

    Attributes:
        id: Store-assigned item identifier.
        name: Item name (not unique, even within one folder on some stores).
        mime_type: MIME type of a file; empty for folders.
        parents: Identifiers of the folders containing the item.
        is_folder: Whether the item is a folder.
        created_at: ISO-8601 creation timestamp, when the store reports one.
    """

    id: str
    name: str
    mime_type: str = ""
    parents: list[str] = field(default_factory=list)
    is_folder: bool = False
    created_at: str | None = None

    def in_folder(self, folder_id: str) -> bool:
        """Return True when folder_id is one of the item's parents."""
        return folder_id in self.parents

    @classmethod
    def from_graph(cls, raw: dict[str, Any]) -> RemoteItem:
        """Map a raw Graph driveItem dict to a RemoteItem."""
        parent_id = raw.get(FIELD_PARENT_REFERENCE, {}).get(FIELD_ID, "")
        return cls(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            mime_type=raw.get(FIELD_FILE, {}).get(FIELD_MIME_TYPE, ""),
            parents=[parent_id] if parent_id else [],
            is_folder=FIELD_FOLDER in raw,
            created_at=raw.get(FIELD_CREATED_DATE_TIME),
        )
