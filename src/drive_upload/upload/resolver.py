"""Remote directory resolution: find-or-create folders along a local path."""

from __future__ import annotations

import logging
from pathlib import PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from drive_upload.graph.models import RemoteItem
    from drive_upload.store import RemoteStore

logger = logging.getLogger(__name__)

# Path parts that never become remote folders.
_SKIPPED_SEGMENTS = frozenset({"", ".", ".."})


def _tie_break_key(item: RemoteItem) -> tuple[bool, str, str]:
    # Oldest first; items without a timestamp sort after dated ones.
    return (item.created_at is None, item.created_at or "", item.id)


def resolve_directory(store: RemoteStore, parent_id: str, segment: str) -> str:
    """Return the ID of the folder named ``segment`` inside ``parent_id``.

    Only folders directly inside the parent are considered. When
    several folders with that name share the parent, the oldest one (then
    the lowest ID) wins so repeated runs pick the same folder. When none
    exists, the folder is created.

    Args:
        store: Remote store to query.
        parent_id: ID of the containing folder.
        segment: Folder name.

    Returns:
        ID of the existing or newly created folder.
    """
    logger.info("Checking for existing folder %s", segment)
    candidates = store.search(segment, parent_id, folders_only=True)
    matches = [item for item in candidates if item.in_folder(parent_id)]

    if matches:
        chosen = min(matches, key=_tie_break_key)
        if len(matches) > 1:
            logger.warning(
                "[resolve_directory] duplicate folders share a parent; name:%s;parent_id:%s;"
                "ids:%s;chosen:%s",
                segment,
                parent_id,
                ",".join(item.id for item in matches),
                chosen.id,
            )
        logger.info("Found existing folder %s (%s).", segment, chosen.id)
        return chosen.id

    logger.info("Creating folder: %s", segment)
    folder = store.create_folder(segment, parent_id)
    return folder.id


def directory_segments(path: str) -> list[str]:
    """Split the directory part of ``path`` into folder names, root to leaf.

    The anchor of an absolute path and empty, ``.`` and ``..`` parts are
    dropped: ``./build/../dist/app.zip`` gives ``["build", "dist"]``.
    """
    parent = PurePath(path).parent
    return [
        part for part in parent.parts if part not in _SKIPPED_SEGMENTS and part != parent.anchor
    ]


def mirror_directories(store: RemoteStore, root_id: str, path: str) -> str:
    """Recreate the directory chain of ``path`` below ``root_id``.

    Args:
        store: Remote store to query and create folders in.
        root_id: ID of the folder the chain starts from.
        path: Local file path whose directories are mirrored.

    Returns:
        ID of the deepest folder, or ``root_id`` when the path has no directories.
    """
    segments = directory_segments(path)
    logger.info("Mirroring directory structure: %s", segments)
    folder_id = root_id
    for segment in segments:
        folder_id = resolve_directory(store, folder_id, segment)
    return folder_id
