"""Upload decision engine: locate an existing remote file, then create or update."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from typing import TYPE_CHECKING

from drive_upload.exceptions import LocalFileError

if TYPE_CHECKING:
    from drive_upload.graph.models import RemoteItem
    from drive_upload.store import RemoteStore

logger = logging.getLogger(__name__)

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_SKIPPED = "skipped"


@dataclass(frozen=True)
class UploadTarget:
    """Where and how one local file is uploaded.

    Attributes:
        name: Remote file name (never empty).
        folder_id: ID of the remote folder the file goes into.
        mime_type: MIME type sent with the content; empty lets the store decide.
        overwrite: Update a same-named file already in ``folder_id``.
    """

    name: str
    folder_id: str
    mime_type: str = ""
    overwrite: bool = False


@dataclass(frozen=True)
class UploadResult:
    """Outcome of uploading one local path."""

    local_path: str
    target_name: str
    folder_id: str
    action: str
    item_id: str | None = None


def locate_file(store: RemoteStore, name: str, folder_id: str) -> RemoteItem | None:
    """Find the file named ``name`` inside ``folder_id``.

    The store looks the name up below the folder and applies its own naming
    rules; folder containment is checked again here. Scanning stops at the
    first item in the folder.

    Args:
        store: Remote store to search.
        name: Target file name.
        folder_id: ID of the folder the file must be in.

    Returns:
        The matching item, or None when the folder holds no such file.
    """
    candidates = store.search(name, folder_id)
    logger.info("Files: %d", len(candidates))

    for item in candidates:
        if item.in_folder(folder_id):
            logger.debug("file found in expected folder")
            return item
    return None


def transfer(
    store: RemoteStore,
    local_path: str,
    target: UploadTarget,
    existing: RemoteItem | None = None,
) -> UploadResult:
    """Send the content of ``local_path`` to the store.

    Directories are skipped. With ``existing`` the remote item is updated in
    place; otherwise a new file is created in the target folder. The local
    file is open only for the duration of the store call.

    Args:
        store: Remote store to write to.
        local_path: Path of the local file.
        target: Name, folder and MIME type to upload with.
        existing: Remote item to update, or None to create.

    Returns:
        UploadResult describing what happened.

    Raises:
        LocalFileError: If the path cannot be stat-ed or opened.
    """
    try:
        info = os.stat(local_path)
    except OSError as exc:
        raise LocalFileError(f"unable to stat file {local_path}: {exc}") from exc

    if stat.S_ISDIR(info.st_mode):
        logger.info("%s is a directory. skipping upload.", local_path)
        return UploadResult(
            local_path=local_path,
            target_name=target.name,
            folder_id=target.folder_id,
            action=ACTION_SKIPPED,
        )

    try:
        fh = open(local_path, "rb")  # noqa: SIM115
    except OSError as exc:
        raise LocalFileError(f"opening file {local_path} failed: {exc}") from exc

    with fh:
        if existing is not None:
            item = store.update_file(
                existing, target.folder_id, target.name, fh, info.st_size, target.mime_type
            )
            action = ACTION_UPDATED
        else:
            item = store.create_file(
                target.name, target.folder_id, fh, info.st_size, target.mime_type
            )
            action = ACTION_CREATED

    logger.debug("uploaded/updated file.")
    return UploadResult(
        local_path=local_path,
        target_name=target.name,
        folder_id=target.folder_id,
        action=action,
        item_id=item.id,
    )


def upload_file(store: RemoteStore, local_path: str, target: UploadTarget) -> UploadResult:
    """Upload one local file, creating or overwriting as configured.

    Without ``target.overwrite`` the file is always created and the store is
    not searched. With it, a file of the same name already in the target
    folder is updated; when there is none a new file is created.

    Args:
        store: Remote store to write to.
        local_path: Path of the local file.
        target: Resolved upload target.

    Returns:
        UploadResult describing what happened.
    """
    logger.info("target file name: %s", target.name)

    if not target.overwrite:
        return transfer(store, local_path, target)

    existing = locate_file(store, target.name, target.folder_id)
    if existing is None:
        logger.info("No similar files found. Creating a new file")
        return transfer(store, local_path, target)

    logger.info("Overwriting file: %s (%s)", existing.name, existing.id)
    return transfer(store, local_path, target, existing)
