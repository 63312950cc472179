"""Batch uploader: derives per-file targets and drives the upload engine."""

from __future__ import annotations

import logging
from pathlib import PurePath
from typing import TYPE_CHECKING

from drive_upload.exceptions import TargetNameError
from drive_upload.graph.store import graph_drive_store_from_config
from drive_upload.upload.engine import (
    ACTION_CREATED,
    ACTION_SKIPPED,
    ACTION_UPDATED,
    UploadResult,
    UploadTarget,
    upload_file,
)
from drive_upload.upload.resolver import mirror_directories

if TYPE_CHECKING:
    from drive_upload.config import ActionConfig
    from drive_upload.store import RemoteStore

logger = logging.getLogger(__name__)


class BatchUploader:
    """Uploads a list of local files, one at a time, into a remote folder tree."""

    def __init__(
        self,
        store: RemoteStore,
        root_folder_id: str,
        name: str = "",
        name_prefix: str = "",
        mime_type: str = "",
        overwrite: bool = False,
        use_complete_source_name: bool = False,
        mirror_directory_structure: bool = False,
    ) -> None:
        """Initialise the batch uploader.

        Args:
            store: Remote store to upload into.
            root_folder_id: ID of the folder every upload (or mirrored chain) starts from.
            name: Explicit target name, used only when a single file matched.
            name_prefix: Prefix prepended to every derived name.
            mime_type: MIME type sent with every file.
            overwrite: Update same-named files in the target folder instead of
                creating new ones.
            use_complete_source_name: Use the matched path itself as the name.
            mirror_directory_structure: Recreate each file's local directories
                below the root folder.
        """
        self._store = store
        self._root_folder_id = root_folder_id
        self._name = name
        self._name_prefix = name_prefix
        self._mime_type = mime_type
        self._overwrite = overwrite
        self._use_complete_source_name = use_complete_source_name
        self._mirror_directory_structure = mirror_directory_structure

    def derive_target_name(self, path: str, file_count: int) -> str:
        """Compute the remote name for ``path``.

        The first applicable rule wins:
            1. use_complete_source_name: the matched path, unmodified.
            2. more than one file matched, or no explicit name: the base name.
            3. otherwise: the explicit name.
        The name prefix is then prepended.

        Args:
            path: Matched local path.
            file_count: Number of paths the pattern matched.

        Returns:
            The target name.

        Raises:
            TargetNameError: If the resulting name is empty.
        """
        if self._use_complete_source_name:
            target_name = path
        elif file_count > 1 or not self._name:
            target_name = PurePath(path).name
        else:
            target_name = self._name

        target_name = self._name_prefix + target_name
        if not target_name:
            raise TargetNameError(f"could not discover target file name for {path!r}")
        return target_name

    def resolve_folder(self, path: str) -> str:
        """Return the ID of the folder ``path`` is uploaded into."""
        if not self._mirror_directory_structure:
            return self._root_folder_id
        return mirror_directories(self._store, self._root_folder_id, path)

    def run(self, files: list[str]) -> list[UploadResult]:
        """Upload every file in order.

        Each file starts again from the root folder, so folders mirrored for
        one file never leak into the next. The first error stops the batch.

        Args:
            files: Matched local paths.

        Returns:
            One UploadResult per file, in input order.
        """
        results: list[UploadResult] = []
        for path in files:
            logger.info("Processing file %s", path)
            folder_id = self.resolve_folder(path)
            target = UploadTarget(
                name=self.derive_target_name(path, len(files)),
                folder_id=folder_id,
                mime_type=self._mime_type,
                overwrite=self._overwrite,
            )
            results.append(upload_file(self._store, path, target))

        logger.info(
            "[run] batch complete; file_count:%d;created:%d;updated:%d;skipped:%d",
            len(results),
            sum(1 for r in results if r.action == ACTION_CREATED),
            sum(1 for r in results if r.action == ACTION_UPDATED),
            sum(1 for r in results if r.action == ACTION_SKIPPED),
        )
        return results


def batch_uploader_from_config(
    config: ActionConfig, store: RemoteStore | None = None
) -> BatchUploader:
    """Construct a BatchUploader from action configuration.

    Args:
        config: Action configuration instance.
        store: Remote store to use; a GraphDriveStore is built from the config
            when omitted.

    Returns:
        Configured BatchUploader instance.
    """
    if store is None:
        store = graph_drive_store_from_config(config)
    return BatchUploader(
        store=store,
        root_folder_id=config.folder_id,
        name=config.name,
        name_prefix=config.name_prefix,
        mime_type=config.mime_type,
        overwrite=config.overwrite,
        use_complete_source_name=config.use_complete_source_name,
        mirror_directory_structure=config.mirror_directory_structure,
    )
