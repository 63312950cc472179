"""Action entry point: configuration, file expansion, upload and exit status."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from drive_upload.config import load_config
from drive_upload.exceptions import DriveUploadError
from drive_upload.orchestration.files import expand_files
from drive_upload.orchestration.uploader import batch_uploader_from_config
from drive_upload.upload.engine import ACTION_SKIPPED
from drive_upload.workflow import RUNNER_DEBUG_ENV, configure_logging, set_output

if TYPE_CHECKING:
    from drive_upload.store import RemoteStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

OUTPUT_UPLOADED = "uploaded"
OUTPUT_FILE_IDS = "file_ids"


def run(store: RemoteStore | None = None) -> None:
    """Run one upload pass from the action inputs.

    Args:
        store: Remote store override; the Graph drive named by the inputs is
            used when omitted.

    Raises:
        DriveUploadError: On any fatal condition.
    """
    config = load_config()
    files = expand_files(config.filename_pattern)
    uploader = batch_uploader_from_config(config, store)
    results = uploader.run(files)

    uploaded = [r for r in results if r.action != ACTION_SKIPPED]
    set_output(OUTPUT_UPLOADED, str(len(uploaded)))
    set_output(OUTPUT_FILE_IDS, "\n".join(r.item_id or "" for r in uploaded))


def main() -> int:
    """Console entry point.

    Returns:
        Process exit status: 0 on success, 1 on any fatal error.
    """
    configure_logging(debug=os.environ.get(RUNNER_DEBUG_ENV) == "1")
    try:
        run()
    except DriveUploadError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    except Exception:
        logger.error("[main] upload failed unexpectedly", exc_info=True)
        return EXIT_FAILURE
    return EXIT_OK
