"""Integration tests for Microsoft Graph drive uploads.

These tests require real Azure credentials and a scratch folder, and are
skipped in CI/CD unless INPUT_CREDENTIALS, INPUT_DRIVEID and INPUT_FOLDERID
are set.
"""

import os
import uuid
from pathlib import Path

import pytest

pytestmark = pytest.mark.skipif(
    not all(os.getenv(name) for name in ("INPUT_CREDENTIALS", "INPUT_DRIVEID", "INPUT_FOLDERID")),
    reason="Real Graph credentials not available",
)


def test_create_then_overwrite_real(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Upload a file into a mirrored folder, then overwrite it in place.

    Asserts that the second run updates the item created by the first.
    """
    from drive_upload.config import load_config
    from drive_upload.graph.store import graph_drive_store_from_config
    from drive_upload.orchestration.uploader import BatchUploader

    config = load_config()
    store = graph_drive_store_from_config(config)

    run_dir = f"it-{uuid.uuid4().hex[:8]}"
    (tmp_path / run_dir).mkdir()
    local = tmp_path / run_dir / "hello.txt"
    monkeypatch.chdir(tmp_path)

    uploader = BatchUploader(
        store=store,
        root_folder_id=config.folder_id,
        overwrite=True,
        mirror_directory_structure=True,
    )

    local.write_text("first")
    [created] = uploader.run([f"{run_dir}/hello.txt"])
    local.write_text("second")
    [updated] = uploader.run([f"{run_dir}/hello.txt"])

    assert created.action == "created"
    assert updated.action == "updated"
    assert updated.item_id == created.item_id
    assert updated.folder_id == created.folder_id
