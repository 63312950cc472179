"""Pytest configuration — adds src/ to sys.path and provides an in-memory store."""

import os
import sys
from typing import IO

import pytest

# Add src/ to Python path so tests can import from drive_upload
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from drive_upload.exceptions import RemoteStoreError  # noqa: E402
from drive_upload.graph.models import RemoteItem  # noqa: E402


class InMemoryStore:
    """RemoteStore fake that keeps items in a dict and records every call."""

    def __init__(self) -> None:
        self.items: dict[str, RemoteItem] = {}
        self.contents: dict[str, bytes] = {}
        self.calls: list[tuple[object, ...]] = []
        self.streams: list[IO[bytes]] = []
        self.fail_on: set[str] = set()
        self._counter = 0

    def add(
        self,
        name: str,
        parents: list[str],
        is_folder: bool = False,
        created_at: str | None = None,
        item_id: str | None = None,
        mime_type: str = "",
    ) -> RemoteItem:
        self._counter += 1
        item = RemoteItem(
            id=item_id or f"{'folder' if is_folder else 'file'}-{self._counter}",
            name=name,
            mime_type=mime_type,
            parents=list(parents),
            is_folder=is_folder,
            created_at=created_at,
        )
        self.items[item.id] = item
        return item

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RemoteStoreError(f"{operation} failed")

    def call_names(self) -> list[object]:
        return [call[0] for call in self.calls]

    def search(
        self, name: str, parent_id: str, folders_only: bool = False
    ) -> list[RemoteItem]:
        self.calls.append(("search", name, parent_id, folders_only))
        self._check("search")
        return [
            item
            for item in self.items.values()
            if item.name == name
            and item.in_folder(parent_id)
            and (item.is_folder or not folders_only)
        ]

    def create_folder(self, name: str, parent_id: str) -> RemoteItem:
        self.calls.append(("create_folder", name, parent_id))
        self._check("create_folder")
        return self.add(name, [parent_id], is_folder=True)

    def create_file(
        self, name: str, parent_id: str, stream: IO[bytes], size: int, mime_type: str
    ) -> RemoteItem:
        self.calls.append(("create_file", name, parent_id, mime_type))
        self.streams.append(stream)
        self._check("create_file")
        data = stream.read()
        assert len(data) == size
        item = self.add(name, [parent_id], mime_type=mime_type)
        self.contents[item.id] = data
        return item

    def update_file(
        self,
        item: RemoteItem,
        parent_id: str,
        name: str,
        stream: IO[bytes],
        size: int,
        mime_type: str,
    ) -> RemoteItem:
        self.calls.append(("update_file", item.id, parent_id, name, mime_type))
        self.streams.append(stream)
        self._check("update_file")
        data = stream.read()
        assert len(data) == size
        stored = self.items[item.id]
        stored.name = name
        stored.mime_type = mime_type
        if parent_id not in stored.parents:
            stored.parents.append(parent_id)
        self.contents[stored.id] = data
        return stored


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()
