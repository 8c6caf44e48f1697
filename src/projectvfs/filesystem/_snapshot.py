# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Flat snapshot format for persisting a project tree.

The persisted shape is a mapping from canonical path to entry::

    {
        "/": {"type": "directory"},
        "/src": {"type": "directory"},
        "/src/App.jsx": {"type": "file", "content": "export default App;"},
    }

Files carry ``content``; directories omit it. Export order follows
``FileSystemTree.serialize()``. Import replays entries in the given order and
creates any missing ancestor directories before the entry itself, so storage
backends that reorder keys still restore the same tree.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Final, NotRequired, TypedDict, cast

from ..config import DEFAULT_CONFIG, VfsConfig
from ..errors import SnapshotRestoreError, VfsError
from ..logging import get_logger
from ._path import normalize
from ._tree import FileSystemTree
from ._types import NodeKind

__all__ = [
    "SnapshotEntry",
    "dumps_snapshot",
    "export_snapshot",
    "import_snapshot",
    "loads_snapshot",
]

_FILE: Final[str] = "file"
_DIRECTORY: Final[str] = "directory"

logger = get_logger(__name__)


class SnapshotEntry(TypedDict):
    """One persisted entry."""

    type: str
    content: NotRequired[str]


def export_snapshot(tree: FileSystemTree) -> dict[str, SnapshotEntry]:
    """Flatten ``tree`` into the persisted snapshot mapping."""
    snapshot: dict[str, SnapshotEntry] = {}
    for entry in tree.serialize():
        if entry.kind is NodeKind.FILE:
            snapshot[entry.path] = {"type": _FILE, "content": entry.content or ""}
        else:
            snapshot[entry.path] = {"type": _DIRECTORY}
    logger.debug(
        "Exported snapshot.",
        event="snapshot.exported",
        context={"entries": len(snapshot)},
    )
    return snapshot


def import_snapshot(
    data: object, *, config: VfsConfig = DEFAULT_CONFIG
) -> FileSystemTree:
    """Rebuild a tree from a persisted snapshot mapping.

    Raises:
        SnapshotRestoreError: When the mapping is malformed or describes an
            impossible tree (a file with children, duplicate paths).
    """
    if not isinstance(data, Mapping):
        msg = f"Snapshot must be a mapping, got {type(data).__name__}."
        raise SnapshotRestoreError(msg)

    tree = FileSystemTree(config=config)
    seen: set[str] = set()
    for raw_path, raw_entry in cast(Mapping[object, object], data).items():
        try:
            path = normalize(raw_path, config=config)
        except VfsError as error:
            msg = f"Invalid snapshot path {raw_path!r}: {error.message}"
            raise SnapshotRestoreError(msg) from error
        if path in seen:
            msg = f"Duplicate snapshot entry for {path}."
            raise SnapshotRestoreError(msg)
        seen.add(path)
        _restore_entry(tree, path, raw_entry)

    logger.debug(
        "Imported snapshot.",
        event="snapshot.imported",
        context={"entries": len(tree)},
    )
    return tree


def _restore_entry(tree: FileSystemTree, path: str, raw_entry: object) -> None:
    if not isinstance(raw_entry, Mapping):
        msg = f"Snapshot entry for {path} must be a mapping."
        raise SnapshotRestoreError(msg)
    entry = cast(Mapping[str, object], raw_entry)
    entry_type = entry.get("type")
    content = entry.get("content")

    try:
        if entry_type == _DIRECTORY:
            if content is not None:
                msg = f"Directory entry {path} must not carry content."
                raise SnapshotRestoreError(msg)
            _ = tree.make_directory(path)
        elif entry_type == _FILE:
            if content is None:
                content = ""
            if not isinstance(content, str):
                msg = f"File entry {path} must carry string content."
                raise SnapshotRestoreError(msg)
            _ = tree.write_file(path, content)
        else:
            msg = f"Unknown snapshot entry type for {path}: {entry_type!r}"
            raise SnapshotRestoreError(msg)
    except VfsError as error:
        msg = f"Cannot restore {path}: {error.message}"
        raise SnapshotRestoreError(msg) from error


def dumps_snapshot(tree: FileSystemTree, *, indent: int | None = None) -> str:
    """Serialize ``tree`` to snapshot JSON text."""
    return json.dumps(export_snapshot(tree), indent=indent, ensure_ascii=False)


def loads_snapshot(text: str, *, config: VfsConfig = DEFAULT_CONFIG) -> FileSystemTree:
    """Rebuild a tree from snapshot JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as error:
        msg = f"Snapshot is not valid JSON: {error}"
        raise SnapshotRestoreError(msg) from error
    return import_snapshot(data, config=config)
