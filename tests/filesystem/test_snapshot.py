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

"""Tests for the persisted snapshot format."""

from __future__ import annotations

import json

import pytest

from projectvfs.config import VfsConfig
from projectvfs.errors import InvalidPathError, SnapshotError, SnapshotRestoreError
from projectvfs.filesystem import (
    FileSystemTree,
    NodeKind,
    dumps_snapshot,
    export_snapshot,
    import_snapshot,
    loads_snapshot,
)


@pytest.fixture
def populated() -> FileSystemTree:
    tree = FileSystemTree()
    _ = tree.write_file("/App.jsx", "export default App;")
    _ = tree.write_file("/components/Button.jsx", "<button />")
    _ = tree.make_directory("/assets")
    return tree


class TestExport:
    def test_export_shape(self, populated: FileSystemTree) -> None:
        assert export_snapshot(populated) == {
            "/": {"type": "directory"},
            "/App.jsx": {"type": "file", "content": "export default App;"},
            "/components": {"type": "directory"},
            "/components/Button.jsx": {"type": "file", "content": "<button />"},
            "/assets": {"type": "directory"},
        }

    def test_export_order_follows_serialize(self, populated: FileSystemTree) -> None:
        assert list(export_snapshot(populated)) == [
            entry.path for entry in populated.serialize()
        ]

    def test_empty_tree_exports_root_only(self) -> None:
        assert export_snapshot(FileSystemTree()) == {"/": {"type": "directory"}}


class TestImport:
    def test_round_trip(self, populated: FileSystemTree) -> None:
        restored = import_snapshot(export_snapshot(populated))
        assert restored == populated
        assert export_snapshot(restored) == export_snapshot(populated)

    def test_missing_ancestors_are_created(self) -> None:
        tree = import_snapshot(
            {"/src/components/Button.jsx": {"type": "file", "content": "x"}}
        )
        assert tree.kind("/src/components") is NodeKind.DIRECTORY
        assert tree.read_file("/src/components/Button.jsx") == "x"

    def test_descendant_listed_before_ancestor(self) -> None:
        tree = import_snapshot(
            {
                "/src/App.jsx": {"type": "file", "content": "app"},
                "/src": {"type": "directory"},
            }
        )
        assert tree.list_directory("/src") == ("App.jsx",)

    def test_root_entry_is_optional(self) -> None:
        tree = import_snapshot({"/a.txt": {"type": "file", "content": ""}})
        assert tree.list_directory("/") == ("a.txt",)

    def test_paths_are_normalized(self) -> None:
        tree = import_snapshot({"src//App.jsx": {"type": "file", "content": ""}})
        assert tree.exists("/src/App.jsx")

    def test_file_without_content_is_empty(self) -> None:
        tree = import_snapshot({"/a.txt": {"type": "file"}})
        assert tree.read_file("/a.txt") == ""

    def test_config_is_applied(self) -> None:
        config = VfsConfig(max_path_depth=4)
        tree = import_snapshot({"/a": {"type": "directory"}}, config=config)
        assert tree.config is config

    def test_round_trip_after_deep_rename(self) -> None:
        config = VfsConfig(max_path_depth=3)
        tree = FileSystemTree(config=config)
        _ = tree.write_file("/a/b/c.js", "c")
        _ = tree.write_file("/d.js", "d")
        _ = tree.rename_entry("/d.js", "/x/y/d.js")
        with pytest.raises(InvalidPathError):
            _ = tree.rename_entry("/a", "/x/a")
        assert import_snapshot(export_snapshot(tree), config=config) == tree

    def test_non_mapping_is_rejected(self) -> None:
        with pytest.raises(SnapshotRestoreError, match="must be a mapping"):
            _ = import_snapshot(["/a"])

    def test_entry_must_be_mapping(self) -> None:
        with pytest.raises(SnapshotRestoreError):
            _ = import_snapshot({"/a": "file"})

    def test_unknown_type_is_rejected(self) -> None:
        with pytest.raises(SnapshotRestoreError, match="Unknown snapshot entry type"):
            _ = import_snapshot({"/a": {"type": "symlink"}})

    def test_non_string_content_is_rejected(self) -> None:
        with pytest.raises(SnapshotRestoreError):
            _ = import_snapshot({"/a": {"type": "file", "content": 42}})

    def test_directory_with_content_is_rejected(self) -> None:
        with pytest.raises(SnapshotRestoreError):
            _ = import_snapshot({"/a": {"type": "directory", "content": "x"}})

    def test_entry_under_file_is_rejected(self) -> None:
        with pytest.raises(SnapshotRestoreError, match="Cannot restore"):
            _ = import_snapshot(
                {
                    "/a": {"type": "file", "content": ""},
                    "/a/b": {"type": "file", "content": ""},
                }
            )

    def test_duplicate_canonical_paths_are_rejected(self) -> None:
        with pytest.raises(SnapshotRestoreError, match="Duplicate"):
            _ = import_snapshot(
                {
                    "/a": {"type": "file", "content": "1"},
                    "a/": {"type": "file", "content": "2"},
                }
            )

    def test_invalid_path_is_rejected(self) -> None:
        with pytest.raises(SnapshotRestoreError, match="Invalid snapshot path"):
            _ = import_snapshot({"/../x": {"type": "directory"}})

    def test_restore_error_is_a_snapshot_error(self) -> None:
        with pytest.raises(SnapshotError):
            _ = import_snapshot(None)


class TestJson:
    def test_dumps_and_loads(self, populated: FileSystemTree) -> None:
        text = dumps_snapshot(populated)
        assert json.loads(text)["/App.jsx"]["content"] == "export default App;"
        assert loads_snapshot(text) == populated

    def test_dumps_keeps_unicode(self) -> None:
        tree = FileSystemTree()
        _ = tree.write_file("/hello.txt", "héllo ✓")
        assert "héllo ✓" in dumps_snapshot(tree)

    def test_loads_rejects_invalid_json(self) -> None:
        with pytest.raises(SnapshotRestoreError, match="not valid JSON"):
            _ = loads_snapshot("{not json")

    def test_loads_rejects_non_object(self) -> None:
        with pytest.raises(SnapshotRestoreError):
            _ = loads_snapshot("[]")
