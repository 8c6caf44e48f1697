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

"""In-memory file tree for a single project.

The tree is a flat, insertion-ordered mapping from canonical path to node.
Parent/child relationships are derived from path strings; directory nodes
only carry child names, which every structural operation keeps in step with
the mapping.

Example usage::

    from projectvfs.filesystem import FileSystemTree, NodeKind

    tree = FileSystemTree()
    tree.write_file("/src/App.jsx", "export default App;")
    assert tree.list_directory("/src") == ("App.jsx",)
    assert tree.kind("/src") is NodeKind.DIRECTORY

Inputs are expected to be canonical (see :mod:`projectvfs.filesystem._path`).
The tree is not thread-safe; callers serialize access.
"""

from __future__ import annotations

import types
from collections.abc import Iterator
from dataclasses import dataclass, field

from ..config import DEFAULT_CONFIG, VfsConfig
from ..errors import (
    AlreadyExistsError,
    ForbiddenError,
    InvalidArgumentError,
    InvalidPathError,
    NotAFileError,
    NotDirectoryError,
    NotEmptyError,
    NotFoundError,
)
from ._path import (
    ROOT,
    ancestors,
    base_name,
    depth,
    is_path_under,
    parent,
    replace_prefix,
)
from ._types import DirectoryNode, FileNode, Node, NodeKind, TreeEntry, TreeState

__all__ = ["FileSystemTree"]


def _root_only() -> dict[str, Node]:
    return {ROOT: DirectoryNode()}


# ---------------------------------------------------------------------------
# Structural helpers (operate on a node mapping so rename can stage changes)
# ---------------------------------------------------------------------------


def _missing_ancestors(nodes: dict[str, Node], path: str) -> list[str]:
    """Return ancestors of ``path`` absent from ``nodes``, root first.

    Raises NotDirectoryError when an existing ancestor is a file.
    """
    missing: list[str] = []
    for ancestor in ancestors(path):
        node = nodes.get(ancestor)
        if node is None:
            missing.append(ancestor)
        elif isinstance(node, FileNode):
            msg = f"Not a directory: {ancestor}"
            raise NotDirectoryError(msg, path=ancestor)
    return missing


def _link(nodes: dict[str, Node], path: str) -> None:
    parent_path = parent(path)
    if parent_path is None:
        return
    parent_node = nodes[parent_path]
    if not isinstance(parent_node, DirectoryNode):  # pragma: no cover - guarded
        msg = f"Not a directory: {parent_path}"
        raise NotDirectoryError(msg, path=parent_path)
    nodes[parent_path] = parent_node.with_child(base_name(path))


def _unlink(nodes: dict[str, Node], path: str) -> None:
    parent_path = parent(path)
    if parent_path is None:  # pragma: no cover - root is never unlinked
        return
    parent_node = nodes[parent_path]
    if isinstance(parent_node, DirectoryNode):
        nodes[parent_path] = parent_node.without_child(base_name(path))


def _create_directories(nodes: dict[str, Node], paths: list[str]) -> None:
    for directory in paths:
        _link(nodes, directory)
        nodes[directory] = DirectoryNode()


# ---------------------------------------------------------------------------
# FileSystemTree
# ---------------------------------------------------------------------------


@dataclass(slots=True, eq=False)
class FileSystemTree:
    """Authoritative path -> node mapping for one project.

    The root directory always exists and can be neither deleted nor renamed.
    Every operation validates before it mutates, and multi-entry changes
    (recursive delete, directory rename) are staged in a fresh mapping that
    replaces the live one in a single assignment, so no intermediate state is
    ever observable.
    """

    config: VfsConfig = DEFAULT_CONFIG
    _nodes: dict[str, Node] = field(default_factory=_root_only)

    # --- Queries ---

    def exists(self, path: str) -> bool:
        """Return True if ``path`` names a file or directory."""
        return path in self._nodes

    def kind(self, path: str) -> NodeKind:
        """Classify ``path`` as a file, a directory, or missing."""
        node = self._nodes.get(path)
        if node is None:
            return NodeKind.NOT_FOUND
        return node.kind

    def node(self, path: str) -> Node:
        """Return the node stored at ``path``."""
        node = self._nodes.get(path)
        if node is None:
            msg = f"No such file or directory: {path}"
            raise NotFoundError(msg, path=path)
        return node

    def read_file(self, path: str) -> str:
        """Return the content of the file at ``path``."""
        node = self.node(path)
        if isinstance(node, DirectoryNode):
            msg = f"Is a directory: {path}"
            raise NotAFileError(msg, path=path)
        return node.content

    def list_directory(self, path: str) -> tuple[str, ...]:
        """Return the immediate child names of ``path`` in creation order."""
        node = self.node(path)
        if isinstance(node, FileNode):
            msg = f"Not a directory: {path}"
            raise NotDirectoryError(msg, path=path)
        return node.children

    def walk(self) -> Iterator[tuple[str, Node]]:
        """Yield ``(path, node)`` pairs in creation order."""
        yield from tuple(self._nodes.items())

    def serialize(self) -> tuple[TreeEntry, ...]:
        """Return every entry in creation order.

        Ancestors always precede their descendants, which keeps the output
        stable for diffing and lets it be replayed front to back.
        """
        entries: list[TreeEntry] = []
        for path, node in self._nodes.items():
            if isinstance(node, FileNode):
                entries.append(
                    TreeEntry(path=path, kind=NodeKind.FILE, content=node.content)
                )
            else:
                entries.append(
                    TreeEntry(
                        path=path, kind=NodeKind.DIRECTORY, children=node.children
                    )
                )
        return tuple(entries)

    # --- Mutations ---

    def write_file(self, path: str, content: str) -> bool:
        """Create or overwrite the file at ``path``.

        Missing ancestors are created as directories.

        Returns:
            True when the file was newly created, False when overwritten.
        """
        if len(content) > self.config.max_file_length:
            msg = (
                f"Content exceeds maximum length of "
                f"{self.config.max_file_length} characters."
            )
            raise InvalidArgumentError(msg, path=path)

        existing = self._nodes.get(path)
        if isinstance(existing, DirectoryNode):
            msg = f"Is a directory: {path}"
            raise NotAFileError(msg, path=path)

        missing = _missing_ancestors(self._nodes, path)
        _create_directories(self._nodes, missing)
        if existing is None:
            _link(self._nodes, path)
        self._nodes[path] = FileNode(content=content)
        return existing is None

    def make_directory(self, path: str) -> bool:
        """Create the directory at ``path`` along with missing ancestors.

        Returns:
            True when the directory was created, False if it already existed.
        """
        existing = self._nodes.get(path)
        if isinstance(existing, DirectoryNode):
            return False
        if isinstance(existing, FileNode):
            msg = f"A file exists at path: {path}"
            raise AlreadyExistsError(msg, path=path)

        missing = _missing_ancestors(self._nodes, path)
        _create_directories(self._nodes, [*missing, path])
        return True

    def delete_entry(self, path: str, *, recursive: bool = False) -> int:
        """Delete a file or directory.

        Directories are removed only when empty unless ``recursive`` is set.

        Returns:
            Number of entries removed, the target included.
        """
        if path == ROOT:
            raise ForbiddenError("Cannot delete the root directory.", path=path)

        node = self.node(path)
        if isinstance(node, DirectoryNode) and node.children and not recursive:
            msg = f"Directory not empty: {path}"
            raise NotEmptyError(msg, path=path)

        staged = {
            entry: value
            for entry, value in self._nodes.items()
            if not is_path_under(entry, path)
        }
        removed = len(self._nodes) - len(staged)
        _unlink(staged, path)
        self._nodes = staged
        return removed

    def rename_entry(self, old_path: str, new_path: str) -> int:
        """Move the entry at ``old_path`` (and its subtree) to ``new_path``.

        Missing ancestors of ``new_path`` are created. Moved entries keep
        their relative order and are placed after every existing entry, so
        ancestors still precede descendants. Raises InvalidPathError, leaving
        the tree untouched, when a moved entry would exceed the configured
        depth.

        Returns:
            Number of entries moved.
        """
        if ROOT in {old_path, new_path}:
            raise ForbiddenError("Cannot rename the root directory.", path=old_path)

        source = self.node(old_path)
        if new_path in self._nodes:
            msg = f"Destination already exists: {new_path}"
            raise AlreadyExistsError(msg, path=new_path)
        if isinstance(source, DirectoryNode) and is_path_under(new_path, old_path):
            msg = f"Cannot move {old_path} into its own subtree {new_path}"
            raise ForbiddenError(msg, path=new_path)

        missing = _missing_ancestors(self._nodes, new_path)

        moved: list[tuple[str, Node]] = []
        staged: dict[str, Node] = {}
        for entry, value in self._nodes.items():
            if is_path_under(entry, old_path):
                moved.append((entry, value))
            else:
                staged[entry] = value

        deepest = max(depth(entry) for entry, _ in moved)
        new_depth = depth(new_path) + deepest - depth(old_path)
        if new_depth > self.config.max_path_depth:
            msg = (
                f"Moving {old_path} to {new_path} would exceed the path depth "
                f"limit of {self.config.max_path_depth} segments."
            )
            raise InvalidPathError(msg, path=new_path)

        _unlink(staged, old_path)
        _create_directories(staged, missing)
        _link(staged, new_path)
        for entry, value in moved:
            staged[replace_prefix(entry, old_path, new_path)] = value

        self._nodes = staged
        return len(moved)

    # --- Snapshot Operations ---

    def snapshot(self) -> TreeState:
        """Capture the current state by sharing the immutable nodes."""
        return TreeState(nodes=types.MappingProxyType(dict(self._nodes)))

    def restore(self, state: TreeState) -> None:
        """Replace the current state with a previous capture."""
        nodes = dict(state.nodes)
        nodes.setdefault(ROOT, DirectoryNode())
        self._nodes = nodes

    # --- Dunder helpers ---

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, path: object) -> bool:
        return path in self._nodes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileSystemTree):
            return NotImplemented
        return self._nodes == other._nodes
