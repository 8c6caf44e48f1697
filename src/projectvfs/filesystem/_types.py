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

"""Node and result types for the project file tree.

All types are immutable frozen dataclasses. A tree node is one of two
variants, so a "file with children" or a "directory with content" cannot be
expressed:

- ``FileNode``: holds text content
- ``DirectoryNode``: holds the ordered names of its immediate children

Supporting types:

- ``NodeKind``: classification returned by ``FileSystemTree.kind()``
- ``TreeEntry``: one row of ``FileSystemTree.serialize()``
- ``TreeState``: frozen capture used to roll back a failed command
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Literal

SnapshotType = Literal["file", "directory"]


class NodeKind(Enum):
    """Classification of a path within the tree."""

    FILE = "file"
    DIRECTORY = "directory"
    NOT_FOUND = "not_found"


@dataclass(slots=True, frozen=True)
class FileNode:
    """A file holding UTF-8 text content."""

    content: str = ""

    @property
    def kind(self) -> NodeKind:
        return NodeKind.FILE


@dataclass(slots=True, frozen=True)
class DirectoryNode:
    """A directory holding the names of its immediate children.

    Names are kept in creation order. The tree rewrites the tuple on every
    structural change; nodes are never mutated in place.
    """

    children: tuple[str, ...] = ()

    @property
    def kind(self) -> NodeKind:
        return NodeKind.DIRECTORY

    def with_child(self, name: str) -> DirectoryNode:
        if name in self.children:
            return self
        return DirectoryNode(children=(*self.children, name))

    def without_child(self, name: str) -> DirectoryNode:
        return DirectoryNode(
            children=tuple(child for child in self.children if child != name)
        )


type Node = FileNode | DirectoryNode


@dataclass(slots=True, frozen=True)
class TreeEntry:
    """Row returned by ``FileSystemTree.serialize()``.

    Attributes:
        path: Canonical path of the entry.
        kind: ``NodeKind.FILE`` or ``NodeKind.DIRECTORY``.
        content: File content; ``None`` for directories.
        children: Immediate child names; empty for files.
    """

    path: str
    kind: NodeKind
    content: str | None = None
    children: tuple[str, ...] = ()

    @property
    def snapshot_type(self) -> SnapshotType:
        return "file" if self.kind is NodeKind.FILE else "directory"


@dataclass(slots=True, frozen=True)
class TreeState:
    """Frozen capture of every node in a tree.

    Nodes are immutable, so a capture shares them with the live tree and only
    copies the path index.
    """

    nodes: Mapping[str, Node]


__all__ = [
    "DirectoryNode",
    "FileNode",
    "Node",
    "NodeKind",
    "SnapshotType",
    "TreeEntry",
    "TreeState",
]
