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

"""In-memory project tree, path normalization and snapshot codec.

Example usage::

    from projectvfs.filesystem import FileSystemTree, export_snapshot, normalize

    tree = FileSystemTree()
    tree.write_file(normalize("src/App.jsx"), "export default App;")
    persisted = export_snapshot(tree)
"""

from __future__ import annotations

from ._path import (
    ROOT,
    ancestors,
    base_name,
    is_path_under,
    join,
    normalize,
    parent,
)
from ._snapshot import (
    SnapshotEntry,
    dumps_snapshot,
    export_snapshot,
    import_snapshot,
    loads_snapshot,
)
from ._tree import FileSystemTree
from ._types import (
    DirectoryNode,
    FileNode,
    Node,
    NodeKind,
    TreeEntry,
    TreeState,
)

__all__ = [
    "ROOT",
    "DirectoryNode",
    "FileNode",
    "FileSystemTree",
    "Node",
    "NodeKind",
    "SnapshotEntry",
    "TreeEntry",
    "TreeState",
    "ancestors",
    "base_name",
    "dumps_snapshot",
    "export_snapshot",
    "import_snapshot",
    "is_path_under",
    "join",
    "loads_snapshot",
    "normalize",
    "parent",
]
