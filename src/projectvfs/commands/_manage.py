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

"""Structural commands: ``rename`` and ``delete``."""

from __future__ import annotations

from typing import assert_never

from ..filesystem import FileSystemTree, normalize
from ._params import DeleteParams, ManageParams, RenameParams
from ._results import EntryDeleted, EntryRenamed, ManageResult

__all__ = ["ManagementCommandInterpreter"]


class ManagementCommandInterpreter:
    """Apply rename and delete commands to a :class:`FileSystemTree`."""

    def __init__(self, tree: FileSystemTree) -> None:
        super().__init__()
        self._tree = tree

    @property
    def tree(self) -> FileSystemTree:
        return self._tree

    def execute(self, params: ManageParams) -> ManageResult:
        match params:
            case RenameParams(path=path, new_path=new_path):
                return self.rename(path, new_path)
            case DeleteParams(path=path):
                return self.delete(path)
            case _ as unreachable:  # pragma: no cover - exhaustiveness sentinel
                assert_never(unreachable)

    def rename(self, path: str, new_path: str) -> EntryRenamed:
        """Move a file or directory, creating missing parents of the target."""
        config = self._tree.config
        source = normalize(path, config=config)
        target = normalize(new_path, config=config)
        moved = self._tree.rename_entry(source, target)
        return EntryRenamed(path=source, new_path=target, moved=moved)

    def delete(self, path: str) -> EntryDeleted:
        """Remove a file, or a directory together with everything below it."""
        canonical = normalize(path, config=self._tree.config)
        removed = self._tree.delete_entry(canonical, recursive=True)
        return EntryDeleted(path=canonical, removed=removed)
