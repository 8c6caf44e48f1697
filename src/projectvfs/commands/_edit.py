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

"""File-content commands: ``view``, ``create``, ``str_replace``, ``insert``."""

from __future__ import annotations

from typing import assert_never

from ..errors import (
    AmbiguousMatchError,
    InvalidArgumentError,
    InvalidRangeError,
    NoMatchError,
)
from ..filesystem import DirectoryNode, FileSystemTree, join, normalize
from ._params import (
    CreateParams,
    EditParams,
    InsertParams,
    StrReplaceParams,
    ViewParams,
)
from ._results import (
    DirectoryListing,
    EditResult,
    EntryKind,
    FileView,
    FileWritten,
    TextInserted,
    TextReplaced,
)

__all__ = ["EditCommandInterpreter", "join_lines", "split_lines"]


def split_lines(content: str) -> tuple[list[str], bool]:
    """Split ``content`` into lines and report whether it ended with a newline.

    An empty file has no lines; ``"a\\nb\\n"`` has two.
    """
    if not content:
        return [], False
    if content.endswith("\n"):
        return content[:-1].split("\n"), True
    return content.split("\n"), False


def join_lines(lines: list[str], trailing_newline: bool) -> str:
    """Inverse of :func:`split_lines`."""
    joined = "\n".join(lines)
    if trailing_newline and lines:
        return joined + "\n"
    return joined


class EditCommandInterpreter:
    """Apply file-content commands to a :class:`FileSystemTree`.

    Every method takes a raw path, normalizes it with the tree's
    configuration, and either returns a result value or raises a
    :class:`~projectvfs.errors.VfsError`. Each command performs at most one
    tree mutation, after all validation has passed.
    """

    def __init__(self, tree: FileSystemTree) -> None:
        super().__init__()
        self._tree = tree

    @property
    def tree(self) -> FileSystemTree:
        return self._tree

    def execute(self, params: EditParams) -> EditResult:
        """Dispatch a parsed edit payload."""
        match params:
            case ViewParams(path=path, view_range=view_range):
                return self.view(path, view_range)
            case CreateParams(path=path, content=content):
                return self.create(path, content)
            case StrReplaceParams(path=path, old_str=old_str, new_str=new_str):
                return self.str_replace(path, old_str, new_str)
            case InsertParams(path=path, insert_line=insert_line, text=text):
                return self.insert(path, insert_line, text)
            case _ as unreachable:  # pragma: no cover - exhaustiveness sentinel
                assert_never(unreachable)

    def view(
        self, path: str, view_range: tuple[int, int] | None = None
    ) -> DirectoryListing | FileView:
        """Return a directory listing, a whole file, or a numbered line range."""
        canonical = normalize(path, config=self._tree.config)
        node = self._tree.node(canonical)
        if isinstance(node, DirectoryNode):
            return self._list(canonical, node)

        lines, _ = split_lines(node.content)
        total = len(lines)
        if view_range is None:
            return FileView(
                path=canonical,
                content=node.content,
                start_line=1 if total else 0,
                end_line=total,
                total_lines=total,
            )

        start, end = view_range
        if end == -1:
            end = total
        if start < 1 or start > total or end < start or end > total:
            msg = (
                f"Invalid view_range [{view_range[0]}, {view_range[1]}] for "
                f"{canonical} with {total} lines."
            )
            raise InvalidRangeError(msg, path=canonical)

        width = self._tree.config.view_line_width
        numbered = "\n".join(
            f"{number:>{width}}\t{line}"
            for number, line in enumerate(lines[start - 1 : end], start=start)
        )
        return FileView(
            path=canonical,
            content=numbered,
            start_line=start,
            end_line=end,
            total_lines=total,
            numbered=True,
        )

    def _list(self, path: str, node: DirectoryNode) -> DirectoryListing:
        entries: list[tuple[str, EntryKind]] = []
        for name in node.children:
            child = self._tree.node(join(path, name))
            kind: EntryKind = (
                "directory" if isinstance(child, DirectoryNode) else "file"
            )
            entries.append((name, kind))
        return DirectoryListing(path=path, entries=tuple(entries))

    def create(self, path: str, content: str) -> FileWritten:
        """Create ``path`` with ``content``, overwriting any existing file."""
        canonical = normalize(path, config=self._tree.config)
        created = self._tree.write_file(canonical, content)
        return FileWritten(path=canonical, created=created, size=len(content))

    def str_replace(self, path: str, old_str: str, new_str: str) -> TextReplaced:
        """Replace the single occurrence of ``old_str`` in the file.

        Occurrences are exact, case-sensitive and non-overlapping, counted left
        to right. Zero or several occurrences leave the file untouched.
        """
        canonical = normalize(path, config=self._tree.config)
        if not old_str:
            raise InvalidArgumentError("old_str must not be empty.", path=canonical)

        content = self._tree.read_file(canonical)
        occurrences = content.count(old_str)
        if occurrences == 0:
            msg = f"old_str not found in {canonical}."
            raise NoMatchError(msg, path=canonical)
        if occurrences > 1:
            msg = (
                f"old_str occurs {occurrences} times in {canonical}; "
                "include more context so it matches exactly once."
            )
            raise AmbiguousMatchError(msg, path=canonical)

        index = content.index(old_str)
        updated = content[:index] + new_str + content[index + len(old_str) :]
        _ = self._tree.write_file(canonical, updated)
        return TextReplaced(path=canonical, line=content.count("\n", 0, index) + 1)

    def insert(self, path: str, insert_line: int, text: str) -> TextInserted:
        """Insert ``text`` as new line(s) after line ``insert_line``.

        ``insert_line`` ranges over ``[0, N]`` where ``N`` is the current line
        count: 0 inserts before the first line, ``N`` appends after the last. A
        single trailing newline on ``text`` is dropped since line boundaries
        are added on rejoin.
        """
        canonical = normalize(path, config=self._tree.config)
        content = self._tree.read_file(canonical)
        lines, trailing_newline = split_lines(content)
        if not 0 <= insert_line <= len(lines):
            msg = (
                f"insert_line {insert_line} is outside [0, {len(lines)}] "
                f"for {canonical}."
            )
            raise InvalidRangeError(msg, path=canonical)

        new_lines = text.removesuffix("\n").split("\n")
        lines[insert_line:insert_line] = new_lines
        _ = self._tree.write_file(canonical, join_lines(lines, trailing_newline))
        return TextInserted(
            path=canonical, insert_line=insert_line, lines_added=len(new_lines)
        )
