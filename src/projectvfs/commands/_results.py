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

"""Success values returned by the command interpreters.

Each type renders the text handed back to the agent as the tool result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

EntryKind = Literal["file", "directory"]


@dataclass(slots=True, frozen=True)
class DirectoryListing:
    """Immediate children of a viewed directory."""

    path: str
    entries: tuple[tuple[str, EntryKind], ...]

    def render(self) -> str:
        if not self.entries:
            return f"Directory {self.path} is empty."
        return "\n".join(
            f"[DIR] {name}" if kind == "directory" else f"[FILE] {name}"
            for name, kind in self.entries
        )


@dataclass(slots=True, frozen=True)
class FileView:
    """Content of a viewed file.

    ``numbered`` is set when a line range was requested; ``content`` then
    holds the line-numbered slice.
    """

    path: str
    content: str
    start_line: int
    end_line: int
    total_lines: int
    numbered: bool = False

    def render(self) -> str:
        if not self.content:
            return f"File {self.path} is empty."
        return self.content


@dataclass(slots=True, frozen=True)
class FileWritten:
    """Outcome of ``create``."""

    path: str
    created: bool
    size: int

    def render(self) -> str:
        action = "File created" if self.created else "File overwritten"
        return f"{action}: {self.path} ({self.size} characters)"


@dataclass(slots=True, frozen=True)
class TextReplaced:
    """Outcome of ``str_replace``."""

    path: str
    line: int

    def render(self) -> str:
        return f"Replaced text in {self.path} at line {self.line}."


@dataclass(slots=True, frozen=True)
class TextInserted:
    """Outcome of ``insert``."""

    path: str
    insert_line: int
    lines_added: int

    def render(self) -> str:
        label = "line" if self.lines_added == 1 else "lines"
        return (
            f"Inserted {self.lines_added} {label} into {self.path} "
            f"after line {self.insert_line}."
        )


@dataclass(slots=True, frozen=True)
class EntryRenamed:
    """Outcome of ``rename``."""

    path: str
    new_path: str
    moved: int

    def render(self) -> str:
        return f"Renamed {self.path} to {self.new_path}."


@dataclass(slots=True, frozen=True)
class EntryDeleted:
    """Outcome of ``delete``."""

    path: str
    removed: int

    def render(self) -> str:
        label = "entry" if self.removed == 1 else "entries"
        return f"Deleted {self.path} ({self.removed} {label})."


type EditResult = (
    DirectoryListing | FileView | FileWritten | TextReplaced | TextInserted
)
type ManageResult = EntryRenamed | EntryDeleted
type CommandResult = EditResult | ManageResult


__all__ = [
    "CommandResult",
    "DirectoryListing",
    "EditResult",
    "EntryDeleted",
    "EntryKind",
    "EntryRenamed",
    "FileView",
    "FileWritten",
    "ManageResult",
    "TextInserted",
    "TextReplaced",
]
