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

"""Typed command payloads and their parsers.

Agents send loosely typed JSON payloads. The parsers below turn them into
frozen parameter dataclasses, raising :class:`InvalidArgumentError` for
missing or ill-typed fields. Paths stay raw here; the interpreters normalize
them.

Edit payload::

    {"command": "view" | "create" | "str_replace" | "insert", "path": str,
     "content"?: str, "old_str"?: str, "new_str"?: str,
     "insert_line"?: int, "text"?: str, "view_range"?: [start, end]}

Manage payload::

    {"command": "rename" | "delete", "path": str, "new_path"?: str}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, Literal, cast

from ..errors import InvalidArgumentError

EditCommand = Literal["view", "create", "str_replace", "insert"]
ManageCommand = Literal["rename", "delete"]

EDIT_COMMANDS: Final[frozenset[str]] = frozenset(
    {"view", "create", "str_replace", "insert"}
)
MANAGE_COMMANDS: Final[frozenset[str]] = frozenset({"rename", "delete"})

_MISSING: Final = object()


# ---------------------------------------------------------------------------
# Parameter Types
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ViewParams:
    """Show a file, a line range of a file, or a directory listing.

    ``view_range`` is 1-based and inclusive; an end of ``-1`` means the last
    line.
    """

    path: str
    view_range: tuple[int, int] | None = None


@dataclass(slots=True, frozen=True)
class CreateParams:
    """Create or overwrite a file."""

    path: str
    content: str = ""


@dataclass(slots=True, frozen=True)
class StrReplaceParams:
    """Replace the single occurrence of ``old_str`` with ``new_str``."""

    path: str
    old_str: str
    new_str: str = ""


@dataclass(slots=True, frozen=True)
class InsertParams:
    """Insert ``text`` after line ``insert_line`` (0 inserts at the top)."""

    path: str
    insert_line: int
    text: str


@dataclass(slots=True, frozen=True)
class RenameParams:
    """Move a file or directory to ``new_path``."""

    path: str
    new_path: str


@dataclass(slots=True, frozen=True)
class DeleteParams:
    """Delete a file or a directory with all its contents."""

    path: str


type EditParams = ViewParams | CreateParams | StrReplaceParams | InsertParams
type ManageParams = RenameParams | DeleteParams


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_edit_args(args: Mapping[str, object]) -> EditParams:
    """Parse an edit payload into its parameter dataclass."""
    command = _command(args, EDIT_COMMANDS)
    path = _require_str(args, "path")
    if command == "view":
        return ViewParams(path=path, view_range=_view_range(args))
    if command == "create":
        content = _optional_str(args, "content", "file_text")
        return CreateParams(path=path, content=content or "")
    if command == "str_replace":
        return StrReplaceParams(
            path=path,
            old_str=_require_str(args, "old_str"),
            new_str=_optional_str(args, "new_str") or "",
        )
    return InsertParams(
        path=path,
        insert_line=_require_int(args, "insert_line"),
        text=_require_str(args, "text", "new_str"),
    )


def parse_manage_args(args: Mapping[str, object]) -> ManageParams:
    """Parse a management payload into its parameter dataclass."""
    command = _command(args, MANAGE_COMMANDS)
    path = _require_str(args, "path")
    if command == "rename":
        return RenameParams(path=path, new_path=_require_str(args, "new_path"))
    return DeleteParams(path=path)


def _command(args: Mapping[str, object], allowed: frozenset[str]) -> str:
    command = args.get("command")
    if not isinstance(command, str) or command not in allowed:
        expected = ", ".join(sorted(allowed))
        msg = f"Unknown command {command!r}; expected one of: {expected}."
        raise InvalidArgumentError(msg)
    return command


def _lookup(args: Mapping[str, object], names: tuple[str, ...]) -> object:
    for name in names:
        value = args.get(name, _MISSING)
        if value is not _MISSING and value is not None:
            return value
    return _MISSING


def _require_str(args: Mapping[str, object], *names: str) -> str:
    value = _lookup(args, names)
    if value is _MISSING:
        msg = f"Missing required field '{names[0]}'."
        raise InvalidArgumentError(msg)
    if not isinstance(value, str):
        msg = f"Field '{names[0]}' must be a string."
        raise InvalidArgumentError(msg)
    return value


def _optional_str(args: Mapping[str, object], *names: str) -> str | None:
    value = _lookup(args, names)
    if value is _MISSING:
        return None
    if not isinstance(value, str):
        msg = f"Field '{names[0]}' must be a string."
        raise InvalidArgumentError(msg)
    return value


def _require_int(args: Mapping[str, object], name: str) -> int:
    value = _lookup(args, (name,))
    if value is _MISSING:
        msg = f"Missing required field '{name}'."
        raise InvalidArgumentError(msg)
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"Field '{name}' must be an integer."
        raise InvalidArgumentError(msg)
    return value


def _view_range(args: Mapping[str, object]) -> tuple[int, int] | None:
    value = _lookup(args, ("view_range",))
    if value is _MISSING:
        return None
    if not isinstance(value, (list, tuple)):
        raise InvalidArgumentError("Field 'view_range' must be a [start, end] pair.")
    items = cast(list[object] | tuple[object, ...], value)
    if len(items) != 2 or not all(
        isinstance(item, int) and not isinstance(item, bool) for item in items
    ):
        raise InvalidArgumentError("Field 'view_range' must be a [start, end] pair.")
    start, end = cast(tuple[int, int], tuple(items))
    return start, end


__all__ = [
    "EDIT_COMMANDS",
    "MANAGE_COMMANDS",
    "CreateParams",
    "DeleteParams",
    "EditCommand",
    "EditParams",
    "InsertParams",
    "ManageCommand",
    "ManageParams",
    "RenameParams",
    "StrReplaceParams",
    "ViewParams",
    "parse_edit_args",
    "parse_manage_args",
]
