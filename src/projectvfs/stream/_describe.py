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

"""Short progress labels for tool invocations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

from ._invocation import TOOL_ALIASES

__all__ = ["describe_invocation"]

_EDIT_VERBS: Final[Mapping[str, str]] = {
    "create": "Creating",
    "str_replace": "Editing",
    "insert": "Inserting into",
    "view": "Viewing",
}


def _file_name(value: object) -> str:
    if not isinstance(value, str):
        return "file"
    return value.rsplit("/", 1)[-1] or "file"


def describe_invocation(name: str, args: Mapping[str, object] | None) -> str:
    """Return a label such as ``"Creating App.jsx"`` for ``name`` and ``args``.

    Unknown tools, and calls whose args carry no command yet, fall back to the
    raw tool name.
    """
    tool = TOOL_ALIASES.get(name)
    command = args.get("command") if args else None
    if tool is None or args is None or not command:
        return name

    file_name = _file_name(args.get("path"))
    if tool == "edit":
        verb = _EDIT_VERBS.get(str(command), "Modifying")
        return f"{verb} {file_name}"
    if command == "rename":
        return f"Renaming {file_name} to {_file_name(args.get('new_path'))}"
    if command == "delete":
        return f"Deleting {file_name}"
    return f"Managing {file_name}"
