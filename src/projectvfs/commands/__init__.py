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

"""Command interpreters for the edit and management tools."""

from __future__ import annotations

from ._edit import EditCommandInterpreter, join_lines, split_lines
from ._manage import ManagementCommandInterpreter
from ._params import (
    EDIT_COMMANDS,
    MANAGE_COMMANDS,
    CreateParams,
    DeleteParams,
    EditCommand,
    EditParams,
    InsertParams,
    ManageCommand,
    ManageParams,
    RenameParams,
    StrReplaceParams,
    ViewParams,
    parse_edit_args,
    parse_manage_args,
)
from ._results import (
    CommandResult,
    DirectoryListing,
    EditResult,
    EntryDeleted,
    EntryKind,
    EntryRenamed,
    FileView,
    FileWritten,
    ManageResult,
    TextInserted,
    TextReplaced,
)

__all__ = [
    "EDIT_COMMANDS",
    "MANAGE_COMMANDS",
    "CommandResult",
    "CreateParams",
    "DeleteParams",
    "DirectoryListing",
    "EditCommand",
    "EditCommandInterpreter",
    "EditParams",
    "EditResult",
    "EntryDeleted",
    "EntryKind",
    "EntryRenamed",
    "FileView",
    "FileWritten",
    "InsertParams",
    "ManageCommand",
    "ManageParams",
    "ManagementCommandInterpreter",
    "RenameParams",
    "StrReplaceParams",
    "TextInserted",
    "TextReplaced",
    "ViewParams",
    "join_lines",
    "parse_edit_args",
    "parse_manage_args",
    "split_lines",
]
