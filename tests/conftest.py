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

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

import pytest

from projectvfs.commands import EditCommandInterpreter, ManagementCommandInterpreter
from projectvfs.filesystem import FileSystemTree
from projectvfs.stream import StreamApplier


class EnvelopeFactory(Protocol):
    def __call__(
        self,
        invocation_id: str,
        name: str = "edit",
        /,
        state: str = "pending",
        **args: object,
    ) -> dict[str, object]:
        """Return a raw invocation envelope."""


@pytest.fixture
def tree() -> FileSystemTree:
    return FileSystemTree()


@pytest.fixture
def edit(tree: FileSystemTree) -> EditCommandInterpreter:
    return EditCommandInterpreter(tree)


@pytest.fixture
def manage(tree: FileSystemTree) -> ManagementCommandInterpreter:
    return ManagementCommandInterpreter(tree)


@pytest.fixture
def applier(tree: FileSystemTree) -> StreamApplier:
    return StreamApplier(tree)


@pytest.fixture
def envelope() -> EnvelopeFactory:
    """Return a factory building envelopes with ``args`` from keywords."""

    def factory(
        invocation_id: str,
        name: str = "edit",
        /,
        state: str = "pending",
        **args: object,
    ) -> dict[str, object]:
        payload: Mapping[str, object] = dict(args)
        return {"id": invocation_id, "name": name, "state": state, "args": payload}

    return factory
