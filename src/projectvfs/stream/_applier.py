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

"""Exactly-once application of an agent's tool invocation stream.

The applier keeps a ledger keyed by invocation id. The first sighting of an
id dispatches it to the matching interpreter and records the outcome; every
later sighting returns the recorded invocation without touching the tree.
Agents re-send the full conversation on every turn, so replays are the
common case rather than the exception.

Usage::

    applier = StreamApplier(FileSystemTree())
    applier.apply_stream(
        [
            {"id": "call_1", "name": "edit", "state": "pending",
             "args": {"command": "create", "path": "/App.jsx", "content": ""}},
        ]
    )
    applier.get("call_1").result.success  # True
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable, Iterator, Mapping, Sequence

from ..commands import (
    CommandResult,
    DeleteParams,
    EditCommandInterpreter,
    EditParams,
    ManagementCommandInterpreter,
    ManageParams,
    RenameParams,
    ViewParams,
    parse_edit_args,
    parse_manage_args,
)
from ..errors import VfsError
from ..filesystem import FileSystemTree
from ..logging import StructuredLogger, get_logger
from ._describe import describe_invocation
from ._invocation import (
    InvocationResult,
    InvocationState,
    ToolInvocation,
    parse_invocation,
)

__all__ = ["StreamApplier", "iter_envelopes"]


def iter_envelopes(item: object) -> Iterator[object]:
    """Flatten one stream item into envelopes.

    Items are either single envelopes (mappings or :class:`ToolInvocation`) or
    chunks of them. Anything else is yielded as-is so parsing rejects it.
    """
    if isinstance(item, (Mapping, ToolInvocation)):
        yield item
    elif isinstance(item, Sequence) and not isinstance(item, (str, bytes)):
        yield from item
    else:
        yield item


class StreamApplier:
    """Apply tool invocations to a tree in arrival order, once per id.

    A :class:`~projectvfs.errors.VfsError` raised by a command is recorded as
    the invocation's failed result and the tree is restored to its state before
    that command. :class:`~projectvfs.errors.MalformedInvocationError` is not
    recorded and propagates to the caller.
    """

    def __init__(
        self,
        tree: FileSystemTree,
        *,
        logger: StructuredLogger | None = None,
    ) -> None:
        super().__init__()
        self._tree = tree
        self._edit = EditCommandInterpreter(tree)
        self._manage = ManagementCommandInterpreter(tree)
        self._ledger: dict[str, ToolInvocation] = {}
        self._logger = logger or get_logger(__name__)

    @property
    def tree(self) -> FileSystemTree:
        return self._tree

    def apply(self, envelope: object) -> ToolInvocation:
        """Apply one envelope and return its committed invocation."""
        invocation = parse_invocation(envelope)

        recorded = self._ledger.get(invocation.id)
        if recorded is not None:
            self._logger.debug(
                "Replayed recorded invocation.",
                event="stream.invocation.replayed",
                context={
                    "invocation_id": invocation.id,
                    "args_changed": dict(recorded.args) != dict(invocation.args),
                },
            )
            return recorded

        if invocation.state is InvocationState.COMMITTED:
            self._ledger[invocation.id] = invocation
            self._logger.debug(
                "Recorded invocation committed upstream.",
                event="stream.invocation.recorded",
                context={"invocation_id": invocation.id, "tool": invocation.name},
            )
            return invocation

        committed = invocation.commit(self._dispatch(invocation))
        self._ledger[invocation.id] = committed
        return committed

    def apply_stream(self, stream: Iterable[object]) -> list[ToolInvocation]:
        """Apply every envelope of ``stream`` in order."""
        return [
            self.apply(envelope)
            for item in stream
            for envelope in iter_envelopes(item)
        ]

    async def apply_stream_async(
        self, stream: AsyncIterable[object]
    ) -> list[ToolInvocation]:
        """Apply envelopes as they arrive from an async stream.

        The loop only yields between items, so each invocation applies
        completely before the next one is read. Cancelling the task keeps every
        invocation committed so far.
        """
        applied: list[ToolInvocation] = []
        async for item in stream:
            applied.extend(self.apply(envelope) for envelope in iter_envelopes(item))
        return applied

    def get(self, invocation_id: str) -> ToolInvocation | None:
        """Return the committed invocation for ``invocation_id``, if any."""
        return self._ledger.get(invocation_id)

    def results(self) -> tuple[ToolInvocation, ...]:
        """Return committed invocations in the order they were first seen."""
        return tuple(self._ledger.values())

    def __contains__(self, invocation_id: object) -> bool:
        return invocation_id in self._ledger

    def __len__(self) -> int:
        return len(self._ledger)

    def _dispatch(self, invocation: ToolInvocation) -> InvocationResult:
        label = describe_invocation(invocation.name, invocation.args)
        try:
            value = self._run(self._parse(invocation))
        except VfsError as error:
            self._logger.warning(
                "Invocation failed.",
                event="stream.invocation.failed",
                context={
                    "invocation_id": invocation.id,
                    "tool": invocation.name,
                    "label": label,
                    "error_kind": error.kind,
                    "error": error.message,
                },
            )
            return InvocationResult.failure(error)

        self._logger.info(
            "Invocation applied.",
            event="stream.invocation.applied",
            context={
                "invocation_id": invocation.id,
                "tool": invocation.name,
                "label": label,
            },
        )
        return InvocationResult.ok(value)

    @staticmethod
    def _parse(invocation: ToolInvocation) -> EditParams | ManageParams:
        if invocation.name == "edit":
            return parse_edit_args(invocation.args)
        return parse_manage_args(invocation.args)

    def _run(self, params: EditParams | ManageParams) -> CommandResult:
        # Views are read-only; no rollback capture.
        if isinstance(params, ViewParams):
            return self._edit.execute(params)
        state = self._tree.snapshot()
        try:
            if isinstance(params, RenameParams | DeleteParams):
                return self._manage.execute(params)
            return self._edit.execute(params)
        except Exception:
            self._tree.restore(state)
            raise
