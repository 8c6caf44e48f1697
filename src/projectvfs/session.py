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

"""Project session: one tree, one applier, one lock.

A session is what a host holds per open project. It restores the tree from a
persisted snapshot, applies the agent's invocation stream under a lock so
readers only ever observe committed states, and hands back a snapshot to
persist when the turn ends.

Example::

    with ProjectSession.open(stored_snapshot) as session:
        session.apply_stream(message_tool_calls)
        persisted = session.export()
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from functools import wraps
from threading import RLock
from typing import Concatenate, Self
from uuid import UUID, uuid4

from .config import DEFAULT_CONFIG, VfsConfig
from .errors import SessionClosedError
from .filesystem import (
    FileSystemTree,
    SnapshotEntry,
    dumps_snapshot,
    export_snapshot,
    import_snapshot,
    normalize,
)
from .logging import get_logger
from .stream import StreamApplier, ToolInvocation, iter_envelopes

__all__ = ["ProjectSession"]


def _locked_method[**P, R](
    func: Callable[Concatenate[ProjectSession, P], R],
) -> Callable[Concatenate[ProjectSession, P], R]:
    @wraps(func)
    def wrapper(session: ProjectSession, *args: P.args, **kwargs: P.kwargs) -> R:
        with session.locked():
            session._ensure_open()
            return func(session, *args, **kwargs)

    return wrapper


class ProjectSession:
    """Single-writer owner of a project's tree and invocation ledger."""

    def __init__(
        self,
        tree: FileSystemTree | None = None,
        *,
        session_id: UUID | None = None,
        created_at: datetime | None = None,
    ) -> None:
        super().__init__()
        self.session_id: UUID = session_id if session_id is not None else uuid4()
        resolved_created_at = (
            created_at if created_at is not None else datetime.now(UTC)
        )
        if resolved_created_at.tzinfo is None:
            msg = "Session created_at must be timezone-aware."
            raise ValueError(msg)
        self.created_at: datetime = resolved_created_at.astimezone(UTC)

        self._tree = tree if tree is not None else FileSystemTree()
        self._lock = RLock()
        self._closed = False
        self._logger = get_logger(__name__).bind(session_id=str(self.session_id))
        self._applier = StreamApplier(self._tree, logger=self._logger)
        self._logger.info(
            "Project session opened.",
            event="session.opened",
            context={"entries": len(self._tree)},
        )

    @classmethod
    def open(
        cls,
        snapshot: Mapping[str, object] | None = None,
        *,
        config: VfsConfig = DEFAULT_CONFIG,
        session_id: UUID | None = None,
    ) -> ProjectSession:
        """Open a session on a restored snapshot, or on an empty tree."""
        if snapshot is None:
            tree = FileSystemTree(config=config)
        else:
            tree = import_snapshot(snapshot, config=config)
        return cls(tree, session_id=session_id)

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def config(self) -> VfsConfig:
        return self._tree.config

    # --- Invocations ---

    @_locked_method
    def apply(self, envelope: object) -> ToolInvocation:
        """Apply one invocation envelope."""
        return self._applier.apply(envelope)

    @_locked_method
    def apply_stream(self, stream: Iterable[object]) -> list[ToolInvocation]:
        """Apply a whole stream of envelopes (or chunks of envelopes)."""
        return self._applier.apply_stream(stream)

    async def apply_stream_async(
        self, stream: AsyncIterable[object]
    ) -> list[ToolInvocation]:
        """Apply envelopes from an async stream, taking the lock per envelope."""
        applied: list[ToolInvocation] = []
        async for item in stream:
            for envelope in iter_envelopes(item):
                applied.append(self.apply(envelope))
        return applied

    @_locked_method
    def invocation(self, invocation_id: str) -> ToolInvocation | None:
        return self._applier.get(invocation_id)

    @_locked_method
    def invocations(self) -> tuple[ToolInvocation, ...]:
        return self._applier.results()

    # --- Reads ---

    @_locked_method
    def read_file(self, path: str) -> str:
        return self._tree.read_file(normalize(path, config=self._tree.config))

    @_locked_method
    def list_directory(self, path: str = "/") -> tuple[str, ...]:
        return self._tree.list_directory(normalize(path, config=self._tree.config))

    @_locked_method
    def export(self) -> dict[str, SnapshotEntry]:
        """Return the persisted snapshot mapping of the current tree."""
        return export_snapshot(self._tree)

    @_locked_method
    def dumps(self, *, indent: int | None = None) -> str:
        """Return the current tree as snapshot JSON text."""
        return dumps_snapshot(self._tree, indent=indent)

    # --- Lifecycle ---

    def close(self) -> dict[str, SnapshotEntry]:
        """Close the session and return its final snapshot.

        Closing twice returns the same final state; any other call on a
        closed session raises :class:`SessionClosedError`.
        """
        with self._lock:
            snapshot = export_snapshot(self._tree)
            if not self._closed:
                self._closed = True
                self._logger.info(
                    "Project session closed.",
                    event="session.closed",
                    context={
                        "entries": len(snapshot),
                        "invocations": len(self._applier),
                    },
                )
            return snapshot

    def _ensure_open(self) -> None:
        if self._closed:
            msg = f"Project session {self.session_id} is closed."
            raise SessionClosedError(msg)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        _ = self.close()
