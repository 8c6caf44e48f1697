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

"""Tests for exactly-once stream application."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Iterable
from unittest.mock import patch

import pytest

from projectvfs.commands import FileWritten
from projectvfs.errors import MalformedInvocationError
from projectvfs.filesystem import FileSystemTree, export_snapshot
from projectvfs.stream import (
    InvocationState,
    StreamApplier,
    ToolInvocation,
    iter_envelopes,
)

EnvelopeFactory = Callable[..., dict[str, object]]


def _create(
    envelope: EnvelopeFactory, invocation_id: str, path: str, content: str = ""
) -> dict[str, object]:
    return envelope(
        invocation_id, "edit", command="create", path=path, content=content
    )


class TestApply:
    def test_dispatches_edit(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        invocation = applier.apply(_create(envelope, "call_1", "/App.jsx", "app"))
        assert invocation.state is InvocationState.COMMITTED
        assert invocation.result is not None
        assert invocation.result.success is True
        assert isinstance(invocation.result.value, FileWritten)
        assert tree.read_file("/App.jsx") == "app"

    def test_dispatches_manage(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        _ = applier.apply(_create(envelope, "call_1", "/a.js"))
        invocation = applier.apply(
            envelope(
                "call_2",
                "file_manager",
                command="rename",
                path="/a.js",
                new_path="/b.js",
            )
        )
        assert invocation.result is not None
        assert invocation.result.message == "Renamed /a.js to /b.js."
        assert tree.exists("/b.js")

    def test_duplicate_id_is_replayed(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        first = applier.apply(_create(envelope, "call_1", "/a.js", "one"))
        _ = applier.apply(
            envelope(
                "call_2",
                "edit",
                command="str_replace",
                path="/a.js",
                old_str="one",
                new_str="two",
            )
        )
        replayed = applier.apply(_create(envelope, "call_1", "/a.js", "one"))
        assert replayed is first
        assert tree.read_file("/a.js") == "two"
        assert len(applier) == 2

    def test_replay_ignores_changed_args(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        _ = applier.apply(_create(envelope, "call_1", "/a.js", "one"))
        _ = applier.apply(_create(envelope, "call_1", "/a.js", "different"))
        assert tree.read_file("/a.js") == "one"

    def test_failure_is_recorded_and_stream_continues(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        results = applier.apply_stream(
            [
                _create(envelope, "call_1", "/a.js", "x = 1; x = 1;"),
                envelope(
                    "call_2",
                    "edit",
                    command="str_replace",
                    path="/a.js",
                    old_str="x = 1",
                    new_str="y",
                ),
                _create(envelope, "call_3", "/b.js", "ok"),
            ]
        )
        failed = results[1].result
        assert failed is not None
        assert failed.success is False
        assert failed.error_kind == "AmbiguousMatch"
        assert tree.read_file("/a.js") == "x = 1; x = 1;"
        assert tree.read_file("/b.js") == "ok"

    def test_failed_invocation_is_not_retried(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        view = envelope("call_1", "edit", command="view", path="/late.js")
        first = applier.apply(view).result
        assert first is not None
        assert first.error_kind == "NotFound"
        _ = applier.apply(_create(envelope, "call_2", "/late.js"))
        replayed = applier.apply(view)
        assert replayed.result is not None
        assert replayed.result.error_kind == "NotFound"

    @pytest.mark.parametrize(
        ("name", "args", "kind"),
        [
            ("edit", {"command": "undo_edit", "path": "/a"}, "InvalidArgument"),
            ("edit", {"command": "create"}, "InvalidArgument"),
            ("edit", {"command": "create", "path": "/../a"}, "InvalidPath"),
            ("manage", {"command": "delete", "path": "/"}, "Forbidden"),
            ("manage", {"command": "delete", "path": "/missing"}, "NotFound"),
        ],
    )
    def test_command_errors_become_results(
        self,
        applier: StreamApplier,
        name: str,
        args: dict[str, object],
        kind: str,
    ) -> None:
        invocation = applier.apply({"id": "call_1", "name": name, "args": args})
        assert invocation.result is not None
        assert invocation.result.success is False
        assert invocation.result.error_kind == kind

    def test_tree_is_restored_when_command_fails_midway(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        _ = tree.write_file("/a.js", "a")
        before = export_snapshot(tree)

        def _explode(*_args: object, **_kwargs: object) -> FileWritten:
            _ = tree.write_file("/partial.js", "")
            raise RuntimeError("boom")

        with patch.object(applier._edit, "create", side_effect=_explode):
            with pytest.raises(RuntimeError, match="boom"):
                _ = applier.apply(_create(envelope, "call_1", "/b.js"))

        assert export_snapshot(tree) == before
        assert "call_1" not in applier

    def test_view_skips_rollback_capture(
        self,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        _ = applier.apply(_create(envelope, "call_1", "/a.js", "a"))
        capture = FileSystemTree.snapshot
        with patch.object(
            FileSystemTree, "snapshot", autospec=True, side_effect=capture
        ) as snapshot:
            view = applier.apply(
                envelope("call_2", "edit", command="view", path="/a.js")
            )
            _ = applier.apply(_create(envelope, "call_3", "/b.js"))
        assert view.result is not None
        assert view.result.success is True
        assert snapshot.call_count == 1

    def test_committed_invocation_without_result_is_rejected(
        self, applier: StreamApplier
    ) -> None:
        invocation = ToolInvocation(
            id="call_0", name="edit", state=InvocationState.COMMITTED
        )
        with pytest.raises(MalformedInvocationError):
            _ = applier.apply(invocation)
        assert "call_0" not in applier

    def test_committed_envelope_is_recorded_without_dispatch(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
    ) -> None:
        invocation = applier.apply(
            {
                "id": "call_0",
                "name": "edit",
                "state": "committed",
                "args": {"command": "create", "path": "/a.js", "content": "x"},
                "result": {"success": True, "message": "File created: /a.js"},
            }
        )
        assert invocation.result is not None
        assert invocation.result.message == "File created: /a.js"
        assert not tree.exists("/a.js")
        assert applier.get("call_0") is invocation

    def test_malformed_envelope_propagates(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        with pytest.raises(MalformedInvocationError):
            _ = applier.apply_stream(
                [
                    _create(envelope, "call_1", "/a.js"),
                    {"name": "edit", "args": {}},
                    _create(envelope, "call_3", "/b.js"),
                ]
            )
        assert tree.exists("/a.js")
        assert not tree.exists("/b.js")
        assert len(applier) == 1

    def test_results_follow_first_sight_order(
        self,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        _ = applier.apply_stream(
            [
                _create(envelope, "b", "/b.js"),
                _create(envelope, "a", "/a.js"),
                _create(envelope, "b", "/b.js"),
            ]
        )
        assert [invocation.id for invocation in applier.results()] == ["b", "a"]
        assert applier.get("missing") is None
        assert applier.tree is not None


class TestLogging:
    def test_logs_applied_failed_and_replayed(
        self,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.DEBUG, logger="projectvfs")
        _ = applier.apply(_create(envelope, "call_1", "/a.js"))
        _ = applier.apply(envelope("call_2", "edit", command="view", path="/nope"))
        _ = applier.apply(_create(envelope, "call_1", "/a.js"))

        events = [getattr(record, "event", None) for record in caplog.records]
        assert events == [
            "stream.invocation.applied",
            "stream.invocation.failed",
            "stream.invocation.replayed",
        ]
        failed = caplog.records[1]
        assert failed.levelno == logging.WARNING
        assert getattr(failed, "context")["error_kind"] == "NotFound"
        assert getattr(caplog.records[0], "context")["label"] == "Creating a.js"


class TestChunkedStreams:
    def test_iter_envelopes_flattens_chunks(self) -> None:
        single = {"id": "a"}
        assert list(iter_envelopes(single)) == [single]
        assert list(iter_envelopes([single, single])) == [single, single]
        assert list(iter_envelopes("junk")) == ["junk"]

    def test_apply_stream_accepts_chunks(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        chunks: Iterable[object] = [
            [
                _create(envelope, "call_1", "/a.js"),
                _create(envelope, "call_2", "/b.js"),
            ],
            _create(envelope, "call_3", "/c.js"),
            (),
        ]
        applied = applier.apply_stream(chunks)
        assert [item.id for item in applied] == ["call_1", "call_2", "call_3"]
        assert tree.list_directory("/") == ("a.js", "b.js", "c.js")

    def test_async_stream(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        async def produce() -> AsyncIterator[object]:
            yield _create(envelope, "call_1", "/a.js")
            await asyncio.sleep(0)
            yield [
                _create(envelope, "call_2", "/b.js"),
                _create(envelope, "call_1", "/a.js"),
            ]

        applied = asyncio.run(applier.apply_stream_async(produce()))

        assert [item.id for item in applied] == ["call_1", "call_2", "call_1"]
        assert tree.list_directory("/") == ("a.js", "b.js")

    def test_cancelled_async_stream_keeps_committed_work(
        self,
        tree: FileSystemTree,
        applier: StreamApplier,
        envelope: EnvelopeFactory,
    ) -> None:
        release = asyncio.Event()

        async def produce() -> AsyncIterator[object]:
            yield _create(envelope, "call_1", "/a.js")
            await release.wait()
            yield _create(envelope, "call_2", "/b.js")

        async def run() -> None:
            task = asyncio.create_task(applier.apply_stream_async(produce()))
            while "call_1" not in applier:
                await asyncio.sleep(0)
            _ = task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())

        assert tree.exists("/a.js")
        assert not tree.exists("/b.js")
        assert applier.get("call_1") is not None
