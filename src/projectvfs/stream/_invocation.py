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

"""Tool invocation envelopes and their recorded results."""

from __future__ import annotations

import types
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Final, Literal, cast, get_args

from ..commands import CommandResult
from ..errors import ErrorKind, MalformedInvocationError, VfsError

__all__ = [
    "TOOL_ALIASES",
    "InvocationResult",
    "InvocationState",
    "ToolInvocation",
    "ToolName",
    "parse_invocation",
]

ToolName = Literal["edit", "manage"]

TOOL_ALIASES: Final[Mapping[str, ToolName]] = types.MappingProxyType(
    {
        "edit": "edit",
        "manage": "manage",
        "str_replace_editor": "edit",
        "file_manager": "manage",
    }
)

_ERROR_KINDS: Final[frozenset[str]] = frozenset(get_args(ErrorKind))


class InvocationState(Enum):
    """Lifecycle of an invocation id: pending until its result is recorded."""

    PENDING = "pending"
    COMMITTED = "committed"


@dataclass(slots=True, frozen=True)
class InvocationResult:
    """Outcome recorded for a committed invocation.

    Attributes:
        success: Whether the command completed.
        message: Text returned to the agent.
        error_kind: Stable error kind when ``success`` is False.
        value: Typed command result when the command ran in this process.
    """

    success: bool
    message: str
    error_kind: ErrorKind | None = None
    value: CommandResult | None = field(default=None, compare=False)

    @classmethod
    def ok(cls, value: CommandResult) -> InvocationResult:
        return cls(success=True, message=value.render(), value=value)

    @classmethod
    def failure(cls, error: VfsError) -> InvocationResult:
        return cls(success=False, message=error.message, error_kind=error.kind)

    def render(self) -> str:
        if self.success:
            return self.message
        return f"Error ({self.error_kind}): {self.message}"

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"success": self.success, "message": self.message}
        if self.error_kind is not None:
            payload["error_kind"] = self.error_kind
        return payload


@dataclass(slots=True, frozen=True)
class ToolInvocation:
    """One tool call from the agent stream, identified by ``id``."""

    id: str
    name: ToolName
    state: InvocationState
    args: Mapping[str, object] = field(
        default_factory=lambda: types.MappingProxyType({})
    )
    result: InvocationResult | None = None

    def commit(self, result: InvocationResult) -> ToolInvocation:
        """Return the committed copy carrying ``result``."""
        return replace(self, state=InvocationState.COMMITTED, result=result)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "id": self.id,
            "name": self.name,
            "state": self.state.value,
            "args": dict(self.args),
        }
        if self.result is not None:
            payload["result"] = self.result.to_dict()
        return payload


def parse_invocation(envelope: object) -> ToolInvocation:
    """Validate a raw envelope mapping.

    Only the envelope itself is checked here. Command payloads inside ``args``
    are parsed at dispatch so bad payloads become recorded failures.

    Raises:
        MalformedInvocationError: When the envelope cannot be interpreted.
    """
    if isinstance(envelope, ToolInvocation):
        if envelope.state is InvocationState.COMMITTED and envelope.result is None:
            msg = f"Committed invocation {envelope.id} requires a result."
            raise MalformedInvocationError(msg)
        return envelope
    if not isinstance(envelope, Mapping):
        msg = f"Invocation must be a mapping, got {type(envelope).__name__}."
        raise MalformedInvocationError(msg)
    data = cast(Mapping[str, object], envelope)

    invocation_id = data.get("id")
    if not isinstance(invocation_id, str) or not invocation_id.strip():
        raise MalformedInvocationError("Invocation requires a non-empty string id.")

    raw_name = data.get("name")
    name = TOOL_ALIASES.get(raw_name) if isinstance(raw_name, str) else None
    if name is None:
        msg = f"Invocation {invocation_id} names unknown tool {raw_name!r}."
        raise MalformedInvocationError(msg)

    raw_state = data.get("state", InvocationState.PENDING.value)
    try:
        state = InvocationState(raw_state)
    except ValueError as error:
        msg = f"Invocation {invocation_id} has unknown state {raw_state!r}."
        raise MalformedInvocationError(msg) from error

    raw_args = data.get("args")
    if raw_args is None:
        raw_args = {}
    if not isinstance(raw_args, Mapping):
        msg = f"Invocation {invocation_id} args must be a mapping."
        raise MalformedInvocationError(msg)
    args = types.MappingProxyType(dict(cast(Mapping[str, object], raw_args)))

    result: InvocationResult | None = None
    if state is InvocationState.COMMITTED:
        result = _parse_result(invocation_id, data.get("result"))

    return ToolInvocation(
        id=invocation_id, name=name, state=state, args=args, result=result
    )


def _parse_result(invocation_id: str, raw: object) -> InvocationResult:
    if isinstance(raw, str):
        return InvocationResult(success=True, message=raw)
    if not isinstance(raw, Mapping):
        msg = f"Committed invocation {invocation_id} requires a result."
        raise MalformedInvocationError(msg)
    data = cast(Mapping[str, object], raw)
    success = data.get("success", True)
    message = data.get("message", "")
    error_kind = data.get("error_kind")
    if not isinstance(success, bool) or not isinstance(message, str):
        msg = f"Committed invocation {invocation_id} has a malformed result."
        raise MalformedInvocationError(msg)
    if error_kind is not None and error_kind not in _ERROR_KINDS:
        msg = (
            f"Committed invocation {invocation_id} has unknown error kind "
            f"{error_kind!r}."
        )
        raise MalformedInvocationError(msg)
    return InvocationResult(
        success=success,
        message=message,
        error_kind=cast(ErrorKind | None, error_kind),
    )
