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

"""Tool invocation stream handling."""

from __future__ import annotations

from ._applier import StreamApplier, iter_envelopes
from ._describe import describe_invocation
from ._invocation import (
    TOOL_ALIASES,
    InvocationResult,
    InvocationState,
    ToolInvocation,
    ToolName,
    parse_invocation,
)

__all__ = [
    "TOOL_ALIASES",
    "InvocationResult",
    "InvocationState",
    "StreamApplier",
    "ToolInvocation",
    "ToolName",
    "describe_invocation",
    "iter_envelopes",
    "parse_invocation",
]
