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

"""In-memory project file tree driven by an agent's tool invocation stream."""

from __future__ import annotations

from .config import DEFAULT_CONFIG, ConfigError, VfsConfig, load_config
from .errors import (
    MalformedInvocationError,
    ProjectVfsError,
    SessionClosedError,
    SnapshotError,
    SnapshotRestoreError,
    VfsError,
)
from .filesystem import (
    FileSystemTree,
    dumps_snapshot,
    export_snapshot,
    import_snapshot,
    loads_snapshot,
    normalize,
)
from .logging import StructuredLogger, configure_logging, get_logger
from .session import ProjectSession
from .stream import (
    InvocationResult,
    InvocationState,
    StreamApplier,
    ToolInvocation,
    describe_invocation,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigError",
    "FileSystemTree",
    "InvocationResult",
    "InvocationState",
    "MalformedInvocationError",
    "ProjectSession",
    "ProjectVfsError",
    "SessionClosedError",
    "SnapshotError",
    "SnapshotRestoreError",
    "StreamApplier",
    "StructuredLogger",
    "ToolInvocation",
    "VfsError",
    "VfsConfig",
    "configure_logging",
    "describe_invocation",
    "dumps_snapshot",
    "export_snapshot",
    "get_logger",
    "import_snapshot",
    "load_config",
    "loads_snapshot",
    "normalize",
]
