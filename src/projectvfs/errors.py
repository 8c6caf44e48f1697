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

"""Base exception hierarchy for :mod:`projectvfs`."""

from __future__ import annotations

from typing import ClassVar, Literal

ErrorKind = Literal[
    "InvalidPath",
    "InvalidArgument",
    "NotFound",
    "NotAFile",
    "NotADirectory",
    "AlreadyExists",
    "NotEmpty",
    "NoMatch",
    "AmbiguousMatch",
    "InvalidRange",
    "Forbidden",
]


class ProjectVfsError(Exception):
    """Base class for all projectvfs exceptions.

    Callers can catch every library-specific error with a single handler while
    standard Python exceptions keep propagating normally.
    """


class VfsError(ProjectVfsError):
    """Base class for errors raised by tree and command operations.

    Every subclass carries a stable ``kind`` string. The stream applier records
    that kind as the failed invocation's result instead of letting the
    exception escape, so the agent producing the command stream can react to
    it and carry on.

    Example::

        try:
            tree.read_file("/missing.js")
        except VfsError as error:
            print(error.kind)  # "NotFound"
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class InvalidPathError(VfsError, ValueError):
    """Raised when a path cannot be reduced to a canonical absolute form."""

    kind: ClassVar[ErrorKind] = "InvalidPath"


class InvalidArgumentError(VfsError, ValueError):
    """Raised when a command payload is missing fields or has ill-typed ones."""

    kind: ClassVar[ErrorKind] = "InvalidArgument"


class NotFoundError(VfsError, LookupError):
    """Raised when the target of an operation does not exist."""

    kind: ClassVar[ErrorKind] = "NotFound"


class NotAFileError(VfsError, ValueError):
    """Raised when a file operation targets a directory."""

    kind: ClassVar[ErrorKind] = "NotAFile"


class NotDirectoryError(VfsError, ValueError):
    """Raised when a directory is expected but a file occupies the path.

    This covers both the target itself (listing a file) and ancestor segments
    (creating ``/a/b`` while ``/a`` is a file).
    """

    kind: ClassVar[ErrorKind] = "NotADirectory"


class AlreadyExistsError(VfsError, ValueError):
    """Raised when a rename or mkdir target is already occupied."""

    kind: ClassVar[ErrorKind] = "AlreadyExists"


class NotEmptyError(VfsError, ValueError):
    """Raised when a populated directory is deleted without ``recursive``."""

    kind: ClassVar[ErrorKind] = "NotEmpty"


class NoMatchError(VfsError, ValueError):
    """Raised when ``str_replace`` finds no occurrence of ``old_str``."""

    kind: ClassVar[ErrorKind] = "NoMatch"


class AmbiguousMatchError(VfsError, ValueError):
    """Raised when ``str_replace`` finds more than one occurrence of ``old_str``.

    Replacing only the first hit would silently pick one of several candidate
    edit sites, so the command is refused and the content left untouched.
    """

    kind: ClassVar[ErrorKind] = "AmbiguousMatch"


class InvalidRangeError(VfsError, ValueError):
    """Raised when a line index or view range falls outside the file."""

    kind: ClassVar[ErrorKind] = "InvalidRange"


class ForbiddenError(VfsError, RuntimeError):
    """Raised for structural operations the tree never allows.

    Deleting or renaming the root, or moving a directory into its own subtree.
    """

    kind: ClassVar[ErrorKind] = "Forbidden"


class MalformedInvocationError(ProjectVfsError, ValueError):
    """Raised when an invocation envelope cannot be parsed at all.

    Unlike :class:`VfsError`, this is fatal for the stream applier: an envelope
    without an id or with an unknown tool name is an unparseable command rather
    than a valid-but-inapplicable one, so it propagates to the caller.
    """


class SessionClosedError(ProjectVfsError, RuntimeError):
    """Raised when a closed project session receives further work."""


class SnapshotError(ProjectVfsError, RuntimeError):
    """Base class for snapshot-related errors."""


class SnapshotRestoreError(SnapshotError):
    """Raised when a persisted snapshot cannot be turned back into a tree.

    Common causes:
        - Entries with an unknown ``type``
        - File entries without string ``content``
        - Paths that do not normalize, or entries nested under a file
        - JSON text that does not decode to a mapping

    The partially built tree is discarded; callers should fall back to an
    empty tree or surface the error to the user.
    """


__all__ = [
    "AlreadyExistsError",
    "AmbiguousMatchError",
    "ErrorKind",
    "ForbiddenError",
    "InvalidArgumentError",
    "InvalidPathError",
    "InvalidRangeError",
    "MalformedInvocationError",
    "NoMatchError",
    "NotDirectoryError",
    "NotAFileError",
    "NotEmptyError",
    "NotFoundError",
    "ProjectVfsError",
    "SessionClosedError",
    "SnapshotError",
    "SnapshotRestoreError",
    "VfsError",
]
