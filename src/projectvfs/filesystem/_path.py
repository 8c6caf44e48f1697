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

"""Canonical path normalization for the project file tree.

Every component routes raw path strings through :func:`normalize` before
touching the tree, so the tree only ever stores and compares canonical paths:
absolute, ``/``-separated, no trailing slash except the root, no empty, ``.``
or ``..`` segments.

Constants:
    ROOT: The canonical root path ("/")
    SEPARATOR: Path separator ("/")

Functions:
    normalize: Canonicalize and validate a raw path string
    join: Append a single segment to a canonical path
    parent: Return the parent of a canonical path (None for root)
    base_name: Return the last segment of a canonical path
    ancestors: Yield proper ancestors of a canonical path, root first
    is_path_under: Test whether a path equals or lies below a base path
    replace_prefix: Rewrite the leading ``old`` portion of a path to ``new``
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import Final

from ..config import DEFAULT_CONFIG, VfsConfig
from ..errors import InvalidPathError

ROOT: Final[str] = "/"
SEPARATOR: Final[str] = "/"

_DISALLOWED: Final[re.Pattern[str]] = re.compile(r"[\x00-\x1f\x7f\\]")


def normalize(raw: object, *, config: VfsConfig = DEFAULT_CONFIG) -> str:
    """Return the canonical form of ``raw`` or raise :class:`InvalidPathError`.

    Relative input is anchored at the root, repeated slashes and ``.``
    segments collapse, and ``..`` pops the previous segment. A ``..`` that
    would climb above the root is rejected rather than clamped.

    Examples:
        >>> normalize("src//components/./App.jsx")
        '/src/components/App.jsx'
        >>> normalize("/a/b/../c/")
        '/a/c'
        >>> normalize("/")
        '/'
    """
    if not isinstance(raw, str):
        msg = f"Path must be a string, got {type(raw).__name__}."
        raise InvalidPathError(msg)
    stripped = raw.strip()
    if not stripped:
        raise InvalidPathError("Path must not be empty.")
    if _DISALLOWED.search(stripped):
        msg = f"Path contains disallowed characters: {raw!r}"
        raise InvalidPathError(msg, path=raw)

    segments: list[str] = []
    for segment in stripped.split(SEPARATOR):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if not segments:
                msg = f"Path escapes above the root: {raw!r}"
                raise InvalidPathError(msg, path=raw)
            _ = segments.pop()
            continue
        segments.append(segment)

    _validate_segments(segments, raw, config)
    return ROOT + SEPARATOR.join(segments)


def _validate_segments(segments: list[str], raw: str, config: VfsConfig) -> None:
    if len(segments) > config.max_path_depth:
        msg = f"Path depth exceeds limit of {config.max_path_depth} segments."
        raise InvalidPathError(msg, path=raw)
    for segment in segments:
        if len(segment) > config.max_segment_length:
            msg = (
                f"Path segment exceeds limit of {config.max_segment_length} characters."
            )
            raise InvalidPathError(msg, path=raw)


def join(parent_path: str, name: str) -> str:
    """Append ``name`` to the canonical ``parent_path``.

    ``name`` must be a single, non-empty segment.
    """
    if not name or SEPARATOR in name or name in {".", ".."}:
        msg = f"Invalid path segment: {name!r}"
        raise InvalidPathError(msg, path=name)
    if parent_path == ROOT:
        return ROOT + name
    return f"{parent_path}{SEPARATOR}{name}"


def parent(path: str) -> str | None:
    """Return the parent of ``path``, or ``None`` for the root."""
    if path == ROOT:
        return None
    head, _, _ = path.rpartition(SEPARATOR)
    return head or ROOT


def base_name(path: str) -> str:
    """Return the final segment of ``path`` (empty string for the root)."""
    return path.rpartition(SEPARATOR)[2]


def depth(path: str) -> int:
    """Return the number of segments in ``path`` (0 for the root)."""
    return 0 if path == ROOT else path.count(SEPARATOR)


def ancestors(path: str) -> Iterator[str]:
    """Yield the proper ancestors of ``path``, starting with the root."""
    if path == ROOT:
        return
    yield ROOT
    segments = path.split(SEPARATOR)[1:-1]
    for index in range(len(segments)):
        yield ROOT + SEPARATOR.join(segments[: index + 1])


def is_path_under(path: str, base: str) -> bool:
    """Return True when ``path`` equals ``base`` or lies beneath it."""
    if base == ROOT:
        return True
    return path == base or path.startswith(base + SEPARATOR)


def replace_prefix(path: str, old: str, new: str) -> str:
    """Rewrite the leading ``old`` portion of ``path`` to ``new``.

    ``path`` must lie under ``old``.
    """
    if path == old:
        return new
    suffix = path[len(old) :] if old != ROOT else path
    return new.rstrip(SEPARATOR) + suffix


__all__ = [
    "ROOT",
    "SEPARATOR",
    "ancestors",
    "base_name",
    "depth",
    "is_path_under",
    "join",
    "normalize",
    "parent",
    "replace_prefix",
]
