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

"""Configuration helpers for project file trees."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Final, cast

import yaml

ENV_MAX_PATH_DEPTH = "PROJECTVFS_MAX_PATH_DEPTH"
ENV_MAX_SEGMENT_LENGTH = "PROJECTVFS_MAX_SEGMENT_LENGTH"
ENV_MAX_FILE_LENGTH = "PROJECTVFS_MAX_FILE_LENGTH"
ENV_VIEW_LINE_WIDTH = "PROJECTVFS_VIEW_LINE_WIDTH"

_ENV_FIELDS: Final[Mapping[str, str]] = {
    ENV_MAX_PATH_DEPTH: "max_path_depth",
    ENV_MAX_SEGMENT_LENGTH: "max_segment_length",
    ENV_MAX_FILE_LENGTH: "max_file_length",
    ENV_VIEW_LINE_WIDTH: "view_line_width",
}

__all__ = ["DEFAULT_CONFIG", "ConfigError", "VfsConfig", "load_config"]


class ConfigError(ValueError):
    """Raised when the projectvfs configuration is invalid."""


@dataclass(frozen=True, slots=True)
class VfsConfig:
    """Limits applied to paths and file contents.

    Attributes:
        max_path_depth: Maximum number of segments in a canonical path.
        max_segment_length: Maximum characters per path segment.
        max_file_length: Maximum characters a single file may hold.
        view_line_width: Width of the right-aligned line-number gutter used by
            ``view`` when a range is requested.
    """

    max_path_depth: int = 16
    max_segment_length: int = 255
    max_file_length: int = 1_000_000
    view_line_width: int = 6

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"{item.name} must be an integer (got {value!r})."
                raise ConfigError(msg)
            if value < 1:
                msg = f"{item.name} must be positive (got {value})."
                raise ConfigError(msg)


DEFAULT_CONFIG: Final[VfsConfig] = VfsConfig()


def load_config(
    path: Path | Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> VfsConfig:
    """Load and validate the projectvfs configuration.

    Parameters
    ----------
    path:
        TOML or YAML file holding the settings, either at the root or under a
        ``[projectvfs]`` table. Tests may pass an in-memory mapping to skip
        filesystem I/O. ``None`` uses defaults plus environment overrides.
    env:
        Optional environment mapping. Defaults to :data:`os.environ`.

    Returns
    -------
    VfsConfig
        The resolved configuration object.
    """

    env_map = dict(os.environ if env is None else env)

    if path is None:
        raw: dict[str, object] = {}
    elif isinstance(path, Mapping):
        raw = dict(cast(Mapping[str, object], path))
    else:
        raw = _load_config_file(path)

    section = raw.get("projectvfs")
    if isinstance(section, Mapping):
        raw = dict(cast(Mapping[str, object], section))

    values = _normalise_config(raw)
    values.update(_environment_overrides(env_map))
    try:
        return VfsConfig(**values)
    except TypeError as error:
        raise ConfigError(str(error)) from None


def _load_config_file(path: Path) -> dict[str, object]:
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    suffix = path.suffix.lower()
    data: object
    if suffix == ".toml" or not suffix:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    elif suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    else:
        msg = f"Unsupported configuration format: {path.suffix}"
        raise ConfigError(msg)

    if not isinstance(data, MutableMapping):
        msg = "Configuration file must contain a mapping at the root."
        raise ConfigError(msg)

    mapping = cast(MutableMapping[object, object], data)
    typed_data: dict[str, object] = {}
    for key, value in mapping.items():
        if not isinstance(key, str):
            msg = f"Configuration keys must be strings (got {key!r})."
            raise ConfigError(msg)
        typed_data[key] = value
    return typed_data


def _normalise_config(raw: Mapping[str, object]) -> dict[str, object]:
    known = {item.name for item in fields(VfsConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        msg = f"Unknown configuration keys: {', '.join(unknown)}"
        raise ConfigError(msg)
    return {key: _coerce_int(key, value) for key, value in raw.items()}


def _environment_overrides(env: Mapping[str, str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for variable, field_name in _ENV_FIELDS.items():
        if variable in env:
            overrides[field_name] = _coerce_int(variable, env[variable])
    return overrides


def _coerce_int(name: str, value: object) -> int:
    if isinstance(value, bool):
        msg = f"{name} must be an integer (got {value!r})."
        raise ConfigError(msg)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    msg = f"{name} must be an integer (got {value!r})."
    raise ConfigError(msg)
