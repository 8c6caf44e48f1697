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

"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from projectvfs.config import DEFAULT_CONFIG, ConfigError, VfsConfig, load_config


def test_defaults() -> None:
    assert load_config(env={}) == DEFAULT_CONFIG
    assert DEFAULT_CONFIG.max_path_depth == 16
    assert DEFAULT_CONFIG.view_line_width == 6


def test_mapping_source() -> None:
    config = load_config({"max_path_depth": 4, "max_file_length": "10"}, env={})
    assert config == VfsConfig(max_path_depth=4, max_file_length=10)


def test_section_table() -> None:
    config = load_config({"projectvfs": {"view_line_width": 3}}, env={})
    assert config.view_line_width == 3


def test_toml_file(tmp_path: Path) -> None:
    path = tmp_path / "projectvfs.toml"
    _ = path.write_text(
        "[projectvfs]\nmax_segment_length = 40\nmax_path_depth = 8\n",
        encoding="utf-8",
    )
    config = load_config(path, env={})
    assert config.max_segment_length == 40
    assert config.max_path_depth == 8


def test_yaml_file(tmp_path: Path) -> None:
    path = tmp_path / "projectvfs.yaml"
    _ = path.write_text("max_file_length: 2048\n", encoding="utf-8")
    assert load_config(path, env={}).max_file_length == 2048


def test_empty_yaml_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "projectvfs.yml"
    _ = path.write_text("", encoding="utf-8")
    assert load_config(path, env={}) == DEFAULT_CONFIG


def test_environment_overrides_file(tmp_path: Path) -> None:
    path = tmp_path / "projectvfs.toml"
    _ = path.write_text("max_path_depth = 8\n", encoding="utf-8")
    config = load_config(
        path,
        env={"PROJECTVFS_MAX_PATH_DEPTH": " 12 ", "PROJECTVFS_VIEW_LINE_WIDTH": "4"},
    )
    assert config.max_path_depth == 12
    assert config.view_line_width == 4


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        _ = load_config(tmp_path / "missing.toml", env={})


def test_unsupported_suffix(tmp_path: Path) -> None:
    path = tmp_path / "projectvfs.ini"
    _ = path.write_text("", encoding="utf-8")
    with pytest.raises(ConfigError, match="Unsupported"):
        _ = load_config(path, env={})


def test_yaml_root_must_be_mapping(tmp_path: Path) -> None:
    path = tmp_path / "projectvfs.yaml"
    _ = path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        _ = load_config(path, env={})


def test_unknown_keys() -> None:
    with pytest.raises(ConfigError, match="Unknown configuration keys: colour"):
        _ = load_config({"colour": 1}, env={})


@pytest.mark.parametrize("value", ["abc", 1.5, True, None])
def test_non_integer_values(value: object) -> None:
    with pytest.raises(ConfigError, match="must be an integer"):
        _ = load_config({"max_path_depth": value}, env={})


def test_non_integer_environment_value() -> None:
    with pytest.raises(ConfigError, match="PROJECTVFS_MAX_FILE_LENGTH"):
        _ = load_config(env={"PROJECTVFS_MAX_FILE_LENGTH": "lots"})


@pytest.mark.parametrize("value", [0, -3])
def test_non_positive_values(value: int) -> None:
    with pytest.raises(ConfigError, match="must be positive"):
        _ = VfsConfig(max_segment_length=value)


def test_config_error_is_value_error() -> None:
    assert issubclass(ConfigError, ValueError)
