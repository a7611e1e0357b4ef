#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

from platformdirs import user_config_dir

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
PAPER_CONFIGS = {
    "A4": PACKAGE_ROOT / "config/a4.toml",
    "LETTER": PACKAGE_ROOT / "config/letter.toml",
}
DEFAULT_PAPER_SIZE = "A4"
DEFAULT_CONFIG_PATH = PAPER_CONFIGS[DEFAULT_PAPER_SIZE]
CONFIG_ENV = "PAGEWRIGHT_CONFIG"
XDG_CONFIG_ENV = "XDG_CONFIG_HOME"
USER_CONFIG_NAME = "config.toml"


def user_config_path() -> Path:
    xdg_override = os.environ.get(XDG_CONFIG_ENV)
    if xdg_override:
        return Path(xdg_override) / "pagewright" / USER_CONFIG_NAME
    if sys.platform == "darwin":
        return Path.home() / ".config" / "pagewright" / USER_CONFIG_NAME
    return Path(user_config_dir("pagewright", appauthor=False)) / USER_CONFIG_NAME


def packaged_config_path(paper_size: str | None = None) -> Path:
    key = (paper_size or DEFAULT_PAPER_SIZE).strip().upper()
    config_path = PAPER_CONFIGS.get(key)
    if config_path is None:
        raise ValueError(f"unknown paper size: {paper_size}")
    return config_path


def resolve_config_path(path: str | Path | None = None, *, paper_size: str | None = None) -> Path:
    """Pick the config file: explicit path, environment, user file, packaged default."""
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV, "").strip()
    if env_path:
        return Path(env_path)
    user_path = user_config_path()
    if user_path.is_file():
        return user_path
    return packaged_config_path(paper_size)


def init_user_config(paper_size: str | None = None) -> Path:
    """Copy the packaged defaults to the user config file unless one exists."""
    dest = user_config_path()
    if dest.exists():
        return dest
    source = packaged_config_path(paper_size)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
    return dest


def user_config_needs_init() -> bool:
    return not user_config_path().exists()


__all__ = [
    "CONFIG_ENV",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_PAPER_SIZE",
    "PAPER_CONFIGS",
    "init_user_config",
    "packaged_config_path",
    "resolve_config_path",
    "user_config_needs_init",
    "user_config_path",
]
