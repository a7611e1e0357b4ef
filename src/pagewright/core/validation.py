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

from collections.abc import Iterable
from typing import Any


def require_list(value: object, min_length: int, *, label: str) -> list[Any] | tuple[Any, ...]:
    """Validate that value is a list/tuple with at least min_length elements."""
    if not isinstance(value, (list, tuple)) or len(value) < min_length:
        raise ValueError(f"{label} must be a list")
    return value


def require_dict(value: object, *, label: str) -> dict[Any, Any]:
    """Validate that value is a dict."""
    if not isinstance(value, dict):
        raise ValueError(f"{label} must be a dict")
    return value


def require_keys(mapping: dict[Any, Any], keys: Iterable[str], *, label: str) -> None:
    """Validate that all keys are present in mapping."""
    for key in keys:
        if key not in mapping:
            raise ValueError(f"{label} {key} is required")


def require_str(value: object, *, label: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string")
    return value


def optional_str(value: object, *, label: str) -> str | None:
    if value is None:
        return None
    return require_str(value, label=label)


def require_str_list(value: object, *, label: str) -> tuple[str, ...]:
    items = require_list(value, 0, label=label)
    return tuple(require_str(item, label=f"{label}[{index}]") for index, item in enumerate(items))


def require_number(value: object, *, label: str) -> float:
    """Validate that value is an int or float (booleans are rejected)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label} must be a number")
    return float(value)


def require_positive_int(value: object, *, label: str) -> int:
    """Validate that value is a positive integer (> 0)."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{label} must be a positive int")
    return value


def require_int_range(value: int, *, min_val: int, max_val: int, label: str) -> int:
    """Validate that integer value is within range [min_val, max_val]."""
    if value < min_val or value > max_val:
        raise ValueError(f"{label} must be between {min_val} and {max_val}")
    return value


def require_bool(value: object, *, label: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{label} must be a boolean")
    return value


__all__ = [
    "optional_str",
    "require_bool",
    "require_dict",
    "require_int_range",
    "require_keys",
    "require_list",
    "require_number",
    "require_positive_int",
    "require_str",
    "require_str_list",
]
