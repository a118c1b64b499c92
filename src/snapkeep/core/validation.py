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

from typing import Any


def require_non_empty_str(value: object, *, label: str) -> str:
    """Validate that value is a string with non-whitespace content."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} must be a non-empty string")
    return value


def require_optional_non_empty_str(value: object, *, label: str) -> str | None:
    """Validate an optional string; None passes through, blanks are rejected."""
    if value is None:
        return None
    return require_non_empty_str(value, label=label)


def require_non_negative_int(value: object, *, label: str) -> int:
    """Validate that value is a non-negative integer (>= 0)."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{label} must be a non-negative int")
    return value


def require_optional_non_negative_int(value: object, *, label: str) -> int | None:
    if value is None:
        return None
    return require_non_negative_int(value, label=label)


def require_positive_number(value: object, *, label: str) -> float:
    """Validate that value is a positive int or float (> 0)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"{label} must be a positive number")
    return float(value)


def coerce_count(value: Any) -> int:
    """Read a numeric field from decoded tool output, falling back to 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0
