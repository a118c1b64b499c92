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
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

_SNIPPET_LIMIT = 2000


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str
    stderr: str


@dataclass
class ProcessFailure(RuntimeError):
    cmd: Sequence[str]
    exit_code: int | None
    stderr: str
    stdout: str = field(default="", repr=False)

    @property
    def stderr_snippet(self) -> str:
        detail = self.stderr.strip()
        if len(detail) > _SNIPPET_LIMIT:
            detail = "..." + detail[-_SNIPPET_LIMIT:]
        return detail

    def __str__(self) -> str:
        detail = self.stderr_snippet or "unknown error"
        status = "not started" if self.exit_code is None else f"exit {self.exit_code}"
        return f"restic failed ({status}): {detail}"


@dataclass
class ProcessTimeout(ProcessFailure):
    timeout: float | None = None

    def __str__(self) -> str:
        limit = "?" if self.timeout is None else f"{self.timeout:g}"
        return f"restic timed out after {limit}s: {self.stderr_snippet or 'no output'}"


class ProcessInvoker(Protocol):
    def invoke(
        self,
        subcommand: str,
        args: Sequence[str],
        *,
        env: Mapping[str, str],
        timeout: float | None,
    ) -> ProcessResult: ...


class SubprocessInvoker:
    """Run the restic binary once per call and capture both streams as text."""

    def __init__(self, binary: str = "restic") -> None:
        self.binary = binary

    def build_command(self, subcommand: str, args: Sequence[str]) -> list[str]:
        return [self.binary, subcommand, *args]

    def invoke(
        self,
        subcommand: str,
        args: Sequence[str],
        *,
        env: Mapping[str, str],
        timeout: float | None,
    ) -> ProcessResult:
        cmd = self.build_command(subcommand, args)
        merged_env = os.environ.copy()
        merged_env.update(env)
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=merged_env,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProcessTimeout(
                cmd=cmd,
                exit_code=None,
                stderr=_decode(exc.stderr),
                stdout=_decode(exc.stdout),
                timeout=timeout,
            ) from exc
        except (OSError, ValueError) as exc:
            # ValueError: embedded NUL in an argument or environment value.
            raise ProcessFailure(cmd=cmd, exit_code=None, stderr=str(exc)) from exc

        result = ProcessResult(
            exit_code=proc.returncode,
            stdout=_decode(proc.stdout),
            stderr=_decode(proc.stderr),
        )
        if result.exit_code != 0:
            raise ProcessFailure(
                cmd=cmd,
                exit_code=result.exit_code,
                stderr=result.stderr,
                stdout=result.stdout,
            )
        return result


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")
