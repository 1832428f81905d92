from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence

from .errors import ExternalProcessError


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def combined_output(self) -> str:
        return "\n".join(chunk for chunk in (self.stdout, self.stderr) if chunk)


class CommandRunner(Protocol):
    def run(
        self,
        command: str,
        args: Sequence[str],
        timeout: float | None = None,
    ) -> ProcessResult: ...


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class ProcessRunner:
    def run(
        self,
        command: str,
        args: Sequence[str],
        timeout: float | None = None,
    ) -> ProcessResult:
        argv = [command, *[str(arg) for arg in args]]
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            output = "\n".join(
                chunk for chunk in (_as_text(exc.stdout), _as_text(exc.stderr)) if chunk
            )
            raise ExternalProcessError(
                f"process {command} timed out after {timeout} seconds",
                output=output,
            ) from exc
        except OSError as exc:
            raise ExternalProcessError(f"failed to start process {command}: {exc}") from exc
        return ProcessResult(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
