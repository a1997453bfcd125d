"""Synchronous execution of external tools."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from absquant.errors import StageInvocationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invocation:
    """One external process call made on behalf of a stage."""

    stage: str
    tool: str
    command: list[str]
    cwd: str
    log_file: Optional[str] = None
    sample: Optional[str] = None

    def __str__(self) -> str:
        return " ".join(self.command)


class ToolInvoker:
    """
    Run external tools and wait for them to finish.

    The combined stdout/stderr of a process is written to the invocation's
    log file when one is given. A non-zero exit status, a missing
    executable or an exceeded timeout raise :class:`StageInvocationError`.

    Parameters
    ----------
    timeout : float, optional
        Maximum run time of one process in seconds. None waits forever.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def invoke(self, invocation: Invocation) -> None:
        logger.debug(f"[{invocation.stage}] {invocation} (cwd={invocation.cwd})")
        Path(invocation.cwd).mkdir(parents=True, exist_ok=True)

        log_handle = None
        if invocation.log_file:
            Path(invocation.log_file).parent.mkdir(parents=True, exist_ok=True)
            log_handle = open(invocation.log_file, "w")

        try:
            result = subprocess.run(
                invocation.command,
                cwd=invocation.cwd,
                stdout=log_handle if log_handle else subprocess.DEVNULL,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            raise StageInvocationError(
                invocation.stage, f"executable not found: {invocation.command[0]}"
            ) from None
        except OSError as e:
            raise StageInvocationError(invocation.stage, f"cannot start {invocation.command[0]}: {e}") from e
        except subprocess.TimeoutExpired:
            raise StageInvocationError(invocation.stage, f"timed out after {self.timeout} s") from None
        finally:
            if log_handle:
                log_handle.close()

        if result.returncode != 0:
            hint = f", see {invocation.log_file}" if invocation.log_file else ""
            raise StageInvocationError(
                invocation.stage,
                f"{invocation.tool} exited with status {result.returncode}{hint}",
                returncode=result.returncode,
            )
