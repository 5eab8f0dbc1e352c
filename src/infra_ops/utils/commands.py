"""Thin wrapper around subprocess for the external CLIs (aws, kubectl, helm, terraform)."""

from __future__ import annotations
import subprocess
from pathlib import Path
from typing import Sequence

from ..models.config import COMMAND_INTERRUPT_GRACE_SECONDS
from .logging_config import get_logger

logger = get_logger()


class CommandError(RuntimeError):
    """An external command could not be started or exited non-zero."""

    def __init__(self, args: Sequence[str], returncode: int | None, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        if returncode is None:
            message = f"{self.args_list[0]} could not be executed"
        else:
            message = f"'{' '.join(self.args_list)}' exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


def _stream_command(
    args: Sequence[str], cwd: str | Path | None, timeout: float | None
) -> subprocess.CompletedProcess:
    """
    Run a command with output on the operator's terminal.

    Ctrl-C reaches the child through the terminal's process group. The child
    is then given COMMAND_INTERRUPT_GRACE_SECONDS to shut down on its own (terraform
    releases its state lock and records what it already destroyed) before it
    is terminated. KeyboardInterrupt is re-raised once the child has exited.
    """
    proc = subprocess.Popen(list(args), cwd=cwd, text=True)
    try:
        returncode = proc.wait(timeout=timeout)
    except KeyboardInterrupt:
        logger.warning(
            "Interrupted, waiting for command to exit",
            extra={"command": args[0], "grace_seconds": COMMAND_INTERRUPT_GRACE_SECONDS},
        )
        try:
            proc.wait(timeout=COMMAND_INTERRUPT_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            logger.error("Command did not exit after interrupt, terminating", extra={"command": args[0]})
            proc.terminate()
            proc.wait()
        raise
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
        raise
    return subprocess.CompletedProcess(list(args), returncode)


def run_command(
    args: Sequence[str],
    cwd: str | Path | None = None,
    capture: bool = True,
    check: bool = True,
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """
    Run an external command.

    With capture=False output goes straight to the operator's terminal, which
    is how long-running tools (terraform, helm --wait) are run.

    Raises:
        CommandError: binary missing, timeout, or non-zero exit when check=True
        KeyboardInterrupt: after a streamed command has exited following Ctrl-C
    """
    logger.debug("Running command", extra={"command": " ".join(args), "cwd": str(cwd or ".")})
    try:
        if capture:
            result = subprocess.run(
                list(args),
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
                timeout=timeout,
            )
        else:
            result = _stream_command(args, cwd, timeout)
    except FileNotFoundError as e:
        raise CommandError(args, None, str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(args, None, f"timed out after {timeout}s") from e

    if check and result.returncode != 0:
        raise CommandError(args, result.returncode, result.stderr or "")
    return result
