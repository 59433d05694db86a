"""
Thin wrapper around subprocess for the external deploy commands
(git, docker compose).
"""

import logging
import subprocess
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


class CommandFailure(Exception):
    """Exception raised when an external command fails, times out, or cannot start."""

    def __init__(self, args: Sequence[str], reason: str, returncode: Optional[int] = None):
        self.command = list(args)
        self.reason = reason
        self.returncode = returncode
        super().__init__(f"`{' '.join(self.command)}` {reason}")


class CommandRunner:
    """
    Runs external commands with a bounded timeout.

    Output is captured. It is logged unless the caller asks for quiet mode.
    """

    def __init__(self, timeout: Optional[float] = 600.0):
        self.timeout = timeout

    def run(self, args: Sequence[str], cwd: Optional[str] = None, quiet: bool = False) -> str:
        """
        Run a command and return its stdout.

        Raises:
            CommandFailure: On non-zero exit, timeout, or if the binary can't be started
        """
        if not quiet:
            logger.info(f"Running: {' '.join(args)} (cwd={cwd})")

        try:
            result = subprocess.run(
                list(args),
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandFailure(args, f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise CommandFailure(args, f"could not be started: {e}") from e

        if not quiet and result.stdout:
            logger.info(result.stdout.rstrip())

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if not quiet and stderr:
                logger.error(stderr)
            raise CommandFailure(
                args,
                f"exited with status {result.returncode}: {stderr}" if stderr
                else f"exited with status {result.returncode}",
                returncode=result.returncode,
            )

        return result.stdout
