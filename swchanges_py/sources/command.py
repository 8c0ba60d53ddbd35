"""
Subprocess helper shared by the sources that shell out to macOS tools.
"""

import logging
import shlex
import subprocess
from typing import List, Optional

logger = logging.getLogger("swchanges.sources.command")


class CommandError(RuntimeError):
    """Raised when an external tool is missing, fails, or times out."""


def run_command(
    args: List[str],
    timeout: Optional[float] = None,
    check: bool = True,
) -> str:
    """
    Run an external command and return its stdout.

    Args:
        args: Command and arguments
        timeout: Seconds before the command is abandoned; None waits forever
        check: Whether a non-zero exit status is an error

    Returns:
        The captured stdout as text

    Raises:
        CommandError: If the binary is missing, exits non-zero (when
            *check* is set) or runs past *timeout*
    """
    cmd_str = " ".join(shlex.quote(str(arg)) for arg in args)
    logger.debug(f"Running command: {cmd_str}")

    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=check,
        )
    except FileNotFoundError as e:
        raise CommandError(f"`{args[0]}` command not found") from e
    except subprocess.CalledProcessError as e:
        logger.debug(f"Command failed: {cmd_str} (exit {e.returncode}): {e.stderr}")
        raise CommandError(
            f"`{cmd_str}` exited with status {e.returncode}"
        ) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"`{cmd_str}` timed out after {timeout}s") from e

    return result.stdout or ""
