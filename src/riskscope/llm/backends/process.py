"""Shared subprocess invocation for command-line backends."""

import logging
import subprocess

from riskscope.llm.backends.base import BackendCallError
from riskscope.models.outcome import FailureReason

logger = logging.getLogger(__name__)


def run_backend_command(args: list[str], timeout: int) -> subprocess.CompletedProcess[str]:
    """Run a backend command, capturing text output.

    A non-zero exit is returned to the caller for classification; only
    failures to run the process at all raise. Output is decoded as UTF-8 with
    undecodable bytes replaced, so a misbehaving binary yields unusable text
    rather than an exception.

    Args:
        args: Full argument vector, resolved binary first
        timeout: Timeout in seconds

    Returns:
        Completed process

    Raises:
        BackendCallError: On timeout or if the process cannot be started
    """
    logger.debug("Running %s (%d args)", args[0], len(args) - 1)
    try:
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise BackendCallError(
            FailureReason.TIMEOUT, f"{args[0]} timed out after {timeout}s"
        ) from e
    except OSError as e:
        raise BackendCallError(FailureReason.TRANSPORT, f"Could not run {args[0]}: {e}") from e


def error_output(result: subprocess.CompletedProcess[str]) -> str:
    """Combine stderr and stdout of a failed process for classification."""
    return "\n".join(part for part in (result.stderr, result.stdout) if part)
