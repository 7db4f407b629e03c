"""Subprocess execution service for dualrotate."""

import subprocess
from typing import Callable, List, Optional, Sequence

from dualrotate.errors import RemoteExecError
from dualrotate.services.redaction import describe_command


class CommandRunner:
    """Runs external commands with consistent error handling.

    Commands are only ever logged or quoted in errors through ``describe``,
    which masks inline secrets.
    """

    def __init__(
        self,
        logger,
        default_timeout: Optional[float] = None,
        describe: Callable[[Sequence[str]], str] = describe_command,
        subprocess_module=subprocess,
    ):
        self.logger = logger
        self.default_timeout = default_timeout
        self.describe = describe
        self.subprocess = subprocess_module

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = self.describe(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout

        try:
            result = self.subprocess.run(
                cmd,
                text=True,
                errors="replace",
                capture_output=capture_output,
                timeout=effective_timeout,
            )
        except FileNotFoundError as exc:
            raise RemoteExecError(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise RemoteExecError(
                f"Command timed out after {effective_timeout}s: {cmd_str}"
            ) from exc
        except Exception as exc:
            raise RemoteExecError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if result.returncode == 0 or not check:
            return result

        raise RemoteExecError(f"command terminated with exit code {result.returncode}")
