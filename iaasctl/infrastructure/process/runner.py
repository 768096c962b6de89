"""External command execution."""

import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from iaasctl.domain.core.exceptions import CommandFailedError, OperationCancelledError
from iaasctl.infrastructure.context import OperationContext, ensure_context
from iaasctl.infrastructure.logging.logger import get_logger


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a finished command."""
    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """
    Runs external commands with captured output.

    All of juju, ssh and docker-machine go through this class so the argument
    vectors can be observed and replaced in tests.
    """

    def __init__(self, env: Optional[Dict[str, str]] = None):
        self.env = env
        self.logger = get_logger(__name__)

    def run(self,
            argv: Sequence[str],
            context: Optional[OperationContext] = None,
            timeout: Optional[float] = None,
            check: bool = False) -> CommandResult:
        """
        Run a command to completion.

        Args:
            argv: Program and arguments, passed without a shell
            context: Cancellation context; checked before and after the command
            timeout: Fixed upper bound in seconds; the context deadline never
                interrupts a running command
            check: Raise CommandFailedError on a non-zero exit status

        Returns:
            CommandResult with decoded stdout and stderr

        Raises:
            OperationCancelledError: If the context is done or the timeout expired
            CommandFailedError: If the program is missing, or exits non-zero with check=True
        """
        argv = list(argv)
        context = ensure_context(context)
        operation = f"command {argv[0]}"
        context.check(operation)

        self.logger.debug(f"Running {argv} (timeout={timeout})")
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=self.env,
            )
        except subprocess.TimeoutExpired as e:
            raise OperationCancelledError(operation, "timed out") from e
        except FileNotFoundError as e:
            raise CommandFailedError(argv, 127, str(e)) from e

        # The command finished, but nobody is waiting for its result anymore
        context.check(operation)

        result = CommandResult(argv, completed.returncode, completed.stdout or "", completed.stderr or "")
        if not result.ok:
            self.logger.debug(f"{argv[0]} exited with {result.returncode}: {result.stderr.strip()}")
            if check:
                raise CommandFailedError(argv, result.returncode, result.stderr, result.stdout)
        return result
