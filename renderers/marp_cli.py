"""Process boundary for the Marp command line renderer."""

import asyncio
import logging
import os
import re
from enum import Enum
from typing import Optional

from models import RendererInvocation

DEFAULT_EXECUTABLE = "marp"

# Marp CLI reports a missing browser with messages such as
# "You have to install Google Chrome, Chromium, or Microsoft Edge to ..."
BROWSER_NOT_FOUND_PATTERN = re.compile(
    r'(have to install .*(chrome|chromium|edge|firefox))|(no suitable browser)',
    re.IGNORECASE
)


class CLIErrorCode(Enum):
    """Classified failures of the renderer process boundary."""
    GENERAL_ERROR = 0
    NOT_FOUND_BROWSER = 1
    NOT_FOUND_CLI = 2


class CLIError(Exception):
    """Typed error raised by the renderer process boundary."""

    def __init__(self, message: str, error_code: CLIErrorCode = CLIErrorCode.GENERAL_ERROR):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class MarpCliRunner:
    """
    Runs the Marp CLI as an asynchronous subprocess.

    The invocation's environment overrides and working directory are handed
    to the child process only; the current process environment and working
    directory are left untouched.
    """

    def __init__(self, executable: str = DEFAULT_EXECUTABLE, logger: Optional[logging.Logger] = None):
        self.executable = executable or DEFAULT_EXECUTABLE
        self.logger = logger or logging.getLogger('marp_slides_export.renderers.marp_cli')

    async def run(self, invocation: RendererInvocation) -> int:
        """
        Execute the renderer and wait for it to exit.

        Returns:
            Process exit code

        Raises:
            CLIError: GENERAL_ERROR if the working directory is missing,
                NOT_FOUND_CLI if the executable cannot be started,
                NOT_FOUND_BROWSER if the renderer reports no usable browser
        """
        if invocation.cwd and not os.path.isdir(invocation.cwd):
            raise CLIError(
                f"Working directory for Marp CLI does not exist: {invocation.cwd}",
                CLIErrorCode.GENERAL_ERROR
            )

        command = [self.executable, *invocation.argv]
        self.logger.info(f"Execute Marp CLI [{' '.join(invocation.argv)}]")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=invocation.build_env(),
                cwd=invocation.cwd,
            )
        except FileNotFoundError as e:
            raise CLIError(
                f"Unable to start Marp CLI '{self.executable}': {e}",
                CLIErrorCode.NOT_FOUND_CLI
            ) from e

        stdout, stderr = await process.communicate()
        output = stdout.decode('utf-8', errors='replace').strip()
        errors = stderr.decode('utf-8', errors='replace').strip()

        if output:
            self.logger.debug(output)
        if errors:
            self.logger.debug(errors)

        if process.returncode != 0 and BROWSER_NOT_FOUND_PATTERN.search(errors):
            raise CLIError(errors, CLIErrorCode.NOT_FOUND_BROWSER)

        return process.returncode


__all__ = ['BROWSER_NOT_FOUND_PATTERN', 'CLIError', 'CLIErrorCode', 'MarpCliRunner']
