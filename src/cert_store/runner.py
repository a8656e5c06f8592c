"""Execution of trust store command line utilities."""

import logging
import os
import shlex
import subprocess
import sys
from typing import List, Sequence

from cert_store.exceptions import CommandError, UnsupportedPlatformError
from cert_store.models import CommandResult

logger = logging.getLogger(__name__)


def _is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


class CommandRunner:
    """Runs a command to completion and raises on nonzero exit."""

    def elevate(self, args: Sequence[str]) -> List[str]:
        """
        Prefix ``args`` so they run with administrator privileges.

        Raises:
            UnsupportedPlatformError: On Windows, where elevation is not implemented
        """
        if sys.platform.startswith("win"):
            raise UnsupportedPlatformError("Privilege elevation is not implemented on Windows")
        if _is_root():
            return list(args)
        return ["sudo", *args]

    def run(self, args: Sequence[str], elevated: bool = False) -> CommandResult:
        """
        Run a command and wait for it to exit.

        Args:
            args: Command and arguments, one element per argument
            elevated: Run with administrator privileges

        Returns:
            CommandResult of a successful (exit code 0) run

        Raises:
            CommandError: If the command exits nonzero or cannot be launched
        """
        cmd = self.elevate(args) if elevated else list(args)
        logger.debug(f"Running: {shlex.join(cmd)}")
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except FileNotFoundError:
            logger.debug(f"{cmd[0]} command not found")
            raise CommandError(cmd, None) from None

        result = CommandResult(args=cmd, returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")
        if not result.ok:
            logger.debug(f"{cmd[0]} exited with {result.returncode}: {result.stderr.strip()}")
            raise CommandError(cmd, result.returncode, result.stdout, result.stderr)
        return result
