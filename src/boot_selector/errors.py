from __future__ import annotations
from typing import List, Optional


class BootSelectorError(Exception):
    """Base class for boot-selector errors."""


class UnsupportedPlatformError(BootSelectorError):
    """No boot provider exists for the running operating system."""

    def __init__(self, system: str) -> None:
        super().__init__(f'Boot selection is only supported on Linux and Windows (running on {system or "unknown"})')
        self.system = system


class BootConfigError(BootSelectorError):
    pass


class BootToolError(BootSelectorError):
    """A native boot tool could not be run, or reported failure."""

    def __init__(self, argv: List[str], message: str) -> None:
        super().__init__(message)
        self.argv = list(argv)


class ToolLaunchFailure(BootToolError):
    def __init__(self, argv: List[str], reason: OSError) -> None:
        super().__init__(argv, f'Could not launch {argv[0]}: {reason.strerror or reason}')
        self.reason = reason


class ToolNonZeroExit(BootToolError):
    def __init__(self, argv: List[str], returncode: int, stderr: Optional[str] = None) -> None:
        self.returncode = returncode
        self.stderr = (stderr or '').strip()
        detail = self.stderr or f'exit code {returncode}'
        super().__init__(argv, f'{argv[0]} failed: {detail}')


class ToolTimeout(BootToolError):
    def __init__(self, argv: List[str], timeout: float) -> None:
        super().__init__(argv, f'{argv[0]} did not finish within {timeout} seconds')
        self.timeout = timeout


class PartialMutationFailure(BootSelectorError):
    """The boot sequence could not be set; the restart step was skipped."""

    def __init__(self, cause: ToolNonZeroExit) -> None:
        super().__init__(f'Failed to set boot sequence: {cause.stderr or f"exit code {cause.returncode}"}')
        self.cause = cause


class ParseYieldedNoEntries:
    """Diagnostic marker: the listing tool ran but no entry was parsed.

    This is a valid empty state, not an error, so it is never raised.
    """

    def __init__(self, tool: str) -> None:
        self.tool = tool

    def __str__(self) -> str:
        return f'{self.tool} reported no boot entries'

    def __repr__(self) -> str:
        return f'ParseYieldedNoEntries({self.tool!r})'
