"""
Errors raised by manage commands.

Each error carries the exit status the CLI terminates with.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runner import CommandResult


class ManageError(Exception):
    """Base class for fatal manage errors"""

    exit_code = 1


class MissingExecutableError(ManageError):
    """A required executable is not on PATH"""

    def __init__(self, name: str, hint: str = ""):
        message = f"The {name} executable is needed and not on your path."
        if hint:
            message = f"{message}\n{hint}"
        super().__init__(message)
        self.name = name


class MissingSeedError(ManageError):
    def __init__(self, command: str):
        super().__init__(
            f"'{command}' requires a seed. "
            "For example: seed=my_seed_000000000000000000000000"
        )


class MissingThemeError(ManageError):
    pass


class UnknownBuildTargetError(ManageError):
    def __init__(self, name: str):
        super().__init__(
            f"The build target, {name}, does not exist. "
            "Please check your build parameters and try again.\n"
            "Use '--help' to get full help details."
        )
        self.name = name


class CommandFailed(ManageError):
    """An external command exited with a non-zero status"""

    def __init__(self, result: "CommandResult"):
        super().__init__(
            f"Command failed with exit code {result.returncode}: {result.command_line}"
        )
        self.result = result
        self.exit_code = result.returncode
