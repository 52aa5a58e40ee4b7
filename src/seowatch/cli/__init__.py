"""Command-line interface components."""

from .main import cli, create_cli
from .types import CLIContext, CLIError, CommandResult, OutputFormat

__all__ = [
    "cli",
    "create_cli",
    "CLIError",
    "CommandResult",
    "CLIContext",
    "OutputFormat",
]
