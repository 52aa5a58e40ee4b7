"""Type definitions for the CLI module."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class CLIError(Exception):
    """Raised by a command for failures the user can act on."""

    pass


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    TABLE = "table"


@dataclass
class CommandResult:
    """Outcome printed by ``handle_result``."""

    success: bool
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    exit_code: int = 0


@dataclass
class CLIContext:
    """Global options shared by every command."""

    verbose: bool = False
    debug: bool = False
    pages_file: Optional[str] = None
