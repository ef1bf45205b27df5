"""
Centralized error handling system for cmdk

The palette engines never raise for catalogue anomalies or out-of-order
events. Errors here belong to the edges: reading catalogue files from
the CLI. This module provides:
- Rich Console for user-facing error messages
- Structured logging for developer diagnostics
- Custom exception classes with category, details and a suggestion
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from cmdk.config.constants import CMDK_CONFIG_DIR

# Global console instance for error display
console = Console(stderr=True, color_system="auto")

# Global logger for diagnostics
logger = logging.getLogger("cmdk")


class ErrorSeverity(Enum):
    """Error severity levels for categorization"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for better handling"""
    CATALOGUE = "catalogue"
    FILE_SYSTEM = "file_system"
    INTERNAL = "internal"


class CmdkError(Exception):
    """Base exception class for cmdk-specific errors"""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
        exit_code: int = 1
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.suggestion = suggestion
        self.exit_code = exit_code


class CatalogueFileError(CmdkError):
    """Errors reading or parsing a catalogue file"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.CATALOGUE,
            **kwargs
        )


class FileSystemError(CmdkError):
    """Errors related to file system operations"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.FILE_SYSTEM,
            **kwargs
        )


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None
) -> None:
    """
    Set up structured logging for cmdk

    Args:
        verbose: Enable verbose (DEBUG) logging
        quiet: Disable INFO and WARNING logs to console
        log_file: Optional log file path (defaults to ~/.config/cmdk/cmdk.log)
    """
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.ERROR
    else:
        console_level = logging.WARNING

    detailed_formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s'
    )
    simple_formatter = logging.Formatter('%(levelname)s: %(message)s')

    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    if log_file is None:
        log_file = CMDK_CONFIG_DIR / "cmdk.log"

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        # Continue without a log file
        if verbose:
            console.print(f"[yellow]Warning: Could not create log file {log_file}: {e}[/yellow]")


def handle_error(
    error: Exception,
    operation: str = "unknown",
    show_details: bool = False
) -> None:
    """
    Handle errors with consistent formatting and logging, then exit

    Args:
        error: The exception to handle
        operation: Description of the operation that failed
        show_details: Whether to show technical details to user
    """
    if isinstance(error, CmdkError):
        _handle_cmdk_error(error, operation, show_details)
    else:
        _handle_generic_error(error, operation, show_details)


def _handle_cmdk_error(error: CmdkError, operation: str, show_details: bool) -> None:
    """Handle CmdkError instances with rich formatting"""
    log_message = f"{operation}: {error.category.value}: {error.message}"
    if error.severity == ErrorSeverity.CRITICAL:
        logger.critical(log_message)
    elif error.severity == ErrorSeverity.ERROR:
        logger.error(log_message)
    elif error.severity == ErrorSeverity.WARNING:
        logger.warning(log_message)
    else:
        logger.info(log_message)

    _display_user_error(error, show_details)

    if error.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
        raise typer.Exit(error.exit_code)


def _handle_generic_error(error: Exception, operation: str, show_details: bool) -> None:
    """Handle generic Python exceptions"""
    logger.error(f"Unexpected error during {operation}: {error}", exc_info=True)

    wrapped_error = CmdkError(
        message=f"An unexpected error occurred during {operation}",
        category=ErrorCategory.INTERNAL,
        severity=ErrorSeverity.ERROR,
        details={"original_error": str(error), "error_type": type(error).__name__},
        suggestion="Run again with --verbose and check the log file for details."
    )

    _display_user_error(wrapped_error, show_details)
    raise typer.Exit(1)


def _display_user_error(error: CmdkError, show_details: bool) -> None:
    """Display error to user with Rich formatting"""
    color_map = {
        ErrorSeverity.INFO: "blue",
        ErrorSeverity.WARNING: "yellow",
        ErrorSeverity.ERROR: "red",
        ErrorSeverity.CRITICAL: "red"
    }
    color = color_map.get(error.severity, "red")

    message = Text()
    message.append(error.message, style=f"bold {color}")

    if show_details and error.details:
        details_text = "\n".join(f"• {k}: {v}" for k, v in error.details.items())
        message.append(f"\n\nDetails:\n{details_text}", style=f"dim {color}")

    if error.suggestion:
        message.append(f"\n\nSuggestion: {error.suggestion}", style="cyan")

    panel = Panel(
        message,
        title=f"[bold]{error.category.value.replace('_', ' ').title()} Error[/bold]",
        title_align="left",
        border_style=color,
        padding=(0, 1)
    )

    console.print(panel)


def warn_user(message: str, suggestion: Optional[str] = None) -> None:
    """Display a warning message to the user"""
    warning = CmdkError(
        message=message,
        category=ErrorCategory.CATALOGUE,
        severity=ErrorSeverity.WARNING,
        suggestion=suggestion
    )
    _display_user_error(warning, show_details=False)


def file_not_found_error(file_path: Path) -> FileSystemError:
    """Create a standardized file not found error"""
    return FileSystemError(
        message=f"File not found: {file_path}",
        details={"file_path": str(file_path)},
        suggestion="Check if the file path is correct and the file exists."
    )
