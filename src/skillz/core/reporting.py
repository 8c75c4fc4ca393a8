"""User-facing progress output.

A Reporter is created by the CLI and passed to the sync orchestrator, so
verbosity is explicit state rather than a module global.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import click


@dataclass
class Reporter:
    """Writes status lines to the terminal.

    Attributes:
        verbose: Show debug lines
        quiet: Suppress everything except errors
        records: Every emitted (level, message) pair, including suppressed
            ones; lets callers and tests inspect what happened
    """

    verbose: bool = False
    quiet: bool = False
    records: List[Tuple[str, str]] = field(default_factory=list)

    def _emit(self, level: str, symbol: str, color: Optional[str], message: str,
              err: bool = False) -> None:
        self.records.append((level, message))
        if self.quiet and level != "error":
            return
        prefix = click.style(symbol, fg=color) if color else symbol
        click.echo(f"{prefix} {message}", err=err)

    def info(self, message: str) -> None:
        self._emit("info", "i", "blue", message)

    def success(self, message: str) -> None:
        self._emit("success", "✔", "green", message)

    def warning(self, message: str) -> None:
        self._emit("warning", "!", "yellow", message)

    def error(self, message: str) -> None:
        self._emit("error", "✖", "red", message, err=True)

    def debug(self, message: str) -> None:
        if not self.verbose:
            self.records.append(("debug", message))
            return
        self._emit("debug", "•", "bright_black", message)

    def start(self, message: str) -> None:
        """Begin a named step."""
        self._emit("step", "…", "cyan", message)

    def succeed(self, message: str) -> None:
        """Finish the current step successfully."""
        self.success(message)

    def fail(self, message: str) -> None:
        """Finish the current step with a failure."""
        self.error(message)

    def messages(self, level: Optional[str] = None) -> List[str]:
        """Messages emitted so far, optionally for one level."""
        return [m for lvl, m in self.records if level is None or lvl == level]


def configure_logging(verbose: bool = False) -> None:
    """Send library log records to stderr.

    Warnings (skipped skills, duplicates) are always shown; debug detail
    only when verbose.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )
