"""
Report rendering.

On an interactive terminal dead files are printed as clickable (OSC 8) links
between two separator rules, followed by a summary. Anywhere else only the
bare relative paths are written, one per line, so the output can be piped.
"""

from __future__ import annotations

import sys
from typing import IO, Optional

from rich.console import Console
from rich.style import Style
from rich.text import Text

from .dead_files import DeadFile, ScanResult

SEPARATOR = "-"


class Printer:
    def __init__(
        self,
        stream: Optional[IO[str]] = None,
        err_stream: Optional[IO[str]] = None,
        interactive: Optional[bool] = None,
    ):
        self.stream = stream if stream is not None else sys.stdout
        self.err_stream = err_stream if err_stream is not None else sys.stderr
        if interactive is None:
            isatty = getattr(self.stream, "isatty", None)
            interactive = bool(isatty and isatty())
        self.interactive = interactive
        self.console = Console(file=self.stream, force_terminal=interactive, highlight=False)
        self.err_console = Console(file=self.err_stream, highlight=False)

    def separator(self) -> None:
        if self.interactive:
            self.console.rule(characters=SEPARATOR, style="cyan")

    def dead_file(self, dead: DeadFile) -> None:
        if not self.interactive:
            print(dead.rel_path, file=self.stream)
            return
        link = Style(color="green", link=f"file://{dead.full_path.as_posix()}")
        self.console.print(Text(dead.rel_path, style=link), soft_wrap=True)

    def stats(self, result: ScanResult) -> None:
        if not self.interactive:
            return
        style = "yellow"
        self.console.print(Text(f"Found {len(result.dead_files)} dead files", style=style))
        self.console.print(
            Text(f"Scanned {result.scanned_files} files in {result.duration:.2f}s", style=style)
        )

    def message(self, msg: str) -> None:
        if self.interactive:
            self.console.print(Text(msg, style="cyan"), soft_wrap=True)
        else:
            print(msg, file=self.stream)

    def error(self, msg: str) -> None:
        if self.err_console.is_terminal:
            self.err_console.print(Text(msg, style="red"), soft_wrap=True)
        else:
            print(msg, file=self.err_stream)

    def report(self, result: ScanResult) -> None:
        """Write the full report; single-threaded, after the scan completed."""
        self.separator()
        for dead in result.dead_files:
            self.dead_file(dead)
        self.separator()
        self.stats(result)
