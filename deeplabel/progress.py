"""A textual progress bar for terminal output."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import TextIO


@dataclass
class CliProgressBar:
    """A single-line progress bar with a spinner, redrawn in place."""

    first_part: str = "["
    last_part: str = "]"
    filler: str = "|"
    spinner: str = "/-\\|"
    length: int = 50
    needed_progress: float = 100.0
    _current: float = field(default=0.0, init=False, repr=False)
    _filled: int = field(default=0, init=False, repr=False)
    _spin_index: int = field(default=0, init=False, repr=False)

    def update(self, progress: float) -> None:
        """Set the current progress, in percent."""
        self._current = math.ceil(progress)
        self._filled = int((self._current / self.needed_progress) * self.length)

    def render(self) -> str:
        """Return the next frame of the bar and advance the spinner."""
        self._spin_index %= len(self.spinner)
        percent = int(100 * (self._current / self.needed_progress))
        frame = (
            "\r"
            + self.first_part
            + self.filler * self._filled
            + self.spinner[self._spin_index]
            + " " * (self.length - self._filled)
            + self.last_part
            + f" ({percent}%)"
        )
        self._spin_index += 1
        return frame

    def display(self, stream: TextIO | None = None) -> None:
        """Write the next frame to ``stream`` (standard output by default)."""
        out = sys.stdout if stream is None else stream
        out.write(self.render())
        out.flush()