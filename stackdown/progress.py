"""
Progress output for teardown runs.

The teardown code only ever appends lines to a sink; where they end up
(terminal, NDJSON stream, memory, nowhere) is up to the caller.
"""

import json
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from typing import IO, List, Optional, Tuple

import click


class ProgressSink(ABC):
    """Append-only channel for progress and error lines."""

    @abstractmethod
    def out(self, message: str) -> None:
        """Emit a progress line."""
        pass

    @abstractmethod
    def err(self, message: str) -> None:
        """Emit an error or warning line."""
        pass


class ConsoleSink(ProgressSink):
    """Writes progress to stdout and errors to stderr."""

    def __init__(self, color: Optional[bool] = None):
        self.color = color

    def out(self, message: str) -> None:
        click.echo(message, color=self.color)

    def err(self, message: str) -> None:
        click.echo(click.style(message, fg="red"), err=True, color=self.color)


class JsonSink(ProgressSink):
    """Writes one JSON object per line, for machine consumption."""

    def __init__(self, stream: Optional[IO[str]] = None):
        self.stream = stream

    def _emit(self, channel: str, message: str) -> None:
        event = {
            "ts": datetime.now().isoformat(),
            "stream": channel,
            "message": message,
        }
        stream = self.stream or sys.stdout
        stream.write(json.dumps(event) + "\n")
        stream.flush()

    def out(self, message: str) -> None:
        self._emit("out", message)

    def err(self, message: str) -> None:
        self._emit("err", message)


class NullSink(ProgressSink):
    def out(self, message: str) -> None:
        pass

    def err(self, message: str) -> None:
        pass


class RecordingSink(ProgressSink):
    """Keeps every line in memory, in the order emitted."""

    def __init__(self):
        self.lines: List[Tuple[str, str]] = []

    def out(self, message: str) -> None:
        self.lines.append(("out", message))

    def err(self, message: str) -> None:
        self.lines.append(("err", message))

    @property
    def stdout(self) -> List[str]:
        return [message for channel, message in self.lines if channel == "out"]

    @property
    def stderr(self) -> List[str]:
        return [message for channel, message in self.lines if channel == "err"]
