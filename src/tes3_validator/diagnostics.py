"""
Diagnostic output.

Findings are plain lines of text. They are kept on the reporter and, when a
stream is configured, written to it immediately. Logging is separate and
never carries findings.
"""

from typing import List, Optional, TextIO


class Reporter:
    """Collects one line per detected issue."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.lines: List[str] = []

    def report(self, message: str) -> None:
        self.lines.append(message)
        if self.stream is not None:
            self.stream.write(message + "\n")
            self.stream.flush()

    def __len__(self) -> int:
        return len(self.lines)
