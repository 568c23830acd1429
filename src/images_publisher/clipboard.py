"""Clipboard writers used to hand the published URLs to the user."""

import shutil
import subprocess
import sys
from typing import List, Optional, Sequence, TextIO

from .core import ClipboardError, get_logger

# Tried in order; the first one found on PATH wins
CLIPBOARD_COMMANDS: Sequence[List[str]] = (
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
)


class SystemClipboard:
    """Writes text to the system clipboard through a platform command."""

    def __init__(self, command: Optional[List[str]] = None):
        self._command = command

    def _resolve_command(self) -> List[str]:
        if self._command:
            return self._command
        for candidate in CLIPBOARD_COMMANDS:
            if shutil.which(candidate[0]):
                return candidate
        raise ClipboardError("No clipboard command available (tried pbcopy, wl-copy, xclip, xsel, clip)")

    def write(self, text: str) -> None:
        command = self._resolve_command()
        get_logger("clipboard").debug(f"Copying {len(text)} characters with {command[0]}")
        try:
            subprocess.run(command, input=text.encode("utf-8"), check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise ClipboardError(f"Clipboard command {command[0]} failed: {exc}") from exc


class StdoutClipboard:
    """Prints the text instead of copying it."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def write(self, text: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(text + "\n")
        stream.flush()
