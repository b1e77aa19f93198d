from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TextIO


class AudioCue(ABC):
    """Feedback sound played on clicks, purchases and rebirths."""

    @abstractmethod
    def play(self) -> None: ...


class SilentAudio(AudioCue):
    def play(self) -> None:
        pass


class TerminalBell(AudioCue):
    """Rings the terminal bell."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stderr

    def play(self) -> None:
        self.stream.write("\a")
        self.stream.flush()
