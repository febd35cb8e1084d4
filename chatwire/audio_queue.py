"""Single-producer, single-consumer queue of audio byte packages."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class AudioPackage:
    """A chunk of audio bytes with its nominal length and write position."""

    data: bytearray = field(default_factory=bytearray)
    length: Optional[int] = None
    index: int = 0

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)
        if self.length is None:
            self.length = len(self.data)

    @classmethod
    def from_stream(cls, stream: bytes, length: int) -> "AudioPackage":
        """Copy the first ``length`` bytes of a stream; the index ends after them."""
        chunk = bytearray(stream[:length])
        return cls(chunk, length, len(chunk))

    def append(self, value: int) -> None:
        self.data.append(value)
        self.index += 1


class AudioQueue:
    """FIFO of audio packages, safe for one producer and one consumer thread."""

    def __init__(self) -> None:
        self._items: deque[AudioPackage] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def push(self, package: AudioPackage) -> None:
        self._items.append(package)

    def pop(self) -> Optional[AudioPackage]:
        """Return the oldest package, or None when the queue is empty."""
        try:
            return self._items.popleft()
        except IndexError:
            return None

    def empty(self) -> bool:
        return not self._items