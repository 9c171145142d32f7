"""Character to UTF-8 byte offset mapping for decode error reporting."""

from __future__ import annotations

from typing import Final


class ByteOffsetMap:
    """Maps character offsets in decoded text back to UTF-8 byte offsets.

    Decode errors are located while scanning the decoded ``str``, but the
    caller handed us bytes. Checkpoints every ``interval`` characters keep the
    lookup cheap for long documents without a full per-character table.
    """

    def __init__(self, text: str, interval: int = 256) -> None:
        self.text: Final = text
        self.interval: Final = interval
        self.is_ascii: Final = text.isascii()
        # checkpoints[n] is the byte offset of character n * interval
        self.checkpoints: list[int] = []
        if not self.is_ascii:
            self._build_checkpoints()

    def _build_checkpoints(self) -> None:
        byte_pos = 0
        for start in range(0, len(self.text), self.interval):
            self.checkpoints.append(byte_pos)
            chunk = self.text[start : start + self.interval]
            byte_pos += len(chunk.encode("utf-8", "surrogatepass"))

    def byte_offset(self, char_pos: int) -> int:
        """Returns the UTF-8 byte offset of the character at ``char_pos``."""
        if self.is_ascii or char_pos <= 0:
            return max(char_pos, 0)

        char_pos = min(char_pos, len(self.text))
        slot = min(char_pos // self.interval, len(self.checkpoints) - 1)
        base_char = slot * self.interval
        tail = self.text[base_char:char_pos]
        return self.checkpoints[slot] + len(tail.encode("utf-8", "surrogatepass"))
