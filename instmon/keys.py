"""Line-edit buffer behind the "Select instance" prompt."""

from __future__ import annotations

CHAR_LIMIT = 4


class LineInput:
    def __init__(self, char_limit: int = CHAR_LIMIT):
        self.char_limit = char_limit
        self.value = ""

    def clear(self):
        self.value = ""

    def handle(self, key: str) -> str | None:
        """Apply one key; return the buffer when enter submits non-empty content."""
        if key == "enter":
            return self.value if self.value else None
        if key == "backspace":
            self.value = self.value[:-1]
        elif len(key) == 1 and key.isprintable() and len(self.value) < self.char_limit:
            self.value += key
        return None
