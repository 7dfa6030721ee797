"""
Source Reader
=============

Character cursor over c0 source text with line/column tracking.

The tokenizer pulls characters from a SourceReader one at a time and asks
it for positions when it builds tokens and errors. `\\n`, `\\r` and the
pair `\\r\\n` each terminate one line.
"""

import re
from typing import Optional

from c0_sdk.errors import Position

LINE_BREAK = re.compile(r"\r\n|\r|\n")


class SourceReader:
    """
    Cursor over source text.

    Attributes:
        text: The complete source text
    """

    def __init__(self, text: str, line_number: int = 1):
        """
        Initialize the reader.

        Args:
            text: The source text
            line_number: Number of the first line (for embedded sources)
        """
        self.text = text
        self._pos = 0
        self._line = line_number
        self._column = 1
        self._first_line = line_number
        self._previous: Optional[Position] = None

    def is_eof(self) -> bool:
        """Check if every character has been consumed."""
        return self._pos >= len(self.text)

    def peek(self, offset: int = 0) -> str:
        """
        Look at the character at the cursor + offset without consuming it.

        Returns an empty string past the end of the text.
        """
        pos = self._pos + offset
        if pos >= len(self.text):
            return ""
        return self.text[pos]

    def advance(self) -> str:
        """Consume and return the next character ('' at end of text)."""
        if self.is_eof():
            return ""

        char = self.text[self._pos]
        self._previous = Position(self._line, self._column)
        self._pos += 1

        if char == "\n" or (char == "\r" and self.peek() != "\n"):
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def current_pos(self) -> Position:
        """Position of the next unread character."""
        return Position(self._line, self._column)

    def previous_pos(self) -> Position:
        """Position of the most recently consumed character."""
        if self._previous is None:
            return self.current_pos()
        return self._previous

    def line_text(self, line: int) -> Optional[str]:
        """Return the text of a source line, or None if out of range."""
        lines = LINE_BREAK.split(self.text)
        index = line - self._first_line
        if 0 <= index < len(lines):
            return lines[index]
        return None
