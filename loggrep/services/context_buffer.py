from collections import deque
from typing import Deque, List, Optional, Tuple

IndexedLine = Tuple[str, int]


class ContextBuffer:
    """Holds the lines before a match and counts the lines owed after one."""

    def __init__(self, before: int = 0, after: int = 0):
        """Initialize the buffer.

        Args:
            before: Number of leading context lines to retain
            after: Number of trailing context lines to emit after a match
        """
        self.before = before
        self.after = after
        self.window: Deque[IndexedLine] = deque(maxlen=before)
        self.after_remaining = 0

    def offer(self, line: str, index: int) -> Optional[IndexedLine]:
        """Offer a line that did not match.

        Returns:
            The line if it should be emitted now as trailing context,
            otherwise None (the line was retained or dropped)
        """
        if self.after_remaining > 0:
            self.after_remaining -= 1
            return line, index
        self.window.append((line, index))
        return None

    def take_trailing(self) -> bool:
        """Consume one trailing context slot if any are left."""
        if self.after_remaining > 0:
            self.after_remaining -= 1
            return True
        return False

    def flush(self) -> List[IndexedLine]:
        """Get the retained lines in their original order."""
        return list(self.window)

    def clear(self):
        """Drop all retained lines."""
        self.window.clear()

    def arm(self):
        """Start owing trailing context after an accepted match."""
        self.after_remaining = self.after
