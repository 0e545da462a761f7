"""Submitted-command recall (shell-style ArrowUp / ArrowDown)."""


class CommandHistory:
    """Ordered list of submitted lines with a recall cursor.

    The cursor counts back from the most recent line: 0 is the latest,
    ``len - 1`` the oldest, and -1 means not recalling.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._cursor = -1

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._lines)

    def record(self, line: str) -> None:
        self._lines.append(line)
        self._cursor = -1

    def previous(self, current: str) -> str:
        """Step to an older line; stays on the oldest once reached."""
        if self._cursor < len(self._lines) - 1:
            self._cursor += 1
            return self._lines[-1 - self._cursor]
        return current

    def next(self, current: str) -> str:
        """Step to a newer line; stepping past the newest clears the input."""
        if self._cursor > 0:
            self._cursor -= 1
            return self._lines[-1 - self._cursor]
        if self._cursor == 0:
            self._cursor = -1
            return ""
        return current
