# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from os.path import join
from typing import Optional
from typing import Tuple

from .errors import InvalidOperationError
from .errors import MissingFileError

COMMENT_CHAR = "#"


class LineSource:
    """
    One open Kconfig file, read line by line.

    Lines are returned without the trailing newline and with backslash-newline continuations already
    joined. Line numbers count physical lines, so a joined line advances them by more than one.

    filename:
        Path as written in the Kconfig files, relative to root. Used for locations.
    """

    def __init__(self, root: str, filename: str, encoding: str = "utf-8") -> None:
        self.filename = filename
        self.path = join(root, filename)
        # Number of the last physical line read and first line of the last logical line
        self.linenr = 0
        self.line_start = 0
        # Physical line count of the last logical line, needed to rewind on unread_line()
        self._last_count = 0
        self._unread: Optional[Tuple[str, int]] = None
        try:
            self._file = open(self.path, "r", encoding=encoding)
        except FileNotFoundError:
            raise MissingFileError(filename, self.path)

    def __enter__(self) -> "LineSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<LineSource {self.filename}:{self.linenr}>"

    def close(self) -> None:
        self._file.close()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def _next_physical_line(self) -> Optional[str]:
        # readline() returns '' at EOF and keeps doing so
        line = self._file.readline()
        if not line:
            return None
        self.linenr += 1
        return line

    def next_line(self) -> Optional[str]:
        """
        Next logical line, or None at EOF.
        """
        start = self.linenr
        if self._unread is not None:
            line, count = self._unread
            self._unread = None
            self.linenr += count
        else:
            line = self._next_physical_line()
            if line is None:
                return None

            # Handle line joining
            while line.endswith("\\\n"):
                continuation = self._next_physical_line()
                line = line[:-2] + (continuation or "")
            line = line.rstrip("\n")

        self.line_start = start + 1
        self._last_count = self.linenr - start
        return line

    def read_line(self) -> Optional[str]:
        """
        Raw mode used for help texts: the next logical line with '#' comments and trailing whitespace removed.
        """
        line = self.next_line()
        if line is None:
            return None
        comment = line.find(COMMENT_CHAR)
        if comment != -1:
            line = line[:comment]
        return line.rstrip()

    def unread_line(self, line: str) -> None:
        """
        Push back exactly one line returned by the last read. It is returned again by the next read.
        """
        if self._unread is not None:
            raise InvalidOperationError(f"{self.filename}:{self.linenr}: only one line can be pushed back")
        self.linenr -= self._last_count
        self._unread = (line, self._last_count)
