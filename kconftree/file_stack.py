# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import re
from os.path import normpath
from typing import Callable
from typing import List
from typing import Optional

from .errors import InvalidOperationError
from .source import LineSource
from .tokenizer import Tokenizer

_symbol_ref_sub = re.compile(r"\$([A-Za-z_]+)").sub


def substitute_symbols(text: str, lookup: Callable[[str], Optional[str]]) -> str:
    """
    Replace every $NAME in 'text' with lookup(NAME). References that lookup() cannot resolve
    (None or empty string) are left as they are.
    """

    def replace(match: "re.Match") -> str:
        value = lookup(match.group(1))
        return value if value else match.group(0)

    return _symbol_ref_sub(replace, text)


class FileStack:
    """
    Stack of the Kconfig files being parsed. The top of the stack is the file tokens are read from;
    every file below it is suspended right after its "source" line and resumes there once the top is popped.

    The stack is a context manager closing all the files still open when the parse ends, whichever way it ends.
    """

    def __init__(self, root: str) -> None:
        self.root = root
        self._stack: List[Tokenizer] = []
        # Every file opened, in order of opening
        self.visited: List[str] = []

    def __enter__(self) -> "FileStack":
        return self

    def __exit__(self, *exc) -> None:
        self.close_all()

    def __len__(self) -> int:
        return len(self._stack)

    def __bool__(self) -> bool:
        return bool(self._stack)

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def current(self) -> Tokenizer:
        if not self._stack:
            raise InvalidOperationError("No Kconfig file is open")
        return self._stack[-1]

    def is_open(self, filename: str) -> bool:
        """
        True if 'filename' is already on the stack (sourcing it again would never end).
        """
        wanted = normpath(filename)
        return any(normpath(tokens.filename) == wanted for tokens in self._stack)

    @property
    def include_path(self) -> List[str]:
        return [f"{tokens.filename}:{tokens.linenr}" for tokens in self._stack]

    def push(self, filename: str) -> Tokenizer:
        """
        Open 'filename' (relative to the root) and make it the current file.
        Raises MissingFileError if it does not exist.
        """
        tokens = Tokenizer(LineSource(self.root, filename))
        self._stack.append(tokens)
        self.visited.append(filename)
        return tokens

    def pop(self) -> Optional[Tokenizer]:
        """
        Close the current file and return the tokenizer of the file that sourced it (None if it was the last one).
        """
        tokens = self._stack.pop()
        tokens.source.close()
        return self._stack[-1] if self._stack else None

    def close_all(self) -> None:
        while self._stack:
            self._stack.pop().source.close()
