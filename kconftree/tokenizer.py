# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import InvalidOperationError
from .source import COMMENT_CHAR
from .source import LineSource

QUOTE_CHARS = ('"', "'")

_word_match = re.compile(r"[A-Za-z0-9_-]+").match
_number_match = re.compile(r"-?\d+$|0[xX][0-9a-fA-F]+$").match


class TokenKind(Enum):
    WORD = "word"
    NUMBER = "number"
    QUOTED = "quoted"
    EOL = "eol"
    EOF = "eof"
    CHAR = "char"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str = ""
    linenr: int = 0
    # Integer value of NUMBER tokens
    number: Optional[int] = None
    # Quote character of QUOTED tokens
    quote: Optional[str] = None

    def is_word(self, text: Optional[str] = None) -> bool:
        """
        True for WORD (and NUMBER) tokens, optionally only if the token text is 'text'.
        """
        if self.kind not in (TokenKind.WORD, TokenKind.NUMBER):
            return False
        return text is None or self.text == text

    def is_char(self, char: str) -> bool:
        return self.kind is TokenKind.CHAR and self.text == char

    @property
    def is_end(self) -> bool:
        return self.kind in (TokenKind.EOL, TokenKind.EOF)

    def __str__(self) -> str:
        if self.kind is TokenKind.QUOTED:
            return f"{self.quote}{self.text}{self.quote}"
        if self.kind is TokenKind.EOL:
            return "end of line"
        if self.kind is TokenKind.EOF:
            return "end of file"
        return self.text


def _is_whitespace(char: str) -> bool:
    # Every control/space character except the newline, which is significant
    return char <= " "


class Tokenizer:
    """
    Splits the lines of one LineSource into tokens.

    Word characters are letters, digits, '-' and '_'. Ends of lines are tokens on their own.
    '#' outside of quotes starts a comment running to the end of the line. Both quote styles delimit
    a single token; there are no escape sequences and an unterminated quote ends at the end of the line.
    Any other character is a one-character CHAR token.

    Besides tokens, the raw lines can be read directly (read_line()/unread_line()), which is what
    help texts need. This is only legal between lines, see discard_line().
    """

    def __init__(self, source: LineSource) -> None:
        self.source = source
        # Remaining text of the line being tokenized, None between lines
        self._line: Optional[str] = None
        self._pos = 0
        self._pushed_back = False
        self.current: Optional[Token] = None
        self.linenr = 0

    @property
    def filename(self) -> str:
        return self.source.filename

    def __repr__(self) -> str:
        return f"<Tokenizer {self.filename}:{self.linenr}>"

    def next_token(self) -> Token:
        if self._pushed_back:
            self._pushed_back = False
            return self.current  # type: ignore
        self.current = self._scan()
        return self.current

    def push_back(self) -> None:
        """
        Un-consume the current token. Only one token can be pushed back.
        """
        if self._pushed_back:
            raise InvalidOperationError(
                f"{self.filename}:{self.linenr}: push_back() called twice without next_token() in between"
            )
        if self.current is None:
            raise InvalidOperationError(f"{self.filename}: push_back() called before the first token")
        self._pushed_back = True

    def _scan(self) -> Token:
        if self._line is None:
            line = self.source.next_line()
            if line is None:
                return Token(TokenKind.EOF, linenr=self.linenr)
            self._line = line
            self._pos = 0
            self.linenr = self.source.line_start

        line = self._line
        pos = self._pos
        end = len(line)
        while pos < end and _is_whitespace(line[pos]):
            pos += 1

        if pos >= end or line[pos] == COMMENT_CHAR:
            self._line = None
            return Token(TokenKind.EOL, linenr=self.linenr)

        char = line[pos]
        if char in QUOTE_CHARS:
            closing = line.find(char, pos + 1)
            if closing == -1:
                text = line[pos + 1 :]
                self._pos = end
            else:
                text = line[pos + 1 : closing]
                self._pos = closing + 1
            return Token(TokenKind.QUOTED, text, linenr=self.linenr, quote=char)

        match = _word_match(line, pos)
        if match:
            self._pos = match.end()
            text = match.group()
            if _number_match(text):
                number = int(text, 16) if text[:2] in ("0x", "0X") else int(text)
                return Token(TokenKind.NUMBER, text, linenr=self.linenr, number=number)
            return Token(TokenKind.WORD, text, linenr=self.linenr)

        self._pos = pos + 1
        return Token(TokenKind.CHAR, char, linenr=self.linenr)

    def discard_line(self) -> None:
        """
        Consume tokens up to and including the end of the current line, so that the next read_line()
        starts at the beginning of the following line. At EOF, the EOF token is left pending.
        """
        while True:
            token = self.next_token()
            if token.kind is TokenKind.EOL:
                return
            if token.kind is TokenKind.EOF:
                self.push_back()
                return

    def _check_between_lines(self, method: str) -> None:
        if self._pushed_back or self._line is not None:
            raise InvalidOperationError(
                f"{self.filename}:{self.linenr}: {method}() called in the middle of a tokenized line"
            )

    def read_line(self) -> Optional[str]:
        """
        Raw line read, bypassing tokenization. None at EOF.
        """
        if self._pushed_back and self.current is not None and self.current.kind is TokenKind.EOF:
            return None
        self._check_between_lines("read_line")
        line = self.source.read_line()
        self.linenr = self.source.line_start
        return line

    def unread_line(self, line: str) -> None:
        """
        Push back a line returned by read_line(). It is tokenized normally by the next next_token().
        """
        self._check_between_lines("unread_line")
        self.source.unread_line(line)
