# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Reading of the expression sublanguage used after "depends on", "default", "select", "if" etc.

Expressions are not evaluated, they are turned into a normalized string:

    expr:    operand | '!' expr | expr op expr | '(' expr ')'
    op:      '=' | '!=' | '<' | '<=' | '>' | '>=' | '&&' | '||'
    operand: symbol | number | quoted string

'&&' and '||' get one space on each side, all the other operators none, so
'depends on !A = "B" &&C' reads as '!A="B" && C'.
"""
from typing import List
from typing import Optional

from .context import ParseContext
from .entries import Condition
from .tokenizer import TokenKind

LOGIC_OPERATORS = ("&", "|")
RELATION_CHARS = ("<", ">")


class _Pieces:
    """
    Pieces of the normalized expression, inserting a space between two operands that directly follow each other.
    """

    def __init__(self) -> None:
        self.pieces: List[str] = []
        self._last_is_operand = False

    def operand(self, text: str) -> None:
        if self._last_is_operand:
            self.pieces.append(" ")
        self.pieces.append(text)
        self._last_is_operand = True

    def operator(self, text: str) -> None:
        self.pieces.append(text)
        self._last_is_operand = False

    def __str__(self) -> str:
        return "".join(self.pieces).strip()


def _read(ctx: ParseContext, nested: bool) -> str:
    tokens = ctx.tokens
    result = _Pieces()
    while True:
        token = tokens.next_token()

        if token.is_end or token.is_word("if"):
            if nested:
                raise ctx.error("unbalanced parenthesis in expression: missing ')'")
            tokens.push_back()
            break

        if token.kind in (TokenKind.WORD, TokenKind.NUMBER):
            result.operand(token.text)

        elif token.kind is TokenKind.QUOTED:
            result.operand(f'"{token.text}"')

        elif token.is_char("("):
            result.operand("(" + _read(ctx, nested=True) + ")")

        elif token.is_char(")"):
            if nested:
                break
            # Not ours, the caller decides what to do with it
            tokens.push_back()
            break

        elif token.is_char("!"):
            if tokens.next_token().is_char("="):
                result.operator("!=")
            else:
                tokens.push_back()
                result.operator("!")

        elif token.is_char("="):
            result.operator("=")

        elif token.text in RELATION_CHARS and token.kind is TokenKind.CHAR:
            if tokens.next_token().is_char("="):
                result.operator(token.text + "=")
            else:
                tokens.push_back()
                result.operator(token.text)

        elif token.text in LOGIC_OPERATORS and token.kind is TokenKind.CHAR:
            char = token.text
            partner = tokens.next_token()
            if partner.is_char(char):
                result.operator(f" {char * 2} ")
                continue
            tokens.push_back()
            if partner.kind in (TokenKind.WORD, TokenKind.NUMBER, TokenKind.QUOTED) or (
                partner.kind is TokenKind.CHAR and partner.text in ("(", "!")
            ):
                if partner.is_word("if"):
                    ctx.warn(f"dangling '{char}' in expression discarded")
                    continue
                ctx.warn(f"single '{char}' in expression read as '{char * 2}'")
                result.operator(f" {char * 2} ")
            else:
                ctx.warn(f"dangling '{char}' in expression discarded")

        else:
            # Not part of an expression
            tokens.push_back()
            if nested:
                raise ctx.error(f"unexpected '{token}' in expression")
            break

    return str(result)


def read_expression(ctx: ParseContext) -> str:
    """
    Read an expression from the current position up to (not including) the end of the line or a trailing
    "if" and return it normalized. Returns an empty string if there is no expression at all.
    """
    return _read(ctx, nested=False)


def parse_condition(ctx: ParseContext) -> Condition:
    """
    Read the condition of "... if <expr>". The "if" token must be the current (already read) token.
    """
    tokens = ctx.tokens
    if tokens.current is None or not tokens.current.is_word("if"):
        raise ctx.error("condition must start with 'if'")
    expression = read_expression(ctx)
    if not expression:
        raise ctx.error("expected expression after 'if'")
    return Condition(expression)


def read_optional_condition(ctx: ParseContext) -> Optional[Condition]:
    """
    Read a trailing "if <expr>" if there is one, otherwise leave the tokens alone.
    """
    tokens = ctx.tokens
    if tokens.next_token().is_word("if"):
        return parse_condition(ctx)
    tokens.push_back()
    return None
