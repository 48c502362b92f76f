# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Grammar of the normalized condition strings produced by the expression reader.

The parser itself never evaluates conditions. This grammar only gives downstream consumers
a way to get the structure of a condition back (operands, operators and grouping) without
writing their own tokenizer.
"""
import re
from typing import List

from pyparsing import Literal
from pyparsing import OpAssoc
from pyparsing import ParseException
from pyparsing import ParserElement
from pyparsing import Regex
from pyparsing import infix_notation
from pyparsing import one_of

from .errors import ExpressionError

ParserElement.enable_packrat(cache_size_limit=None)

symbol_regex = r"""\"[^\"]*\"  # strings: "hello world", ""
                   |'[^']*'  # strings: 'hello world'
                   |0[xX][\da-fA-F]+  # hexnums: 0x1234, 0X1234ABCD
                   |-?\d+(?![\w-])  # numbers: 1234, -1234
                   |\$?[\w-]+  # symbols: FOO, foo_bar, $ARCH, y, n, m"""
symbol = Regex(symbol_regex, re.X)

# Order matters: the first row binds tightest. Comparisons bind tighter than "!",
# so "!A=B" reads as "!(A=B)", like in the C tools.
operator_with_precedence = [
    (one_of("= != <= >= < >"), 2, OpAssoc.LEFT),
    (Literal("!"), 1, OpAssoc.RIGHT),
    (Literal("&&"), 2, OpAssoc.LEFT),
    (Literal("||"), 2, OpAssoc.LEFT),
]

expression = infix_notation(symbol, operator_with_precedence)


def parse_condition_text(text: str) -> List:
    """
    Parse a normalized condition string into nested lists, e.g. "A && (B || !C)" gives
    [['A', '&&', ['B', '||', ['!', 'C']]]].
    """
    try:
        return expression.parse_string(text, parse_all=True).as_list()
    except ParseException as e:
        raise ExpressionError(f"Malformed condition '{text}': {e}")
