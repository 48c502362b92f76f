# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from .comment_parser import parse_comment
from .config_parser import parse_config
from .context import ParseContext
from .directives import CHOICE_DIRECTIVES
from .directives import SOURCE_KEYWORDS
from .directives import check_block_end
from .directives import finish_entry
from .directives import read_endif
from .directives import read_if
from .directives import read_source
from .directives import unrecognized
from .entries import Choice
from .tokenizer import TokenKind

# Keywords that may not appear between "choice" and "endchoice"
_NOT_IN_CHOICE = ("menu", "endmenu", "choice", "mainmenu")


def parse_choice(ctx: ParseContext) -> Choice:
    """
    choice [<symbol>]
        <choice directives>
        config/menuconfig/comment entries, if/endif, source
    endchoice

    Members and comments may come from sourced files, but "endchoice" must be in the file the choice started in.
    """
    location = ctx.location()
    tokens = ctx.tokens
    token = tokens.next_token()
    symbol = None
    if token.is_word():
        symbol = token.text
    else:
        tokens.push_back()

    choice = Choice(location=location, symbol=symbol)
    scope = ctx.scope.snapshot()
    depth = ctx.files.depth

    while True:
        # The current file changes with "source" and at the end of sourced files
        tokens = ctx.tokens
        token = tokens.next_token()

        if token.kind is TokenKind.EOF:
            if ctx.files.depth <= depth:
                raise ctx.error(f"missing 'endchoice' for {choice.name_and_loc}")
            ctx.files.pop()
            continue
        if token.kind is TokenKind.EOL:
            continue
        if token.kind is not TokenKind.WORD:
            unrecognized(ctx, choice, str(token))
            continue

        keyword = token.text
        if keyword == "endchoice":
            check_block_end(ctx, choice, keyword, depth, scope)
            break
        if keyword in ("config", "menuconfig"):
            choice.children.append(parse_config(ctx, keyword))
        elif keyword == "comment":
            choice.children.append(parse_comment(ctx))
        elif keyword in SOURCE_KEYWORDS:
            read_source(ctx, keyword)
        elif keyword == "if":
            read_if(ctx)
        elif keyword == "endif":
            read_endif(ctx)
        elif keyword in _NOT_IN_CHOICE:
            raise ctx.error(f"'{keyword}' is not allowed inside a choice ({choice.name_and_loc})")
        elif keyword in CHOICE_DIRECTIVES:
            CHOICE_DIRECTIVES[keyword](ctx, choice, keyword)
        else:
            unrecognized(ctx, choice, keyword)

    ctx.define(choice)
    return finish_entry(ctx, choice, scope)  # type: ignore
