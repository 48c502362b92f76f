# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from .context import ParseContext
from .directives import COMMENT_DIRECTIVES
from .directives import COMMENT_REFUSED_DIRECTIVES
from .directives import ENTRY_KEYWORDS
from .directives import finish_entry
from .directives import read_prompt
from .directives import unrecognized
from .entries import Comment
from .tokenizer import TokenKind


def parse_comment(ctx: ParseContext) -> Comment:
    """
    comment "<prompt>"
        [depends on <expr>]...

    Directives giving the comment a type, value or help text are refused (InvalidOperationError).
    """
    comment = Comment(location=ctx.location())
    scope = ctx.scope.snapshot()
    read_prompt(ctx, comment, "comment")

    tokens = ctx.tokens
    while True:
        token = tokens.next_token()

        if token.kind is TokenKind.EOF:
            tokens.push_back()
            break
        if token.kind is TokenKind.EOL:
            continue
        if token.kind is not TokenKind.WORD:
            unrecognized(ctx, comment, str(token))
            continue

        if token.text in ENTRY_KEYWORDS:
            tokens.push_back()
            break

        reader = COMMENT_DIRECTIVES.get(token.text) or COMMENT_REFUSED_DIRECTIVES.get(token.text)
        if reader is None:
            unrecognized(ctx, comment, token.text)
        else:
            # Refused directives raise InvalidOperationError on a comment
            reader(ctx, comment, token.text)

    return finish_entry(ctx, comment, scope)  # type: ignore
