# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from .context import ParseContext
from .directives import CONFIG_DIRECTIVES
from .directives import ENTRY_KEYWORDS
from .directives import finish_entry
from .directives import unrecognized
from .entries import Config
from .entries import MenuConfig
from .tokenizer import TokenKind


def parse_config(ctx: ParseContext, keyword: str = "config") -> Config:
    """
    Parse a "config"/"menuconfig" entry. The keyword has already been read; the symbol name must follow on the same line.
    Returns at the next entry keyword (left unread) or at the end of the file.
    """
    tokens = ctx.tokens
    location = ctx.location()
    token = tokens.next_token()
    if not token.is_word():
        raise ctx.error(f"expected symbol name after '{keyword}', got {token}")

    config = (MenuConfig if keyword == "menuconfig" else Config)(location=location, symbol=token.text)
    scope = ctx.scope.snapshot()
    ctx.define(config)

    while True:
        token = tokens.next_token()

        if token.kind is TokenKind.EOF:
            tokens.push_back()
            break
        if token.kind is TokenKind.EOL:
            continue
        if token.kind is not TokenKind.WORD:
            unrecognized(ctx, config, str(token))
            continue

        if token.text in ENTRY_KEYWORDS:
            tokens.push_back()
            break

        reader = CONFIG_DIRECTIVES.get(token.text)
        if reader is None:
            unrecognized(ctx, config, token.text)
        else:
            reader(ctx, config, token.text)

    return finish_entry(ctx, config, scope)  # type: ignore
