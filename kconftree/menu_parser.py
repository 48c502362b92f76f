# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from .choice_parser import parse_choice
from .comment_parser import parse_comment
from .config_parser import parse_config
from .context import ParseContext
from .directives import SOURCE_KEYWORDS
from .directives import check_block_end
from .directives import finish_entry
from .directives import read_depends
from .directives import read_endif
from .directives import read_if
from .directives import read_prompt
from .directives import read_source
from .directives import unrecognized
from .entries import Location
from .entries import Menu
from .expression import parse_condition
from .tokenizer import TokenKind


def _read_visible(ctx: ParseContext, menu: Menu) -> None:
    """
    visible if <expr>
    """
    if not ctx.tokens.next_token().is_word("if"):
        raise ctx.error("'if' must follow 'visible'")
    menu.visible_if = parse_condition(ctx)


def parse_menu(ctx: ParseContext, top: bool = False) -> Menu:
    """
    Parse a menu with all its children.

    For a nested menu, "menu" has already been read and the prompt must follow; the menu ends at "endmenu",
    which has to be in the same file as "menu". The top-level menu takes its prompt from "mainmenu"
    and ends at the end of the top-level file; "if" blocks still open at that point are an error.
    """
    if top:
        menu = Menu(location=Location(ctx.tokens.filename, 1))
    else:
        menu = Menu(location=ctx.location())
        read_prompt(ctx, menu, "menu")
    scope = ctx.scope.snapshot()
    depth = ctx.files.depth

    while True:
        tokens = ctx.tokens
        token = tokens.next_token()

        if token.kind is TokenKind.EOF:
            if ctx.files.depth > depth:
                ctx.files.pop()
                continue
            if not top:
                raise ctx.error(f"missing 'endmenu' for {menu.name_and_loc}")
            if ctx.scope:
                raise ctx.error(f"missing 'endif' for 'if {ctx.scope.pop()}'")
            break
        if token.kind is TokenKind.EOL:
            continue
        if token.kind is not TokenKind.WORD:
            unrecognized(ctx, menu, str(token))
            continue

        keyword = token.text
        if keyword in ("config", "menuconfig"):
            menu.children.append(parse_config(ctx, keyword))
        elif keyword == "choice":
            menu.children.append(parse_choice(ctx))
        elif keyword == "comment":
            menu.children.append(parse_comment(ctx))
        elif keyword == "menu":
            menu.children.append(parse_menu(ctx))
        elif keyword == "endmenu":
            if top:
                raise ctx.error("'endmenu' without matching 'menu'")
            check_block_end(ctx, menu, keyword, depth, scope)
            break
        elif keyword == "endchoice":
            raise ctx.error("'endchoice' without matching 'choice'")
        elif keyword in SOURCE_KEYWORDS:
            read_source(ctx, keyword)
        elif keyword == "if":
            read_if(ctx)
        elif keyword == "endif":
            read_endif(ctx)
        elif keyword == "mainmenu":
            if not top:
                raise ctx.error(f"'mainmenu' is not allowed inside {menu.name_and_loc}")
            if menu.prompt is not None:
                raise ctx.error(f"'mainmenu' already given at {menu.location}")
            menu.location = ctx.location()
            read_prompt(ctx, menu, keyword)
        elif keyword == "visible":
            _read_visible(ctx, menu)
        elif keyword == "depends":
            read_depends(ctx, menu, keyword)
        else:
            unrecognized(ctx, menu, keyword)

    return finish_entry(ctx, menu, scope)  # type: ignore
