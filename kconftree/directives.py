# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Directive readers shared by the entry parsers.

Every reader is called with the directive keyword already consumed and reads the rest of the directive.
Readers are looked up by keyword in the dispatch tables at the bottom of this module; each entry kind
accepts a different subset of them.
"""
from os.path import dirname
from os.path import isdir
from os.path import join
from typing import Callable
from typing import Dict
from typing import Iterable
from typing import Tuple

from .context import ParseContext
from .entries import Choice
from .entries import Condition
from .entries import Config
from .entries import Default
from .entries import Entry
from .entries import Imply
from .entries import Prompt
from .entries import Range
from .entries import Select
from .entries import ValuedEntry
from .errors import InvalidOperationError
from .errors import MissingFileError
from .expression import read_expression
from .expression import read_optional_condition
from .report import MiscArea
from .report import MissingSourceArea
from .report import SkippedTextArea
from .tokenizer import TokenKind

TAB_WIDTH = 8

SOURCE_KEYWORDS = ("source", "rsource", "osource", "orsource")

# Keywords starting a new entry (or closing a block). Any entry ends right before them.
ENTRY_KEYWORDS = frozenset(
    (
        "config",
        "menuconfig",
        "choice",
        "endchoice",
        "comment",
        "menu",
        "endmenu",
        "if",
        "endif",
        "mainmenu",
    )
    + SOURCE_KEYWORDS
)

TYPE_KEYWORDS = ("bool", "boolean", "tristate", "string", "int", "hex")

Reader = Callable[[ParseContext, Entry, str], None]


def _valued(ctx: ParseContext, entry: Entry, keyword: str) -> ValuedEntry:
    if not isinstance(entry, ValuedEntry):
        raise InvalidOperationError(f"'{keyword}' is not valid for {entry.kind} entries", ctx.location())
    return entry


def _config(ctx: ParseContext, entry: Entry, keyword: str) -> Config:
    if not isinstance(entry, Config):
        raise InvalidOperationError(f"'{keyword}' is not valid for {entry.kind} entries", ctx.location())
    return entry


def skip_line(ctx: ParseContext) -> str:
    """
    Skip to the end of the line (or file) leaving the EOL/EOF pending. Returns the skipped text.
    """
    tokens = ctx.tokens
    skipped = []
    while True:
        token = tokens.next_token()
        if token.is_end:
            tokens.push_back()
            return " ".join(skipped)
        skipped.append(str(token))


def unrecognized(ctx: ParseContext, entry: Entry, first: str) -> None:
    """
    Handle text that is not a directive of 'entry'. Fatal in strict mode, otherwise the line is skipped
    and the skip is reported.
    """
    rest = skip_line(ctx)
    text = f"{first} {rest}".strip()
    if ctx.strict:
        raise ctx.error(f"unrecognized text in {entry.kind} entry: [{text}]")
    ctx.report.warn(f"skipping unrecognized text [{text}]", ctx.location(), area=SkippedTextArea, text=text)


def finish_entry(ctx: ParseContext, entry: Entry, scope: Iterable[Condition]) -> Entry:
    """
    Complete the depends of a parsed entry: its own "depends on" clauses are already there, then comes
    the prompt condition and then the conditions of the enclosing "if" blocks, outermost first.
    """
    if entry.prompt is not None and entry.prompt.condition is not None:
        entry.add_depends(entry.prompt.condition)
    for condition in scope:
        entry.add_depends(condition)
    return entry


def _nonempty_expression(ctx: ParseContext, keyword: str) -> str:
    expression = read_expression(ctx)
    if not expression:
        raise ctx.error(f"'{keyword}' needs an expression")
    return expression


def read_prompt(ctx: ParseContext, entry: Entry, keyword: str = "prompt") -> None:
    """
    prompt "<text>" [if <expr>]
    """
    location = ctx.location()
    token = ctx.tokens.next_token()
    if token.kind is not TokenKind.QUOTED:
        raise ctx.error(f"expected prompt string after '{keyword}', got {token}")
    text = token.text
    if text != text.strip():
        ctx.warn(f"{entry.name_and_loc} has leading or trailing whitespace in its prompt", location)
        text = text.strip()
    condition = read_optional_condition(ctx)
    if entry.prompt is not None:
        ctx.warn(f"{entry.name_and_loc} defined with multiple prompts in single location", location)
    entry.prompt = Prompt(text, condition)


def read_type(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    <type> ["<prompt>" [if <expr>]]
    """
    valued = _valued(ctx, entry, keyword)
    valued.type = "bool" if keyword == "boolean" else keyword
    tokens = ctx.tokens
    token = tokens.next_token()
    tokens.push_back()
    if token.kind is TokenKind.QUOTED:
        read_prompt(ctx, entry, keyword)


def read_type_with_default(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    def_bool|def_tristate <expr> [if <expr>]
    """
    valued = _valued(ctx, entry, keyword)
    valued.type = keyword[len("def_") :]
    read_default(ctx, entry, keyword)


def read_default(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    default <expr> [if <expr>]
    """
    valued = _valued(ctx, entry, keyword)
    value = _nonempty_expression(ctx, keyword)
    valued.defaults.append(Default(value, read_optional_condition(ctx)))


def read_depends(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    depends on <expr>
    """
    if not ctx.tokens.next_token().is_word("on"):
        raise ctx.error("'on' must follow 'depends'")
    entry.add_depends(Condition(_nonempty_expression(ctx, "depends on")))


def read_select(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    select <symbol> [if <expr>]
    """
    config = _config(ctx, entry, keyword)
    value = _nonempty_expression(ctx, keyword)
    config.add_select(Select(value, read_optional_condition(ctx)))


def read_imply(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    imply <symbol> [if <expr>]
    """
    config = _config(ctx, entry, keyword)
    value = _nonempty_expression(ctx, keyword)
    config.add_imply(Imply(value, read_optional_condition(ctx)))


def read_range(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    range <low> <high> [if <expr>]
    """
    config = _config(ctx, entry, keyword)
    tokens = ctx.tokens
    bounds = []
    for _ in range(2):
        token = tokens.next_token()
        if not token.is_word():
            raise ctx.error(f"'range' needs two values, got {token}")
        bounds.append(token.text)
    config.add_range(Range(value=bounds[0], high=bounds[1], condition=read_optional_condition(ctx)))


def read_option(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    option env="<NAME>" seeds the value of the entry from the environment. Other options
    (defconfig_list, modules, allnoconfig_y) do not change the tree and are skipped.
    """
    valued = _valued(ctx, entry, keyword)
    tokens = ctx.tokens
    token = tokens.next_token()
    if not token.is_word():
        raise ctx.error(f"'option' needs a name, got {token}")

    if token.text != "env":
        skip_line(ctx)
        ctx.report.add_record(MiscArea, message=f"{ctx.location()}: option '{token.text}' ignored")
        return

    if not tokens.next_token().is_char("="):
        raise ctx.error("'option env' needs an '='")
    token = tokens.next_token()
    if token.kind is not TokenKind.QUOTED:
        raise ctx.error("'option env' needs a quoted variable name")
    name = token.text
    if name in ctx.environment:
        valued.env = ctx.environment[name]
    else:
        ctx.warn(f"{entry.name_and_loc} takes its value from the environment variable {name}, which is not set")


def read_help(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    help
      <text>

    The first non-blank line after "help" sets the reference indentation (tabs expand to 8 columns).
    The text goes on till the first non-blank line with less indentation, which is pushed back
    to be parsed as a directive. Inner indentation is preserved, the reference indentation is stripped.
    """
    valued = _valued(ctx, entry, keyword)
    tokens = ctx.tokens
    location = ctx.location()
    tokens.discard_line()

    # Find first non-blank line and get its indentation
    line = tokens.read_line()
    while line is not None and not line.strip():
        line = tokens.read_line()
    if line is None:
        ctx.warn(f"{entry.name_and_loc} has 'help' but empty help text", location)
        return

    expline = line.expandtabs(TAB_WIDTH)
    indent = len(expline) - len(expline.lstrip())
    if not indent:
        tokens.unread_line(line)
        ctx.warn(f"{entry.name_and_loc} has 'help' but empty help text", location)
        return

    lines = [expline[indent:]]
    blank_lines = 0
    while True:
        line = tokens.read_line()
        if line is None:
            break
        if not line.strip():
            # Kept only if the help text goes on after them
            blank_lines += 1
            continue
        expline = line.expandtabs(TAB_WIDTH)
        if len(expline) - len(expline.lstrip()) < indent:
            tokens.unread_line(line)
            break
        lines.extend([""] * blank_lines)
        blank_lines = 0
        lines.append(expline[indent:])

    if valued.help is not None:
        ctx.warn(
            f"{entry.name_and_loc} defined with more than one help text -- only the last one will be used", location
        )
    valued.help = "\n".join(lines) + "\n"


def read_optional(ctx: ParseContext, entry: Entry, keyword: str) -> None:
    """
    optional (choices only): the choice may be left with no member selected.
    """
    if not isinstance(entry, Choice):
        raise InvalidOperationError(f"'{keyword}' is not valid for {entry.kind} entries", ctx.location())
    entry.optional = True


def _table(*groups: Iterable[Tuple[str, Reader]]) -> Dict[str, Reader]:
    table: Dict[str, Reader] = {}
    for group in groups:
        table.update(group)
    return table


_VALUE_DIRECTIVES = [(keyword, read_type) for keyword in TYPE_KEYWORDS] + [
    ("def_bool", read_type_with_default),
    ("def_tristate", read_type_with_default),
    ("default", read_default),
    ("help", read_help),
    ("---help---", read_help),
    ("option", read_option),
]

_CONFIG_ONLY_DIRECTIVES = [
    ("select", read_select),
    ("imply", read_imply),
    ("range", read_range),
]

CONFIG_DIRECTIVES = _table(
    _VALUE_DIRECTIVES,
    _CONFIG_ONLY_DIRECTIVES,
    [("depends", read_depends), ("prompt", read_prompt)],
)

CHOICE_DIRECTIVES = _table(
    _VALUE_DIRECTIVES,
    [("depends", read_depends), ("prompt", read_prompt), ("optional", read_optional)],
)

COMMENT_DIRECTIVES = _table([("depends", read_depends)])

# Directives a comment must refuse rather than skip: they would give it a type, value or help text
COMMENT_REFUSED_DIRECTIVES = _table(_VALUE_DIRECTIVES, _CONFIG_ONLY_DIRECTIVES)


#
# Menu-scope directives, shared by menus and choices
#


def read_source(ctx: ParseContext, keyword: str) -> None:
    """
    source "<path>" | source <path>

    $NAME references in the path are substituted (see ParseContext.symbol_value()) and the path is resolved
    against the root (rsource/orsource: against the directory of the current file). On success, the sourced
    file becomes the current file; the current line of the including file is left with only its EOL pending.
    A missing file is reported and skipped (silently for osource/orsource).
    """
    tokens = ctx.tokens
    location = ctx.location()
    token = tokens.next_token()
    if token.kind is TokenKind.QUOTED:
        path = token.text
        rest = skip_line(ctx)
        if rest:
            ctx.warn(f"extra text after '{keyword}' ignored: [{rest}]", location)
    elif token.is_end:
        raise ctx.error(f"'{keyword}' needs a path")
    else:
        parts = [token.text]
        while True:
            token = tokens.next_token()
            if token.is_end:
                tokens.push_back()
                break
            parts.append(str(token))
        path = "".join(parts)

    target = ctx.substitute(path)
    if not target.strip():
        raise ctx.error(f"'{keyword}' needs a path")
    if keyword in ("rsource", "orsource"):
        target = join(dirname(tokens.filename), target)
    if isdir(join(ctx.root, target)):
        raise ctx.error(f"'{keyword}' target '{target}' is a directory, not a Kconfig file")

    if ctx.files.is_open(target):
        raise ctx.error(
            f"recursive '{keyword}' of '{target}' detected. Include path: {' -> '.join(ctx.files.include_path)}"
        )

    try:
        ctx.files.push(target)
    except MissingFileError as e:
        if keyword in ("osource", "orsource"):
            ctx.report.add_record(MiscArea, message=f"{location}: optional '{target}' not found, skipped")
            return
        ctx.report.warn(
            f"can't find sourced file '{target}' (looked for '{e.path}'), skipping",
            location,
            area=MissingSourceArea,
            target=target,
        )


def read_if(ctx: ParseContext) -> None:
    """
    if <expr>: every entry until the matching endif gets <expr> appended to its depends.
    """
    expression = read_expression(ctx)
    if not expression:
        raise ctx.error("expected expression after 'if'")
    ctx.scope.push(Condition(expression))


def read_endif(ctx: ParseContext) -> None:
    if not ctx.scope:
        raise ctx.error("'endif' without matching 'if'")
    ctx.scope.pop()


def check_block_end(
    ctx: ParseContext, entry: Entry, keyword: str, depth: int, scope: Tuple[Condition, ...]
) -> None:
    """
    "endmenu"/"endchoice" must be in the file the block started in, and "if" blocks may not cross it.

    depth:
        Depth of the file stack when the block started.
    scope:
        Scope stack snapshot taken when the block started.
    """
    if ctx.files.depth != depth:
        raise ctx.error(f"'{keyword}' is not in the same file as {entry.name_and_loc}")
    if len(ctx.scope) > len(scope):
        raise ctx.error(f"missing 'endif' for 'if {ctx.scope.pop()}' before '{keyword}'")
    if ctx.scope.snapshot() != scope:
        raise ctx.error(f"'endif' inside {entry.name_and_loc} closes an 'if' opened outside of it")
