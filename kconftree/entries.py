# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Entry tree produced by the parser.

Every entry kind is its own dataclass with its own set of fields. Comments and menus simply do not
have type/help/default fields, so there is nothing to set on them by accident; the directive readers
refuse such directives with InvalidOperationError.

Conditions are kept as normalized strings. Evaluating them is left to the consumer of the tree.
"""
from dataclasses import dataclass
from dataclasses import field
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Union

from .expr_grammar import parse_condition_text

TYPES = ("bool", "tristate", "string", "int", "hex")


@dataclass(frozen=True)
class Location:
    file: str
    linenr: int

    def __str__(self) -> str:
        return f"{self.file}:{self.linenr}"


@dataclass(frozen=True)
class Condition:
    text: str

    def as_list(self) -> List:
        """
        Structure of the condition as nested lists (see expr_grammar.parse_condition_text).
        """
        return parse_condition_text(self.text)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class ConditionalValue:
    value: str
    condition: Optional[Condition] = None

    def __str__(self) -> str:
        if self.condition is None:
            return self.value
        return f"{self.value} if {self.condition}"


class Default(ConditionalValue):
    pass


class Select(ConditionalValue):
    pass


class Imply(ConditionalValue):
    pass


@dataclass(frozen=True)
class Range(ConditionalValue):
    # value is the lower bound
    high: str = ""

    @property
    def low(self) -> str:
        return self.value

    def __str__(self) -> str:
        if self.condition is None:
            return f"{self.low} {self.high}"
        return f"{self.low} {self.high} if {self.condition}"


@dataclass(frozen=True)
class Prompt:
    text: str
    condition: Optional[Condition] = None

    def __str__(self) -> str:
        if self.condition is None:
            return f'"{self.text}"'
        return f'"{self.text}" if {self.condition}'


def _add_unique(items: list, item) -> None:
    if item not in items:
        items.append(item)


@dataclass
class Entry:
    location: Location
    symbol: Optional[str] = None
    prompt: Optional[Prompt] = None
    depends: List[Condition] = field(default_factory=list)

    kind = "entry"

    def add_depends(self, condition: Condition) -> None:
        _add_unique(self.depends, condition)

    @property
    def name_and_loc(self) -> str:
        name = self.symbol if self.symbol else f'"{self.prompt.text}"' if self.prompt else "<unnamed>"
        return f"{self.kind} {name} (defined at {self.location})"


@dataclass
class ValuedEntry(Entry):
    """
    Entry that can carry a value: configs and choices.
    """

    type: Optional[str] = None
    help: Optional[str] = None
    env: Optional[str] = None
    defaults: List[Default] = field(default_factory=list)


@dataclass
class Config(ValuedEntry):
    selects: List[Select] = field(default_factory=list)
    implies: List[Imply] = field(default_factory=list)
    ranges: List[Range] = field(default_factory=list)

    kind = "config"

    def add_select(self, select: Select) -> None:
        _add_unique(self.selects, select)

    def add_imply(self, imply: Imply) -> None:
        _add_unique(self.implies, imply)

    def add_range(self, range_: Range) -> None:
        _add_unique(self.ranges, range_)


@dataclass
class MenuConfig(Config):
    kind = "menuconfig"


@dataclass
class Comment(Entry):
    kind = "comment"


@dataclass
class Choice(ValuedEntry):
    # Members and comments declared inside the choice, in source order
    children: List[Union[Config, Comment]] = field(default_factory=list)
    optional: bool = False

    kind = "choice"

    @property
    def members(self) -> List[Config]:
        return [child for child in self.children if isinstance(child, Config)]

    @property
    def comments(self) -> List[Comment]:
        return [child for child in self.children if isinstance(child, Comment)]


@dataclass
class Menu(Entry):
    children: List["AnyEntry"] = field(default_factory=list)
    visible_if: Optional[Condition] = None

    kind = "menu"


AnyEntry = Union[Config, MenuConfig, Choice, Comment, Menu]


@dataclass
class KconfigTree:
    """
    Result of one parse: the root menu (prompt taken from "mainmenu") plus the flat symbol table.
    Only the root takes part in equality; the rest is derived from it or is diagnostics.
    """

    root: Menu
    symbols: Dict[str, AnyEntry] = field(default_factory=dict, compare=False)
    files: List[str] = field(default_factory=list, compare=False)
    report: object = field(default=None, compare=False, repr=False)

    def lookup(self, symbol: str) -> Optional[AnyEntry]:
        return self.symbols.get(symbol)

    def node_iter(self, menu: Optional[Menu] = None) -> Iterator[AnyEntry]:
        """
        Depth-first walk over all entries below 'menu' (the root by default), in source order.
        The children of a choice follow their choice.
        """
        if menu is None:
            menu = self.root
        for child in menu.children:
            yield child
            if isinstance(child, Menu):
                yield from self.node_iter(child)
            elif isinstance(child, Choice):
                yield from child.children
