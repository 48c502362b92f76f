# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional
from typing import Tuple

from .entries import AnyEntry
from .entries import Condition
from .entries import Location
from .errors import ParseError
from .file_stack import FileStack
from .file_stack import substitute_symbols
from .report import MultipleDefinitionArea
from .report import ParseReport
from .tokenizer import Tokenizer


class ScopeStack:
    """
    Conditions of the currently open "if" blocks, outermost first.
    File inclusion does not touch it: an "if" may be closed in another file than the one that opened it.
    """

    def __init__(self) -> None:
        self._conditions: List[Condition] = []

    def __len__(self) -> int:
        return len(self._conditions)

    def __bool__(self) -> bool:
        return bool(self._conditions)

    def push(self, condition: Condition) -> None:
        self._conditions.append(condition)

    def pop(self) -> Condition:
        return self._conditions.pop()

    def snapshot(self) -> Tuple[Condition, ...]:
        return tuple(self._conditions)


class ParseContext:
    """
    Everything one parse shares between the parse functions: open files, "if" scopes, symbol table,
    environment and report. It is passed explicitly to every parse function and never reused.
    """

    def __init__(
        self,
        root: str,
        environment: Optional[Mapping[str, str]] = None,
        strict: bool = True,
        report: Optional[ParseReport] = None,
    ) -> None:
        self.root = root
        self.environment: Dict[str, str] = dict(environment or {})
        self.strict = strict
        self.report = report if report is not None else ParseReport()
        self.files = FileStack(root)
        self.scope = ScopeStack()
        self.symbols: Dict[str, AnyEntry] = {}
        # Locations of every definition of every symbol, for the multiple-definition report
        self._definitions: Dict[str, List[str]] = {}

    @property
    def tokens(self) -> Tokenizer:
        return self.files.current

    def location(self) -> Location:
        tokens = self.files.current
        return Location(tokens.filename, tokens.linenr)

    def error(self, msg: str) -> ParseError:
        """
        ParseError located at the current line. Meant to be raised by the caller.
        """
        return ParseError(msg, self.location() if self.files else None)

    def warn(self, msg: str, location: Optional[Location] = None) -> None:
        self.report.warn(msg, location if location is not None else self.location())

    def define(self, entry: AnyEntry) -> None:
        """
        Register 'entry' under its symbol. Redefinitions replace the table entry, but are reported.
        """
        if not entry.symbol:
            return
        definitions = self._definitions.setdefault(entry.symbol, [])
        definitions.append(str(entry.location))
        if len(definitions) > 1:
            self.report.add_record(MultipleDefinitionArea, symbol=entry.symbol, occurrences=definitions)
        self.symbols[entry.symbol] = entry

    def symbol_value(self, name: str) -> Optional[str]:
        """
        Current value of a symbol for $NAME substitution: the env value of the symbol if it is defined
        and has one, otherwise the value of the environment variable NAME.
        """
        entry = self.symbols.get(name)
        value = getattr(entry, "env", None)
        if value:
            return value
        return self.environment.get(name)

    def substitute(self, text: str) -> str:
        return substitute_symbols(text, self.symbol_value)
