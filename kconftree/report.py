# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0

"""
Report of the non-fatal findings of one parse.

Instead of printing warnings as soon as they are found, ParseReport stores them and they can be
printed at the end of the parse as one report (or dumped as JSON). Fatal problems are never reported
here, they are raised as exceptions.
"""

import json
import os
import sys
import textwrap
from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Dict
from typing import List
from typing import Optional
from typing import Set
from typing import Tuple

from rich import print as rprint
from rich.box import HORIZONTALS
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from .entries import Location

STATUS_NONE = 0
STATUS_OK = 1
STATUS_OK_WITH_INFO = 2
STATUS_WARNING = 3
STATUS_ERROR = 4

_INDENT = " " * 4
VERBOSITY_QUIET = "quiet"  # Report only if there is a warning
VERBOSITY_DEFAULT = "default"  # Report standard information
VERBOSITY_VERBOSE = "verbose"  # Report everything every time

VERBOSITY_ENV_VAR = "KCONFTREE_REPORT_VERBOSITY"

AREA_TITLE_STYLE = "bold blue"
INFO_STRING_STYLE = "italic"
SUBTITLE_STYLE = "bold"


class Area(ABC):
    """
    Abstract class holding the base structure of every area in the report.
    """

    def __init__(self, title: str, info_string: str):
        """
        title:
        info_string:
            Both are used to describe the area in the report.
            Title is printed every time specific area is printed, info string provides additional information
            about the area, which is printed in verbose mode.
        """
        self.title: str = title
        self.info_string: str = info_string

    @abstractmethod
    def add_record(self, **kwargs) -> None:
        """
        Adding a new record to the area.
        """
        pass

    @abstractmethod
    def report_severity(self) -> int:
        """
        STATUS_OK if the area has nothing to report, otherwise STATUS_OK_WITH_INFO or STATUS_WARNING.
        """
        pass

    @abstractmethod
    def rows(self) -> List[Tuple[str, Optional[str]]]:
        """
        (text, style) rows of the area sub-report.
        """
        pass

    def print(self, verbosity: str) -> Optional[Table]:
        """
        Print the area sub-report.
        """
        if self.report_severity() == STATUS_OK:
            return None

        table = Table(title=self.title, title_justify="left", show_header=False, title_style=AREA_TITLE_STYLE)
        table.box = HORIZONTALS
        table.add_column("", justify="left", no_wrap=True)
        if verbosity == VERBOSITY_VERBOSE and self.info_string:
            table.add_row(self.info_string, style=INFO_STRING_STYLE)
        for text, style in self.rows():
            table.add_row(text, style=style)
        return table

    def return_json(self) -> Optional[dict]:
        """
        Return the area report in JSON format.
        """
        if self.report_severity() == STATUS_OK:
            return None
        ret_json: Dict = dict()
        ret_json["title"] = self.title
        ret_json["severity"] = self.severity_to_str(self.report_severity())
        ret_json["data"] = self.json_data()
        return ret_json

    @abstractmethod
    def json_data(self):
        pass

    @staticmethod
    def severity_to_str(severity: int) -> str:
        if severity == STATUS_OK:
            return "OK"
        elif severity == STATUS_OK_WITH_INFO:
            return "Info"
        elif severity == STATUS_WARNING:
            return "Warning"
        else:
            return "Error"


class MissingSourceArea(Area):
    """
    "source" directives whose target does not exist. The directive is skipped and parsing continues.
    """

    def __init__(self):
        super().__init__(
            title="Missing Sourced Files",
            info_string=textwrap.dedent(
                """\
                These files are referenced by "source" but do not exist. Their entries are missing from the tree.
                Check that the environment (e.g. $ARCH) is set correctly.
                """
            ),
        )
        self.missing: List[Tuple[str, str]] = list()

    def add_record(self, **kwargs) -> None:
        """
        kwargs:
            location: Location of the source directive
            target: path after symbol substitution
        """
        self.missing.append((str(kwargs["location"]), str(kwargs["target"])))

    def report_severity(self) -> int:
        return STATUS_OK if not self.missing else STATUS_WARNING

    def rows(self) -> List[Tuple[str, Optional[str]]]:
        return [(f"{location}: {target}", None) for location, target in self.missing]

    def json_data(self):
        return [{"location": location, "target": target} for location, target in self.missing]


class SkippedTextArea(Area):
    """
    Unrecognized directive text skipped in lenient mode.
    """

    def __init__(self):
        super().__init__(
            title="Skipped Text",
            info_string=textwrap.dedent(
                """\
                These lines were not recognized and were skipped because the parser runs in lenient mode.
                In strict mode (default), they are errors.
                """
            ),
        )
        self.skipped: List[Tuple[str, str]] = list()

    def add_record(self, **kwargs) -> None:
        """
        kwargs:
            location: Location of the skipped text
            text: skipped text
        """
        self.skipped.append((str(kwargs["location"]), str(kwargs["text"])))

    def report_severity(self) -> int:
        return STATUS_OK if not self.skipped else STATUS_WARNING

    def rows(self) -> List[Tuple[str, Optional[str]]]:
        return [(f"{location}: {text}", None) for location, text in self.skipped]

    def json_data(self):
        return [{"location": location, "text": text} for location, text in self.skipped]


class MultipleDefinitionArea(Area):
    """
    Multiple definition: having two or more definitions of the symbol with the same name.
    The last definition wins in the symbol table, all of them stay in the tree.
    """

    def __init__(self):
        super().__init__(
            title="Multiple Symbol Definitions",
            info_string=textwrap.dedent(
                """\
                Multiple definitions of the same symbol name are allowed by the Kconfig syntax.
                However, it may happen that e.g. two different components accidentally define the same symbol name,
                which may lead to unexpected behavior.
                """
            ),
        )

        self.multiple_definitions: Dict[str, List[str]] = dict()

    def add_record(self, **kwargs) -> None:
        """
        kwargs:
            symbol: str
            occurrences: list of locations (as strings), in order of definition
        """
        symbol: str = kwargs["symbol"]
        definitions = self.multiple_definitions.setdefault(symbol, [])
        for occurrence in kwargs.get("occurrences", []):
            if occurrence not in definitions:
                definitions.append(occurrence)

    def report_severity(self) -> int:
        return STATUS_OK if not self.multiple_definitions else STATUS_OK_WITH_INFO

    def rows(self) -> List[Tuple[str, Optional[str]]]:
        rows: List[Tuple[str, Optional[str]]] = []
        for symbol, definitions in self.multiple_definitions.items():
            rows.append((symbol, SUBTITLE_STYLE))
            rows.extend((_INDENT + definition, None) for definition in definitions)
        return rows

    def json_data(self):
        return {symbol: list(definitions) for symbol, definitions in self.multiple_definitions.items()}


class MiscArea(Area):
    """
    All the messages not related to the other areas.
    """

    def __init__(self):
        super().__init__(
            title="Miscellaneous",
            info_string="",
        )

        self.messages: List[str] = list()
        self._seen: Set[str] = set()

    def add_record(self, **kwargs) -> None:
        """
        kwargs:
            message: str
        """
        if "message" not in kwargs.keys():
            raise AttributeError("Message must be specified for MiscArea.")
        message = str(kwargs["message"])
        if message not in self._seen:
            self._seen.add(message)
            self.messages.append(message)

    def report_severity(self) -> int:
        return STATUS_OK if not self.messages else STATUS_OK_WITH_INFO

    def rows(self) -> List[Tuple[str, Optional[str]]]:
        return [(f"* {message}", None) for message in self.messages]

    def json_data(self):
        return list(self.messages)


class ParseReport:
    """
    By add_record() method, new records are added to the report.
    Every time, it is needed to specify report area for given record.

    One report belongs to one parse; parses never share a report.
    """

    def __init__(self, filename: str = "", warn_to_stderr: bool = False, verbosity: Optional[str] = None) -> None:
        self.filename = filename
        self.warn_to_stderr = warn_to_stderr
        self.verbosity: str = verbosity or os.getenv(VERBOSITY_ENV_VAR, VERBOSITY_DEFAULT)

        # Plain "file:line: warning: ..." strings, in the order they were found
        self.warnings: List[str] = list()

        self.areas = (MissingSourceArea(), SkippedTextArea(), MultipleDefinitionArea(), MiscArea())
        self.area_to_instance: Dict[type, Area] = {area.__class__: area for area in self.areas}

        # Number of entries in the finished tree, filled in by the parser
        self.entry_count = 0

    @property
    def status(self) -> int:
        """
        Get the status of the parse.
        """
        return max(area.report_severity() for area in self.areas) or STATUS_OK

    def area(self, area: type) -> Area:
        return self.area_to_instance[area]

    def add_record(self, area: type, **kwargs) -> None:
        """
        Adds a record for given area.
        """
        self.area_to_instance[area].add_record(**kwargs)

    def warn(self, msg: str, location: "Optional[Location]" = None, area: type = MiscArea, **kwargs) -> None:
        """
        Store a warning and record it in the given area (MiscArea by default).
        """
        msg_with_prefix = "warning: " + msg
        if location is not None:
            msg_with_prefix = f"{location}: {msg_with_prefix}"
        self.warnings.append(msg_with_prefix)
        if area is MiscArea:
            kwargs.setdefault("message", msg if location is None else f"{location}: {msg}")
        else:
            kwargs.setdefault("location", location)
        self.add_record(area, **kwargs)
        if self.warn_to_stderr:
            sys.stderr.write(msg_with_prefix + "\n")

    def _make_header(self) -> Table:
        header_table = Table(title_style="bold", show_header=False)
        header_table.box = None
        header_table.add_column("Parse", justify="left")
        header_table.add_row(f"Kconfig: {self.filename}")
        header_table.add_row(f"Verbosity: {self.verbosity}")
        if self.verbosity == VERBOSITY_VERBOSE:
            header_table.add_row(f"Entries parsed: {self.entry_count}")

        status = self.status
        if status == STATUS_OK:
            header_table.add_row("Status: Finished successfully", style="green")
        elif status == STATUS_OK_WITH_INFO:
            header_table.add_row("Status: Finished with notifications", style="green_yellow")
        elif status == STATUS_WARNING:
            header_table.add_row("Status: Finished with warnings", style="yellow")
            if self.verbosity == VERBOSITY_VERBOSE:
                header_table.add_row(
                    "Parsing is finished, but some parts of the Kconfig tree were skipped. "
                    "Please check the relevant areas.",
                    style="yellow",
                )
        else:
            header_table.add_row("Status: Failed", style="red")

        header_table.add_row("")

        return header_table

    def print_report(self, file: Optional[str] = None) -> None:
        if self.verbosity == VERBOSITY_QUIET and self.status in (STATUS_OK, STATUS_OK_WITH_INFO):
            return

        report_table = Table(title="Parse Report", title_style="bold", show_header=False, title_justify="left")
        report_table.box = HORIZONTALS
        report_table.add_column("Parse", justify="center", no_wrap=False)
        report_table.add_row(self._make_header())

        for area in self.areas:
            sub_report = area.print(verbosity=self.verbosity)
            if sub_report:
                report_table.add_row(sub_report)

        if not file:
            console = Console(stderr=True)
            console.print(report_table)
        else:
            with open(file, "w") as f:
                rprint(report_table, file=f)

    def return_json(self) -> dict:
        report_json: Dict = dict()
        report_json["header"] = dict()
        report_json["header"]["report_type"] = "kconftree"
        report_json["header"]["kconfig"] = self.filename
        report_json["header"]["verbosity"] = self.verbosity
        report_json["header"]["status"] = Area.severity_to_str(self.status)
        report_json["header"]["entries"] = self.entry_count

        report_json["areas"] = list()
        for area in self.areas:
            # Status OK means that there is nothing to report in the area
            if area.report_severity() == STATUS_OK:
                continue
            report_json["areas"].append(area.return_json())
        return report_json

    def output_json(self, file: Optional[str] = None) -> None:
        report_json = self.return_json()
        if not file:
            console = Console(stderr=True)
            console.print(json.dumps(report_json, indent=4))
        else:
            with open(file, "w+") as f:
                json.dump(report_json, f, indent=4)
