# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import os
from typing import Mapping
from typing import Optional

from .context import ParseContext
from .entries import KconfigTree
from .errors import MissingFileError
from .errors import MissingRootFileError
from .menu_parser import parse_menu
from .report import ParseReport

STRICT_ENV_VAR = "KCONFTREE_STRICT"


class KconfigParser:
    """
    Parses the Kconfig tree rooted at the file 'filename' inside the directory 'root'.

    root:
        Directory every "source" path is resolved against.
    filename:
        Top-level Kconfig file, relative to root.
    environment:
        Values for "option env" and for $NAME references in "source" paths. The process environment
        is not used unless passed here explicitly.
    strict:
        If True, text that is not a valid directive is an error. If False, such lines are skipped
        and reported. None reads the KCONFTREE_STRICT environment variable ("1" by default).
    warn_to_stderr:
        Also print each warning to stderr as soon as it is found.

    Every call to parse() starts from scratch, nothing is kept from the previous one.
    """

    def __init__(
        self,
        root: str,
        filename: str = "Kconfig",
        environment: Optional[Mapping[str, str]] = None,
        strict: Optional[bool] = None,
        warn_to_stderr: bool = False,
    ) -> None:
        self.root = root
        self.filename = filename
        self.environment = dict(environment or {})
        if strict is None:
            strict = os.environ.get(STRICT_ENV_VAR, "1") not in ("0", "n", "no", "false")
        self.strict = strict
        self.warn_to_stderr = warn_to_stderr

    def parse(self) -> KconfigTree:
        report = ParseReport(self.filename, warn_to_stderr=self.warn_to_stderr)
        ctx = ParseContext(self.root, self.environment, strict=self.strict, report=report)

        with ctx.files:
            try:
                ctx.files.push(self.filename)
            except MissingFileError as e:
                raise MissingRootFileError(e.filename, e.path) from e
            root = parse_menu(ctx, top=True)

        tree = KconfigTree(root, ctx.symbols, list(ctx.files.visited), report)
        report.entry_count = sum(1 for _ in tree.node_iter())
        return tree


def parse(
    root: str,
    filename: str = "Kconfig",
    environment: Optional[Mapping[str, str]] = None,
    strict: Optional[bool] = None,
    warn_to_stderr: bool = False,
) -> KconfigTree:
    """
    Parse the Kconfig tree rooted at 'root'/'filename' and return it. See KconfigParser for the arguments.
    """
    return KconfigParser(root, filename, environment, strict, warn_to_stderr).parse()
