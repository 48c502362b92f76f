# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from typing import TYPE_CHECKING
from typing import Optional

if TYPE_CHECKING:
    from .entries import Location


class KconfigTreeError(Exception):
    """
    Base class for every error raised while building the entry tree.
    """


class ParseError(KconfigTreeError):
    """
    Malformed Kconfig syntax. Always carries the location of the offending line and aborts the whole parse.
    """

    def __init__(self, message: str, location: "Optional[Location]" = None) -> None:
        self.message = message
        self.location = location
        if location is None:
            super().__init__(f"error: {message}")
        else:
            super().__init__(f"{location}: error: {message}")


class MissingFileError(KconfigTreeError):
    """
    A sourced file does not exist. Nested sources are skipped, so this one never escapes a parse.
    """

    def __init__(self, filename: str, path: str) -> None:
        self.filename = filename
        self.path = path
        super().__init__(f"Could not find '{filename}' (looked for '{path}')")


class MissingRootFileError(MissingFileError):
    """
    The top-level Kconfig file does not exist. Raised before any parsing starts.
    """


class InvalidOperationError(KconfigTreeError):
    """
    Mutation that is not valid for the given entry variant (e.g. help text on a comment),
    or a violated tokenizer contract (double push-back).
    """

    def __init__(self, message: str, location: "Optional[Location]" = None) -> None:
        self.message = message
        self.location = location
        super().__init__(message if location is None else f"{location}: {message}")


class ExpressionError(KconfigTreeError):
    """
    Raised when a normalized condition string cannot be re-parsed into its structure.
    """
