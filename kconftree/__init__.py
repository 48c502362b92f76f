# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from .entries import Choice
from .entries import Comment
from .entries import Condition
from .entries import Config
from .entries import Default
from .entries import Imply
from .entries import KconfigTree
from .entries import Location
from .entries import Menu
from .entries import MenuConfig
from .entries import Prompt
from .entries import Range
from .entries import Select
from .errors import ExpressionError
from .errors import InvalidOperationError
from .errors import KconfigTreeError
from .errors import MissingFileError
from .errors import MissingRootFileError
from .errors import ParseError
from .parser import KconfigParser
from .parser import parse
from .report import ParseReport

__version__ = "1.0.0"

__all__ = [
    "Choice",
    "Comment",
    "Condition",
    "Config",
    "Default",
    "ExpressionError",
    "Imply",
    "InvalidOperationError",
    "KconfigParser",
    "KconfigTree",
    "KconfigTreeError",
    "Location",
    "Menu",
    "MenuConfig",
    "MissingFileError",
    "MissingRootFileError",
    "ParseError",
    "ParseReport",
    "Prompt",
    "Range",
    "Select",
    "parse",
]
