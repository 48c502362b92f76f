#!/usr/bin/env python
#
# Command line tool to parse a Kconfig tree and dump the resulting entry tree
# (menus, configs, choices and comments with all their directives) as JSON.
#
# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import argparse
import json
import os.path
import sys
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

import kconftree
from kconftree import __version__
from kconftree.entries import AnyEntry
from kconftree.entries import Choice
from kconftree.entries import Config
from kconftree.entries import Menu
from kconftree.entries import ValuedEntry


class FatalError(RuntimeError):
    """
    Class for runtime errors (not caused by bugs but by user input).
    """

    pass


def _conditional(values) -> List[Dict[str, Optional[str]]]:
    return [{"value": v.value, "condition": str(v.condition) if v.condition else None} for v in values]


def entry_to_dict(entry: AnyEntry) -> Dict[str, Any]:
    """
    JSON-serializable view of an entry and everything below it. Keys that do not exist for the entry kind
    are left out, so e.g. a comment never has "type" or "help".
    """
    result: Dict[str, Any] = {
        "kind": entry.kind,
        "symbol": entry.symbol,
        "location": str(entry.location),
        "prompt": None,
        "depends": [str(condition) for condition in entry.depends],
    }
    if entry.prompt is not None:
        result["prompt"] = {
            "text": entry.prompt.text,
            "condition": str(entry.prompt.condition) if entry.prompt.condition else None,
        }

    if isinstance(entry, ValuedEntry):
        result["type"] = entry.type
        result["help"] = entry.help
        result["env"] = entry.env
        result["defaults"] = _conditional(entry.defaults)

    if isinstance(entry, Config):
        result["selects"] = _conditional(entry.selects)
        result["implies"] = _conditional(entry.implies)
        result["ranges"] = [
            {"low": r.low, "high": r.high, "condition": str(r.condition) if r.condition else None}
            for r in entry.ranges
        ]
    elif isinstance(entry, Choice):
        result["optional"] = entry.optional
        result["children"] = [entry_to_dict(child) for child in entry.children]
    elif isinstance(entry, Menu):
        result["visible_if"] = str(entry.visible_if) if entry.visible_if else None
        result["children"] = [entry_to_dict(child) for child in entry.children]

    return result


def tree_to_dict(tree: kconftree.KconfigTree) -> Dict[str, Any]:
    return {
        "version": __version__,
        "files": list(tree.files),
        "root": entry_to_dict(tree.root),
    }


def write_json(tree: kconftree.KconfigTree, filename: Optional[str]) -> None:
    tree_dict = tree_to_dict(tree)
    if filename is None:
        json.dump(tree_dict, sys.stdout, indent=4)
        sys.stdout.write("\n")
        return
    with open(filename, "w") as f:
        json.dump(tree_dict, f, indent=4)


OUTPUT_FORMATS = {
    "json": write_json,
}


def main():
    parser = argparse.ArgumentParser(
        description="kconfdump v%s - Kconfig Tree Dump Tool" % __version__,
        prog=os.path.basename(sys.argv[0]),
    )

    parser.add_argument("--kconfig", help="Top-level Kconfig file", required=True)

    parser.add_argument(
        "--root",
        help="Directory the paths of 'source' statements are relative to "
        "(default: the directory of the --kconfig file)",
        default=None,
    )

    parser.add_argument(
        "--output",
        nargs=2,
        action="append",
        help="Write output file (format and output filename). Without any --output, JSON is written to stdout.",
        metavar=("FORMAT", "FILENAME"),
        default=[],
    )

    parser.add_argument(
        "--env",
        action="append",
        default=[],
        help="Environment value for 'option env' and $NAME in 'source' paths",
        metavar="NAME=VAL",
    )

    parser.add_argument(
        "--env-file",
        type=argparse.FileType("r"),
        help="Optional file to load environment values from. Contents "
        "should be a JSON object where each key/value pair is a variable.",
    )

    parser.add_argument(
        "--lenient",
        help="Skip and report unrecognized text instead of failing",
        action="store_true",
    )

    parser.add_argument(
        "--report-json",
        help="Write the parse report as JSON into this file instead of printing it",
        default=None,
    )
    args = parser.parse_args()

    for fmt, filename in args.output:
        if fmt not in OUTPUT_FORMATS.keys():
            print("Format '%s' not recognised. Known formats: %s" % (fmt, list(OUTPUT_FORMATS.keys())))
            sys.exit(1)

    try:
        args.env = [(name, value) for (name, value) in (e.split("=", 1) for e in args.env)]
    except ValueError:
        print("--env arguments must each contain =. To set an empty value, use 'NAME='")
        sys.exit(1)

    environment = {}
    if args.env_file is not None:
        env = json.load(args.env_file)
        if not isinstance(env, dict):
            raise FatalError("--env-file must contain a JSON object")
        environment.update(env)
    # Values given on the command line win over the ones from the file
    environment.update(dict(args.env))

    if args.root is None:
        root = os.path.dirname(args.kconfig) or "."
        filename = os.path.basename(args.kconfig)
    else:
        root = args.root
        filename = os.path.relpath(args.kconfig, root)

    try:
        tree = kconftree.KconfigParser(
            root,
            filename,
            environment=environment,
            strict=False if args.lenient else None,
        ).parse()
    except kconftree.KconfigTreeError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    if args.report_json:
        tree.report.output_json(args.report_json)
    else:
        tree.report.print_report()

    if not args.output:
        write_json(tree, None)
    for output_type, filename in args.output:
        OUTPUT_FORMATS[output_type](tree, filename)


if __name__ == "__main__":
    try:
        main()
    except FatalError as e:
        print("A fatal error occurred: %s" % e, file=sys.stderr)
        sys.exit(2)
