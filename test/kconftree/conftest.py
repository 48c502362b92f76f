# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import textwrap

import pytest

from kconftree.context import ParseContext


@pytest.fixture
def make_context(tmp_path):
    """
    Factory writing 'text' (dedented) into <tmp_path>/Kconfig and returning a ParseContext
    with that file already open. All the files are closed at teardown.
    """
    contexts = []

    def factory(text: str, **kwargs) -> ParseContext:
        (tmp_path / "Kconfig").write_text(textwrap.dedent(text))
        ctx = ParseContext(str(tmp_path), **kwargs)
        ctx.files.push("Kconfig")
        contexts.append(ctx)
        return ctx

    yield factory
    for ctx in contexts:
        ctx.files.close_all()


@pytest.fixture
def write_kconfig(tmp_path):
    """
    Factory writing a Kconfig file (dedented) under tmp_path, creating directories as needed.
    Returns the root directory as str.
    """

    def factory(relpath: str, text: str) -> str:
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text))
        return str(tmp_path)

    return factory
