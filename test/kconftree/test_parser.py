# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import os

import pytest

import kconftree
from kconftree import Choice
from kconftree import Comment
from kconftree import Condition
from kconftree import Config
from kconftree import Default
from kconftree import Imply
from kconftree import Menu
from kconftree import MenuConfig
from kconftree import Prompt
from kconftree import Range
from kconftree import Select
from kconftree.errors import InvalidOperationError
from kconftree.errors import MissingRootFileError
from kconftree.errors import ParseError
from kconftree.report import MiscArea
from kconftree.report import MultipleDefinitionArea
from kconftree.report import SkippedTextArea

TEST_FILES_PATH = os.path.abspath(os.path.dirname(__file__))
TESTS_PATH_OK = os.path.join(TEST_FILES_PATH, "kconfigs", "ok")
TESTS_PATH_ERRORS = os.path.join(TEST_FILES_PATH, "kconfigs", "errors")


class BaseParserTest:
    @pytest.fixture(autouse=True)
    def parse_text(self, write_kconfig):
        def parse(text: str, **kwargs) -> kconftree.KconfigTree:
            root = write_kconfig("Kconfig", text)
            kwargs.setdefault("strict", True)
            return kconftree.parse(root, **kwargs)

        self.parse = parse


class TestConfig(BaseParserTest):
    def test_basic_config(self):
        tree = self.parse(
            """
            config SYM
                bool "P"
                default y
            """
        )
        config = tree.lookup("SYM")
        assert isinstance(config, Config)
        assert config.symbol == "SYM"
        assert config.type == "bool"
        assert config.prompt == Prompt("P")
        assert config.defaults == [Default("y")]
        assert config.defaults[0].condition is None
        assert str(config.location) == "Kconfig:2"
        assert tree.root.children == [config]

    def test_all_directives(self):
        tree = self.parse(
            """
            config FOO
                int
                prompt "Foo value" if BAR
                default 5 if BAR
                default 3
                range 1 10 if BAR
                range -1 0x10
                select BAZ if !QUX
                imply QUUX
                depends on BAR && (A || B)
                help
                    Foo help.
            """
        )
        config = tree.lookup("FOO")
        assert config.type == "int"
        assert config.prompt == Prompt("Foo value", Condition("BAR"))
        assert config.defaults == [Default("5", Condition("BAR")), Default("3")]
        assert config.ranges == [Range(value="1", high="10", condition=Condition("BAR")), Range(value="-1", high="0x10")]
        assert config.ranges[1].low == "-1"
        assert config.selects == [Select("BAZ", Condition("!QUX"))]
        assert config.implies == [Imply("QUUX")]
        assert config.depends == [Condition("BAR && (A || B)"), Condition("BAR")]
        assert config.help == "Foo help.\n"

    def test_menuconfig(self):
        tree = self.parse(
            """
            menuconfig FOO
                bool "Foo"
            """
        )
        assert isinstance(tree.lookup("FOO"), MenuConfig)
        assert tree.lookup("FOO").kind == "menuconfig"

    @pytest.mark.parametrize(
        "directive,expected_type,expected_default",
        [
            ("def_bool y", "bool", "y"),
            ("def_tristate m", "tristate", "m"),
            ("boolean", "bool", None),
            ("hex", "hex", None),
            ('string "Prompt"', "string", None),
        ],
    )
    def test_types(self, directive, expected_type, expected_default):
        tree = self.parse(f"config FOO\n    {directive}\n")
        config = tree.lookup("FOO")
        assert config.type == expected_type
        if expected_default is None:
            assert config.defaults == []
        else:
            assert config.defaults == [Default(expected_default)]

    def test_duplicate_conditions_are_suppressed(self):
        tree = self.parse(
            """
            if C
            config FOO
                bool "Foo" if C
                depends on C
                select BAR
                select BAR
            endif
            """
        )
        config = tree.lookup("FOO")
        assert config.depends == [Condition("C")]
        assert config.selects == [Select("BAR")]

    def test_missing_symbol(self):
        with pytest.raises(ParseError, match="expected symbol name after 'config'"):
            self.parse("config\n    bool\n")

    def test_depends_without_on(self):
        with pytest.raises(ParseError, match="'on' must follow 'depends'") as e:
            self.parse("config FOO\n    depends BAR\n")
        assert str(e.value).startswith("Kconfig:2: error:")
        assert e.value.location.linenr == 2

    def test_range_needs_two_values(self):
        with pytest.raises(ParseError):
            self.parse("config FOO\n    int\n    range 1\n")

    def test_prompt_must_be_quoted(self):
        with pytest.raises(ParseError):
            self.parse("config FOO\n    prompt Foo\n")

    def test_empty_default(self):
        with pytest.raises(ParseError):
            self.parse("config FOO\n    bool\n    default\n")

    def test_prompt_whitespace_is_stripped(self):
        tree = self.parse('config FOO\n    bool " Foo "\n')
        assert tree.lookup("FOO").prompt.text == "Foo"
        assert "leading or trailing whitespace" in tree.report.warnings[0]

    def test_second_prompt_replaces_first(self):
        tree = self.parse('config FOO\n    bool "One"\n    prompt "Two"\n')
        assert tree.lookup("FOO").prompt.text == "Two"
        assert "multiple prompts" in tree.report.warnings[0]


class TestOption(BaseParserTest):
    def test_option_env(self):
        tree = self.parse(
            """
            config ARCH
                string
                option env="SRCARCH"
            """,
            environment={"SRCARCH": "x86"},
        )
        assert tree.lookup("ARCH").env == "x86"

    def test_option_env_not_set(self):
        tree = self.parse('config ARCH\n    string\n    option env="SRCARCH"\n')
        assert tree.lookup("ARCH").env is None
        assert "SRCARCH" in tree.report.warnings[0]

    def test_option_env_without_equals(self):
        with pytest.raises(ParseError, match="needs an '='"):
            self.parse('config ARCH\n    string\n    option env "SRCARCH"\n')

    def test_option_env_without_quotes(self):
        with pytest.raises(ParseError, match="quoted"):
            self.parse("config ARCH\n    string\n    option env=SRCARCH\n")

    def test_other_options_are_ignored(self):
        tree = self.parse("config MODULES\n    bool\n    option modules\n")
        assert tree.lookup("MODULES").type == "bool"
        messages = tree.report.area(MiscArea).messages
        assert any("option 'modules' ignored" in message for message in messages)


class TestScope(BaseParserTest):
    def test_if_scope_is_appended_after_own_depends(self):
        tree = self.parse(
            """
            if C
            config SYM
                bool "P"
                depends on A && B
            endif
            """
        )
        assert tree.lookup("SYM").depends == [Condition("A && B"), Condition("C")]

    def test_depends_order(self):
        tree = self.parse(
            """
            if OUTER
            if INNER
            config SYM
                depends on A
                bool "P" if GUARD
                depends on B
            endif
            endif
            config AFTER
                bool
            """
        )
        assert tree.lookup("SYM").depends == [
            Condition("A"),
            Condition("B"),
            Condition("GUARD"),
            Condition("OUTER"),
            Condition("INNER"),
        ]
        assert tree.lookup("AFTER").depends == []

    def test_endif_without_if(self):
        with pytest.raises(ParseError, match="'endif' without matching 'if'"):
            self.parse("config FOO\n    bool\nendif\n")

    def test_unclosed_if(self):
        with pytest.raises(ParseError, match="missing 'endif'"):
            self.parse("if FOO\nconfig BAR\n    bool\n")

    def test_if_without_expression(self):
        with pytest.raises(ParseError):
            self.parse("if\nendif\n")

    def test_scope_applies_to_menus_and_comments(self):
        tree = self.parse(
            """
            if C
            comment "Note"
            menu "M"
            endmenu
            endif
            """
        )
        comment, menu = tree.root.children
        assert comment.depends == [Condition("C")]
        assert menu.depends == [Condition("C")]


class TestChoice(BaseParserTest):
    def test_choice_members(self):
        tree = self.parse(
            """
            choice CHOICE
                prompt "Pick one"
                default FIRST
            config FIRST
                bool "First"
            config SECOND
                bool "Second"
            endchoice
            """
        )
        choice = tree.root.children[0]
        assert isinstance(choice, Choice)
        assert choice.symbol == "CHOICE"
        assert choice.prompt == Prompt("Pick one")
        assert choice.defaults == [Default("FIRST")]
        assert [member.symbol for member in choice.members] == ["FIRST", "SECOND"]
        assert tree.lookup("CHOICE") is choice
        assert tree.lookup("SECOND") is choice.members[1]

    def test_anonymous_optional_choice(self):
        tree = self.parse(
            """
            choice
                bool "Pick"
                optional
            config A
                bool "A"
            comment "Only one"
            endchoice
            """
        )
        choice = tree.root.children[0]
        assert choice.symbol is None
        assert choice.optional
        assert choice.type == "bool"
        assert [comment.prompt.text for comment in choice.comments] == ["Only one"]
        assert list(tree.node_iter()) == [choice, choice.members[0], choice.comments[0]]

    def test_if_inside_choice(self):
        tree = self.parse(
            """
            choice
                prompt "Pick"
            if X
            config A
                bool "A"
            endif
            config B
                bool "B"
            endchoice
            """
        )
        assert tree.lookup("A").depends == [Condition("X")]
        assert tree.lookup("B").depends == []

    def test_eof_before_endchoice(self):
        with pytest.raises(ParseError, match="missing 'endchoice'"):
            self.parse('choice\n    prompt "Pick"\nconfig A\n    bool "A"\n')

    def test_endchoice_without_choice(self):
        with pytest.raises(ParseError, match="'endchoice' without matching 'choice'"):
            self.parse("config A\n    bool\nendchoice\n")

    @pytest.mark.parametrize("keyword", ['menu "M"', "choice", "endmenu"])
    def test_not_allowed_inside_choice(self, keyword):
        with pytest.raises(ParseError, match="not allowed inside a choice"):
            self.parse(f'choice\n    prompt "Pick"\n{keyword}\nendchoice\n')

    def test_select_not_valid_for_choice(self):
        with pytest.raises(ParseError):
            self.parse('choice\n    prompt "Pick"\n    select FOO\nendchoice\n')

    def test_children_keep_source_order(self):
        tree = self.parse(
            """
            choice
                prompt "Pick"
            config A
                bool "A"
            comment "Between"
            config B
                bool "B"
            endchoice
            """
        )
        choice = tree.root.children[0]
        assert [type(child) for child in choice.children] == [Config, Comment, Config]
        assert [member.symbol for member in choice.members] == ["A", "B"]
        assert list(tree.node_iter()) == [choice] + choice.children

    def test_if_left_open_in_choice(self):
        with pytest.raises(ParseError, match="missing 'endif' for 'if X' before 'endchoice'"):
            self.parse('choice\n    prompt "Pick"\nif X\nconfig A\n    bool "A"\nendchoice\n')

    def test_endif_in_choice_closes_outer_if(self):
        with pytest.raises(ParseError, match="closes an 'if' opened outside of it"):
            self.parse('if X\nchoice\n    prompt "Pick"\nendif\nendchoice\n')


class TestComment(BaseParserTest):
    def test_comment(self):
        tree = self.parse(
            """
            comment "Hello" if A
                depends on B
            """
        )
        comment = tree.root.children[0]
        assert isinstance(comment, Comment)
        assert comment.symbol is None
        assert comment.prompt == Prompt("Hello", Condition("A"))
        assert comment.depends == [Condition("B"), Condition("A")]

    @pytest.mark.parametrize(
        "directive", ["bool", 'def_bool y', "default y", "help", 'option env="X"', "select A", "range 1 2"]
    )
    def test_comment_refuses_value_directives(self, directive):
        with pytest.raises(InvalidOperationError):
            self.parse(f'comment "Hello"\n    {directive}\n')

    def test_comment_needs_prompt(self):
        with pytest.raises(ParseError):
            self.parse("comment\n")


class TestMenu(BaseParserTest):
    def test_mainmenu_and_nested_menus(self):
        tree = self.parse(
            """
            mainmenu "Main"

            config TOP
                bool "Top"

            menu "Outer"
                visible if SHOW
                depends on DEP

            config INNER
                bool "Inner"

            menu "Inner menu"
            endmenu

            endmenu

            config LAST
                bool "Last"
            """
        )
        root = tree.root
        assert root.prompt == Prompt("Main")
        assert str(root.location) == "Kconfig:2"
        top, outer, last = root.children
        assert isinstance(outer, Menu)
        assert outer.prompt == Prompt("Outer")
        assert outer.visible_if == Condition("SHOW")
        assert outer.depends == [Condition("DEP")]
        assert [child.prompt.text for child in outer.children] == ["Inner", "Inner menu"]
        assert [entry.symbol or entry.prompt.text for entry in tree.node_iter()] == [
            "TOP",
            "Outer",
            "INNER",
            "Inner menu",
            "LAST",
        ]

    def test_root_without_mainmenu(self):
        tree = self.parse("config A\n    bool\n")
        assert tree.root.prompt is None
        assert str(tree.root.location) == "Kconfig:1"

    def test_second_mainmenu(self):
        with pytest.raises(ParseError, match="'mainmenu' already given"):
            self.parse('mainmenu "One"\nmainmenu "Two"\n')

    def test_nested_mainmenu(self):
        with pytest.raises(ParseError, match="'mainmenu' is not allowed"):
            self.parse('menu "M"\nmainmenu "Two"\nendmenu\n')

    def test_endmenu_without_menu(self):
        with pytest.raises(ParseError, match="'endmenu' without matching 'menu'"):
            self.parse("endmenu\n")

    def test_missing_endmenu(self):
        with pytest.raises(ParseError, match="missing 'endmenu'"):
            self.parse('menu "M"\nconfig A\n    bool\n')

    def test_menu_needs_prompt(self):
        with pytest.raises(ParseError):
            self.parse("menu\nendmenu\n")

    def test_visible_without_if(self):
        with pytest.raises(ParseError, match="'if' must follow 'visible'"):
            self.parse('menu "M"\n    visible SHOW\nendmenu\n')

    def test_if_left_open_in_menu(self):
        with pytest.raises(ParseError, match="missing 'endif' for 'if X' before 'endmenu'"):
            self.parse('menu "M"\nif X\nendmenu\nconfig B\n    bool\n')

    def test_endif_in_menu_closes_outer_if(self):
        with pytest.raises(ParseError, match="closes an 'if' opened outside of it"):
            self.parse('if X\nmenu "M"\nendif\nendmenu\n')


class TestStrictness(BaseParserTest):
    def test_unrecognized_text_is_error_in_strict_mode(self):
        with pytest.raises(ParseError, match=r"unrecognized text in config entry: \[foo bar\]"):
            self.parse("config A\n    bool\n    foo bar\n")

    def test_unrecognized_text_is_skipped_in_lenient_mode(self):
        tree = self.parse("config A\n    bool\n    foo bar\n    default y\n", strict=False)
        assert tree.lookup("A").defaults == [Default("y")]
        assert tree.report.area(SkippedTextArea).skipped == [("Kconfig:3", "foo bar")]

    def test_strict_from_environment(self, monkeypatch):
        monkeypatch.setenv("KCONFTREE_STRICT", "0")
        tree = self.parse("config A\n    bool\n    foo\n", strict=None)
        assert tree.report.area(SkippedTextArea).skipped == [("Kconfig:3", "foo")]

    def test_strict_by_default(self, monkeypatch):
        monkeypatch.delenv("KCONFTREE_STRICT", raising=False)
        with pytest.raises(ParseError):
            self.parse("config A\n    bool\n    foo\n", strict=None)

    def test_unrecognized_text_at_menu_scope(self):
        tree = self.parse("foo\nconfig A\n    bool\n", strict=False)
        assert tree.lookup("A") is not None
        assert tree.report.area(SkippedTextArea).skipped == [("Kconfig:1", "foo")]


class TestTree(BaseParserTest):
    TEXT = """
        mainmenu "Main"
        config A
            bool "A"
        choice
            prompt "C"
        config B
            bool "B"
        endchoice
        menu "M"
        comment "Note"
        endmenu
        """

    def test_independent_parses_are_equal(self):
        assert self.parse(self.TEXT) == self.parse(self.TEXT)

    def test_parser_can_be_reused(self, write_kconfig):
        root = write_kconfig("Kconfig", self.TEXT)
        parser = kconftree.KconfigParser(root)
        first = parser.parse()
        second = parser.parse()
        assert first == second
        assert first.report is not second.report

    def test_different_trees_differ(self):
        assert self.parse(self.TEXT) != self.parse(self.TEXT.replace('"Note"', '"Other"'))

    def test_multiple_definitions(self):
        tree = self.parse(
            """
            config A
                bool "First"
            config A
                bool "Second"
            """
        )
        assert tree.lookup("A").prompt.text == "Second"
        assert len(tree.root.children) == 2
        area = tree.report.area(MultipleDefinitionArea)
        assert area.multiple_definitions == {"A": ["Kconfig:2", "Kconfig:4"]}

    def test_entry_count_and_files(self):
        tree = self.parse(self.TEXT)
        assert tree.report.entry_count == 5
        assert tree.files == ["Kconfig"]

    def test_missing_root_file(self, tmp_path):
        with pytest.raises(MissingRootFileError):
            kconftree.parse(str(tmp_path), "Kconfig.missing")


class TestFixtureFiles:
    @pytest.mark.parametrize("filename", sorted(f for f in os.listdir(TESTS_PATH_OK) if f.endswith(".in")))
    def test_ok_cases(self, filename):
        tree = kconftree.parse(TESTS_PATH_OK, filename, environment={"ARCH": "x86"})
        assert tree.root.children
        assert not tree.report.warnings

    @pytest.mark.parametrize("filename", sorted(f for f in os.listdir(TESTS_PATH_ERRORS) if f.endswith(".in")))
    def test_error_cases(self, filename):
        with pytest.raises(ParseError) as e:
            kconftree.parse(TESTS_PATH_ERRORS, filename)
        assert str(e.value).startswith(filename + ":")
