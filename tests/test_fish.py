from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

import pytest

from cliforge.docs import App, Command
from cliforge.fish import (
    escape_single_quotes,
    fish_completions,
    fish_subcommand_helper,
    prepare_fish_commands,
    prepare_fish_flags,
)
from cliforge.flags import BoolFlag, Flag


class _StringValue:
    def __init__(self, value: str = "") -> None:
        self.value = value
        self.was_set = False

    def set(self, text: str) -> None:
        self.value = text
        self.was_set = True

    def get(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False, kw_only=True)
class _StringFlag(Flag):
    type_name: ClassVar[str] = "string"
    value_type: ClassVar[type] = str
    zero: ClassVar[Any] = ""

    value: str = ""

    def _create(self, initial: Any) -> _StringValue:
        return _StringValue(initial or "")

    def _to_string(self, value: Any) -> str:
        return f'"{value}"' if value else ""


def _test_app() -> App:
    return App(
        name="greet",
        usage="Some app",
        flags=[
            _StringFlag(
                name="socket",
                aliases=["s"],
                usage="some 'usage' text",
                value="value",
                takes_file=True,
            ),
            _StringFlag(name="flag", aliases=["fl", "f"]),
            BoolFlag(
                name="another-flag",
                aliases=["b"],
                usage="another usage text",
                env_vars=["EXAMPLE_VARIABLE_NAME"],
            ),
            BoolFlag(name="hidden-flag", hidden=True),
            _StringFlag(name="logfile", takes_file=True),
        ],
        commands=[
            Command(
                name="config",
                aliases=["c"],
                usage="another usage test",
                flags=[
                    _StringFlag(name="flag", aliases=["fl", "f"], takes_file=True),
                    BoolFlag(name="another-flag", aliases=["b"], usage="another usage text"),
                ],
                commands=[
                    Command(
                        name="sub-config",
                        aliases=["s", "ss"],
                        usage="another usage test",
                        flags=[
                            _StringFlag(name="sub-flag", aliases=["sub-fl", "s"]),
                            BoolFlag(
                                name="sub-command-flag",
                                aliases=["s"],
                                usage="some usage text",
                            ),
                        ],
                    )
                ],
            ),
            Command(name="info", aliases=["i", "in"], usage="retrieve generic information"),
            Command(name="some-command"),
            Command(name="hidden-command", hidden=True),
            Command(
                name="usage",
                aliases=["u"],
                usage="standard usage text",
                flags=[
                    _StringFlag(name="flag", aliases=["fl", "f"], takes_file=True),
                    BoolFlag(name="another-flag", aliases=["b"], usage="another usage text"),
                ],
                commands=[
                    Command(
                        name="sub-usage",
                        aliases=["su"],
                        usage="standard usage text",
                        flags=[
                            BoolFlag(
                                name="sub-command-flag",
                                aliases=["s"],
                                usage="some usage text",
                            )
                        ],
                    )
                ],
            ),
        ],
    )


def test_escape_single_quotes():
    assert escape_single_quotes("some 'usage' text") == "some \\'usage\\' text"
    assert escape_single_quotes("plain") == "plain"


@pytest.mark.parametrize(
    "commands, expected",
    [
        ([], "__fish_greet_no_subcommand"),
        (["config", "c"], "__fish_seen_subcommand_from config c"),
    ],
)
def test_fish_subcommand_helper(commands, expected):
    assert fish_subcommand_helper("greet", commands) == expected


def test_prepare_fish_flags_file_flag_with_usage():
    flag = _StringFlag(name="socket", aliases=["s"], usage="some 'usage' text", takes_file=True)
    assert prepare_fish_flags("greet", [flag], []) == [
        "complete -c greet -n '__fish_greet_no_subcommand' -l socket -s s -r "
        "-d 'some \\'usage\\' text'"
    ]


def test_prepare_fish_flags_bool_flag_under_command():
    flag = BoolFlag(name="another-flag", aliases=["b"], usage="another usage text")
    assert prepare_fish_flags("greet", [flag], ["config", "c"]) == [
        "complete -c greet -n '__fish_seen_subcommand_from config c' -f "
        "-l another-flag -s b -d 'another usage text'"
    ]


def test_prepare_fish_flags_string_without_file_or_usage():
    flag = _StringFlag(name="flag", aliases=["fl", "f"])
    assert prepare_fish_flags("greet", [flag], []) == [
        "complete -c greet -n '__fish_greet_no_subcommand' -f -l flag -s fl -s f -r"
    ]


def test_prepare_fish_commands_collects_names_and_skips_hidden():
    all_commands: list[str] = []
    lines = prepare_fish_commands(
        "greet",
        [Command(name="info", aliases=["i"], usage="it's info"), Command(name="x", hidden=True)],
        all_commands,
        [],
    )
    assert all_commands == ["info", "i"]
    assert lines == [
        "complete -c greet -n '__fish_seen_subcommand_from info i' -f -l help -s h -d 'show help'",
        "complete -r -c greet -n '__fish_greet_no_subcommand' -a 'info i' -d 'it\\'s info'",
    ]


def test_fish_completions_full_app():
    completions, all_commands = fish_completions(_test_app())
    assert all_commands == [
        "config", "c", "sub-config", "s", "ss",
        "info", "i", "in", "some-command",
        "usage", "u", "sub-usage", "su",
    ]
    assert completions[:6] == [
        "complete -c greet -n '__fish_greet_no_subcommand' -l socket -s s -r "
        "-d 'some \\'usage\\' text'",
        "complete -c greet -n '__fish_greet_no_subcommand' -f -l flag -s fl -s f -r",
        "complete -c greet -n '__fish_greet_no_subcommand' -f -l another-flag -s b "
        "-d 'another usage text'",
        "complete -c greet -n '__fish_greet_no_subcommand' -l logfile -r",
        "complete -c greet -n '__fish_greet_no_subcommand' -f -l help -s h -d 'show help'",
        "complete -c greet -n '__fish_greet_no_subcommand' -f -l version -s v "
        "-d 'print the version'",
    ]
    assert completions[6:8] == [
        "complete -c greet -n '__fish_seen_subcommand_from config c' -f -l help -s h "
        "-d 'show help'",
        "complete -r -c greet -n '__fish_greet_no_subcommand' -a 'config c' "
        "-d 'another usage test'",
    ]
    assert "complete -r -c greet -n '__fish_seen_subcommand_from config c' " \
        "-a 'sub-config s ss' -d 'another usage test'" in completions
    assert "complete -r -c greet -n '__fish_greet_no_subcommand' -a 'some-command'" in completions
    assert not any("hidden" in line for line in completions)
    assert sum(" -l help " in line for line in completions) == 7


def test_fish_completions_hide_help_and_version():
    app = _test_app()
    app.hide_help = True
    app.hide_version = True
    app.commands = [Command(name="info", hide_help=True)]
    completions, all_commands = fish_completions(app)
    assert all_commands == ["info"]
    assert not any(" -l help " in line or " -l version " in line for line in completions)
    assert completions[-1] == "complete -r -c greet -n '__fish_greet_no_subcommand' -a 'info'"