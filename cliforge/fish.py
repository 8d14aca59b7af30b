"""Fish shell completion lines for an application, its commands and flags."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from cliforge.docs import App, Command
from cliforge.flags import HELP_FLAG, VERSION_FLAG

_DOC_METHODS = ("takes_value", "get_usage")


def escape_single_quotes(text: str) -> str:
    """Escape single quotes for use inside a single-quoted fish string."""
    return text.replace("'", "\\'")


def fish_subcommand_helper(app_name: str, commands: Sequence[str]) -> str:
    """The fish condition that selects where a completion applies."""
    if commands:
        return f"__fish_seen_subcommand_from {' '.join(commands)}"
    return f"__fish_{app_name}_no_subcommand"


def _offers_files(flag: Any) -> bool:
    return bool(getattr(flag, "takes_file", False)) and bool(
        callable(getattr(flag, "takes_value", None)) and flag.takes_value()
    )


def _is_doc_flag(flag: Any) -> bool:
    return all(callable(getattr(flag, method, None)) for method in _DOC_METHODS)


def prepare_fish_flags(
    app_name: str, flags: Iterable[Any], previous_commands: Sequence[str]
) -> list[str]:
    """One ``complete`` line per flag, valid after ``previous_commands``."""
    helper = fish_subcommand_helper(app_name, previous_commands)
    completions = []
    for flag in flags:
        parts = [f"complete -c {app_name} -n '{helper}'"]
        if not _offers_files(flag):
            parts.append(" -f")
        for position, option in enumerate(flag.names()):
            switch = "-l" if position == 0 else "-s"
            parts.append(f" {switch} {option.strip()}")
        if _is_doc_flag(flag):
            if flag.takes_value():
                parts.append(" -r")
            usage = flag.get_usage()
            if usage:
                parts.append(f" -d '{escape_single_quotes(usage)}'")
        completions.append("".join(parts))
    return completions


def prepare_fish_commands(
    app_name: str,
    commands: Iterable[Command],
    all_commands: list[str],
    previous_commands: Sequence[str],
) -> list[str]:
    """Completion lines for visible commands, their flags and sub-commands.

    The names of every command visited are appended to ``all_commands``.
    """
    helper = fish_subcommand_helper(app_name, previous_commands)
    completions: list[str] = []
    for command in commands:
        if command.hidden:
            continue
        names = command.names()
        line = f"complete -r -c {app_name} -n '{helper}' -a '{' '.join(names)}'"
        if command.usage:
            line += f" -d '{escape_single_quotes(command.usage)}'"

        if not command.hide_help:
            completions.extend(prepare_fish_flags(app_name, [HELP_FLAG], names))

        all_commands.extend(names)
        completions.append(line)
        completions.extend(
            prepare_fish_flags(app_name, command.visible_flags(), names)
        )
        if command.commands:
            completions.extend(
                prepare_fish_commands(app_name, command.commands, all_commands, names)
            )
    return completions


def fish_completions(app: App) -> tuple[list[str], list[str]]:
    """All completion lines for ``app`` and the names of all its commands."""
    all_commands: list[str] = []
    completions = prepare_fish_flags(app.name, app.visible_flags(), all_commands)
    if not app.hide_help:
        completions.extend(prepare_fish_flags(app.name, [HELP_FLAG], all_commands))
    if not app.hide_version:
        completions.extend(prepare_fish_flags(app.name, [VERSION_FLAG], all_commands))
    completions.extend(
        prepare_fish_commands(app.name, app.visible_commands(), all_commands, [])
    )
    return completions, all_commands