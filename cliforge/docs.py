"""Markdown documentation helpers: command and flag sections, tables and file updates."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Sequence

from cliforge.flags import BoolFlag, visible_flags

DEFAULT_START_TAG = "<!--GENERATED:CLI_DOCS-->"
DEFAULT_END_TAG = "<!--/GENERATED:CLI_DOCS-->"
GENERATED_COMMENT = (
    "<!-- Documentation inside this block generated by cliforge; DO NOT EDIT -->"
)

_DOC_METHODS = (
    "names",
    "takes_value",
    "get_usage",
    "get_value",
    "get_default_text",
    "get_env_vars",
)

_TABLE = re.compile(
    r"^(\|[^\n]+\|\r?\n)((?:\|:?-+:?)+\|)(\n(?:\|[^\n]+\|\r?\n?)*)?$",
    re.MULTILINE,
)
_MANY_NEWLINES = re.compile(r"\n{2,}")


def _is_doc_flag(flag: Any) -> bool:
    return all(callable(getattr(flag, method, None)) for method in _DOC_METHODS)


def _lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if line]


@dataclass(eq=False, kw_only=True)
class Command:
    """A command (or sub-command) as described in documentation."""

    name: str = ""
    aliases: list[str] = field(default_factory=list)
    usage: str = ""
    usage_text: str = ""
    args_usage: str = ""
    description: str = ""
    category: str = ""
    flags: list[Any] = field(default_factory=list)
    commands: list[Command] = field(default_factory=list)
    hidden: bool = False
    hide_help: bool = False

    def names(self) -> list[str]:
        """The command name followed by its aliases."""
        return [self.name, *self.aliases]

    def visible_flags(self) -> list[Any]:
        return visible_flags(self.flags)

    def visible_commands(self) -> list[Command]:
        return [cmd for cmd in self.commands if not cmd.hidden]


@dataclass(eq=False, kw_only=True)
class App:
    """The top-level application as described in documentation."""

    name: str = ""
    usage: str = ""
    usage_text: str = ""
    args_usage: str = ""
    description: str = ""
    flags: list[Any] = field(default_factory=list)
    commands: list[Command] = field(default_factory=list)
    authors: list[Any] = field(default_factory=list)
    hide_help: bool = False
    hide_version: bool = False

    def visible_flags(self) -> list[Any]:
        return visible_flags(self.flags)

    def visible_commands(self) -> list[Command]:
        return [cmd for cmd in self.commands if not cmd.hidden]


@dataclass
class TabularFlag:
    """A flag prepared for a documentation table."""

    name: str = ""
    aliases: list[str] = field(default_factory=list)
    usage: str = ""
    takes_value: bool = False
    default: str = ""
    env_vars: list[str] = field(default_factory=list)


@dataclass
class TabularCommand:
    """A command prepared for tabular documentation, with its sub-commands."""

    app_path: str = ""
    name: str = ""
    aliases: list[str] = field(default_factory=list)
    usage: str = ""
    args_usage: str = ""
    usage_text: list[str] = field(default_factory=list)
    description: str = ""
    category: str = ""
    flags: list[TabularFlag] = field(default_factory=list)
    sub_commands: list[TabularCommand] = field(default_factory=list)
    level: int = 0


# ---------------------------------------------------------------------------
# Markdown sections


def prepare_commands(commands: Iterable[Command], level: int = 0) -> list[str]:
    """Markdown sections for every visible command, sub-commands following their parent."""
    sections: list[str] = []
    for command in commands:
        if command.hidden:
            continue
        usage_text = prepare_usage_text(command)
        usage = prepare_usage(command, usage_text)
        prepared = (
            f"{'#' * (level + 2)} {', '.join(command.names())}\n\n{usage}{usage_text}"
        )
        flags = prepare_args_with_values(command.visible_flags())
        if flags:
            prepared += "\n" + "\n".join(flags)
        sections.append(prepared)
        if command.commands:
            sections.extend(prepare_commands(command.commands, level + 1))
    return sections


def prepare_args_with_values(flags: Iterable[Any]) -> list[str]:
    return prepare_flags(flags, ", ", "**", "**", '""', True)


def prepare_args_synopsis(flags: Iterable[Any]) -> list[str]:
    return prepare_flags(flags, "|", "[", "]", "[value]", False)


def prepare_flags(
    flags: Iterable[Any],
    sep: str,
    opener: str,
    closer: str,
    value: str,
    add_details: bool,
) -> list[str]:
    """One sorted line per documented flag, naming all its forms."""
    args = []
    for flag in flags:
        if not _is_doc_flag(flag):
            continue
        forms = []
        for name in flag.names():
            trimmed = name.strip()
            forms.append(("--" if len(trimmed) > 1 else "-") + trimmed)
        text = opener + sep.join(forms) + closer
        if flag.takes_value():
            text += f"={value}"
        if add_details:
            text += flag_details(flag)
        args.append(text + "\n")
    return sorted(args)


def flag_details(flag: Any) -> str:
    """The flag's usage and, where it has one, its default value."""
    description = flag.get_usage()
    value = flag.get_value()
    if value:
        description += f" (default: {value})"
    return ": " + description


def prepare_usage_text(command: Command) -> str:
    """A one-line usage text as a quote, a longer one as an indented code block."""
    if not command.usage_text:
        return ""
    text = command.usage_text.strip("\n")
    if "\n" in text:
        return "".join(f"    {line}\n" for line in text.split("\n"))
    return f">{text}\n"


def prepare_usage(command: Command, usage_text: str) -> str:
    if not command.usage:
        return ""
    usage = command.usage + "\n"
    if usage_text:
        usage += "\n"
    return usage


# ---------------------------------------------------------------------------
# Tabular documentation


def prepare_tabular_commands(
    commands: Iterable[Command],
    app_path: str,
    parent_command_name: str = "",
    level: int = 0,
) -> list[TabularCommand]:
    """Commands and, recursively, their sub-commands prepared for tables."""
    result = []
    for cmd in commands:
        full_name = f"{parent_command_name} {cmd.name}"
        result.append(
            TabularCommand(
                app_path=app_path,
                name=full_name.strip(),
                aliases=list(cmd.aliases),
                usage=prepare_multiline_string(cmd.usage),
                usage_text=_lines(cmd.usage_text),
                args_usage=prepare_multiline_string(cmd.args_usage),
                description=prepare_multiline_string(cmd.description),
                category=cmd.category,
                flags=prepare_tabular_flags(cmd.visible_flags()),
                sub_commands=prepare_tabular_commands(
                    cmd.commands, app_path, full_name, level + 1
                ),
                level=level,
            )
        )
    return result


def prepare_tabular_flags(flags: Iterable[Any]) -> list[TabularFlag]:
    """Documented flags prepared for tables."""
    result = []
    for flag in flags:
        if not _is_doc_flag(flag):
            continue
        prepared = TabularFlag(
            usage=prepare_multiline_string(flag.get_usage()),
            env_vars=list(flag.get_env_vars() or []),
            takes_value=flag.takes_value(),
            default=flag.get_value(),
        )
        if isinstance(flag, BoolFlag):
            prepared.default = "true" if flag.value else "false"
        for position, name in enumerate(flag.names()):
            name = name.strip()
            if position == 0:
                prepared.name = "--" + name
                continue
            prepared.aliases.append(("--" if len(name) > 1 else "-") + name)
        result.append(prepared)
    return result


def prepare_multiline_string(text: str) -> str:
    """Join lines with spaces, trim, and drop trailing dots and line breaks."""
    return text.replace("\n", " ").strip().rstrip(".\r\n\t")


def _format_table(raw_table: str) -> str | None:
    lines = _lines(raw_table)
    if len(lines) < 3:
        return None

    matrix = [
        [cell.strip() for cell in line.strip("| ").split("|") if cell]
        for line in lines
    ]
    centered = [cell.startswith(":") and cell.endswith(":") for cell in matrix[1]]

    lengths = [0] * len(matrix[0])
    for n, row in enumerate(matrix):
        if n == 1:
            continue
        for i, cell in enumerate(row):
            lengths[i] = max(lengths[i], len(cell))

    for i, row in enumerate(matrix):
        for j, cell in enumerate(row):
            if i == 1:
                if centered[j]:
                    row[j] = ":" + "-" * max(0, lengths[j]) + ":"
                else:
                    row[j] = "-" * max(0, lengths[j] + 2)
                continue
            width = len(cell)
            pad_left, pad_right = 1, max(1, lengths[j] - width + 1)
            if centered[j]:
                pad_left = max(1, (lengths[j] - width) // 2)
                pad_right = max(1, lengths[j] - width - (pad_left - 1))
            extra = " " if pad_left + width + pad_right <= lengths[j] + 1 else ""
            row[j] = " " * pad_left + extra + cell + " " * pad_right

    return "".join("|" + "|".join(row) + "|\n" for row in matrix)


def prettify(text: str) -> str:
    """Align markdown tables and normalise blank lines."""
    for raw_table in [match.group(0) for match in _TABLE.finditer(text)]:
        table = _format_table(raw_table)
        if table is not None:
            text = text.replace(raw_table, table, 1)
    text = _MANY_NEWLINES.sub("\n\n", text)
    return text.strip(" \n") + "\n"


def write_between_tags(
    file_path: str | Path,
    markdown: str,
    start: str = DEFAULT_START_TAG,
    end: str = DEFAULT_END_TAG,
) -> None:
    """Replace everything between ``start`` and ``end`` in the file with ``markdown``.

    Raises FileNotFoundError when the file does not exist.
    """
    path = Path(file_path)
    content = path.read_bytes().decode("utf-8")
    pattern = re.compile(re.escape(start) + "(.*?)" + re.escape(end), re.DOTALL)
    replacement = "\n".join([start, GENERATED_COMMENT, markdown, end])
    updated = pattern.sub(lambda _match: replacement, content)
    path.write_bytes(updated.encode("utf-8"))