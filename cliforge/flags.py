"""Command-line flag definitions, value types and a small flag parser."""

from __future__ import annotations

import contextlib
import json
import os
import re
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from fractions import Fraction
from typing import Any, Callable, ClassVar, Iterable, Sequence

DEFAULT_PLACEHOLDER = "value"
DEFAULT_SLICE_SEPARATOR = ","
DEFAULT_MAP_KEY_VALUE_SEPARATOR = "="

_COMMA_WHITESPACE = re.compile(r"[, ]+.*", re.DOTALL)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Flag set


@dataclass
class FlagEntry:
    """A flag registered in a FlagSet under one name."""

    name: str
    usage: str
    value: Any
    default: str


def _is_bool_value(value: Any) -> bool:
    checker = getattr(value, "is_bool_flag", None)
    return callable(checker) and bool(checker())


class FlagSet:
    """A named collection of flag values that parses command-line arguments."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.args: list[str] = []
        self._formal: dict[str, FlagEntry] = {}
        self._actual: set[str] = set()

    def define(self, value: Any, name: str, usage: str = "") -> None:
        """Register ``value`` under ``name``."""
        if name in self._formal:
            raise ValueError(f"{self.name} flag redefined: {name}")
        self._formal[name] = FlagEntry(name, usage, value, str(value))

    def lookup(self, name: str) -> FlagEntry | None:
        """Return the entry registered under ``name``, or None."""
        return self._formal.get(name)

    def set(self, name: str, value: str) -> None:
        """Set the named flag from text and mark it as given."""
        entry = self._formal.get(name)
        if entry is None:
            raise ValueError(f"no such flag -{name}")
        entry.value.set(value)
        self._actual.add(name)

    def visited(self) -> list[str]:
        """Names of the flags that were given, in lexical order."""
        return sorted(self._actual)

    def parse(self, args: Iterable[str]) -> list[str]:
        """Parse flags from ``args``; return and keep the remaining arguments."""
        remaining = list(args)
        while remaining:
            arg = remaining[0]
            if len(arg) < 2 or not arg.startswith("-"):
                break
            remaining.pop(0)
            if arg == "--":
                break
            dashes = 2 if arg.startswith("--") else 1
            body = arg[dashes:]
            if not body or body[0] in "-=":
                raise ValueError(f"bad flag syntax: {arg}")
            name, has_value, text = body.partition("=")
            entry = self._formal.get(name)
            if entry is None:
                raise ValueError(f"flag provided but not defined: -{name}")
            if _is_bool_value(entry.value):
                if has_value:
                    try:
                        entry.value.set(text)
                    except ValueError as exc:
                        raise ValueError(
                            f"invalid boolean value {_quote(text)} for -{name}: {exc}"
                        ) from exc
                else:
                    try:
                        entry.value.set("true")
                    except ValueError as exc:
                        raise ValueError(f"invalid boolean flag {name}: {exc}") from exc
            else:
                if not has_value:
                    if not remaining:
                        raise ValueError(f"flag needs an argument: -{name}")
                    text = remaining.pop(0)
                try:
                    entry.value.set(text)
                except ValueError as exc:
                    raise ValueError(
                        f"invalid value {_quote(text)} for flag -{name}: {exc}"
                    ) from exc
            self._actual.add(name)
        self.args = remaining
        return list(remaining)


# ---------------------------------------------------------------------------
# Values

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


class BoolValue:
    """A boolean flag value that counts how often it was set."""

    def __init__(self, value: bool = False, count: int = 0) -> None:
        self.value = bool(value)
        self._count = count
        self.was_set = False

    def set(self, text: str) -> None:
        if text in _TRUE_WORDS:
            self.value = True
        elif text in _FALSE_WORDS:
            self.value = False
        else:
            raise ValueError("parse error")
        self._count += 1
        self.was_set = True

    def get(self) -> bool:
        return self.value

    def count(self) -> int:
        return self._count

    def is_bool_flag(self) -> bool:
        return True

    def __str__(self) -> str:
        return "true" if self.value else "false"


_NANOS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_NUMBER = re.compile(r"(\d*)(?:\.(\d*))?")
_UNIT = re.compile(r"[^\d.]*")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``"1h30m"``, ``"1.5s"`` or ``"300ms"``."""
    rest = text
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f"time: invalid duration {_quote(text)}")
    total = Fraction(0)
    while rest:
        number = _NUMBER.match(rest)
        whole, frac = number.group(1), number.group(2)
        if not whole and not frac:
            raise ValueError(f"time: invalid duration {_quote(text)}")
        rest = rest[number.end():]
        unit = _UNIT.match(rest).group(0)
        if not unit:
            raise ValueError(f"time: missing unit in duration {_quote(text)}")
        if unit not in _NANOS_PER_UNIT:
            raise ValueError(f"time: unknown unit {_quote(unit)} in duration {_quote(text)}")
        rest = rest[len(unit):]
        amount = Fraction(int(whole or "0"))
        if frac:
            amount += Fraction(int(frac), 10 ** len(frac))
        total += amount * _NANOS_PER_UNIT[unit]
    micros = int(total / 1000)
    return timedelta(microseconds=-micros if negative else micros)


def _with_fraction(amount: int, scale: int) -> str:
    whole, frac = divmod(amount, scale)
    if not frac:
        return str(whole)
    digits = len(str(scale)) - 1
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_duration(value: timedelta) -> str:
    """Format a duration the way ``parse_duration`` reads it, e.g. ``"1h0m0s"``."""
    nanos = ((value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds) * 1000
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    if nanos < 1_000_000_000:
        if nanos == 0:
            return "0s"
        if nanos < 1_000:
            return f"{sign}{nanos}ns"
        if nanos < 1_000_000:
            return f"{sign}{_with_fraction(nanos, 1_000)}µs"
        return f"{sign}{_with_fraction(nanos, 1_000_000)}ms"
    hours, rest = divmod(nanos, 3600 * 1_000_000_000)
    minutes, rest = divmod(rest, 60 * 1_000_000_000)
    seconds = _with_fraction(rest, 1_000_000_000) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return sign + seconds


class DurationValue:
    """A duration flag value held as a timedelta."""

    def __init__(self, value: timedelta = timedelta(0)) -> None:
        self.value = value
        self.was_set = False

    def set(self, text: str) -> None:
        self.value = parse_duration(text)
        self.was_set = True

    def get(self) -> timedelta:
        return self.value

    def __str__(self) -> str:
        return format_duration(self.value)


# ---------------------------------------------------------------------------
# Help text helpers


def flag_names(name: str, aliases: Sequence[str] | None) -> list[str]:
    """The name and aliases, each cut at its first comma or space."""
    return [_COMMA_WHITESPACE.sub("", part) for part in [name, *(aliases or [])]]


def prefix_for(name: str) -> str:
    return "-" if len(name) == 1 else "--"


def unquote_usage(usage: str) -> tuple[str, str]:
    """Return the back-quoted placeholder, if any, and the usage without quotes."""
    start = usage.find("`")
    if start >= 0:
        end = usage.find("`", start + 1)
        if end >= 0:
            placeholder = usage[start + 1:end]
            return placeholder, usage[:start] + placeholder + usage[end + 1:]
    return "", usage


def prefixed_names(names: Sequence[str], placeholder: str) -> str:
    parts = []
    last = len(names) - 1
    for position, name in enumerate(names):
        if not name:
            continue
        text = prefix_for(name) + name
        if placeholder:
            text += " " + placeholder
        if position < last:
            text += ", "
        parts.append(text)
    return "".join(parts)


def env_format(env_vars: Sequence[str], prefix: str, sep: str, suffix: str) -> str:
    if env_vars:
        return f" [{prefix}{sep.join(env_vars)}{suffix}]"
    return ""


def with_env_hint(env_vars: Sequence[str], text: str) -> str:
    """Append the environment variables a flag reads to ``text``."""
    if sys.platform != "win32" or os.environ.get("PSHOME", ""):
        hint = env_format(env_vars, "$", ", $", "")
    else:
        hint = env_format(env_vars, "%", "%, %", "%")
    return text + hint


def with_file_hint(file_path: str, text: str) -> str:
    return text + (f" [{file_path}]" if file_path else "")


_DOC_METHODS = ("names", "takes_value", "get_usage", "get_default_text", "get_env_vars")


def stringify_flag(flag: Any) -> str:
    """Render a flag as a help line; empty for flags without documentation."""
    if not all(callable(getattr(flag, method, None)) for method in _DOC_METHODS):
        return ""
    placeholder, usage = unquote_usage(flag.get_usage())
    if flag.takes_value() and not placeholder:
        placeholder = DEFAULT_PLACEHOLDER
    default_text = flag.get_default_text()
    default_part = f" (default: {default_text})" if default_text else ""
    usage_with_default = (usage + default_part).strip()
    names = prefixed_names(flag.names(), placeholder)
    multi = getattr(flag, "is_multi_value_flag", None)
    if callable(multi) and multi():
        names = f"{names} [ {names} ]"
    return with_env_hint(flag.get_env_vars(), f"{names}\t{usage_with_default}")


def visible_flags(flags: Iterable[Any]) -> list[Any]:
    """The flags that report themselves visible."""
    return [f for f in flags if callable(getattr(f, "is_visible", None)) and f.is_visible()]


def build_flag_set(name: str, flags: Iterable[Any]) -> FlagSet:
    """Create a FlagSet and apply every flag to it."""
    flag_set = FlagSet(name)
    for fl in flags:
        fl.apply(flag_set)
    return flag_set


def normalize_flags(flags: Iterable[Any], flag_set: FlagSet) -> None:
    """Copy each given flag's value to its other names that were not given."""
    given = set(flag_set.visited())
    for fl in flags:
        parts = [part.strip(" ") for part in fl.names()]
        if len(parts) == 1:
            continue
        source = None
        for name in parts:
            if name in given:
                if source is not None:
                    raise ValueError(
                        f"Cannot use two forms of the same flag: {name} {source.name}"
                    )
                source = flag_set.lookup(name)
        if source is None:
            continue
        serialize = getattr(source.value, "serialize", None)
        text = serialize() if callable(serialize) else str(source.value)
        for name in parts:
            if name not in given:
                with contextlib.suppress(ValueError):
                    flag_set.set(name, text)


def flag_from_env_or_file(
    env_vars: Sequence[str] | None, file_paths: Sequence[str] | None
) -> tuple[str, str, bool]:
    """First value found in the environment or the files, where it came from, and whether found."""
    for env_var in env_vars or []:
        key = env_var.strip()
        if key in os.environ:
            return os.environ[key], f"environment variable {_quote(key)}", True
    paths = list(file_paths or [])
    for path in paths:
        if not path:
            continue
        try:
            with open(path, encoding="utf-8") as handle:
                data = handle.read()
        except OSError:
            continue
        quoted = " ".join(_quote(p) for p in paths)
        return data, f"file [{quoted}]", True
    return "", "", False


def split_multi_values(
    value: str, separator: str = DEFAULT_SLICE_SEPARATOR, disabled: bool = False
) -> list[str]:
    """Split a multi-value flag string, unless splitting is disabled."""
    if disabled:
        return [value]
    return value.split(separator)


# ---------------------------------------------------------------------------
# Flags


@dataclass(eq=False, kw_only=True)
class Flag(ABC):
    """Common behaviour of typed flags: names, help text, env lookup and binding."""

    type_name: ClassVar[str]
    value_type: ClassVar[type]
    zero: ClassVar[Any]

    name: str = ""
    aliases: list[str] = field(default_factory=list)
    usage: str = ""
    value: Any = None
    default_text: str = ""
    env_vars: list[str] = field(default_factory=list)
    file_paths: list[str] = field(default_factory=list)
    category: str = ""
    required: bool = False
    hidden: bool = False
    persistent: bool = False
    takes_file: bool = False
    only_once: bool = False
    action: Callable[..., Any] | None = None
    bound_value: Any = field(default=None, init=False, repr=False)
    _has_been_set: bool = field(default=False, init=False, repr=False)

    @abstractmethod
    def _create(self, initial: Any) -> Any:
        """Build the value object that holds this flag's value."""

    @abstractmethod
    def _to_string(self, value: Any) -> str:
        """Render a value of this flag's type for help text."""

    def names(self) -> list[str]:
        return flag_names(self.name, self.aliases)

    def is_set(self) -> bool:
        bound = self.bound_value
        return self._has_been_set or bool(getattr(bound, "was_set", False))

    def is_visible(self) -> bool:
        return not self.hidden

    def takes_value(self) -> bool:
        return True

    def get_usage(self) -> str:
        return self.usage

    def get_value(self) -> str:
        return self._to_string(self.value) if self.takes_value() else ""

    def get_default_text(self) -> str:
        return self.default_text or self._to_string(self.value)

    def get_env_vars(self) -> list[str]:
        return list(self.env_vars)

    def apply(self, flag_set: FlagSet) -> None:
        """Bind the flag's value (from the environment or files, if found) under all names."""
        if self.bound_value is None:
            initial = self.value
            text, source, found = flag_from_env_or_file(self.env_vars, self.file_paths)
            if found and (text or not self.takes_value()):
                parsed = self._create(initial)
                try:
                    parsed.set(text or "false")
                except ValueError as exc:
                    raise ValueError(
                        f"could not parse {_quote(text)} as {self.type_name} value "
                        f"from {source} for flag {self.name}: {exc}"
                    ) from exc
                initial = parsed.get()
                self._has_been_set = True
            self.bound_value = self._create(initial)
        for name in self.names():
            flag_set.define(self.bound_value, name, self.usage)

    def get(self, flag_set: FlagSet) -> Any:
        """The value bound under this flag's name in ``flag_set``, or the type's zero."""
        entry = flag_set.lookup(self.name)
        if entry is not None:
            getter = getattr(entry.value, "get", None)
            current = getter() if callable(getter) else entry.value
            if isinstance(current, self.value_type):
                return current
        return self.zero

    def __str__(self) -> str:
        return stringify_flag(self)


@dataclass(eq=False, kw_only=True)
class BoolFlag(Flag):
    """A flag that is either present (true) or absent (false)."""

    type_name: ClassVar[str] = "bool"
    value_type: ClassVar[type] = bool
    zero: ClassVar[Any] = False

    value: bool = False

    def _create(self, initial: Any) -> BoolValue:
        return BoolValue(bool(initial))

    def _to_string(self, value: Any) -> str:
        return "true" if value else "false"

    def takes_value(self) -> bool:
        return False

    def count(self) -> int:
        """How many times the flag was given."""
        return self.bound_value.count() if self.bound_value is not None else 0


@dataclass(eq=False, kw_only=True)
class DurationFlag(Flag):
    """A flag holding a duration such as ``1h30m``."""

    type_name: ClassVar[str] = "duration"
    value_type: ClassVar[type] = timedelta
    zero: ClassVar[Any] = timedelta(0)

    value: timedelta = timedelta(0)

    def _create(self, initial: Any) -> DurationValue:
        return DurationValue(initial)

    def _to_string(self, value: Any) -> str:
        return format_duration(value)


@dataclass(eq=False)
class ExtFlag:
    """A flag wrapping an entry registered directly in a FlagSet."""

    entry: FlagEntry

    def names(self) -> list[str]:
        return [self.entry.name]

    def apply(self, flag_set: FlagSet) -> None:
        flag_set.define(self.entry.value, self.entry.name, self.entry.usage)

    def is_set(self) -> bool:
        return False

    def is_visible(self) -> bool:
        return True

    def takes_value(self) -> bool:
        return False

    def get_usage(self) -> str:
        return self.entry.usage

    def get_value(self) -> str:
        return str(self.entry.value)

    def get_default_text(self) -> str:
        return self.entry.default

    def get_env_vars(self) -> list[str]:
        return []

    def __str__(self) -> str:
        return stringify_flag(self)


BASH_COMPLETION_FLAG = BoolFlag(name="generate-shell-completion", hidden=True)
VERSION_FLAG = BoolFlag(name="version", aliases=["v"], usage="print the version")
HELP_FLAG = BoolFlag(name="help", aliases=["h"], usage="show help")