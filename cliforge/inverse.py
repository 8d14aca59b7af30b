"""A boolean flag paired with a generated negative form such as ``--no-env``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cliforge.flags import BoolFlag, FlagSet, flag_names

DEFAULT_INVERSE_BOOL_PREFIX = "no-"


def _current(flag: BoolFlag) -> bool:
    bound = flag.bound_value
    return bool(bound.get()) if bound is not None else bool(flag.value)


@dataclass(eq=False)
class BoolWithInverseFlag:
    """A bool flag that can be switched on (``--env``) or off (``--no-env``).

    Attributes not defined here are read from the wrapped ``bool_flag``.
    """

    bool_flag: BoolFlag
    inverse_prefix: str = ""
    _positive: BoolFlag | None = field(default=None, init=False, repr=False)
    _negative: BoolFlag | None = field(default=None, init=False, repr=False)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or name == "bool_flag":
            raise AttributeError(name)
        return getattr(self.bool_flag, name)

    def _inverse_name(self) -> str:
        if not self.inverse_prefix:
            self.inverse_prefix = DEFAULT_INVERSE_BOOL_PREFIX
        return self.inverse_prefix + self.bool_flag.name

    def _inverse_aliases(self) -> list[str]:
        return [self.inverse_prefix + alias for alias in self.bool_flag.aliases]

    def _initialize(self) -> None:
        child = self.bool_flag
        self._positive = child
        negative = BoolFlag(
            name=self._inverse_name(),
            aliases=self._inverse_aliases(),
            category=child.category,
            default_text=child.default_text,
            file_paths=list(child.file_paths),
            usage=child.usage,
            required=child.required,
            hidden=child.hidden,
            persistent=child.persistent,
            value=child.value,
            takes_file=child.takes_file,
            only_once=child.only_once,
        )
        if child.env_vars:
            prefix = self.inverse_prefix.upper()
            negative.env_vars = [prefix + env_var for env_var in child.env_vars]
        self._negative = negative

    def flags(self) -> list[BoolFlag]:
        """The positive and the negative flag."""
        if self._positive is None:
            self._initialize()
        return [self._positive, self._negative]

    def is_set(self) -> bool:
        if self._positive is None:
            return self.bool_flag.is_set()
        return (
            self._positive.count() > 0
            or self._positive.is_set()
            or self._negative.is_set()
        )

    def value(self) -> bool:
        """The value of the positive flag."""
        return _current(self._positive if self._positive is not None else self.bool_flag)

    def run_action(self, flag_set: FlagSet) -> Any:
        """Resolve the pair after parsing and run the wrapped flag's action."""
        if self._positive is None:
            self._initialize()
        positive, negative = self._positive, self._negative
        negative_on = _current(negative)
        if negative_on and _current(positive):
            raise ValueError(
                f"cannot set both flags `--{positive.name}` and `--{negative.name}`"
            )
        if negative_on:
            flag_set.set(positive.name, "false")
        if self.bool_flag.action is not None:
            return self.bool_flag.action(flag_set, self.value())
        return None

    def apply(self, flag_set: FlagSet) -> None:
        """Register both the positive and the negative names in ``flag_set``."""
        if self._positive is None:
            self._initialize()
        for fl in (self._positive, self._negative):
            fl.bound_value = None
            fl.apply(flag_set)

    def names(self) -> list[str]:
        if self._positive is None:
            inverse = self._inverse_name()
            return self.bool_flag.names() + flag_names(inverse, self._inverse_aliases())
        if _current(self._negative):
            return self._negative.names()
        if _current(self._positive):
            return self._positive.names()
        return self._negative.names() + self._positive.names()

    def __str__(self) -> str:
        if self._positive is None:
            return f"{self.bool_flag} || --{self._inverse_name()}"
        return f"{self._positive} || {self._negative}"