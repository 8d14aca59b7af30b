"""Errors raised by command-line handling and the default way of reporting them."""

from __future__ import annotations

import json
import sys
from typing import Any, Callable, Iterable, Sequence, TextIO


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class MultiError(Exception):
    """An error that carries several errors at once."""

    def __init__(self, *errors: BaseException) -> None:
        super().__init__(*errors)
        self._errors = list(errors)

    def __str__(self) -> str:
        return "\n".join(str(err) for err in self._errors)

    def errors(self) -> list[BaseException]:
        """A copy of the wrapped errors."""
        return list(self._errors)


class RequiredFlagsError(Exception):
    """One or more required flags were not given."""

    def __init__(self, missing_flags: Iterable[str]) -> None:
        self.missing_flags = list(missing_flags)
        super().__init__(*self.missing_flags)

    def __str__(self) -> str:
        if len(self.missing_flags) == 1:
            return f"Required flag {_quote(self.missing_flags[0])} not set"
        joined = ", ".join(self.missing_flags)
        return f"Required flags {_quote(joined)} not set"


class MutuallyExclusiveError(Exception):
    """Two flags of a mutually exclusive group were given together."""

    def __init__(self, flag1_name: str, flag2_name: str) -> None:
        self.flag1_name = flag1_name
        self.flag2_name = flag2_name
        super().__init__(flag1_name, flag2_name)

    def __str__(self) -> str:
        return f"option {self.flag1_name} cannot be set along with option {self.flag2_name}"


class MutuallyExclusiveRequiredError(Exception):
    """None of the flags of a required mutually exclusive group was given."""

    def __init__(self, flag_groups: Sequence[Sequence[Any]]) -> None:
        self.flag_groups = [list(group) for group in flag_groups]
        super().__init__(self.flag_groups)

    def __str__(self) -> str:
        missing = []
        for group in self.flag_groups:
            names = [name for fl in group for name in fl.names()]
            if len(self.flag_groups) == 1:
                return str(RequiredFlagsError(names))
            missing.append(" ".join(names))
        return f"one of these flags needs to be provided: {', '.join(missing)}"


class ExitError(Exception):
    """An error that asks the program to exit with a given code."""

    def __init__(self, error: BaseException, exit_code: int) -> None:
        super().__init__(error, exit_code)
        self.error = error
        self.exit_code = exit_code

    def __str__(self) -> str:
        return str(self.error)


def exit_error(message: Any, exit_code: int) -> ExitError:
    """Wrap a message or an exception together with an exit code."""
    error = message if isinstance(message, BaseException) else Exception(str(message))
    return ExitError(error, exit_code)


def _exit_code_of(err: Any) -> int | None:
    code = getattr(err, "exit_code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return None


def _handle_multi_error(multi: MultiError, writer: TextIO) -> int:
    code = 1
    for err in multi.errors():
        if isinstance(err, MultiError):
            code = _handle_multi_error(err, writer)
        elif err is not None:
            writer.write(f"{err}\n")
            inner = _exit_code_of(err)
            if inner is not None:
                code = inner
    return code


def handle_exit_coder(
    err: BaseException | None,
    exiter: Callable[[int], Any] | None = None,
    writer: TextIO | None = None,
) -> None:
    """Report ``err`` and exit with its code when it carries one.

    Errors with an ``exit_code`` are written out (unless their message is
    empty) and their code is passed to ``exiter``. A MultiError has each of
    its errors written, and exits with the last code found, or 1.
    """
    if err is None:
        return
    exiter = exiter if exiter is not None else sys.exit
    writer = writer if writer is not None else sys.stderr

    code = _exit_code_of(err)
    if code is not None:
        text = str(err)
        if text:
            writer.write(f"{text}\n")
        exiter(code)
        return

    if isinstance(err, MultiError):
        exiter(_handle_multi_error(err, writer))