import io

import pytest

from cliforge.errors import (
    ExitError,
    MultiError,
    MutuallyExclusiveError,
    MutuallyExclusiveRequiredError,
    RequiredFlagsError,
    exit_error,
    handle_exit_coder,
)
from cliforge.flags import BoolFlag


class Recorder:
    def __init__(self):
        self.codes = []

    def __call__(self, code):
        self.codes.append(code)


class ErrorWithFormat(Exception):
    def __str__(self):
        return f"This the format: {self.args[0]}"


def test_handle_nil():
    exiter = Recorder()
    writer = io.StringIO()
    handle_exit_coder(None, exiter, writer)
    assert exiter.codes == []
    assert writer.getvalue() == ""


def test_handle_exit_coder_message():
    exiter = Recorder()
    writer = io.StringIO()
    handle_exit_coder(exit_error("galactic perimeter breach", 9), exiter, writer)
    assert exiter.codes == [9]
    assert writer.getvalue() == "galactic perimeter breach\n"


def test_handle_error_exit_coder():
    exiter = Recorder()
    writer = io.StringIO()
    handle_exit_coder(exit_error(Exception("galactic perimeter breach"), 9), exiter, writer)
    assert exiter.codes == [9]
    assert writer.getvalue() == "galactic perimeter breach\n"


def test_handle_multi_error_with_exit_coder():
    exiter = Recorder()
    writer = io.StringIO()
    err = MultiError(
        Exception("wowsa"),
        Exception("egad"),
        exit_error("galactic perimeter breach", 9),
        exit_error("last ExitCoder", 11),
    )
    handle_exit_coder(err, exiter, writer)
    assert exiter.codes == [11]
    assert writer.getvalue() == "wowsa\negad\ngalactic perimeter breach\nlast ExitCoder\n"


def test_handle_multi_error_without_exit_coder():
    exiter = Recorder()
    writer = io.StringIO()
    handle_exit_coder(MultiError(Exception("wowsa"), Exception("egad")), exiter, writer)
    assert exiter.codes == [1]
    assert writer.getvalue() == "wowsa\negad\n"


def test_handle_error_with_format():
    exiter = Recorder()
    writer = io.StringIO()
    handle_exit_coder(exit_error(ErrorWithFormat("I am formatted"), 1), exiter, writer)
    assert exiter.codes == [1]
    assert writer.getvalue() == "This the format: I am formatted\n"


def test_handle_multi_error_with_format():
    exiter = Recorder()
    writer = io.StringIO()
    handle_exit_coder(MultiError(ErrorWithFormat("err1"), ErrorWithFormat("err2")), exiter, writer)
    assert exiter.codes == [1]
    assert writer.getvalue() == "This the format: err1\nThis the format: err2\n"


def test_nested_multi_error_code():
    exiter = Recorder()
    writer = io.StringIO()
    inner = MultiError(exit_error("inner", 5))
    handle_exit_coder(MultiError(Exception("outer"), inner), exiter, writer)
    assert exiter.codes == [5]
    assert writer.getvalue() == "outer\ninner\n"


def test_empty_message_is_not_written():
    exiter = Recorder()
    writer = io.StringIO()
    handle_exit_coder(exit_error("", 4), exiter, writer)
    assert exiter.codes == [4]
    assert writer.getvalue() == ""


def test_plain_error_is_ignored():
    exiter = Recorder()
    writer = io.StringIO()
    handle_exit_coder(ValueError("plain"), exiter, writer)
    assert exiter.codes == []
    assert writer.getvalue() == ""


def test_default_exiter_raises_system_exit():
    writer = io.StringIO()
    with pytest.raises(SystemExit) as info:
        handle_exit_coder(exit_error("bye", 3), writer=writer)
    assert info.value.code == 3
    assert writer.getvalue() == "bye\n"


def test_multi_error_errors_copy():
    errs = [Exception("foo"), Exception("bar"), Exception("baz")]
    multi = MultiError(*errs)
    copy = multi.errors()
    assert copy == errs
    copy.clear()
    assert multi.errors() == errs
    assert str(multi) == "foo\nbar\nbaz"


def test_exit_error_values():
    err = exit_error(42, 7)
    assert isinstance(err, ExitError)
    assert str(err) == "42"
    assert err.exit_code == 7
    original = RuntimeError("boom")
    assert exit_error(original, 2).error is original


def test_required_flags_messages():
    assert str(RequiredFlagsError(["env"])) == 'Required flag "env" not set'
    assert str(RequiredFlagsError(["a", "b"])) == 'Required flags "a, b" not set'


def test_mutually_exclusive_message():
    err = MutuallyExclusiveError("--a", "--b")
    assert str(err) == "option --a cannot be set along with option --b"


def test_mutually_exclusive_required_single_group():
    group = [BoolFlag(name="a", aliases=["b"])]
    assert str(MutuallyExclusiveRequiredError([group])) == 'Required flags "a, b" not set'


def test_mutually_exclusive_required_many_groups():
    groups = [[BoolFlag(name="a", aliases=["b"])], [BoolFlag(name="c")]]
    assert (
        str(MutuallyExclusiveRequiredError(groups))
        == "one of these flags needs to be provided: a b, c"
    )