# cliforge

Building blocks for command-line applications, with no dependencies outside
the standard library:

- `cliforge.flags`: typed flags (`BoolFlag`, `DurationFlag`, `ExtFlag`), a small
  parser (`FlagSet`), duration parsing and formatting, and help-line rendering.
- `cliforge.inverse`: `BoolWithInverseFlag`, which pairs `--env` with `--no-env`.
- `cliforge.errors`: exit-code aware errors (`ExitError`, `MultiError`, and
  errors for required and mutually exclusive flags) and `handle_exit_coder`.
- `cliforge.docs`: `App` and `Command` descriptions and helpers that turn them
  into Markdown sections, table rows and aligned tables, and that update a file
  between marker tags.
- `cliforge.fish`: `complete` lines for the fish shell.

## Installation

```
pip install cliforge
```

## Flags

```python
from cliforge.flags import BoolFlag, DurationFlag, build_flag_set

verbose = BoolFlag(name="verbose", aliases=["v"], usage="chatty output")
timeout = DurationFlag(name="timeout", usage="give up after `DURATION`")

flag_set = build_flag_set("demo", [verbose, timeout])
flag_set.parse(["-v", "--timeout", "1m30s"])

print(verbose.get(flag_set))   # True
print(timeout.get(flag_set))   # 0:01:30
print(str(timeout))            # --timeout DURATION\tgive up after DURATION (default: 0s)
```

Every name and alias of a flag is bound to the same value. `FlagSet.parse`
accepts `-name`, `--name`, `--name=value` and `--name value`, stops at the
first non-flag argument or at `--`, and raises `ValueError` for unknown flags
and values that do not parse. `normalize_flags` raises `ValueError` when two
forms of the same flag were given.

When `apply` (called by `build_flag_set`) runs, the first of the flag's
`env_vars` that is present in the environment, or else the first readable file
in `file_paths`, supplies the flag's starting value; an unparsable value raises
`ValueError` with a message such as
`could not parse "foobar" as bool value from environment variable "DEBUG" for flag debug: ...`.

`parse_duration` and `format_duration` read and write durations such as
`"1h30m"`, `"1.5s"` or `"300ms"` as `datetime.timedelta`. `split_multi_values`
splits a comma-separated value, with a custom separator, or not at all.

`BoolFlag.count()` tells how many times a boolean flag was given.
`ExtFlag` wraps a `FlagEntry` that was registered directly with
`FlagSet.define`.

## Inverse boolean flags

```python
from cliforge.flags import BoolFlag, build_flag_set
from cliforge.inverse import BoolWithInverseFlag

env = BoolWithInverseFlag(BoolFlag(name="env"))
flag_set = build_flag_set("demo", [env])
flag_set.parse(["--no-env"])
env.run_action(flag_set)
print(env.is_set(), env.value())   # True False
```

The negative form uses the prefix `no-` unless `inverse_prefix` is given; its
environment variables are those of the wrapped flag with the upper-cased prefix
in front. `run_action` raises `ValueError` when both forms were set, and
otherwise calls the wrapped flag's `action` with the flag set and the value.

## Errors and exit codes

```python
import io

from cliforge.errors import MultiError, exit_error, handle_exit_coder

codes = []
out = io.StringIO()
handle_exit_coder(exit_error("galactic perimeter breach", 9), exiter=codes.append, writer=out)
print(codes, out.getvalue())   # [9] galactic perimeter breach

handle_exit_coder(MultiError(ValueError("wowsa"), ValueError("egad")), exiter=codes.append, writer=out)
print(codes[-1])               # 1
```

Without `exiter` and `writer`, `handle_exit_coder` writes to standard error and
calls `sys.exit`. For a `MultiError` it writes every error and exits with the
last exit code found among them, or 1.

## Documentation helpers

```python
from cliforge.docs import App, Command, prepare_commands, prepare_tabular_commands, write_between_tags
from cliforge.flags import BoolFlag

app = App(
    name="greet",
    commands=[Command(name="info", aliases=["i"], usage="retrieve generic information",
                      flags=[BoolFlag(name="all", usage="show everything")])],
)
sections = prepare_commands(app.commands)          # Markdown sections, one per visible command
rows = prepare_tabular_commands(app.commands, "app")  # TabularCommand records for tables
```

`prettify` aligns the Markdown tables in a text and collapses runs of blank
lines. `write_between_tags(path, markdown)` replaces what lies between
`<!--GENERATED:CLI_DOCS-->` and `<!--/GENERATED:CLI_DOCS-->` (or the tags you
pass) with a generated-content comment and `markdown`; it raises
`FileNotFoundError` when the file does not exist.

## Fish completion

```python
from cliforge.docs import App
from cliforge.fish import fish_completions

lines, commands = fish_completions(App(name="greet"))
print(lines[0])
# complete -c greet -n '__fish_greet_no_subcommand' -f -l help -s h -d 'show help'
```

## What this package does not do

- It does not run applications: `App` and `Command` only describe a command
  tree; there is no argument dispatch, action calling or help screen.
- It offers only boolean, duration and wrapped (`ExtFlag`) flags; there are no
  string, number, slice, map or timestamp flags.
- It does not render a complete Markdown reference or man page from templates,
  nor a complete fish script: it gives the pieces (sections, table rows,
  `complete` lines) that such documents are made of.