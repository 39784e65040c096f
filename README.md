# minish

The pieces of a small POSIX-style shell, usable from Python: a syntax checker
for command lines, a splitter that turns a line into commands while expanding
variables, the builtin commands, and the code that opens redirection files and
reads here-documents.

## Installation

```
pip install .
```

## Modules

### `minish.environment`

`Environment` is an ordered set of shell variables (`Variable` objects with
`name`, `value` and `exported`).

- `Environment.from_envp(["NAME=value", ...])` builds one from `NAME=value`
  strings; `Environment.from_cwd()` builds one holding only `PWD`.
- `get`, `set`, `append` (as `export NAME+=value` does), `unset`, `in`, `len`
  and iteration.
- `to_strings(quoted=False)` gives `NAME=value` for exported variables;
  `to_strings(quoted=True)` gives `NAME="value"` for exported ones and the bare
  name for the others.
- `split_assignment("NAME=value")` returns `("NAME", "value")`, with `None` as
  the value when there is no `=` or nothing after it.

### `minish.syntax`

`check_syntax(line)` returns `False` for a blank line, `True` for a line that
may be run, and raises `ShellSyntaxError` (with `status` 2 and the offending
`token`) for a leading, trailing or doubled pipe, an unclosed quote, or a
redirection with no file name. `check_pipes`, `check_quotes`,
`check_redirections` and `is_blank` run the checks one at a time.

### `minish.splitter`

`parse_line(line, env, last_status=0)` splits a line into a list of
`Command` objects, one per stage of the pipeline. Quotes are removed, `$NAME`
and `$?` are expanded outside single quotes, and `""` or `''` give an empty
argument. A redirection target that names an unset variable raises
`AmbiguousRedirectError` (`status` 1). `Splitter(env, last_status).split(line)`
does the same.

```python
from minish.environment import Environment
from minish.splitter import parse_line
from minish.syntax import check_syntax

env = Environment.from_envp(["HOME=/tmp", "NAME=world"])
line = "echo hello $NAME > out.txt | cat"
if check_syntax(line):
    for command in parse_line(line, env, 0):
        print(command.words, command.redirects, command.is_builtin)
```

### `minish.commands`

`Command` holds `words`, a list of `Redirect` (`kind`, `target`) and
`is_builtin`. `RedirectKind` has `IN`, `OUT`, `OUT_APPEND` and `HEREDOC`.
`Command.has_input_redirect()` tells whether it reads from a file or a
here-document.

### `minish.expansion` and `minish.parse_state`

`expand_heredoc_line(line, env, last_status)` expands `$NAME` and `$?` in one
here-document line. `minish.parse_state` holds the scanner `State`, the
`ParseBuffer` the splitter fills, and the state transition functions.

### `minish.builtins`

`run_builtin(args, env)` runs `echo` (with `-n`), `cd`, `pwd`, `export`,
`unset`, `env` or `exit` against an `Environment` and returns its status, or
`None` when `args[0]` is not a builtin. Each builtin is also a function of its
own (`echo`, `cd`, `pwd`, `export`, `unset`, `env_builtin`, `exit_builtin`).
`exit` raises `ExitRequest` carrying the status (2 for a non-numeric
argument); with too many arguments it reports the error and returns 1.
`parse_exit_status` and `is_numeric` check an `exit` argument.

### `minish.redirections`

- `open_redirections(command, env, last_status=0, read_line=None)` reads every
  here-document, opens the redirection files in order, creates every output
  file and returns `(fd_in, fd_out)`, with `None` for a standard stream. A file
  that cannot be opened raises `RedirectionError` (`status` 1).
- `read_heredoc(delimiter, env, last_status=0, read_line=None)` reads lines
  until the delimiter and returns the expanded text. `read_line` is a callable
  taking a prompt and returning a line, or `None` at end of input; by default
  standard input is read. An interrupt raises `HeredocInterrupted`
  (`status` 130).
- `apply_redirections(fd_in, fd_out)` puts the descriptors in place of
  standard input and output and closes them.

## What it does not do

The package has no interactive prompt, no read-eval loop and no command to
start. It does not search `PATH`, start external programs, build pipelines of
processes, or install signal handlers; those are left to the code that uses
these modules.

## Running the tests

```
pip install .[test]
pytest
```