"""Syntax checks run on a command line before it is split."""

from __future__ import annotations

NEWLINE = "newline"
_BLANKS = (" ", "\t")
_QUOTES = ("'", '"')


class ShellSyntaxError(Exception):
    """A command line that cannot be run; the shell status becomes 2."""

    status = 2

    def __init__(self, message: str, token: str) -> None:
        super().__init__(message)
        self.token = token


def _unexpected(token: str) -> ShellSyntaxError:
    return ShellSyntaxError(f"syntax error near unexpected token `{token}'", token)


def _unclosed(quote: str) -> ShellSyntaxError:
    return ShellSyntaxError(
        f"unexpected EOF while looking for matching `{quote}'", quote
    )


def _at(line: str, index: int) -> str:
    return line[index] if index < len(line) else ""


def _skip_blanks(line: str, index: int) -> int:
    while index < len(line) and line[index] in _BLANKS:
        index += 1
    return index


def _next_quote_state(char: str, state: str | None) -> str | None:
    """Track which quote, if any, the scanner is inside."""
    if state is not None:
        return None if char == state else state
    return char if char in _QUOTES else None


def is_blank(line: str) -> bool:
    """True when the line holds nothing but spaces and tabs."""
    return all(char in _BLANKS for char in line)


def check_pipes(line: str) -> None:
    """Reject a leading pipe, a trailing pipe or two pipes in a row."""
    i = _skip_blanks(line, 0)
    if _at(line, i) == "|":
        if _at(line, i + 1) == "|":
            raise _unexpected("||")
        i += 1
        if _at(line, i) not in ("", *_BLANKS):
            raise _unexpected("|")
        i = _skip_blanks(line, i)
        if _at(line, i) == "|":
            raise _unexpected("||")
        raise _unexpected("|")

    state = None
    i = 0
    while i < len(line):
        state = _next_quote_state(line[i], state)
        if state is None and line[i] == "|":
            i = _skip_blanks(line, i + 1)
            if _at(line, i) == "|":
                raise _unexpected("||")
            if i >= len(line):
                raise _unexpected("|")
        i += 1


def check_quotes(line: str) -> None:
    """Reject a line that leaves a quote open."""
    state = None
    for char in line:
        state = _next_quote_state(char, state)
    if state is not None:
        raise _unclosed(state)


def _check_next_redirect(line: str, index: int) -> None:
    char = _at(line, index)
    if char in ("<", ">"):
        raise _unexpected(char * 2 if _at(line, index + 1) == char else char)


def _check_after_operator(line: str, index: int, operator: str) -> None:
    index += 1
    if _at(line, index) == operator:
        index += 1
    index = _skip_blanks(line, index)
    _check_next_redirect(line, index)
    if index >= len(line):
        raise _unexpected(NEWLINE)
    if _at(line, index) == "|":
        raise _unexpected("||" if _at(line, index + 1) == "|" else "|")


def check_redirections(line: str) -> None:
    """Reject a redirection that is not followed by a file name."""
    state = None
    for i, char in enumerate(line):
        state = _next_quote_state(char, state)
        if state is not None:
            continue
        if char == "<" and _at(line, i + 1) == ">":
            raise _unexpected(NEWLINE)
        if char in ("<", ">"):
            _check_after_operator(line, i, char)


def check_syntax(line: str) -> bool:
    """Check a whole command line.

    Returns False for a blank line (nothing to run), True for a line that
    may be run, and raises ShellSyntaxError otherwise.
    """
    if is_blank(line):
        return False
    check_pipes(line)
    check_quotes(line)
    check_redirections(line)
    return True