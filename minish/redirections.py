"""Open the files and here-documents named by a command's redirections."""

from __future__ import annotations

import os
import sys
import tempfile
from typing import Callable, Optional

from minish.commands import Command, Redirect, RedirectKind
from minish.environment import Environment
from minish.expansion import expand_heredoc_line

ReadLine = Callable[[str], Optional[str]]

HEREDOC_PROMPT = "> "
_INPUT_KINDS = (RedirectKind.IN, RedirectKind.HEREDOC)


class RedirectionError(Exception):
    """A redirection file could not be opened; the shell status becomes 1."""

    status = 1

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class HeredocInterrupted(Exception):
    """Reading a here-document was interrupted; the status becomes 130."""

    status = 130

    def __init__(self, delimiter: str) -> None:
        super().__init__(f"here-document `{delimiter}' interrupted")
        self.delimiter = delimiter


def _read_stdin_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _error(command: Command, path: str, exc: OSError) -> RedirectionError:
    reason = os.strerror(exc.errno) if exc.errno else str(exc)
    name = command.words[0] if command.words else ""
    prefix = f"{name}: {path}" if name else path
    return RedirectionError(f"{prefix}: {reason}", path)


def _close(fd: int | None) -> None:
    if fd is not None:
        os.close(fd)


def _is_delimiter(line: str, delimiter: str) -> bool:
    return line == delimiter and not line.startswith("\n")


def read_heredoc(
    delimiter: str,
    env: Environment,
    last_status: int = 0,
    read_line: ReadLine | None = None,
) -> str:
    """Read here-document lines until ``delimiter`` and return their text.

    Each line has its variables expanded and ends with a newline. End of
    input stops the document with a warning; an interrupt raises
    HeredocInterrupted.
    """
    read = read_line or _read_stdin_line
    parts: list[str] = []
    while True:
        try:
            line = read(HEREDOC_PROMPT)
        except KeyboardInterrupt:
            raise HeredocInterrupted(delimiter) from None
        if line is None:
            sys.stderr.write(
                "warning: here-document at line 1 delimited by end-of-file "
                f"(wanted `{delimiter}')\n"
            )
            sys.stderr.flush()
            break
        expanded = expand_heredoc_line(line, env, last_status)
        if not _is_delimiter(expanded, delimiter):
            parts.append(expanded + "\n")
        if _is_delimiter(line, delimiter):
            break
    return "".join(parts)


def _heredoc_fd(text: str) -> int:
    """A readable descriptor positioned at the start of ``text``."""
    with tempfile.TemporaryFile() as handle:
        handle.write(text.encode("utf-8", "surrogateescape"))
        handle.flush()
        handle.seek(0)
        return os.dup(handle.fileno())


def _collect_heredocs(
    command: Command,
    env: Environment,
    last_status: int,
    read_line: ReadLine | None,
) -> int | None:
    """Read every here-document; keep the last one if it is the last input."""
    fd: int | None = None
    last_heredoc = -1
    for index, redirect in enumerate(command.redirects):
        if redirect.kind is RedirectKind.HEREDOC:
            _close(fd)
            fd = None
            text = read_heredoc(redirect.target, env, last_status, read_line)
            fd = _heredoc_fd(text)
            last_heredoc = index
        elif redirect.kind is RedirectKind.IN and index > last_heredoc:
            last_heredoc = -1
    if last_heredoc == -1 and fd is not None:
        os.close(fd)
        fd = None
    return fd


def _touch_output(command: Command, redirect: Redirect) -> None:
    if redirect.kind is RedirectKind.OUT:
        flags = os.O_CREAT | os.O_TRUNC | os.O_WRONLY
    else:
        flags = os.O_CREAT | os.O_APPEND
    try:
        fd = os.open(redirect.target, flags, 0o644)
    except OSError as exc:
        raise _error(command, redirect.target, exc) from None
    os.close(fd)


def _open_output(command: Command, redirect: Redirect) -> int:
    flags = os.O_WRONLY
    if redirect.kind is RedirectKind.OUT_APPEND:
        flags |= os.O_APPEND
    try:
        return os.open(redirect.target, flags, 0o644)
    except OSError as exc:
        raise _error(command, redirect.target, exc) from None


def open_redirections(
    command: Command,
    env: Environment,
    last_status: int = 0,
    read_line: ReadLine | None = None,
) -> tuple[int | None, int | None]:
    """Open the command's redirections in order.

    Returns ``(fd_in, fd_out)``; None stands for the standard stream. All
    here-documents are read first. Every output file is created, but only
    the last one is returned. The first file that cannot be opened raises
    RedirectionError and stops the rest.
    """
    if not command.redirects:
        return None, None
    heredoc_fd = _collect_heredocs(command, env, last_status, read_line)
    input_fd: int | None = None
    fd_out: int | None = None
    try:
        outfile: Redirect | None = None
        for redirect in command.redirects:
            if redirect.kind in _INPUT_KINDS:
                _close(input_fd)
                input_fd = None
                if redirect.kind is RedirectKind.IN:
                    try:
                        input_fd = os.open(redirect.target, os.O_RDONLY)
                    except OSError as exc:
                        raise _error(command, redirect.target, exc) from None
            else:
                _touch_output(command, redirect)
                outfile = redirect
        if outfile is not None:
            fd_out = _open_output(command, outfile)
    except BaseException:
        _close(heredoc_fd)
        _close(input_fd)
        raise
    if heredoc_fd is not None:
        _close(input_fd)
        return heredoc_fd, fd_out
    return input_fd, fd_out


def apply_redirections(fd_in: int | None, fd_out: int | None) -> None:
    """Put the descriptors in place of standard input and output.

    The given descriptors are closed afterwards; None leaves a stream as
    it is.
    """
    if fd_in is not None:
        os.dup2(fd_in, 0)
    if fd_out is not None:
        os.dup2(fd_out, 1)
    _close(fd_in)
    _close(fd_out)