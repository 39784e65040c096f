"""The builtin commands: echo, cd, pwd, export, unset, env and exit."""

from __future__ import annotations

import os
import sys
from typing import Callable, Sequence

from minish.environment import Environment, split_assignment

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_SPACES = " \t\n\v\f\r"


class ExitRequest(Exception):
    """Raised by ``exit``: the shell should stop with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(f"exit {status}")
        self.status = status


def _out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _err(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


def _builtin_error(builtin: str, arg: str, reason: str) -> None:
    _err(f"{builtin}: '{arg}': {reason}\n")


def _is_name_start(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalpha())


def _is_name_char(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalnum())


# -- numbers ---------------------------------------------------------------


def is_numeric(text: str) -> bool:
    """True for an optional sign followed only by decimal digits."""
    if text[:1] in ("+", "-"):
        text = text[1:]
    return all("0" <= char <= "9" for char in text)


def _to_int64(text: str) -> int:
    """Read a leading signed decimal number; ValueError when out of range."""
    text = text.lstrip(_SPACES)
    sign = 1
    if text[:1] in ("+", "-"):
        if text[0] == "-":
            sign = -1
        text = text[1:]
    digits = ""
    for char in text:
        if not "0" <= char <= "9":
            break
        digits += char
    value = sign * int(digits) if digits else 0
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"{text}: out of range")
    return value


def parse_exit_status(text: str) -> int:
    """Turn an ``exit`` argument into a status between 0 and 255.

    Raises ValueError when the argument is not a number or does not fit a
    64-bit signed integer.
    """
    if not is_numeric(text):
        raise ValueError(f"{text}: numeric argument required")
    return _to_int64(text) & 0xFF


# -- echo ------------------------------------------------------------------


def _is_no_newline_flag(arg: str) -> bool:
    if not arg.startswith("-") or len(arg) == 1:
        return False
    return all(char == "n" or char in _SPACES for char in arg[1:])


def echo(args: Sequence[str]) -> int:
    """Print the arguments; leading ``-n`` flags drop the final newline."""
    words = list(args[1:])
    if words and _is_no_newline_flag(words[0]):
        while words and _is_no_newline_flag(words[0]):
            words.pop(0)
        _out(" ".join(words))
        return 0
    _out(" ".join(words) + "\n")
    return 0


# -- cd and pwd ------------------------------------------------------------


def _getcwd() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def _cd_home(env: Environment) -> int:
    if "HOME" not in env:
        _err("cd: HOME not set\n")
        return 1
    home = env.get("HOME")
    try:
        os.chdir(home if home is not None else "")
    except OSError as exc:
        _builtin_error("cd", "HOME not set", os.strerror(exc.errno or 0))
        return 1
    return 0


def cd(args: Sequence[str], env: Environment) -> int:
    """Change directory, keeping OLDPWD and PWD up to date."""
    saved = _getcwd()
    if saved is None:
        _cd_home(env)
    if len(args) == 1:
        return _cd_home(env)
    if len(args) > 2:
        _err("cd: too many arguments\n")
        return 1
    target = args[1]
    if target.startswith("~"):
        home = env.get("HOME")
        if home is None:
            _err("cd: HOME not set\n")
            return 1
        target = home + target[1:]
    try:
        os.chdir(target)
    except OSError as exc:
        _builtin_error("cd", target, os.strerror(exc.errno or 0))
        return 1
    env.set("OLDPWD", saved, True)
    if "PWD" in env:
        new_pwd = _getcwd()
        if new_pwd is not None:
            env.set("PWD", new_pwd, True)
    return 0


def pwd() -> int:
    """Print the working directory."""
    cwd = _getcwd()
    if cwd is None:
        return 1
    _out(cwd + "\n")
    return 0


# -- export ----------------------------------------------------------------


def _plus_assignment(arg: str) -> tuple[str, str | None] | None:
    """Name and value of a ``NAME+=value`` argument, or None."""
    for i, char in enumerate(arg):
        if char == "=" and i > 0 and arg[i - 1] == "+":
            name, value = split_assignment(arg)
            return name.partition("+")[0], value
    return None


def _not_valid(builtin: str, arg: str) -> None:
    _builtin_error(builtin, arg, "not a valid identifier")


def _export_one(arg: str, env: Environment) -> int:
    if not _is_name_start(arg[:1]):
        _not_valid("export", arg)
        return 1
    plus = _plus_assignment(arg)
    if plus is not None:
        env.append(*plus)
        return 0
    for char in arg:
        if char == "=":
            name, value = split_assignment(arg)
            env.set(name, value, True)
            return 0
        if not _is_name_char(char):
            _not_valid("export", arg)
            return 1
    name, _ = split_assignment(arg)
    env.set(name, None, False)
    return 0


def export(args: Sequence[str], env: Environment) -> int:
    """Define variables, or list every variable when given no argument."""
    if len(args) < 2:
        for line in env.to_strings(quoted=True):
            _out(f"declare -x {line}\n")
        return 0
    status = 0
    for arg in args[1:]:
        if _export_one(arg, env) != 0:
            status = 1
    return status


# -- unset and env ---------------------------------------------------------


def unset(args: Sequence[str], env: Environment) -> int:
    """Remove variables; invalid names are reported but do not fail."""
    for arg in args[1:]:
        if not len(env):
            return 0
        if not _is_name_start(arg[:1]) or not all(_is_name_char(c) for c in arg):
            _not_valid("unset", arg)
            continue
        env.unset(arg)
    return 0


def env_builtin(args: Sequence[str], env: Environment) -> int:
    """Print the exported variables; no arguments are accepted."""
    if not len(env):
        return 0
    if len(args) > 1:
        _err("env: too many arguments\n")
        return 1
    for line in env.to_strings(quoted=False):
        _out(line + "\n")
    return 0


# -- exit ------------------------------------------------------------------


def exit_builtin(args: Sequence[str] | None = None) -> int:
    """Ask the shell to stop.

    Raises ExitRequest, except with too many arguments, where it reports
    the error and returns 1.
    """
    _out("exit\n")
    if args and len(args) > 1:
        if len(args) > 2:
            _err("exit: too many arguments\n")
            return 1
        try:
            status = parse_exit_status(args[1])
        except ValueError:
            _builtin_error("exit", args[1], "numeric argument required")
            raise ExitRequest(2) from None
        raise ExitRequest(status)
    raise ExitRequest(0)


# -- dispatch --------------------------------------------------------------

_BUILTINS: dict[str, Callable[[Sequence[str], Environment], int]] = {
    "echo": lambda args, env: echo(args),
    "cd": cd,
    "pwd": lambda args, env: pwd(),
    "export": export,
    "unset": unset,
    "env": env_builtin,
    "exit": lambda args, env: exit_builtin(args),
}


def run_builtin(args: Sequence[str], env: Environment) -> int | None:
    """Run ``args`` if it names a builtin and return its status, else None."""
    if not args:
        return None
    handler = _BUILTINS.get(args[0])
    if handler is None:
        return None
    return handler(args, env)