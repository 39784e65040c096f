"""Variable expansion helpers."""

from __future__ import annotations

from minish.environment import Environment
from minish.parse_state import SEPARATOR


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def split_value_words(value: str) -> str:
    """Split a variable's value on spaces into separator-joined words."""
    return SEPARATOR.join(word for word in value.split(" ") if word)


def lookup(env: Environment, name: str) -> str | None:
    """Value of ``name`` in ``env``, or None when unset or valueless."""
    return env.get(name)


def is_expandable(line: str, index: int) -> bool:
    """True when a ``$`` at ``index`` starts a variable or ``$?``."""
    if line[index : index + 1] != "$":
        return False
    following = line[index + 1 : index + 2]
    if following in ("", "$") or following.isdigit():
        return False
    return _is_alpha(following) or following in ("_", "?")


def _expand_at(
    line: str, index: int, env: Environment, last_status: int
) -> tuple[int, str]:
    index += 1
    if line[index : index + 1] == "?":
        return index + 1, str(last_status)
    end = index
    while end < len(line) and _is_name_char(line[end]):
        end += 1
    return end, lookup(env, line[index:end]) or ""


def expand_heredoc_line(line: str, env: Environment, last_status: int) -> str:
    """Expand ``$NAME`` and ``$?`` in one line of a here-document."""
    out: list[str] = []
    i = 0
    while i < len(line):
        while i < len(line) and is_expandable(line, i):
            i, text = _expand_at(line, i, env, last_status)
            out.append(text)
        if i < len(line):
            out.append(line[i])
            i += 1
    return "".join(out)