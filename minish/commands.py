"""Parsed commands: words, redirections and builtin detection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

_BUILTIN_NAMES = ("echo", "cd", "pwd", "export", "unset", "env", "exit")


class RedirectKind(Enum):
    """The four redirection operators."""

    IN = "<"
    OUT = ">"
    OUT_APPEND = ">>"
    HEREDOC = "<<"


@dataclass
class Redirect:
    """One redirection: its operator and the file name or delimiter."""

    kind: RedirectKind
    target: str


def is_builtin_name(name: str | None) -> bool:
    """True when ``name`` is a non-empty leading part of a builtin's name.

    A name longer than every builtin never matches; a shortened one such
    as ``ec`` does.
    """
    if not name:
        return False
    return any(builtin.startswith(name) for builtin in _BUILTIN_NAMES)


@dataclass
class Command:
    """One simple command of a pipeline."""

    words: list[str] = field(default_factory=list)
    redirects: list[Redirect] = field(default_factory=list)
    is_builtin: bool = field(init=False)

    def __post_init__(self) -> None:
        self.is_builtin = bool(self.words) and is_builtin_name(self.words[0])

    def has_input_redirect(self) -> bool:
        """True when the command reads from a file or a here-document."""
        return any(
            r.kind in (RedirectKind.IN, RedirectKind.HEREDOC) for r in self.redirects
        )