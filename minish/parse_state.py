"""Scanner states and the buffers that collect words while splitting."""

from __future__ import annotations

from enum import IntEnum

from minish.commands import Command, Redirect, RedirectKind

# Marks the boundary between two words inside a buffer.
SEPARATOR = "\x01"
# Stands for an explicitly empty argument such as "" or ''.
EMPTY_SPACE = "\x02"

_BLANKS = " \t"
_REDIRECT_ENDS = " \t<>|"


class State(IntEnum):
    """Where the scanner stands.

    Every redirection state orders at or below REDIRECT; every state of an
    ordinary word orders at or above SPACE_SEP.
    """

    REDIRECT_SINGLE_QUOTE = 1
    REDIRECT_DOUBLE_QUOTE = 2
    REDIRECT_END = 3
    REDIRECT = 4
    SPACE_SEP = 5
    NOT_INIT = 6
    SINGLE_QUOTE = 7
    DOUBLE_QUOTE = 8


def _one_of(char: str, chars: str) -> bool:
    """Membership where the end of input ("") belongs to every set."""
    return char == "" or char in chars


class ParseBuffer:
    """Text gathered for the command being split, and the finished ones."""

    def __init__(self) -> None:
        self.word_text = ""
        self.redirect_text = ""
        self.redirect_kinds: list[RedirectKind] = []
        self.is_heredoc = False
        self.quote_end = False
        self._commands: list[Command] = []

    def add_word(self, text: str) -> None:
        """Append text to the current word."""
        self.word_text += text

    def add_redirect(self, text: str) -> None:
        """Append text to the current redirection target."""
        self.redirect_text += text

    def separate_word(self) -> None:
        """End the current word."""
        self.word_text += SEPARATOR

    def separate_redirect(self) -> None:
        """End the current redirection target."""
        self.redirect_text += SEPARATOR

    def add_redirect_kind(self, kind: RedirectKind) -> None:
        """Record the operator of the next redirection."""
        self.redirect_kinds.append(kind)
        if kind is RedirectKind.HEREDOC:
            self.is_heredoc = True

    def finish_command(self) -> None:
        """Turn the gathered text into a Command and start afresh."""
        self.is_heredoc = False
        words = replace_empty_markers(_split_words(self.word_text))
        targets = replace_empty_markers(_split_words(self.redirect_text))
        redirects = [
            Redirect(kind, target) for kind, target in zip(self.redirect_kinds, targets)
        ]
        self._commands.append(Command(words, redirects))
        self.redirect_kinds = []
        self.word_text = ""
        self.redirect_text = ""

    def commands(self) -> list[Command]:
        """The commands finished so far, in order."""
        return list(self._commands)


def _split_words(text: str) -> list[str]:
    return [word for word in text.split(SEPARATOR) if word]


def replace_empty_markers(words: list[str]) -> list[str]:
    """Cut each word at its first empty-argument marker."""
    return [word.partition(EMPTY_SPACE)[0] for word in words]


def next_state(state: State, char: str, buffer: ParseBuffer) -> State:
    """Advance the scanner over ``char`` outside a redirection."""
    if state is State.SPACE_SEP and _one_of(char, _BLANKS):
        return State.SPACE_SEP
    if state is State.NOT_INIT and _one_of(char, _BLANKS):
        buffer.separate_word()
        return State.SPACE_SEP
    for quote, inside in (("'", State.SINGLE_QUOTE), ('"', State.DOUBLE_QUOTE)):
        if char == quote and state is inside:
            buffer.quote_end = True
            return State.NOT_INIT
        if char == quote and state in (State.NOT_INIT, State.SPACE_SEP):
            return inside
    if state in (State.SINGLE_QUOTE, State.DOUBLE_QUOTE):
        return state
    return State.NOT_INIT


def next_redirect_state(state: State, char: str, buffer: ParseBuffer) -> State:
    """Advance the scanner over ``char`` inside a redirection target."""
    if state is State.REDIRECT and _one_of(char, _REDIRECT_ENDS):
        buffer.separate_redirect()
        return State.NOT_INIT
    if state is State.REDIRECT and char == "'":
        return State.REDIRECT_SINGLE_QUOTE
    if state is State.REDIRECT and char == '"':
        return State.REDIRECT_DOUBLE_QUOTE
    if (char == "'" and state is State.REDIRECT_SINGLE_QUOTE) or (
        char == '"' and state is State.REDIRECT_DOUBLE_QUOTE
    ):
        buffer.quote_end = True
        return State.REDIRECT
    if state in (State.REDIRECT_SINGLE_QUOTE, State.REDIRECT_DOUBLE_QUOTE):
        return state
    return State.REDIRECT