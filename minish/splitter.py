"""Split a command line into commands, expanding variables on the way."""

from __future__ import annotations

from minish.commands import Command, RedirectKind
from minish.environment import Environment
from minish.expansion import lookup, split_value_words
from minish.parse_state import (
    EMPTY_SPACE,
    SEPARATOR,
    ParseBuffer,
    State,
    next_redirect_state,
    next_state,
)

_BLANKS = (" ", "\t")
_WORD_BREAKS = " \t<>|'\""
_REDIRECT_BREAKS = "<>|'\""
_HEREDOC_DELIMITER_ENDS = " \t<>|"
# Characters after which a lone "$" or "$?" ends a word; "" is end of input.
_DOLLAR_ENDS = ("", " ", "\t", '"', "'")
_EMPTY_ARGUMENT = SEPARATOR + EMPTY_SPACE + SEPARATOR


class AmbiguousRedirectError(Exception):
    """A redirection target expanded from an unset variable."""

    status = 1

    def __init__(self, name: str) -> None:
        super().__init__(f"${name}: ambiguous redirect")
        self.name = name


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


class Splitter:
    """Scan a command line character by character into Command objects."""

    def __init__(self, env: Environment, last_status: int = 0) -> None:
        self.env = env
        self.last_status = last_status
        self._line = ""
        self._i = 0
        self._state = State.NOT_INIT
        self._buf = ParseBuffer()

    def split(self, line: str) -> list[Command]:
        """Split ``line`` into the commands of its pipeline.

        Raises AmbiguousRedirectError when a redirection target names an
        unset variable.
        """
        self._line = line
        self._i = 0
        self._state = State.NOT_INIT
        self._buf = ParseBuffer()
        while self._i < len(line):
            self._empty_args()
            self._buf.quote_end = False
            if self._state > State.REDIRECT:
                self._state = next_state(self._state, self._at(), self._buf)
                self._add_to_word()
            else:
                self._state = next_redirect_state(self._state, self._at(), self._buf)
                self._add_to_redirect()
            if self._i < len(line):
                self._i += 1
        self._buf.finish_command()
        return self._buf.commands()

    # -- helpers -----------------------------------------------------------

    def _at(self, offset: int = 0) -> str:
        index = self._i + offset
        return self._line[index] if 0 <= index < len(self._line) else ""

    def _in_word(self) -> bool:
        return self._state >= State.SPACE_SEP

    # -- empty arguments ---------------------------------------------------

    def _empty_args(self) -> None:
        if self._state in (State.NOT_INIT, State.SPACE_SEP):
            add = self._buf.add_word
        elif self._state in (State.REDIRECT, State.REDIRECT_END):
            add = self._buf.add_redirect
        else:
            return
        while True:
            saved = self._i
            for quote in ('"', "'"):
                if self._at() == quote and self._at(1) == quote:
                    self._i += 2
                    if not self._buf.quote_end and self._at() in ("", *_BLANKS):
                        add(_EMPTY_ARGUMENT)
            if saved == self._i:
                return

    # -- ordinary characters -----------------------------------------------

    def _add_to_word(self) -> None:
        self._expand()
        char = self._at()
        if not char:
            return
        if self._state is State.NOT_INIT and char not in _WORD_BREAKS:
            self._buf.add_word(char)
            return
        self._split_separators()
        char = self._at()
        if self._state is State.SINGLE_QUOTE and char != "'":
            self._buf.add_word(char)
        elif self._state is State.DOUBLE_QUOTE and char != '"':
            self._buf.add_word(char)

    def _add_to_redirect(self) -> None:
        self._expand()
        char = self._at()
        if not char:
            return
        if self._state is State.REDIRECT and char not in _REDIRECT_BREAKS:
            self._buf.add_redirect(char)
            return
        self._split_separators()
        char = self._at()
        if self._state is State.REDIRECT_SINGLE_QUOTE and char != "'":
            self._buf.add_redirect(char)
        elif self._state is State.REDIRECT_DOUBLE_QUOTE and char != '"':
            self._buf.add_redirect(char)

    # -- pipes and redirection operators -----------------------------------

    def _split_separators(self) -> None:
        if self._state is State.NOT_INIT and self._at() == "|":
            self._buf.finish_command()
        if self._state is State.NOT_INIT and self._at() == ">" and self._at(1) == ">":
            self._start_redirect(RedirectKind.OUT_APPEND, 2)
        if self._state is State.NOT_INIT and self._at() == "<" and self._at(1) == "<":
            self._start_redirect(RedirectKind.HEREDOC, 2)
        if self._state is State.NOT_INIT and self._at() == ">":
            self._start_redirect(RedirectKind.OUT, 1)
        if self._state is State.NOT_INIT and self._at() == "<":
            self._start_redirect(RedirectKind.IN, 1)

    def _start_redirect(self, kind: RedirectKind, width: int) -> None:
        self._buf.add_redirect_kind(kind)
        self._state = State.REDIRECT
        self._i += width
        while self._i < len(self._line) and self._line[self._i] in _BLANKS:
            self._i += 1
        # The main loop steps over the last character consumed here.
        self._i -= 1

    # -- variable expansion ------------------------------------------------

    def _expand(self) -> None:
        if self._special_dollar():
            return
        line = self._line
        self._i += 1
        start = self._i
        while self._i < len(line) and _is_name_char(line[self._i]):
            self._i += 1
        name = line[start : self._i]
        value = lookup(self.env, name)
        if value is not None:
            text = split_value_words(value)
            if self._in_word():
                self._buf.add_word(text)
            else:
                self._buf.add_redirect(text)
        elif self._state <= State.REDIRECT:
            raise AmbiguousRedirectError(name)
        self._separate_after_variable()
        if self._at() == "$":
            self._expand()
        if self._in_word():
            self._state = next_state(self._state, self._at(), self._buf)
        else:
            self._state = next_redirect_state(self._state, self._at(), self._buf)

    def _separate_after_variable(self) -> None:
        if self._at() in _BLANKS and self._at():
            if self._state is State.NOT_INIT:
                self._buf.separate_word()
            elif self._state is State.REDIRECT:
                self._buf.separate_redirect()

    def _special_dollar(self) -> bool:
        """Handle every ``$`` that is not a plain variable reference."""
        if self._heredoc_delimiter_dollar():
            return True
        if self._skip_special():
            return True
        return self._status_dollar()

    def _heredoc_delimiter_dollar(self) -> bool:
        if self._at() != "$" or not self._buf.is_heredoc:
            return False
        while self._at() and self._at() not in _HEREDOC_DELIMITER_ENDS:
            self._buf.add_redirect(self._at())
            self._i += 1
        char = self._at()
        state = self._state
        if (
            state is State.REDIRECT
            or (state is State.REDIRECT_SINGLE_QUOTE and char == "'")
            or (state is State.REDIRECT_DOUBLE_QUOTE and char == '"')
        ):
            self._buf.separate_redirect()
        self._buf.is_heredoc = False
        return True

    def _skip_special(self) -> bool:
        char, following = self._at(), self._at(1)
        state = self._state
        if char == "$" and following == '"':
            if state is State.DOUBLE_QUOTE:
                self._buf.add_word("$")
                self._i += 2
                return True
            if state is State.REDIRECT_DOUBLE_QUOTE:
                self._buf.add_redirect("$")
                self._i += 2
                return True
        if char != "$":
            return True
        if state in (State.SINGLE_QUOTE, State.REDIRECT_SINGLE_QUOTE):
            return True
        if following in _DOLLAR_ENDS:
            # A lone "$" stays literal; the caller copies it.
            if state is State.SPACE_SEP:
                self._buf.separate_word()
            if state in (State.REDIRECT, State.REDIRECT_END):
                self._buf.separate_redirect()
            return True
        return False

    def _status_dollar(self) -> bool:
        if not (self._at() == "$" and self._at(1) == "?"):
            return False
        code = str(self.last_status)
        state = self._state
        if state in (State.DOUBLE_QUOTE, State.NOT_INIT, State.SPACE_SEP):
            self._buf.add_word(code)
        if state in (State.REDIRECT_DOUBLE_QUOTE, State.REDIRECT):
            self._buf.add_redirect(code)
        self._i += 2
        if self._at() in _DOLLAR_ENDS:
            if state in (State.SPACE_SEP, State.NOT_INIT):
                self._buf.separate_word()
            if state in (State.REDIRECT, State.REDIRECT_END):
                self._buf.separate_redirect()
        return True


def parse_line(line: str, env: Environment, last_status: int = 0) -> list[Command]:
    """Split ``line`` into commands with builtins already marked."""
    return Splitter(env, last_status).split(line)