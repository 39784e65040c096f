import pytest

from minish.environment import Environment, Variable
from minish.expansion import (
    expand_heredoc_line,
    is_expandable,
    lookup,
    split_value_words,
)
from minish.parse_state import SEPARATOR


@pytest.fixture
def env():
    return Environment(
        [Variable("USER", "alice"), Variable("HOME", "/home/alice"), Variable("EMPTY", None)]
    )


@pytest.mark.parametrize(
    "value, words",
    [("a  b c", ["a", "b", "c"]), ("  lead", ["lead"]), ("one", ["one"])],
)
def test_split_value_words(value, words):
    assert split_value_words(value) == SEPARATOR.join(words)


def test_split_value_words_only_spaces():
    assert split_value_words("   ") == ""


def test_split_value_words_keeps_tabs():
    assert split_value_words("a\tb") == "a\tb"


def test_lookup(env):
    assert lookup(env, "HOME") == "/home/alice"
    assert lookup(env, "MISSING") is None
    assert lookup(env, "EMPTY") is None


@pytest.mark.parametrize("line", ["$HOME", "$?", "$_x", "$a1"])
def test_is_expandable_true(line):
    assert is_expandable(line, 0)


@pytest.mark.parametrize("line", ["$$", "$1", "$", "a", "$ x", "$-"])
def test_is_expandable_false(line):
    assert not is_expandable(line, 0)


def test_plain_line_unchanged(env):
    line = "no variables here"
    assert expand_heredoc_line(line, env, 0) == line


def test_variable_expanded(env):
    assert expand_heredoc_line("x$USER-y", env, 0) == "x" + "alice" + "-y"


def test_repeated_variables(env):
    assert expand_heredoc_line("$USER$USER", env, 0) == "alice" * 2


def test_status_expanded(env):
    assert expand_heredoc_line("$?abc", env, 127) == str(127) + "abc"


def test_unknown_variable_vanishes(env):
    assert expand_heredoc_line("a$NOPE b", env, 0) == "a b"


@pytest.mark.parametrize("line", ["$$", "$1x", "end$", "$ "])
def test_non_expandable_dollar_kept(env, line):
    assert expand_heredoc_line(line, env, 0) == line