import os

import pytest

from minish.builtins import (
    ExitRequest,
    cd,
    echo,
    env_builtin,
    exit_builtin,
    export,
    is_numeric,
    parse_exit_status,
    pwd,
    run_builtin,
    unset,
)
from minish.environment import Environment


def make_env(*entries):
    return Environment.from_envp(entries)


# -- echo -------------------------------------------------------------------


def test_echo_joins_arguments(capsys):
    assert echo(["echo", "hello", "world"]) == 0
    assert capsys.readouterr().out == "hello world\n"


def test_echo_without_arguments_prints_newline(capsys):
    assert echo(["echo"]) == 0
    assert capsys.readouterr().out == "\n"


@pytest.mark.parametrize(
    "args, expected",
    [
        (["echo", "-n", "hi"], "hi"),
        (["echo", "-nnn", "-n", "a", "b"], "a b"),
        (["echo", "-n"], ""),
    ],
)
def test_echo_flags_drop_newline(capsys, args, expected):
    assert echo(args) == 0
    assert capsys.readouterr().out == expected


@pytest.mark.parametrize("flag", ["-nx", "-", "--n"])
def test_echo_non_flags_are_printed(capsys, flag):
    echo(["echo", flag, "a"])
    assert capsys.readouterr().out == f"{flag} a\n"


# -- numbers ----------------------------------------------------------------


@pytest.mark.parametrize("text", ["42", "+7", "-3", "+", ""])
def test_is_numeric_accepts(text):
    assert is_numeric(text) is True


@pytest.mark.parametrize("text", ["4a", " 1", "1.0", "--1"])
def test_is_numeric_rejects(text):
    assert is_numeric(text) is False


def test_parse_exit_status_keeps_small_values():
    for n in (0, 1, 42, 255):
        assert parse_exit_status(str(n)) == n


def test_parse_exit_status_wraps_to_a_byte():
    for text in ("256", "-1", "9223372036854775807", "-9223372036854775808"):
        assert 0 <= parse_exit_status(text) <= 255
    assert parse_exit_status("-1") == 255


@pytest.mark.parametrize(
    "text", ["abc", "9223372036854775808", "-9223372036854775809", "1x"]
)
def test_parse_exit_status_rejects(text):
    with pytest.raises(ValueError):
        parse_exit_status(text)


# -- exit -------------------------------------------------------------------


def test_exit_without_arguments(capsys):
    with pytest.raises(ExitRequest) as info:
        exit_builtin(["exit"])
    assert info.value.status == 0
    assert capsys.readouterr().out == "exit\n"


def test_exit_with_status():
    with pytest.raises(ExitRequest) as info:
        exit_builtin(["exit", "42"])
    assert info.value.status == 42


def test_exit_with_bad_argument(capsys):
    with pytest.raises(ExitRequest) as info:
        exit_builtin(["exit", "abc"])
    assert info.value.status == 2
    assert "numeric argument required" in capsys.readouterr().err


def test_exit_with_too_many_arguments(capsys):
    assert exit_builtin(["exit", "1", "2"]) == 1
    captured = capsys.readouterr()
    assert captured.err == "exit: too many arguments\n"


# -- cd and pwd -------------------------------------------------------------


def test_cd_changes_directory_and_updates_env(tmp_path, monkeypatch):
    start = tmp_path / "start"
    target = tmp_path / "target"
    start.mkdir()
    target.mkdir()
    monkeypatch.chdir(start)
    before = os.getcwd()
    env = make_env(f"PWD={before}")
    assert cd(["cd", str(target)], env) == 0
    assert os.path.samefile(os.getcwd(), target)
    assert env.get("OLDPWD") == before
    assert env.get("PWD") == os.getcwd()


def test_cd_does_not_create_pwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    env = make_env("A=1")
    assert cd(["cd", str(tmp_path)], env) == 0
    assert "PWD" not in env


def test_cd_too_many_arguments(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert cd(["cd", "a", "b"], make_env()) == 1
    assert capsys.readouterr().err == "cd: too many arguments\n"


def test_cd_missing_directory(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    missing = str(tmp_path / "nowhere")
    assert cd(["cd", missing], make_env()) == 1
    assert missing in capsys.readouterr().err
    assert os.path.samefile(os.getcwd(), tmp_path)


def test_cd_without_argument_goes_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(tmp_path)
    assert cd(["cd"], make_env(f"HOME={home}")) == 0
    assert os.path.samefile(os.getcwd(), home)


def test_cd_without_home(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert cd(["cd"], make_env("A=1")) == 1
    assert "HOME not set" in capsys.readouterr().err


def test_cd_tilde_expands_home(tmp_path, monkeypatch):
    sub = tmp_path / "sub"
    sub.mkdir()
    monkeypatch.chdir("/")
    assert cd(["cd", "~/sub"], make_env(f"HOME={tmp_path}")) == 0
    assert os.path.samefile(os.getcwd(), sub)


def test_pwd_prints_cwd(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert pwd() == 0
    assert capsys.readouterr().out == os.getcwd() + "\n"


# -- export -----------------------------------------------------------------


def test_export_assignment():
    env = make_env("PATH=/bin")
    assert export(["export", "A=1"], env) == 0
    assert env.get("A") == "1"
    assert "A=1" in env.to_strings()


def test_export_name_only_is_not_exported():
    env = make_env("PATH=/bin")
    assert export(["export", "B"], env) == 0
    assert "B" in env
    assert env.get("B") is None
    assert "B" in env.to_strings(quoted=True)
    assert all(not line.startswith("B") for line in env.to_strings())


def test_export_overwrites_existing():
    env = make_env("A=old")
    export(["export", "A=new"], env)
    assert env.get("A") == "new"


def test_export_name_only_keeps_value():
    env = make_env("A=keep")
    export(["export", "A"], env)
    assert env.get("A") == "keep"


def test_export_append():
    env = make_env("A=1")
    assert export(["export", "A+=2"], env) == 0
    assert env.get("A") == "12"
    export(["export", "N+=x"], env)
    assert env.get("N") == "x"


@pytest.mark.parametrize("arg", ["1A=x", "A-B=x", "=x", ""])
def test_export_invalid_identifier(capsys, arg):
    env = make_env("PATH=/bin")
    assert export(["export", arg], env) == 1
    assert "not a valid identifier" in capsys.readouterr().err


def test_export_reports_failure_but_keeps_going():
    env = make_env("PATH=/bin")
    assert export(["export", "1bad", "GOOD=yes"], env) == 1
    assert env.get("GOOD") == "yes"


def test_export_listing(capsys):
    env = make_env("A=1")
    export(["export", "B"], env)
    capsys.readouterr()
    assert export(["export"], env) == 0
    assert capsys.readouterr().out == 'declare -x A="1"\ndeclare -x B\n'


# -- unset and env ----------------------------------------------------------


def test_unset_removes_variables():
    env = make_env("A=1", "B=2", "C=3")
    assert unset(["unset", "A", "C"], env) == 0
    assert [v.name for v in env] == ["B"]


def test_unset_invalid_name_still_succeeds(capsys):
    env = make_env("A=1")
    assert unset(["unset", "1A"], env) == 0
    assert "not a valid identifier" in capsys.readouterr().err
    assert env.get("A") == "1"


def test_env_prints_exported(capsys):
    env = make_env("A=1", "B=2")
    export(["export", "HIDDEN"], env)
    capsys.readouterr()
    assert env_builtin(["env"], env) == 0
    assert capsys.readouterr().out == "A=1\nB=2\n"


def test_env_rejects_arguments(capsys):
    assert env_builtin(["env", "x"], make_env("A=1")) == 1
    assert capsys.readouterr().err == "env: too many arguments\n"


# -- dispatch ---------------------------------------------------------------


def test_run_builtin_unknown_command():
    assert run_builtin(["ls", "-l"], make_env()) is None


def test_run_builtin_requires_exact_name(capsys):
    assert run_builtin(["ech", "hi"], make_env()) is None
    assert capsys.readouterr().out == ""


def test_run_builtin_dispatches(capsys):
    env = make_env("A=1")
    assert run_builtin(["echo", "x"], env) == 0
    assert capsys.readouterr().out == "x\n"
    assert run_builtin(["export", "Z=9"], env) == 0
    assert env.get("Z") == "9"
    with pytest.raises(ExitRequest):
        run_builtin(["exit"], env)