"""Shell variables: the inherited environment plus shell-local names."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass
class Variable:
    """One shell variable.

    ``exported`` variables are passed to child processes and printed by
    ``env``. A variable created by ``export NAME`` without a value is not.
    """

    name: str
    value: str | None = None
    exported: bool = True


def split_assignment(text: str) -> tuple[str, str | None]:
    """Split ``NAME=value`` into its name and value.

    The name is everything before the first ``=``. The value is everything
    after it, or None when there is no ``=`` or nothing follows it.
    """
    name, sep, value = text.partition("=")
    if not sep or not value:
        return name, None
    return name, value


class Environment:
    """An ordered collection of shell variables, keyed by name."""

    def __init__(self, variables: Iterable[Variable] = ()) -> None:
        self._vars: dict[str, Variable] = {}
        for var in variables:
            # Lookups always find the first definition of a name.
            self._vars.setdefault(var.name, var)

    @classmethod
    def from_envp(cls, envp: Iterable[str]) -> "Environment":
        """Build an environment from ``NAME=value`` strings."""
        return cls(
            Variable(*split_assignment(entry), exported=True) for entry in envp
        )

    @classmethod
    def from_cwd(cls) -> "Environment":
        """Build the minimal environment used when none is inherited."""
        return cls([Variable("PWD", os.getcwd(), True)])

    def get(self, name: str) -> str | None:
        """Return the value of ``name``, or None if unset or valueless."""
        var = self._vars.get(name)
        return var.value if var is not None else None

    def set(self, name: str, value: str | None = None, exported: bool = True) -> None:
        """Define ``name`` or update it.

        An existing variable keeps its value when ``value`` is None;
        giving it a value also exports it.
        """
        var = self._vars.get(name)
        if var is None:
            self._vars[name] = Variable(name, value, exported)
            return
        if value is not None:
            var.value = value
            var.exported = True

    def append(self, name: str, value: str | None) -> None:
        """Append ``value`` to ``name``, as ``export NAME+=value`` does."""
        var = self._vars.get(name)
        if var is None:
            self._vars[name] = Variable(name, value, True)
            return
        if value is None:
            return
        var.value = value if var.value is None else var.value + value

    def unset(self, name: str) -> None:
        """Remove ``name``; unknown names are ignored."""
        self._vars.pop(name, None)

    def to_strings(self, quoted: bool = False) -> list[str]:
        """Render the variables as strings.

        Unquoted, only exported variables appear, as ``NAME=value``.
        Quoted (the ``export`` listing), every variable appears: exported
        ones as ``NAME="value"``, the others as a bare name.
        """
        lines = []
        for var in self._vars.values():
            if not var.exported:
                if quoted:
                    lines.append(var.name)
                continue
            value = var.value or ""
            lines.append(f'{var.name}="{value}"' if quoted else f"{var.name}={value}")
        return lines

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __iter__(self) -> Iterator[Variable]:
        return iter(list(self._vars.values()))

    def __len__(self) -> int:
        return len(self._vars)