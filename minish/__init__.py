"""Building blocks of a small shell: syntax checks, line splitting with variable expansion, builtins and redirections."""

__version__ = "0.1.0"