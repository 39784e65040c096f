[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "minish"
version = "0.1.0"
description = "Building blocks of a small shell: syntax checks, line splitting with variable expansion, builtins and redirections"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "parser", "pipes", "redirection", "heredoc", "builtins"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["minish*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
