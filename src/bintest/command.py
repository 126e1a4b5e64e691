"""Unexecuted, configurable process launches.

Command collects everything needed to start a process (program, arguments,
environment, working directory, stdio) without starting it. Mutators return
the command itself so calls can be chained:

    >>> output = executables.command("demo").arg("--help").stdout(Stdio.PIPED).output()
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
import os
from pathlib import Path
import subprocess
from typing import IO, Any, Union


class Stdio(Enum):
    """How a standard stream of the child is connected."""

    INHERIT = None
    PIPED = subprocess.PIPE
    NULL = subprocess.DEVNULL


StdioSpec = Union[Stdio, int, IO[Any]]


def _stdio_value(spec: StdioSpec | None) -> Any:
    if isinstance(spec, Stdio):
        return spec.value
    return spec


class Command:
    """A process launch that has not happened yet.

    Attributes:
        program: Executable to run.

    Example:
        >>> cmd = Command("/bin/echo").args(["hello", "world"]).env("LANG", "C")
        >>> cmd.argv
        ['/bin/echo', 'hello', 'world']
    """

    def __init__(self, program: str | os.PathLike[str]) -> None:
        self.program = os.fspath(program)
        self._args: list[str] = []
        self._env: dict[str, str | None] = {}
        self._env_clear = False
        self._cwd: Path | None = None
        self._stdin: StdioSpec | None = None
        self._stdout: StdioSpec | None = None
        self._stderr: StdioSpec | None = None

    def arg(self, arg: str | os.PathLike[str]) -> Command:
        """Append one argument."""
        self._args.append(os.fspath(arg))
        return self

    def args(self, args: Iterable[str | os.PathLike[str]]) -> Command:
        """Append several arguments."""
        self._args.extend(os.fspath(a) for a in args)
        return self

    def env(self, key: str, value: str) -> Command:
        """Set an environment variable for the child."""
        self._env[key] = value
        return self

    def envs(self, variables: Mapping[str, str]) -> Command:
        """Set several environment variables for the child."""
        self._env.update(variables)
        return self

    def env_remove(self, key: str) -> Command:
        """Remove an environment variable the child would otherwise inherit."""
        self._env[key] = None
        return self

    def env_clear(self) -> Command:
        """Start the child with an empty environment, plus any variables set afterwards."""
        self._env_clear = True
        self._env.clear()
        return self

    def current_dir(self, path: str | os.PathLike[str]) -> Command:
        """Run the child in the given working directory."""
        self._cwd = Path(path)
        return self

    def stdin(self, spec: StdioSpec) -> Command:
        """Configure the child's standard input."""
        self._stdin = spec
        return self

    def stdout(self, spec: StdioSpec) -> Command:
        """Configure the child's standard output."""
        self._stdout = spec
        return self

    def stderr(self, spec: StdioSpec) -> Command:
        """Configure the child's standard error."""
        self._stderr = spec
        return self

    def get_args(self) -> tuple[str, ...]:
        """Arguments added so far, without the program."""
        return tuple(self._args)

    def get_current_dir(self) -> Path | None:
        return self._cwd

    @property
    def argv(self) -> list[str]:
        """Program followed by its arguments."""
        return [self.program, *self._args]

    def environment(self) -> dict[str, str] | None:
        """Environment the child will receive, or None to inherit unchanged."""
        if not self._env_clear and not self._env:
            return None
        env = {} if self._env_clear else dict(os.environ)
        for key, value in self._env.items():
            if value is None:
                env.pop(key, None)
            else:
                env[key] = value
        return env

    def _popen_kwargs(self, default_stdio: Stdio) -> dict[str, Any]:
        def pick(spec: StdioSpec | None) -> Any:
            return _stdio_value(default_stdio if spec is None else spec)

        return {
            "cwd": self._cwd,
            "env": self.environment(),
            "stdin": pick(self._stdin),
            "stdout": pick(self._stdout),
            "stderr": pick(self._stderr),
        }

    def spawn(self) -> subprocess.Popen[bytes]:
        """Start the child and return without waiting. Unset streams are inherited."""
        return subprocess.Popen(self.argv, **self._popen_kwargs(Stdio.INHERIT))  # noqa: S603

    def output(self) -> subprocess.CompletedProcess[bytes]:
        """Run the child to completion, capturing stdout and stderr unless configured.

        Standard input defaults to an empty stream rather than the parent's.
        """
        kwargs = self._popen_kwargs(Stdio.PIPED)
        if self._stdin is None:
            kwargs["stdin"] = _stdio_value(Stdio.NULL)
        return subprocess.run(self.argv, check=False, **kwargs)  # noqa: S603

    def status(self) -> int:
        """Run the child to completion and return its exit status."""
        return subprocess.run(  # noqa: S603
            self.argv, check=False, **self._popen_kwargs(Stdio.INHERIT)
        ).returncode

    def __repr__(self) -> str:
        return f"Command({self.argv!r})"
