"""Index of the executables produced by cargo build.

BinTest runs the build when it is constructed and afterwards only answers
questions about its result, so a single instance can be shared by every test
in a session (a session-scoped pytest fixture, for example).
"""

from __future__ import annotations

from collections.abc import ItemsView, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from bintest.build import run_cargo_build
from bintest.command import Command
from bintest.config import BinTestBuilder
from bintest.errors import BinTestError
from bintest.observability import get_logger

if TYPE_CHECKING:
    from pathlib import Path


class BinTest:
    """Access to the binaries built by ``cargo build``.

    Executables are identified by their file name without directory and
    platform extension (``target/debug/demo.exe`` is ``"demo"``).

    Example:
        >>> executables = BinTest()
        >>> for name, path in executables.list_executables():
        ...     print(name, path)
        >>> result = executables.command("demo").arg("--version").output()
    """

    def __init__(self, builder: BinTestBuilder | None = None) -> None:
        """Run cargo build and register every executable it reports.

        Args:
            builder: Build configuration. Defaults to a single-package,
                non-quiet build.

        Raises:
            BinTestError: If the build cannot be run or fails.
        """
        config = (builder or BinTestBuilder()).config
        self._executables: Mapping[str, Path] = MappingProxyType(run_cargo_build(config))

    @classmethod
    def new(cls) -> BinTest:
        """Run cargo build with the default configuration."""
        return cls()

    @staticmethod
    def builder() -> BinTestBuilder:
        """Create a BinTestBuilder for further customization.

        Example:
            >>> executables = BinTest.builder().quiet().build()
        """
        return BinTestBuilder()

    @property
    def executables(self) -> Mapping[str, Path]:
        """Read-only mapping of executable name to path."""
        return self._executables

    def list_executables(self) -> ItemsView[str, Path]:
        """Give ``(name, path)`` pairs of every executable found, ordered by name."""
        return self._executables.items()

    def list_binaries(self) -> ItemsView[str, Path]:
        """Alias of list_executables()."""
        return self.list_executables()

    def command(self, name: str) -> Command:
        """Create a Command for the named executable.

        Args:
            name: Executable name, without directory or extension.

        Returns:
            A fresh Command with no arguments, ready to be configured.

        Raises:
            BinTestError: If no executable with that name was built.
        """
        path = self._executables.get(name)
        if path is None:
            get_logger().error("executable_not_found", name=name, known=sorted(self._executables))
            raise BinTestError(f"no such executable <<{name}>>")
        return Command(path)

    def __contains__(self, name: object) -> bool:
        return name in self._executables

    def __len__(self) -> int:
        return len(self._executables)

    def __repr__(self) -> str:
        return f"BinTest({sorted(self._executables)!r})"
