"""Build configuration for bintest.

This module provides:
- RELEASE_BUILD: release-mode switch, resolved once at import
- BuildConfig: immutable settings for one cargo build
- BinTestBuilder: chained builder producing BuildConfig values
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from bintest.bintest import BinTest

CARGO_ENV_VAR = "CARGO"
DEFAULT_CARGO = "cargo"
RELEASE_ENV_VAR = "BINTEST_RELEASE"


def _release_from_env() -> bool:
    value = os.environ.get(RELEASE_ENV_VAR, "")
    return value.strip().lower() not in ("", "0", "false", "no")


RELEASE_BUILD: bool = _release_from_env()
"""Whether builds pass --release. Read from BINTEST_RELEASE when bintest is imported."""


def resolve_cargo() -> str:
    """Return the cargo executable, honouring the CARGO environment variable.

    cargo itself sets CARGO for the processes it runs, so tests launched
    through cargo reuse the same toolchain.
    """
    return os.environ.get(CARGO_ENV_VAR) or DEFAULT_CARGO


class BuildConfig(BaseModel):
    """Settings for a single cargo build.

    Attributes:
        build_workspace: Build every package in the workspace (--workspace).
        specific_executable: Build only this binary target (--bin NAME).
        quiet: Suppress cargo's progress output on stderr (--quiet).
        release: Build with the release profile (--release).
        cargo: Cargo executable to run.
        current_dir: Working directory for cargo (None inherits the caller's).

    Example:
        >>> config = BuildConfig(build_workspace=True, quiet=True)
        >>> config.specific_executable is None
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    build_workspace: bool = Field(
        default=False,
        description="Build all packages of the workspace",
    )
    specific_executable: str | None = Field(
        default=None,
        min_length=1,
        description="Only build the binary target with this name",
    )
    quiet: bool = Field(
        default=False,
        description="Pass --quiet to cargo",
    )
    release: bool = Field(
        default=RELEASE_BUILD,
        description="Pass --release to cargo",
    )
    cargo: str = Field(
        default_factory=resolve_cargo,
        min_length=1,
        description="Cargo executable name or path",
    )
    current_dir: Path | None = Field(
        default=None,
        description="Working directory for the cargo process",
    )


class BinTestBuilder:
    """Chained builder for configuring a cargo build.

    Every setter returns a new builder; the receiver is left unchanged, so a
    partially configured builder can be shared and specialised.

    Example:
        >>> executables = BinTest.builder().build_workspace().quiet().build()
    """

    def __init__(self, config: BuildConfig | None = None) -> None:
        self._config = config or BuildConfig()

    @property
    def config(self) -> BuildConfig:
        """The configuration this builder will build with."""
        return self._config

    def _with(self, **update: object) -> BinTestBuilder:
        return BinTestBuilder(self._config.model_copy(update=update))

    def build_workspace(self, workspace: bool = True) -> BinTestBuilder:
        """Allow building all executables in a workspace."""
        return self._with(build_workspace=workspace)

    def build_executable(self, executable: str) -> BinTestBuilder:
        """Only build a specific executable when a workspace or package has several."""
        if not executable:
            msg = "executable name must not be empty"
            raise ValueError(msg)
        return self._with(specific_executable=executable)

    def quiet(self, quiet: bool = True) -> BinTestBuilder:
        """Allow disabling extra output from the cargo build run."""
        return self._with(quiet=quiet)

    def current_dir(self, path: str | os.PathLike[str]) -> BinTestBuilder:
        """Run cargo from the given directory instead of the current one."""
        return self._with(current_dir=Path(path))

    def build(self) -> BinTest:
        """Run cargo build with the configured options and index the executables."""
        from bintest.bintest import BinTest

        return BinTest(self)

    def __repr__(self) -> str:
        return f"BinTestBuilder({self._config!r})"
