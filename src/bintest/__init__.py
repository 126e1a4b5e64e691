"""bintest: find and run the executables built by cargo from Python tests.

This package provides:
- A cargo build runner that streams ``--message-format json`` output
- A name-indexed view of the produced executables
- Command objects for launching them as subprocesses
- Structured logging via structlog and OpenTelemetry spans

Example:
    >>> from bintest import BinTest
    >>> executables = BinTest()
    >>> for name, path in executables.list_executables():
    ...     print(name, path)
    >>> completed = executables.command("demo").arg("--help").output()
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    # Index
    "BinTest",
    # Configuration
    "BinTestBuilder",
    "BuildConfig",
    "RELEASE_BUILD",
    # Subprocess descriptor
    "Command",
    "Stdio",
    # Exceptions
    "BinTestError",
    # Observability
    "configure_logging",
]


def __getattr__(name: str) -> object:
    """Lazy import of public API members."""
    if name == "BinTest":
        from bintest.bintest import BinTest

        return BinTest
    if name in ("BinTestBuilder", "BuildConfig", "RELEASE_BUILD"):
        from bintest import config as config_module

        return getattr(config_module, name)
    if name in ("Command", "Stdio"):
        from bintest import command as command_module

        return getattr(command_module, name)
    if name == "BinTestError":
        from bintest.errors import BinTestError

        return BinTestError
    if name == "configure_logging":
        from bintest.observability import configure_logging

        return configure_logging
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
