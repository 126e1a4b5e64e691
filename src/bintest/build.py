"""Run cargo build and collect the executables it produces.

The build is driven through ``cargo build --message-format json``. Cargo's
stdout is drained line by line while the build runs: the pipe buffer is
bounded, and reading only after cargo exits would stall a build that
reports more than a pipe's worth of messages.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import subprocess
from typing import TYPE_CHECKING

from bintest.errors import BinTestError
from bintest.messages import BuildFinished, CompilerArtifact, parse_message
from bintest.observability import build_operation, get_logger

if TYPE_CHECKING:
    from bintest.config import BuildConfig


def cargo_build_command(config: BuildConfig) -> list[str]:
    """Assemble the cargo command line for a build.

    Args:
        config: Build settings.

    Returns:
        Full argv, starting with the cargo executable.

    Example:
        >>> cargo_build_command(BuildConfig(cargo="cargo", quiet=True, release=False))
        ['cargo', 'build', '--message-format', 'json', '--quiet']
    """
    argv = [config.cargo, "build", "--message-format", "json"]

    if config.release:
        argv.append("--release")

    if config.build_workspace:
        argv.append("--workspace")

    if config.specific_executable is not None:
        argv.extend(["--bin", config.specific_executable])

    if config.quiet:
        argv.append("--quiet")

    return argv


def collect_executables(lines: Iterable[bytes]) -> dict[str, Path]:
    """Index the executables reported in a stream of cargo messages.

    Lines are consumed one at a time as the iterable yields them, so passing
    a pipe reads it incrementally.

    Args:
        lines: Raw stdout lines of ``cargo build --message-format json``.

    Returns:
        Mapping of executable name (file stem) to path. When a name is
        reported twice the later path wins.

    Raises:
        BinTestError: If a line is not a valid cargo message or an
            executable path has no file name.
    """
    logger = get_logger()
    executables: dict[str, Path] = {}

    for raw in lines:
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BinTestError(
                "cargo output is not valid UTF-8",
                details={"line": repr(raw)},
            ) from exc

        if not line.strip():
            continue

        message = parse_message(line)

        if isinstance(message, BuildFinished):
            logger.info("cargo_build_finished", success=message.success)
            continue

        if not isinstance(message, CompilerArtifact) or message.executable is None:
            continue

        executable = message.executable
        name = executable.stem
        if not name:
            raise BinTestError(
                "executable path has no file name",
                details={"path": str(executable)},
            )

        previous = executables.get(name)
        if previous is not None and previous != executable:
            logger.debug(
                "executable_replaced",
                name=name,
                old_path=str(previous),
                new_path=str(executable),
            )
        else:
            logger.debug("executable_registered", name=name, path=str(executable))
        executables[name] = executable

    return executables


def run_cargo_build(config: BuildConfig) -> dict[str, Path]:
    """Run cargo build and return the produced executables.

    Cargo inherits stdin and stderr; only stdout is captured. The call
    blocks until cargo closes its stdout and exits.

    Args:
        config: Build settings.

    Returns:
        Mapping of executable name to path, sorted by name.

    Raises:
        BinTestError: If cargo cannot be started, its output cannot be
            decoded, or it exits with a non-zero status.
    """
    argv = cargo_build_command(config)
    logger = get_logger()

    with build_operation(
        "build",
        argv=argv,
        executable=config.specific_executable,
        workspace=config.build_workspace,
    ):
        try:
            process = subprocess.Popen(  # noqa: S603
                argv,
                stdout=subprocess.PIPE,
                cwd=config.current_dir,
            )
        except OSError as exc:
            raise BinTestError(
                "failed to run cargo build",
                details={"command": " ".join(argv), "error": str(exc)},
            ) from exc

        with process:
            try:
                if process.stdout is None:
                    raise BinTestError("cargo stdout is not piped")
                executables = collect_executables(process.stdout)
            except BaseException:
                process.kill()
                raise
            returncode = process.wait()

        if returncode != 0:
            raise BinTestError(
                "cargo build failed",
                details={"command": " ".join(argv), "returncode": str(returncode)},
            )

        logger.info("cargo_build_executables", count=len(executables))

    return dict(sorted(executables.items()))
