"""Cargo progress message models.

`cargo build --message-format json` writes one JSON object per line to
stdout. Each object is tagged with a "reason" field. Only two reasons are
interpreted here:

- ``compiler-artifact``: a compilation unit finished; binary targets carry
  the path of the produced executable.
- ``build-finished``: the last message of a build, with an overall
  success flag.

Every other reason (``compiler-message``, ``build-script-executed``, ...)
decodes to None and is ignored by the caller.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bintest.errors import BinTestError

COMPILER_ARTIFACT = "compiler-artifact"
BUILD_FINISHED = "build-finished"


class ArtifactTarget(BaseModel):
    """The cargo target an artifact was compiled from."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(default="", description="Target name")
    kind: list[str] = Field(default_factory=list, description="Target kinds (bin, lib, ...)")
    crate_types: list[str] = Field(default_factory=list, description="Crate types")
    src_path: Path | None = Field(default=None, description="Root source file")


class CompilerArtifact(BaseModel):
    """A compilation unit finished and produced output.

    Attributes:
        package_id: Cargo package id of the unit.
        manifest_path: Cargo.toml of the package.
        target: Target the artifact belongs to.
        filenames: Every file produced for the unit.
        executable: Produced executable; None for library targets.
        fresh: True when cargo reused an up-to-date artifact.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    reason: Literal["compiler-artifact"] = COMPILER_ARTIFACT
    package_id: str = ""
    manifest_path: Path | None = None
    target: ArtifactTarget = Field(default_factory=ArtifactTarget)
    filenames: list[Path] = Field(default_factory=list)
    executable: Path | None = None
    fresh: bool = False


class BuildFinished(BaseModel):
    """Final message of a cargo build."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    reason: Literal["build-finished"] = BUILD_FINISHED
    success: bool


Message = Union[CompilerArtifact, BuildFinished]

_MODELS: dict[str, type[CompilerArtifact] | type[BuildFinished]] = {
    COMPILER_ARTIFACT: CompilerArtifact,
    BUILD_FINISHED: BuildFinished,
}


def parse_message(line: str) -> Message | None:
    """Decode one line of cargo's JSON output.

    Args:
        line: A single line of stdout, without or with its newline.

    Returns:
        The decoded message, or None for reasons bintest does not interpret.

    Raises:
        BinTestError: If the line is not a cargo message. Cargo's output
            format is a trusted contract, so this is never ignored.

    Example:
        >>> parse_message('{"reason":"compiler-artifact","executable":"/tmp/x/foo"}').executable
        PosixPath('/tmp/x/foo')
        >>> parse_message('{"reason":"compiler-message"}') is None
        True
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        raise BinTestError(
            "cargo output is not valid JSON",
            details={"line": line.rstrip("\n"), "error": str(exc)},
        ) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("reason"), str):
        raise BinTestError(
            "cargo output is not a cargo message",
            details={"line": line.rstrip("\n")},
        )

    model = _MODELS.get(payload["reason"])
    if model is None:
        return None

    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise BinTestError(
            f"malformed {payload['reason']} message",
            details={"line": line.rstrip("\n"), "error": str(exc)},
        ) from exc
