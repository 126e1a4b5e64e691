"""Shared test fixtures for bintest tests.

Provides:
- Cargo message factories
- Fake cargo executables that replay canned output through a real pipe
- An in-memory OpenTelemetry span exporter
"""

from __future__ import annotations

from collections.abc import Callable, Generator
import json
from pathlib import Path
import sys
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

FAKE_CARGO_TEMPLATE = """#!{python}
import json
import sys

with open({argv_file!r}, "w") as f:
    json.dump(sys.argv[1:], f)

with open({output_file!r}, "rb") as f:
    data = f.read()

for _ in range({repeat}):
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()

sys.exit({returncode})
"""


def make_artifact_message(
    executable: str | None,
    *,
    name: str = "demo",
    kind: list[str] | None = None,
) -> dict[str, Any]:
    """Factory function to create cargo compiler-artifact messages.

    Args:
        executable: Produced executable path, None for library targets.
        name: Target name.
        kind: Target kinds. Defaults to ["bin"], or ["lib"] without executable.

    Returns:
        compiler-artifact message dictionary.
    """
    if kind is None:
        kind = ["bin"] if executable is not None else ["lib"]
    return {
        "reason": "compiler-artifact",
        "package_id": f"path+file:///work/{name}#0.1.0",
        "manifest_path": f"/work/{name}/Cargo.toml",
        "target": {
            "kind": kind,
            "crate_types": kind,
            "name": name,
            "src_path": f"/work/{name}/src/main.rs",
            "edition": "2021",
            "doc": True,
            "doctest": False,
            "test": True,
        },
        "profile": {"opt_level": "0", "debuginfo": 2, "test": False},
        "features": [],
        "filenames": [executable] if executable is not None else [f"/work/target/lib{name}.rlib"],
        "executable": executable,
        "fresh": False,
    }


def to_lines(*messages: dict[str, Any] | str) -> list[bytes]:
    """Encode messages the way cargo writes them to stdout."""
    return [
        (m if isinstance(m, str) else json.dumps(m)).encode("utf-8") + b"\n" for m in messages
    ]


@pytest.fixture
def artifact() -> Callable[..., dict[str, Any]]:
    """Return the compiler-artifact message factory."""
    return make_artifact_message


@pytest.fixture
def cargo_lines() -> Callable[..., list[bytes]]:
    """Return the stdout line encoder."""
    return to_lines


@pytest.fixture
def fake_cargo(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture creating an executable that imitates cargo build.

    The fake records its arguments to ``fake-cargo-argv.json`` next to it,
    writes the given lines to stdout ``repeat`` times and exits with
    ``returncode``.

    Returns:
        Function that creates the fake and returns its path.
    """
    if sys.platform == "win32":
        pytest.skip("fake cargo relies on shebang scripts")

    def _create(
        lines: list[dict[str, Any] | str],
        *,
        returncode: int = 0,
        repeat: int = 1,
    ) -> Path:
        output_file = tmp_path / "fake-cargo-output.jsonl"
        output_file.write_bytes(b"".join(to_lines(*lines)))

        script = tmp_path / "fake-cargo"
        script.write_text(
            FAKE_CARGO_TEMPLATE.format(
                python=sys.executable,
                argv_file=str(tmp_path / "fake-cargo-argv.json"),
                output_file=str(output_file),
                repeat=repeat,
                returncode=returncode,
            )
        )
        script.chmod(0o755)
        return script

    return _create


@pytest.fixture
def in_memory_span_exporter() -> Generator[
    tuple[InMemorySpanExporter, TracerProvider], None, None
]:
    """Provide an in-memory span exporter and the provider feeding it.

    Usage:
        def test_tracing(in_memory_span_exporter):
            exporter, provider = in_memory_span_exporter
            ...
            spans = exporter.get_finished_spans()
    """
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import SimpleSpanProcessor
    from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))

    yield exporter, provider

    exporter.shutdown()
    provider.shutdown()
