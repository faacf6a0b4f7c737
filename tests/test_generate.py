"""Tests for schemagen.generate."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from schemagen.generate import EntryDerivationError, SchemaGenerator
from schemagen.models import AutogenEntry, SchemaConfiguration

ENTRY = AutogenEntry(base_path="compute/resource-manager", namespace="Microsoft.Compute")


def _write_schema(schemas_dir: Path, version: str, name: str) -> None:
    target = schemas_dir / version / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("{}", encoding="utf-8")


def test_generate_runs_command_and_collects_schemas(tmp_path: Path) -> None:
    schemas_dir = tmp_path / "schemas"
    readme = tmp_path / "readme.md"
    readme.write_text("# readme", encoding="utf-8")
    calls = []

    def runner(args, cwd, timeout=None):
        calls.append((list(args), Path(cwd), timeout))
        _write_schema(schemas_dir, "2023-01-01", "Microsoft.Compute.json")
        _write_schema(schemas_dir, "2023-03-01", "Microsoft.Compute.json")
        _write_schema(schemas_dir, "2023-03-01", "Microsoft.Network.json")
        _write_schema(schemas_dir, "common", "Microsoft.Compute.json")
        return ""

    generator = SchemaGenerator(["autorest", "--plugin"], schemas_dir, runner=runner, timeout=30)
    configs = generator.generate(readme, ENTRY)

    args, cwd, timeout = calls[0]
    assert args[:2] == ["autorest", "--plugin"]
    assert f"--output-folder={schemas_dir}" in args
    assert "--namespace=Microsoft.Compute" in args
    assert args[-1] == str(readme)
    assert cwd == tmp_path
    assert timeout == 30
    assert configs == [
        SchemaConfiguration(
            owner="compute/resource-manager|microsoft.compute",
            namespace="Microsoft.Compute",
            api_version="2023-01-01",
            references=("2023-01-01/Microsoft.Compute.json",),
        ),
        SchemaConfiguration(
            owner="compute/resource-manager|microsoft.compute",
            namespace="Microsoft.Compute",
            api_version="2023-03-01",
            references=("2023-03-01/Microsoft.Compute.json",),
        ),
    ]


def test_generate_passes_suffix(tmp_path: Path) -> None:
    schemas_dir = tmp_path / "schemas"
    entry = AutogenEntry(
        base_path="compute/resource-manager", namespace="Microsoft.Compute", suffix="Extensions"
    )
    seen = []

    def runner(args, cwd, timeout=None):
        seen.extend(args)
        _write_schema(schemas_dir, "2023-01-01", "Microsoft.ComputeExtensions.json")
        return ""

    configs = SchemaGenerator(["gen"], schemas_dir, runner=runner).generate(tmp_path / "readme.md", entry)

    assert "--suffix=Extensions" in seen
    assert [config.references for config in configs] == [("2023-01-01/Microsoft.ComputeExtensions.json",)]
    assert configs[0].suffix == "Extensions"
    assert configs[0].owner == "compute/resource-manager|microsoft.computeExtensions"


def test_generate_failure_raises_entry_error(tmp_path: Path) -> None:
    def runner(args, cwd, timeout=None):
        raise subprocess.CalledProcessError(1, list(args), stderr="boom\nFATAL: bad swagger\n")

    generator = SchemaGenerator(["gen"], tmp_path / "schemas", runner=runner)

    with pytest.raises(EntryDerivationError, match="FATAL: bad swagger"):
        generator.generate(tmp_path / "readme.md", ENTRY)


def test_generate_timeout_raises_entry_error(tmp_path: Path) -> None:
    def runner(args, cwd, timeout=None):
        raise subprocess.TimeoutExpired(list(args), timeout)

    generator = SchemaGenerator(["gen"], tmp_path / "schemas", runner=runner, timeout=5)

    with pytest.raises(EntryDerivationError, match="timed out"):
        generator.generate(tmp_path / "readme.md", ENTRY)


def test_generate_without_output_raises_entry_error(tmp_path: Path) -> None:
    generator = SchemaGenerator(["gen"], tmp_path / "schemas", runner=lambda args, cwd, timeout=None: "")

    with pytest.raises(EntryDerivationError, match="no schemas"):
        generator.generate(tmp_path / "readme.md", ENTRY)
