"""Tests for schemagen.autogenlist."""

from __future__ import annotations

from pathlib import Path

import pytest

from schemagen.autogenlist import AutogenList, find_or_generate_autogen_entries
from schemagen.config import ConfigError
from schemagen.models import AutogenEntry


def test_generates_default_entry_per_namespace_in_sorted_order() -> None:
    entries = find_or_generate_autogen_entries(
        "compute/resource-manager", ["Microsoft.Compute", "Microsoft.ContainerService"]
    )

    assert entries == [
        AutogenEntry(base_path="compute/resource-manager", namespace="Microsoft.Compute"),
        AutogenEntry(base_path="compute/resource-manager", namespace="Microsoft.ContainerService"),
    ]


def test_configured_entries_take_precedence(tmp_path: Path) -> None:
    list_path = tmp_path / "autogenlist.yml"
    list_path.write_text(
        """
- basePath: Compute/resource-manager
  namespace: microsoft.compute
  suffix: Extensions
  readmeFile: specification/compute/resource-manager/readme.md
- basePath: network/resource-manager
  namespace: Microsoft.Network
  disabledForAutogen: true
""",
        encoding="utf-8",
    )
    autogen_list = AutogenList.load(list_path)

    entries = find_or_generate_autogen_entries(
        "compute/resource-manager",
        ["Microsoft.Compute", "Microsoft.Batch"],
        autogen_list,
    )

    assert [entry.namespace for entry in entries] == ["microsoft.compute", "Microsoft.Batch"]
    assert entries[0].suffix == "Extensions"
    assert entries[0].key == "compute/resource-manager|microsoft.computeExtensions"
    assert entries[1].readme_file is None


def test_disabled_flag_is_loaded(tmp_path: Path) -> None:
    list_path = tmp_path / "autogenlist.yml"
    list_path.write_text(
        "- basePath: network/resource-manager\n  namespace: Microsoft.Network\n  disabledForAutogen: true\n",
        encoding="utf-8",
    )

    entries = AutogenList.load(list_path).find("network/resource-manager")

    assert entries == [
        AutogenEntry(
            base_path="network/resource-manager",
            namespace="Microsoft.Network",
            disabled_for_autogen=True,
        )
    ]


def test_missing_list_loads_empty(tmp_path: Path) -> None:
    assert AutogenList.load(tmp_path / "missing.yml").entries == []


@pytest.mark.parametrize(
    "content",
    [
        "basePath: foo\n",
        "- namespace: Microsoft.Foo\n",
        "- basePath: foo\n  namespace: Microsoft.Foo\n  disabledForAutogen: maybe\n",
        "- [unclosed\n",
    ],
)
def test_malformed_list_raises_config_error(tmp_path: Path, content: str) -> None:
    list_path = tmp_path / "autogenlist.yml"
    list_path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        AutogenList.load(list_path)
