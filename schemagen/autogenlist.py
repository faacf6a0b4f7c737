"""Persisted autogen configuration and entry expansion for base paths."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import yaml

from .config import ConfigError
from .models import AutogenEntry


class AutogenList:
    """Configured autogen entries, usually loaded from ``autogenlist.yml``.

    Each record names a ``basePath`` and ``namespace`` and may carry a
    ``readmeFile`` override, a ``suffix`` for split namespaces, or
    ``disabledForAutogen: true`` to keep a known-bad package out of runs.
    """

    def __init__(self, entries: Iterable[AutogenEntry] = ()) -> None:
        self.entries: List[AutogenEntry] = list(entries)

    @classmethod
    def load(cls, path: Path | None) -> "AutogenList":
        if path is None or not path.exists():
            return cls()
        text = path.read_text(encoding="utf-8")
        try:
            data = yaml.safe_load(text) if text.strip() else []
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
        if data is None:
            return cls()
        if not isinstance(data, list):
            raise ConfigError(f"{path.name} must contain a list of autogen entries")
        return cls(_entry_from_record(record, index, path) for index, record in enumerate(data))

    def find(self, base_path: str) -> List[AutogenEntry]:
        """Return configured entries for ``base_path`` in file order."""
        return [entry for entry in self.entries if _lower_equals(entry.base_path, base_path)]


def find_or_generate_autogen_entries(
    base_path: str,
    namespaces: Sequence[str],
    autogen_list: Optional[AutogenList] = None,
) -> List[AutogenEntry]:
    """Return configured entries for ``base_path`` plus defaults for unconfigured namespaces."""
    entries = autogen_list.find(base_path) if autogen_list is not None else []
    for namespace in sorted(namespaces, key=str.lower):
        if any(_lower_equals(entry.namespace, namespace) for entry in entries):
            continue
        entries.append(AutogenEntry(base_path=base_path, namespace=namespace))
    return entries


def _entry_from_record(record: Any, index: int, path: Path) -> AutogenEntry:
    if not isinstance(record, dict):
        raise ConfigError(f"{path.name}: entry {index} must be a mapping")
    base_path = record.get("basePath")
    namespace = record.get("namespace")
    if not isinstance(base_path, str) or not base_path:
        raise ConfigError(f"{path.name}: entry {index} is missing 'basePath'")
    if not isinstance(namespace, str) or not namespace:
        raise ConfigError(f"{path.name}: entry {index} is missing 'namespace'")
    readme_file = record.get("readmeFile")
    suffix = record.get("suffix")
    disabled = record.get("disabledForAutogen", False)
    if readme_file is not None and not isinstance(readme_file, str):
        raise ConfigError(f"{path.name}: entry {index} has a non-string 'readmeFile'")
    if suffix is not None and not isinstance(suffix, str):
        raise ConfigError(f"{path.name}: entry {index} has a non-string 'suffix'")
    if not isinstance(disabled, bool):
        raise ConfigError(f"{path.name}: entry {index} has a non-boolean 'disabledForAutogen'")
    return AutogenEntry(
        base_path=base_path,
        namespace=namespace,
        readme_file=readme_file,
        disabled_for_autogen=disabled,
        suffix=suffix,
    )


def _lower_equals(left: str, right: str) -> bool:
    return left.lower() == right.lower()


__all__ = ["AutogenList", "find_or_generate_autogen_entries"]
