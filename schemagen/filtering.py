"""Restriction of autogen entries to an allow-list of changed readme files."""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence

from .models import AutogenEntry
from .specs import SPECIFICATION_DIR


def filter_entries(
    entries: Sequence[AutogenEntry],
    readme_files: Optional[Sequence[str]] = None,
) -> List[AutogenEntry]:
    """Keep entries whose base path prefixes an allow-listed readme.

    Kept entries are copies pointing at the first matching readme; the input
    entries are left untouched.
    """
    if readme_files is None:
        return list(entries)

    kept: List[AutogenEntry] = []
    for entry in entries:
        prefix = f"{SPECIFICATION_DIR}/{entry.base_path}"
        match = next((readme for readme in readme_files if readme.startswith(prefix)), None)
        if match is not None:
            kept.append(replace(entry, readme_file=match))
    return kept


__all__ = ["filter_entries"]
