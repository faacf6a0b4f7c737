"""Specs corpus scanning and readme resolution."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .git.checkout import SpecsCheckout

SPECIFICATION_DIR = "specification"
RESOURCE_MANAGER_DIR = "resource-manager"
README_FILE = "readme.md"

_EXCLUDED_DIRS = {".git", "node_modules", "examples"}


class CorpusResolutionError(RuntimeError):
    """Raised when the specs corpus or a unit inside it cannot be resolved."""


class ManifestNotFoundError(CorpusResolutionError):
    """Raised when no readme exists for a base path or readme pointer."""


def resolve_absolute_path(path: str | Path) -> Path:
    """Expand the user directory and resolve ``path`` against the working directory."""
    return Path(path).expanduser().resolve()


def generate_base_paths(local_path: Path) -> List[str]:
    """Return sorted base paths (relative to ``specification/``) that carry a readme."""
    spec_root = local_path / SPECIFICATION_DIR
    if not spec_root.is_dir():
        raise CorpusResolutionError(f"No '{SPECIFICATION_DIR}' directory found under {local_path}")

    base_paths: List[str] = []
    for current, dirnames, filenames in os.walk(spec_root):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        current_path = Path(current)
        if current_path.name.lower() != RESOURCE_MANAGER_DIR:
            continue
        if not any(name.lower() == README_FILE for name in filenames):
            continue
        base_paths.append(current_path.relative_to(spec_root).as_posix())
        # Nested readmes below a resource-manager folder belong to the same unit.
        dirnames[:] = []
    return sorted(base_paths)


def clone_and_generate_base_paths(
    local_path: Path,
    repo_uri: str,
    commit: str,
    checkout: "SpecsCheckout",
) -> List[str]:
    """Check out ``commit`` of ``repo_uri`` into ``local_path`` and scan it."""
    checkout.clone(local_path, repo_uri, commit)
    return generate_base_paths(local_path)


def validate_and_return_readme_path(local_path: Path, base_path_or_pointer: str) -> Path:
    """Resolve a base path or a ``specification/.../readme.md`` pointer to a readme file."""
    if base_path_or_pointer.lower().endswith(".md"):
        readme = local_path / base_path_or_pointer
    else:
        readme = local_path / SPECIFICATION_DIR / base_path_or_pointer / README_FILE
    if not readme.is_file():
        raise ManifestNotFoundError(f"Unable to find a readme under '{base_path_or_pointer}'")
    return readme.resolve()


def get_package_string(readme: Path) -> str:
    """Return the readme's directory relative to the nearest ``specification`` folder."""
    directory = readme.parent
    parts = directory.parts
    for index in range(len(parts) - 1, -1, -1):
        if parts[index] == SPECIFICATION_DIR:
            return Path(*parts[index + 1 :]).as_posix() if index + 1 < len(parts) else ""
    return directory.name


__all__ = [
    "CorpusResolutionError",
    "ManifestNotFoundError",
    "clone_and_generate_base_paths",
    "generate_base_paths",
    "get_package_string",
    "resolve_absolute_path",
    "validate_and_return_readme_path",
]
