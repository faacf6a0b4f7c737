"""Extraction of API namespaces and versions from autorest readme files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Set

import yaml

from .logging import get_logger
from .specs import CorpusResolutionError

_LOGGER = get_logger("readme")

_YAML_BLOCK = re.compile(r"^```\s*ya?ml\b[^\n]*\n(.*?)^```", re.IGNORECASE | re.MULTILINE | re.DOTALL)
_INPUT_FILE = re.compile(
    r"(?:^|/)(?P<namespace>[A-Za-z][\w-]*\.[\w.-]+)/(?:stable|preview)/(?P<version>[^/]+)/",
)


def get_api_versions_by_namespace(readme: Path) -> Dict[str, List[str]]:
    """Map each resource provider namespace in ``readme`` to its sorted API versions."""
    try:
        text = readme.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CorpusResolutionError(f"Unable to read readme {readme}: {exc}") from exc
    found: Dict[str, Set[str]] = {}
    for input_file in _iter_input_files(text, readme):
        match = _INPUT_FILE.search(input_file.replace("\\", "/"))
        if not match:
            continue
        found.setdefault(match.group("namespace"), set()).add(match.group("version"))
    return {namespace: sorted(found[namespace]) for namespace in sorted(found)}


def _iter_input_files(text: str, readme: Path) -> Iterator[str]:
    for block in _YAML_BLOCK.findall(text):
        try:
            data = yaml.safe_load(block)
        except yaml.YAMLError as exc:
            _LOGGER.debug("Skipping unparseable yaml block in %s: %s", readme, exc)
            continue
        yield from _input_files(data)


def _input_files(data: Any) -> Iterator[str]:
    if not isinstance(data, dict):
        return
    value = data.get("input-file")
    if isinstance(value, str):
        yield value
    elif isinstance(value, list):
        yield from (item for item in value if isinstance(item, str))


__all__ = ["get_api_versions_by_namespace"]
