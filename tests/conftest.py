from __future__ import annotations

from pathlib import Path

import pytest

from schemagen.config import SchemaGenConfig
from tests._fixtures.corpus_builder import CorpusBuilder


@pytest.fixture
def corpus(tmp_path: Path) -> CorpusBuilder:
    """Provide a reusable specs corpus rooted at the pytest tmp_path."""
    return CorpusBuilder(tmp_path)


@pytest.fixture
def config(tmp_path: Path) -> SchemaGenConfig:
    """Settings rooted in a scratch workspace so runs never touch the cwd."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return SchemaGenConfig(root=workspace)
