"""Invocation of the external schema generator for a single autogen entry."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from .logging import get_logger
from .models import AutogenEntry, SchemaConfiguration


class EntryDerivationError(RuntimeError):
    """Raised when schema generation fails for one autogen entry."""


class Generator(Protocol):
    def generate(self, readme: Path, entry: AutogenEntry) -> List[SchemaConfiguration]:
        ...


class SchemaGenerator:
    """Runs the configured generator command and collects the schemas it wrote."""

    def __init__(
        self,
        command: Sequence[str],
        schemas_dir: Path,
        *,
        runner: Callable[..., str] | None = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.command = list(command)
        self.schemas_dir = schemas_dir
        self.timeout = timeout
        self._runner = runner or self._default_runner
        self.logger = get_logger("generate")

    def generate(self, readme: Path, entry: AutogenEntry) -> List[SchemaConfiguration]:
        """Generate schemas for ``entry`` from ``readme`` and return their registrations."""
        args = [
            *self.command,
            f"--output-folder={self.schemas_dir}",
            f"--namespace={entry.namespace}",
            str(readme),
        ]
        if entry.suffix:
            args.append(f"--suffix={entry.suffix}")

        self.logger.debug("Running generator: %s", " ".join(args))
        try:
            self._runner(args, cwd=readme.parent, timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise EntryDerivationError(
                f"Generator timed out after {exc.timeout}s for {entry.base_path} ({entry.namespace})"
            ) from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip().splitlines()[-1:] or [f"exit status {exc.returncode}"]
            raise EntryDerivationError(
                f"Generator failed for {entry.base_path} ({entry.namespace}): {detail[0]}"
            ) from exc
        except OSError as exc:
            raise EntryDerivationError(f"Unable to start generator {self.command[:1]}: {exc}") from exc

        configs = self.collect(entry)
        if not configs:
            raise EntryDerivationError(
                f"Generator produced no schemas for {entry.base_path} ({entry.namespace})"
            )
        return configs

    def collect(self, entry: AutogenEntry) -> List[SchemaConfiguration]:
        """Return registrations for schema files already present for ``entry``."""
        if not self.schemas_dir.is_dir():
            return []
        file_name = f"{entry.namespace}{entry.suffix or ''}.json".lower()
        configs: List[SchemaConfiguration] = []
        for version_dir in sorted(_iter_dirs(self.schemas_dir)):
            for schema_file in sorted(version_dir.iterdir()):
                if not schema_file.is_file() or schema_file.name.lower() != file_name:
                    continue
                reference = schema_file.relative_to(self.schemas_dir).as_posix()
                configs.append(
                    SchemaConfiguration(
                        owner=entry.key,
                        namespace=entry.namespace,
                        api_version=version_dir.name,
                        references=(reference,),
                        suffix=entry.suffix,
                    )
                )
        return configs

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        timeout: Optional[float] = None,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
        return completed.stdout


def _iter_dirs(root: Path) -> Iterable[Path]:
    return (child for child in root.iterdir() if child.is_dir() and child.name != "common")


__all__ = ["EntryDerivationError", "Generator", "SchemaGenerator"]
