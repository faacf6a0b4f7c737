"""Git checkout of the specs corpus."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable

from ..logging import get_logger
from ..specs import CorpusResolutionError


class SpecsCheckout:
    """Fetches a single commit of the specs repository into a working folder."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("git.checkout")

    def clone(self, path: Path, repo_uri: str, commit: str) -> Path:
        """Shallow-fetch ``commit`` and force-checkout it, reusing an existing clone."""
        path.mkdir(parents=True, exist_ok=True)
        self.logger.info("Checking out %s@%s into %s", repo_uri, commit, path)
        try:
            if not (path / ".git").exists():
                self._run(["git", "init", "--quiet"], cwd=path)
            remotes = self._run(["git", "remote"], cwd=path, capture_output=True)
            if "origin" in remotes.split():
                self._run(["git", "remote", "set-url", "origin", repo_uri], cwd=path)
            else:
                self._run(["git", "remote", "add", "origin", repo_uri], cwd=path)
            self._run(["git", "fetch", "--depth", "1", "origin", commit], cwd=path)
            self._run(["git", "checkout", "--force", "FETCH_HEAD"], cwd=path)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise CorpusResolutionError(
                f"Failed to check out {repo_uri}@{commit} into {path}: {exc}"
            ) from exc
        return path

    # ------------------------------------------------------------------
    # Helpers

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, env=None, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return ""


__all__ = ["SpecsCheckout"]
