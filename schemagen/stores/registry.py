"""Durable registry of auto-generated schema references."""

from __future__ import annotations

import json
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Set
from uuid import uuid4

from ..logging import get_logger
from ..models import AutogenEntry, SchemaConfiguration

_REGISTRY_VERSION = 1
LOCK_TIMEOUT_SECONDS = 30.0
LOCK_STALE_SECONDS = 300.0
LOCK_RETRY_SLEEP_SECONDS = 0.05


class RegistryLockError(RuntimeError):
    """Raised when the registry lock file cannot be acquired in time."""


class SchemaRegistry:
    """Stores schema registrations keyed by the autogen entry that produced them.

    Several shard processes may share one registry file. Every write re-reads
    the file under a lock and only touches the owners this instance cleared or
    the registrations it is saving, so disjoint shards never overwrite each
    other.
    """

    def __init__(self, path: Path | None, *, lock_timeout: float = LOCK_TIMEOUT_SECONDS) -> None:
        self._path = path
        self._lock_timeout = lock_timeout
        self._registrations: List[SchemaConfiguration] = []
        self._cleared: Set[str] = set()
        self.logger = get_logger("stores.registry")
        if self._path is not None:
            self._registrations = self._read(self._path)

    @property
    def registrations(self) -> List[SchemaConfiguration]:
        return list(self._registrations)

    def owned_by(self, entry: AutogenEntry) -> List[SchemaConfiguration]:
        return [item for item in self._registrations if item.owner == entry.key]

    def clear(self, entries: Sequence[AutogenEntry]) -> int:
        """Drop every registration owned by ``entries`` and persist in one write."""
        owners = {entry.key for entry in entries}
        if not owners:
            return 0
        self._cleared |= owners
        with self._locked():
            current = self._reload()
            kept = [item for item in current if item.owner not in owners]
            removed = len(current) - len(kept)
            self._registrations = kept
            if removed:
                self.logger.debug("Cleared %d registrations for %s", removed, ", ".join(sorted(owners)))
                self._write()
        return removed

    def save(self, registrations: Iterable[SchemaConfiguration]) -> None:
        """Merge new registrations into the current file contents and persist."""
        with self._locked():
            current = [item for item in self._reload() if item.owner not in self._cleared]
            seen: Set[SchemaConfiguration] = set()
            merged: List[SchemaConfiguration] = []
            for item in [*current, *registrations]:
                if item in seen:
                    continue
                seen.add(item)
                merged.append(item)
            self._registrations = sorted(merged, key=_sort_key)
            self._write()
        self._cleared = set()

    def persist(self) -> None:
        with self._locked():
            self._write()

    # ------------------------------------------------------------------
    # Internal helpers

    def _reload(self) -> List[SchemaConfiguration]:
        if self._path is None:
            return list(self._registrations)
        return self._read(self._path)

    def _write(self) -> None:
        if self._path is None:
            return
        payload = {
            "version": _REGISTRY_VERSION,
            "registrations": [item.to_dict() for item in self._registrations],
        }
        write_json_atomically(payload, self._path)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if self._path is None:
            yield
            return
        lock_path = self._path.parent / f"{self._path.name}.lock"
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        deadline = time.monotonic() + self._lock_timeout
        while True:
            try:
                fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
                break
            except FileExistsError:
                if _is_stale(lock_path):
                    self.logger.warning("Removing stale registry lock %s", lock_path)
                    _unlink_quietly(lock_path)
                    continue
                if time.monotonic() >= deadline:
                    raise RegistryLockError(
                        f"Timed out after {self._lock_timeout}s waiting for registry lock {lock_path}"
                    ) from None
                time.sleep(LOCK_RETRY_SLEEP_SECONDS)
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
            os.close(fd)
            yield
        finally:
            _unlink_quietly(lock_path)

    def _read(self, path: Path) -> List[SchemaConfiguration]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            self.logger.warning("Ignoring unreadable registry %s: %s", path, exc)
            return []
        if not isinstance(data, dict) or data.get("version") != _REGISTRY_VERSION:
            return []
        payload = data.get("registrations")
        if not isinstance(payload, list):
            return []
        loaded = (SchemaConfiguration.from_dict(item) for item in payload)
        return [item for item in loaded if item is not None]


def write_json_atomically(payload: object, output_path: Path) -> Path:
    """Write JSON to a sibling temp file and replace ``output_path`` with it."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.parent / f".{output_path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return output_path


def _is_stale(lock_path: Path) -> bool:
    try:
        age = time.time() - lock_path.stat().st_mtime
    except FileNotFoundError:
        return False
    return age > LOCK_STALE_SECONDS


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def _sort_key(item: SchemaConfiguration) -> tuple[str, str, str, tuple[str, ...]]:
    return (item.owner, item.api_version, item.namespace, item.references)


__all__ = ["RegistryLockError", "SchemaRegistry", "write_json_atomically"]
