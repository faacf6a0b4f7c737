"""Pipeline orchestration for generate-all runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from .autogenlist import AutogenList, find_or_generate_autogen_entries
from .config import RunParams, SchemaGenConfig, load_config
from .filtering import filter_entries
from .generate import Generator, SchemaGenerator
from .git.checkout import SpecsCheckout
from .logging import entry_logger, get_logger
from .models import AutogenEntry, PackageResult, RunReport, SchemaConfiguration
from .readme import get_api_versions_by_namespace
from .sharding import partition
from .specs import (
    clone_and_generate_base_paths,
    generate_base_paths,
    get_package_string,
    resolve_absolute_path,
    validate_and_return_readme_path,
)
from .stores.registry import SchemaRegistry, write_json_atomically


class AggregateRunError(RuntimeError):
    """Raised at the end of a run without an output path when entries failed."""

    def __init__(self, error_count: int) -> None:
        super().__init__(
            f"Autogeneration failed with {error_count} errors. See logs for detailed information."
        )
        self.error_count = error_count


@dataclass(frozen=True)
class EntrySucceeded:
    package_name: str
    registrations: List[SchemaConfiguration]


@dataclass(frozen=True)
class EntryFailed:
    package_name: str
    error: Exception


EntryResult = Union[EntrySucceeded, EntryFailed]


@dataclass
class UnitOutcome:
    """Packages, registrations, and failure tally accumulated over processed units."""

    packages: List[PackageResult] = field(default_factory=list)
    registrations: List[SchemaConfiguration] = field(default_factory=list)
    error_count: int = 0

    def merge(self, other: "UnitOutcome") -> "UnitOutcome":
        """Fold ``other`` into this outcome in place and return it."""
        self.packages.extend(other.packages)
        self.registrations.extend(other.registrations)
        self.error_count += other.error_count
        return self

    def record(self, result: EntryResult) -> None:
        if isinstance(result, EntrySucceeded):
            self.packages.append(PackageResult(package_name=result.package_name, result="succeeded"))
            self.registrations.extend(result.registrations)
        else:
            self.packages.append(PackageResult(package_name=result.package_name, result="failed"))
            self.error_count += 1


@dataclass
class ResolvedUnits:
    root: Path
    base_paths: List[str]


NamespaceReader = Callable[[Path], Dict[str, List[str]]]


class Orchestrator:
    """Coordinates generate-all runs across the base paths of the specs corpus."""

    def __init__(
        self,
        config: SchemaGenConfig | None = None,
        *,
        checkout: SpecsCheckout | None = None,
        generator: Generator | None = None,
        registry: SchemaRegistry | None = None,
        autogen_list: AutogenList | None = None,
        namespace_reader: NamespaceReader | None = None,
    ) -> None:
        self.config = config or load_config()
        self.checkout = checkout or SpecsCheckout()
        self.generator = generator or SchemaGenerator(
            self.config.generator.command,
            _require_path(self.config.schemas_dir),
            timeout=self.config.generator.timeout,
        )
        self.registry = registry or SchemaRegistry(self.config.registry_path)
        self.autogen_list = autogen_list or AutogenList.load(self.config.autogen_list_path)
        self.namespace_reader = namespace_reader or get_api_versions_by_namespace
        self.logger = get_logger("orchestrator")

    def resolve_units(self, params: RunParams) -> ResolvedUnits:
        """Return the corpus root and the base paths selected for this batch."""
        if params.local_path:
            root = resolve_absolute_path(params.local_path)
            base_paths = generate_base_paths(root)
        else:
            root = _require_path(self.config.specs_repo_path)
            base_paths = clone_and_generate_base_paths(
                root,
                self.config.specs_repo_uri,
                self.config.specs_repo_commit,
                self.checkout,
            )
        selected = partition(base_paths, params.batch_count, params.batch_index)
        if params.sharded:
            self.logger.info(
                "Batch %s/%s selected %d of %d base paths",
                params.batch_index,
                params.batch_count,
                len(selected),
                len(base_paths),
            )
        return ResolvedUnits(root=root, base_paths=selected)

    def run(self, params: RunParams | None = None) -> RunReport:
        """Run generation for every selected base path and report the outcome."""
        params = params or RunParams()
        units = self.resolve_units(params)
        self.logger.info("Processing %d base paths from %s", len(units.base_paths), units.root)

        outcome = reduce(
            UnitOutcome.merge,
            (self.process_unit(units.root, base_path, params.readme_files) for base_path in units.base_paths),
            UnitOutcome(),
        )

        self.registry.save(outcome.registrations)
        report = RunReport(packages=outcome.packages)
        self.logger.info(
            "Generated %d packages (%d failed), %d schema registrations",
            len(report.packages),
            outcome.error_count,
            len(outcome.registrations),
        )

        if params.output_path:
            output_path = resolve_absolute_path(params.output_path)
            write_json_atomically(report.to_dict(), output_path)
            self.logger.info("Run report written to %s", output_path)
        elif outcome.error_count > 0:
            raise AggregateRunError(outcome.error_count)
        return report

    def process_unit(
        self,
        root: Path,
        base_path: str,
        readme_files: Optional[Sequence[str]] = None,
    ) -> UnitOutcome:
        """Expand, filter, clear, and generate every entry of one base path."""
        readme = validate_and_return_readme_path(root, base_path)
        namespaces = list(self.namespace_reader(readme))
        entries = find_or_generate_autogen_entries(base_path, namespaces, self.autogen_list)
        entries = filter_entries(entries, readme_files)
        self.logger.debug("Base path %s expanded to %d entries", base_path, len(entries))

        self.registry.clear(entries)

        outcome = UnitOutcome()
        for entry in entries:
            if entry.disabled_for_autogen:
                entry_logger(self.logger, entry.base_path, entry.namespace).debug("Skipping disabled entry")
                continue
            outcome.record(self.run_entry(root, entry))
        return outcome

    def run_entry(self, root: Path, entry: AutogenEntry) -> EntryResult:
        """Generate one entry, converting any failure into an ``EntryFailed`` result."""
        log = entry_logger(self.logger, entry.base_path, entry.namespace)
        try:
            readme = validate_and_return_readme_path(root, entry.readme_file or entry.base_path)
            package_name = get_package_string(readme)
            registrations = self.generator.generate(readme, entry)
        except Exception as exc:
            self._log_exception(log, f"Caught exception processing autogenlist entry {entry.base_path}.", exc)
            return EntryFailed(package_name=entry.base_path, error=exc)
        log.info("Generated %s", package_name)
        return EntrySucceeded(package_name=package_name, registrations=list(registrations))

    def _log_exception(self, log: logging.LoggerAdapter, message: str, exc: Exception) -> None:
        log.error("%s %s", message, exc)
        log.debug("Traceback for %s", message, exc_info=exc)


def _require_path(value: Path | None) -> Path:
    if value is None:  # pragma: no cover - SchemaGenConfig fills defaults
        raise ValueError("path setting is not configured")
    return value


__all__ = [
    "AggregateRunError",
    "EntryFailed",
    "EntryResult",
    "EntrySucceeded",
    "Orchestrator",
    "ResolvedUnits",
    "UnitOutcome",
]
