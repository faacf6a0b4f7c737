"""Core data models shared across schemagen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

PackageStatus = Literal["succeeded", "failed"]


@dataclass(frozen=True)
class AutogenEntry:
    """A single generation job derived from a base path in the specs corpus."""

    base_path: str
    namespace: str
    readme_file: Optional[str] = None
    disabled_for_autogen: bool = False
    suffix: Optional[str] = None

    @property
    def key(self) -> str:
        """Registry owner key: base path and namespace, compared case-insensitively."""
        return f"{self.base_path.lower()}|{self.namespace.lower()}{self.suffix or ''}"


@dataclass(frozen=True)
class SchemaConfiguration:
    """Registration of generated schema files attributed to an autogen entry."""

    owner: str
    namespace: str
    api_version: str
    references: Tuple[str, ...]
    suffix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "namespace": self.namespace,
            "apiVersion": self.api_version,
            "references": list(self.references),
            "suffix": self.suffix,
        }

    @classmethod
    def from_dict(cls, payload: object) -> Optional["SchemaConfiguration"]:
        if not isinstance(payload, dict):
            return None
        owner = payload.get("owner")
        namespace = payload.get("namespace")
        api_version = payload.get("apiVersion")
        references = payload.get("references")
        suffix = payload.get("suffix")
        if not isinstance(owner, str) or not isinstance(namespace, str):
            return None
        if not isinstance(api_version, str) or not isinstance(references, list):
            return None
        if suffix is not None and not isinstance(suffix, str):
            return None
        return cls(
            owner=owner,
            namespace=namespace,
            api_version=api_version,
            references=tuple(str(ref) for ref in references),
            suffix=suffix,
        )


@dataclass
class PackageResult:
    """Outcome of one autogen entry in a run report."""

    package_name: str
    result: PackageStatus
    path: List[str] = field(default_factory=lambda: ["schemas"])

    def to_dict(self) -> Dict[str, Any]:
        return {"packageName": self.package_name, "result": self.result, "path": list(self.path)}


@dataclass
class RunReport:
    """Ordered per-entry outcomes for one generate-all invocation."""

    packages: List[PackageResult] = field(default_factory=list)

    @property
    def failed(self) -> List[PackageResult]:
        return [package for package in self.packages if package.result == "failed"]

    def to_dict(self) -> Dict[str, Any]:
        return {"packages": [package.to_dict() for package in self.packages]}
