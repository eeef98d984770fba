"""Data models shared by the build, deploy and documentation steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from manifests import Manifest


@dataclass(frozen=True)
class FlagDescriptor:
    names: tuple[str, ...]
    type: str = ""
    description: str = ""

    @property
    def short(self) -> str | None:
        for name in self.names:
            if not name.startswith("--"):
                return name
        return None

    @property
    def long(self) -> str | None:
        for name in self.names:
            if name.startswith("--"):
                return name
        return None

    @property
    def display_name(self) -> str:
        return ", ".join(self.names)

    @property
    def required(self) -> bool:
        return "(required)" in self.description.lower()


@dataclass(frozen=True)
class CommandNode:
    name: str
    description: str = ""
    usage: str = ""
    flags: tuple[FlagDescriptor, ...] = ()
    children: tuple["CommandNode", ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def iter_leaves(self, prefix: str = "") -> list[tuple[str, "CommandNode"]]:
        """Return (command path, node) for every leaf below this node, in order.

        The node itself is the root of the path and not part of it.
        """
        leaves: list[tuple[str, CommandNode]] = []
        for child in self.children:
            path = f"{prefix} {child.name}".strip()
            if child.is_leaf:
                leaves.append((path, child))
            else:
                leaves.extend(child.iter_leaves(path))
        return leaves


@dataclass(frozen=True)
class BuildRequest:
    """Everything a build needs, captured when the user confirms."""

    skill_dir: Path
    entry: str
    binary_name: str
    staging_dir: Path
    command: str

    @property
    def output_path(self) -> Path:
        return self.staging_dir / self.binary_name


@dataclass(frozen=True)
class BuildResult:
    ok: bool
    artifact: Path | None = None
    output: str = ""
    error: str = ""


@dataclass(frozen=True)
class DeployRequest:
    manifest: Manifest
    artifact: Path
    staging_dir: Path
    deploy_path: Path
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only copy, independent of the wizard's session dict
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def bin_dir(self) -> Path:
        return self.deploy_path / "bin"

    @property
    def deployed_binary(self) -> Path:
        return self.bin_dir / self.manifest.binary_name


@dataclass(frozen=True)
class DeployResult:
    ok: bool
    deploy_path: Path | None = None
    docs_path: Path | None = None
    error: str = ""
