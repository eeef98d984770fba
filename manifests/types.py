"""Data models for skill manifests."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class VariableType(Enum):
    TEXT = "text"
    SECRET = "secret"
    JSON = "json"


@dataclass(frozen=True)
class Variable:
    """A configuration input that ends up as one line of the deployed .env file."""

    name: str
    label: str
    description: str = ""
    required: bool = False
    placeholder: str = ""
    default: str = ""
    type: VariableType = VariableType.TEXT

    @property
    def is_secret(self) -> bool:
        return self.type is VariableType.SECRET


@dataclass(frozen=True)
class BuildConfig:
    entry: str = "."
    binary: str = ""


@dataclass(frozen=True)
class FileRule:
    source: str
    target: str


@dataclass(frozen=True)
class DeployConfig:
    files: tuple[FileRule, ...] = ()
    wrapper: bool = False


@dataclass(frozen=True)
class DocsConfig:
    template: str = "SKILL.template.md"
    output: str = "SKILL.md"


@dataclass(frozen=True)
class Manifest:
    name: str
    description: str
    path: Path
    version: str = ""
    detailed_description: str = ""
    variables: tuple[Variable, ...] = ()
    build: BuildConfig = field(default_factory=BuildConfig)
    deploy: DeployConfig = field(default_factory=DeployConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)

    @property
    def binary_name(self) -> str:
        return self.build.binary or self.name

    @property
    def skill_description(self) -> str:
        """Description used in the generated documentation header."""
        return self.detailed_description or self.description


@dataclass(frozen=True)
class SkillError:
    name: str
    path: Path
    reason: str
