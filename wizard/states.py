"""Wizard modes. Each mode is its own frozen dataclass holding only its data."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Union

from manifests import Manifest
from pipeline.types import BuildRequest

INPUT_MAX_LENGTH = 200


@dataclass(frozen=True)
class InputField:
    label: str
    value: str = ""
    placeholder: str = ""
    required: bool = False
    secret: bool = False
    max_length: int = INPUT_MAX_LENGTH

    def insert(self, text: str) -> "InputField":
        cleaned = "".join(ch for ch in text if ch.isprintable())
        return replace(self, value=(self.value + cleaned)[: self.max_length])

    def backspace(self) -> "InputField":
        return replace(self, value=self.value[:-1])

    def clear(self) -> "InputField":
        return replace(self, value="")


@dataclass(frozen=True)
class Form:
    fields: tuple[InputField, ...] = ()
    focus: int = 0

    def focus_next(self) -> "Form":
        if not self.fields:
            return self
        return replace(self, focus=(self.focus + 1) % len(self.fields))

    def focus_previous(self) -> "Form":
        if not self.fields:
            return self
        return replace(self, focus=(self.focus - 1) % len(self.fields))

    def edit(self, action: str, text: str = "") -> "Form":
        """Apply insert/backspace/clear to the focused field."""
        if not self.fields:
            return self
        current = self.fields[self.focus]
        if action == "insert":
            updated = current.insert(text)
        elif action == "backspace":
            updated = current.backspace()
        else:
            updated = current.clear()
        fields = self.fields[: self.focus] + (updated,) + self.fields[self.focus + 1 :]
        return replace(self, fields=fields)

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(f.value for f in self.fields)


@dataclass(frozen=True)
class DeployTarget:
    base_folder: str
    folder_name: str

    @property
    def path(self) -> Path:
        return Path(self.base_folder).expanduser() / self.folder_name


class BuildStage(Enum):
    BUILDING = "building"
    DEPLOYING = "deploying"


@dataclass(frozen=True)
class SelectSkill:
    cursor: int = 0
    error: str = ""


@dataclass(frozen=True)
class ConfigureVariables:
    manifest: Manifest
    form: Form
    error: str = ""


@dataclass(frozen=True)
class ConfigureDeployTarget:
    manifest: Manifest
    form: Form
    error: str = ""


@dataclass(frozen=True)
class Confirm:
    manifest: Manifest
    target: DeployTarget


@dataclass(frozen=True)
class OverwriteWarning:
    manifest: Manifest
    target: DeployTarget


@dataclass(frozen=True)
class Building:
    manifest: Manifest
    target: DeployTarget
    request: BuildRequest
    stage: BuildStage = BuildStage.BUILDING
    build_output: str = ""


@dataclass(frozen=True)
class Done:
    manifest: Manifest
    target: DeployTarget
    ok: bool
    message: str
    output: str = ""


WizardState = Union[
    SelectSkill,
    ConfigureVariables,
    ConfigureDeployTarget,
    Confirm,
    OverwriteWarning,
    Building,
    Done,
]


@dataclass
class WizardSession:
    """Values that outlive a single mode: typed variables and deploy targets."""

    values: dict[str, str] = field(default_factory=dict)
    base_folder: str = ""
    folder_names: dict[str, str] = field(default_factory=dict)
    cursor: int = 0
