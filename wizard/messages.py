"""Events the wizard consumes and commands it hands back to its driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pipeline.types import BuildRequest, BuildResult, DeployRequest, DeployResult


@dataclass(frozen=True)
class KeyPress:
    """A named key: enter, escape, tab, s-tab, up, down, backspace, c-u, c-d, c-c."""

    key: str


@dataclass(frozen=True)
class TextInput:
    """Characters typed or pasted by the user."""

    text: str


@dataclass(frozen=True)
class BuildFinished:
    result: BuildResult


@dataclass(frozen=True)
class DeployFinished:
    result: DeployResult


Event = Union[KeyPress, TextInput, BuildFinished, DeployFinished]


@dataclass(frozen=True)
class StartBuild:
    request: BuildRequest


@dataclass(frozen=True)
class StartDeploy:
    request: DeployRequest


@dataclass(frozen=True)
class Quit:
    pass


Command = Union[StartBuild, StartDeploy, Quit]
