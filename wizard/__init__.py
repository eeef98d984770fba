"""Interactive build-and-deploy wizard."""

from .app import WizardApp, WizardDriver, run_wizard
from .machine import WizardStateMachine
from .messages import (
    BuildFinished,
    DeployFinished,
    KeyPress,
    Quit,
    StartBuild,
    StartDeploy,
    TextInput,
)
from .view import mask_secret, render, render_text

__all__ = [
    "BuildFinished",
    "DeployFinished",
    "KeyPress",
    "Quit",
    "StartBuild",
    "StartDeploy",
    "TextInput",
    "WizardApp",
    "WizardDriver",
    "WizardStateMachine",
    "mask_secret",
    "render",
    "render_text",
    "run_wizard",
]
