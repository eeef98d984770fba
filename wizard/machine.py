"""Build-and-deploy wizard state machine.

The machine is pure bookkeeping: it receives one event at a time through
update(), replaces its current state, and returns at most one command for
the driver to execute (start a build, start a deploy, quit). Builds and
deploys report back as BuildFinished / DeployFinished events.

Flow:

    SelectSkill -> ConfigureVariables -> ConfigureDeployTarget -> Confirm
        -> [OverwriteWarning] -> Building -> Done

Every input step can be left with escape without losing typed values.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Callable, Sequence

from config import Config
from manifests import Manifest, SkillError
from pipeline.build import make_build_request
from pipeline.deploy import make_deploy_request
from pipeline.types import BuildResult, DeployResult
from utils import get_logger

from .messages import (
    BuildFinished,
    Command,
    DeployFinished,
    Event,
    KeyPress,
    Quit,
    StartBuild,
    StartDeploy,
    TextInput,
)
from .states import (
    BuildStage,
    Building,
    Confirm,
    ConfigureDeployTarget,
    ConfigureVariables,
    DeployTarget,
    Done,
    Form,
    InputField,
    OverwriteWarning,
    SelectSkill,
    WizardSession,
    WizardState,
)

logger = get_logger(__name__)

SKILLS_FOLDER_LABEL = "Skills Folder"
SKILL_NAME_LABEL = "Skill Name"
SKILLS_FOLDER_PLACEHOLDER = "~/.claude/skills/"
DEPLOY_SUCCESS_MESSAGE = "Skill deployed successfully!"

_NEXT_KEYS = {"tab", "down"}
_PREVIOUS_KEYS = {"s-tab", "up"}
_ADVANCE_KEYS = {"enter", "c-d"}


class WizardStateMachine:
    """Owns the wizard state; the only writer of it."""

    def __init__(
        self,
        manifests: Sequence[Manifest],
        errors: Sequence[SkillError],
        project_root: Path,
        default_skills_folder: str | None = None,
        artifact_exists: Callable[[Path], bool] | None = None,
    ) -> None:
        self.manifests = list(manifests)
        self.errors = list(errors)
        self.project_root = project_root
        self.session = WizardSession(
            base_folder=(
                Config.DEFAULT_SKILLS_FOLDER
                if default_skills_folder is None
                else default_skills_folder
            )
        )
        self.state: WizardState = SelectSkill()
        self.quitting = False
        self._artifact_exists = artifact_exists or Path.exists

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def update(self, event: Event) -> Command | None:
        """Apply one event. Events a mode does not handle change nothing."""
        if isinstance(event, BuildFinished):
            return self._on_build_finished(event.result)
        if isinstance(event, DeployFinished):
            return self._on_deploy_finished(event.result)

        if isinstance(event, KeyPress) and event.key == "c-c":
            # No cancellation once a build is running
            if isinstance(self.state, Building):
                return None
            return self._quit()

        state = self.state
        if isinstance(state, SelectSkill):
            return self._on_select_skill(state, event)
        if isinstance(state, ConfigureVariables):
            return self._on_configure_variables(state, event)
        if isinstance(state, ConfigureDeployTarget):
            return self._on_configure_deploy_target(state, event)
        if isinstance(state, Confirm):
            return self._on_confirm(state, event)
        if isinstance(state, OverwriteWarning):
            return self._on_overwrite_warning(state, event)
        if isinstance(state, Done):
            return self._on_done(state, event)
        return None

    @property
    def entry_count(self) -> int:
        return len(self.manifests) + len(self.errors)

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def _on_select_skill(self, state: SelectSkill, event: Event) -> Command | None:
        key = _choice_key(event)
        if key in ("q", "escape"):
            return self._quit()
        if key in ("up", "k"):
            if state.cursor > 0:
                self.state = replace(state, cursor=state.cursor - 1)
            return None
        if key in ("down", "j"):
            if state.cursor < self.entry_count - 1:
                self.state = replace(state, cursor=state.cursor + 1)
            return None
        if key != "enter" or self.entry_count == 0:
            return None

        self.session.cursor = state.cursor
        if state.cursor < len(self.manifests):
            manifest = self.manifests[state.cursor]
            logger.debug(f"Selected skill {manifest.name}")
            self.state = ConfigureVariables(manifest=manifest, form=self._variables_form(manifest))
        else:
            skill_error = self.errors[state.cursor - len(self.manifests)]
            self.state = replace(state, error=skill_error.reason)
        return None

    def _on_configure_variables(
        self, state: ConfigureVariables, event: Event
    ) -> Command | None:
        if isinstance(event, TextInput):
            self.state = replace(state, form=state.form.edit("insert", event.text))
            return None
        if not isinstance(event, KeyPress):
            return None

        key = event.key
        if key == "escape":
            self._save_variables(state.manifest, state.form)
            self.state = SelectSkill(cursor=self.session.cursor)
        elif key in _NEXT_KEYS:
            self.state = replace(state, form=state.form.focus_next())
        elif key in _PREVIOUS_KEYS:
            self.state = replace(state, form=state.form.focus_previous())
        elif key in ("backspace", "c-u"):
            action = "backspace" if key == "backspace" else "clear"
            self.state = replace(state, form=state.form.edit(action))
        elif key in _ADVANCE_KEYS:
            error = validate_variables(state.manifest, state.form)
            if error:
                self.state = replace(state, error=error)
                return None
            self._save_variables(state.manifest, state.form)
            self.state = ConfigureDeployTarget(
                manifest=state.manifest, form=self._target_form(state.manifest)
            )
        return None

    def _on_configure_deploy_target(
        self, state: ConfigureDeployTarget, event: Event
    ) -> Command | None:
        if isinstance(event, TextInput):
            self.state = replace(state, form=state.form.edit("insert", event.text))
            return None
        if not isinstance(event, KeyPress):
            return None

        key = event.key
        if key == "escape":
            self._save_target(state.manifest, state.form)
            self.state = ConfigureVariables(
                manifest=state.manifest, form=self._variables_form(state.manifest)
            )
        elif key in _NEXT_KEYS:
            self.state = replace(state, form=state.form.focus_next())
        elif key in _PREVIOUS_KEYS:
            self.state = replace(state, form=state.form.focus_previous())
        elif key in ("backspace", "c-u"):
            action = "backspace" if key == "backspace" else "clear"
            self.state = replace(state, form=state.form.edit(action))
        elif key in _ADVANCE_KEYS:
            error = validate_target(state.form)
            if error:
                self.state = replace(state, error=error)
                return None
            target = self._save_target(state.manifest, state.form)
            self.state = Confirm(manifest=state.manifest, target=target)
        return None

    def _on_confirm(self, state: Confirm, event: Event) -> Command | None:
        key = _choice_key(event)
        if key in ("n", "escape"):
            self.state = ConfigureDeployTarget(
                manifest=state.manifest, form=self._target_form(state.manifest)
            )
            return None
        if key not in ("y", "enter"):
            return None

        if self.artifact_exists(state.manifest, state.target):
            self.state = OverwriteWarning(manifest=state.manifest, target=state.target)
            return None
        return self._start_build(state.manifest, state.target)

    def _on_overwrite_warning(self, state: OverwriteWarning, event: Event) -> Command | None:
        key = _choice_key(event)
        if key in ("n", "escape"):
            self.state = Confirm(manifest=state.manifest, target=state.target)
            return None
        if key == "y":
            return self._start_build(state.manifest, state.target)
        return None

    def _on_done(self, state: Done, event: Event) -> Command | None:
        key = _choice_key(event)
        if key == "r":
            # Saved values survive a restart; the selection does not
            self.session.cursor = 0
            self.state = SelectSkill()
            return None
        if key in ("enter", "q", "escape"):
            return self._quit()
        return None

    # ------------------------------------------------------------------
    # Task completion
    # ------------------------------------------------------------------

    def _on_build_finished(self, result: BuildResult) -> Command | None:
        state = self.state
        if not isinstance(state, Building) or state.stage is not BuildStage.BUILDING:
            return None

        if not result.ok or result.artifact is None:
            self.state = Done(
                manifest=state.manifest,
                target=state.target,
                ok=False,
                message=result.error or "build failed",
                output=result.output,
            )
            return None

        self.state = replace(state, stage=BuildStage.DEPLOYING, build_output=result.output)
        request = make_deploy_request(
            state.manifest,
            result.artifact,
            state.request.staging_dir,
            state.target.path,
            self.session.values,
        )
        return StartDeploy(request)

    def _on_deploy_finished(self, result: DeployResult) -> Command | None:
        state = self.state
        if not isinstance(state, Building) or state.stage is not BuildStage.DEPLOYING:
            return None

        self.state = Done(
            manifest=state.manifest,
            target=state.target,
            ok=result.ok,
            message=DEPLOY_SUCCESS_MESSAGE if result.ok else (result.error or "deploy failed"),
            output=state.build_output,
        )
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def artifact_exists(self, manifest: Manifest, target: DeployTarget) -> bool:
        """Whether bin/<binary> is already present under the deploy path."""
        return self._artifact_exists(target.path / "bin" / manifest.binary_name)

    def _start_build(self, manifest: Manifest, target: DeployTarget) -> Command:
        request = make_build_request(manifest, self.project_root)
        self.state = Building(manifest=manifest, target=target, request=request)
        logger.info(f"Starting build of {manifest.name} for {target.path}")
        return StartBuild(request)

    def _quit(self) -> Command:
        self.quitting = True
        return Quit()

    def _variables_form(self, manifest: Manifest) -> Form:
        fields = tuple(
            InputField(
                label=v.label,
                value=self.session.values.get(v.name, ""),
                placeholder=v.placeholder or v.default,
                required=v.required,
                secret=v.is_secret,
            )
            for v in manifest.variables
        )
        return Form(fields=fields)

    def _target_form(self, manifest: Manifest) -> Form:
        return Form(
            fields=(
                InputField(
                    label=SKILLS_FOLDER_LABEL,
                    value=self.session.base_folder,
                    placeholder=SKILLS_FOLDER_PLACEHOLDER,
                    required=True,
                ),
                InputField(
                    label=SKILL_NAME_LABEL,
                    value=self.session.folder_names.get(manifest.name, manifest.name),
                    placeholder=manifest.name,
                    required=True,
                    max_length=100,
                ),
            )
        )

    def _save_variables(self, manifest: Manifest, form: Form) -> None:
        for variable, value in zip(manifest.variables, form.values):
            self.session.values[variable.name] = value

    def _save_target(self, manifest: Manifest, form: Form) -> DeployTarget:
        base_folder, folder_name = form.values
        self.session.base_folder = base_folder
        self.session.folder_names[manifest.name] = folder_name
        return DeployTarget(base_folder=base_folder, folder_name=folder_name)


def validate_variables(manifest: Manifest, form: Form) -> str:
    """Return an error naming the first empty required variable, or ""."""
    for variable, value in zip(manifest.variables, form.values):
        if variable.required and value == "":
            return f"{variable.label} is required"
    return ""


def validate_target(form: Form) -> str:
    for input_field in form.fields:
        if input_field.value == "":
            return f"{input_field.label} is required"
    return ""


def _choice_key(event: Event) -> str | None:
    """Key name for modes that react to single keys rather than text entry."""
    if isinstance(event, KeyPress):
        return event.key
    if isinstance(event, TextInput) and len(event.text) == 1:
        return event.text.lower()
    return None
