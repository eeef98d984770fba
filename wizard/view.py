"""Render the wizard state as prompt_toolkit formatted text."""

from __future__ import annotations

from manifests import Manifest

from .machine import WizardStateMachine
from .states import (
    BuildStage,
    Building,
    Confirm,
    ConfigureDeployTarget,
    ConfigureVariables,
    DeployTarget,
    Done,
    Form,
    OverwriteWarning,
    SelectSkill,
)

Fragments = list[tuple[str, str]]

SECRET_PREVIEW_LENGTH = 4
_SECRET_FULL_MASK_LENGTH = 8

_FORM_HINT = "tab/↑↓ move · ctrl+u clear · enter continue · esc back"


def mask_secret(value: str) -> str:
    """Short preview of a secret: a few leading characters, never the whole value."""
    if not value:
        return ""
    if len(value) <= _SECRET_FULL_MASK_LENGTH:
        return "*" * len(value)
    return value[:SECRET_PREVIEW_LENGTH] + "…"


def render(machine: WizardStateMachine, version: str = "") -> Fragments:
    title = f"SkillFactory v{version}" if version else "SkillFactory"
    lines: Fragments = [("class:title", f"{title}\n\n")]

    state = machine.state
    if isinstance(state, SelectSkill):
        lines.extend(_render_select(machine, state))
    elif isinstance(state, ConfigureVariables):
        lines.extend(_render_variables(state))
    elif isinstance(state, ConfigureDeployTarget):
        lines.extend(_render_target(state))
    elif isinstance(state, Confirm):
        lines.extend(_render_confirm(machine, state))
    elif isinstance(state, OverwriteWarning):
        lines.extend(_render_overwrite(state))
    elif isinstance(state, Building):
        lines.extend(_render_building(state))
    elif isinstance(state, Done):
        lines.extend(_render_done(state))
    return lines


def render_text(machine: WizardStateMachine, version: str = "") -> str:
    """Plain-text form of render(), without style classes."""
    return "".join(text for _, text in render(machine, version))


def _render_select(machine: WizardStateMachine, state: SelectSkill) -> Fragments:
    lines: Fragments = [("class:hint", "Select a skill to build and deploy\n\n")]

    if machine.entry_count == 0:
        lines.append(("class:warning", "No skills found.\n"))
        lines.append(("class:hint", "\nq quit\n"))
        return lines

    index = 0
    for manifest in machine.manifests:
        selected = index == state.cursor
        prefix = "> " if selected else "  "
        style = "class:selected" if selected else "class:item"
        version = f" ({manifest.version})" if manifest.version else ""
        lines.append((style, f"{prefix}{manifest.name}{version}"))
        if manifest.description:
            lines.append(("class:hint", f"  {manifest.description}"))
        lines.append(("", "\n"))
        index += 1

    for skill_error in machine.errors:
        selected = index == state.cursor
        prefix = "> " if selected else "  "
        style = "class:selected" if selected else "class:error"
        lines.append((style, f"{prefix}✗ {skill_error.name} (invalid)\n"))
        index += 1

    if state.error:
        lines.append(("class:error", f"\n{state.error}\n"))
    lines.append(("class:hint", "\n↑/↓ move · enter select · q quit\n"))
    return lines


def _render_form(form: Form, descriptions: list[str]) -> Fragments:
    lines: Fragments = []
    for idx, input_field in enumerate(form.fields):
        focused = idx == form.focus
        marker = "> " if focused else "  "
        required = " *" if input_field.required else ""
        lines.append(("class:label", f"{marker}{input_field.label}{required}: "))

        if input_field.value:
            shown = mask_secret(input_field.value) if input_field.secret else input_field.value
            lines.append(("class:input.focused" if focused else "class:input", shown))
        elif input_field.placeholder:
            lines.append(("class:placeholder", input_field.placeholder))
        if focused:
            lines.append(("class:cursor", "▏"))
        lines.append(("", "\n"))

        if focused and idx < len(descriptions) and descriptions[idx]:
            lines.append(("class:hint", f"    {descriptions[idx]}\n"))
    return lines


def _render_variables(state: ConfigureVariables) -> Fragments:
    manifest = state.manifest
    lines: Fragments = [("class:heading", f"Configure {manifest.name}\n\n")]
    if not manifest.variables:
        lines.append(("class:hint", "This skill has no variables.\n"))
    lines.extend(_render_form(state.form, [v.description for v in manifest.variables]))
    if state.error:
        lines.append(("class:error", f"\n{state.error}\n"))
    lines.append(("class:hint", f"\n{_FORM_HINT}\n"))
    return lines


def _render_target(state: ConfigureDeployTarget) -> Fragments:
    lines: Fragments = [("class:heading", f"Deploy target for {state.manifest.name}\n\n")]
    lines.extend(_render_form(state.form, []))

    base_folder, folder_name = state.form.values
    if base_folder and folder_name:
        preview = DeployTarget(base_folder=base_folder, folder_name=folder_name).path
        lines.append(("class:hint", f"\nDeploy path: {preview}\n"))
    if state.error:
        lines.append(("class:error", f"\n{state.error}\n"))
    lines.append(("class:hint", f"\n{_FORM_HINT}\n"))
    return lines


def _summary(machine: WizardStateMachine, manifest: Manifest) -> Fragments:
    lines: Fragments = []
    for variable in manifest.variables:
        value = machine.session.values.get(variable.name, "")
        shown = mask_secret(value) if variable.is_secret else value
        lines.append(("class:label", f"  {variable.label}: "))
        lines.append(("class:value" if value else "class:placeholder", f"{shown or '(empty)'}\n"))
    return lines


def _render_confirm(machine: WizardStateMachine, state: Confirm) -> Fragments:
    manifest = state.manifest
    lines: Fragments = [
        ("class:heading", "Ready to deploy\n\n"),
        ("class:label", "  Skill: "),
        ("class:value", f"{manifest.name}\n"),
        ("class:label", "  Binary: "),
        ("class:value", f"{manifest.binary_name}\n"),
        ("class:label", "  Deploy path: "),
        ("class:value", f"{state.target.path}\n"),
    ]
    if manifest.variables:
        lines.append(("", "\n"))
        lines.extend(_summary(machine, manifest))
    lines.append(("class:hint", "\nBuild and deploy? y/enter confirm · n/esc back\n"))
    return lines


def _render_overwrite(state: OverwriteWarning) -> Fragments:
    existing = state.target.path / "bin" / state.manifest.binary_name
    return [
        ("class:warning", "Existing deployment found\n\n"),
        ("class:value", f"  {existing}\n\n"),
        ("class:hint", "The binary, .env and docs will be replaced.\n"),
        ("class:hint", "\nOverwrite? y confirm · n/esc back\n"),
    ]


def _render_building(state: Building) -> Fragments:
    if state.stage is BuildStage.BUILDING:
        return [("class:heading", f"Building {state.manifest.name}...\n")]
    lines: Fragments = []
    if state.build_output:
        lines.append(("class:success", f"{state.build_output}\n"))
    lines.append(("class:heading", f"Deploying to {state.target.path}...\n"))
    return lines


def _render_done(state: Done) -> Fragments:
    lines: Fragments = []
    if state.ok:
        lines.append(("class:success", f"✓ {state.message}\n\n"))
        lines.append(("class:label", "  Deploy path: "))
        lines.append(("class:value", f"{state.target.path}\n"))
        if state.output:
            lines.append(("class:hint", f"  {state.output}\n"))
    else:
        lines.append(("class:error", f"✗ {state.message}\n"))
        if state.output:
            lines.append(("class:output", f"\n{state.output.rstrip()}\n"))
    lines.append(("class:hint", "\nr restart · enter/q quit\n"))
    return lines
