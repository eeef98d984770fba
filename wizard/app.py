"""Run the wizard: a prompt_toolkit screen in front of an event queue."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style

from manifests import ManifestRegistry
from pipeline import BuildRequest, BuildResult, DeployRequest, DeployResult
from pipeline import build_skill, deploy_skill
from utils import get_logger
from utils.tui.theme import Theme

from .machine import WizardStateMachine
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
from .states import WizardState
from .view import render

logger = get_logger(__name__)

BuildFn = Callable[[BuildRequest], Awaitable[BuildResult]]
DeployFn = Callable[[DeployRequest], Awaitable[DeployResult]]

NAMED_KEYS = (
    "enter",
    "escape",
    "tab",
    "s-tab",
    "up",
    "down",
    "backspace",
    "c-u",
    "c-d",
    "c-c",
)


class WizardDriver:
    """Feeds queued events to the machine and runs the commands it returns.

    Builds and deploys run as tasks; their results come back through the
    same queue, so the machine only ever sees one event at a time.
    """

    def __init__(
        self,
        machine: WizardStateMachine,
        build: BuildFn = build_skill,
        deploy: DeployFn = deploy_skill,
        on_update: Callable[[], None] | None = None,
        on_quit: Callable[[], None] | None = None,
    ) -> None:
        self.machine = machine
        self.queue: asyncio.Queue[Event] = asyncio.Queue()
        self._build = build
        self._deploy = deploy
        self.on_update = on_update
        self.on_quit = on_quit
        self._tasks: set[asyncio.Task] = set()

    def post(self, event: Event) -> None:
        self.queue.put_nowait(event)

    async def run(self) -> WizardState:
        """Process events until the machine asks to quit; return the final state."""
        while True:
            event = await self.queue.get()
            command = self.machine.update(event)
            if self.on_update:
                self.on_update()
            if isinstance(command, Quit):
                break
            if command is not None:
                self._execute(command)

        if self.on_quit:
            self.on_quit()
        return self.machine.state

    def _execute(self, command: Command) -> None:
        if isinstance(command, StartBuild):
            self._spawn(self._run_build(command.request))
        elif isinstance(command, StartDeploy):
            self._spawn(self._run_deploy(command.request))

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_build(self, request: BuildRequest) -> None:
        try:
            result = await self._build(request)
        except Exception as e:
            logger.exception("Build task crashed")
            result = BuildResult(ok=False, error=f"build failed: {e}")
        self.post(BuildFinished(result))

    async def _run_deploy(self, request: DeployRequest) -> None:
        try:
            result = await self._deploy(request)
        except Exception as e:
            logger.exception("Deploy task crashed")
            result = DeployResult(
                ok=False, deploy_path=request.deploy_path, error=f"deploy failed: {e}"
            )
        self.post(DeployFinished(result))


def _wizard_style() -> Style:
    colors = Theme.get_colors()
    style_dict = Theme.get_prompt_toolkit_style()
    style_dict.update(Theme.get_wizard_style())
    style_dict["title"] = f"{colors.primary} bold"
    return Style.from_dict(style_dict)


class WizardApp:
    """prompt_toolkit front end: keys in, rendered state out."""

    def __init__(self, machine: WizardStateMachine, version: str = "") -> None:
        self.machine = machine
        self.version = version
        self.application = self._build_application()
        self.driver = WizardDriver(
            machine,
            on_update=self.application.invalidate,
            on_quit=self._exit,
        )

    def _build_application(self) -> Application:
        kb = KeyBindings()

        for key in NAMED_KEYS:
            kb.add(key)(self._named_key_handler(key))

        @kb.add(Keys.Any)
        def _text(event) -> None:
            self.driver.post(TextInput(event.data))

        @kb.add(Keys.BracketedPaste)
        def _paste(event) -> None:
            self.driver.post(TextInput(event.data.replace("\r", "").replace("\n", "")))

        control = FormattedTextControl(
            lambda: render(self.machine, self.version), focusable=True
        )
        window = Window(content=control, always_hide_cursor=True, wrap_lines=True)

        return Application(
            layout=Layout(HSplit([window])),
            key_bindings=kb,
            style=_wizard_style(),
            full_screen=False,
            mouse_support=False,
        )

    def _named_key_handler(self, key: str):
        def _handler(event) -> None:
            self.driver.post(KeyPress(key))

        return _handler

    def _exit(self) -> None:
        if self.application.is_running:
            self.application.exit()

    async def run(self) -> WizardState:
        driver_task = asyncio.create_task(self.driver.run())
        try:
            await self.application.run_async()
        finally:
            if not driver_task.done():
                driver_task.cancel()
        return self.machine.state


async def run_wizard(project_root: Path, version: str = "") -> WizardState:
    """Discover skills under project_root and run the interactive wizard."""
    registry = ManifestRegistry(project_root)
    await registry.load()
    machine = WizardStateMachine(registry.manifests, registry.errors, project_root)
    return await WizardApp(machine, version).run()
