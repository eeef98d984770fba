"""Tests for the event loop that connects the wizard to build and deploy tasks."""

import asyncio

import pytest

from manifests import BuildConfig, Manifest, Variable
from pipeline.types import BuildResult, DeployResult
from wizard.app import WizardDriver
from wizard.machine import DEPLOY_SUCCESS_MESSAGE, WizardStateMachine
from wizard.messages import KeyPress, TextInput
from wizard.states import Done, SelectSkill


def _machine(tmp_path):
    manifest = Manifest(
        name="notes",
        description="Notes",
        path=tmp_path / "skills" / "notes",
        variables=(Variable(name="NOTES_DIR", label="Notes Dir", required=True),),
        build=BuildConfig(binary="notes"),
    )
    return WizardStateMachine(
        [manifest],
        [],
        project_root=tmp_path,
        default_skills_folder=str(tmp_path / "deploy"),
        artifact_exists=lambda path: False,
    )


def _walk_to_build(driver):
    driver.post(KeyPress("enter"))
    driver.post(TextInput("/tmp/notes"))
    driver.post(KeyPress("enter"))
    driver.post(KeyPress("enter"))
    driver.post(KeyPress("y"))


def _quit_when_done(driver):
    def _on_update():
        if isinstance(driver.machine.state, Done):
            driver.post(KeyPress("enter"))

    return _on_update


class TestWizardDriver:
    @pytest.mark.asyncio
    async def test_runs_build_then_deploy(self, tmp_path):
        calls = []

        async def fake_build(request):
            calls.append(("build", request.binary_name))
            return BuildResult(ok=True, artifact=request.output_path, output="Built")

        async def fake_deploy(request):
            calls.append(("deploy", dict(request.values)))
            return DeployResult(ok=True, deploy_path=request.deploy_path)

        quit_called = []
        driver = WizardDriver(
            _machine(tmp_path),
            build=fake_build,
            deploy=fake_deploy,
            on_quit=lambda: quit_called.append(True),
        )
        driver.on_update = _quit_when_done(driver)
        _walk_to_build(driver)

        final = await asyncio.wait_for(driver.run(), timeout=5)

        assert isinstance(final, Done)
        assert final.ok
        assert final.message == DEPLOY_SUCCESS_MESSAGE
        assert calls == [("build", "notes"), ("deploy", {"NOTES_DIR": "/tmp/notes"})]
        assert quit_called == [True]

    @pytest.mark.asyncio
    async def test_crashing_build_becomes_failure(self, tmp_path):
        async def broken_build(request):
            raise RuntimeError("boom")

        async def never_deploy(request):
            raise AssertionError("deploy must not run after a failed build")

        driver = WizardDriver(_machine(tmp_path), build=broken_build, deploy=never_deploy)
        driver.on_update = _quit_when_done(driver)
        _walk_to_build(driver)

        final = await asyncio.wait_for(driver.run(), timeout=5)

        assert isinstance(final, Done)
        assert not final.ok
        assert final.message == "build failed: boom"

    @pytest.mark.asyncio
    async def test_crashing_deploy_becomes_failure(self, tmp_path):
        async def fake_build(request):
            return BuildResult(ok=True, artifact=request.output_path)

        async def broken_deploy(request):
            raise RuntimeError("disk on fire")

        driver = WizardDriver(_machine(tmp_path), build=fake_build, deploy=broken_deploy)
        driver.on_update = _quit_when_done(driver)
        _walk_to_build(driver)

        final = await asyncio.wait_for(driver.run(), timeout=5)

        assert not final.ok
        assert final.message == "deploy failed: disk on fire"

    @pytest.mark.asyncio
    async def test_keys_during_build_are_ignored(self, tmp_path):
        release = asyncio.Event()

        async def slow_build(request):
            await release.wait()
            return BuildResult(ok=False, error="build failed: stopped")

        driver = WizardDriver(_machine(tmp_path), build=slow_build)
        driver.on_update = _quit_when_done(driver)
        _walk_to_build(driver)
        driver.post(KeyPress("c-c"))
        driver.post(KeyPress("escape"))

        run_task = asyncio.create_task(driver.run())
        await asyncio.sleep(0.05)
        assert not run_task.done()
        assert not driver.machine.quitting

        release.set()
        final = await asyncio.wait_for(run_task, timeout=5)
        assert final.message == "build failed: stopped"

    @pytest.mark.asyncio
    async def test_quit_before_any_task(self, tmp_path):
        driver = WizardDriver(_machine(tmp_path))
        driver.post(KeyPress("c-c"))
        final = await asyncio.wait_for(driver.run(), timeout=5)
        assert isinstance(final, SelectSkill)
        assert driver.machine.quitting
