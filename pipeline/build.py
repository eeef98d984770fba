"""Compile a skill into a staged binary."""

from __future__ import annotations

import asyncio
import contextlib
import shlex
from pathlib import Path

import aiofiles.os

from config import Config
from manifests import Manifest
from utils import get_logger

from .types import BuildRequest, BuildResult

logger = get_logger(__name__)


def make_build_request(manifest: Manifest, project_root: Path) -> BuildRequest:
    return BuildRequest(
        skill_dir=manifest.path.resolve(),
        entry=manifest.build.entry,
        binary_name=manifest.binary_name,
        staging_dir=(project_root / Config.STAGING_DIR).resolve(),
        command=Config.BUILD_COMMAND,
    )


def build_command(request: BuildRequest) -> list[str]:
    """Split the configured command and fill in {output} and {entry}."""
    return [
        part.replace("{output}", str(request.output_path)).replace("{entry}", request.entry)
        for part in shlex.split(request.command)
    ]


def _failed(reason: str, output: str = "") -> BuildResult:
    logger.error(f"Build failed: {reason}")
    return BuildResult(ok=False, output=output, error=f"build failed: {reason}")


async def build_skill(request: BuildRequest, timeout: float | None = None) -> BuildResult:
    """Run the compiler once inside the skill directory.

    The compiler's combined stdout/stderr is returned untouched on failure.
    """
    timeout = Config.BUILD_TIMEOUT if timeout is None else timeout
    try:
        await aiofiles.os.makedirs(request.staging_dir, exist_ok=True)
    except OSError as e:
        return _failed(f"cannot create {request.staging_dir}: {e}")

    cmd = build_command(request)
    if not cmd:
        return _failed("BUILD_COMMAND is empty")
    logger.info(f"Building {request.binary_name}: {shlex.join(cmd)} (cwd={request.skill_dir})")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=request.skill_dir,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        return _failed(f"cannot run {cmd[0]}: {e}", str(e))

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        stdout, _ = await process.communicate()
        return _failed(
            f"timed out after {timeout:g}s", stdout.decode(errors="replace") if stdout else ""
        )

    output = stdout.decode(errors="replace") if stdout else ""
    if process.returncode != 0:
        return _failed(f"exit status {process.returncode}", output)

    if not await aiofiles.os.path.isfile(request.output_path):
        return _failed(f"{request.output_path} was not produced", output)

    logger.info(f"Built {request.output_path}")
    return BuildResult(ok=True, artifact=request.output_path, output=f"Built: {request.output_path}")
