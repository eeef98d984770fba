"""Install a built skill into its deploy directory."""

from __future__ import annotations

from pathlib import Path
from typing import Awaitable, Callable, Mapping

import aiofiles
import aiofiles.os

from manifests import Manifest
from utils import get_logger

from .docs import load_template, render_docs
from .fileops import (
    EXECUTABLE_MODE,
    copy_path,
    read_bytes,
    remove_tree,
    replace_file,
    write_private_text,
)
from .introspect import CommandIntrospector
from .types import DeployRequest, DeployResult

logger = get_logger(__name__)

ENV_FILENAME = ".env"
ENV_HEADER = "# Auto-generated environment file\n"

_WRAPPER_TEMPLATE = """\
#!/bin/sh
# Auto-generated wrapper: loads .env and runs {binary}
dir="$(cd "$(dirname "$0")" && pwd)"
if [ -f "$dir/{env}" ]; then
  set -a
  . "$dir/{env}"
  set +a
fi
exec "$dir/{binary}" "$@"
"""


def render_env_file(manifest: Manifest, values: Mapping[str, str]) -> str:
    """KEY=VALUE lines for every variable with a non-empty value, in manifest order."""
    lines = [ENV_HEADER]
    for variable in manifest.variables:
        value = values.get(variable.name, "")
        if value:
            lines.append(f"{variable.name}={value}\n")
    return "".join(lines)


def render_wrapper(binary_name: str) -> str:
    return _WRAPPER_TEMPLATE.format(binary=binary_name, env=ENV_FILENAME)


def wrapper_path(request: DeployRequest) -> Path:
    return request.bin_dir / f"{request.manifest.binary_name}.sh"


def resolve_inside(root: Path, relative: str) -> Path:
    """Join relative onto root, refusing paths that escape it."""
    target = (root / relative).resolve()
    if not target.is_relative_to(root.resolve()):
        raise ValueError(f"'{relative}' points outside {root}")
    return target


def make_deploy_request(
    manifest: Manifest,
    artifact: Path,
    staging_dir: Path,
    deploy_path: Path,
    values: Mapping[str, str],
) -> DeployRequest:
    return DeployRequest(
        manifest=manifest,
        artifact=artifact,
        staging_dir=staging_dir,
        deploy_path=deploy_path,
        values={v.name: values.get(v.name, "") for v in manifest.variables},
    )


async def _ensure_bin_dir(request: DeployRequest, _: CommandIntrospector) -> None:
    await aiofiles.os.makedirs(request.bin_dir, exist_ok=True)


async def _install_binary(request: DeployRequest, _: CommandIntrospector) -> None:
    data = await read_bytes(request.artifact)
    await replace_file(request.deployed_binary, data, EXECUTABLE_MODE)


async def _write_env(request: DeployRequest, _: CommandIntrospector) -> None:
    content = render_env_file(request.manifest, request.values)
    await write_private_text(request.bin_dir / ENV_FILENAME, content)


async def _copy_files(request: DeployRequest, _: CommandIntrospector) -> None:
    for rule in request.manifest.deploy.files:
        src = resolve_inside(request.manifest.path, rule.source)
        dst = resolve_inside(request.deploy_path, rule.target)
        await copy_path(src, dst)


async def _write_wrapper(request: DeployRequest, _: CommandIntrospector) -> None:
    if not request.manifest.deploy.wrapper:
        return
    data = render_wrapper(request.manifest.binary_name).encode("utf-8")
    await replace_file(wrapper_path(request), data, EXECUTABLE_MODE)


async def _write_docs(request: DeployRequest, introspector: CommandIntrospector) -> None:
    manifest = request.manifest
    tree = await introspector.introspect(manifest.binary_name)
    template = await load_template(manifest)
    content = render_docs(manifest, request.deploy_path, request.values, tree, template)
    docs_path = resolve_inside(request.deploy_path, manifest.docs.output)
    async with aiofiles.open(docs_path, "w", encoding="utf-8") as writer:
        await writer.write(content)


async def _clean_staging(request: DeployRequest, _: CommandIntrospector) -> None:
    await remove_tree(request.staging_dir)


_Step = Callable[[DeployRequest, CommandIntrospector], Awaitable[None]]

# Order matters: a failure stops here and earlier steps stay applied.
DEPLOY_STEPS: list[tuple[str, _Step]] = [
    ("create bin directory", _ensure_bin_dir),
    ("install binary", _install_binary),
    ("write .env", _write_env),
    ("copy files", _copy_files),
    ("write wrapper", _write_wrapper),
    ("generate docs", _write_docs),
    ("remove staging directory", _clean_staging),
]


async def deploy_skill(
    request: DeployRequest, introspector: CommandIntrospector | None = None
) -> DeployResult:
    """Run every deploy step in order; the first failure aborts the rest."""
    if introspector is None:
        introspector = CommandIntrospector.for_binary(request.artifact)

    for label, step in DEPLOY_STEPS:
        try:
            await step(request, introspector)
        except (OSError, ValueError) as e:
            logger.error(f"Deploy of {request.manifest.name} failed at '{label}': {e}")
            return DeployResult(
                ok=False,
                deploy_path=request.deploy_path,
                error=f"deploy failed: could not {label}: {e}",
            )
        logger.debug(f"Deploy step done: {label}")

    logger.info(f"Deployed {request.manifest.name} to {request.deploy_path}")
    return DeployResult(
        ok=True,
        deploy_path=request.deploy_path,
        docs_path=request.deploy_path / request.manifest.docs.output,
    )
