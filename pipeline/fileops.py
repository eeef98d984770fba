"""Async filesystem helpers for deploys."""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

import aiofiles
import aiofiles.os

EXECUTABLE_MODE = 0o755
PRIVATE_MODE = 0o600


async def read_bytes(path: Path) -> bytes:
    async with aiofiles.open(path, "rb") as reader:
        return await reader.read()


async def replace_file(path: Path, data: bytes, mode: int) -> None:
    """Unlink path, then write data as a new file with the given mode.

    Never writes into the old inode; processes still running it keep it.
    """
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass
    async with aiofiles.open(path, "wb") as writer:
        await writer.write(data)
    await asyncio.to_thread(os.chmod, path, mode)


async def write_private_text(path: Path, text: str) -> None:
    """Write text readable by the owner only, including when path already exists."""

    def _opener(file: str, flags: int) -> int:
        return os.open(file, flags, PRIVATE_MODE)

    async with aiofiles.open(path, "w", encoding="utf-8", opener=_opener) as writer:
        await writer.write(text)
    await asyncio.to_thread(os.chmod, path, PRIVATE_MODE)


async def copy_file(src: Path, dst: Path) -> None:
    async with aiofiles.open(src, "rb") as reader, aiofiles.open(dst, "wb") as writer:
        while True:
            chunk = await reader.read(1024 * 128)
            if not chunk:
                break
            await writer.write(chunk)
    await asyncio.to_thread(shutil.copymode, src, dst)


async def copy_tree(src: Path, dst: Path) -> None:
    def _walk() -> list[tuple[Path, list[str], list[str]]]:
        return [(Path(root), dirs, files) for root, dirs, files in os.walk(src)]

    for root, dirs, files in await asyncio.to_thread(_walk):
        target_dir = dst / root.relative_to(src)
        await aiofiles.os.makedirs(target_dir, exist_ok=True)
        for filename in files:
            await copy_file(root / filename, target_dir / filename)
        for dirname in dirs:
            await aiofiles.os.makedirs(target_dir / dirname, exist_ok=True)


async def copy_path(src: Path, dst: Path) -> None:
    """Copy a file or a directory tree, creating dst's parents."""
    await aiofiles.os.makedirs(dst.parent, exist_ok=True)
    if await aiofiles.os.path.isdir(src):
        await copy_tree(src, dst)
    else:
        await copy_file(src, dst)


async def remove_tree(path: Path) -> None:
    if not await aiofiles.os.path.exists(path):
        return
    await asyncio.to_thread(shutil.rmtree, path)
