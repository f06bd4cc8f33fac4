"""Atomic file publication helpers built on aiofiles."""

from pathlib import Path

import aiofiles
import aiofiles.os
import aiofiles.tempfile

TEMP_PREFIX = ".tmp_"


async def _write_temp(directory: Path, data: bytes) -> Path:
    """Write data to a fresh temporary file inside ``directory``."""
    async with aiofiles.tempfile.NamedTemporaryFile(
        mode="wb",
        dir=directory,
        delete=False,
        prefix=TEMP_PREFIX,
    ) as tmp_file:
        await tmp_file.write(data)
        await tmp_file.flush()
        return Path(tmp_file.name)


async def _discard(tmp_path: Path) -> None:
    try:
        await aiofiles.os.remove(tmp_path)
    except FileNotFoundError:
        pass


async def atomic_replace(path: Path, data: bytes) -> None:
    """Write ``path`` so readers see either the old or the new bytes.

    The data goes to a temporary file in the same directory which is then
    renamed over the target.
    """
    await aiofiles.os.makedirs(path.parent, exist_ok=True)
    tmp_path = await _write_temp(path.parent, data)
    try:
        await aiofiles.os.replace(tmp_path, path)
    except BaseException:
        await _discard(tmp_path)
        raise


async def atomic_create(path: Path, data: bytes) -> None:
    """Publish ``path`` only if it does not exist yet.

    The complete file is hard-linked into place, which fails with
    ``FileExistsError`` when the target is already present.
    """
    await aiofiles.os.makedirs(path.parent, exist_ok=True)
    tmp_path = await _write_temp(path.parent, data)
    try:
        await aiofiles.os.link(tmp_path, path)
    finally:
        await _discard(tmp_path)
