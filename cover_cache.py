from __future__ import annotations

import asyncio
import io
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator

import aiohttp
from PIL import Image, UnidentifiedImageError

import steam_mod
from config import Config, load_config
from errors import NetworkFailure
from http_utils import fetch_bytes, open_session
from mod_inventory import PathLike, mod_directory
from telemetry import span
from utils import ensure_dir

COVER_IMAGE_NAME = "coverimage.jpg"


@dataclass
class _CoverLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


_COVER_LOCKS: dict[tuple[asyncio.AbstractEventLoop, str], _CoverLock] = {}


def cover_image_path(install_dir: PathLike, mod_id: int, *, config: Config | None = None) -> Path:
    app_id = (config or load_config()).steam_app_id
    return mod_directory(install_dir, mod_id, app_id) / COVER_IMAGE_NAME


@asynccontextmanager
async def _cover_lock(path: Path) -> AsyncIterator[None]:
    # entries live only while a download for the path is pending
    key = (asyncio.get_running_loop(), str(path))
    entry = _COVER_LOCKS.get(key)
    if entry is None:
        entry = _COVER_LOCKS[key] = _CoverLock()
    entry.users += 1
    try:
        async with entry.lock:
            yield
    finally:
        entry.users -= 1
        if entry.users == 0:
            _COVER_LOCKS.pop(key, None)


def to_jpeg(data: bytes) -> bytes:
    with Image.open(io.BytesIO(data)) as img:
        if img.format == "JPEG":
            return data
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        out = io.BytesIO()
        img.save(out, format="JPEG", quality=90)
        return out.getvalue()


def write_cover_image(path: Path, data: bytes) -> None:
    ensure_dir(path.parent)
    temp_path = path.with_suffix(f"{path.suffix}.part")
    try:
        with temp_path.open("wb") as handle:
            handle.write(data)
        temp_path.replace(path)
    finally:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass


async def download_cover_image(
    install_dir: PathLike,
    mod_id: int,
    *,
    session: aiohttp.ClientSession | None = None,
    config: Config | None = None,
) -> str:
    cfg = config or load_config()
    path = cover_image_path(install_dir, mod_id, config=cfg)
    with span("workshop.download_cover_image", mod_id=int(mod_id)):
        async with open_session(cfg, session) as active:
            image_url = await steam_mod.fetch_cover_image_url(mod_id, session=active, config=cfg)
            if not image_url:
                return ""
            data = await fetch_bytes(active, image_url, cfg)
    write_cover_image(path, to_jpeg(data))
    logging.info("Saved cover image for %s to %s", mod_id, path)
    return str(path)


async def get_cover_image_path(
    install_dir: PathLike,
    mod_id: int,
    *,
    session: aiohttp.ClientSession | None = None,
    config: Config | None = None,
) -> str:
    """Return a local cover image for ``mod_id``, downloading it on first use.

    An existing file is returned as-is. Failures are logged and yield "".
    """
    cfg = config or load_config()
    path = cover_image_path(install_dir, mod_id, config=cfg)
    if path.is_file():
        return str(path)

    async with _cover_lock(path):
        if path.is_file():
            return str(path)
        try:
            downloaded = await download_cover_image(
                install_dir, mod_id, session=session, config=cfg
            )
        except NetworkFailure as exc:
            logging.warning("Error downloading the cover image for %s: %s", mod_id, exc)
            return ""
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError) as exc:
            logging.warning("Error saving the cover image for %s: %s", mod_id, exc)
            return ""

    if not downloaded:
        logging.warning("Failed to retrieve or download the cover image for %s", mod_id)
    return downloaded
