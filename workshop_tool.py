"""Entry points used by the server tool's UI layer.

Every function takes the server installation directory and/or a Workshop item
id and returns a plain value. Remote problems never raise from here.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Set

import cover_cache
import freshness
import mod_inventory
import steam_mod
from config import Config
from mod_inventory import PathLike


def list_installed_mod_ids(install_dir: PathLike, *, config: Config | None = None) -> Set[int]:
    return mod_inventory.list_installed_mod_ids(install_dir, config=config)


def get_mod_folder_name(install_dir: PathLike, mod_id: int, *, config: Config | None = None) -> str:
    return mod_inventory.resolve_mod_folder_name(install_dir, mod_id, config=config)


async def is_mod_out_of_date(
    install_dir: PathLike, mod_id: int, *, config: Config | None = None
) -> bool:
    return await freshness.is_out_of_date(install_dir, mod_id, config=config)


async def get_cover_image_path(
    install_dir: PathLike, mod_id: int, *, config: Config | None = None
) -> str:
    return await cover_cache.get_cover_image_path(install_dir, mod_id, config=config)


def open_workshop_page(mod_id: int) -> bool:
    url = steam_mod.workshop_page_url(mod_id)
    try:
        return webbrowser.open(url)
    except webbrowser.Error as exc:
        logging.warning("Failed to open %s: %s", url, exc)
        return False
