from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Set

from config import Config, load_config
from errors import NotInstalled
from utils import has_subdirectories, mtime_utc, subdirectories, utc_now

PathLike = str | os.PathLike


@dataclass(frozen=True)
class InstalledMod:
    mod_id: int
    folder_name: str
    last_modified: datetime


def workshop_content_root(install_dir: PathLike, app_id: int | None = None) -> Path:
    if app_id is None:
        app_id = load_config().steam_app_id
    return Path(install_dir) / "steamapps" / "workshop" / "content" / str(app_id)


def mod_directory(install_dir: PathLike, mod_id: int, app_id: int | None = None) -> Path:
    return workshop_content_root(install_dir, app_id) / str(int(mod_id))


def _mod_folder(install_dir: PathLike, mod_id: int, app_id: int | None) -> Path | None:
    folders = subdirectories(mod_directory(install_dir, mod_id, app_id))
    if len(folders) > 1:
        logging.debug(
            "Workshop item %s has %s content folders, using %s",
            mod_id,
            len(folders),
            folders[0].name,
        )
    return folders[0] if folders else None


def resolve_mod_folder_name(
    install_dir: PathLike, mod_id: int, *, config: Config | None = None
) -> str:
    app_id = (config or load_config()).steam_app_id
    folder = _mod_folder(install_dir, mod_id, app_id)
    return folder.name if folder else ""


def get_last_modified(
    install_dir: PathLike,
    mod_id: int,
    *,
    strict: bool = False,
    config: Config | None = None,
) -> datetime:
    """Last-write time of the mod's content folder.

    A mod directory without a content folder raises NotInstalled. A missing
    mod directory returns the current time unless ``strict`` is set, in which
    case it raises NotInstalled as well.
    """
    app_id = (config or load_config()).steam_app_id
    item_dir = mod_directory(install_dir, mod_id, app_id)
    if not item_dir.is_dir():
        if strict:
            raise NotInstalled(mod_id, item_dir)
        return utc_now()
    folder = _mod_folder(install_dir, mod_id, app_id)
    if folder is None:
        raise NotInstalled(mod_id, item_dir)
    return mtime_utc(folder)


def _is_workshop_id(name: str) -> bool:
    # the id must round-trip to the same folder name
    return name.isascii() and name.isdigit() and str(int(name)) == name


def list_installed_mod_ids(install_dir: PathLike, *, config: Config | None = None) -> Set[int]:
    root = workshop_content_root(install_dir, (config or load_config()).steam_app_id)
    if not root.is_dir():
        return set()

    ids: Set[int] = set()
    for entry in root.iterdir():
        if not entry.is_dir() or not has_subdirectories(entry):
            continue
        if not _is_workshop_id(entry.name):
            continue
        ids.add(int(entry.name))
    return ids


def iter_installed_mods(install_dir: PathLike, *, config: Config | None = None) -> List[InstalledMod]:
    cfg = config or load_config()
    mods: List[InstalledMod] = []
    for mod_id in sorted(list_installed_mod_ids(install_dir, config=cfg)):
        folder = _mod_folder(install_dir, mod_id, cfg.steam_app_id)
        if folder is None:
            continue
        mods.append(InstalledMod(mod_id, folder.name, mtime_utc(folder)))
    return mods
