from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable

import aiohttp

import mod_inventory
import steam_mod
from config import Config, load_config
from errors import NotInstalled, WorkshopError
from http_utils import open_session
from mod_inventory import PathLike
from telemetry import span


async def is_out_of_date(
    install_dir: PathLike,
    mod_id: int,
    *,
    session: aiohttp.ClientSession | None = None,
    config: Config | None = None,
) -> bool:
    """True if the Workshop copy was updated after the installed one.

    A mod that is not installed counts as out of date. Any other failure is
    logged and counts as up to date.
    """
    cfg = config or load_config()
    with span("workshop.is_out_of_date", mod_id=int(mod_id)) as current:
        try:
            local = mod_inventory.get_last_modified(install_dir, mod_id, strict=True, config=cfg)
            remote = await steam_mod.fetch_last_updated(mod_id, session=session, config=cfg)
        except NotInstalled as exc:
            logging.info("%s", exc)
            current.set_attribute("workshop.not_installed", True)
            return True
        except (WorkshopError, OSError) as exc:
            logging.warning("Freshness check failed for %s: %s", mod_id, exc)
            current.record_exception(exc)
            return False

        outdated = remote > local
        current.set_attribute("workshop.out_of_date", outdated)
        logging.debug(
            "Freshness %s: remote=%s local=%s outdated=%s",
            mod_id,
            remote.isoformat(),
            local.isoformat(),
            outdated,
        )
        return outdated


async def check_mods(
    install_dir: PathLike,
    mod_ids: Iterable[int] | None = None,
    *,
    concurrency: int | None = None,
    session: aiohttp.ClientSession | None = None,
    config: Config | None = None,
) -> Dict[int, bool]:
    cfg = config or load_config()
    if mod_ids is None:
        ids = sorted(mod_inventory.list_installed_mod_ids(install_dir, config=cfg))
    else:
        ids = list(dict.fromkeys(int(mod_id) for mod_id in mod_ids))
    if not ids:
        return {}

    limit = max(1, int(concurrency or cfg.check_concurrency))
    semaphore = asyncio.Semaphore(limit)
    logging.info("Checking %s workshop item(s), concurrency=%s", len(ids), limit)

    async with open_session(cfg, session) as active:

        async def check_one(mod_id: int) -> bool:
            async with semaphore:
                return await is_out_of_date(install_dir, mod_id, session=active, config=cfg)

        results = await asyncio.gather(*(check_one(mod_id) for mod_id in ids))
    return dict(zip(ids, results))
