from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator
from urllib.parse import urlparse

import aiohttp

from config import Config
from errors import NetworkFailure

# Steam renders detail-page dates in the zone given by this cookie
STEAM_TZ_COOKIE = {"timezoneOffset": "0,0"}


def mask_proxy(proxy: str | None) -> str:
    if not proxy:
        return "-"
    try:
        parsed = urlparse(proxy)
    except ValueError:
        return proxy
    if parsed.scheme and parsed.netloc:
        host = parsed.hostname or ""
        port = f":{parsed.port}" if parsed.port else ""
        if parsed.username:
            return f"{parsed.scheme}://{parsed.username}:***@{host}{port}"
        return f"{parsed.scheme}://{host}{port}"
    return proxy


def client_timeout(config: Config) -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(total=float(config.timeout))


@asynccontextmanager
async def open_session(
    config: Config, session: aiohttp.ClientSession | None = None
) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the caller's session, or a fresh one that is closed afterwards."""
    if session is not None:
        yield session
        return
    own = aiohttp.ClientSession(
        timeout=client_timeout(config),
        headers={"User-Agent": config.user_agent},
        cookies=STEAM_TZ_COOKIE,
    )
    try:
        yield own
    finally:
        await own.close()


async def _get(
    session: aiohttp.ClientSession, url: str, config: Config, *, as_text: bool
) -> str | bytes:
    start = time.monotonic()
    try:
        async with session.get(
            url,
            headers={"User-Agent": config.user_agent},
            cookies=STEAM_TZ_COOKIE,
            proxy=config.proxy,
            timeout=client_timeout(config),
        ) as response:
            if config.log_requests:
                logging.info(
                    "GET %s -> %s in %.2fs (proxy=%s)",
                    url,
                    response.status,
                    time.monotonic() - start,
                    mask_proxy(config.proxy),
                )
            if response.status != 200:
                raise NetworkFailure(url, f"HTTP {response.status}")
            if as_text:
                return await response.text()
            return await response.read()
    except asyncio.TimeoutError as exc:
        raise NetworkFailure(url, f"timed out after {config.timeout}s") from exc
    except aiohttp.ClientError as exc:
        raise NetworkFailure(url, f"{type(exc).__name__}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise NetworkFailure(url, f"undecodable response body: {exc.reason}") from exc


async def fetch_text(session: aiohttp.ClientSession, url: str, config: Config) -> str:
    return await _get(session, url, config, as_text=True)


async def fetch_bytes(session: aiohttp.ClientSession, url: str, config: Config) -> bytes:
    return await _get(session, url, config, as_text=False)
