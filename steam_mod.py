from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime

import aiohttp
from selectolax.parser import HTMLParser

import steam_dates
from config import Config, load_config
from errors import MalformedDate, MetadataUnavailable, UnparseableDate
from http_utils import fetch_text, open_session
from telemetry import traced
from utils import normalize_image_url

WORKSHOP_PAGE_URL = "https://steamcommunity.com/sharedfiles/filedetails/?id={mod_id}"


@dataclass
class WorkshopPage:
    mod_id: int
    title: str = ""
    cover_image_url: str = ""
    last_updated_text: str = ""
    last_updated: datetime | None = None


def workshop_page_url(mod_id: int) -> str:
    return WORKSHOP_PAGE_URL.format(mod_id=int(mod_id))


def _page_request_url(mod_id: int, config: Config) -> str:
    url = workshop_page_url(mod_id)
    if config.language:
        url = f"{url}&l={config.language}"
    return url


def _clean_text(value: str | None) -> str:
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def extract_cover_image_url(parser: HTMLParser, selector: str) -> str:
    node = parser.css_first(selector)
    if node is None:
        return ""
    return normalize_image_url(node.attributes.get("src"))


def extract_last_updated_text(parser: HTMLParser, selector: str) -> str | None:
    # "Posted" comes before "Updated"; the last stat is the most recent one
    nodes = parser.css(selector)
    if not nodes:
        return None
    return _clean_text(nodes[-1].text())


async def _load_page(
    mod_id: int, config: Config, session: aiohttp.ClientSession | None
) -> HTMLParser:
    url = _page_request_url(mod_id, config)
    async with open_session(config, session) as active:
        html_text = await fetch_text(active, url, config)
    return HTMLParser(html_text)


@traced("workshop.fetch_cover_image_url")
async def fetch_cover_image_url(
    mod_id: int,
    *,
    session: aiohttp.ClientSession | None = None,
    config: Config | None = None,
) -> str:
    cfg = config or load_config()
    parser = await _load_page(mod_id, cfg, session)
    image_url = extract_cover_image_url(parser, cfg.preview_selector)
    if not image_url:
        logging.warning("Preview image element not found on the page for %s", mod_id)
    return image_url


def parse_last_updated(mod_id: int, text: str, config: Config) -> datetime:
    try:
        return steam_dates.parse(text, tz=steam_dates.resolve_tz(config.source_tz))
    except UnparseableDate as exc:
        logging.warning("Failed to parse workshop date for %s: %r", mod_id, exc.text)
        raise MalformedDate(mod_id, text) from exc


@traced("workshop.fetch_last_updated")
async def fetch_last_updated(
    mod_id: int,
    *,
    session: aiohttp.ClientSession | None = None,
    config: Config | None = None,
) -> datetime:
    cfg = config or load_config()
    parser = await _load_page(mod_id, cfg, session)
    text = extract_last_updated_text(parser, cfg.date_selector)
    if text is None:
        logging.warning("Date time element not found on the page for %s", mod_id)
        raise MetadataUnavailable(mod_id, cfg.date_selector)
    return parse_last_updated(mod_id, text, cfg)


def parse_workshop_page(mod_id: int, html_text: str, config: Config) -> WorkshopPage:
    parser = HTMLParser(html_text)
    title_node = parser.css_first("div.workshopItemTitle")
    page = WorkshopPage(
        mod_id=int(mod_id),
        title=_clean_text(title_node.text() if title_node else ""),
        cover_image_url=extract_cover_image_url(parser, config.preview_selector),
    )
    text = extract_last_updated_text(parser, config.date_selector)
    if text:
        page.last_updated_text = text
        try:
            page.last_updated = parse_last_updated(mod_id, text, config)
        except MalformedDate:
            page.last_updated = None
    return page


@traced("workshop.fetch_page")
async def fetch_workshop_page(
    mod_id: int,
    *,
    session: aiohttp.ClientSession | None = None,
    config: Config | None = None,
) -> WorkshopPage:
    """Fetch the detail page once and extract everything the checks need."""
    cfg = config or load_config()
    url = _page_request_url(mod_id, cfg)
    async with open_session(cfg, session) as active:
        html_text = await fetch_text(active, url, cfg)
    return parse_workshop_page(mod_id, html_text, cfg)
