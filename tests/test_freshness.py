from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

import freshness
import mod_inventory
import steam_mod
from conftest import FakeSession, install_mod
from errors import MalformedDate, MetadataUnavailable, NetworkFailure

T = datetime(2023, 5, 1, 8, 30, tzinfo=timezone.utc)
PAGE = "https://steamcommunity.com/sharedfiles/filedetails/?id="


@pytest.fixture
def installed(tmp_path, content_root):
    install_mod(content_root, 1111, mtime=T.timestamp())
    return tmp_path


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "remote, expected",
    [
        (T + timedelta(seconds=1), True),
        (T, False),
        (T - timedelta(seconds=1), False),
    ],
)
async def test_compares_remote_against_local(installed, config, monkeypatch, remote, expected):
    monkeypatch.setattr(steam_mod, "fetch_last_updated", AsyncMock(return_value=remote))

    assert await freshness.is_out_of_date(installed, 1111, config=config) is expected


@pytest.mark.asyncio
async def test_missing_mod_directory_is_out_of_date(tmp_path, config, monkeypatch):
    fetcher = AsyncMock(return_value=T)
    monkeypatch.setattr(steam_mod, "fetch_last_updated", fetcher)

    assert await freshness.is_out_of_date(tmp_path, 1111, config=config) is True
    fetcher.assert_not_called()


@pytest.mark.asyncio
async def test_empty_mod_directory_is_out_of_date(tmp_path, content_root, config, monkeypatch):
    (content_root / "1111").mkdir()
    monkeypatch.setattr(steam_mod, "fetch_last_updated", AsyncMock(return_value=T))

    assert await freshness.is_out_of_date(tmp_path, 1111, config=config) is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        MetadataUnavailable(1111, "div.detailsStatRight"),
        MalformedDate(1111, "sometime"),
        NetworkFailure("https://steamcommunity.com", "HTTP 503"),
    ],
)
async def test_remote_failures_are_not_out_of_date(installed, config, monkeypatch, caplog, error):
    monkeypatch.setattr(steam_mod, "fetch_last_updated", AsyncMock(side_effect=error))

    assert await freshness.is_out_of_date(installed, 1111, config=config) is False
    assert "Freshness check failed for 1111" in caplog.text


@pytest.mark.asyncio
async def test_filesystem_error_is_not_out_of_date(installed, config, monkeypatch):
    def broken(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(mod_inventory, "get_last_modified", broken)
    monkeypatch.setattr(steam_mod, "fetch_last_updated", AsyncMock(return_value=T))

    assert await freshness.is_out_of_date(installed, 1111, config=config) is False


@pytest.mark.asyncio
async def test_end_to_end_with_fixture_page(installed, config, detail_page_html):
    session = FakeSession({PAGE: (200, detail_page_html)})

    # fixture page was updated 25 Mar 2021, local copy is from 2023
    assert await freshness.is_out_of_date(installed, 1111, session=session, config=config) is False


@pytest.mark.asyncio
async def test_check_mods_defaults_to_installed(tmp_path, content_root, config, monkeypatch):
    install_mod(content_root, 1111, mtime=T.timestamp())
    install_mod(content_root, 2222, mtime=(T + timedelta(days=2)).timestamp())
    monkeypatch.setattr(
        steam_mod, "fetch_last_updated", AsyncMock(return_value=T + timedelta(days=1))
    )

    results = await freshness.check_mods(tmp_path, session=FakeSession(), config=config)

    assert results == {1111: True, 2222: False}


@pytest.mark.asyncio
async def test_check_mods_explicit_ids(tmp_path, content_root, config, monkeypatch):
    install_mod(content_root, 1111, mtime=T.timestamp())
    monkeypatch.setattr(steam_mod, "fetch_last_updated", AsyncMock(return_value=T))

    results = await freshness.check_mods(
        tmp_path, [1111, 3333, 1111], concurrency=1, session=FakeSession(), config=config
    )

    assert results == {1111: False, 3333: True}


@pytest.mark.asyncio
async def test_check_mods_nothing_installed(tmp_path, config):
    assert await freshness.check_mods(tmp_path, config=config) == {}


@pytest.mark.asyncio
async def test_undecodable_page_is_not_out_of_date(installed, config, caplog):
    session = FakeSession({PAGE: (200, b"<div class='detailsStatRight'>25 Mar \xff\xfe</div>")})

    assert await freshness.is_out_of_date(installed, 1111, session=session, config=config) is False
    assert "Freshness check failed for 1111" in caplog.text


@pytest.mark.asyncio
async def test_check_mods_survives_undecodable_page(tmp_path, content_root, config):
    install_mod(content_root, 1111, mtime=T.timestamp())
    install_mod(content_root, 2222, mtime=T.timestamp())
    session = FakeSession({f"{PAGE}1111": (200, b"\xff\xfe"), f"{PAGE}2222": (200, "<p></p>")})

    assert await freshness.check_mods(tmp_path, session=session, config=config) == {
        1111: False,
        2222: False,
    }
