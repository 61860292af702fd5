"""Shared fixtures: a workshop directory builder and a fake aiohttp session."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from config import Config

FIXTURES = Path(__file__).parent / "fixtures"
APP_ID = 736590


class FakeResponse:
    def __init__(self, status: int = 200, body: bytes = b"") -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body.decode("utf-8")

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc) -> None:
        return None


class FakeSession:
    """Stands in for aiohttp.ClientSession.get(); routes by URL prefix."""

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = routes or {}
        self.calls: list[str] = []

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.calls.append(url)
        for prefix, result in self.routes.items():
            if url.startswith(prefix):
                if isinstance(result, BaseException):
                    raise result
                status, body = result
                if isinstance(body, str):
                    body = body.encode("utf-8")
                return FakeResponse(status, body)
        return FakeResponse(404, b"")

    async def close(self) -> None:
        return None


@pytest.fixture
def config() -> Config:
    return Config(steam_app_id=APP_ID, language="english")


@pytest.fixture
def detail_page_html() -> str:
    return (FIXTURES / "filedetails.html").read_text(encoding="utf-8")


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    root = tmp_path / "steamapps" / "workshop" / "content" / str(APP_ID)
    root.mkdir(parents=True)
    return root


def install_mod(content_root: Path, mod_id, folder: str = "ModFolder", mtime: float | None = None) -> Path:
    path = content_root / str(mod_id) / folder
    path.mkdir(parents=True)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path
