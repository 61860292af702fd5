import html
from datetime import datetime, timezone
from pathlib import Path
from typing import List


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def subdirectories(path: Path) -> List[Path]:
    if not path.is_dir():
        return []
    return sorted((entry for entry in path.iterdir() if entry.is_dir()), key=lambda p: p.name)


def has_subdirectories(path: Path) -> bool:
    if not path.is_dir():
        return False
    return any(entry.is_dir() for entry in path.iterdir())


def mtime_utc(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


def normalize_image_url(url: str | None) -> str:
    if not url:
        return ""
    return html.unescape(url.strip().strip("\"'"))
