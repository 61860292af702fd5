from __future__ import annotations

from pathlib import Path


class WorkshopError(Exception):
    """Base class for failures raised by the workshop freshness engine."""


class NotInstalled(WorkshopError):
    def __init__(self, mod_id: int, path: Path | str) -> None:
        self.mod_id = int(mod_id)
        self.path = str(path)
        super().__init__(f"Mod {self.mod_id} is not installed or couldn't be found at {self.path}")


class MetadataUnavailable(WorkshopError):
    def __init__(self, mod_id: int, selector: str) -> None:
        self.mod_id = int(mod_id)
        self.selector = selector
        super().__init__(f"Workshop page for {self.mod_id} has no element matching {selector!r}")


class UnparseableDate(WorkshopError, ValueError):
    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Unrecognized Steam date: {text!r}")


class MalformedDate(WorkshopError):
    def __init__(self, mod_id: int, text: str) -> None:
        self.mod_id = int(mod_id)
        self.text = text
        super().__init__(f"Workshop page for {self.mod_id} has malformed date {text!r}")


class NetworkFailure(WorkshopError):
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Request to {url} failed: {reason}")
