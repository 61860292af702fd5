from dataclasses import dataclass
import os

DEFAULT_STEAM_APP_ID = 736590
DEFAULT_TIMEOUT = 10
DEFAULT_LANGUAGE = "english"
DEFAULT_USER_AGENT = "Mozilla/5.0"
DEFAULT_SOURCE_TZ = "UTC"
DEFAULT_PREVIEW_SELECTOR = "img#previewImageMain"
DEFAULT_DATE_SELECTOR = "div.detailsStatRight"
DEFAULT_CHECK_CONCURRENCY = 4
DEFAULT_LOG_LEVEL = "INFO"


def parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def parse_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Config:
    steam_app_id: int = DEFAULT_STEAM_APP_ID
    timeout: float = DEFAULT_TIMEOUT
    language: str = DEFAULT_LANGUAGE
    user_agent: str = DEFAULT_USER_AGENT
    proxy: str | None = None
    source_tz: str = DEFAULT_SOURCE_TZ
    preview_selector: str = DEFAULT_PREVIEW_SELECTOR
    date_selector: str = DEFAULT_DATE_SELECTOR
    check_concurrency: int = DEFAULT_CHECK_CONCURRENCY
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str | None = None
    log_requests: bool = False
    uptrace_dsn: str | None = None


def load_config() -> Config:
    steam_app_id = parse_int(os.environ.get("WSF_STEAM_APP_ID"), DEFAULT_STEAM_APP_ID)
    if steam_app_id <= 0:
        steam_app_id = DEFAULT_STEAM_APP_ID

    timeout = parse_float(os.environ.get("WSF_HTTP_TIMEOUT"), DEFAULT_TIMEOUT)
    if timeout <= 0:
        timeout = DEFAULT_TIMEOUT

    check_concurrency = max(
        1, parse_int(os.environ.get("WSF_CHECK_CONCURRENCY"), DEFAULT_CHECK_CONCURRENCY)
    )
    proxy = (os.environ.get("WSF_PROXY") or "").strip() or None
    log_file = (os.environ.get("WSF_LOG_FILE") or "").strip() or None
    uptrace_dsn = (
        os.environ.get("WSF_UPTRACE_DSN") or os.environ.get("UPTRACE_DSN") or ""
    ).strip() or None

    return Config(
        steam_app_id=steam_app_id,
        timeout=timeout,
        language=os.environ.get("WSF_LANGUAGE", DEFAULT_LANGUAGE),
        user_agent=os.environ.get("WSF_USER_AGENT", DEFAULT_USER_AGENT),
        proxy=proxy,
        source_tz=os.environ.get("WSF_SOURCE_TZ", DEFAULT_SOURCE_TZ),
        preview_selector=os.environ.get("WSF_PREVIEW_SELECTOR", DEFAULT_PREVIEW_SELECTOR),
        date_selector=os.environ.get("WSF_DATE_SELECTOR", DEFAULT_DATE_SELECTOR),
        check_concurrency=check_concurrency,
        log_level=os.environ.get("WSF_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        log_file=log_file,
        log_requests=parse_bool(os.environ.get("WSF_LOG_REQUESTS"), False),
        uptrace_dsn=uptrace_dsn,
    )
