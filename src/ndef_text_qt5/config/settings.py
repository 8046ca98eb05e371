# src/ndef_text_qt5/config/settings.py
from __future__ import annotations
import configparser
from dataclasses import dataclass
from importlib import resources
from typing import Optional

DEFAULT_FILE = "ndef_text_qt5.ini"


@dataclass(frozen=True)
class Settings:
    max_pages: int = 48
    block_pages: int = 4
    delay_ms: int = 5
    title: str = "NdefTextQT5"
    log_level: str = "INFO"
    log_file: str = "qt_error.log"
    poll_interval_ms: int = 2000


def _open_settings_file(path: Optional[str]):
    if path:
        return open(path, "r", encoding="utf-8")
    # packaged default
    return (resources.files(__package__).joinpath(DEFAULT_FILE)
            .open("r", encoding="utf-8"))


def _get_int(cp: configparser.ConfigParser, section: str, key: str, default: int) -> int:
    raw = cp.get(section, key, fallback=None)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip(), 0)
    except ValueError:
        raise ValueError(f"[{section}] {key} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"[{section}] {key} must not be negative, got {value}")
    return value


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from the packaged ini file, or from `path` if given.
    Missing sections/keys fall back to the Settings defaults.
    """
    d = Settings()
    cp = configparser.ConfigParser()
    with _open_settings_file(path) as f:
        cp.read_file(f)

    block_pages = _get_int(cp, "reader", "block_pages", d.block_pages)
    if block_pages == 0:
        raise ValueError("[reader] block_pages must be at least 1")

    return Settings(
        max_pages=_get_int(cp, "reader", "max_pages", d.max_pages),
        block_pages=block_pages,
        delay_ms=_get_int(cp, "writer", "delay_ms", d.delay_ms),
        title=cp.get("app", "title", fallback=d.title).strip() or d.title,
        log_level=cp.get("app", "log_level", fallback=d.log_level).strip().upper() or d.log_level,
        log_file=cp.get("app", "log_file", fallback=d.log_file).strip(),
        poll_interval_ms=_get_int(cp, "app", "poll_interval_ms", d.poll_interval_ms),
    )
