# app/config.py
# -*- coding: utf-8 -*-
"""
Configuration lue une seule fois depuis l'environnement, puis passée
explicitement aux composants (pas de client global au niveau module).
"""
from __future__ import annotations

import datetime as dt
import logging
import os
from dataclasses import dataclass

DEFAULT_DB_URL = "sqlite:///muhasaba.db"
DEFAULT_ALADHAN_API_URL = "https://api.aladhan.com/v1"

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    db_url: str = DEFAULT_DB_URL
    db_echo: bool = False
    hijri_provider: str = "tabular"
    aladhan_api_url: str = DEFAULT_ALADHAN_API_URL
    aladhan_timeout_sec: float = 10.0
    log_level: str = "INFO"
    default_email: str = "demo@example.com"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_url=os.getenv("DB_URL", DEFAULT_DB_URL).strip(),
            db_echo=_env_bool("DB_ECHO"),
            hijri_provider=os.getenv("HIJRI_PROVIDER", "tabular").strip().lower(),
            aladhan_api_url=os.getenv("ALADHAN_API_URL", DEFAULT_ALADHAN_API_URL).strip().rstrip("/"),
            aladhan_timeout_sec=float(os.getenv("ALADHAN_TIMEOUT_SEC", "10")),
            log_level=os.getenv("MUHASABA_LOG_LEVEL", "INFO").strip().upper(),
            default_email=os.getenv("MUHASABA_DEFAULT_EMAIL", "demo@example.com").strip(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Format commun pour l'UI et les scripts."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def utc_today() -> dt.date:
    """Le "aujourd'hui" de référence, résolu une fois par requête/page (UTC)."""
    return dt.datetime.now(dt.timezone.utc).date()


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)
