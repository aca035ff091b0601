# app/services/hijri_service.py
# -*- coding: utf-8 -*-
"""
Service de date hégirienne.

Deux providers :
- TabularProvider : offline, déterministe (calendrier arithmétique), idéal pour tests/MVP.
- AladhanProvider : utilise l'API publique api.aladhan.com (conversion "observée").

Usage:
    import datetime as dt
    from app.config import Settings
    from app.services.hijri_service import HijriService

    svc = HijriService(Settings(hijri_provider="aladhan"))
    h = svc.today_hijri(dt.date(2025, 3, 1))
    print(h.isoformat(), h.month_name)
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

import httpx

from app.config import DEFAULT_ALADHAN_API_URL, Settings
from app.services.islamic_calc import HijriDate, gregorian_to_hijri


# -----------------------------------------------------------------------------
# Provider: tabulaire (déterministe, offline)
# -----------------------------------------------------------------------------

class TabularProvider:
    """Conversion purement arithmétique, sans aucun appel réseau."""

    def to_hijri(self, day: dt.date) -> HijriDate:
        return gregorian_to_hijri(day)


# -----------------------------------------------------------------------------
# Provider: Aladhan
# -----------------------------------------------------------------------------

class AladhanProvider:
    """
    Client simple pour l'endpoint gToH d'Aladhan.

    Paramètres (issus de Settings, jamais lus ici) :
        api_url      : URL de base de l'API (par défaut https://api.aladhan.com/v1)
        timeout_sec  : délai réseau en secondes, > 0 (par défaut 10)

    Notes:
        - S'il y a la moindre erreur réseau ou de format, on relève l'exception afin
          que l'appelant puisse retomber sur le calcul tabulaire selon sa politique.
    """

    def __init__(self, api_url: str = DEFAULT_ALADHAN_API_URL, timeout_sec: float = 10.0) -> None:
        self.api_url = (api_url or "").strip().rstrip("/")
        if not self.api_url:
            raise RuntimeError("ALADHAN_API_URL vide pour AladhanProvider.")
        self.timeout_sec = float(timeout_sec)
        if self.timeout_sec <= 0:
            raise ValueError(f"ALADHAN_TIMEOUT_SEC doit être > 0: {timeout_sec!r}")

    def to_hijri(self, day: dt.date) -> HijriDate:
        url = f"{self.api_url}/gToH/{day.day:02d}-{day.month:02d}-{day.year:04d}"

        with httpx.Client(timeout=self.timeout_sec) as client:
            resp = client.get(url)
            resp.raise_for_status()
            data = resp.json()

        # Format attendu : {"data": {"hijri": {"day": "1", "month": {"number": 9}, "year": "1446"}}}
        try:
            hijri = data["data"]["hijri"]
            return HijriDate(
                year=int(hijri["year"]),
                month=int(hijri["month"]["number"]),
                day=int(hijri["day"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Réponse Aladhan inattendue: {str(data)[:200]}") from e


# -----------------------------------------------------------------------------
# Façade principale
# -----------------------------------------------------------------------------

class HijriService:
    """
    Façade qui choisit le provider selon Settings :
      - hijri_provider == "aladhan" -> AladhanProvider
      - sinon                       -> TabularProvider (par défaut)

    Une configuration Aladhan invalide (URL vide, délai <= 0) retombe sur le
    calcul tabulaire avec un warning. On peut forcer un provider via `provider=...`.
    """

    def __init__(self, settings: Optional[Settings] = None, provider: Optional[object] = None) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        if provider is not None:
            self._provider = provider
            return

        settings = settings or Settings.from_env()
        if settings.hijri_provider == "aladhan":
            try:
                self._provider = AladhanProvider(settings.aladhan_api_url, settings.aladhan_timeout_sec)
            except (RuntimeError, ValueError) as e:
                # config incomplète -> calcul tabulaire
                self.logger.warning(f"AladhanProvider indisponible ({e}), calcul tabulaire")
                self._provider = TabularProvider()
        else:
            self._provider = TabularProvider()

    @property
    def provider_name(self) -> str:
        return type(self._provider).__name__

    def today_hijri(self, today: dt.date) -> HijriDate:
        """
        Date hégirienne du jour `today` (injecté par l'appelant, jamais lu ici).
        """
        return self._provider.to_hijri(today)
