# app/services/prayer_times_service.py
# -*- coding: utf-8 -*-
"""
Horaires de prière du jour pour une position, méthode Umm al-Qura.

- AladhanTimingsProvider : endpoint /timings d'api.aladhan.com (method=4, school=1).
- PrayerTimesService     : cache en table (lecture, sinon appel distant puis insertion).

Un échec d'insertion dans le cache n'empêche pas de renvoyer les horaires calculés.
"""
from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from app.config import DEFAULT_ALADHAN_API_URL, Settings
from app.services.errors import DependencyError
from app.services.islamic_calc import validate_coordinates

CALCULATION_METHOD = "Umm al-Qura"
ALADHAN_METHOD_UMM_AL_QURA = 4
ALADHAN_SCHOOL = 1

REQUIRED_TIMINGS = ("Fajr", "Dhuhr", "Asr", "Maghrib", "Isha")
OPTIONAL_TIMINGS = ("Sunrise", "Sunset")

# "04:12" ou "04:12 (CEST)"
_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(?:\s*\(.*\))?$")


@dataclass(frozen=True)
class PrayerTimes:
    fajr: str
    dhuhr: str
    asr: str
    maghrib: str
    isha: str
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    calculation_method: str = CALCULATION_METHOD

    def as_rows(self):
        """(libellé, heure) dans l'ordre de la journée, pour l'affichage."""
        rows = [("Fajr", self.fajr), ("Lever du soleil", self.sunrise), ("Dhuhr", self.dhuhr),
                ("Asr", self.asr), ("Coucher du soleil", self.sunset), ("Maghrib", self.maghrib),
                ("Isha", self.isha)]
        return [(label, value) for label, value in rows if value]


@dataclass(frozen=True)
class PrayerTimesLookup:
    times: PrayerTimes
    cached: bool


def parse_hhmm(name: str, value: Any) -> str:
    """Normalise une heure Aladhan en "HH:MM" ; ValueError si absente ou mal formée."""
    if not isinstance(value, str):
        raise ValueError(f"Horaire {name} manquant: {value!r}")
    m = _HHMM.match(value.strip())
    if not m:
        raise ValueError(f"Horaire {name} invalide: {value!r}")
    return f"{m.group(1)}:{m.group(2)}"


def parse_timings(data: Any) -> PrayerTimes:
    """
    Extrait les horaires d'une réponse /timings.
    Format attendu : {"data": {"timings": {"Fajr": "04:12", ..., "Isha": "21:58"}}}
    """
    try:
        timings: Dict[str, Any] = data["data"]["timings"]
        if not isinstance(timings, dict):
            raise TypeError("timings n'est pas un objet")
    except (KeyError, TypeError) as e:
        raise ValueError(f"Réponse Aladhan inattendue: {str(data)[:200]}") from e

    required = {name.lower(): parse_hhmm(name, timings.get(name)) for name in REQUIRED_TIMINGS}
    optional = {
        name.lower(): parse_hhmm(name, timings[name])
        for name in OPTIONAL_TIMINGS
        if timings.get(name) is not None
    }
    return PrayerTimes(**required, **optional)


class AladhanTimingsProvider:
    """Client de l'endpoint /timings/<dd-mm-yyyy> ; toute erreur réseau ou de format est relevée."""

    def __init__(self, api_url: str = DEFAULT_ALADHAN_API_URL, timeout_sec: float = 10.0) -> None:
        self.api_url = (api_url or "").strip().rstrip("/")
        if not self.api_url:
            raise RuntimeError("ALADHAN_API_URL vide pour AladhanTimingsProvider.")
        self.timeout_sec = float(timeout_sec)
        if self.timeout_sec <= 0:
            raise ValueError(f"ALADHAN_TIMEOUT_SEC doit être > 0: {timeout_sec!r}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "AladhanTimingsProvider":
        return cls(settings.aladhan_api_url, settings.aladhan_timeout_sec)

    def timings(self, lat: float, lon: float, day: dt.date) -> PrayerTimes:
        url = f"{self.api_url}/timings/{day.day:02d}-{day.month:02d}-{day.year:04d}"
        params = {
            "latitude": lat,
            "longitude": lon,
            "method": ALADHAN_METHOD_UMM_AL_QURA,
            "school": ALADHAN_SCHOOL,
        }

        with httpx.Client(timeout=self.timeout_sec) as client:
            resp = client.get(url, params=params)
            resp.raise_for_status()
            data = resp.json()

        return parse_timings(data)


class PrayerTimesStore(Protocol):
    def get(self, latitude: float, longitude: float, day: dt.date) -> Optional[PrayerTimes]: ...
    def save(self, latitude: float, longitude: float, day: dt.date, times: PrayerTimes) -> None: ...


class TimingsProvider(Protocol):
    def timings(self, lat: float, lon: float, day: dt.date) -> PrayerTimes: ...


class PrayerTimesService:

    def __init__(self, store: PrayerTimesStore, provider: Optional[TimingsProvider] = None) -> None:
        self.store = store
        self.provider = provider
        self.logger = logging.getLogger(self.__class__.__name__)

    def lookup(self, lat: float, lon: float, day: dt.date) -> PrayerTimesLookup:
        """
        Horaires du jour `day` à (lat, lon).

        Lève ValidationError si les coordonnées sont invalides, DependencyError si le
        cache est vide et qu'aucun provider n'est configuré ; les erreurs httpx et
        ValueError du provider sont propagées.
        """
        lat, lon = validate_coordinates(lat, lon)

        hit = self.store.get(lat, lon, day)
        if hit is not None:
            return PrayerTimesLookup(times=hit, cached=True)

        if self.provider is None:
            raise DependencyError("Aucun provider d'horaires de prière configuré")
        times = self.provider.timings(lat, lon, day)

        try:
            self.store.save(lat, lon, day, times)
        except DependencyError as e:
            self.logger.warning(f"Error caching prayer times for ({lat}, {lon}) on {day}: {e}")
        return PrayerTimesLookup(times=times, cached=False)
