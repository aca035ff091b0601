# app/services/islamic_calc.py
# -*- coding: utf-8 -*-
"""
Petits calculs géographiques / calendaires :

- direction de la Qibla (relèvement initial sur la sphère) + distance haversine ;
- calendrier hégirien tabulaire (arithmétique, ~1 jour d'écart possible avec l'observation) ;
- table des grandes dates islamiques et prochaines occurrences.
"""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import List, Tuple

from app.services.errors import ValidationError

KAABA_LAT = 21.4225
KAABA_LON = 39.8262
EARTH_RADIUS_KM = 6371.0

# Ordinal (date.toordinal) du 1 Muharram 1 AH = 19/07/622 grégorien proleptique
HIJRI_EPOCH_ORDINAL = 227015

HIJRI_MONTHS = [
    "Muharram", "Safar", "Rabi' al-Awwal", "Rabi' al-Thani",
    "Jumada al-Awwal", "Jumada al-Thani", "Rajab", "Sha'ban",
    "Ramadan", "Shawwal", "Dhu al-Qi'dah", "Dhu al-Hijjah",
]


@dataclass(frozen=True)
class QiblaResult:
    direction: float   # degrés depuis le nord, sens horaire, [0, 360)
    distance: float    # km


@dataclass(frozen=True)
class HijriDate:
    year: int
    month: int
    day: int

    @property
    def month_name(self) -> str:
        return month_name(self.month)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class IslamicEvent:
    hijri_month: int
    hijri_day: int
    name: str
    kind: str
    description: str = ""


@dataclass(frozen=True)
class UpcomingEvent:
    date: dt.date
    hijri: HijriDate
    event: IslamicEvent


ISLAMIC_EVENTS: List[IslamicEvent] = [
    IslamicEvent(1, 1, "Islamic New Year", "holiday", "Début de l'année hégirienne"),
    IslamicEvent(1, 10, "Ashura", "fasting", "Jeûne recommandé"),
    IslamicEvent(3, 12, "Mawlid an-Nabi", "commemoration"),
    IslamicEvent(7, 27, "Isra' and Mi'raj", "commemoration"),
    IslamicEvent(8, 15, "Mid-Sha'ban", "night"),
    IslamicEvent(9, 1, "Ramadan begins", "fasting", "Premier jour du jeûne"),
    IslamicEvent(9, 27, "Laylat al-Qadr", "night", "Nuit du destin (estimation)"),
    IslamicEvent(10, 1, "Eid al-Fitr", "holiday"),
    IslamicEvent(12, 9, "Day of Arafah", "fasting"),
    IslamicEvent(12, 10, "Eid al-Adha", "holiday"),
]


# ---------------------------------------------------------------------
# Qibla
# ---------------------------------------------------------------------

def validate_coordinates(lat, lon) -> Tuple[float, float]:
    """Latitude dans [-90, 90], longitude dans [-180, 180] ; sinon ValidationError."""
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError) as e:
        raise ValidationError("Latitude et longitude requises") from e
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        raise ValidationError(f"Coordonnées hors bornes: ({lat}, {lon})")
    return lat, lon


def qibla(lat: float, lon: float) -> QiblaResult:
    """Relèvement initial vers la Kaaba et distance orthodromique, arrondis à 2 décimales."""
    lat, lon = validate_coordinates(lat, lon)

    lat_r = math.radians(lat)
    lon_r = math.radians(lon)
    k_lat = math.radians(KAABA_LAT)
    k_lon = math.radians(KAABA_LON)

    d_lon = k_lon - lon_r
    y = math.sin(d_lon) * math.cos(k_lat)
    x = math.cos(lat_r) * math.sin(k_lat) - math.sin(lat_r) * math.cos(k_lat) * math.cos(d_lon)
    bearing = (math.degrees(math.atan2(y, x)) + 360.0) % 360.0

    d_lat = k_lat - lat_r
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat_r) * math.cos(k_lat) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return QiblaResult(direction=round(bearing, 2) % 360.0, distance=round(EARTH_RADIUS_KM * c, 2))


# ---------------------------------------------------------------------
# Calendrier hégirien tabulaire
# ---------------------------------------------------------------------

def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        return "Unknown"
    return HIJRI_MONTHS[month - 1]


def is_hijri_leap_year(year: int) -> bool:
    # 11 années abondantes par cycle de 30 ans
    return (14 + 11 * year) % 30 < 11


def hijri_month_length(year: int, month: int) -> int:
    if month == 12 and is_hijri_leap_year(year):
        return 30
    return 30 if month % 2 == 1 else 29


def _hijri_to_ordinal(year: int, month: int, day: int) -> int:
    return (
        day
        + (59 * (month - 1) + 1) // 2      # ceil(29.5 * (month - 1))
        + (year - 1) * 354
        + (3 + 11 * year) // 30
        + HIJRI_EPOCH_ORDINAL - 1
    )


def hijri_to_gregorian(year: int, month: int, day: int) -> dt.date:
    if year < 1:
        raise ValidationError(f"Année hégirienne invalide: {year}")
    if not 1 <= month <= 12:
        raise ValidationError(f"Mois hégirien invalide: {month}")
    if not 1 <= day <= hijri_month_length(year, month):
        raise ValidationError(f"Jour invalide: {day} ({month_name(month)} {year})")
    return dt.date.fromordinal(_hijri_to_ordinal(year, month, day))


def gregorian_to_hijri(d: dt.date) -> HijriDate:
    o = d.toordinal()
    if o < HIJRI_EPOCH_ORDINAL:
        raise ValidationError(f"Date antérieure à l'Hégire: {d}")
    year = (30 * (o - HIJRI_EPOCH_ORDINAL) + 10646) // 10631
    # ceil((o - (29 + 1er Muharram)) / 29.5) + 1
    offset = o - (29 + _hijri_to_ordinal(year, 1, 1))
    month = min(12, -((-2 * offset) // 59) + 1)
    day = o - _hijri_to_ordinal(year, month, 1) + 1
    return HijriDate(year=year, month=month, day=day)


def upcoming_events(today: dt.date, limit: int = 5) -> List[UpcomingEvent]:
    """Prochaine occurrence grégorienne (>= today) de chaque événement, triées par date."""
    current = gregorian_to_hijri(today)
    out: List[UpcomingEvent] = []
    for ev in ISLAMIC_EVENTS:
        for year in (current.year, current.year + 1):
            day = min(ev.hijri_day, hijri_month_length(year, ev.hijri_month))
            g = hijri_to_gregorian(year, ev.hijri_month, day)
            if g >= today:
                out.append(UpcomingEvent(date=g, hijri=HijriDate(year, ev.hijri_month, day), event=ev))
                break
    out.sort(key=lambda u: u.date)
    return out[:max(0, limit)]
