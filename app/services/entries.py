# app/services/entries.py
# -*- coding: utf-8 -*-
"""
Formes validées des enregistrements quotidiens.

Les payloads "libres" (dict venant d'un formulaire ou d'une API) sont convertis ici
en objets typés avec valeurs par défaut, AVANT d'atteindre le moteur ou les repositories.

- DailyRecord  : 11 cases à cocher + compteur d'istighfar (clé : personne + jour)
- DhikrCounts  : 6 compteurs de dhikr, total toujours recalculé
- QuranProgress: pages / versets / minutes de lecture
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from app.services.errors import ValidationError

# Les 5 prières canoniques
PRAYER_FIELDS: Tuple[str, ...] = ("fajr", "dhuhr", "asr", "maghrib", "isha")

# Les 11 cases suivies (ordre d'affichage)
TRACKED_FLAGS: Tuple[str, ...] = PRAYER_FIELDS + (
    "tahajjud",
    "morning_dhikr",
    "evening_dhikr",
    "before_sleep_dhikr",
    "yaseen_after_fajr",
    "mulk_before_sleep",
)

# case -> colonne d'horodatage (yaseen / mulk n'en ont pas)
TIMESTAMP_FIELDS: Dict[str, str] = {
    "fajr": "fajr_at",
    "dhuhr": "dhuhr_at",
    "asr": "asr_at",
    "maghrib": "maghrib_at",
    "isha": "isha_at",
    "tahajjud": "tahajjud_at",
    "morning_dhikr": "morning_dhikr_at",
    "evening_dhikr": "evening_dhikr_at",
    "before_sleep_dhikr": "sleep_dhikr_at",
}

DHIKR_TYPES: Tuple[str, ...] = ("tasbih", "tahmid", "takbir", "istighfar", "salawat", "lailaha")


def normalize_date(d: Any) -> dt.date:
    """Accepte date, datetime ou chaîne ISO (YYYY-MM-DD)."""
    if isinstance(d, dt.datetime):
        return d.date()
    if isinstance(d, dt.date):
        return d
    if isinstance(d, str):
        try:
            return dt.date.fromisoformat(d.strip())
        except ValueError as e:
            raise ValidationError(f"Date invalide: {d!r}") from e
    raise ValidationError(f"Type de date invalide: {type(d).__name__}")


def require_id(value: Any, name: str = "id") -> int:
    """Un identifiant est un entier strictement positif."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} manquant ou invalide: {value!r}")
    return value


def _non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} doit être un entier: {value!r}")
    if value < 0:
        raise ValidationError(f"{name} doit être >= 0: {value}")
    return value


def to_utc_naive(ts: dt.datetime) -> dt.datetime:
    """Instant UTC sans tzinfo (convention de stockage). Un datetime naïf est supposé déjà en UTC."""
    if ts.tzinfo is not None:
        ts = ts.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return ts


def _parse_timestamp(name: str, value: Any) -> Optional[dt.datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return to_utc_naive(value)
    if isinstance(value, str):
        try:
            # "Z" n'est pas accepté par fromisoformat avant Python 3.11
            parsed = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"{name}: horodatage invalide {value!r}") from e
        return to_utc_naive(parsed)
    raise ValidationError(f"{name}: horodatage invalide {value!r}")


# ---------------------------------------------------------------------
# Daily record
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class DailyRecord:
    """Une journée suivie pour une personne. Absent == tout à False / 0."""
    person_id: int
    day: dt.date

    fajr: bool = False
    dhuhr: bool = False
    asr: bool = False
    maghrib: bool = False
    isha: bool = False
    tahajjud: bool = False
    morning_dhikr: bool = False
    evening_dhikr: bool = False
    before_sleep_dhikr: bool = False
    yaseen_after_fajr: bool = False
    mulk_before_sleep: bool = False

    istighfar_count: int = 0

    # colonne *_at -> datetime
    completed_at: Dict[str, dt.datetime] = field(default_factory=dict, compare=False)
    notes: Optional[str] = None
    updated_by: Optional[str] = None

    @classmethod
    def empty(cls, person_id: int, day) -> "DailyRecord":
        return cls(person_id=require_id(person_id, "person_id"), day=normalize_date(day))

    @classmethod
    def from_payload(cls, person_id: int, day, payload: Mapping[str, Any]) -> "DailyRecord":
        """Construit un enregistrement complet ; les clés absentes prennent leur défaut."""
        return cls.empty(person_id, day).merged(payload)

    def merged(self, payload: Mapping[str, Any]) -> "DailyRecord":
        """
        Applique une mise à jour partielle : seules les clés présentes changent.
        Lève ValidationError sur clé inconnue ou valeur mal typée.
        """
        changes: Dict[str, Any] = {}
        stamps = dict(self.completed_at)
        timestamp_columns = set(TIMESTAMP_FIELDS.values())

        for key, value in payload.items():
            if key in TRACKED_FLAGS:
                if not isinstance(value, bool):
                    raise ValidationError(f"{key} doit être un booléen: {value!r}")
                changes[key] = value
            elif key == "istighfar_count":
                changes[key] = _non_negative_int(key, value)
            elif key in timestamp_columns:
                ts = _parse_timestamp(key, value)
                if ts is None:
                    stamps.pop(key, None)
                else:
                    stamps[key] = ts
            elif key in ("notes", "updated_by"):
                changes[key] = None if value is None else str(value)
            else:
                raise ValidationError(f"Champ inconnu: {key}")

        return replace(self, completed_at=stamps, **changes)

    def completed_flags(self) -> int:
        return sum(1 for name in TRACKED_FLAGS if getattr(self, name))

    def prayers_completed(self) -> int:
        return sum(1 for name in PRAYER_FIELDS if getattr(self, name))

    def to_fields(self) -> Dict[str, Any]:
        """Colonnes à persister (hors clé)."""
        out: Dict[str, Any] = {name: getattr(self, name) for name in TRACKED_FLAGS}
        out["istighfar_count"] = self.istighfar_count
        for column in TIMESTAMP_FIELDS.values():
            out[column] = self.completed_at.get(column)
        out["notes"] = self.notes
        out["updated_by"] = self.updated_by
        return out

    @classmethod
    def from_row(cls, row) -> "DailyRecord":
        stamps = {}
        for column in TIMESTAMP_FIELDS.values():
            value = getattr(row, column, None)
            if value is not None:
                stamps[column] = value
        kwargs = {name: bool(getattr(row, name)) for name in TRACKED_FLAGS}
        return cls(
            person_id=row.profile_id,
            day=row.day,
            istighfar_count=int(row.istighfar_count or 0),
            completed_at=stamps,
            notes=row.notes,
            updated_by=row.updated_by,
            **kwargs,
        )


# ---------------------------------------------------------------------
# Dhikr
# ---------------------------------------------------------------------

def normalize_dhikr_type(dhikr_type: str) -> str:
    """'takbir' ou 'takbir_count' -> 'takbir'."""
    if not isinstance(dhikr_type, str):
        raise ValidationError(f"Type de dhikr invalide: {dhikr_type!r}")
    name = dhikr_type.strip().lower()
    if name.endswith("_count"):
        name = name[: -len("_count")]
    if name not in DHIKR_TYPES:
        raise ValidationError(f"Type de dhikr invalide: {dhikr_type!r}")
    return name


@dataclass(frozen=True)
class DhikrCounts:
    tasbih: int = 0
    tahmid: int = 0
    takbir: int = 0
    istighfar: int = 0
    salawat: int = 0
    lailaha: int = 0
    custom_dhikr: Optional[str] = None

    @property
    def total(self) -> int:
        # jamais stocké indépendamment : toujours la somme des 6
        return sum(getattr(self, name) for name in DHIKR_TYPES)

    def with_count(self, dhikr_type: str, count: int) -> "DhikrCounts":
        name = normalize_dhikr_type(dhikr_type)
        return replace(self, **{name: _non_negative_int(f"{name}_count", count)})

    def get(self, dhikr_type: str) -> int:
        return getattr(self, normalize_dhikr_type(dhikr_type))

    def to_columns(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {f"{name}_count": getattr(self, name) for name in DHIKR_TYPES}
        out["total_count"] = self.total
        out["custom_dhikr"] = self.custom_dhikr
        return out

    @classmethod
    def from_row(cls, row) -> "DhikrCounts":
        if row is None:
            return cls()
        kwargs = {name: int(getattr(row, f"{name}_count") or 0) for name in DHIKR_TYPES}
        return cls(custom_dhikr=row.custom_dhikr, **kwargs)


# ---------------------------------------------------------------------
# Quran
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class QuranProgress:
    pages_read: int = 0
    verses_read: int = 0
    time_spent_minutes: int = 0

    def __post_init__(self):
        for f in fields(self):
            _non_negative_int(f.name, getattr(self, f.name))

    @classmethod
    def from_row(cls, row) -> "QuranProgress":
        if row is None:
            return cls()
        return cls(
            pages_read=int(row.pages_read or 0),
            verses_read=int(row.verses_read or 0),
            time_spent_minutes=int(row.time_spent_minutes or 0),
        )
