# tests/test_entries.py
# -*- coding: utf-8 -*-
"""
Tests unitaires pour app/services/entries.py

- DailyRecord : valeurs par défaut, mise à jour partielle, validation, horodatages
- DhikrCounts : total = somme des 6 compteurs après n'importe quelle suite de mises à jour
- QuranProgress : valeurs négatives refusées
"""

import datetime as dt
from types import SimpleNamespace

import pytest

from app.services.entries import (
    DHIKR_TYPES,
    TRACKED_FLAGS,
    DailyRecord,
    DhikrCounts,
    QuranProgress,
    normalize_date,
    normalize_dhikr_type,
    to_utc_naive,
)
from app.services.errors import ValidationError

DAY = dt.date(2025, 7, 7)

# -----------------------------------------------------------------------------
# DailyRecord
# -----------------------------------------------------------------------------

def test_empty_record_defaults():
    r = DailyRecord.empty(1, "2025-07-07")
    assert r.day == DAY
    assert all(getattr(r, f) is False for f in TRACKED_FLAGS)
    assert r.istighfar_count == 0
    assert r.completed_flags() == 0
    assert r.completed_at == {}


def test_partial_update_only_touches_given_keys():
    r = DailyRecord.from_payload(1, DAY, {"fajr": True, "istighfar_count": 10})
    r2 = r.merged({"isha": True})
    assert r2.fajr is True and r2.isha is True
    assert r2.istighfar_count == 10
    assert r2.prayers_completed() == 2
    # l'enregistrement initial est inchangé (frozen)
    assert r.isha is False


def test_record_counts():
    r = DailyRecord.from_payload(1, DAY, {f: True for f in TRACKED_FLAGS})
    assert r.completed_flags() == 11
    assert r.prayers_completed() == 5


@pytest.mark.parametrize(
    "payload",
    [
        {"fajr": 1},
        {"fajr": "yes"},
        {"istighfar_count": -1},
        {"istighfar_count": 2.5},
        {"istighfar_count": True},
        {"unknown": True},
        {"fajr_at": "pas une date"},
        {"fajr_at": 12},
    ],
)
def test_invalid_payloads(payload):
    with pytest.raises(ValidationError):
        DailyRecord.from_payload(1, DAY, payload)


def test_validation_error_is_also_value_error():
    with pytest.raises(ValueError):
        DailyRecord.from_payload(1, DAY, {"istighfar_count": -5})


def test_timestamps_set_and_cleared():
    r = DailyRecord.from_payload(1, DAY, {"fajr": True, "fajr_at": "2025-07-07T04:12:00Z"})
    assert r.completed_at["fajr_at"] == dt.datetime(2025, 7, 7, 4, 12)
    assert r.to_fields()["fajr_at"] is not None

    cleared = r.merged({"fajr": False, "fajr_at": None})
    assert "fajr_at" not in cleared.completed_at
    assert cleared.to_fields()["fajr_at"] is None


@pytest.mark.parametrize(
    "value",
    [
        "2025-07-07T05:00:00+02:00",
        dt.datetime(2025, 7, 7, 5, 0, tzinfo=dt.timezone(dt.timedelta(hours=2))),
        "2025-07-07T03:00:00Z",
        dt.datetime(2025, 7, 7, 3, 0),  # naïf = déjà UTC
    ],
)
def test_aware_timestamps_are_stored_as_naive_utc(value):
    """05:00 à UTC+2 -> 03:00 UTC, sans tzinfo."""
    r = DailyRecord.from_payload(1, DAY, {"fajr": True, "fajr_at": value})
    stamp = r.completed_at["fajr_at"]
    assert stamp == dt.datetime(2025, 7, 7, 3, 0)
    assert stamp.tzinfo is None


def test_to_utc_naive_keeps_naive_values():
    naive = dt.datetime(2025, 7, 7, 8, 30)
    assert to_utc_naive(naive) is naive


def test_sleep_dhikr_timestamp_column():
    r = DailyRecord.from_payload(1, DAY, {"before_sleep_dhikr": True, "sleep_dhikr_at": dt.datetime(2025, 7, 7, 22, 0)})
    assert r.to_fields()["sleep_dhikr_at"] == dt.datetime(2025, 7, 7, 22, 0)


def test_to_fields_and_from_row_agree():
    r = DailyRecord.from_payload(3, DAY, {"asr": True, "mulk_before_sleep": True, "istighfar_count": 7, "notes": "ok"})
    row = SimpleNamespace(profile_id=3, day=DAY, **r.to_fields())
    assert DailyRecord.from_row(row) == r


@pytest.mark.parametrize("bad", ["2025-13-01", "", 20250707, None])
def test_normalize_date_rejects(bad):
    with pytest.raises(ValidationError):
        normalize_date(bad)


def test_normalize_date_accepts_datetime():
    assert normalize_date(dt.datetime(2025, 7, 7, 15, 0)) == DAY


# -----------------------------------------------------------------------------
# DhikrCounts
# -----------------------------------------------------------------------------

def test_dhikr_total_after_update_sequence():
    """Invariant : total == somme des 6 compteurs, quelle que soit la suite d'appels."""
    c = DhikrCounts()
    steps = [("tasbih", 33), ("tahmid", 33), ("takbir_count", 34), ("tasbih", 100), ("salawat", 10), ("tahmid", 0)]
    for name, value in steps:
        c = c.with_count(name, value)
        assert c.total == sum(c.get(t) for t in DHIKR_TYPES)
    assert c.total == 100 + 0 + 34 + 10
    assert c.to_columns()["total_count"] == c.total


def test_dhikr_to_columns_names():
    cols = DhikrCounts(tasbih=1, lailaha=2, custom_dhikr="Hasbunallah").to_columns()
    assert cols["tasbih_count"] == 1
    assert cols["lailaha_count"] == 2
    assert cols["total_count"] == 3
    assert cols["custom_dhikr"] == "Hasbunallah"


@pytest.mark.parametrize("name", ["tasbih", "TAKBIR", " salawat ", "istighfar_count"])
def test_normalize_dhikr_type_accepts(name):
    assert normalize_dhikr_type(name) in DHIKR_TYPES


@pytest.mark.parametrize("name", ["total", "total_count", "", None, "subhanallah"])
def test_normalize_dhikr_type_rejects(name):
    with pytest.raises(ValidationError):
        normalize_dhikr_type(name)


def test_dhikr_with_negative_count_rejected():
    with pytest.raises(ValidationError):
        DhikrCounts().with_count("tasbih", -3)


def test_dhikr_from_missing_row_is_zero():
    assert DhikrCounts.from_row(None).total == 0


# -----------------------------------------------------------------------------
# QuranProgress
# -----------------------------------------------------------------------------

def test_quran_progress_validation():
    assert QuranProgress(pages_read=2).pages_read == 2
    with pytest.raises(ValidationError):
        QuranProgress(pages_read=-1)
    with pytest.raises(ValidationError):
        QuranProgress(verses_read="3")
