# tests/test_islamic_calc.py
# -*- coding: utf-8 -*-
"""
Tests unitaires pour app/services/islamic_calc.py

- Qibla : relèvement et distance pour quelques villes de référence (tolérance 0.01)
- Calendrier tabulaire : conversions dans les deux sens, années abondantes
- Prochains événements : ordre et dates à partir du 1er Ramadan 1446
"""

import datetime as dt

import pytest

from app.services.errors import ValidationError
from app.services.islamic_calc import (
    ISLAMIC_EVENTS,
    HijriDate,
    gregorian_to_hijri,
    hijri_month_length,
    hijri_to_gregorian,
    is_hijri_leap_year,
    month_name,
    qibla,
    upcoming_events,
)

# -----------------------------------------------------------------------------
# Qibla
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "lat,lon,direction,distance",
    [
        (40.7128, -74.0060, 58.48, 10306.31),    # New York
        (51.5074, -0.1278, 118.99, 4793.78),     # Londres
        (-33.8688, 151.2093, 277.50, 13236.26),  # Sydney
    ],
)
def test_qibla_reference_cities(lat, lon, direction, distance):
    q = qibla(lat, lon)
    assert q.direction == pytest.approx(direction, abs=0.01)
    assert q.distance == pytest.approx(distance, abs=0.01)


def test_qibla_from_kaaba_is_zero():
    q = qibla(21.4225, 39.8262)
    assert q.distance == 0
    assert q.direction == 0


def test_qibla_direction_in_range():
    for lat, lon in [(0, 0), (89.9, 10), (-89.9, -170), (21.0, 39.8262), (60, 179.9)]:
        assert 0 <= qibla(lat, lon).direction < 360


@pytest.mark.parametrize("lat,lon", [(91, 0), (-90.5, 0), (0, 181), (0, -180.01), (None, 0), ("abc", 0)])
def test_qibla_rejects_bad_coordinates(lat, lon):
    with pytest.raises(ValidationError):
        qibla(lat, lon)


def test_qibla_accepts_numeric_strings():
    assert qibla("51.5074", "-0.1278") == qibla(51.5074, -0.1278)


# -----------------------------------------------------------------------------
# Calendrier hégirien tabulaire
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "greg,hijri",
    [
        (dt.date(622, 7, 19), (1, 1, 1)),
        (dt.date(2023, 3, 23), (1444, 9, 1)),
        (dt.date(2024, 7, 7), (1445, 12, 30)),
        (dt.date(2025, 3, 1), (1446, 9, 1)),
        (dt.date(2025, 6, 26), (1446, 12, 29)),
        (dt.date(2025, 6, 27), (1447, 1, 1)),
        (dt.date(2026, 3, 20), (1447, 10, 1)),
        (dt.date(2026, 5, 27), (1447, 12, 10)),
        (dt.date(2026, 10, 19), (1448, 5, 7)),
    ],
)
def test_gregorian_hijri_reference_dates(greg, hijri):
    assert gregorian_to_hijri(greg) == HijriDate(*hijri)
    assert hijri_to_gregorian(*hijri) == greg


def test_consecutive_days_stay_consistent():
    """Sur 3 ans, chaque jour grégorien avance d'exactement un jour hégirien."""
    d = dt.date(2024, 1, 1)
    prev = gregorian_to_hijri(d)
    for _ in range(3 * 366):
        d += dt.timedelta(days=1)
        cur = gregorian_to_hijri(d)
        if cur.day == 1:
            assert prev.day == hijri_month_length(prev.year, prev.month)
        else:
            assert (cur.year, cur.month, cur.day) == (prev.year, prev.month, prev.day + 1)
        assert hijri_to_gregorian(cur.year, cur.month, cur.day) == d
        prev = cur


def test_leap_years_and_month_lengths():
    assert is_hijri_leap_year(1445) is True
    assert is_hijri_leap_year(1446) is False
    assert hijri_month_length(1445, 12) == 30
    assert hijri_month_length(1446, 12) == 29
    assert hijri_month_length(1446, 1) == 30
    assert hijri_month_length(1446, 2) == 29
    # 11 années abondantes par cycle de 30 ans
    assert sum(is_hijri_leap_year(y) for y in range(1, 31)) == 11


@pytest.mark.parametrize("ymd", [(0, 1, 1), (1446, 13, 1), (1446, 0, 1), (1446, 12, 30), (1446, 2, 30), (1446, 1, 0)])
def test_hijri_to_gregorian_rejects(ymd):
    with pytest.raises(ValidationError):
        hijri_to_gregorian(*ymd)


def test_before_hijra_is_rejected():
    with pytest.raises(ValidationError):
        gregorian_to_hijri(dt.date(622, 7, 18))


def test_month_names():
    assert month_name(9) == "Ramadan"
    assert month_name(13) == "Unknown"
    h = HijriDate(1446, 9, 1)
    assert h.month_name == "Ramadan"
    assert h.isoformat() == "1446-09-01"


# -----------------------------------------------------------------------------
# Événements
# -----------------------------------------------------------------------------

def test_upcoming_events_from_first_of_ramadan():
    events = upcoming_events(dt.date(2025, 3, 1), limit=5)
    assert [e.event.name for e in events] == [
        "Ramadan begins", "Laylat al-Qadr", "Eid al-Fitr", "Day of Arafah", "Eid al-Adha",
    ]
    assert [e.date for e in events] == [
        dt.date(2025, 3, 1), dt.date(2025, 3, 27), dt.date(2025, 3, 31),
        dt.date(2025, 6, 6), dt.date(2025, 6, 7),
    ]


def test_upcoming_events_all_sorted_and_in_future():
    today = dt.date(2025, 8, 15)
    events = upcoming_events(today, limit=50)
    assert len(events) == len(ISLAMIC_EVENTS)
    dates = [e.date for e in events]
    assert dates == sorted(dates)
    assert all(d >= today for d in dates)
    for e in events:
        assert hijri_to_gregorian(e.hijri.year, e.hijri.month, e.hijri.day) == e.date


def test_upcoming_events_limit():
    assert upcoming_events(dt.date(2025, 3, 1), limit=0) == []
    assert len(upcoming_events(dt.date(2025, 3, 1), limit=2)) == 2
