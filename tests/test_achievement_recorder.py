# tests/test_achievement_recorder.py
# -*- coding: utf-8 -*-
"""
Tests unitaires pour app/services/achievement_recorder.py

Idempotence journalière : un même (personne, libellé) n'est inscrit qu'une fois
par jour UTC ; le lendemain, une nouvelle ligne est créée.
"""

import datetime as dt

import pytest

from app.services.achievement_recorder import (
    AchievementEvent,
    AchievementRecorder,
    utc_day_bounds,
)
from app.services.errors import DependencyError, ValidationError
from app.services.tier_classifier import ISTIGHFAR_TIERS, classify

# -----------------------------------------------------------------------------
# Faux store
# -----------------------------------------------------------------------------

class InMemoryAchievements:
    def __init__(self):
        self.events = []

    def find_between(self, person_id, label, start, end):
        return [
            e for e in self.events
            if e.person_id == person_id and e.label == label and start <= e.earned_at < end
        ]

    def insert(self, person_id, category, label, earned_at):
        ev = AchievementEvent(id=len(self.events) + 1, person_id=person_id, category=category, label=label, earned_at=earned_at)
        self.events.append(ev)
        return ev


class BrokenStore:
    def find_between(self, *a, **k):
        raise DependencyError("db down")

    def insert(self, *a, **k):
        raise AssertionError("ne doit pas être appelé")


@pytest.fixture
def store():
    return InMemoryAchievements()


@pytest.fixture
def rec(store):
    return AchievementRecorder(store)


MORNING = dt.datetime(2025, 7, 7, 8, 30)

# -----------------------------------------------------------------------------
# Idempotence
# -----------------------------------------------------------------------------

def test_first_record_inserts(rec, store):
    out = rec.record(1, "Istighfar Novice", MORNING)
    assert out.recorded and not out.skipped
    assert out.event.category == "dhikr"
    assert out.event.earned_at == MORNING
    assert len(store.events) == 1


def test_same_day_is_skipped(rec, store):
    rec.record(1, "Istighfar Novice", MORNING)
    out = rec.record(1, "Istighfar Novice", MORNING.replace(hour=23, minute=59))
    assert out.skipped and not out.recorded
    assert out.event is None
    assert len(store.events) == 1


def test_next_day_inserts_again(rec, store):
    rec.record(1, "Istighfar Novice", MORNING)
    out = rec.record(1, "Istighfar Novice", MORNING + dt.timedelta(days=1))
    assert out.recorded
    assert len(store.events) == 2


def test_other_label_or_person_is_independent(rec, store):
    rec.record(1, "Istighfar Novice", MORNING)
    assert rec.record(1, "Istighfar Seeker", MORNING).recorded
    assert rec.record(2, "Istighfar Novice", MORNING).recorded
    assert len(store.events) == 3


def test_label_is_stripped_before_dedup(rec, store):
    rec.record(1, "Istighfar Novice", MORNING)
    assert rec.record(1, "  Istighfar Novice ", MORNING).skipped
    assert len(store.events) == 1


def test_custom_category(rec):
    out = rec.record(1, "Perfect Week", MORNING, category="prayer")
    assert out.event.category == "prayer"


# -----------------------------------------------------------------------------
# Jour UTC
# -----------------------------------------------------------------------------

def test_utc_day_boundary_with_aware_datetimes(rec, store):
    """23:30 à Paris (UTC+2) et 01:00 UTC le lendemain : deux jours UTC distincts."""
    paris = dt.timezone(dt.timedelta(hours=2))
    late_paris = dt.datetime(2025, 7, 7, 23, 30, tzinfo=paris)  # 21:30 UTC le 7
    next_utc = dt.datetime(2025, 7, 8, 1, 0, tzinfo=dt.timezone.utc)

    assert rec.record(1, "Dhikr Novice", late_paris).recorded
    assert store.events[0].earned_at == dt.datetime(2025, 7, 7, 21, 30)
    assert rec.record(1, "Dhikr Novice", next_utc).recorded


def test_aware_datetime_same_utc_day_is_skipped(rec):
    tokyo = dt.timezone(dt.timedelta(hours=9))
    rec.record(1, "Dhikr Novice", dt.datetime(2025, 7, 7, 3, 0, tzinfo=dt.timezone.utc))
    # 08:00 à Tokyo = 23:00 UTC le 6 -> autre jour
    assert rec.record(1, "Dhikr Novice", dt.datetime(2025, 7, 7, 8, 0, tzinfo=tokyo)).recorded
    # 20:00 à Tokyo = 11:00 UTC le 7 -> même jour que le premier
    assert rec.record(1, "Dhikr Novice", dt.datetime(2025, 7, 7, 20, 0, tzinfo=tokyo)).skipped


def test_utc_day_bounds():
    start, end = utc_day_bounds(dt.datetime(2025, 2, 28, 17, 5))
    assert start == dt.datetime(2025, 2, 28)
    assert end == dt.datetime(2025, 3, 1)


# -----------------------------------------------------------------------------
# Paliers et erreurs
# -----------------------------------------------------------------------------

def test_record_tier_only_when_achieved(rec, store):
    assert rec.record_tier(1, classify(10, ISTIGHFAR_TIERS), MORNING) is None
    out = rec.record_tier(1, classify(150, ISTIGHFAR_TIERS), MORNING)
    assert out.recorded
    assert store.events[0].label == "Istighfar Seeker"


@pytest.mark.parametrize(
    "person,label,now",
    [(0, "X", MORNING), (1, "", MORNING), (1, "   ", MORNING), (1, None, MORNING), (1, "X", dt.date(2025, 7, 7))],
)
def test_invalid_inputs(rec, store, person, label, now):
    with pytest.raises(ValidationError):
        rec.record(person, label, now)
    assert store.events == []


def test_store_failure_propagates():
    rec = AchievementRecorder(BrokenStore())
    with pytest.raises(DependencyError):
        rec.record(1, "Istighfar Novice", MORNING)
