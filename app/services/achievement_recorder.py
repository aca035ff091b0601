# app/services/achievement_recorder.py
# -*- coding: utf-8 -*-
"""
Enregistrement idempotent des achievements : au plus un (personne, libellé) par jour.

Le "jour" est le jour calendaire UTC de l'instant `now` injecté par l'appelant.
Un doublon dans la journée n'est pas une erreur : on renvoie un résultat "skipped".
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from app.services.entries import require_id, to_utc_naive
from app.services.errors import ValidationError
from app.services.tier_classifier import TierResult

DEFAULT_CATEGORY = "dhikr"


@dataclass(frozen=True)
class AchievementEvent:
    id: int
    person_id: int
    category: str
    label: str
    earned_at: dt.datetime


@dataclass(frozen=True)
class RecordOutcome:
    recorded: bool
    skipped: bool
    event: Optional[AchievementEvent] = None


class AchievementStore(Protocol):
    def find_between(self, person_id: int, label: str, start: dt.datetime, end: dt.datetime) -> List[AchievementEvent]: ...
    def insert(self, person_id: int, category: str, label: str, earned_at: dt.datetime) -> AchievementEvent: ...


def utc_day_bounds(now: dt.datetime) -> Tuple[dt.datetime, dt.datetime]:
    """[00:00, 00:00 du lendemain) du jour UTC contenant `now`."""
    start = dt.datetime.combine(to_utc_naive(now).date(), dt.time.min)
    return start, start + dt.timedelta(days=1)


class AchievementRecorder:

    def __init__(self, store: AchievementStore) -> None:
        self.store = store
        self.logger = logging.getLogger(self.__class__.__name__)

    def record(self, person_id: int, label: str, now: dt.datetime, category: Optional[str] = None) -> RecordOutcome:
        require_id(person_id, "person_id")
        if not isinstance(label, str) or not label.strip():
            raise ValidationError("Libellé d'achievement manquant")
        if not isinstance(now, dt.datetime):
            raise ValidationError(f"Instant invalide: {now!r}")
        label = label.strip()
        category = (category or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY

        start, end = utc_day_bounds(now)
        # les erreurs du store (DependencyError) remontent telles quelles
        if self.store.find_between(person_id, label, start, end):
            self.logger.debug(f"Achievement {label!r} already recorded today for {person_id}")
            return RecordOutcome(recorded=False, skipped=True)

        event = self.store.insert(person_id, category, label, to_utc_naive(now))
        self.logger.info(f"Achievement {label!r} ({category}) recorded for {person_id}")
        return RecordOutcome(recorded=True, skipped=False, event=event)

    def record_tier(self, person_id: int, result: TierResult, now: dt.datetime, category: Optional[str] = None) -> Optional[RecordOutcome]:
        """Enregistre le palier obtenu ; ne fait rien si aucun palier n'est atteint."""
        if not result.achieved:
            return None
        return self.record(person_id, result.label, now, category=category)
