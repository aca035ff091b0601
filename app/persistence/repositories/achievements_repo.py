# app/persistence/repositories/achievements_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select
from app.persistence.models import Achievement
from app.services.achievement_recorder import AchievementEvent
from app.services.entries import to_utc_naive
import datetime as dt

def _to_event(row: Achievement) -> AchievementEvent:
    return AchievementEvent(
        id=row.id,
        person_id=row.profile_id,
        category=row.achievement_type,
        label=row.achievement_name,
        earned_at=row.earned_at,
    )

class AchievementRepository:
    """Store des achievements ; les instants sont stockés en UTC naïf."""

    def __init__(self, db):
        self.db = db

    def find_between(self, person_id: int, label: str, start: dt.datetime, end: dt.datetime):
        """Événements (person, label) avec start <= earned_at < end."""
        with self.db.get_session() as s:
            stmt = select(Achievement).where(
                Achievement.profile_id == person_id,
                Achievement.achievement_name == label,
                Achievement.earned_at >= to_utc_naive(start),
                Achievement.earned_at < to_utc_naive(end),
            ).order_by(Achievement.earned_at.asc())
            return [_to_event(r) for r in s.scalars(stmt)]

    def insert(self, person_id: int, category: str, label: str, earned_at: dt.datetime) -> AchievementEvent:
        with self.db.get_session() as s:
            row = Achievement(
                profile_id=person_id,
                achievement_type=category,
                achievement_name=label,
                earned_at=to_utc_naive(earned_at),
            )
            s.add(row); s.flush(); s.refresh(row)
            return _to_event(row)

    def list_since(self, person_id: int, since: dt.datetime | None = None):
        """Plus récents d'abord."""
        with self.db.get_session() as s:
            stmt = select(Achievement).where(Achievement.profile_id == person_id)
            if since is not None:
                stmt = stmt.where(Achievement.earned_at >= to_utc_naive(since))
            stmt = stmt.order_by(Achievement.earned_at.desc(), Achievement.id.desc())
            return [_to_event(r) for r in s.scalars(stmt)]
