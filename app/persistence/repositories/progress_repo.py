# app/persistence/repositories/progress_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select, and_
from app.persistence.models import DhikrProgress, QuranProgress as QuranRow
from app.services.entries import DHIKR_TYPES, DhikrCounts, QuranProgress, normalize_date
from dataclasses import replace
import datetime as dt

class DhikrRepository:
    """Compteurs de dhikr par (profile_id, date). Le total est recalculé à chaque écriture."""

    def __init__(self, db):
        self.db = db

    def _find(self, s, profile_id: int, day: dt.date):
        return s.scalar(select(DhikrProgress).where(
            and_(DhikrProgress.profile_id == profile_id, DhikrProgress.date == day)
        ).limit(1))

    def get(self, profile_id: int, date) -> DhikrCounts:
        day = normalize_date(date)
        with self.db.get_session() as s:
            return DhikrCounts.from_row(self._find(s, profile_id, day))

    def save(self, profile_id: int, date, counts: DhikrCounts) -> DhikrCounts:
        day = normalize_date(date)
        with self.db.get_session() as s:
            row = self._find(s, profile_id, day)
            if row is None:
                row = DhikrProgress(profile_id=profile_id, date=day)
            for k, v in counts.to_columns().items():
                setattr(row, k, v)
            s.add(row); s.flush(); s.refresh(row)
            return DhikrCounts.from_row(row)

    def set_count(self, profile_id: int, date, dhikr_type: str, count: int, custom_dhikr: str | None = None) -> DhikrCounts:
        """Met à jour UN compteur en conservant les autres."""
        day = normalize_date(date)
        with self.db.get_session() as s:
            row = self._find(s, profile_id, day)
            counts = DhikrCounts.from_row(row).with_count(dhikr_type, count)
            if custom_dhikr is not None:
                counts = replace(counts, custom_dhikr=custom_dhikr)
            if row is None:
                row = DhikrProgress(profile_id=profile_id, date=day)
            for k, v in counts.to_columns().items():
                setattr(row, k, v)
            s.add(row); s.flush(); s.refresh(row)
            return DhikrCounts.from_row(row)

    def increment(self, profile_id: int, date, dhikr_type: str, by: int = 1) -> DhikrCounts:
        current = self.get(profile_id, date)
        return self.set_count(profile_id, date, dhikr_type, current.get(dhikr_type) + by)

    def totals_by_day(self, profile_id: int, start, end) -> dict:
        """{date: total} sur une plage (les jours absents ne figurent pas)."""
        with self.db.get_session() as s:
            stmt = select(DhikrProgress).where(
                DhikrProgress.profile_id == profile_id,
                DhikrProgress.date >= normalize_date(start),
                DhikrProgress.date <= normalize_date(end),
            )
            return {r.date: sum(int(getattr(r, f"{n}_count") or 0) for n in DHIKR_TYPES) for r in s.scalars(stmt)}


class QuranRepository:

    def __init__(self, db):
        self.db = db

    def get(self, profile_id: int, date) -> QuranProgress:
        day = normalize_date(date)
        with self.db.get_session() as s:
            row = s.scalar(select(QuranRow).where(and_(QuranRow.profile_id == profile_id, QuranRow.date == day)).limit(1))
            return QuranProgress.from_row(row)

    def upsert(self, profile_id: int, date, progress: QuranProgress) -> QuranProgress:
        day = normalize_date(date)
        with self.db.get_session() as s:
            row = s.scalar(select(QuranRow).where(and_(QuranRow.profile_id == profile_id, QuranRow.date == day)).limit(1))
            if row is None:
                row = QuranRow(profile_id=profile_id, date=day)
            row.pages_read = progress.pages_read
            row.verses_read = progress.verses_read
            row.time_spent_minutes = progress.time_spent_minutes
            s.add(row); s.flush(); s.refresh(row)
            return QuranProgress.from_row(row)

    def pages_by_day(self, profile_id: int, start, end) -> dict:
        with self.db.get_session() as s:
            stmt = select(QuranRow).where(
                QuranRow.profile_id == profile_id,
                QuranRow.date >= normalize_date(start),
                QuranRow.date <= normalize_date(end),
            )
            return {r.date: int(r.pages_read or 0) for r in s.scalars(stmt)}
