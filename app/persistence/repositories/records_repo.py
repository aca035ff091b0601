# app/persistence/repositories/records_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select, func, and_
from app.persistence.models import Entry
from app.services.entries import DailyRecord, normalize_date
from app.services.errors import ConflictError
from app.services.weekly_aggregator import getter_from, window_dates
import datetime as dt

class RecordRepository:
    """
    Store des journées, clé (profile_id, day).
    Renvoie des DailyRecord (objets du moteur), jamais les lignes ORM.
    """

    def __init__(self, db):
        self.db = db

    def _find(self, s, profile_id: int, day: dt.date):
        return s.scalar(select(Entry).where(and_(Entry.profile_id == profile_id, Entry.day == day)).limit(1))

    def get(self, profile_id: int, date) -> DailyRecord | None:
        day = normalize_date(date)
        with self.db.get_session() as s:
            row = self._find(s, profile_id, day)
            return DailyRecord.from_row(row) if row else None

    def add(self, record: DailyRecord) -> DailyRecord:
        with self.db.get_session() as s:
            if self._find(s, record.person_id, record.day):
                raise ConflictError(f"Journée déjà présente pour {record.day}")
            row = Entry(profile_id=record.person_id, day=record.day, **record.to_fields())
            s.add(row); s.flush(); s.refresh(row)
            return DailyRecord.from_row(row)

    def upsert(self, record: DailyRecord) -> DailyRecord:
        """Écrit la journée complète (last-write-wins sur la clé)."""
        with self.db.get_session() as s:
            row = self._find(s, record.person_id, record.day)
            if row is None:
                row = Entry(profile_id=record.person_id, day=record.day)
            for k, v in record.to_fields().items():
                setattr(row, k, v)
            s.add(row); s.flush(); s.refresh(row)
            return DailyRecord.from_row(row)

    def patch(self, profile_id: int, date, payload: dict) -> DailyRecord:
        """Mise à jour partielle : seules les clés du payload changent (création si absente)."""
        day = normalize_date(date)
        with self.db.get_session() as s:
            row = self._find(s, profile_id, day)
            current = DailyRecord.from_row(row) if row else DailyRecord.empty(profile_id, day)
            updated = current.merged(payload)
            if row is None:
                row = Entry(profile_id=profile_id, day=day)
            for k, v in updated.to_fields().items():
                setattr(row, k, v)
            s.add(row); s.flush(); s.refresh(row)
            return DailyRecord.from_row(row)

    def get_range(self, profile_id: int, start=None, end=None, asc=True):
        with self.db.get_session() as s:
            stmt = select(Entry).where(Entry.profile_id == profile_id)
            if start is not None:
                stmt = stmt.where(Entry.day >= normalize_date(start))
            if end is not None:
                stmt = stmt.where(Entry.day <= normalize_date(end))
            stmt = stmt.order_by(Entry.day.asc() if asc else Entry.day.desc())
            return [DailyRecord.from_row(r) for r in s.scalars(stmt)]

    def last_n(self, profile_id: int, n: int = 7):
        with self.db.get_session() as s:
            stmt = select(Entry).where(Entry.profile_id == profile_id).order_by(Entry.day.desc()).limit(n)
            rows = [DailyRecord.from_row(r) for r in s.scalars(stmt)]
            return list(reversed(rows))

    def delete(self, profile_id: int, date) -> bool:
        day = normalize_date(date)
        with self.db.get_session() as s:
            rec = self._find(s, profile_id, day)
            if not rec:
                return False
            s.delete(rec)
            return True

    def exists(self, profile_id: int, date) -> bool:
        day = normalize_date(date)
        with self.db.get_session() as s:
            c = s.scalar(select(func.count(Entry.id)).where(and_(Entry.profile_id == profile_id, Entry.day == day))) or 0
            return c > 0

    def window_getter(self, profile_id: int, reference_date, days: int = 7):
        """Accesseur get_record(date) pour le moteur, pré-chargé en une requête."""
        dates = window_dates(normalize_date(reference_date), days)
        return getter_from(self.get_range(profile_id, start=dates[0], end=dates[-1]))
