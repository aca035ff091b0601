# app/persistence/repositories/prayer_times_repo.py
# -*- coding: utf-8 -*-
import datetime as dt

from sqlalchemy import select, and_
from app.persistence.models import PrayerTime
from app.services.prayer_times_service import PrayerTimes

class PrayerTimeRepository:
    def __init__(self, db):
        self.db = db

    def get(self, latitude: float, longitude: float, day: dt.date) -> PrayerTimes | None:
        with self.db.get_session() as s:
            row = s.scalar(select(PrayerTime).where(
                and_(PrayerTime.latitude == latitude, PrayerTime.longitude == longitude, PrayerTime.date == day)
            ).limit(1))
            if not row:
                return None
            return PrayerTimes(
                fajr=row.fajr,
                dhuhr=row.dhuhr,
                asr=row.asr,
                maghrib=row.maghrib,
                isha=row.isha,
                sunrise=row.sunrise,
                sunset=row.sunset,
                calculation_method=row.calculation_method,
            )

    def save(self, latitude: float, longitude: float, day: dt.date, times: PrayerTimes) -> None:
        with self.db.get_session() as s:
            s.add(PrayerTime(
                latitude=latitude,
                longitude=longitude,
                date=day,
                fajr=times.fajr,
                sunrise=times.sunrise,
                dhuhr=times.dhuhr,
                asr=times.asr,
                sunset=times.sunset,
                maghrib=times.maghrib,
                isha=times.isha,
                calculation_method=times.calculation_method,
            ))
