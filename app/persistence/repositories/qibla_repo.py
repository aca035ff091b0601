# app/persistence/repositories/qibla_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select, and_
from app.persistence.models import QiblaDirection
from app.services.islamic_calc import QiblaResult

class QiblaRepository:
    def __init__(self, db):
        self.db = db

    def get(self, latitude: float, longitude: float) -> QiblaResult | None:
        with self.db.get_session() as s:
            row = s.scalar(select(QiblaDirection).where(
                and_(QiblaDirection.latitude == latitude, QiblaDirection.longitude == longitude)
            ).limit(1))
            if not row:
                return None
            return QiblaResult(direction=row.direction_degrees, distance=row.distance_km)

    def save(self, latitude: float, longitude: float, result: QiblaResult) -> None:
        with self.db.get_session() as s:
            s.add(QiblaDirection(
                latitude=latitude,
                longitude=longitude,
                direction_degrees=result.direction,
                distance_km=result.distance,
            ))
