# app/services/qibla_service.py
# -*- coding: utf-8 -*-
"""Qibla avec cache en table : lecture, sinon calcul puis insertion."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from app.services.errors import DependencyError
from app.services.islamic_calc import QiblaResult, qibla


@dataclass(frozen=True)
class QiblaLookup:
    direction: float
    distance: float
    cached: bool


class QiblaStore(Protocol):
    def get(self, latitude: float, longitude: float) -> Optional[QiblaResult]: ...
    def save(self, latitude: float, longitude: float, result: QiblaResult) -> None: ...


class QiblaService:

    def __init__(self, store: QiblaStore) -> None:
        self.store = store
        self.logger = logging.getLogger(self.__class__.__name__)

    def lookup(self, lat: float, lon: float) -> QiblaLookup:
        computed = qibla(lat, lon)  # valide aussi les coordonnées
        lat, lon = float(lat), float(lon)

        hit = self.store.get(lat, lon)
        if hit is not None:
            return QiblaLookup(direction=hit.direction, distance=hit.distance, cached=True)

        try:
            self.store.save(lat, lon, computed)
        except DependencyError as e:
            # le cache est optionnel : on renvoie quand même le calcul
            self.logger.warning(f"Error caching Qibla direction for ({lat}, {lon}): {e}")
        return QiblaLookup(direction=computed.direction, distance=computed.distance, cached=False)
