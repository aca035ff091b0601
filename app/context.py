# app/context.py
# -*- coding: utf-8 -*-
"""
Assemblage explicite : Settings -> Database -> repositories -> services.

Chaque page Streamlit construit (ou récupère via st.cache_resource) un AppContext ;
aucun composant ne lit d'état global.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.config import Settings
from app.persistence.db import Database
from app.persistence.models import Base
from app.persistence.repositories.achievements_repo import AchievementRepository
from app.persistence.repositories.friends_repo import FriendRequestRepository
from app.persistence.repositories.prayer_times_repo import PrayerTimeRepository
from app.persistence.repositories.progress_repo import DhikrRepository, QuranRepository
from app.persistence.repositories.qibla_repo import QiblaRepository
from app.persistence.repositories.records_repo import RecordRepository
from app.persistence.repositories.tasks_repo import TaskRepository
from app.persistence.repositories.users_repo import ProfileRepository, UserRepository
from app.services.achievement_recorder import AchievementRecorder
from app.services.hijri_service import HijriService
from app.services.prayer_times_service import AladhanTimingsProvider, PrayerTimesService
from app.services.qibla_service import QiblaService
from app.services.relationship_machine import FriendshipService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    db: Database
    users: UserRepository
    profiles: ProfileRepository
    records: RecordRepository
    dhikr: DhikrRepository
    quran: QuranRepository
    achievements: AchievementRepository
    friend_requests: FriendRequestRepository
    tasks: TaskRepository
    friendships: FriendshipService
    recorder: AchievementRecorder
    qibla: QiblaService
    hijri: HijriService
    prayer_times: PrayerTimesService


def _timings_provider(settings: Settings) -> Optional[AladhanTimingsProvider]:
    try:
        return AladhanTimingsProvider.from_settings(settings)
    except (RuntimeError, ValueError) as e:
        # sans provider, seuls les horaires déjà en cache restent disponibles
        logger.warning(f"Horaires de prière indisponibles ({e})")
        return None


def build_context(settings: Optional[Settings] = None, create_tables: bool = True) -> AppContext:
    settings = settings or Settings.from_env()
    db = Database(settings.db_url, echo=settings.db_echo)
    if create_tables:
        db.init_db(Base, drop_and_recreate=False)

    friend_requests = FriendRequestRepository(db)
    achievements = AchievementRepository(db)
    return AppContext(
        settings=settings,
        db=db,
        users=UserRepository(db),
        profiles=ProfileRepository(db),
        records=RecordRepository(db),
        dhikr=DhikrRepository(db),
        quran=QuranRepository(db),
        achievements=achievements,
        friend_requests=friend_requests,
        tasks=TaskRepository(db),
        friendships=FriendshipService(friend_requests),
        recorder=AchievementRecorder(achievements),
        qibla=QiblaService(QiblaRepository(db)),
        hijri=HijriService(settings=settings),
        prayer_times=PrayerTimesService(PrayerTimeRepository(db), _timings_provider(settings)),
    )
