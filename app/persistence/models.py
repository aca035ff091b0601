# app/persistence/models.py
# -*- coding: utf-8 -*-
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import (
    Integer, String, Float, Date, DateTime, Boolean, ForeignKey, UniqueConstraint, Index, func, text,
)
import datetime as dt

class Base(DeclarativeBase):
    pass

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)

    profiles = relationship("Profile", back_populates="user", cascade="all, delete-orphan", lazy="selectin")

class Profile(Base):
    """Un membre de la famille suivi par un utilisateur."""
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    color: Mapped[str] = mapped_column(String(16), default="#3b82f6", nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    date_of_birth: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)

    user = relationship("User", back_populates="profiles")
    entries = relationship("Entry", back_populates="profile", cascade="all, delete-orphan")

class Entry(Base):
    __tablename__ = "entries"
    __table_args__ = (UniqueConstraint("profile_id", "day", name="uq_profile_day"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(ForeignKey("profiles.id"), index=True, nullable=False)
    day: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)

    fajr: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    dhuhr: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    asr: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    maghrib: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    isha: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tahajjud: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    morning_dhikr: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    evening_dhikr: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    before_sleep_dhikr: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    yaseen_after_fajr: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    mulk_before_sleep: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    istighfar_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    fajr_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    dhuhr_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    asr_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    maghrib_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    isha_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    tahajjud_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    morning_dhikr_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    evening_dhikr_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    sleep_dhikr_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    notes: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="entries")

class DhikrProgress(Base):
    __tablename__ = "dhikr_progress"
    __table_args__ = (UniqueConstraint("profile_id", "date", name="uq_dhikr_profile_day"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(ForeignKey("profiles.id"), index=True, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)

    tasbih_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tahmid_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    takbir_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    istighfar_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    salawat_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lailaha_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # toujours recalculé par le repository à partir des 6 compteurs
    total_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    custom_dhikr: Mapped[str | None] = mapped_column(String(255), nullable=True)

class QuranProgress(Base):
    __tablename__ = "quran_progress"
    __table_args__ = (UniqueConstraint("profile_id", "date", name="uq_quran_profile_day"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(ForeignKey("profiles.id"), index=True, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)
    pages_read: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    verses_read: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    time_spent_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

class Achievement(Base):
    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(ForeignKey("profiles.id"), index=True, nullable=False)
    achievement_type: Mapped[str] = mapped_column(String(40), default="dhikr", nullable=False)
    achievement_name: Mapped[str] = mapped_column(String(120), nullable=False)
    # UTC naïf
    earned_at: Mapped[dt.datetime] = mapped_column(DateTime, index=True, nullable=False)

class FriendRequest(Base):
    __tablename__ = "friend_requests"
    __table_args__ = (
        # une seule ligne pending/accepted par paire non ordonnée
        Index(
            "uq_friend_active_pair", "pair_key", unique=True,
            sqlite_where=text("status IN ('pending', 'accepted')"),
            postgresql_where=text("status IN ('pending', 'accepted')"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    requester_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    receiver_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="pending", nullable=False)
    # "min:max" des deux ids
    pair_key: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

class DailyTask(Base):
    __tablename__ = "daily_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)
    is_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)

class QiblaDirection(Base):
    __tablename__ = "qibla_directions"
    __table_args__ = (UniqueConstraint("latitude", "longitude", name="uq_qibla_location"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    direction_degrees: Mapped[float] = mapped_column(Float, nullable=False)
    distance_km: Mapped[float] = mapped_column(Float, nullable=False)

class PrayerTime(Base):
    """Cache des horaires de prière (Umm al-Qura) par position et par jour."""
    __tablename__ = "prayer_times"
    __table_args__ = (UniqueConstraint("latitude", "longitude", "date", name="uq_prayer_times_location_day"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)
    fajr: Mapped[str] = mapped_column(String(8), nullable=False)
    sunrise: Mapped[str | None] = mapped_column(String(8), nullable=True)
    dhuhr: Mapped[str] = mapped_column(String(8), nullable=False)
    asr: Mapped[str] = mapped_column(String(8), nullable=False)
    sunset: Mapped[str | None] = mapped_column(String(8), nullable=True)
    maghrib: Mapped[str] = mapped_column(String(8), nullable=False)
    isha: Mapped[str] = mapped_column(String(8), nullable=False)
    calculation_method: Mapped[str] = mapped_column(String(64), default="Umm al-Qura", nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=func.now(), nullable=False)
