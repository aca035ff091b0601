# app/services/weekly_aggregator.py
# -*- coding: utf-8 -*-
"""
Agrégats sur une fenêtre glissante de jours.

Le moteur ne connaît pas le stockage : il reçoit un accesseur `get_record(date)`
qui renvoie un DailyRecord ou None (jour absent == tout à False / 0).
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from app.services.entries import TRACKED_FLAGS, DailyRecord, normalize_date

WINDOW_DAYS = 7
ON_TIME_FACTOR = 0.8  # heuristique provisoire : pas de comparaison aux horaires réels
MAX_STREAK_LOOKBACK = 366

RecordGetter = Callable[[dt.date], Optional[DailyRecord]]


@dataclass(frozen=True)
class WeeklyStats:
    completion_percent: int
    on_time_percent: int
    counter_sum: int


@dataclass(frozen=True)
class DaySummary:
    day: dt.date
    prayers: int = 0
    dhikr_total: int = 0
    pages_read: int = 0


@dataclass(frozen=True)
class WeekTrend:
    week: int
    prayers: int
    dhikr: int
    quran: int
    start_date: Optional[dt.date]
    end_date: Optional[dt.date]


ZERO_STATS = WeeklyStats(completion_percent=0, on_time_percent=0, counter_sum=0)


def round_half_up(numerator: int, denominator: int) -> int:
    """Arrondi "au plus proche, .5 vers le haut" en arithmétique entière (pas de banker's rounding)."""
    return (2 * numerator + denominator) // (2 * denominator)


def window_dates(reference_date: dt.date, days: int = WINDOW_DAYS) -> List[dt.date]:
    """Les `days` dates se terminant à reference_date (incluse), de la plus ancienne à la plus récente."""
    return [reference_date - dt.timedelta(days=i) for i in range(days - 1, -1, -1)]


def aggregate_week(person_id, reference_date: Optional[dt.date], get_record: RecordGetter) -> WeeklyStats:
    """
    Statistiques des 7 jours finissant à reference_date :

        completion = round(cases cochées / (11 * 7) * 100)
        on_time    = round(completion * 0.8)
        counter    = somme des istighfar

    Entrée dégénérée (personne ou date absente) -> tout à zéro.
    Une date présente mais mal formée lève ValidationError.
    """
    if not person_id or reference_date is None:
        return ZERO_STATS
    reference_date = normalize_date(reference_date)

    completed = 0
    counter_sum = 0
    for day in window_dates(reference_date):
        rec = get_record(day)
        if rec is None:
            continue
        completed += rec.completed_flags()
        counter_sum += rec.istighfar_count

    possible = len(TRACKED_FLAGS) * WINDOW_DAYS
    completion = round_half_up(completed * 100, possible)
    # completion * 0.8 == completion * 8 / 10
    on_time = round_half_up(completion * int(ON_TIME_FACTOR * 10), 10)
    return WeeklyStats(completion_percent=completion, on_time_percent=on_time, counter_sum=counter_sum)


def all_prayers_done(rec: Optional[DailyRecord]) -> bool:
    return rec is not None and rec.prayers_completed() == 5


def current_streak(
    reference_date: dt.date,
    get_record: RecordGetter,
    predicate: Callable[[Optional[DailyRecord]], bool] = all_prayers_done,
    max_days: int = MAX_STREAK_LOOKBACK,
) -> int:
    """Nombre de jours consécutifs, jusqu'à reference_date incluse, qui satisfont `predicate`."""
    streak = 0
    day = reference_date
    while streak < max_days and predicate(get_record(day)):
        streak += 1
        day -= dt.timedelta(days=1)
    return streak


def activity_score(record: Optional[DailyRecord], dhikr_total: int = 0, pages_read: int = 0) -> int:
    """
    Valeur de heatmap (0..10) :
        prières (0..5) + min(dhikr / 20, 3) + min(pages, 3), plafonné à 10
    """
    prayers = record.prayers_completed() if record is not None else 0
    value = min(prayers + min(dhikr_total / 20, 3) + min(pages_read, 3), 10)
    return int(value + 0.5)


def weekly_trends(days: Sequence[DaySummary]) -> List[WeekTrend]:
    """Découpe une suite de jours (déjà triée) en blocs de 7."""
    out: List[WeekTrend] = []
    for i in range(0, len(days), WINDOW_DAYS):
        chunk = days[i:i + WINDOW_DAYS]
        out.append(WeekTrend(
            week=i // WINDOW_DAYS + 1,
            prayers=sum(d.prayers for d in chunk),
            dhikr=sum(d.dhikr_total for d in chunk),
            quran=sum(d.pages_read for d in chunk),
            start_date=chunk[0].day if chunk else None,
            end_date=chunk[-1].day if chunk else None,
        ))
    return out


def getter_from(records: Iterable[DailyRecord]) -> RecordGetter:
    """Accesseur en mémoire à partir d'une liste pré-chargée (une requête par plage)."""
    by_day = {r.day: r for r in records}
    return by_day.get
