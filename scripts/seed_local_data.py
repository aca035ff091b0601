# scripts/seed_local_data.py
# -*- coding: utf-8 -*-
"""
Seed local pour Muhasaba : crée des utilisateurs, des profils et des journées réalistes.

Caractéristiques :
- Idempotent : réexécutable sans doublons (upsert par profil + date)
- Paramétrable via CLI : nb d'utilisateurs, nb de jours, date de fin, gaps aléatoires
- Compteurs de dhikr et lecture du Coran pour alimenter l'historique
- Les utilisateurs 1 et 2 deviennent amis (demande + acceptation via le moteur)
- Option (--wipe) pour drop+recreate le schéma (utile en dev)

Exemples :
    # 3 users, 14 jours jusqu'à aujourd'hui
    python scripts/seed_local_data.py

    # 5 users, 30 jours, quelques trous de données
    python scripts/seed_local_data.py --users 5 --days 30 --gap-rate 0.15

    # Définir une date de fin (YYYY-MM-DD) et recommencer à zéro
    python scripts/seed_local_data.py --end 2025-10-01 --wipe
"""

from __future__ import annotations

import argparse
import datetime as dt
import logging
import os
import random
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.config import Settings, configure_logging, utc_today
from app.context import build_context
from app.persistence.models import Base
from app.services.entries import DailyRecord, DhikrCounts, QuranProgress, TRACKED_FLAGS
from app.services.errors import ConflictError

logger = logging.getLogger("seed")

# probabilité qu'une case soit cochée
FLAG_RATES = {
    "fajr": 0.75, "dhuhr": 0.9, "asr": 0.9, "maghrib": 0.95, "isha": 0.9,
    "tahajjud": 0.2, "morning_dhikr": 0.6, "evening_dhikr": 0.55, "before_sleep_dhikr": 0.5,
    "yaseen_after_fajr": 0.3, "mulk_before_sleep": 0.4,
}


# -------------------------------------------------------------------
# Utils
# -------------------------------------------------------------------

def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def sample_day(profile_id: int, day: dt.date) -> DailyRecord:
    """Une journée "réaliste" : cases tirées selon FLAG_RATES, istighfar ~ N(80, 60)."""
    payload = {flag: random.random() < FLAG_RATES[flag] for flag in TRACKED_FLAGS}
    payload["istighfar_count"] = int(clamp(random.gauss(80, 60), 0, 1500))
    return DailyRecord.from_payload(profile_id, day, payload)


def sample_dhikr() -> DhikrCounts:
    return DhikrCounts(
        tasbih=random.choice([0, 33, 33, 100]),
        tahmid=random.choice([0, 33, 33, 100]),
        takbir=random.choice([0, 33, 34, 100]),
        istighfar=random.randint(0, 300),
        salawat=random.randint(0, 100),
        lailaha=random.choice([0, 10, 100]),
    )


def daterange(end: dt.date, days: int):
    """Génère des dates [end - (days-1) .. end] incluses, en ordre croissant."""
    for i in range(days):
        yield end - dt.timedelta(days=(days - 1 - i))


# -------------------------------------------------------------------
# Seeding
# -------------------------------------------------------------------

def seed(ctx, *, users: int, days: int, end_date: dt.date, email_prefix: str, domain: str, gap_rate: float) -> None:
    logger.info(f"Seeding {users} user(s), {days} jour(s), fin au {end_date.isoformat()} | gaps ~{int(gap_rate*100)}%")

    total_records = 0
    created_users = []
    for i in range(1, users + 1):
        email = f"{email_prefix}{i}@{domain}".lower()
        u = ctx.users.get_or_create(email, display_name=f"{email_prefix.capitalize()} {i}")
        created_users.append(u)
        profile = ctx.profiles.get_or_create_default(u.id, u.display_name or email)
        logger.info(f"User {u.id:>3}  {u.email:<30}  profile={profile.id}")

        for day in daterange(end=end_date, days=days):
            # Probabilité de "jour manquant" pour simuler des trous dans les séries
            if random.random() < gap_rate:
                continue
            ctx.records.upsert(sample_day(profile.id, day))
            ctx.dhikr.save(profile.id, day, sample_dhikr())
            ctx.quran.upsert(profile.id, day, QuranProgress(
                pages_read=random.randint(0, 5),
                verses_read=random.randint(0, 60),
                time_spent_minutes=random.randint(0, 45),
            ))
            total_records += 1

    if len(created_users) >= 2:
        a, b = created_users[0], created_users[1]
        if not ctx.friendships.are_friends(a.id, b.id):
            try:
                rel = ctx.friendships.send_request(a.id, b.id)
                ctx.friendships.accept(b.id, rel.id)
            except ConflictError as e:
                # demande déjà en attente depuis un seed précédent
                logger.info(f"Friendship {a.email} <-> {b.email}: {e}")

    logger.info(f"Terminé : {users} user(s), {total_records} journée(s) créées/mises à jour.")


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------

def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Seed local data for Muhasaba")
    p.add_argument("--users", type=int, default=3, help="Nombre d'utilisateurs (défaut: 3)")
    p.add_argument("--days", type=int, default=14, help="Nombre de jours (défaut: 14)")
    p.add_argument("--end", type=str, default=None, help="Date de fin (YYYY-MM-DD). Défaut: aujourd'hui (UTC)")
    p.add_argument("--email-prefix", type=str, default="user", help="Préfixe email (défaut: 'user')")
    p.add_argument("--domain", type=str, default="example.com", help="Domaine email (défaut: example.com)")
    p.add_argument("--gap-rate", type=float, default=0.1, help="Probabilité de sauter un jour (0..1, défaut: 0.1)")
    p.add_argument("--seed", type=int, default=None, help="Seed du générateur aléatoire pour reproductibilité")
    p.add_argument("--wipe", action="store_true", help="Drop + recreate la base avant seeding")
    return p.parse_args()


def main():
    args = parse_args()
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if args.seed is not None:
        random.seed(args.seed)

    end_date = dt.date.fromisoformat(args.end) if args.end else utc_today()

    ctx = build_context(settings, create_tables=False)
    if args.wipe:
        logger.warning("Wipe : drop & recreate le schéma…")
    ctx.db.init_db(Base, drop_and_recreate=bool(args.wipe))

    seed(
        ctx,
        users=max(1, args.users),
        days=max(1, args.days),
        end_date=end_date,
        email_prefix=args.email_prefix,
        domain=args.domain,
        gap_rate=clamp(args.gap_rate, 0.0, 0.9),
    )


if __name__ == "__main__":
    main()
