# app/services/tier_classifier.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from app.services.errors import ValidationError


@dataclass(frozen=True)
class Tier:
    """Un palier de badge : libellé + seuil (inclusif)."""
    label: str
    threshold: int
    description: str = ""


@dataclass(frozen=True)
class TierResult:
    """
    Résultat de classify().

    achieved=True  -> `tier` est le badge le plus prestigieux obtenu, remaining=0
    achieved=False -> `tier` est le prochain palier à viser, remaining = seuil - count
    """
    label: str
    achieved: bool
    remaining: int
    tier: Optional[Tier] = None


@dataclass(frozen=True)
class TierProgress:
    tier: Tier
    current: int
    achieved: bool
    remaining: int


# Paliers quotidiens (compteur d'istighfar du jour)
ISTIGHFAR_TIERS: List[Tier] = [
    Tier("Istighfar Novice", 33, "33 istighfar aujourd'hui"),
    Tier("Istighfar Seeker", 100, "100 istighfar aujourd'hui"),
    Tier("Istighfar Devoted", 500, "500 istighfar aujourd'hui"),
    Tier("Istighfar Champion", 1000, "1000 istighfar aujourd'hui"),
]

# Paliers sur le total de dhikr du jour
DHIKR_TOTAL_TIERS: List[Tier] = [
    Tier("Dhikr Novice", 33, "33 dhikr aujourd'hui"),
    Tier("Dhikr Devoted", 500, "500 dhikr aujourd'hui"),
]

KEEP_GOING = "Keep going"


def _validate(count: int, tiers: Sequence[Tier]) -> None:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise ValidationError(f"Compteur invalide: {count!r} (entier >= 0 attendu)")
    for t in tiers:
        if isinstance(t.threshold, bool) or not isinstance(t.threshold, int) or t.threshold < 0:
            raise ValidationError(f"Seuil invalide pour {t.label!r}: {t.threshold!r}")


def classify(count: int, tiers: Sequence[Tier]) -> TierResult:
    """
    Classe un compteur dans une liste de paliers.

    - Le palier obtenu est celui de plus GRAND seuil <= count (borne inclusive).
    - Si aucun seuil n'est atteint : le plus PETIT seuil non atteint, avec le reste à faire.
    - Liste vide : résultat neutre "Keep going".

    Fonction pure : aucun effet de bord, aucun accès stockage.
    """
    _validate(count, tiers)

    achieved = [t for t in tiers if t.threshold <= count]
    if achieved:
        top = max(achieved, key=lambda t: t.threshold)
        return TierResult(label=top.label, achieved=True, remaining=0, tier=top)

    pending = [t for t in tiers if t.threshold > count]
    if not pending:
        return TierResult(label=KEEP_GOING, achieved=False, remaining=0)

    nxt = min(pending, key=lambda t: t.threshold)
    return TierResult(label=nxt.label, achieved=False, remaining=nxt.threshold - count, tier=nxt)


def tier_progress(count: int, tiers: Sequence[Tier]) -> List[TierProgress]:
    """Chaque palier avec son propre état (grille de badges), triés par seuil."""
    _validate(count, tiers)
    return [
        TierProgress(
            tier=t,
            current=count,
            achieved=count >= t.threshold,
            remaining=max(0, t.threshold - count),
        )
        for t in sorted(tiers, key=lambda t: t.threshold)
    ]
