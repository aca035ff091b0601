# tests/test_tier_classifier.py
# -*- coding: utf-8 -*-
"""
Tests unitaires pour app/services/tier_classifier.py

Ce fichier couvre :
- le palier obtenu = plus grand seuil <= compteur (et non le premier atteint),
- la borne inclusive (compteur == seuil),
- le prochain palier + reste à faire quand rien n'est atteint,
- la propriété "achieved <=> count >= min(seuils)" sur une grille de valeurs,
- la validation des entrées (compteur négatif, seuil invalide),
- la grille de progression (tier_progress).
"""

import pytest

from app.services.errors import ValidationError
from app.services.tier_classifier import (
    DHIKR_TOTAL_TIERS,
    ISTIGHFAR_TIERS,
    KEEP_GOING,
    Tier,
    classify,
    tier_progress,
)

# -----------------------------------------------------------------------------
# Palier obtenu
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "count,expected_label",
    [
        (33, "Istighfar Novice"),       # borne exacte
        (99, "Istighfar Novice"),
        (100, "Istighfar Seeker"),
        (750, "Istighfar Devoted"),
        (1000, "Istighfar Champion"),
        (25000, "Istighfar Champion"),  # pas de plafond
    ],
)
def test_classify_returns_highest_achieved_tier(count, expected_label):
    """Plusieurs seuils atteints -> on garde le plus prestigieux."""
    res = classify(count, ISTIGHFAR_TIERS)
    assert res.achieved is True
    assert res.label == expected_label
    assert res.remaining == 0


def test_classify_threshold_is_inclusive_for_every_tier():
    for t in ISTIGHFAR_TIERS:
        res = classify(t.threshold, ISTIGHFAR_TIERS)
        assert res.achieved is True
        assert res.tier == t


# -----------------------------------------------------------------------------
# Prochain palier
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("count,remaining", [(0, 33), (1, 32), (32, 1)])
def test_classify_reports_next_tier_when_nothing_achieved(count, remaining):
    res = classify(count, ISTIGHFAR_TIERS)
    assert res.achieved is False
    assert res.label == "Istighfar Novice"
    assert res.remaining == remaining


def test_classify_does_not_depend_on_tier_order():
    """Une liste mal triée donne le même résultat."""
    shuffled = [ISTIGHFAR_TIERS[2], ISTIGHFAR_TIERS[0], ISTIGHFAR_TIERS[3], ISTIGHFAR_TIERS[1]]
    assert classify(150, shuffled) == classify(150, ISTIGHFAR_TIERS)
    assert classify(10, shuffled) == classify(10, ISTIGHFAR_TIERS)


def test_classify_empty_tiers_is_neutral():
    res = classify(12, [])
    assert res.label == KEEP_GOING
    assert res.achieved is False
    assert res.remaining == 0
    assert res.tier is None


def test_classify_dhikr_total_tiers():
    assert classify(40, DHIKR_TOTAL_TIERS).label == "Dhikr Novice"
    assert classify(499, DHIKR_TOTAL_TIERS).label == "Dhikr Novice"
    assert classify(500, DHIKR_TOTAL_TIERS).label == "Dhikr Devoted"


# -----------------------------------------------------------------------------
# Propriété générale
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("count", [0, 5, 9, 10, 11, 49, 50, 51, 199, 200, 1000])
def test_achieved_iff_count_reaches_min_threshold(count):
    tiers = [Tier("A", 10), Tier("B", 50), Tier("C", 200)]
    res = classify(count, tiers)
    thresholds = [t.threshold for t in tiers]

    assert res.achieved == (count >= min(thresholds))
    if res.achieved:
        assert res.tier.threshold == max(x for x in thresholds if x <= count)
    else:
        assert res.remaining == min(thresholds) - count


def test_classify_is_pure():
    """Mêmes entrées => même résultat, et la liste n'est pas modifiée."""
    tiers = list(ISTIGHFAR_TIERS)
    r1 = classify(120, tiers)
    r2 = classify(120, tiers)
    assert r1 == r2
    assert tiers == ISTIGHFAR_TIERS


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("bad", [-1, 3.5, "10", None, True])
def test_classify_rejects_invalid_count(bad):
    with pytest.raises(ValidationError):
        classify(bad, ISTIGHFAR_TIERS)


def test_classify_rejects_negative_threshold():
    with pytest.raises(ValidationError) as exc:
        classify(5, [Tier("Bad", -3)])
    assert "Bad" in str(exc.value)


# -----------------------------------------------------------------------------
# Grille de progression
# -----------------------------------------------------------------------------

def test_tier_progress_lists_every_tier_with_its_state():
    grid = tier_progress(120, ISTIGHFAR_TIERS)
    assert [p.tier.label for p in grid] == [t.label for t in ISTIGHFAR_TIERS]
    assert [p.achieved for p in grid] == [True, True, False, False]
    assert [p.remaining for p in grid] == [0, 0, 380, 880]
    assert all(p.current == 120 for p in grid)
