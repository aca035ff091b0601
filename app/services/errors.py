# app/services/errors.py
# -*- coding: utf-8 -*-
"""
Erreurs du moteur de règles.

Toutes dérivent de EngineError pour que la couche UI puisse les attraper d'un bloc.
Seul le doublon d'achievement est absorbé localement (résultat "skipped") ;
tout le reste remonte à l'appelant.
"""


class EngineError(Exception):
    """Base des erreurs métier."""


class ValidationError(EngineError, ValueError):
    """Identifiant, date ou payload manquant / mal formé."""


class AuthorizationError(EngineError):
    """L'acteur n'a pas le droit d'effectuer cette transition."""


class ConflictError(EngineError):
    """Violation d'unicité (relation déjà active, email déjà pris, etc.)."""


class NotFoundError(EngineError):
    """La ligne ciblée n'existe pas."""


class DependencyError(EngineError):
    """Le stockage sous-jacent a échoué ; l'appelant peut réessayer."""
