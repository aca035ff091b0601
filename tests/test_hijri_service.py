# tests/test_hijri_service.py
# -*- coding: utf-8 -*-
"""
Tests pour app/services/hijri_service.py

Ce fichier couvre :
1) HijriService (façade) :
   - choix du provider via Settings (tabulaire par défaut, aladhan si demandé)
   - fallback vers le calcul tabulaire si la config Aladhan est inutilisable
   - injection d'un provider custom
2) AladhanProvider :
   - fonctionnement sans réseau via mock de `httpx`
   - format d'URL (DD-MM-YYYY) et timeout
   - erreur de format -> ValueError ; erreur réseau propagée

Notes :
- AUCUN appel réseau réel : on monkey-patche `hijri_service.httpx` avec une implémentation factice.
- Settings est passé explicitement ; l'environnement est vidé via `monkeypatch` pour le cas par défaut.
"""

from __future__ import annotations

import datetime as dt
import types

import pytest

import app.services.hijri_service as hijri_svc
from app.config import Settings
from app.services.hijri_service import AladhanProvider, HijriService, TabularProvider
from app.services.islamic_calc import HijriDate

DAY = dt.date(2025, 3, 1)

# ---------------------------------------------------------------------
# Helpers / Fixtures
# ---------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Nettoie les variables d'environnement pertinentes AVANT chaque test."""
    for key in ["HIJRI_PROVIDER", "ALADHAN_API_URL", "ALADHAN_TIMEOUT_SEC"]:
        monkeypatch.delenv(key, raising=False)
    yield


class _FakeResponse:
    """Imite le strict nécessaire de httpx.Response : .json() et .raise_for_status()."""
    def __init__(self, payload):
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        return None


class _FakeClient:
    """Client factice utilisé via "with httpx.Client(...) as client:"; garde trace des appels."""
    calls = []

    def __init__(self, *, payload_to_return, timeout=None):
        self.payload_to_return = payload_to_return
        self.timeout = timeout

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def get(self, url):
        _FakeClient.calls.append((url, self.timeout))
        return _FakeResponse(self.payload_to_return)


ALADHAN_OK = {"code": 200, "data": {"hijri": {"day": "01", "month": {"number": 9, "en": "Ramaḍān"}, "year": "1446"}}}


def _patch_httpx(monkeypatch, payload):
    _FakeClient.calls = []
    fake_httpx = types.SimpleNamespace(
        Client=lambda timeout=None: _FakeClient(payload_to_return=payload, timeout=timeout)
    )
    monkeypatch.setattr(hijri_svc, "httpx", fake_httpx, raising=True)


# ---------------------------------------------------------------------
# 1) HijriService (façade)
# ---------------------------------------------------------------------

def test_default_is_tabular():
    svc = HijriService()
    assert isinstance(svc._provider, TabularProvider)
    assert svc.today_hijri(DAY) == HijriDate(1446, 9, 1)


def test_settings_select_aladhan():
    svc = HijriService(Settings(hijri_provider="aladhan"))
    assert isinstance(svc._provider, AladhanProvider)
    assert svc.provider_name == "AladhanProvider"


def test_env_is_read_only_without_settings(monkeypatch):
    monkeypatch.setenv("HIJRI_PROVIDER", "Aladhan")
    assert isinstance(HijriService()._provider, AladhanProvider)
    # des Settings explicites l'emportent sur l'environnement
    assert isinstance(HijriService(Settings())._provider, TabularProvider)


@pytest.mark.parametrize(
    "overrides",
    [{"aladhan_api_url": ""}, {"aladhan_api_url": "  /"}, {"aladhan_timeout_sec": 0}, {"aladhan_timeout_sec": -2.0}],
)
def test_bad_aladhan_config_falls_back_to_tabular(overrides, caplog):
    """URL vide ou délai <= 0 -> le constructeur lève, la façade retombe sur le tabulaire."""
    svc = HijriService(Settings(hijri_provider="aladhan", **overrides))
    assert isinstance(svc._provider, TabularProvider)
    assert svc.today_hijri(DAY) == HijriDate(1446, 9, 1)
    assert "calcul tabulaire" in caplog.text


def test_injected_provider_is_used():
    class SpyProvider:
        def __init__(self):
            self.seen = None

        def to_hijri(self, day):
            self.seen = day
            return HijriDate(1, 1, 1)

    spy = SpyProvider()
    assert HijriService(provider=spy).today_hijri(DAY) == HijriDate(1, 1, 1)
    assert spy.seen == DAY


# ---------------------------------------------------------------------
# 2) AladhanProvider (avec mock httpx, SANS réseau)
# ---------------------------------------------------------------------

def test_aladhan_parses_response(monkeypatch):
    _patch_httpx(monkeypatch, ALADHAN_OK)
    settings = Settings(hijri_provider="aladhan", aladhan_api_url="https://example.test/v1/", aladhan_timeout_sec=3)

    svc = HijriService(settings)
    assert svc.today_hijri(dt.date(2025, 3, 1)) == HijriDate(1446, 9, 1)
    assert _FakeClient.calls == [("https://example.test/v1/gToH/01-03-2025", 3.0)]


def test_aladhan_unexpected_format_raises_value_error(monkeypatch):
    _patch_httpx(monkeypatch, {"code": 200, "data": {"gregorian": {}}})
    provider = AladhanProvider(api_url="https://example.test/v1")
    with pytest.raises(ValueError):
        provider.to_hijri(DAY)


def test_aladhan_propagates_network_errors(monkeypatch):
    class _FailingClient:
        def __enter__(self): return self
        def __exit__(self, *args): return False
        def get(self, *args, **kwargs):
            raise RuntimeError("échec réseau simulé")

    monkeypatch.setattr(hijri_svc, "httpx", types.SimpleNamespace(Client=lambda timeout=None: _FailingClient()), raising=True)
    provider = AladhanProvider()
    with pytest.raises(RuntimeError):
        provider.to_hijri(DAY)


def test_aladhan_empty_url_raises():
    with pytest.raises(RuntimeError):
        AladhanProvider(api_url="   ")


def test_aladhan_non_positive_timeout_raises():
    with pytest.raises(ValueError):
        AladhanProvider(timeout_sec=0)
