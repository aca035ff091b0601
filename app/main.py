# app/main.py
# -*- coding: utf-8 -*-
# --- bootstrap import path (run as script via streamlit) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -----------------------------------------------------------
import pandas as pd
import streamlit as st

from app.config import Settings, configure_logging, utc_now
from app.context import build_context
from app.services.entries import TIMESTAMP_FIELDS, TRACKED_FLAGS, DHIKR_TYPES, QuranProgress
from app.services.errors import EngineError
from app.services.tier_classifier import ISTIGHFAR_TIERS, DHIKR_TOTAL_TIERS, classify, tier_progress
from app.services.weekly_aggregator import MAX_STREAK_LOOKBACK, aggregate_week, current_streak

FLAG_LABELS = {
    "fajr": "Fajr", "dhuhr": "Dhuhr", "asr": "Asr", "maghrib": "Maghrib", "isha": "Isha",
    "tahajjud": "Tahajjud",
    "morning_dhikr": "Adhkar du matin", "evening_dhikr": "Adhkar du soir",
    "before_sleep_dhikr": "Adhkar avant de dormir",
    "yaseen_after_fajr": "Yaseen après Fajr", "mulk_before_sleep": "Al-Mulk avant de dormir",
}

# ---------------------------------------------------------------------
# Bootstrapping
# ---------------------------------------------------------------------
@st.cache_resource
def get_ctx():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return build_context(settings)

ctx = get_ctx()
now = utc_now()          # résolu une fois par exécution de page
today = now.date()

st.set_page_config(page_title="Muhasaba", page_icon="🕌", layout="centered")

# ---------------------------------------------------------------------
# Sidebar – utilisateur et profil
# ---------------------------------------------------------------------
st.sidebar.title("👤 Utilisateur")
email = st.sidebar.text_input("Email", value=ctx.settings.default_email, help="Créé s'il n'existe pas")

if st.sidebar.button("Charger/Créer l'utilisateur"):
    u = ctx.users.get_or_create(email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email
    st.session_state.pop("profile_id", None)
    st.sidebar.success(f"OK : {u.email} (id={u.id})")

# état par défaut au premier chargement
if "user_id" not in st.session_state:
    u = ctx.users.get_or_create(ctx.settings.default_email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email

user_id = st.session_state["user_id"]
user_email = st.session_state["user_email"]

profiles = ctx.profiles.list_for_user(user_id) or [ctx.profiles.get_or_create_default(user_id, user_email.split("@")[0])]
labels = {p.id: p.name for p in profiles}
profile_id = st.sidebar.selectbox("Profil", options=list(labels), format_func=lambda pid: labels[pid])

with st.sidebar.expander("➕ Ajouter un membre"):
    new_name = st.text_input("Nom", key="new_profile_name")
    new_color = st.color_picker("Couleur", value="#3b82f6")
    if st.button("Ajouter"):
        try:
            ctx.profiles.create(user_id, new_name, color=new_color)
            st.rerun()
        except EngineError as e:
            st.error(str(e))

st.caption(f"Connecté en tant que **{user_email}** (id={user_id})")

# ---------------------------------------------------------------------
# Formulaire de saisie quotidienne
# ---------------------------------------------------------------------
st.title("🕌 Muhasaba — Suivi quotidien")

date = st.date_input("Date", value=today)
existing = ctx.records.get(profile_id, date)

with st.form("daily_form", clear_on_submit=False):
    col1, col2 = st.columns(2)
    values = {}
    for i, flag in enumerate(TRACKED_FLAGS):
        with (col1 if i % 2 == 0 else col2):
            values[flag] = st.checkbox(FLAG_LABELS[flag], value=bool(existing and getattr(existing, flag)))
    istighfar = st.number_input("Istighfar", min_value=0, step=1,
                                value=int(existing.istighfar_count) if existing else 0)
    notes = st.text_area("Notes", value=(existing.notes or "") if existing else "")
    submitted = st.form_submit_button("Enregistrer la journée")

if submitted:
    payload = dict(values, istighfar_count=int(istighfar), notes=notes or None, updated_by=user_email)
    # horodatage des cases nouvellement cochées
    for flag, column in TIMESTAMP_FIELDS.items():
        was_done = bool(existing and getattr(existing, flag))
        if values[flag] and not was_done:
            payload[column] = now.replace(tzinfo=None)
        elif not values[flag]:
            payload[column] = None
    try:
        rec = ctx.records.patch(profile_id, date, payload)
        st.success(f"✅ Enregistré pour {date.isoformat()} — {rec.completed_flags()}/11")
    except EngineError as e:
        st.error(f"Enregistrement impossible : {e}")

# ---------------------------------------------------------------------
# Statistiques de la semaine
# ---------------------------------------------------------------------
getter = ctx.records.window_getter(profile_id, date)
stats = aggregate_week(profile_id, date, getter)
# une seule requête pour toute la fenêtre de la série
streak = current_streak(date, ctx.records.window_getter(profile_id, date, days=MAX_STREAK_LOOKBACK))

st.subheader("📊 7 derniers jours")
c1, c2, c3, c4 = st.columns(4)
c1.metric("Complétion", f"{stats.completion_percent}%")
c2.metric("À l'heure (est.)", f"{stats.on_time_percent}%")
c3.metric("Istighfar", stats.counter_sum)
c4.metric("Série prières", f"{streak} j")

# ---------------------------------------------------------------------
# Dhikr
# ---------------------------------------------------------------------
st.subheader("📿 Dhikr du jour")
counts = ctx.dhikr.get(profile_id, date)
cols = st.columns(3)
for i, name in enumerate(DHIKR_TYPES):
    with cols[i % 3]:
        new_val = st.number_input(name.capitalize(), min_value=0, step=1, value=counts.get(name), key=f"dhikr_{name}")
        if new_val != counts.get(name):
            counts = ctx.dhikr.set_count(profile_id, date, name, int(new_val))
st.write(f"**Total :** {counts.total}")

# ---------------------------------------------------------------------
# Lecture du Coran
# ---------------------------------------------------------------------
st.subheader("📖 Lecture du Coran")
quran = ctx.quran.get(profile_id, date)
with st.form("quran_form", clear_on_submit=False):
    q1, q2, q3 = st.columns(3)
    pages = q1.number_input("Pages", min_value=0, step=1, value=quran.pages_read)
    verses = q2.number_input("Versets", min_value=0, step=1, value=quran.verses_read)
    minutes = q3.number_input("Minutes", min_value=0, step=1, value=quran.time_spent_minutes)
    quran_submitted = st.form_submit_button("Enregistrer la lecture")

if quran_submitted:
    try:
        quran = ctx.quran.upsert(profile_id, date, QuranProgress(
            pages_read=int(pages), verses_read=int(verses), time_spent_minutes=int(minutes),
        ))
        st.success(f"📖 {quran.pages_read} pages, {quran.verses_read} versets, {quran.time_spent_minutes} min")
    except EngineError as e:
        st.error(f"Enregistrement impossible : {e}")

# ---------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------
day_rec = ctx.records.get(profile_id, date)
istighfar_today = day_rec.istighfar_count if day_rec else 0
badge = classify(istighfar_today, ISTIGHFAR_TIERS)
dhikr_badge = classify(counts.total, DHIKR_TOTAL_TIERS)

st.subheader("🏆 Badges")
for result in (badge, dhikr_badge):
    if result.achieved:
        st.success(f"Badge du jour : **{result.label}**")
        if date == today:
            try:
                outcome = ctx.recorder.record_tier(profile_id, result, now)
                if outcome and outcome.recorded:
                    st.toast(f"Nouveau badge : {result.label}")
            except EngineError as e:
                st.warning(f"Badge non enregistré : {e}")
    else:
        st.info(f"Prochain badge : **{result.label}** — encore {result.remaining}")

df = pd.DataFrame([{
    "badge": p.tier.label,
    "seuil": p.tier.threshold,
    "obtenu": "🏆" if p.achieved else "🔓",
    "reste": p.remaining,
} for p in tier_progress(istighfar_today, ISTIGHFAR_TIERS)])
st.dataframe(df, use_container_width=True, hide_index=True)
