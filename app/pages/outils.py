# app/pages/3_Outils.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (pages Streamlit) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# ------------------------------------------------

import httpx
import pandas as pd
import streamlit as st

from app.config import Settings, utc_today
from app.context import build_context
from app.services.errors import EngineError
from app.services.islamic_calc import gregorian_to_hijri, upcoming_events

@st.cache_resource
def get_ctx():
    return build_context(Settings.from_env())

ctx = get_ctx()
today = utc_today()

st.set_page_config(page_title="Outils — Muhasaba", page_icon="🧭", layout="centered")
st.title("🧭 Outils")

if "user_id" not in st.session_state or "user_email" not in st.session_state:
    u = ctx.users.get_or_create(ctx.settings.default_email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email

user_id = st.session_state["user_id"]
st.caption(f"Connecté en tant que **{st.session_state['user_email']}** (id={user_id})")

# --- Calendrier hégirien ---
st.subheader("🌙 Calendrier hégirien")
try:
    h = ctx.hijri.today_hijri(today)
except (httpx.HTTPError, ValueError) as e:
    # API distante indisponible : calcul local
    st.warning(f"Service de date indisponible ({e}), calcul tabulaire")
    h = gregorian_to_hijri(today)
st.write(f"**{h.day} {h.month_name} {h.year}** ({today.isoformat()})")

events = upcoming_events(today, limit=5)
df = pd.DataFrame([{
    "date": ev.date.isoformat(),
    "hégirien": f"{ev.hijri.day} {ev.hijri.month_name} {ev.hijri.year}",
    "événement": ev.event.name,
    "type": ev.event.kind,
} for ev in events])
st.dataframe(df, use_container_width=True, hide_index=True)

# --- Qibla ---
st.subheader("🕋 Direction de la Qibla")
col1, col2 = st.columns(2)
with col1:
    lat = st.number_input("Latitude", min_value=-90.0, max_value=90.0, value=48.8566, format="%.4f")
with col2:
    lon = st.number_input("Longitude", min_value=-180.0, max_value=180.0, value=2.3522, format="%.4f")
if st.button("Calculer"):
    try:
        q = ctx.qibla.lookup(lat, lon)
        st.metric("Direction", f"{q.direction:.2f}°")
        st.metric("Distance", f"{q.distance:,.0f} km")
        st.caption("depuis le cache" if q.cached else "calculé")
    except EngineError as e:
        st.error(str(e))

# --- Horaires de prière ---
st.subheader("🕌 Horaires de prière")
st.caption("Méthode Umm al-Qura, pour la position ci-dessus.")
if st.button("Afficher les horaires", key="prayer_times"):
    try:
        pt = ctx.prayer_times.lookup(lat, lon, today)
        st.table(pd.DataFrame(pt.times.as_rows(), columns=["prière", "heure"]))
        st.caption(f"{pt.times.calculation_method} · " + ("depuis le cache" if pt.cached else "API Aladhan"))
    except EngineError as e:
        st.error(str(e))
    except (httpx.HTTPError, ValueError) as e:
        st.warning(f"Service d'horaires indisponible ({e})")

# --- Tâches du jour ---
st.subheader("✅ Tâches du jour")
with st.form("new_task", clear_on_submit=True):
    title = st.text_input("Nouvelle tâche")
    if st.form_submit_button("Ajouter"):
        try:
            ctx.tasks.create(user_id, title, today)
        except EngineError as e:
            st.error(str(e))

for t in ctx.tasks.list(user_id, date=today):
    colA, colB = st.columns([5, 1])
    done = colA.checkbox(t.title, value=t.is_done, key=f"task_{t.id}")
    if done != t.is_done:
        ctx.tasks.update(user_id, t.id, is_done=done)
        st.rerun()
    if colB.button("🗑️", key=f"del_{t.id}"):
        ctx.tasks.delete(user_id, t.id)
        st.rerun()
