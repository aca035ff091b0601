# app/pages/2_Historique.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (page streamlit dans app/pages) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -------------------------------------------------------------

import datetime as dt
from dataclasses import asdict
import io
import pandas as pd
import streamlit as st
import altair as alt

from app.config import Settings, utc_today
from app.context import build_context
from app.services.entries import TRACKED_FLAGS
from app.services.weekly_aggregator import DaySummary, activity_score, getter_from, weekly_trends

@st.cache_resource
def get_ctx():
    return build_context(Settings.from_env())

ctx = get_ctx()

st.set_page_config(page_title="Historique — Muhasaba", page_icon="📜", layout="wide")
st.title("📜 Historique")

# User courant ou fallback
if "user_id" not in st.session_state or "user_email" not in st.session_state:
    u = ctx.users.get_or_create(ctx.settings.default_email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email

user_id = st.session_state["user_id"]
user_email = st.session_state["user_email"]
st.caption(f"Connecté en tant que **{user_email}** (id={user_id})")

profiles = ctx.profiles.list_for_user(user_id)
if not profiles:
    st.info("Aucun profil : commence par la page principale.")
    st.stop()
labels = {p.id: p.name for p in profiles}

# --- Filtres ---
st.sidebar.header("Filtres")
today = utc_today()
default_start = today - dt.timedelta(days=30)

profile_id = st.sidebar.selectbox("Profil", options=list(labels), format_func=lambda pid: labels[pid])
start = st.sidebar.date_input("Du", value=default_start)
end = st.sidebar.date_input("Au", value=today)
asc = st.sidebar.toggle("Ordre chronologique (ascendant)", value=True)

if start > end:
    st.warning("Vérifie les bornes : la date de début doit être ≤ à la date de fin.")
    st.stop()

# Chargement des données filtrées
rows = ctx.records.get_range(profile_id, start=start, end=end, asc=asc)
dhikr_totals = ctx.dhikr.totals_by_day(profile_id, start, end)
pages = ctx.quran.pages_by_day(profile_id, start, end)

if not rows:
    st.info("Aucune donnée dans cette période.")
    st.stop()

df = pd.DataFrame([{
    "date": r.day,
    **{flag: getattr(r, flag) for flag in TRACKED_FLAGS},
    "istighfar": r.istighfar_count,
    "complétion_%": round(r.completed_flags() / len(TRACKED_FLAGS) * 100),
    "dhikr": dhikr_totals.get(r.day, 0),
    "pages": pages.get(r.day, 0),
    "activité": activity_score(r, dhikr_totals.get(r.day, 0), pages.get(r.day, 0)),
    "notes": r.notes,
} for r in rows]).sort_values("date")

# KPIs
col1, col2, col3 = st.columns(3)
with col1:
    st.metric("Nb. jours", len(df))
with col2:
    st.metric("Complétion moyenne", f"{df['complétion_%'].mean():.0f}%")
with col3:
    st.metric("Istighfar total", int(df["istighfar"].sum()))

df_day = df.copy()
df_day["day"] = pd.to_datetime(df_day["date"]).dt.normalize()

completion_chart = (
    alt.Chart(df_day)
    .mark_line(point=True)
    .encode(
        x=alt.X("yearmonthdate(day):T",
                title="Jour",
                axis=alt.Axis(format="%Y-%m-%d", labelAngle=-45)),
        y=alt.Y("complétion_%:Q", title="Complétion (%)", scale=alt.Scale(domain=[0, 100])),
        tooltip=[alt.Tooltip("day:T", title="Jour", format="%Y-%m-%d"),
                 alt.Tooltip("complétion_%:Q"), alt.Tooltip("istighfar:Q")]
    )
    .properties(height=280)
)

st.subheader("Complétion (par jour)")
st.altair_chart(completion_chart, use_container_width=True)

heatmap = (
    alt.Chart(df_day)
    .mark_rect()
    .encode(
        x=alt.X("week(day):O", title="Semaine"),
        y=alt.Y("day(day):O", title="Jour"),
        color=alt.Color("activité:Q", scale=alt.Scale(domain=[0, 10], scheme="greens"), title="Activité"),
        tooltip=[alt.Tooltip("day:T", format="%Y-%m-%d"), "activité:Q", "dhikr:Q", "pages:Q"],
    )
    .properties(height=220)
)

st.subheader("Carte d'activité (0..10)")
st.altair_chart(heatmap, use_container_width=True)

# Tendances hebdomadaires (blocs de 7 jours consécutifs)
getter = getter_from(rows)
summaries = []
d = start
while d <= end:
    rec = getter(d)
    summaries.append(DaySummary(
        day=d,
        prayers=rec.prayers_completed() if rec else 0,
        dhikr_total=dhikr_totals.get(d, 0),
        pages_read=pages.get(d, 0),
    ))
    d += dt.timedelta(days=1)

trends = pd.DataFrame([asdict(t) for t in weekly_trends(summaries)])
st.subheader("Tendances par semaine")
st.dataframe(trends, use_container_width=True, hide_index=True)

# Export CSV
csv_buf = io.StringIO()
df.to_csv(csv_buf, index=False)
st.download_button("⬇️ Export CSV", data=csv_buf.getvalue(), file_name="historique_muhasaba.csv", mime="text/csv")
