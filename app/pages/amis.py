# app/pages/1_Amis.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (page streamlit dans app/pages) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -------------------------------------------------------------

import pandas as pd
import streamlit as st

from app.config import Settings, utc_today
from app.context import build_context
from app.services.errors import EngineError
from app.services.weekly_aggregator import aggregate_week

@st.cache_resource
def get_ctx():
    return build_context(Settings.from_env())

ctx = get_ctx()
today = utc_today()

st.set_page_config(page_title="Amis — Muhasaba", page_icon="🤝", layout="centered")
st.title("🤝 Amis")

# Récup user courant (depuis main) ou fallback
if "user_id" not in st.session_state or "user_email" not in st.session_state:
    u = ctx.users.get_or_create(ctx.settings.default_email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email

user_id = st.session_state["user_id"]
user_email = st.session_state["user_email"]

st.caption(f"Connecté en tant que **{user_email}** (id={user_id})")


def _email_of(uid: int) -> str:
    u = ctx.users.get(uid)
    return u.email if u else f"#{uid}"


def _run(action, ok_message: str):
    try:
        action()
        st.success(ok_message)
        st.rerun()
    except EngineError as e:
        st.error(str(e))


# --- Envoyer une demande ---
with st.form("send_request"):
    target_email = st.text_input("Email de l'ami")
    if st.form_submit_button("Envoyer la demande"):
        target = ctx.users.get_by_email(target_email) if target_email.strip() else None
        if target is None:
            st.error("Utilisateur introuvable")
        else:
            _run(lambda: ctx.friendships.send_request(user_id, target.id), "Demande envoyée")

# --- Demandes reçues ---
st.subheader("📥 Demandes reçues")
received = ctx.friendships.list_received(user_id)
if not received:
    st.write("Aucune demande en attente.")
for rel in received:
    colA, colB, colC = st.columns([3, 1, 1])
    colA.write(f"**{_email_of(rel.requester_id)}**")
    if colB.button("Accepter", key=f"acc_{rel.id}"):
        _run(lambda: ctx.friendships.accept(user_id, rel.id), "Demande acceptée")
    if colC.button("Refuser", key=f"rej_{rel.id}"):
        _run(lambda: ctx.friendships.reject(user_id, rel.id), "Demande refusée")

# --- Demandes envoyées ---
st.subheader("📤 Demandes envoyées")
sent = ctx.friendships.list_sent(user_id)
if not sent:
    st.write("Aucune demande envoyée.")
for rel in sent:
    colA, colB = st.columns([4, 1])
    colA.write(f"→ {_email_of(rel.receiver_id)}")
    if colB.button("Annuler", key=f"cancel_{rel.id}"):
        _run(lambda: ctx.friendships.delete(user_id, rel.id), "Demande annulée")

# --- Demandes refusées ---
st.subheader("🚫 Demandes refusées")
rejected = ctx.friendships.list_rejected(user_id)
if not rejected:
    st.write("Aucune demande refusée.")
for rel in rejected:
    colA, colB = st.columns([4, 1])
    if rel.requester_id == user_id:
        colA.write(f"→ {_email_of(rel.receiver_id)} (refusée par le destinataire)")
    else:
        colA.write(f"← {_email_of(rel.requester_id)} (refusée par vous)")
    if colB.button("Supprimer", key=f"drop_{rel.id}"):
        _run(lambda: ctx.friendships.delete(user_id, rel.id), "Demande supprimée")

# --- Amis (progression en lecture seule) ---
st.subheader("👥 Mes amis")
friends = ctx.friendships.list_friends(user_id)
if not friends:
    st.info("Pas encore d'amis.")

rows = []
for f in friends:
    for p in ctx.profiles.list_for_user(f.friend_user_id):
        stats = aggregate_week(p.id, today, ctx.records.window_getter(p.id, today))
        rows.append({
            "ami": _email_of(f.friend_user_id),
            "profil": p.name,
            "complétion_7j": f"{stats.completion_percent}%",
            "à_l'heure": f"{stats.on_time_percent}%",
            "istighfar_7j": stats.counter_sum,
        })
if rows:
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

for f in friends:
    colA, colB = st.columns([4, 1])
    colA.write(_email_of(f.friend_user_id))
    if colB.button("Retirer", key=f"unfriend_{f.relationship_id}"):
        _run(lambda: ctx.friendships.delete(user_id, f.relationship_id), "Ami retiré")
