import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from datetime import datetime

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from nova.advisor import AdvisoryClient
from nova.config import Settings
from nova.domain import Granularity, Theme, TransactionKind
from nova.events import BUDGET_EXCEEDED
from nova.filters import ALL, KIND_CHOICES, TransactionFilter, filter_transactions
from nova.icons import classify
from nova.logger import setup_logger
from nova.persistence import JsonFileStorage, load_state
from nova.services import BudgetService, ReportService
from nova.store import AppStore, attach_persistence
from nova.transforms import apply_draft, financial_stats, new_transaction, recent_activity

st.set_page_config(page_title="NovaFinance", layout="wide")

settings = Settings.from_env()
logger = setup_logger("nova.app", settings.log_level)

CURRENCY = "DA"
GRANULARITY_LABELS = {
    Granularity.WEEKLY: "Hebdo",
    Granularity.MONTHLY: "Mensuel",
    Granularity.QUARTERLY: "Trimestriel",
    Granularity.SEMESTERLY: "Semestriel",
    Granularity.YEARLY: "Annuel",
}
KIND_LABELS = {ALL: "Tous", "income": "Revenus", "expense": "Dépenses"}
PIE_COLORS = ["#0891b2", "#db2777", "#7c3aed", "#ea580c", "#16a34a", "#ca8a04", "#2563eb"]
FILTER_KEYS = ("flt_search", "flt_kind", "flt_category", "flt_start", "flt_end", "flt_min", "flt_max")
GREETING = (
    "Bonjour ! Je suis Nova, votre architecte financier IA. J'ai accès à vos données. "
    "Interrogez-moi sur vos habitudes de dépenses, comment économiser, ou demandez une prévision financière !"
)


def money(value: float) -> str:
    return f"{value:,.0f} {CURRENCY}".replace(",", " ")


def _clear_filters() -> None:
    for key in FILTER_KEYS:
        st.session_state.pop(key, None)


def _remember_alert(event, payload: dict) -> None:
    st.session_state.budget_alerts.append(payload["message"] + f" ({money(payload['spent'])} / {money(payload['limit'])})")


if "store" not in st.session_state:
    storage = JsonFileStorage(settings.ensure_data_dir())
    store = AppStore(load_state(storage))
    attach_persistence(store, storage)
    store.bus.subscribe(BUDGET_EXCEEDED, _remember_alert)
    st.session_state.store = store
    st.session_state.budget_alerts = []
    st.session_state.chat = [("assistant", GREETING)]
    st.session_state.draft = None
    logger.info("Session started with data dir %s", settings.data_dir)

store: AppStore = st.session_state.store
advisor = AdvisoryClient(settings.api_key, settings.model)
state = store.state
template = "plotly_dark" if state.theme is Theme.DARK else "plotly_white"
stats = financial_stats(state.transactions)


# --- sidebar

st.sidebar.markdown("## 💰 NovaFinance")
menu = st.sidebar.radio(
    "Menu",
    ["🏠 Tableau de Bord", "🧾 Transactions", "📑 Rapports", "🤖 Conseiller IA", "⚙️ Paramètres"],
)
if st.sidebar.button("🌙 Mode Sombre" if state.theme is Theme.LIGHT else "☀️ Mode Clair"):
    store.toggle_theme()
    st.rerun()
st.sidebar.metric("Solde Total", money(stats.balance))

if st.session_state.budget_alerts:
    for alert in st.session_state.budget_alerts[-3:]:
        st.sidebar.warning(f"⚠️ {alert}")
    if st.sidebar.button("Effacer les alertes"):
        st.session_state.budget_alerts = []
        st.rerun()


# --- add transaction

with st.sidebar.expander("➕ Nouvelle Transaction"):
    ai_text = st.text_input("Remplissage Rapide IA", placeholder="ex: 'Dépensé 2000 DA pour le déjeuner'")
    if st.button("✨ Analyser", disabled=not ai_text):
        with st.spinner("Analyse en cours..."):
            draft = asyncio.run(advisor.parse_transaction(ai_text, state.categories))
        if draft is None:
            st.error("Impossible d'analyser ce texte.")
        else:
            st.session_state.draft = apply_draft(draft, state.categories)

    draft = st.session_state.draft
    kinds = [TransactionKind.EXPENSE, TransactionKind.INCOME]
    kind = st.radio(
        "Type", kinds,
        index=kinds.index(draft.kind) if draft else 0,
        format_func=lambda k: "Dépense" if k is TransactionKind.EXPENSE else "Revenu",
        horizontal=True,
    )
    with st.form("add_transaction", clear_on_submit=True):
        amount = st.number_input("Montant (DA)", min_value=0.0, step=100.0, value=float(draft.amount) if draft else 0.0)
        description = st.text_input("Description", value=draft.description if draft else "")
        options = list(state.categories.names_for(kind))
        default_cat = options.index(draft.category) if draft and draft.category in options else 0
        category = st.selectbox("Catégorie", options, index=default_cat) if options else None
        submitted = st.form_submit_button("Ajouter")

    if submitted:
        if not amount or not description or not category:
            st.error("Montant, description et catégorie sont requis.")
        else:
            try:
                store.add_transaction(new_transaction(amount, description, category, kind))
            except ValueError as e:
                st.error(str(e))
            else:
                st.session_state.draft = None
                st.success("✅ Transaction ajoutée !")
                st.rerun()


# --- views

if menu == "🏠 Tableau de Bord":
    st.title("Tableau de Bord")
    st.caption("Bon retour, voici votre aperçu financier.")

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Recettes Totales", money(stats.total_income))
    with k2:
        st.metric("Dépenses Totales", money(stats.total_expense))
    with k3:
        st.metric("Solde Net", money(stats.balance))

    report = ReportService(settings.locale).build(state.transactions, Granularity.MONTHLY)
    chart_col, recent_col = st.columns([2, 1])
    with chart_col:
        st.subheader("Répartition des Dépenses")
        if report.breakdown:
            df_cat = pd.DataFrame([{"Catégorie": c.category, "Montant": c.amount} for c in report.breakdown])
            fig = px.bar(df_cat, x="Catégorie", y="Montant", template=template, color_discrete_sequence=["#8b5cf6"])
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("Aucune donnée de dépense")

    with recent_col:
        st.subheader("Activité Récente")
        recent = recent_activity(state.transactions)
        if not recent:
            st.info("Aucune transaction pour le moment.")
        for t in recent:
            sign = "+" if t.is_income else "-"
            st.markdown(f"**{t.description}** · {t.date:%d/%m/%Y}  \n{sign}{money(t.amount)}")

    st.subheader("📊 Suivi Budgétaire (Mensuel)")
    budget_report = BudgetService().monthly_report(state.transactions, state.budgets, datetime.now())
    cols = st.columns(3)
    for i, item in enumerate(budget_report.entries):
        with cols[i % 3]:
            if item.is_limited:
                badge = f"🔴 {item.ratio:.0%}" if item.is_over else f"🟢 {item.ratio:.0%}"
            else:
                badge = "Pas de limite"
            st.markdown(f"**{item.category}** — {badge}")
            st.caption(f"Dépensé : {money(item.spent)}")
            st.progress(item.percent / 100)
            new_limit = st.number_input(
                "Budget Max", min_value=0.0, step=500.0, value=float(item.limit),
                key=f"budget_{item.category}",
            )
            if new_limit != item.limit:
                store.update_budget(item.category, new_limit)
                st.rerun()

    missing = [c for c in state.categories.expense if c not in state.budgets]
    if missing:
        with st.expander("Définir un budget"):
            cat = st.selectbox("Catégorie", missing, key="new_budget_cat")
            limit = st.number_input("Limite mensuelle", min_value=0.0, step=500.0, key="new_budget_limit")
            if st.button("Enregistrer", key="btn_new_budget") and limit > 0:
                store.update_budget(cat, limit)
                st.rerun()

elif menu == "🧾 Transactions":
    st.title("Transactions")
    st.caption("Gérez et suivez vos revenus et dépenses.")

    search = st.text_input("🔍 Rechercher une description", key="flt_search")
    with st.expander("Filtres"):
        c1, c2, c3 = st.columns(3)
        with c1:
            kind_filter = st.selectbox("Type", KIND_CHOICES, format_func=KIND_LABELS.get, key="flt_kind")
            category_filter = st.selectbox("Catégorie", [ALL] + state.categories.all_names(),
                                           format_func=lambda c: "Toutes" if c == ALL else c, key="flt_category")
        with c2:
            start = st.date_input("Du", value=None, key="flt_start")
            end = st.date_input("Au", value=None, key="flt_end")
        with c3:
            min_amount = st.number_input("Montant min", min_value=0.0, value=None, key="flt_min")
            max_amount = st.number_input("Montant max", min_value=0.0, value=None, key="flt_max")
        st.button("✖ Réinitialiser les filtres", on_click=_clear_filters)

    flt = TransactionFilter(
        search=search, kind=kind_filter, category=category_filter,
        start=start, end=end, min_amount=min_amount, max_amount=max_amount,
    )
    if flt.active_count():
        st.caption(f"{flt.active_count()} filtre(s) actif(s)")

    rows = filter_transactions(state.transactions, flt)
    if not rows:
        st.info("Aucune transaction ne correspond aux filtres.")
    for t in rows:
        c1, c2, c3, c4 = st.columns([4, 2, 2, 1])
        c1.markdown(f"**{t.description}**  \n`{classify(t.category)}` {t.category}")
        c2.write(f"{t.date:%d/%m/%Y}")
        c3.write(("+" if t.is_income else "-") + money(t.amount))
        if c4.button("🗑", key=f"del_{t.id}"):
            store.delete_transaction(t.id)
            st.rerun()

    if rows:
        export = pd.DataFrame([
            {"date": t.date.isoformat(), "type": t.kind.value, "amount": t.amount,
             "category": t.category, "description": t.description}
            for t in rows
        ])
        st.download_button("⬇ Télécharger CSV", export.to_csv(index=False), file_name="transactions.csv")

elif menu == "📑 Rapports":
    st.title("Rapports Financiers")
    st.caption("Analysez vos tendances sur différentes périodes.")

    granularity = st.radio(
        "Période", list(Granularity), index=1,
        format_func=GRANULARITY_LABELS.get, horizontal=True,
    )
    report = ReportService(settings.locale).build(state.transactions, granularity)
    df = pd.DataFrame(
        [{"Période": p.label, "Recettes": p.income, "Dépenses": p.expense, "Solde": p.balance}
         for p in report.series],
        columns=["Période", "Recettes", "Dépenses", "Solde"],
    )

    st.subheader("Évolution Recettes vs Dépenses")
    fig_trend = go.Figure()
    fig_trend.add_trace(go.Scatter(x=df["Période"], y=df["Recettes"], fill="tozeroy", name="Recettes", line_color="#0891b2"))
    fig_trend.add_trace(go.Scatter(x=df["Période"], y=df["Dépenses"], fill="tozeroy", name="Dépenses", line_color="#db2777"))
    fig_trend.update_layout(template=template, margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_trend, use_container_width=True)

    bal_col, pie_col = st.columns(2)
    with bal_col:
        st.subheader("Solde Net par Période")
        colors = np.where(df["Solde"] >= 0, "#10b981", "#ef4444")
        fig_bal = go.Figure(go.Bar(x=df["Période"], y=df["Solde"], marker_color=colors))
        fig_bal.update_layout(template=template, margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_bal, use_container_width=True)
    with pie_col:
        st.subheader("Répartition des Dépenses")
        if report.breakdown:
            fig_pie = px.pie(
                names=[c.category for c in report.breakdown],
                values=[c.amount for c in report.breakdown],
                hole=0.5, template=template, color_discrete_sequence=PIE_COLORS,
            )
            st.plotly_chart(fig_pie, use_container_width=True)
        else:
            st.info("Aucune dépense enregistrée")

    st.subheader("Détails de la Période")
    st.dataframe(df.iloc[::-1].reset_index(drop=True), use_container_width=True)
    sign = "+" if report.totals.balance > 0 else ""
    st.markdown(f"**Total Visible :** {sign}{money(report.totals.balance)}")

elif menu == "🤖 Conseiller IA":
    st.title("Conseiller Financier")
    st.caption("Propulsé par Gemini. Demandez n'importe quoi.")
    if not settings.has_api_key:
        st.warning("Aucune clé API configurée (GEMINI_API_KEY).")

    for role, text in st.session_state.chat:
        with st.chat_message(role):
            st.markdown(text)

    question = st.chat_input("Posez une question sur vos finances...")
    if question:
        st.session_state.chat.append(("user", question))
        with st.spinner("Nova réfléchit..."):
            answer = asyncio.run(advisor.get_advice(state.transactions, question))
        st.session_state.chat.append(("assistant", answer))
        st.rerun()

elif menu == "⚙️ Paramètres":
    st.title("Paramètres")
    st.caption("Gérez vos préférences et catégories.")

    for kind, title in ((TransactionKind.INCOME, "Catégories de Revenus"), (TransactionKind.EXPENSE, "Catégories de Dépenses")):
        st.subheader(title)
        for name in state.categories.names_for(kind):
            c1, c2 = st.columns([5, 1])
            c1.write(f"`{classify(name)}` {name}")
            if c2.button("🗑", key=f"delcat_{kind.value}_{name}"):
                store.delete_category(kind, name)
                st.rerun()
        with st.form(f"add_cat_{kind.value}", clear_on_submit=True):
            name = st.text_input("Nouvelle catégorie")
            if st.form_submit_button("Ajouter") and name.strip():
                store.add_category(kind, name)
                st.rerun()
