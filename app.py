# app.py
# Bucket List Advisor - Streamlit front end
# Run with: streamlit run app.py

import logging

import pandas as pd
import plotly.express as px
import streamlit as st

from bucketlist_advisor.api_client import ApiClient
from bucketlist_advisor.budget_visualizer import BudgetVisualizer
from bucketlist_advisor.config import CATEGORIES, MODES, GENDERS, AGE_MIN, AGE_MAX, DEFAULT_MODE
from bucketlist_advisor.session_machine import SessionMachine, SessionState
from bucketlist_advisor.utils import format_money, category_name, mode_name

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

# ============================================================
# PAGE CONFIG
# ============================================================
st.set_page_config(page_title="Bucket List Advisor", page_icon="🪂", layout="wide")
st.title("🪂 Bucket List Advisor")

# ============================================================
# SESSION STATE (the machine is the single source of truth)
# ============================================================
if "machine" not in st.session_state:
    st.session_state["machine"] = SessionMachine(ApiClient())
    st.session_state["machine"].start()

machine: SessionMachine = st.session_state["machine"]
ctx = machine.ctx


def show_message():
    if ctx.message:
        st.error(ctx.message)


# ------------------------------------------------------------
# API KEY GATE
# ------------------------------------------------------------
def show_api_key_page():
    st.subheader("🔑 OpenAI API key required")
    st.write("Suggestions are generated with your own key. It is stored on the backend only.")
    show_message()

    with st.form("api_key"):
        key = st.text_input("API key", type="password", placeholder="sk-...")
        if st.form_submit_button("Save key"):
            with st.spinner("Validating key..."):
                machine.submit_api_key(key)
            st.rerun()


# ------------------------------------------------------------
# ONBOARDING
# ------------------------------------------------------------
def show_onboarding():
    st.subheader("👤 Tell us about yourself")
    show_message()

    with st.form("onboarding"):
        gender = st.selectbox("Gender", GENDERS, index=GENDERS.index("UNSPECIFIED"))
        age = st.number_input("Age", min_value=AGE_MIN, max_value=AGE_MAX, value=30, step=1)
        capital = st.number_input("Budget (capital)", min_value=0, value=50000, step=1000)

        mode = None
        if not machine.use_categories:
            mode = st.radio(
                "Suggestion style",
                list(MODES.keys()),
                format_func=mode_name,
                index=list(MODES.keys()).index(DEFAULT_MODE),
            )

        if st.form_submit_button("Create profile"):
            with st.spinner("Creating your profile..."):
                machine.submit_profile(gender, age, capital, mode)
            st.rerun()


# ------------------------------------------------------------
# CATEGORY & MODE SELECTION
# ------------------------------------------------------------
def show_category_selection():
    st.subheader("🧭 What are you dreaming about?")
    if ctx.profile and ctx.profile.summary:
        st.info(ctx.profile.summary)
    show_message()

    mode = st.radio(
        "Suggestion style",
        list(MODES.keys()),
        format_func=lambda m: f"{mode_name(m)}: {MODES[m]['description']}",
        horizontal=True,
    )

    cols = st.columns(4)
    for i, (key, cfg) in enumerate(CATEGORIES.items()):
        with cols[i % 4]:
            st.markdown(f"**{cfg['display_name']}**")
            st.caption(cfg["description"])
            if st.button("Choose", key=f"cat_{key}"):
                with st.spinner("Finding your first suggestion..."):
                    machine.select_category(key, mode)
                st.rerun()

    if st.button("Start over"):
        machine.reset()
        st.rerun()


# ------------------------------------------------------------
# HISTORY PANELS
# ------------------------------------------------------------
def show_bucket_list():
    history = machine.history
    budget = history.budget

    st.subheader("🏆 Your Bucket List")
    if "accepted" in history.errors:
        st.error(history.errors["accepted"])
        return

    if budget is not None:
        st.progress(float(budget.percent_used) / 100)
        used = f"{float(budget.percent_raw):.1f}% of {format_money(budget.capital)} budget used"
        if budget.is_over_budget:
            st.markdown(f":red[**{used} - Over Budget!**]")
        else:
            st.caption(used)

    if not history.accepted:
        st.caption("Accept suggestions to build your bucket list!")
        return

    for s in history.accepted:
        st.markdown(f"- **{s.title}** · {format_money(s.total_cost, s.currency)}")

    with st.expander("📊 Budget charts"):
        df = pd.DataFrame(
            {"Experience": [s.title for s in history.accepted],
             "Cost": [float(s.total_cost) for s in history.accepted]}
        )
        fig = px.pie(df, values="Cost", names="Experience", hole=0.4)
        fig.update_traces(textposition="inside", textinfo="percent+label")
        fig.update_layout(showlegend=False, margin=dict(t=20, b=0, l=0, r=0))
        st.plotly_chart(fig, use_container_width=True)

        viz = BudgetVisualizer(budget, history.accepted)
        st.pyplot(viz.plot_usage_bar())
        st.pyplot(viz.plot_cost_pie())
        st.pyplot(viz.plot_cumulative())


def show_rejected():
    history = machine.history

    st.subheader("🙅 Rejected")
    if "rejected" in history.errors:
        st.error(history.errors["rejected"])
        return

    if not history.rejected:
        st.caption("Nothing rejected yet.")
        return

    for r in history.rejected:
        tag = " (custom)" if r.is_custom_reason else ""
        st.markdown(f"- **{r.suggestion.title}**  \n  _{r.reason or 'No reason given'}{tag}_")


# ------------------------------------------------------------
# SUGGESTION REVIEW
# ------------------------------------------------------------
def show_suggestion():
    s = ctx.current

    st.subheader(s.title)
    st.caption(f"{category_name(s.category)} · {mode_name(ctx.mode)}")
    st.write(s.description)

    st.dataframe(
        {
            "Item": [li.name for li in s.price.line_items],
            "Details": [li.description for li in s.price.line_items],
            "Cost": [format_money(li.amount, s.currency) for li in s.price.line_items],
        },
        hide_index=True,
    )
    st.markdown(f"**Total: {format_money(s.total_cost, s.currency)}**")

    if ctx.profile:
        share = float(s.total_cost) / float(ctx.profile.capital) * 100 if ctx.profile.capital else 0
        st.caption(f"That is {share:.1f}% of your {format_money(ctx.profile.capital, s.currency)} budget.")

    show_message()

    if st.button("✅ Add to bucket list", type="primary", disabled=ctx.busy):
        with st.spinner("Saving..."):
            machine.accept()
        st.rerun()

    with st.expander("❌ Not for me"):
        reason = st.radio("Why?", s.reason_menu() + ["Other..."], key=f"reason_{s.id}")
        custom = ""
        if reason == "Other...":
            custom = st.text_input("Tell us why", key=f"custom_{s.id}")

        if st.button("Reject", disabled=ctx.busy):
            with st.spinner("Saving..."):
                if reason == "Other...":
                    machine.reject(custom, is_custom_reason=True)
                else:
                    machine.reject(reason, is_custom_reason=False)
            st.rerun()

    c1, c2 = st.columns(2)
    if machine.use_categories and c1.button("Change category"):
        machine.change_selection()
        st.rerun()
    if c2.button("Start over"):
        machine.reset()
        st.rerun()


def show_review_layout():
    left, center, right = st.columns([1, 2, 1])
    with left:
        show_rejected()
    with center:
        show_suggestion()
    with right:
        show_bucket_list()


# ------------------------------------------------------------
# ERROR
# ------------------------------------------------------------
def show_error():
    st.error(ctx.message or "Something went wrong")

    c1, c2 = st.columns(2)
    if ctx.exhausted and machine.use_categories and c1.button("Pick another category"):
        machine.change_selection()
        st.rerun()
    if c2.button("Try again"):
        machine.reset()
        st.rerun()


# ============================================================
# SIDEBAR
# ============================================================
with st.sidebar:
    st.markdown("### Session")
    if ctx.profile:
        st.write(f"Budget: {format_money(ctx.profile.capital)}")
        stats = machine.history.stats()
        st.write(f"Accepted: {stats['accepted']} · Rejected: {stats['rejected']}")
    if ctx.state != SessionState.API_KEY and st.button("Forget API key"):
        machine.clear_api_key()
        st.rerun()


# ============================================================
# ROUTER
# ============================================================
if ctx.state == SessionState.API_KEY:
    show_api_key_page()
elif ctx.state == SessionState.ONBOARDING:
    show_onboarding()
elif ctx.state == SessionState.CATEGORY_SELECTION:
    show_category_selection()
elif ctx.state == SessionState.SUGGESTIONS and ctx.current is not None:
    show_review_layout()
elif ctx.state == SessionState.LOADING:
    st.info(ctx.loading_message or "Generating personalized suggestions...")
else:
    show_error()


# End of file
