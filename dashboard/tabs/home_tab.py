import streamlit as st

from dashboard.data.loaders import load_quote
from dashboard.ui import navigate

FEATURES = [
    ("✅ Habit Tracking", "Build streaks, set reminders, and track your daily habits with ease."),
    ("📖 Daily Journal", "Reflect on your day, capture your thoughts, and maintain a personal diary."),
    ("☑️ Task Management", "Organize your to-dos, set priorities, and track completion status."),
    ("📊 Progress Insights", "Visualize your progress, identify patterns, and celebrate achievements."),
]


def render_quote_card():
    quote = load_quote()
    st.markdown(
        (
            "<div class='card'>"
            f"<div class='quote-text'>“{quote['content']}”</div>"
            f"<div class='small-label'>— {quote['author']}</div>"
            "</div>"
        ),
        unsafe_allow_html=True,
    )


def render_home_tab(ctx):
    hero_cols = st.columns([1.2, 1])
    with hero_cols[0]:
        st.title("Track habits, journal thoughts, achieve goals")
        st.markdown(
            "Journalix helps you build better habits, maintain streaks, "
            "and reflect on your progress with daily journaling."
        )
        action_cols = st.columns(2)
        with action_cols[0]:
            if ctx.auth_session.is_authenticated:
                if st.button("Go to dashboard", key="home.dashboard", type="primary", use_container_width=True):
                    navigate("dashboard")
            elif st.button("Get Started", key="home.signup", type="primary", use_container_width=True):
                navigate("signup")
        with action_cols[1]:
            if not ctx.auth_session.is_authenticated and st.button(
                "Sign in", key="home.login", use_container_width=True
            ):
                navigate("login")
    with hero_cols[1]:
        render_quote_card()

    st.subheader("Everything You Need")
    st.caption("A complete system to track habits, journal your thoughts, and visualize your progress.")
    feature_cols = st.columns(len(FEATURES))
    for col, (title, description) in zip(feature_cols, FEATURES):
        with col:
            st.markdown(
                f"<div class='card'><div class='section-title'>{title}</div>"
                f"<div class='small-label'>{description}</div></div>",
                unsafe_allow_html=True,
            )
