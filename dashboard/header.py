import streamlit as st

from dashboard.auth import sign_out
from dashboard.constants import APP_NAME, NAV_LABELS
from dashboard.data.loaders import reset_loaded_data
from dashboard.theme import toggle_theme
from dashboard.ui import navigate


def render_navbar(ctx):
    theme_meta = ctx.theme
    authed = ctx.auth_session.is_authenticated
    nav_items = list(NAV_LABELS.items()) if authed else []
    cols = st.columns([1.6] + [1] * len(nav_items) + [0.4, 0.9 if authed else 1.2])

    with cols[0]:
        st.markdown(f"<div class='brand'>📓 {APP_NAME}</div>", unsafe_allow_html=True)

    for idx, (page, label) in enumerate(nav_items, start=1):
        with cols[idx]:
            if st.button(
                label,
                key=f"nav.{page}",
                type="primary" if ctx.page == page else "secondary",
                use_container_width=True,
            ):
                navigate(page)

    with cols[-2]:
        st.button(
            theme_meta.get("toggle_icon", "🌙"),
            key="nav.theme_toggle",
            help=theme_meta.get("toggle_help"),
            on_click=toggle_theme,
        )

    with cols[-1]:
        if authed:
            if st.button("Sign out", key="nav.sign_out", use_container_width=True):
                sign_out(ctx.auth_session)
                reset_loaded_data()
                navigate("login")
        elif ctx.page not in ("login", "signup"):
            if st.button("Sign in", key="nav.sign_in", use_container_width=True):
                navigate("login")

    st.markdown("<hr style='margin: 6px 0 14px 0; border-color: var(--divider);'>", unsafe_allow_html=True)
