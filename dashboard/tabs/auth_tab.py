import logging

import streamlit as st

from dashboard import auth
from dashboard.data.api_client import ApiError
from dashboard.ui import navigate

logger = logging.getLogger(__name__)


def _render_oauth_button(key):
    if st.button("Continue with Google", key=key, use_container_width=True):
        try:
            url = auth.oauth_authorize_url("google")
        except ApiError as exc:
            st.error(f"Google sign-in is unavailable: {exc.detail}")
            return
        st.link_button("Open Google sign-in", url, use_container_width=True)


def render_login(ctx):
    _, center, _ = st.columns([1, 1.4, 1])
    with center:
        st.header("Welcome back!")
        st.caption("Sign in to continue your journey.")
        with st.form("auth.login_form"):
            email = st.text_input("Email", key="auth.login_email")
            password = st.text_input("Password", type="password", key="auth.login_password")
            submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)
        if submitted:
            try:
                auth.sign_in_with_password(ctx.auth_session, email, password)
            except ValueError as exc:
                st.warning(str(exc))
            except ApiError as exc:
                if exc.status_code == 403:
                    st.error("Please confirm your email address before signing in.")
                else:
                    st.error(exc.detail)
            else:
                st.toast("Welcome back!")
                navigate("dashboard")
        _render_oauth_button("auth.login_google")
        if st.button("Don't have an account? Sign up", key="auth.to_signup", type="tertiary"):
            navigate("signup")


def render_signup(ctx):
    _, center, _ = st.columns([1, 1.4, 1])
    with center:
        st.header("Join Journalix")
        st.caption("Create your free account.")
        with st.form("auth.signup_form"):
            name = st.text_input("Name", key="auth.signup_name")
            email = st.text_input("Email", key="auth.signup_email")
            password = st.text_input("Password", type="password", key="auth.signup_password")
            confirm = st.text_input("Confirm password", type="password", key="auth.signup_confirm")
            submitted = st.form_submit_button("Create account", type="primary", use_container_width=True)
        if submitted:
            try:
                payload = auth.sign_up_with_password(ctx.auth_session, name, email, password, confirm)
            except ValueError as exc:
                st.warning(str(exc))
            except ApiError as exc:
                st.error(exc.detail)
            else:
                if payload.get("confirmation_required"):
                    st.success("Check your email to confirm your account, then sign in.")
                else:
                    st.toast("Account created!")
                    navigate("dashboard")
        _render_oauth_button("auth.signup_google")
        if st.button("Already have an account? Sign in", key="auth.to_login", type="tertiary"):
            navigate("login")


def render_auth_callback(ctx):
    params = st.query_params
    provider = params.get("provider") or "google"
    if params.get("error"):
        st.error(f"Authentication Error: {params.get('error')}")
        if st.button("Back to sign in", key="auth.callback_back"):
            navigate("login")
        return
    with st.spinner("Completing authentication..."):
        try:
            auth.complete_oauth_sign_in(ctx.auth_session, provider, params.get("code"), params.get("state"))
        except (ValueError, ApiError) as exc:
            logger.info("OAuth callback failed: %s", exc)
            st.error(f"Authentication Error: {getattr(exc, 'detail', exc)}")
            if st.button("Back to sign in", key="auth.callback_back"):
                navigate("login")
            return
    st.query_params.clear()
    navigate("dashboard")
