import logging

import streamlit as st

from dashboard.data.api_client import ApiError

logger = logging.getLogger(__name__)


def navigate(page):
    st.query_params["page"] = page
    st.rerun()


def report_result(result, success_message=None, failure_prefix="Could not save"):
    if result.ok:
        if success_message:
            st.toast(success_message)
        return True
    if isinstance(result.error, ApiError):
        st.toast(f"{failure_prefix}: {result.message}", icon="⚠️")
    else:
        st.warning(result.message)
    return False


def report_load_error(error, what):
    if error is None:
        return
    st.toast(f"Could not load {what}: {getattr(error, 'detail', error)}", icon="⚠️")


def section_title(text):
    st.markdown(f"<div class='section-title'>{text}</div>", unsafe_allow_html=True)
