from datetime import date

import streamlit as st

from dashboard.constants import MOOD_EMOJI, MOODS
from dashboard.data import mutations, repositories
from dashboard.data.api_client import ApiError
from dashboard.data.loaders import load_journal_entries
from dashboard.ui import report_load_error, report_result, section_title
from dashboard.visualizations import small_label_html, tag_chips_html


def parse_tags(raw):
    tags = []
    seen = set()
    for part in str(raw or "").replace("\n", ",").split(","):
        tag = part.strip().lstrip("#").strip()
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            tags.append(tag)
    return tags


def mood_label(mood):
    if not mood:
        return "No mood"
    return f"{MOOD_EMOJI.get(mood, '📝')} {mood.title()}"


def _render_entry_form(entry=None, today=None):
    entry = entry or {}
    form_key = f"journal.form.{entry['id']}" if entry else "journal.add_form"
    mood_options = [""] + MOODS
    current_mood = entry.get("mood") if entry.get("mood") in MOODS else ""
    entry_day = entry.get("entry_date")
    with st.form(key=form_key, clear_on_submit=not entry):
        title = st.text_input("Title", value=entry.get("title", ""))
        cols = st.columns(2)
        with cols[0]:
            entry_date = st.date_input(
                "Date",
                value=date.fromisoformat(str(entry_day)) if entry_day else (today or date.today()),
            )
        with cols[1]:
            mood = st.selectbox(
                "How are you feeling?",
                mood_options,
                index=mood_options.index(current_mood),
                format_func=mood_label,
            )
        content = st.text_area("Write your thoughts...", value=entry.get("content") or "", height=180)
        tags_raw = st.text_input("Tags (comma separated)", value=", ".join(entry.get("tags") or []))
        submitted = st.form_submit_button("Save entry" if entry else "Add entry", type="primary")

    if not submitted:
        return
    payload = {
        "title": title.strip(),
        "content": content,
        "mood": mood or None,
        "tags": parse_tags(tags_raw),
        "entry_date": entry_date,
    }
    if entry:
        result = mutations.update_journal_entry(entry["id"], payload)
        if report_result(result, "Journal entry updated"):
            st.session_state[f"journal.editing.{entry['id']}"] = False
            st.rerun()
    elif report_result(mutations.create_journal_entry(payload), "Journal entry saved"):
        st.rerun()


def _render_entry(entry, today):
    with st.container(border=True):
        head_cols = st.columns([6, 0.4, 0.4])
        with head_cols[0]:
            st.markdown(f"**{entry.get('title') or 'Untitled'}**")
            st.markdown(
                small_label_html(entry.get("entry_date"), mood_label(entry.get("mood"))),
                unsafe_allow_html=True,
            )
        editable = not str(entry["id"]).startswith("pending-")
        with head_cols[1]:
            edit_key = f"journal.editing.{entry['id']}"
            if editable and st.button("✎", key=f"journal.edit.{entry['id']}", type="tertiary"):
                st.session_state[edit_key] = not st.session_state.get(edit_key, False)
        with head_cols[2]:
            if editable and st.button("✕", key=f"journal.delete.{entry['id']}", type="tertiary"):
                if report_result(mutations.delete_journal_entry(entry["id"]), "Journal entry deleted"):
                    st.rerun()
        if entry.get("content"):
            st.write(entry["content"])
        if entry.get("tags"):
            st.markdown(tag_chips_html(entry["tags"]), unsafe_allow_html=True)
        if st.session_state.get(f"journal.editing.{entry['id']}", False):
            _render_entry_form(entry, today)


def _render_export():
    if st.button("Prepare export", key="journal.prepare_export"):
        try:
            st.session_state["journal.export_text"] = repositories.export_journal()
        except ApiError as exc:
            st.toast(f"Could not export journal: {exc.detail}", icon="⚠️")
    export_text = st.session_state.get("journal.export_text")
    if export_text is not None:
        st.download_button(
            "Download journal.txt",
            data=export_text,
            file_name="journal.txt",
            mime="text/plain",
            key="journal.download",
        )


def render_journal_tab(ctx):
    entries, error = load_journal_entries()
    report_load_error(error, "journal entries")

    section_title("Journal")
    with st.expander("New entry", expanded=not entries):
        _render_entry_form(today=ctx.today)

    filter_cols = st.columns([1, 1, 2])
    with filter_cols[0]:
        mood = st.selectbox("Mood", [""] + MOODS, key="journal.filter_mood", format_func=lambda m: m.title() or "All")
    with filter_cols[1]:
        tag = st.text_input("Tag", key="journal.filter_tag").strip().lstrip("#")
    with filter_cols[2]:
        query = st.text_input("Search", key="journal.filter_query").strip()

    if mood or tag or query:
        try:
            entries = repositories.list_journal_entries(mood=mood, tag=tag, query=query)
        except ApiError as exc:
            report_load_error(exc, "journal entries")

    if not entries:
        st.info("No journal entries found.")
    for entry in entries:
        _render_entry(entry, ctx.today)

    _render_export()
