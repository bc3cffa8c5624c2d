import html
from datetime import date

import streamlit as st

from dashboard.constants import PRIORITIES, PRIORITY_META
from dashboard.data import mutations
from dashboard.data.loaders import load_tasks
from dashboard.ui import report_load_error, report_result, section_title
from dashboard.visualizations import small_label_html

STATUS_FILTERS = ["All", "Active", "Completed"]


def sort_tasks(tasks):
    def key(task):
        weight = PRIORITY_META.get(task.get("priority") or "medium", PRIORITY_META["medium"])["weight"]
        due = str(task.get("due_date") or "9999-12-31")
        return (bool(task.get("completed")), -weight, due, str(task.get("title") or "").lower())

    return sorted(tasks, key=key)


def filter_tasks(tasks, status="All", priority=None):
    filtered = []
    for task in tasks:
        if status == "Active" and task.get("completed"):
            continue
        if status == "Completed" and not task.get("completed"):
            continue
        if priority and (task.get("priority") or "medium") != priority:
            continue
        filtered.append(task)
    return filtered


def _toggle(task_id):
    report_result(mutations.toggle_task(task_id), failure_prefix="Could not update task")


def render_task_row(ctx, task, key_prefix="tasks", editable=True):
    widget_key = f"{key_prefix}.done.{task['id']}"
    st.session_state[widget_key] = bool(task.get("completed"))
    meta = PRIORITY_META.get(task.get("priority") or "medium", PRIORITY_META["medium"])
    pending = str(task["id"]).startswith("pending-")
    row_cols = st.columns([0.3, 5, 1.2, 0.4, 0.4] if editable else [0.3, 5, 1.2])
    with row_cols[0]:
        st.checkbox(
            "Done",
            key=widget_key,
            label_visibility="collapsed",
            disabled=pending,
            on_change=_toggle,
            args=(task["id"],),
        )
    with row_cols[1]:
        title = html.escape(task.get("title") or "Untitled")
        if task.get("completed"):
            title = f"~~{title}~~"
        details = []
        if task.get("due_date"):
            overdue = not task.get("completed") and str(task["due_date"]) < ctx.today.isoformat()
            details.append(("⚠️ Overdue " if overdue else "Due ") + str(task["due_date"]))
        if task.get("category"):
            details.append(task["category"])
        st.markdown(title + ("  \n" + small_label_html(*details, tag="span") if details else ""), unsafe_allow_html=True)
    with row_cols[2]:
        st.markdown(
            f"<span style='color:{meta['color']}; font-size:12px'>● {meta['label']}</span>",
            unsafe_allow_html=True,
        )
    if editable and not pending:
        with row_cols[3]:
            edit_key = f"{key_prefix}.editing.{task['id']}"
            if st.button("✎", key=f"{key_prefix}.edit.{task['id']}", type="tertiary"):
                st.session_state[edit_key] = not st.session_state.get(edit_key, False)
        with row_cols[4]:
            if st.button("✕", key=f"{key_prefix}.delete.{task['id']}", type="tertiary"):
                if report_result(mutations.delete_task(task["id"]), "Task deleted"):
                    st.rerun()
        if st.session_state.get(f"{key_prefix}.editing.{task['id']}", False):
            _render_task_form(task)


def _render_task_form(task=None):
    task = task or {}
    form_key = f"tasks.form.{task['id']}" if task else "tasks.add_form"
    priority = task.get("priority") if task.get("priority") in PRIORITIES else "medium"
    due_value = date.fromisoformat(str(task["due_date"])) if task.get("due_date") else None
    with st.form(key=form_key, clear_on_submit=not task):
        title = st.text_input("Title", value=task.get("title", ""))
        description = st.text_area("Description", value=task.get("description") or "", height=80)
        cols = st.columns(3)
        with cols[0]:
            due_date = st.date_input("Due date", value=due_value)
        with cols[1]:
            priority = st.selectbox(
                "Priority",
                PRIORITIES,
                index=PRIORITIES.index(priority),
                format_func=lambda value: PRIORITY_META[value]["label"],
            )
        with cols[2]:
            category = st.text_input("Category", value=task.get("category") or "")
        submitted = st.form_submit_button("Save task" if task else "Add task", type="primary")

    if not submitted:
        return
    payload = {
        "title": title.strip(),
        "description": description or None,
        "due_date": due_date,
        "priority": priority,
        "category": category.strip() or None,
    }
    if task:
        if report_result(mutations.update_task(task["id"], payload), "Task updated"):
            st.session_state[f"tasks.editing.{task['id']}"] = False
            st.rerun()
    elif report_result(mutations.create_task(payload), "Task added"):
        st.rerun()


def render_tasks_tab(ctx):
    tasks, error = load_tasks()
    report_load_error(error, "tasks")

    section_title("Tasks")
    with st.expander("Add a task", expanded=not tasks):
        _render_task_form()

    filter_cols = st.columns([2, 1])
    with filter_cols[0]:
        status = st.segmented_control("Status", STATUS_FILTERS, key="tasks.filter_status", default="All") or "All"
    with filter_cols[1]:
        priority = st.selectbox(
            "Priority",
            [""] + PRIORITIES,
            key="tasks.filter_priority",
            format_func=lambda value: PRIORITY_META[value]["label"] if value else "All",
        )

    visible = sort_tasks(filter_tasks(tasks, status, priority or None))
    open_count = sum(1 for task in tasks if not task.get("completed"))
    st.caption(f"{open_count} open • {len(tasks) - open_count} completed")
    if not visible:
        st.info("No tasks to show.")
    for task in visible:
        render_task_row(ctx, task)
