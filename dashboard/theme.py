import streamlit as st

THEME_PRESETS = {
    "dark": {
        "bg_main": "#0f172a",
        "bg_glow": "#1e1b4b",
        "bg_card": "#1e293b",
        "bg_panel": "#273449",
        "border": "#334155",
        "text_main": "#f1f5f9",
        "text_soft": "#94a3b8",
        "button": "#6366f1",
        "button_hover": "#818cf8",
        "accent": "#a5b4fc",
        "success": "#34d399",
        "plot_grid": "#334155",
        "plot_marker_line": "#e2e8f0",
        "today_border": "#818cf8",
        "today_bg": "rgba(99, 102, 241, 0.18)",
        "dot_empty": "#334155",
        "divider": "rgba(255,255,255,0.08)",
    },
    "light": {
        "bg_main": "#f8fafc",
        "bg_glow": "#eef2ff",
        "bg_card": "#ffffff",
        "bg_panel": "#f1f5f9",
        "border": "#e2e8f0",
        "text_main": "#0f172a",
        "text_soft": "#64748b",
        "button": "#4f46e5",
        "button_hover": "#6366f1",
        "accent": "#4f46e5",
        "success": "#10b981",
        "plot_grid": "#e2e8f0",
        "plot_marker_line": "#ffffff",
        "today_border": "#4f46e5",
        "today_bg": "rgba(79, 70, 229, 0.08)",
        "dot_empty": "#e2e8f0",
        "divider": "rgba(0,0,0,0.08)",
    },
}


def ensure_theme_state():
    if "ui_theme" not in st.session_state:
        st.session_state["ui_theme"] = "light"
    if st.session_state["ui_theme"] not in THEME_PRESETS:
        st.session_state["ui_theme"] = "light"
    return st.session_state["ui_theme"]


def get_active_theme():
    name = ensure_theme_state()
    return name, THEME_PRESETS[name]


def toggle_theme():
    current = ensure_theme_state()
    st.session_state["ui_theme"] = "light" if current == "dark" else "dark"


def inject_theme_css() -> dict:
    active_name, active_theme = get_active_theme()
    theme_toggle_icon = "☀️" if active_name == "dark" else "🌙"
    theme_toggle_help = "Switch to light mode" if active_name == "dark" else "Switch to dark mode"

    theme_vars_css = ":root {\n" + "".join(
        f"    --{key.replace('_', '-')}: {value};\n" for key, value in active_theme.items()
    ) + "}\n"

    st.markdown(
        """
<style>
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap');
"""
        + theme_vars_css
        + """

html, body, [class*="css"] {
    font-family: 'Inter', sans-serif;
    color: var(--text-main);
}

.stApp {
    background: radial-gradient(1400px 900px at 20% 0%, var(--bg-glow) 0%, var(--bg-main) 58%);
    color: var(--text-main);
}

.brand {
    font-size: 22px;
    font-weight: 700;
    color: var(--accent);
}

.section-title {
    font-size: 15px;
    font-weight: 600;
    margin: 0 0 8px 0;
}

.card {
    background: var(--bg-card);
    border: 1px solid var(--border);
    border-radius: 14px;
    padding: 16px 18px;
    margin-bottom: 14px;
}

.small-label {
    color: var(--text-soft);
    font-size: 12px;
    letter-spacing: 0.2px;
}

.quote-text {
    font-size: 17px;
    font-style: italic;
}

.stMetric {
    background: var(--bg-card);
    padding: 10px 12px;
    border-radius: 12px;
    border: 1px solid var(--border);
}

.stButton>button[kind="primary"] {
    background: var(--button) !important;
    color: #ffffff !important;
    border: 1px solid var(--button) !important;
    border-radius: 10px !important;
}

.stButton>button[kind="primary"]:hover {
    background: var(--button-hover) !important;
    border-color: var(--button-hover) !important;
}

div[data-testid="stForm"] {
    background: var(--bg-card);
    border: 1px solid var(--border);
    border-radius: 14px;
    padding: 16px 18px;
}

.streak-dots {
    display: flex;
    gap: 4px;
    align-items: center;
}

.streak-dot {
    width: 10px;
    height: 10px;
    border-radius: 50%;
    background: var(--dot-empty);
}

.streak-dot.done {
    background: var(--success);
}

.streak-badge {
    color: var(--text-soft);
    font-size: 12px;
    margin-left: 8px;
}

.tag-chip {
    display: inline-block;
    padding: 1px 8px;
    margin-right: 4px;
    border-radius: 999px;
    background: var(--bg-panel);
    color: var(--text-soft);
    font-size: 11px;
}

.calendar-table {
    width: 100%;
    border-collapse: collapse;
    table-layout: fixed;
}

.calendar-table th {
    color: var(--text-soft);
    font-size: 12px;
    font-weight: 500;
    padding: 6px 0;
}

.calendar-cell {
    vertical-align: top;
    height: 96px;
    border: 1px solid var(--border);
    padding: 4px 6px;
    background: var(--bg-card);
}

.calendar-cell.outside {
    opacity: 0.45;
}

.calendar-cell.today {
    border: 2px solid var(--today-border);
    background: var(--today-bg);
}

.calendar-day {
    font-size: 12px;
    font-weight: 600;
}

.cal-event {
    font-size: 11px;
    color: #ffffff;
    border-radius: 4px;
    padding: 1px 4px;
    margin-top: 2px;
    white-space: nowrap;
    overflow: hidden;
    text-overflow: ellipsis;
}

.cal-more {
    font-size: 11px;
    color: var(--text-soft);
    margin-top: 2px;
}

.achievement {
    display: flex;
    gap: 10px;
    align-items: center;
}

.achievement.locked {
    opacity: 0.55;
}
</style>
""",
        unsafe_allow_html=True,
    )
    return {
        "name": active_name,
        "theme": active_theme,
        "toggle_icon": theme_toggle_icon,
        "toggle_help": theme_toggle_help,
    }
