APP_NAME = "Journalix"

PUBLIC_PAGES = ["home", "login", "signup", "auth-callback"]
PROTECTED_PAGES = ["dashboard", "journal", "tasks", "habits", "insights", "calendar"]
PAGES = PUBLIC_PAGES + PROTECTED_PAGES
DEFAULT_PUBLIC_PAGE = "home"
DEFAULT_PROTECTED_PAGE = "dashboard"

NAV_LABELS = {
    "dashboard": "Dashboard",
    "habits": "Habits",
    "journal": "Journal",
    "tasks": "Tasks",
    "calendar": "Calendar",
    "insights": "Insights",
}

HABIT_CATEGORIES = ["Health", "Productivity", "Learning", "Mindfulness", "Fitness"]
CATEGORY_COLORS = {
    "Health": "#10B981",
    "Productivity": "#6366F1",
    "Learning": "#F59E0B",
    "Mindfulness": "#EC4899",
    "Fitness": "#3B82F6",
}
UNCATEGORIZED = "Other"
UNCATEGORIZED_COLOR = "#9CA3AF"
HABIT_FREQUENCIES = ["daily", "weekly", "custom"]

MOODS = ["happy", "excited", "neutral", "tired", "sad", "angry"]
MOOD_EMOJI = {
    "happy": "😊",
    "excited": "🤩",
    "neutral": "😐",
    "tired": "😴",
    "sad": "😢",
    "angry": "😠",
}

PRIORITIES = ["high", "medium", "low"]
PRIORITY_META = {
    "high": {"label": "High", "weight": 3, "color": "#EF4444"},
    "medium": {"label": "Medium", "weight": 2, "color": "#F59E0B"},
    "low": {"label": "Low", "weight": 1, "color": "#10B981"},
}

EVENT_COLORS = ["#6366F1", "#10B981", "#F59E0B", "#EF4444", "#EC4899", "#3B82F6"]
EVENT_COLOR_NAMES = {
    "#6366F1": "Indigo",
    "#10B981": "Green",
    "#F59E0B": "Amber",
    "#EF4444": "Red",
    "#EC4899": "Pink",
    "#3B82F6": "Blue",
}
CALENDAR_DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
CALENDAR_EVENTS_PER_CELL = 3

STREAK_LOOKBACK_DAYS = 100
STREAK_DOT_DAYS = 7
INSIGHTS_WINDOW_DAYS = 31
DASHBOARD_TASK_LIMIT = 5

FALLBACK_QUOTE = {
    "content": "Believe you can and you're halfway there.",
    "author": "Theodore Roosevelt",
}
QUOTE_URL = "https://api.quotable.io/random"
