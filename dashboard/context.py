from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict

from dashboard.session import AuthSession


@dataclass
class DashboardContext:
    auth_session: AuthSession
    today: date
    page: str
    tz: Any = None
    theme: Dict[str, Any] = field(default_factory=dict)
