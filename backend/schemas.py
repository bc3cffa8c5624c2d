from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, List

from pydantic import BaseModel, Field


class SignUpPayload(BaseModel):
    name: str
    email: str
    password: str


class SignInPayload(BaseModel):
    email: str
    password: str


class ConfirmPayload(BaseModel):
    token: str


class OAuthCallbackPayload(BaseModel):
    code: str
    state: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    avatar_url: Optional[str] = None
    auth_provider: str = "password"
    email_confirmed: bool = False


class SessionResponse(BaseModel):
    access_token: Optional[str] = None
    expires_at: Optional[str] = None
    user: UserResponse
    confirmation_required: bool = False


class HabitCreate(BaseModel):
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    reminder_time: Optional[time] = None
    frequency: str = "daily"


class HabitPatch(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    reminder_time: Optional[time] = None
    frequency: Optional[str] = None


class CompletionPayload(BaseModel):
    completed: bool = True



class JournalEntryCreate(BaseModel):
    title: str
    content: str = ""
    mood: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    entry_date: Optional[date] = None


class JournalEntryPatch(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[str] = None
    tags: Optional[List[str]] = None
    entry_date: Optional[date] = None


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: str = "medium"
    category: Optional[str] = None
    completed: bool = False


class TaskPatch(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    completed: Optional[bool] = None


class CalendarEventCreate(BaseModel):
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    color: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class CalendarEventPatch(BaseModel):
    title: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    all_day: Optional[bool] = None
    color: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None

