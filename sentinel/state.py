"""
Session state for one open dashboard.
Alerts, chat history and the active table filters live here; orders live in the store.
"""

from typing import List, Literal
from pydantic import BaseModel, Field
from datetime import datetime, timezone

from sentinel.schemas.alert import Alert
from sentinel.services.assistant import CHAT_GREETING
from sentinel.services.filtering import FilterSpec
from sentinel.services import notifications


class ChatMessage(BaseModel):
    """A single entry in the assistant conversation."""
    role: Literal["user", "model"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def _greeting() -> List[ChatMessage]:
    return [ChatMessage(role="model", content=CHAT_GREETING)]


class DashboardState(BaseModel):
    """
    Mutable per-session state.

    The alert list is replaced wholesale on every change (never edited in
    place), so a reference taken before a reconciliation still shows the
    previous history.
    """

    alerts: List[Alert] = Field(default_factory=list)
    chat_history: List[ChatMessage] = Field(default_factory=_greeting)
    filters: FilterSpec = Field(default_factory=FilterSpec)
    notifications_enabled: bool = False
    assistant_busy: bool = False

    def add_chat_message(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self.chat_history = self.chat_history + [message]
        return message

    def mark_alert_read(self, alert_id: str) -> None:
        self.alerts = notifications.mark_read(self.alerts, alert_id)

    def mark_all_read(self) -> None:
        self.alerts = notifications.mark_all_read(self.alerts)

    def clear_alerts(self) -> None:
        self.alerts = []

    @property
    def unread_count(self) -> int:
        return notifications.unread_count(self.alerts)

    def get_summary(self) -> dict:
        return {
            "alerts": len(self.alerts),
            "unread_alerts": self.unread_count,
            "chat_messages": len(self.chat_history),
            "filters": self.filters.model_dump(mode="json", exclude_defaults=True),
        }
