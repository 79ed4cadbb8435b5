"""
Notification Deduplicator
Turns critical or overdue orders into alerts and merges them into a bounded,
deduplicated alert history.

Alert identity is `tier + "-" + order id`, so re-running reconciliation on
the same augmented set never creates duplicates, while a tier change on an
order produces a new alert next to the old one.
"""

from datetime import datetime, timezone
from typing import AbstractSet, Iterable, List, Optional, Protocol, Sequence

from sentinel.schemas.alert import Alert, AlertSeverity, alert_id_for
from sentinel.schemas.order import AugmentedOrder, POStatus
from sentinel.utils.logging import setup_logging, log_alert


logger = setup_logging(__name__)

DEFAULT_MAX_HISTORY = 50


class Notifier(Protocol):
    """Platform notification collaborator (desktop popup, browser, ...)."""

    def notify(self, title: str, body: str) -> None:
        ...


class LogNotifier:
    """Notifier that writes popups to the log. Used when no platform channel exists."""

    def __init__(self):
        self.sent: List[tuple] = []

    def notify(self, title: str, body: str) -> None:
        logger.info(f"[Notification] {title}: {body}")
        self.sent.append((title, body))


def _label_values(critical_tiers: Iterable) -> AbstractSet[str]:
    # Accept UrgencyLabel members or plain strings
    return {getattr(t, "value", t) for t in critical_tiers}


def is_alertable(record: AugmentedOrder, critical_tiers: AbstractSet[str]) -> bool:
    return record.status == POStatus.OVERDUE or record.urgency_tier.value in _label_values(critical_tiers)


def build_alert(
    record: AugmentedOrder,
    critical_tiers: AbstractSet[str],
    now: Optional[datetime] = None,
) -> Alert:
    """Candidate alert for one qualifying record."""
    tier = record.urgency_tier.value
    critical = tier in _label_values(critical_tiers)
    severity = AlertSeverity.CRITICAL if critical else AlertSeverity.WARNING
    return Alert(
        id=alert_id_for(tier, record.id),
        po_id=record.id,
        po_number=record.po_number,
        title=f"Critical Alert: {tier}",
        message=f"{record.vendor}'s order requires immediate {tier.lower()}. Age: {record.age} days.",
        type=severity,
        timestamp=now or datetime.now(timezone.utc),
    )


def reconcile(
    records: Iterable[AugmentedOrder],
    existing_alerts: Sequence[Alert],
    critical_tiers: AbstractSet[str],
    max_history: int = DEFAULT_MAX_HISTORY,
    now: Optional[datetime] = None,
) -> Sequence[Alert]:
    """
    Merge new candidate alerts into the history.

    New alerts are prepended (newest first) and the history is truncated to
    `max_history`, dropping the oldest entries. When nothing new survives
    deduplication the `existing_alerts` object itself is returned, so
    callers can detect "no change" by identity.
    """
    now = now or datetime.now(timezone.utc)
    seen = {a.id for a in existing_alerts}

    fresh: List[Alert] = []
    for record in records:
        if not is_alertable(record, critical_tiers):
            continue
        candidate = build_alert(record, critical_tiers, now)
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        fresh.append(candidate)

    if not fresh:
        return existing_alerts

    for alert in fresh:
        log_alert(logger, alert.id, alert.type.value, alert.po_number)

    return (fresh + list(existing_alerts))[:max_history]


def new_alerts(before: Sequence[Alert], after: Sequence[Alert]) -> List[Alert]:
    """Alerts present in `after` but not in `before`."""
    if after is before:
        return []
    known = {a.id for a in before}
    return [a for a in after if a.id not in known]


def dispatch_new(before: Sequence[Alert], after: Sequence[Alert], notifier: Optional[Notifier]) -> int:
    """
    Fire one platform notification per newly created alert.

    `notifier=None` means the user has not granted permission; nothing is sent.
    Notification failures are logged and never interrupt the caller.
    """
    if notifier is None:
        return 0

    sent = 0
    for alert in new_alerts(before, after):
        try:
            notifier.notify(alert.title, alert.message)
            sent += 1
        except Exception as e:
            logger.warning(f"Platform notification failed for {alert.id}: {e}")
    return sent


def mark_read(alerts: Sequence[Alert], alert_id: str) -> List[Alert]:
    return [a.model_copy(update={"is_read": True}) if a.id == alert_id else a for a in alerts]


def mark_all_read(alerts: Sequence[Alert]) -> List[Alert]:
    return [a if a.is_read else a.model_copy(update={"is_read": True}) for a in alerts]


def unread_count(alerts: Sequence[Alert]) -> int:
    return sum(1 for a in alerts if not a.is_read)
