"""
Main entry point for the PO Sentinel dashboard.
"""

import asyncio
import sys
from datetime import date, datetime, timezone
from typing import Any, Callable, List, Optional, Sequence

from sentinel.schemas.alert import Alert
from sentinel.schemas.order import AugmentedOrder, PurchaseOrder
from sentinel.schemas.tiers import TierTable
from sentinel.services import assistant, exporter, filtering, importer, notifications, urgency
from sentinel.services import summary as summary_service
from sentinel.services.reminders import ReminderScheduler, WeeklyWindow
from sentinel.services.urgency import EscalationPolicy
from sentinel.state import DashboardState
from sentinel.store import OrderStore
from sentinel.utils import dict_to_json_string
from sentinel.utils.dates import add_days
from sentinel.utils.logging import setup_logging
from sentinel.config import Config, get_config


logger = setup_logging(__name__)
config = get_config()


class SentinelDashboard:
    """
    Top-level process: owns the store, the session state and the engine
    configuration, and wires the pure services together.

    Augmented records are recomputed from the stored collection on every
    call; they are never cached or persisted.
    """

    def __init__(
        self,
        store: OrderStore,
        tier_table: Optional[TierTable] = None,
        policy: Optional[EscalationPolicy] = None,
        notifier: Optional[notifications.Notifier] = None,
        settings: Optional[Config] = None,
    ):
        self.settings = settings or config
        default_table, default_policy = urgency.engine_from_config(self.settings)
        self.store = store
        self.tier_table = tier_table or default_table
        self.policy = policy or default_policy
        self.notifier = notifier
        # Platform notifications stay off until the user opts in
        self.state = DashboardState(notifications_enabled=False)
        self.scheduler = ReminderScheduler(
            window=WeeklyWindow.from_config(self.settings),
            last_fired_date=store.last_reminder_date,
            poll_seconds=self.settings.REMINDER_POLL_SECONDS,
            on_confirm=store.set_last_reminder,
        )

    @classmethod
    def open(cls, path: Optional[str] = None, **kwargs) -> "SentinelDashboard":
        """Load the persisted store and build a dashboard around it."""
        store = OrderStore(path or config.STORE_PATH).load()
        return cls(store, **kwargs)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def augmented(self, today: Optional[date] = None) -> List[AugmentedOrder]:
        return urgency.evaluate_all(self.store.orders, today or date.today(), self.tier_table, self.policy)

    def view(self, spec: Optional[filtering.FilterSpec] = None, today: Optional[date] = None) -> List[AugmentedOrder]:
        """Filtered table rows, oldest first."""
        return filtering.query(self.augmented(today), spec or self.state.filters)

    def summary(self, today: Optional[date] = None) -> summary_service.DashboardSummary:
        return summary_service.summarize(self.augmented(today), self.tier_table)

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def refresh_alerts(self, today: Optional[date] = None, now: Optional[datetime] = None) -> List[Alert]:
        """
        Reconcile the alert history with the current augmented set.

        Returns the alerts created by this call; platform notifications
        fire once for each of them.
        """
        before = self.state.alerts
        after = notifications.reconcile(
            self.augmented(today),
            before,
            self.tier_table.critical,
            max_history=self.settings.MAX_ALERT_HISTORY,
            now=now or datetime.now(timezone.utc),
        )
        if after is before:
            return []

        created = notifications.new_alerts(before, after)
        logger.info(f"Alert reconciliation raised {len(created)} new alerts ({len(after)} in history)")
        self.state.alerts = list(after)
        notifications.dispatch_new(before, after, self.notifier if self.state.notifications_enabled else None)
        return created

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def new_order(self, **fields: Any) -> PurchaseOrder:
        """Create an order from form fields, applying the form's date defaults."""
        fields.setdefault("creation_date", date.today())
        order = PurchaseOrder(**fields)
        if order.delivery_date is None:
            order = order.model_copy(update={
                "delivery_date": add_days(order.creation_date, self.settings.FORM_DEFAULT_LEAD_DAYS),
            })
        return self.store.add(order)

    def edit_order(self, order_id: str, **fields: Any) -> PurchaseOrder:
        current = self.store.get(order_id)
        if current is None:
            raise KeyError(f"No order with id {order_id}")
        data = current.model_dump()
        data.update(fields)
        return self.store.update(order_id, PurchaseOrder(**data))

    def delete_order(self, order_id: str, confirm: bool = False) -> None:
        self.store.delete(order_id, confirm=confirm)

    def reset(self, confirm: bool = False) -> None:
        self.store.reset(confirm=confirm)
        self.state.clear_alerts()

    def import_file(self, source: Any, today: Optional[date] = None) -> List[PurchaseOrder]:
        """Import a spreadsheet atomically. Raises importer.ImportFormatError."""
        orders = importer.import_file(source, today)
        return self.store.import_orders(orders)

    def export_xlsx(self, target: Any, spec: Optional[filtering.FilterSpec] = None, today: Optional[date] = None) -> None:
        exporter.write_xlsx(self.view(spec, today), target)

    # ------------------------------------------------------------------
    # Assistant and reminders
    # ------------------------------------------------------------------

    async def ask(self, question: str) -> str:
        self.state.add_chat_message("user", question)
        self.state.assistant_busy = True
        try:
            reply = await assistant.ask(question, list(self.store.orders))
        finally:
            self.state.assistant_busy = False
        self.state.add_chat_message("model", reply)
        return reply

    async def draft_reminder(self, today: Optional[date] = None) -> assistant.ReminderDraft:
        today = today or date.today()
        return await assistant.draft_reminder_email(self.augmented(today), self.tier_table, today)

    def confirm_reminder_sent(self, today: Optional[date] = None) -> str:
        return self.scheduler.confirm_sent(today or date.today())

    def dismiss_reminder(self, now: Optional[datetime] = None) -> None:
        """Close the prompt without sending; it reopens after one polling interval."""
        self.scheduler.dismiss(now or datetime.now())

    async def poll_reminder(self, now: Optional[datetime] = None) -> Optional[assistant.ReminderDraft]:
        """
        One tick of the reminder gate.

        Returns a fresh draft when this tick opened the prompt, otherwise None.
        A failed draft closes the prompt again so the next tick retries.
        """
        now = now or datetime.now()
        if not self.scheduler.tick(now):
            return None
        try:
            return await self.draft_reminder(now.date())
        except Exception:
            self.scheduler.dismiss(now)
            raise

    async def run_reminder_loop(
        self,
        on_draft: Callable[[assistant.ReminderDraft], Any],
        stop_event: asyncio.Event,
    ) -> None:
        """Poll the reminder gate; hand each generated draft to `on_draft` for confirmation."""

        async def on_due():
            draft = await self.draft_reminder()
            result = on_draft(draft)
            if asyncio.iscoroutine(result):
                await result

        await self.scheduler.run(on_due, stop_event)


def format_rows(records: Sequence[AugmentedOrder]) -> str:
    return dict_to_json_string([
        {
            "po_number": r.po_number,
            "vendor": r.vendor,
            "age": r.age,
            "urgency": r.urgency_tier.value,
            "status": r.status.value,
        }
        for r in records
    ])


def cli_dashboard(path: Optional[str] = None) -> SentinelDashboard:
    """
    Dashboard for terminal use. Alerts are reported through the log; asking
    for the `alerts` command is the user's opt-in.
    """
    dashboard = SentinelDashboard.open(path, notifier=notifications.LogNotifier())
    dashboard.state.notifications_enabled = True
    return dashboard


def prompt_reminder_in_terminal(dashboard: SentinelDashboard, draft: assistant.ReminderDraft) -> None:
    print(f"To: {draft.recipient}\nSubject: {draft.subject}\n\n{draft.body}\n")
    print(draft.mailto)
    if input("Mark as sent? [y/N] ").strip().lower() == "y":
        dashboard.confirm_reminder_sent()
    else:
        dashboard.dismiss_reminder()


if __name__ == "__main__":
    # Example usage
    dashboard = cli_dashboard()
    command = sys.argv[1] if len(sys.argv) > 1 else "summary"

    if command == "summary":
        result = dashboard.summary()
        print(dict_to_json_string(result.model_dump(mode="json", exclude={"oldest_active"})))
        print(format_rows(result.oldest_active))
    elif command == "alerts":
        for alert in dashboard.refresh_alerts():
            print(f"[{alert.type.value}] {alert.title} - {alert.message}")
    elif command == "remind":
        stop_event = asyncio.Event()
        print(f"Waiting for the reminder window ({dashboard.scheduler.window.describe()}). Ctrl+C to stop.")
        try:
            asyncio.run(dashboard.run_reminder_loop(
                lambda draft: prompt_reminder_in_terminal(dashboard, draft), stop_event
            ))
        except KeyboardInterrupt:
            pass
    elif command == "export" and len(sys.argv) > 2:
        dashboard.export_xlsx(sys.argv[2])
        print(f"Exported to {sys.argv[2]}")
    elif command == "import" and len(sys.argv) > 2:
        try:
            imported = dashboard.import_file(sys.argv[2])
            print(f"Successfully imported {len(imported)} records.")
        except importer.ImportFormatError as e:
            print(f"Failed to parse the file. Please check column headers. ({e})")
            sys.exit(1)
    else:
        print("Usage: python -m sentinel.main [summary|alerts|remind|export <path>|import <path>]")
