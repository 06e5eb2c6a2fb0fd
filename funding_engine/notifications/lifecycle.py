"""Notification lifecycle: overdue sweep, dismissal, completion and payments.

Transitions::

    pending --(due date passes)--> overdue
    pending|overdue --> completed   (payment recorded / milestone closed)
    pending|overdue --> dismissed   (bank installments only)
    dismissed --(reopen)--> pending

Writes assume a single operator per notification; there is no locking, so
concurrent writes to the same entry are last-write-wins.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from funding_engine.exceptions import (
    DataAccessError,
    FundingEngineError,
    InvalidTransitionError,
    PartialWriteError,
    store_access,
)
from funding_engine.funding.reader import FundingLedgerReader
from funding_engine.models.enums import (
    MilestoneStatus,
    NotificationSource,
    ScheduleStatus,
    StepStatus,
)
from funding_engine.models.funding import FunderKey
from funding_engine.models.notification import (
    BankNotification,
    PaymentNotification,
    PaymentStep,
    PaymentWorkflow,
    SubcontractorNotification,
)
from funding_engine.notifications.builder import fetch_notifications
from funding_engine.store.ledger import LedgerStore

logger = logging.getLogger(__name__)

_OPEN_SCHEDULE = (ScheduleStatus.PENDING, ScheduleStatus.OVERDUE)


def parse_amount(value: Any) -> Decimal:
    """Parse a payment amount.

    Missing values become zero. Anything that is not a finite number is
    rejected rather than guessed.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0")
    if isinstance(value, bool):
        raise InvalidTransitionError(f"Invalid payment amount: {value!r}")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidTransitionError(f"Invalid payment amount: {value!r}") from None
    if not amount.is_finite():
        raise InvalidTransitionError(f"Invalid payment amount: {value!r}")
    return amount


class NotificationLifecycleManager:
    """Apply operator actions and the overdue sweep to the ledger store.

    Store failures surface as ``DataAccessError``; invalid actions raise
    ``InvalidTransitionError`` before anything is written.

    Parameters
    ----------
    store : LedgerStore
        Backing store holding the schedules.
    clock : Callable[[], datetime]
        Source of the current time, used for audit stamps and "today".
    """

    def __init__(
        self,
        store: LedgerStore,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.clock = clock
        self.reader = FundingLedgerReader(store)

    def today(self) -> date:
        return self.clock().date()

    def sweep(self) -> int:
        """Persist pending -> overdue for past-due installments. Idempotent."""
        with store_access("run overdue sweep"):
            promoted = self.store.mark_overdue(self.today())
        if promoted:
            logger.info("Overdue sweep promoted %d installments", promoted)
        return promoted

    def refresh(self, include_closed: bool = False) -> list[PaymentNotification]:
        """Re-fetch the full notification list, e.g. after a mutation."""
        return fetch_notifications(self.store, self.today(), include_closed=include_closed)

    def dismiss(self, notification_id: str, actor_id: str) -> None:
        """Dismiss a bank installment, stamping who dismissed it and when."""
        with store_access(f"dismiss installment {notification_id}"):
            if notification_id in self.store.milestones:
                raise InvalidTransitionError(
                    f"Milestone {notification_id} cannot be dismissed; mark it complete instead"
                )
            entry = self.store.get_schedule_entry(notification_id)
            if entry.status == ScheduleStatus.COMPLETED:
                raise InvalidTransitionError(f"Installment {notification_id} is already completed")
            if entry.status == ScheduleStatus.DISMISSED:
                raise InvalidTransitionError(f"Installment {notification_id} is already dismissed")

            self.store.dismiss_bank_entry(notification_id, actor_id, self.clock())
        logger.info("Installment %s dismissed by %s", notification_id, actor_id)

    def reopen(self, notification_id: str) -> None:
        """Return a dismissed installment to pending."""
        with store_access(f"reopen installment {notification_id}"):
            entry = self.store.get_schedule_entry(notification_id)
            if entry.status != ScheduleStatus.DISMISSED:
                raise InvalidTransitionError(
                    f"Installment {notification_id} is {entry.status.value}, only dismissed installments can be reopened"
                )
            self.store.reopen_bank_entry(notification_id)
        logger.info("Installment %s reopened", notification_id)

    def complete(self, notification_id: str) -> None:
        """Close a notification without recording a payment."""
        with store_access(f"complete {notification_id}"):
            if notification_id in self.store.milestones:
                milestone = self.store.get_milestone(notification_id)
                if milestone.status != MilestoneStatus.PENDING:
                    raise InvalidTransitionError(
                        f"Milestone {notification_id} is already {milestone.status.value}"
                    )
                self.store.mark_milestone_complete(notification_id)
                logger.info("Milestone %s marked complete", notification_id)
                return

            entry = self.store.get_schedule_entry(notification_id)
            if entry.status not in _OPEN_SCHEDULE:
                raise InvalidTransitionError(f"Installment {notification_id} is already {entry.status.value}")
            self.store.complete_bank_entry(notification_id, self.clock())
        logger.info("Installment %s marked completed", notification_id)

    def record_payment(
        self,
        notification: PaymentNotification,
        amount: Any,
        payment_date: date | None = None,
        notes: str | None = None,
        paid_by: FunderKey | None = None,
        actor_id: str | None = None,
        complete_notification: bool = False,
    ) -> PaymentWorkflow:
        """Record a payment against a notification as an ordered workflow.

        Bank installments create an invoice, a payment for it and then reduce
        the credit's outstanding balance; the installment itself is only
        closed when ``complete_notification`` is set. Milestones create a wire
        payment (attributed to ``paid_by`` or the subcontractor's default
        funder) and are then marked paid.

        Validation happens before any write. A failure in the first step
        raises the underlying ``DataAccessError``; a failure after some steps
        committed raises ``PartialWriteError`` naming the failed step. Nothing
        is rolled back.
        """
        parsed = parse_amount(amount)
        if parsed <= 0:
            raise InvalidTransitionError("Payment amount must be greater than zero")
        payment_date = payment_date or self.today()

        if isinstance(notification, BankNotification):
            return self._record_bank_payment(
                notification, parsed, payment_date, notes, actor_id, complete_notification
            )
        if isinstance(notification, SubcontractorNotification):
            return self._record_subcontractor_payment(notification, parsed, payment_date, notes, paid_by)
        raise InvalidTransitionError(f"Unsupported notification type: {type(notification).__name__}")

    def _record_bank_payment(
        self,
        notification: BankNotification,
        amount: Decimal,
        payment_date: date,
        notes: str | None,
        actor_id: str | None,
        complete_notification: bool,
    ) -> PaymentWorkflow:
        credit_id = notification.bank_credit_id
        with store_access(f"read installment {notification.notification_id}"):
            entry = self.store.get_schedule_entry(notification.notification_id)
            self.store.get_credit(credit_id)
        if entry.status not in _OPEN_SCHEDULE:
            raise InvalidTransitionError(
                f"Cannot record a payment on installment {entry.entry_id}: it is {entry.status.value}"
            )
        description = notes or f"Payment for {notification.bank_name} - Payment #{notification.payment_number}"

        workflow = PaymentWorkflow(notification.notification_id, NotificationSource.BANK)
        invoice = self._run_step(
            workflow,
            "create_invoice",
            lambda: self.store.create_invoice(credit_id, amount, payment_date, description, actor_id),
            result_attr="invoice_id",
        )
        self._run_step(
            workflow,
            "create_payment",
            lambda: self.store.create_invoice_payment(
                invoice.invoice_id, amount, payment_date, description, actor_id
            ),
            result_attr="payment_id",
        )
        self._run_step(
            workflow,
            "reduce_outstanding_balance",
            lambda: self.store.reduce_outstanding_balance(credit_id, amount),
        )
        if complete_notification:
            self._run_step(
                workflow,
                "complete_notification",
                lambda: self.store.complete_bank_entry(entry.entry_id, self.clock()),
            )

        logger.info(
            "Recorded bank payment of %s on credit %s for installment %s",
            amount,
            credit_id,
            entry.entry_id,
        )
        return workflow

    def _record_subcontractor_payment(
        self,
        notification: SubcontractorNotification,
        amount: Decimal,
        payment_date: date,
        notes: str | None,
        paid_by: FunderKey | None,
    ) -> PaymentWorkflow:
        with store_access(f"read milestone {notification.milestone_id}"):
            milestone = self.store.get_milestone(notification.milestone_id)
        if milestone.status != MilestoneStatus.PENDING:
            raise InvalidTransitionError(
                f"Cannot record a payment on milestone {milestone.milestone_id}: it is {milestone.status.value}"
            )
        if paid_by is None:
            paid_by = self.reader.default_attribution(notification.subcontractor_id)
        description = notes or (
            f"Payment for {notification.subcontractor_name} - "
            f"{notification.milestone_name} ({notification.milestone_percentage}%)"
        )

        workflow = PaymentWorkflow(notification.notification_id, NotificationSource.SUBCONTRACTOR)
        self._run_step(
            workflow,
            "create_wire_payment",
            lambda: self.store.create_wire_payment(
                notification.subcontractor_id,
                milestone.milestone_id,
                amount,
                payment_date,
                description,
                paid_by,
            ),
            result_attr="disbursement_id",
        )
        self._run_step(
            workflow,
            "mark_milestone_paid",
            lambda: self.store.mark_milestone_paid(milestone.milestone_id, payment_date),
        )

        logger.info(
            "Recorded subcontractor payment of %s for milestone %s",
            amount,
            milestone.milestone_id,
        )
        return workflow

    def _run_step(
        self,
        workflow: PaymentWorkflow,
        name: str,
        action: Callable[[], Any],
        result_attr: str | None = None,
    ) -> Any:
        step = PaymentStep(name=name)
        workflow.steps.append(step)
        try:
            result = action()
        except Exception as exc:
            step.status = StepStatus.FAILED
            step.error = str(exc)
            logger.error(
                "Payment step %s failed for notification %s: %s",
                name,
                workflow.notification_id,
                exc,
            )
            if workflow.completed_steps:
                done = ", ".join(s.name for s in workflow.completed_steps)
                raise PartialWriteError(
                    f"Payment for {workflow.notification_id} failed at step '{name}' "
                    f"after committing: {done}. Manual reconciliation required.",
                    workflow,
                ) from exc
            if isinstance(exc, FundingEngineError):
                raise
            raise DataAccessError(f"Payment step '{name}' failed: {exc}") from exc

        step.status = StepStatus.DONE
        if result_attr is not None:
            step.result = getattr(result, result_attr)
        return result

