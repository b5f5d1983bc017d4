import asyncio
from datetime import timedelta
from typing import List, Optional

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

with workflow.unsafe.imports_passed_through():
    import notifications
    import pricing
    from errors import (
        CheckoutError,
        NotificationDispatchFailure,
        PaymentLookupError,
        PaymentNotCompletedError,
        ValidationError,
    )
    from models import (
        Channel,
        ChannelResult,
        ConfirmationRequest,
        Customer,
        DispatchReport,
        NotificationEvent,
        Order,
        OrderCreated,
        OrderPaid,
        OrderRequest,
        OrderStatus,
        Outcome,
        PaymentConfirmation,
        PaymentLookup,
        Verdict,
    )
    from payments import classify


ACTIVITY_TIMEOUT = timedelta(seconds=30)
NOTIFY_TIMEOUT = timedelta(seconds=15)

# External calls get exactly one attempt; retrying is left to the caller
SINGLE_ATTEMPT = RetryPolicy(maximum_attempts=1)


class NotificationDispatcher:
    """Fans a lifecycle event out to its channels, one activity per channel.

    Channels run concurrently and are all awaited; a failing channel is
    recorded in the report and logged, never raised.
    """

    async def dispatch(self, event: NotificationEvent) -> DispatchReport:
        channels = notifications.channels_for(event)
        settled = await asyncio.gather(
            *(self._send(event, channel) for channel in channels),
            return_exceptions=True,
        )

        report = DispatchReport(event=notifications.event_name(event))
        for channel, outcome in zip(channels, settled):
            if isinstance(outcome, BaseException):
                failure = NotificationDispatchFailure(f"{channel.value}: {_reason(outcome)}")
                workflow.logger.warning(f"Notification failed: {failure}")
                report.results.append(ChannelResult(channel, Outcome.FAILED, _reason(outcome)))
            else:
                report.results.append(ChannelResult(channel, outcome))

        workflow.logger.info(
            f"Dispatched {report.event}: "
            + ", ".join(f"{r.channel.value}={r.outcome.value}" for r in report.results)
        )
        return report

    async def _send(self, event: NotificationEvent, channel: Channel) -> Outcome:
        if channel is Channel.TEAM_ALERT:
            result = await workflow.execute_activity(
                "post_team_alert",
                notifications.build_team_alert(event),
                start_to_close_timeout=NOTIFY_TIMEOUT,
                retry_policy=SINGLE_ATTEMPT,
            )
            return Outcome(result)

        recipient = event.recipient
        if recipient is None or not recipient.email:
            workflow.logger.info("Customer email skipped: no recipient address")
            return Outcome.SKIPPED

        result = await workflow.execute_activity(
            "send_customer_email",
            notifications.build_customer_email(event.confirmation, recipient),
            start_to_close_timeout=NOTIFY_TIMEOUT,
            retry_policy=SINGLE_ATTEMPT,
        )
        return Outcome(result)


def _reason(error: BaseException) -> str:
    # Activity failures wrap the real error as their cause
    cause = getattr(error, "cause", None)
    return str(cause or error)


class _LifecycleWorkflow:
    def __init__(self):
        self.state: Optional[OrderStatus] = None
        self.order_id: Optional[str] = None
        self.dispatch_report: Optional[DispatchReport] = None
        self.dispatcher = NotificationDispatcher()

    # =========================================================================
    # QUERIES
    # =========================================================================

    @workflow.query
    def get_status(self) -> dict:
        return {
            "order_id": self.order_id,
            "state": self.state.value if self.state else None,
        }

    @workflow.query
    def get_dispatch_report(self) -> Optional[dict]:
        return self.dispatch_report.to_dict() if self.dispatch_report else None

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _set_state(self, new_state: OrderStatus):
        if self.state is not None and not self.state.can_transition_to(new_state):
            raise ValidationError(f"Order cannot move from {self.state.value} to {new_state.value}")
        workflow.logger.info(f"State: {self.state.value if self.state else '-'} -> {new_state.value}")
        self.state = new_state

    async def _notify(self, event: NotificationEvent):
        self.dispatch_report = await self.dispatcher.dispatch(event)


@workflow.defn
class CreateOrderWorkflow(_LifecycleWorkflow):
    """Intake: validate, price, record as pending, alert the team"""

    @workflow.run
    async def run(self, request: OrderRequest) -> dict:
        try:
            order = self._build_order(request)
        except CheckoutError as e:
            workflow.logger.warning(f"Rejected order: {e}")
            raise e.to_application_error()

        self.order_id = order.order_id
        self._set_state(OrderStatus.PENDING)
        workflow.logger.info(f"Created order {order.order_id}, total {order.total} {order.currency}")

        await self._notify(OrderCreated(order))

        return {"order_id": order.order_id, "total": float(order.total)}

    def _build_order(self, request: OrderRequest) -> Order:
        customer = request.customer
        if customer is None or not customer.full_name or not customer.email:
            raise ValidationError("Customer name and email are required")
        if not isinstance(request.items, list) or not request.items:
            raise ValidationError("Order must contain at least one item")

        breakdown = pricing.compute(request.items, request.shipping)
        now = workflow.now()
        order_id = f"ORD-{int(now.timestamp() * 1000)}-{workflow.uuid4().hex[:6].upper()}"

        return Order(
            order_id=order_id,
            customer=customer,
            items=list(request.items),
            subtotal=breakdown.subtotal,
            shipping_cost=breakdown.shipping_cost,
            total=breakdown.total,
            created_at=now,
            currency=request.shipping.currency,
        )


@workflow.defn
class ConfirmOrderWorkflow(_LifecycleWorkflow):
    """Payment confirmation: verify with the provider, then notify.

    The order id is taken as supplied by the caller; there is no order store
    to check it against.
    """

    @workflow.run
    async def run(self, request: ConfirmationRequest) -> dict:
        self.order_id = request.order_id
        payment_id = (request.payment_id or "").strip()
        if not payment_id:
            raise ValidationError("Payment details are required").to_application_error()

        self._set_state(OrderStatus.PENDING)
        lookup = await self._verify_payment(payment_id)

        if classify(lookup) is Verdict.NOT_COMPLETED:
            workflow.logger.warning(f"Payment {payment_id} not completed (provider status {lookup.status!r})")
            raise PaymentNotCompletedError(
                f"Payment {payment_id} is not completed (status: {lookup.status or 'unknown'})"
            ).to_application_error()

        confirmation = PaymentConfirmation(
            order_id=request.order_id,
            payment_transaction_id=payment_id,
            paid_at=workflow.now(),
        )
        self._set_state(confirmation.status)

        await self._notify(OrderPaid(confirmation, self._recipient(request, lookup)))

        return {"order_id": confirmation.order_id, "transaction_id": confirmation.payment_transaction_id}

    async def _verify_payment(self, payment_id: str) -> PaymentLookup:
        workflow.logger.info(f"Verifying payment {payment_id} with payment provider...")
        try:
            return await workflow.execute_activity(
                "lookup_payment",
                payment_id,
                result_type=PaymentLookup,
                start_to_close_timeout=ACTIVITY_TIMEOUT,
                retry_policy=SINGLE_ATTEMPT,
            )
        except ActivityError as e:
            workflow.logger.error(f"Payment lookup for {payment_id} failed: {_reason(e)}")
            raise PaymentLookupError().to_application_error()

    @staticmethod
    def _recipient(request: ConfirmationRequest, lookup: PaymentLookup) -> Optional[Customer]:
        if request.customer and request.customer.email:
            return request.customer
        if lookup.payer_email:
            return Customer(full_name=lookup.payer_name or "", email=lookup.payer_email)
        return None


WORKFLOWS: List[type] = [CreateOrderWorkflow, ConfirmOrderWorkflow]
