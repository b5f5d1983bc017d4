import asyncio
import sys
import uuid

from temporalio.client import Client, WorkflowFailureError

from config import Settings
from models import Address, ConfirmationRequest, Customer, LineItem, OrderRequest
from workflow import ConfirmOrderWorkflow, CreateOrderWorkflow


async def connect(settings: Settings) -> Client:
    return await Client.connect(settings.temporal_address, namespace=settings.temporal_namespace)


async def place_order():
    """Place a sample order"""
    settings = Settings.from_env()
    client = await connect(settings)

    request = OrderRequest(
        customer=Customer(
            full_name="Ada Lovelace",
            email="ada@example.com",
            address=Address(street="Analytical St 1", zip="10115", city="Berlin"),
        ),
        items=[
            LineItem(name="Classic Tee", price=24.90, quantity=1, selected_size="M", selected_color="black"),
            LineItem(name="Canvas Tote", price=12.50, quantity=2),
        ],
        shipping=settings.shipping_policy,
    )

    handle = await client.start_workflow(
        CreateOrderWorkflow.run,
        request,
        id=f"order-create-{uuid.uuid4().hex}",
        task_queue=settings.task_queue,
    )
    try:
        result = await handle.result()
    except WorkflowFailureError as e:
        print(f"❌ Order rejected: {e.cause}")
        return None

    print(f"✅ Order placed!")
    print(f"   Order ID: {result['order_id']}")
    print(f"   Workflow ID: {handle.id}")
    print(f"   Total: {result['total']:.2f} {settings.currency}")
    print(f"\n   Next: Run 'confirm {result['order_id']} <payment_id>' once the customer has paid.")
    return handle.id


async def confirm_order(order_id: str, payment_id: str):
    """Verify a payment and confirm the order"""
    settings = Settings.from_env()
    client = await connect(settings)

    handle = await client.start_workflow(
        ConfirmOrderWorkflow.run,
        ConfirmationRequest(order_id=order_id, payment_id=payment_id),
        id=f"order-confirm-{order_id}-{uuid.uuid4().hex[:8]}",
        task_queue=settings.task_queue,
    )
    try:
        result = await handle.result()
    except WorkflowFailureError as e:
        print(f"❌ Confirmation failed: {e.cause}")
        return None

    print(f"✅ Payment confirmed for {result['order_id']}")
    print(f"   Transaction ID: {result['transaction_id']}")
    print(f"   Workflow ID: {handle.id}")
    return handle.id


# =============================================================================
# QUERIES
# =============================================================================

async def get_status(workflow_id: str):
    """Query: Get order status"""
    handle = (await connect(Settings.from_env())).get_workflow_handle(workflow_id)
    status = await handle.query("get_status")
    print(f"📋 Order Status:")
    print(f"   Order ID: {status['order_id']}")
    print(f"   State: {status['state']}")


async def get_dispatch_report(workflow_id: str):
    """Query: Which notification channels went out"""
    handle = (await connect(Settings.from_env())).get_workflow_handle(workflow_id)
    report = await handle.query("get_dispatch_report")
    if not report:
        print("📭 No notifications dispatched yet")
        return

    print(f"📬 Dispatch report for {report['event']}:")
    for result in report["results"]:
        reason = f" ({result['reason']})" if result["reason"] else ""
        print(f"   {result['channel']}: {result['outcome']}{reason}")


# =============================================================================
# CLI
# =============================================================================

def print_usage():
    print("Checkout CLI")
    print("============")
    print("")
    print("Orders:")
    print("  python client.py place-order")
    print("  python client.py confirm <order_id> <payment_id>")
    print("")
    print("Queries:")
    print("  python client.py status <workflow_id>")
    print("  python client.py notifications <workflow_id>")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        print_usage()
        return

    command, args = argv[0], argv[1:]

    if command == "place-order":
        asyncio.run(place_order())

    elif command == "confirm":
        if len(args) < 2:
            print("Error: order_id and payment_id required")
            return
        asyncio.run(confirm_order(args[0], args[1]))

    elif command == "status":
        if not args:
            print("Error: workflow_id required")
            return
        asyncio.run(get_status(args[0]))

    elif command == "notifications":
        if not args:
            print("Error: workflow_id required")
            return
        asyncio.run(get_dispatch_report(args[0]))

    else:
        print(f"Unknown command: {command}")
        print_usage()


if __name__ == "__main__":
    main()
