import logging
import uuid
from datetime import timedelta
from typing import Protocol

from temporalio.client import Client, WorkflowFailureError
from temporalio.exceptions import ApplicationError

from errors import UnexpectedError, from_failure_type
from models import ConfirmationRequest, OrderRequest
from workflow import ConfirmOrderWorkflow, CreateOrderWorkflow

logger = logging.getLogger(__name__)


class OrderGateway(Protocol):
    async def create_order(self, request: OrderRequest) -> dict: ...

    async def confirm_order(self, request: ConfirmationRequest) -> dict: ...


class TemporalOrderGateway:
    """Runs each request as its own workflow and waits for the result"""

    def __init__(self, client: Client, task_queue: str, execution_timeout: timedelta = timedelta(seconds=60)):
        self.client = client
        self.task_queue = task_queue
        # Also bounds runs whose workflow task keeps failing
        self.execution_timeout = execution_timeout

    async def create_order(self, request: OrderRequest) -> dict:
        return await self._execute(
            CreateOrderWorkflow.run,
            request,
            workflow_id=f"order-create-{uuid.uuid4().hex}",
        )

    async def confirm_order(self, request: ConfirmationRequest) -> dict:
        return await self._execute(
            ConfirmOrderWorkflow.run,
            request,
            workflow_id=f"order-confirm-{request.order_id}-{uuid.uuid4().hex[:8]}",
        )

    async def _execute(self, run, request, workflow_id: str) -> dict:
        try:
            return await self.client.execute_workflow(
                run,
                request,
                id=workflow_id,
                task_queue=self.task_queue,
                execution_timeout=self.execution_timeout,
            )
        except WorkflowFailureError as e:
            cause = e.cause
            if isinstance(cause, ApplicationError):
                error = from_failure_type(cause.type, cause.message)
            else:
                error = UnexpectedError()
            if error.status_code >= 500:
                logger.error("Workflow %s failed: %s", workflow_id, cause or e)
            raise error from e
        except Exception as e:
            logger.exception("Could not run workflow %s", workflow_id)
            raise UnexpectedError() from e
