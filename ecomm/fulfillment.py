"""
Fulfillment service.

A fulfillment task is a unit of work that must be completed to deliver a single item of an
order to the customer, for example manufacturing or shipping a product. Tasks are created
when an order is stored, from templates in a task catalog keyed by product code.
"""

import logging
import uuid

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from ecomm.config import Settings
from ecomm.cursor import as_utc
from ecomm.data import datacls
from ecomm.error import BadRequestError, InternalServerError, wrap_exception
from ecomm.orders import Order
from ecomm.pagination import Page, fetch_page
from ecomm.query import Collection
from ecomm.resource import mutation, operation, query
from ecomm.store import Store
from enum import IntEnum


_logger = logging.getLogger(__name__)


class TaskStatus(IntEnum):
    """Status of a fulfillment task."""

    UNDEFINED_STATUS = 0
    WAITING_TASK = 1  # waiting for another task to complete
    WAITING_CUSTOMER = 2
    WAITING_PAYMENT = 3
    WAITING_CS = 4  # waiting for customer service
    WAITING_SERVICE = 5  # waiting for an automated service
    WAITING_THIRD_PARTY = 6
    PAUSED = 98
    CANCELED = 99
    COMPLETED = 100


@datacls
class Parameter:
    """A named value required to complete a task."""

    name: str
    value: int | str | bool


@datacls
class Task:
    """
    A fulfillment task.

    Attributes:
    • id: unique identifier of the task
    • submission_time: time the task was created
    • completion_time: time the task was completed
    • order_id: identifier of the order the task fulfills
    • order_item_id: identifier of the order item the task fulfills
    • product_code: product code of the order item
    • task_code: code identifying what the task does (e.g. "ship")
    • status: current status of the task
    • reason_code: code describing why the task has its current status
    • parameters: named values required to complete the task
    """

    id: str
    submission_time: datetime
    completion_time: datetime | None
    order_id: str
    order_item_id: str | None
    product_code: str | None
    task_code: str
    status: TaskStatus = TaskStatus.UNDEFINED_STATUS
    reason_code: str | None
    parameters: list[Parameter] | None


TASKS = Collection(
    name="tasks",
    record_type=Task,
    equality={
        "order_id": "order_id",
        "order_item_id": "order_item_id",
        "product_code": "product_code",
    },
)


@dataclass(frozen=True)
class TaskTemplate:
    """Describes a task to be created for each ordered item of a product."""

    task_code: str
    status: TaskStatus
    reason_code: str | None = None


class TaskCatalog:
    """
    Catalog of the tasks required to fulfill each product.

    Parameter:
    • templates: mapping of product codes to the templates of their tasks
    """

    def __init__(self, templates: Mapping[str, Iterable[TaskTemplate]]):
        self.templates = {code: tuple(tasks) for code, tasks in templates.items()}

    def __getitem__(self, product_code: str) -> tuple[TaskTemplate, ...]:
        return self.templates.get(product_code, ())

    def tasks_for_order(self, order: Order) -> list[Task]:
        """Return new tasks to fulfill each item of an order."""
        now = datetime.now(timezone.utc)
        tasks = []
        for item in order.order_items or ():
            templates = self[item.product_code]
            if not templates:
                _logger.warning(
                    "no fulfillment tasks for product %s (order=%s)", item.product_code, order.id
                )
            for template in templates:
                tasks.append(
                    Task(
                        id=str(uuid.uuid4()),
                        submission_time=now,
                        order_id=order.id,
                        order_item_id=item.id,
                        product_code=item.product_code,
                        task_code=template.task_code,
                        status=template.status,
                        reason_code=template.reason_code,
                    )
                )
        return tasks


DEFAULT_CATALOG = TaskCatalog(
    {
        "gold_yoyo": (
            TaskTemplate(task_code="manufacture", status=TaskStatus.WAITING_SERVICE),
            TaskTemplate(
                task_code="ship",
                status=TaskStatus.WAITING_TASK,
                reason_code="wait_for_manufacture",
            ),
        ),
        "plastic_yoyo": (
            TaskTemplate(
                task_code="upsell_to_gold",
                status=TaskStatus.WAITING_CS,
                reason_code="no_stock",
            ),
        ),
    }
)


def tasks_for_order(order: Order, catalog: TaskCatalog = DEFAULT_CATALOG) -> list[Task]:
    """Return new tasks to fulfill each item of an order, using the specified catalog."""
    return catalog.tasks_for_order(order)


class TaskResource:
    """A single fulfillment task."""

    def __init__(self, store: Store, task_id: str):
        self.store = store
        self.task_id = task_id

    @operation
    async def get(self) -> Task:
        """Get task."""
        _logger.info("retrieving task %s", self.task_id)
        with wrap_exception(throw=InternalServerError):
            return await self.store.read(TASKS.name, self.task_id, Task)

    @operation
    async def patch(self, status: TaskStatus, reason_code: str | None = None) -> None:
        """
        Update the status of the task. If the new status is COMPLETED, the completion time of
        the task is set to the current time.

        Parameters:
        • status: new status of the task
        • reason_code: code describing why the status changed
        """
        if status is None:
            raise BadRequestError("status is required")
        _logger.info(
            "updating task status (task=%s, status=%d, reason=%s)",
            self.task_id,
            status,
            reason_code,
        )
        changes = {"status": TaskStatus(status), "reason_code": reason_code}
        if status == TaskStatus.COMPLETED:
            changes["completion_time"] = datetime.now(timezone.utc)
        with wrap_exception(throw=InternalServerError):
            await self.store.update(TASKS.name, self.task_id, changes)


class TasksResource:
    """
    Collection of fulfillment tasks.

    Parameters:
    • store: store where tasks are kept
    • settings: service settings  [defaults]
    """

    def __init__(self, store: Store, settings: Settings | None = None):
        self.store = store
        self.settings = settings or Settings()

    @query
    async def get(
        self,
        order_id: str | None = None,
        order_item_id: str | None = None,
        product_code: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> Page[Task]:
        """
        Get a page of tasks, ordered by submission time then task identifier.

        Parameters:
        • order_id: only tasks that fulfill this order
        • order_item_id: only tasks that fulfill this order item
        • product_code: only tasks for this product
        • start_time: only tasks submitted at or after this time
        • end_time: only tasks submitted before this time
        • limit: requested number of tasks in the page
        • cursor: cursor of the previous page, or None for the first page
        """
        _logger.info(
            "get tasks (start_time=%s, end_time=%s, order_id=%s, order_item_id=%s, product_code=%s, cursor=%s)",
            start_time,
            end_time,
            order_id,
            order_item_id,
            product_code,
            cursor,
        )
        return await fetch_page(
            self.store,
            TASKS,
            {
                "order_id": order_id,
                "order_item_id": order_item_id,
                "product_code": product_code,
                "start_time": start_time,
                "end_time": end_time,
            },
            limit=limit,
            cursor=cursor,
            operation="get tasks",
            default=self.settings.default_page_size,
            maximum=self.settings.max_page_size,
            timeout=self.settings.query_timeout,
        )

    async def _save(self, task: Task) -> None:
        if not task.id or task.submission_time is None:
            raise BadRequestError("task requires id and submission_time")
        task.submission_time = as_utc(task.submission_time)
        if task.completion_time is not None:
            task.completion_time = as_utc(task.completion_time)
        _logger.info("storing task %s (order=%s)", task.id, task.order_id)
        with wrap_exception(throw=InternalServerError):
            await self.store.create(TASKS.name, task.id, task)

    @mutation
    async def post(self, task: Task) -> None:
        """Store a new task. Raises ConflictError if the task already exists."""
        await self._save(task)

    @mutation
    async def save_all(self, tasks: list[Task]) -> None:
        """Store new tasks, in turn. Raises on the first task that cannot be stored."""
        for task in tasks:
            await self._save(task)
        _logger.info("stored %d task(s)", len(tasks))

    def __getitem__(self, task_id: str) -> TaskResource:
        return TaskResource(self.store, task_id)
