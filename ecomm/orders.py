"""
Order service.

An order is the permanent record of what a customer has purchased; it is derived from a
shopping cart upon checkout. Orders are immutable once stored.
"""

import base64
import hashlib
import logging

from datetime import datetime
from ecomm.config import Settings
from ecomm.cursor import as_utc
from ecomm.data import datacls
from ecomm.error import BadRequestError, InternalServerError, wrap_exception
from ecomm.model import Money, Person, PostalAddress
from ecomm.pagination import Page, fetch_page
from ecomm.query import Collection
from ecomm.resource import mutation, operation, query
from ecomm.store import Store


_logger = logging.getLogger(__name__)


# salt for hashing personally identifying values written to logs
PII_SALT = bytes(
    (0x8A, 0x19, 0x72, 0xA4, 0x00, 0xE8, 0x43, 0xDA, 0x94, 0xF0, 0x59, 0x59, 0xC7, 0xB9, 0xAF, 0x7A)
)


def pii_hash(value: str) -> str:
    """
    Render a personally identifying value as a truncated, salted hash. The result can be
    written to logs and searched for without exposing the value itself.
    """
    digest = hashlib.sha1(PII_SALT + value.encode()).digest()
    return base64.b64encode(digest).decode()[:12]


@datacls
class OrderItem:
    """
    A single entry in an order.

    Attributes:
    • id: unique identifier of the order item
    • product_code: SKU code of the product or service ordered
    • quantity: number of the product ordered
    • unit_price: price of a single product, as shown to the customer
    """

    id: str
    product_code: str
    quantity: int = 1
    unit_price: Money | None


@datacls
class Order:
    """
    A customer order.

    Attributes:
    • id: unique identifier of the order, assigned by the cart upon checkout
    • submission_time: time at which checkout was completed
    • ordered_by: person who submitted the order
    • delivery_address: delivery address for the order
    • order_items: the items that make up the order
    """

    id: str
    submission_time: datetime
    ordered_by: Person | None
    delivery_address: PostalAddress | None
    order_items: list[OrderItem] | None


ORDERS = Collection(
    name="orders",
    record_type=Order,
    equality={
        "family_name": "ordered_by.family_name",
        "given_name": "ordered_by.given_name",
    },
)


class OrderResource:
    """A single order."""

    def __init__(self, store: Store, order_id: str):
        self.store = store
        self.order_id = order_id

    @operation
    async def get(self) -> Order:
        """Get order."""
        _logger.info("retrieving order %s", self.order_id)
        with wrap_exception(throw=InternalServerError):
            return await self.store.read(ORDERS.name, self.order_id, Order)


class OrdersResource:
    """
    Collection of orders.

    Parameters:
    • store: store where orders are kept
    • settings: service settings  [defaults]
    """

    def __init__(self, store: Store, settings: Settings | None = None):
        self.store = store
        self.settings = settings or Settings()

    @query
    async def get(
        self,
        family_name: str | None = None,
        given_name: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> Page[Order]:
        """
        Get a page of orders, ordered by submission time then order identifier.

        Parameters:
        • family_name: only orders placed by a person with this family name
        • given_name: only orders placed by a person with this given name
        • start_time: only orders submitted at or after this time
        • end_time: only orders submitted before this time
        • limit: requested number of orders in the page
        • cursor: cursor of the previous page, or None for the first page
        """
        _logger.info(
            "get orders (start_time=%s, end_time=%s, family_name=%s, given_name=%s, cursor=%s)",
            start_time,
            end_time,
            pii_hash(family_name) if family_name else None,
            pii_hash(given_name) if given_name else None,
            cursor,
        )
        return await fetch_page(
            self.store,
            ORDERS,
            {
                "family_name": family_name,
                "given_name": given_name,
                "start_time": start_time,
                "end_time": end_time,
            },
            limit=limit,
            cursor=cursor,
            operation="get orders",
            default=self.settings.default_page_size,
            maximum=self.settings.max_page_size,
            timeout=self.settings.query_timeout,
        )

    @mutation
    async def post(self, order: Order) -> None:
        """Store a new order. Raises ConflictError if the order already exists."""
        if not order.id or order.submission_time is None:
            raise BadRequestError("order requires id and submission_time")
        order.submission_time = as_utc(order.submission_time)
        _logger.info("storing order %s", order.id)
        with wrap_exception(throw=InternalServerError):
            await self.store.create(ORDERS.name, order.id, order)
        _logger.info("order stored successfully %s", order.id)

    def __getitem__(self, order_id: str) -> OrderResource:
        return OrderResource(self.store, order_id)
